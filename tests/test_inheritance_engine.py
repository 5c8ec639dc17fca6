"""Tests for the Fara'id distribution engine."""

from fractions import Fraction

import pytest

from inheritance_engine import (
    DistributionResult,
    EngineConfig,
    InheritanceEngine,
    compute_distribution,
)


def percentages(result):
    return {entry.heir: entry.percentage for entry in result}


class TestReferenceCases:
    """Worked examples with known distributions."""

    def test_no_heirs_gives_empty_result(self, engine):
        result = engine.compute({'husband': 0, 'son': 0}, 1000)
        assert len(result) == 0
        assert result.is_proportionally_reduced is False
        assert result.is_residue_returned is False

    def test_empty_mapping_and_unknown_keys(self, engine):
        assert len(engine.compute({}, 500)) == 0
        assert len(engine.compute({'uncle': 3}, 500)) == 0

    def test_husband_alone_takes_everything_by_radd(self, engine):
        result = engine.compute({'husband': 1}, 1000)
        husband = result.get('husband')
        assert husband.share_fraction == '1/2'
        assert husband.percentage == pytest.approx(100)
        assert husband.amount == pytest.approx(1000)
        assert result.is_residue_returned is True
        assert result.is_proportionally_reduced is False
        assert 'radd' in husband.notes

    def test_husband_and_daughter(self, engine):
        result = engine.compute({'husband': 1, 'daughter': 1}, 1200)
        assert result.get('husband').percentage == pytest.approx(25)
        assert result.get('husband').amount == pytest.approx(300)
        assert result.get('daughter').percentage == pytest.approx(75)
        assert result.get('daughter').amount == pytest.approx(900)
        assert result.is_residue_returned is True

    def test_two_sons_and_daughter(self, engine):
        result = engine.compute({'son': 2, 'daughter': 1}, 4000)
        sons = result.get('son')
        daughters = result.get('daughter')
        assert sons.count == 2
        assert sons.percentage == pytest.approx(80)
        assert sons.amount == pytest.approx(3200)
        assert daughters.percentage == pytest.approx(20)
        assert daughters.amount == pytest.approx(800)
        assert result.is_proportionally_reduced is False
        assert result.is_residue_returned is False

    def test_husband_mother_two_full_sisters_triggers_awl(self, engine):
        result = engine.compute({'husband': 1, 'mother': 1, 'full_sister': 2}, 2400)
        assert result.get('mother').share_fraction == '1/6'
        assert result.is_proportionally_reduced is True
        assert result.is_residue_returned is False
        assert result.get('husband').percentage == pytest.approx(37.5)
        assert result.get('mother').percentage == pytest.approx(12.5)
        assert result.get('full_sister').percentage == pytest.approx(50)
        assert result.get('full_sister').amount == pytest.approx(1200)
        assert all("'awl" in entry.notes for entry in result)


class TestTotalsInvariant:
    """Every composition with an heir distributes exactly the whole estate."""

    @pytest.mark.parametrize("heirs", [
        {'husband': 1},
        {'wife': 4},
        {'wife': 1, 'son': 1},
        {'husband': 1, 'father': 1, 'mother': 1, 'daughter': 2},
        {'wife': 2, 'mother': 1, 'full_brother': 1, 'full_sister': 3},
        {'mother': 1, 'maternal_brother': 1},
        {'maternal_sister': 3},
        {'paternal_grandfather': 1, 'daughter': 1, 'wife': 1},
        {'paternal_grandmother': 1, 'maternal_grandmother': 1, 'daughter': 1},
        {'paternal_brother': 2, 'paternal_sister': 1, 'husband': 1},
        {'husband': 1, 'wife': 2},
        {'father': 1, 'mother': 1, 'son': 3, 'daughter': 2, 'wife': 1},
        {'paternal_sister': 2},
        {'full_sister': 1, 'paternal_sister': 1, 'mother': 1},
    ])
    def test_percentages_sum_to_100(self, engine, heirs):
        result = engine.compute(heirs, 1000)
        assert len(result) > 0
        assert result.total_percentage == pytest.approx(100, abs=0.01)
        assert sum(entry.amount for entry in result) == pytest.approx(1000, abs=0.1)

    def test_amounts_follow_negative_estate(self, engine):
        result = engine.compute({'son': 1}, -300)
        assert result.get('son').percentage == pytest.approx(100)
        assert result.get('son').amount == pytest.approx(-300)


class TestBlocking:
    """Closer relatives exclude farther ones."""

    def test_blocking_rules_zero_counts(self, engine):
        state = engine.new_state({
            'father': 1, 'mother': 1, 'son': 1,
            'paternal_grandfather': 1, 'paternal_grandmother': 1,
            'maternal_grandmother': 1, 'paternal_grandson': 2,
            'full_brother': 1, 'maternal_sister': 1,
        })
        engine.apply_blocking(state)
        for heir in ('paternal_grandfather', 'paternal_grandmother', 'maternal_grandmother',
                     'paternal_grandson', 'full_brother', 'maternal_sister'):
            assert state.count(heir) == 0
        assert state.count('son') == 1

    def test_father_excludes_grandparents(self, engine):
        result = engine.compute({'father': 1, 'paternal_grandfather': 1,
                                 'paternal_grandmother': 1}, 600)
        assert percentages(result) == {'father': pytest.approx(100)}

    def test_son_excludes_siblings(self, engine):
        result = engine.compute({'son': 1, 'full_brother': 2, 'maternal_sister': 1}, 100)
        assert percentages(result) == {'son': pytest.approx(100)}

    def test_full_brother_excludes_paternal_siblings(self, engine):
        result = engine.compute({'full_brother': 1, 'paternal_brother': 1,
                                 'paternal_sister': 1}, 100)
        assert percentages(result) == {'full_brother': pytest.approx(100)}

    def test_daughter_excludes_maternal_siblings(self, engine):
        result = engine.compute({'daughter': 1, 'maternal_brother': 1}, 100)
        assert result.get('maternal_brother') is None
        assert result.get('daughter').percentage == pytest.approx(100)

    def test_grandfather_excludes_maternal_siblings(self, engine):
        result = engine.compute({'paternal_grandfather': 1, 'maternal_brother': 2}, 100)
        assert percentages(result) == {'paternal_grandfather': pytest.approx(100)}

    def test_blocked_siblings_do_not_reduce_mother(self, engine):
        result = engine.compute({'father': 1, 'mother': 1, 'full_brother': 2}, 300)
        assert result.get('mother').share_fraction == '1/3'
        assert result.get('father').percentage == pytest.approx(200 / 3)
        assert result.get('full_brother') is None


class TestFixedShares:

    def test_wives_pooled_with_descendant(self, engine):
        result = engine.compute({'wife': 4, 'son': 1}, 800)
        wives = result.get('wife')
        assert wives.count == 4
        assert wives.share_fraction == '1/8'
        assert wives.percentage == pytest.approx(12.5)
        assert result.get('son').percentage == pytest.approx(87.5)

    def test_father_with_son_gets_sixth_only(self, engine):
        result = engine.compute({'father': 1, 'son': 1}, 600)
        assert result.get('father').share_fraction == '1/6'
        assert result.get('father').amount == pytest.approx(100)
        assert result.get('son').amount == pytest.approx(500)

    def test_father_with_daughter_gets_sixth_plus_residue(self, engine):
        result = engine.compute({'father': 1, 'daughter': 1}, 600)
        father = result.get('father')
        assert father.share_fraction == '1/6 + residue'
        assert father.percentage == pytest.approx(50)
        assert result.is_residue_returned is False

    def test_father_alone_takes_residue(self, engine):
        result = engine.compute({'father': 1}, 90)
        assert result.get('father').share_fraction == 'residue'
        assert result.get('father').amount == pytest.approx(90)

    def test_parents_without_descendants(self, engine):
        result = engine.compute({'father': 1, 'mother': 1}, 300)
        assert result.get('mother').share_fraction == '1/3'
        assert result.get('mother').amount == pytest.approx(100)
        assert result.get('father').amount == pytest.approx(200)

    def test_mother_with_one_sibling_keeps_third(self, engine):
        result = engine.compute({'mother': 1, 'full_brother': 1}, 300)
        assert result.get('mother').share_fraction == '1/3'
        assert result.get('full_brother').amount == pytest.approx(200)

    def test_several_daughters_share_two_thirds_then_radd(self, engine):
        result = engine.compute({'daughter': 3}, 900)
        daughters = result.get('daughter')
        assert daughters.share_fraction == '2/3'
        assert daughters.percentage == pytest.approx(100)
        assert result.is_residue_returned is True

    def test_wife_with_full_siblings_residue_two_to_one(self, engine):
        result = engine.compute({'wife': 1, 'full_brother': 1, 'full_sister': 1}, 1200)
        assert result.get('wife').amount == pytest.approx(300)
        assert result.get('full_brother').amount == pytest.approx(600)
        assert result.get('full_sister').amount == pytest.approx(300)
        assert result.get('full_sister').share_fraction == 'residue (1/3)'


class TestExtendedCategories:

    def test_maternal_siblings_share_equally(self, engine):
        result = engine.compute({'husband': 1, 'maternal_brother': 1, 'maternal_sister': 1}, 400)
        assert result.get('husband').percentage == pytest.approx(50)
        assert result.get('maternal_brother').percentage == pytest.approx(25)
        assert result.get('maternal_sister').percentage == pytest.approx(25)
        assert result.is_residue_returned is True

    def test_full_brother_can_be_left_with_nothing(self, engine):
        result = engine.compute({'husband': 1, 'mother': 1, 'maternal_brother': 2,
                                 'full_brother': 1}, 600)
        assert result.get('full_brother').percentage == pytest.approx(0)
        assert result.get('maternal_brother').percentage == pytest.approx(100 / 3)
        assert result.is_proportionally_reduced is False
        assert result.is_residue_returned is False

    def test_grandfather_stands_in_for_father(self, engine):
        result = engine.compute({'paternal_grandfather': 1, 'son': 1}, 600)
        assert result.get('paternal_grandfather').amount == pytest.approx(100)

    def test_grandson_counts_as_descendant(self, engine):
        result = engine.compute({'wife': 1, 'paternal_grandson': 1}, 800)
        assert result.get('wife').share_fraction == '1/8'
        assert result.get('paternal_grandson').amount == pytest.approx(700)

    def test_son_excludes_grandson(self, engine):
        result = engine.compute({'son': 1, 'paternal_grandson': 3}, 100)
        assert result.get('paternal_grandson') is None

    def test_grandmothers_share_sixth(self, engine):
        result = engine.compute({'paternal_grandmother': 1, 'maternal_grandmother': 1,
                                 'son': 1}, 1200)
        assert result.get('paternal_grandmother').amount == pytest.approx(100)
        assert result.get('maternal_grandmother').amount == pytest.approx(100)
        assert result.get('son').amount == pytest.approx(1000)

    def test_paternal_sister_completes_two_thirds(self, engine):
        result = engine.compute({'full_sister': 1, 'paternal_sister': 1}, 400)
        assert result.get('paternal_sister').share_fraction == '1/6'
        assert result.get('full_sister').percentage == pytest.approx(75)
        assert result.get('paternal_sister').percentage == pytest.approx(25)

    def test_full_sister_is_residuary_beside_daughter(self, engine):
        result = engine.compute({'daughter': 1, 'full_sister': 2}, 1000)
        assert result.get('full_sister').share_fraction == 'residue'
        assert result.get('full_sister').amount == pytest.approx(500)
        assert result.is_residue_returned is False


class TestSpouseOnlyPolicy:

    def test_spouses_share_in_proportion(self, engine):
        result = engine.compute({'husband': 1, 'wife': 1}, 300)
        assert result.get('husband').percentage == pytest.approx(200 / 3)
        assert result.get('wife').percentage == pytest.approx(100 / 3)

    def test_treasury_policy_keeps_spouse_share(self, treasury_engine):
        result = treasury_engine.compute({'husband': 1}, 1000)
        assert result.get('husband').amount == pytest.approx(500)
        treasury = result.get('treasury')
        assert treasury.label == 'بيت المال'
        assert treasury.amount == pytest.approx(500)
        assert result.is_residue_returned is False
        assert "treasury" in treasury.notes

    def test_treasury_policy_ignored_when_other_heirs_exist(self, treasury_engine):
        result = treasury_engine.compute({'husband': 1, 'daughter': 1}, 1200)
        assert result.get('treasury') is None
        assert result.get('daughter').amount == pytest.approx(900)


class TestPhases:

    def test_fixed_share_phase_deducts_budget(self, engine):
        state = engine.new_state({'husband': 1, 'daughter': 1})
        engine.apply_blocking(state)
        engine.assign_fixed_shares(state)
        assert state.remaining == Fraction(1, 4)
        assert [line.heir for line in state.lines] == ['husband', 'daughter']

    def test_residue_phase_stops_at_first_residuary(self, engine):
        state = engine.new_state({'father': 1, 'full_brother': 1})
        engine.apply_blocking(state)
        engine.assign_fixed_shares(state)
        engine.assign_residue(state)
        assert state.residuary_found is True
        assert [line.heir for line in state.lines] == ['father']

    def test_without_corrections_shares_stay_raw(self):
        engine = InheritanceEngine(correction_rules=())
        result = engine.compute({'husband': 1}, 1000)
        assert result.get('husband').percentage == pytest.approx(50)
        assert result.is_residue_returned is False

    def test_compute_distribution_helper(self):
        result = compute_distribution({'son': 1}, 10, EngineConfig())
        assert isinstance(result, DistributionResult)
        assert result.get('son').amount == pytest.approx(10)


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig.from_dict(None)
        assert config.tolerance == 0.01
        assert config.spouse_only_radd == 'spouses'

    def test_from_dict(self):
        config = EngineConfig.from_dict({'tolerance': '0.5', 'spouse_only_radd': 'treasury'})
        assert config.tolerance == 0.5
        assert config.spouse_only_radd == 'treasury'

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(spouse_only_radd='escheat')

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(tolerance=-0.5)

    def test_wide_tolerance_leaves_small_shortfall_alone(self):
        engine = InheritanceEngine(EngineConfig(tolerance=30))
        result = engine.compute({'husband': 1, 'daughter': 1}, 1200)
        assert result.is_residue_returned is False
        assert result.get('daughter').percentage == pytest.approx(50)
        assert result.total_percentage == pytest.approx(75)

    def test_wide_tolerance_still_corrects_larger_gaps(self):
        engine = InheritanceEngine(EngineConfig(tolerance=30))
        result = engine.compute({'husband': 1}, 1000)
        assert result.is_residue_returned is True
        assert result.get('husband').percentage == pytest.approx(100)


class TestResultExport:

    def test_result_is_immutable(self, engine):
        result = engine.compute({'son': 1}, 10)
        with pytest.raises(AttributeError):
            result.entries[0].percentage = 50

    def test_to_frame(self, engine):
        frame = engine.compute({'husband': 1, 'son': 1}, 400).to_frame()
        assert list(frame['heir']) == ['husband', 'son']
        assert frame['amount'].sum() == pytest.approx(400)

    def test_empty_frame_keeps_columns(self, engine):
        frame = engine.compute({}, 10).to_frame()
        assert frame.empty
        assert 'percentage' in frame.columns
