"""
Islamic inheritance (Fara'id) distribution engine.

The engine is a pure function of a heir composition and an estate value. It
runs four ordered phases over a single working state:

1. blocking (hajb): closer relatives exclude farther ones
2. fixed shares (fard)
3. residue (ta'sib), first matching residuary only
4. correction: 'awl when the shares exceed the estate, radd when they fall
   short and nobody took the residue

Shares are held as exact fractions while the rules run and converted to
percentages and amounts once all corrections are final.
"""

import logging
from dataclasses import asdict, dataclass, field, fields
from fractions import Fraction
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from heirs import SIBLINGS, SPOUSES, normalize_composition
from inheritance_rules import heir_labels, inheritance_rules, rule_notes

logger = logging.getLogger(__name__)

SPOUSE_ONLY_RADD_POLICIES = ('spouses', 'treasury')


def format_fraction(value: Fraction) -> str:
    if value.denominator == 1:
        return str(value.numerator)
    return f"{value.numerator}/{value.denominator}"


@dataclass(frozen=True)
class EngineConfig:
    """
    Policy knobs of the engine.

    tolerance: percentage points allowed between the share total and 100
        before 'awl or radd is applied.
    spouse_only_radd: what happens to the residue when only spouses inherit.
        'spouses' returns it to them, 'treasury' leaves it to the public
        treasury as a separate entry.
    """
    tolerance: float = 0.01
    spouse_only_radd: str = 'spouses'

    def __post_init__(self):
        if self.spouse_only_radd not in SPOUSE_ONLY_RADD_POLICIES:
            raise ValueError(
                f"Unknown spouse_only_radd policy {self.spouse_only_radd!r}, "
                f"expected one of {SPOUSE_ONLY_RADD_POLICIES}"
            )
        if self.tolerance < 0:
            raise ValueError(f"tolerance must not be negative, got {self.tolerance}")

    @classmethod
    def from_dict(cls, data: Optional[Mapping]) -> 'EngineConfig':
        data = data or {}
        return cls(
            tolerance=float(data.get('tolerance', cls.tolerance)),
            spouse_only_radd=str(data.get('spouse_only_radd', cls.spouse_only_radd)),
        )


@dataclass(frozen=True)
class ShareEntry:
    heir: str
    label: str
    count: int
    share_fraction: str
    percentage: float
    amount: float
    notes: str


@dataclass(frozen=True)
class DistributionResult:
    """
    Ordered share entries of one estate.

    is_proportionally_reduced is set when 'awl scaled the shares down.
    is_residue_returned is set when radd gave the shortfall back to heirs; a
    shortfall left to the treasury entry does not set it.
    """
    entries: Tuple[ShareEntry, ...] = ()
    is_proportionally_reduced: bool = False
    is_residue_returned: bool = False
    estate_value: float = 0.0

    def __iter__(self) -> Iterator[ShareEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def total_percentage(self) -> float:
        return sum(entry.percentage for entry in self.entries)

    def get(self, heir: str) -> Optional[ShareEntry]:
        """Return the entry of a heir category, if it inherits."""
        for entry in self.entries:
            if entry.heir == heir:
                return entry
        return None

    def to_records(self) -> List[dict]:
        return [asdict(entry) for entry in self.entries]

    def to_frame(self) -> pd.DataFrame:
        columns = [f.name for f in fields(ShareEntry)]
        return pd.DataFrame(self.to_records(), columns=columns)


@dataclass
class LedgerLine:
    """Mutable line of the working ledger, frozen into a ShareEntry at the end."""
    heir: str
    count: int
    share: Fraction
    share_fraction: str
    notes: List[str] = field(default_factory=list)


class WorkingState:
    """Counts after blocking plus the share ledger shared by all phases."""

    def __init__(self, counts: Dict[str, int], config: EngineConfig):
        self.counts = dict(counts)
        self.config = config
        self.lines: List[LedgerLine] = []
        self.remaining = Fraction(1)
        self.residuary_found = False
        self.is_awl = False
        self.is_radd = False

    def count(self, heir: str) -> int:
        return self.counts.get(heir, 0)

    def has(self, heir: str) -> bool:
        return self.count(heir) > 0

    @property
    def has_male_descendant(self) -> bool:
        return self.has('son') or self.has('paternal_grandson')

    @property
    def has_descendant(self) -> bool:
        return self.has_male_descendant or self.has('daughter')

    @property
    def has_male_ascendant(self) -> bool:
        return self.has('father') or self.has('paternal_grandfather')

    @property
    def sibling_count(self) -> int:
        return sum(self.count(heir) for heir in SIBLINGS)

    @property
    def residue(self) -> Fraction:
        return max(self.remaining, Fraction(0))

    def line(self, heir: str) -> Optional[LedgerLine]:
        for line in self.lines:
            if line.heir == heir:
                return line
        return None

    def assign(self, heir: str, share: Fraction, share_fraction: str, note: str) -> LedgerLine:
        """Record a fixed share and deduct it from the remaining budget."""
        line = LedgerLine(
            heir=heir,
            count=self.count(heir),
            share=share,
            share_fraction=share_fraction,
            notes=[note],
        )
        self.lines.append(line)
        self.remaining -= share
        logger.debug("Assigned %s to %s (%s)", share_fraction, heir, note)
        return line

    def total(self) -> Fraction:
        return sum((line.share for line in self.lines), Fraction(0))

    def total_percentage(self) -> float:
        return float(self.total() * 100)


class Rule:
    """Base of all rules: a predicate over the working state and an action."""
    name = 'rule'

    def applies(self, state: WorkingState) -> bool:
        return True

    def apply(self, state: WorkingState) -> None:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


# ---------------------------------------------------------------------------
# Phase 1: blocking (hajb)
# ---------------------------------------------------------------------------

class BlockingRule(Rule):
    def __init__(self, name: str, condition: Callable[[WorkingState], bool],
                 blocked: Sequence[str]):
        self.name = name
        self.condition = condition
        self.blocked = tuple(blocked)

    def applies(self, state):
        return self.condition(state)

    def apply(self, state):
        excluded = [heir for heir in self.blocked if state.has(heir)]
        for heir in self.blocked:
            state.counts[heir] = 0
        if excluded:
            logger.debug("Blocking rule %s excluded %s", self.name, excluded)


DEFAULT_BLOCKING_RULES = (
    BlockingRule('father_blocks_paternal_grandparents',
                 lambda s: s.has('father'),
                 ('paternal_grandfather', 'paternal_grandmother')),
    BlockingRule('mother_blocks_maternal_grandmother',
                 lambda s: s.has('mother'),
                 ('maternal_grandmother',)),
    BlockingRule('father_or_son_blocks_siblings',
                 lambda s: s.has('father') or s.has('son'),
                 SIBLINGS),
    BlockingRule('full_brother_blocks_paternal_siblings',
                 lambda s: s.has('full_brother'),
                 ('paternal_brother', 'paternal_sister')),
    BlockingRule('descendant_or_male_ascendant_blocks_maternal_siblings',
                 lambda s: s.has_descendant or s.has_male_ascendant,
                 ('maternal_brother', 'maternal_sister')),
    BlockingRule('son_blocks_grandson',
                 lambda s: s.has('son'),
                 ('paternal_grandson',)),
    BlockingRule('mother_blocks_paternal_grandmother',
                 lambda s: s.has('mother'),
                 ('paternal_grandmother',)),
    BlockingRule('grandson_blocks_siblings',
                 lambda s: s.has('paternal_grandson'),
                 SIBLINGS),
)


# ---------------------------------------------------------------------------
# Phase 2: fixed shares (fard)
# ---------------------------------------------------------------------------

class FixedShareRule(Rule):
    pass


class SpouseRule(FixedShareRule):
    def __init__(self, heir: str):
        self.name = heir
        self.heir = heir

    def applies(self, state):
        return state.has(self.heir)

    def apply(self, state):
        shares = inheritance_rules[self.heir]
        if state.has_descendant:
            share, note = shares['share_with_children'], rule_notes['spouse_with_children']
        else:
            share, note = shares['share_no_children'], rule_notes['spouse_no_children']
        state.assign(self.heir, share, format_fraction(share), note)


class AgnaticAscendantRule(FixedShareRule):
    """Father, or the paternal grandfather in his place: 1/6 beside descendants."""

    def __init__(self, heir: str):
        self.name = heir
        self.heir = heir

    def applies(self, state):
        return state.has(self.heir) and state.has_descendant

    def apply(self, state):
        shares = inheritance_rules[self.heir]
        if state.has_male_descendant:
            share, note = shares['share_with_sons'], rule_notes['ascendant_with_sons']
        else:
            # Female descendants only: the residue is added in phase 3
            share, note = shares['share_with_daughters'], rule_notes['ascendant_with_daughters']
        state.assign(self.heir, share, format_fraction(share), note)


class MotherRule(FixedShareRule):
    name = 'mother'

    def applies(self, state):
        return state.has('mother')

    def apply(self, state):
        shares = inheritance_rules['mother']
        if state.has_descendant or state.sibling_count > 1:
            share, note = shares['share_with_children_or_siblings'], rule_notes['mother_reduced']
        else:
            share, note = shares['share_no_children_or_siblings'], rule_notes['mother_full']
        state.assign('mother', share, format_fraction(share), note)


class GrandmothersRule(FixedShareRule):
    """The non-blocked grandmothers share one sixth equally per head."""
    name = 'grandmothers'
    heirs = ('paternal_grandmother', 'maternal_grandmother')

    def applies(self, state):
        return any(state.has(heir) for heir in self.heirs)

    def apply(self, state):
        pooled = inheritance_rules['grandmothers']['share_pooled']
        heads = sum(state.count(heir) for heir in self.heirs)
        for heir in self.heirs:
            if state.has(heir):
                share = pooled * state.count(heir) / heads
                state.assign(heir, share, format_fraction(share), rule_notes['grandmothers'])


class FemaleHeirsRule(FixedShareRule):
    """Half for a single female heir, two-thirds pooled for several."""

    def __init__(self, heir: str, condition: Callable[[WorkingState], bool]):
        self.name = heir
        self.heir = heir
        self.condition = condition

    def applies(self, state):
        return state.has(self.heir) and self.condition(state)

    def apply(self, state):
        shares = inheritance_rules[self.heir]
        if state.count(self.heir) == 1:
            share, note = shares['share_only_one'], rule_notes['single_female']
        else:
            share, note = shares['share_two_or_more'], rule_notes['several_females']
        state.assign(self.heir, share, format_fraction(share), note)


class PaternalSistersRule(FixedShareRule):
    name = 'paternal_sister'

    def applies(self, state):
        return (
            state.has('paternal_sister')
            and not state.has('paternal_brother')
            and not state.has('daughter')
            and state.count('full_sister') < 2
        )

    def apply(self, state):
        shares = inheritance_rules['paternal_sister']
        if state.has('full_sister'):
            share, note = shares['share_with_one_full_sister'], rule_notes['completing_two_thirds']
        elif state.count('paternal_sister') == 1:
            share, note = shares['share_only_one'], rule_notes['single_female']
        else:
            share, note = shares['share_two_or_more'], rule_notes['several_females']
        state.assign('paternal_sister', share, format_fraction(share), note)


class MaternalSiblingsRule(FixedShareRule):
    """Maternal siblings share equally, male and female alike."""
    name = 'maternal_siblings'
    heirs = ('maternal_brother', 'maternal_sister')

    def applies(self, state):
        return any(state.has(heir) for heir in self.heirs)

    def apply(self, state):
        shares = inheritance_rules['maternal_siblings']
        heads = sum(state.count(heir) for heir in self.heirs)
        if heads == 1:
            pooled, note = shares['share_only_one'], rule_notes['maternal_single']
        else:
            pooled, note = shares['share_two_or_more'], rule_notes['maternal_several']
        for heir in self.heirs:
            if state.has(heir):
                share = pooled * state.count(heir) / heads
                state.assign(heir, share, format_fraction(share), note)


DEFAULT_FIXED_SHARE_RULES = (
    SpouseRule('husband'),
    SpouseRule('wife'),
    AgnaticAscendantRule('father'),
    AgnaticAscendantRule('paternal_grandfather'),
    MotherRule(),
    GrandmothersRule(),
    FemaleHeirsRule('daughter', lambda s: not s.has('son')),
    FemaleHeirsRule('full_sister',
                    lambda s: not s.has('full_brother') and not s.has('daughter')),
    PaternalSistersRule(),
    MaternalSiblingsRule(),
)


# ---------------------------------------------------------------------------
# Phase 3: residue (ta'sib)
# ---------------------------------------------------------------------------

class ResiduaryRule(Rule):
    pass


class MaleFemaleResidueRule(ResiduaryRule):
    """Residue split between males and their sisters, the male taking double."""

    def __init__(self, male: str, female: Optional[str] = None):
        self.name = male
        self.male = male
        self.female = female

    def applies(self, state):
        return state.has(self.male)

    def apply(self, state):
        residue = state.residue
        ratio = inheritance_rules['distribution']['male_female_ratio']
        males = state.count(self.male)
        females = state.count(self.female) if self.female else 0
        parts = ratio * males + females
        if females:
            note = rule_notes['residue_with_females']
        else:
            note = rule_notes['residue_by_self']
        self._add(state, self.male, residue * ratio * males / parts,
                  f"residue ({ratio * males}/{parts})", note)
        if females:
            self._add(state, self.female, residue * females / parts,
                      f"residue ({females}/{parts})", note)
        state.remaining -= residue

    @staticmethod
    def _add(state, heir, share, text, note):
        state.lines.append(LedgerLine(heir, state.count(heir), share, text, [note]))
        logger.debug("Residue %s to %s", format_fraction(share), heir)


class AscendantResidueRule(ResiduaryRule):
    """Father or paternal grandfather takes whatever is left."""

    def __init__(self, heir: str):
        self.name = heir
        self.heir = heir

    def applies(self, state):
        return state.has(self.heir) and state.residue > 0

    def apply(self, state):
        residue = state.residue
        line = state.line(self.heir)
        if line is not None:
            line.share += residue
            line.share_fraction += ' + residue'
            line.notes.append(rule_notes['residue_added'])
        else:
            state.lines.append(LedgerLine(self.heir, state.count(self.heir), residue,
                                          'residue', [rule_notes['residue_by_self']]))
        state.remaining -= residue
        logger.debug("Residue %s to %s", format_fraction(residue), self.heir)


class SistersWithDaughtersRule(ResiduaryRule):
    """Full sisters become residuaries beside daughters."""
    name = 'full_sister_with_daughters'

    def applies(self, state):
        return (
            state.has('full_sister')
            and state.has('daughter')
            and not state.has('full_brother')
            and state.residue > 0
        )

    def apply(self, state):
        residue = state.residue
        state.lines.append(LedgerLine('full_sister', state.count('full_sister'), residue,
                                      'residue', [rule_notes['residue_with_daughters']]))
        state.remaining -= residue


DEFAULT_RESIDUARY_RULES = (
    MaleFemaleResidueRule('son', 'daughter'),
    MaleFemaleResidueRule('paternal_grandson'),
    AscendantResidueRule('father'),
    AscendantResidueRule('paternal_grandfather'),
    MaleFemaleResidueRule('full_brother', 'full_sister'),
    SistersWithDaughtersRule(),
    MaleFemaleResidueRule('paternal_brother', 'paternal_sister'),
)


# ---------------------------------------------------------------------------
# Phase 4: 'awl and radd
# ---------------------------------------------------------------------------

class CorrectionRule(Rule):
    pass


class AwlRule(CorrectionRule):
    name = 'awl'

    def applies(self, state):
        return state.total_percentage() > 100 + state.config.tolerance

    def apply(self, state):
        total = state.total()
        for line in state.lines:
            line.share = line.share / total
            line.notes.append(rule_notes['awl'])
        state.is_awl = True
        logger.debug("'Awl applied, shares totalled %s", format_fraction(total))


class RaddRule(CorrectionRule):
    name = 'radd'

    def applies(self, state):
        return (
            bool(state.lines)
            and not state.residuary_found
            and state.total_percentage() < 100 - state.config.tolerance
        )

    def apply(self, state):
        shortfall = 1 - state.total()
        others = [line for line in state.lines if line.heir not in SPOUSES]
        base = sum((line.share for line in others), Fraction(0))
        if others and base > 0:
            for line in others:
                line.share += shortfall * line.share / base
                line.notes.append(rule_notes['radd'])
        elif state.config.spouse_only_radd == 'treasury':
            # Not a return to the heirs, is_radd stays unset
            state.lines.append(LedgerLine('treasury', 1, shortfall, format_fraction(shortfall),
                                          [rule_notes['treasury']]))
            logger.debug("Shortfall %s left to the treasury", format_fraction(shortfall))
            return
        else:
            spouses_total = state.total()
            for line in state.lines:
                line.share = line.share / spouses_total
                line.notes.append(rule_notes['radd_spouses_only'])
        state.is_radd = True
        logger.debug("Radd applied, shortfall %s", format_fraction(shortfall))


DEFAULT_CORRECTION_RULES = (
    AwlRule(),
    RaddRule(),
)


class InheritanceEngine:
    """
    Ordered rule engine computing a DistributionResult.

    Each phase is a sequence of rule objects. Blocking and fixed-share rules
    all run; for residue and correction only the first applicable rule runs.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 blocking_rules: Sequence[BlockingRule] = DEFAULT_BLOCKING_RULES,
                 fixed_share_rules: Sequence[FixedShareRule] = DEFAULT_FIXED_SHARE_RULES,
                 residuary_rules: Sequence[ResiduaryRule] = DEFAULT_RESIDUARY_RULES,
                 correction_rules: Sequence[CorrectionRule] = DEFAULT_CORRECTION_RULES):
        self.config = config or EngineConfig()
        self.blocking_rules = tuple(blocking_rules)
        self.fixed_share_rules = tuple(fixed_share_rules)
        self.residuary_rules = tuple(residuary_rules)
        self.correction_rules = tuple(correction_rules)

    def new_state(self, heirs: Mapping[str, int]) -> WorkingState:
        return WorkingState(normalize_composition(heirs), self.config)

    def apply_blocking(self, state: WorkingState) -> WorkingState:
        for rule in self.blocking_rules:
            if rule.applies(state):
                rule.apply(state)
        return state

    def assign_fixed_shares(self, state: WorkingState) -> WorkingState:
        for rule in self.fixed_share_rules:
            if rule.applies(state):
                rule.apply(state)
        return state

    def assign_residue(self, state: WorkingState) -> WorkingState:
        for rule in self.residuary_rules:
            if rule.applies(state):
                rule.apply(state)
                state.residuary_found = True
                break
        else:
            if state.residue > 0:
                logger.debug("No residuary heir for %s", format_fraction(state.residue))
        return state

    def reconcile(self, state: WorkingState) -> WorkingState:
        for rule in self.correction_rules:
            if rule.applies(state):
                rule.apply(state)
                break
        return state

    def compute(self, heirs: Mapping[str, int], estate_value: float) -> DistributionResult:
        """
        Distribute an estate between the heirs.

        heirs maps heir categories to non-negative counts; negative counts
        must be rejected by the caller (see heirs.validate_composition).
        Returns an empty result when nobody inherits.
        """
        state = self.new_state(heirs)
        if not any(count > 0 for count in state.counts.values()):
            return DistributionResult(estate_value=estate_value)

        self.apply_blocking(state)
        self.assign_fixed_shares(state)
        self.assign_residue(state)
        self.reconcile(state)
        return self.finalize(state, estate_value)

    def finalize(self, state: WorkingState, estate_value: float) -> DistributionResult:
        entries = []
        for line in state.lines:
            percentage = float(line.share * 100)
            entries.append(ShareEntry(
                heir=line.heir,
                label=heir_labels.get(line.heir, line.heir),
                count=line.count,
                share_fraction=line.share_fraction,
                percentage=percentage,
                amount=percentage / 100 * estate_value,
                notes='; '.join(line.notes),
            ))
        result = DistributionResult(
            entries=tuple(entries),
            is_proportionally_reduced=state.is_awl,
            is_residue_returned=state.is_radd,
            estate_value=estate_value,
        )
        if entries and abs(result.total_percentage - 100) > self.config.tolerance:
            logger.warning("Shares total %.4f%% for %s", result.total_percentage, state.counts)
        return result


# Factory function for easy creation
def create_engine(config: Optional[EngineConfig] = None) -> InheritanceEngine:
    """Create and return an engine with the default rule set"""
    return InheritanceEngine(config)


def compute_distribution(heirs: Mapping[str, int], estate_value: float,
                         config: Optional[EngineConfig] = None) -> DistributionResult:
    return create_engine(config).compute(heirs, estate_value)
