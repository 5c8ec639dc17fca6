# Islamic Inheritance Rules (Mirath)
# This dictionary encodes the fixed shares (furud) and the conditions under
# which each heir receives them. The engine reads fractions and notes from here;
# the conditions themselves live in the rule objects of inheritance_engine.py.

from fractions import Fraction

HALF = Fraction(1, 2)
QUARTER = Fraction(1, 4)
EIGHTH = Fraction(1, 8)
TWO_THIRDS = Fraction(2, 3)
THIRD = Fraction(1, 3)
SIXTH = Fraction(1, 6)

inheritance_rules = {
    # Spouse rules
    'husband': {
        'share_no_children': HALF,       # Husband gets 1/2 if deceased has no descendant
        'share_with_children': QUARTER,  # Husband gets 1/4 if deceased has a descendant
    },
    'wife': {
        'share_no_children': QUARTER,    # Wives (pooled) get 1/4 if no descendant
        'share_with_children': EIGHTH,   # Wives (pooled) get 1/8 with a descendant
    },
    # Parents
    'mother': {
        'share_no_children_or_siblings': THIRD,   # 1/3 if no descendant and at most one sibling
        'share_with_children_or_siblings': SIXTH, # 1/6 with a descendant or several siblings
    },
    # Without a descendant the father takes the whole residue instead
    'father': {
        'share_with_sons': SIXTH,        # 1/6 only, the male descendant takes the residue
        'share_with_daughters': SIXTH,   # 1/6 plus the residue (ta'sib)
    },
    # Stands in the father's place when the father is absent
    'paternal_grandfather': {
        'share_with_sons': SIXTH,
        'share_with_daughters': SIXTH,
    },
    'grandmothers': {
        'share_pooled': SIXTH,           # 1/6 shared by all non-blocked grandmothers
    },
    # Children. Beside a son, daughters take residue with him instead
    'daughter': {
        'share_only_one': HALF,          # One daughter, no sons: 1/2
        'share_two_or_more': TWO_THIRDS, # Two or more daughters, no sons: 2/3
    },
    # Siblings. Beside a brother of the same line, sisters take residue with him;
    # full sisters beside daughters take the residue alone
    'full_sister': {
        'share_only_one': HALF,          # No brother, no descendant, no father
        'share_two_or_more': TWO_THIRDS,
    },
    'paternal_sister': {
        'share_only_one': HALF,
        'share_two_or_more': TWO_THIRDS,
        'share_with_one_full_sister': SIXTH,  # Completes the two-thirds
    },
    'maternal_siblings': {
        'share_only_one': SIXTH,
        'share_two_or_more': THIRD,      # Divided per head, males and females equally
    },
    # Distribution rule
    'distribution': {
        'male_female_ratio': 2,          # Males get double the share of females among residuaries
    },
}

# Display labels used in the distribution table
heir_labels = {
    'husband': 'الزوج',
    'wife': 'الزوجة',
    'son': 'الابن',
    'daughter': 'البنت',
    'father': 'الأب',
    'mother': 'الأم',
    'paternal_grandfather': 'الجد لأب',
    'paternal_grandmother': 'الجدة لأب',
    'maternal_grandmother': 'الجدة لأم',
    'paternal_grandson': 'ابن الابن',
    'full_brother': 'الأخ الشقيق',
    'full_sister': 'الأخت الشقيقة',
    'paternal_brother': 'الأخ لأب',
    'paternal_sister': 'الأخت لأب',
    'maternal_brother': 'الأخ لأم',
    'maternal_sister': 'الأخت لأم',
    'treasury': 'بيت المال',
}

# Notes attached to each entry so the figure can be traced to its rule
rule_notes = {
    'spouse_with_children': 'fixed share, reduced by the presence of a descendant',
    'spouse_no_children': 'fixed share, no descendant',
    'ascendant_with_sons': 'fixed share 1/6 beside a male descendant',
    'ascendant_with_daughters': 'fixed share 1/6 plus residue beside female descendants only',
    'mother_reduced': 'fixed share 1/6 due to a descendant or several siblings',
    'mother_full': 'fixed share 1/3, no descendant and fewer than two siblings',
    'grandmothers': 'fixed share 1/6 shared by the grandmothers',
    'single_female': 'fixed share 1/2, single and without a male counterpart',
    'several_females': 'fixed share 2/3 pooled, several and without a male counterpart',
    'completing_two_thirds': 'fixed share 1/6 completing two-thirds with the full sister',
    'maternal_single': 'fixed share 1/6, single maternal sibling',
    'maternal_several': 'fixed share 1/3 shared equally by the maternal siblings',
    'residue_with_females': 'residuary, male takes double the female',
    'residue_by_self': 'residuary in his own right',
    'residue_added': 'plus the residue',
    'residue_with_daughters': 'residuary beside the daughters',
    'awl': "reduced proportionally ('awl)",
    'radd': 'residue returned (radd)',
    'radd_spouses_only': 'residue returned, no other heir (radd)',
    'treasury': 'residue left to the public treasury, no other heir',
}
