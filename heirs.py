import logging
import numbers
from typing import Dict, Mapping

logger = logging.getLogger(__name__)

HEIR_CATEGORIES = (
    'husband',
    'wife',
    'son',
    'daughter',
    'father',
    'mother',
    'paternal_grandfather',
    'paternal_grandmother',
    'maternal_grandmother',
    'paternal_grandson',
    'full_brother',
    'full_sister',
    'paternal_brother',
    'paternal_sister',
    'maternal_brother',
    'maternal_sister',
)

SPOUSES = ('husband', 'wife')

SIBLINGS = (
    'full_brother',
    'full_sister',
    'paternal_brother',
    'paternal_sister',
    'maternal_brother',
    'maternal_sister',
)

# Alternative spellings found in case records and form inputs
HEIR_ALIASES = {
    'paternalGrandfather': 'paternal_grandfather',
    'paternalGrandmother': 'paternal_grandmother',
    'maternalGrandmother': 'maternal_grandmother',
    'paternalGrandson': 'paternal_grandson',
    'fullBrother': 'full_brother',
    'fullSister': 'full_sister',
    'brotherFull': 'full_brother',
    'sisterFull': 'full_sister',
    'paternalBrother': 'paternal_brother',
    'paternalSister': 'paternal_sister',
    'maternalBrother': 'maternal_brother',
    'maternalSister': 'maternal_sister',
}


class InvalidHeirCompositionError(ValueError):
    """Raised when a heir composition cannot be handed to the engine."""


def canonical_category(key: str):
    """Return the canonical category for a key, or None when unknown."""
    if key in HEIR_CATEGORIES:
        return key
    return HEIR_ALIASES.get(key)


def normalize_composition(heirs: Mapping[str, int]) -> Dict[str, int]:
    """
    Map a heir composition onto the full category set.

    Aliases are resolved, unknown keys dropped and missing categories filled
    with zero. Counts are not checked here; see validate_composition.
    """
    composition = {category: 0 for category in HEIR_CATEGORIES}
    for key, count in (heirs or {}).items():
        category = canonical_category(key)
        if category is None:
            logger.debug("Ignoring unknown heir category %r", key)
            continue
        composition[category] += int(count or 0)
    return composition


def validate_composition(heirs: Mapping[str, object]) -> Dict[str, int]:
    """
    Validate a caller-supplied heir composition at the boundary.

    Returns the normalised composition. Raises InvalidHeirCompositionError for
    negative, fractional or non-numeric counts. Unknown categories are dropped
    with a warning.
    """
    cleaned = {}
    for key, count in (heirs or {}).items():
        category = canonical_category(key)
        if category is None:
            logger.warning("Dropping unknown heir category %r", key)
            continue
        if count is None:
            continue
        if isinstance(count, bool) or not isinstance(count, numbers.Real):
            raise InvalidHeirCompositionError(
                f"Count for {key!r} must be a number, got {count!r}"
            )
        if count != count or int(count) != count:
            raise InvalidHeirCompositionError(
                f"Count for {key!r} must be a whole number, got {count!r}"
            )
        if count < 0:
            raise InvalidHeirCompositionError(
                f"Count for {key!r} must not be negative, got {count!r}"
            )
        cleaned[category] = cleaned.get(category, 0) + int(count)
    return normalize_composition(cleaned)
