import logging

from inheritance_engine import DistributionResult

logger = logging.getLogger(__name__)


def validate_distribution(result: DistributionResult, tolerance=0.01):
    """
    Check that a distribution covers exactly the whole estate.
    A gap means the composition holds a combination the rules do not model;
    it is reported, never raised.
    Returns: (is_valid, decision_reason)
    """
    if not result.entries:
        return True, 'empty (no eligible heir)'

    total = result.total_percentage
    gap = total - 100
    if abs(gap) <= tolerance:
        if result.is_proportionally_reduced:
            return True, "accepted ('awl applied)"
        if result.is_residue_returned:
            return True, 'accepted (radd applied)'
        return True, 'accepted (shares cover the estate)'

    reason = f'shares total {total:.4f}%, off by {gap:+.4f} points (unmodelled heir combination)'
    logger.warning(reason)
    return False, reason
