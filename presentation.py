"""
Presentation helpers over a pooled DistributionResult.

Nothing here changes a share: pooled entries are split per head and the rule
notes are gathered into a readable summary.
"""

import re
from dataclasses import dataclass
from typing import List, Mapping, Optional

from inheritance_engine import DistributionResult

NAME_SEPARATORS = re.compile(r',|،| و ')


@dataclass(frozen=True)
class IndividualShare:
    heir: str
    label: str
    name: str
    share_fraction: str
    percentage: float
    amount: float


def split_names(names: Optional[str]) -> List[str]:
    """Split "Ahmed, Ali و Omar" style name lists."""
    if not names:
        return []
    return [name.strip() for name in NAME_SEPARATORS.split(names) if name.strip()]


def distribute_names(count: int, label: str, names: Optional[str] = None) -> List[str]:
    """One name per heir, falling back to a numbered label."""
    if count <= 0:
        return []
    given = split_names(names)
    if count == 1:
        return [given[0] if given else label]
    return [given[i] if i < len(given) else f"{label} {i + 1}" for i in range(count)]


def expand_individuals(result: DistributionResult,
                       names: Optional[Mapping[str, str]] = None) -> List[IndividualShare]:
    """
    Expand pooled entries into one line per heir.

    names maps a heir category to a comma separated list of names. Amount and
    percentage are divided equally by the entry count.
    """
    names = names or {}
    individuals = []
    for entry in result:
        heads = max(entry.count, 1)
        for name in distribute_names(heads, entry.label, names.get(entry.heir)):
            individuals.append(IndividualShare(
                heir=entry.heir,
                label=entry.label,
                name=name,
                share_fraction=entry.share_fraction,
                percentage=entry.percentage / heads,
                amount=entry.amount / heads,
            ))
    return individuals


def summarize_notes(result: DistributionResult, notes: str = '') -> str:
    lines = [notes] if notes else []
    for entry in result:
        if entry.notes:
            lines.append(f"- {entry.label}: {entry.notes}")
    if result.is_proportionally_reduced:
        lines.append("Warning: the shares exceeded the estate ('awl), every heir was reduced in proportion to their share.")
    if result.is_residue_returned:
        lines.append("Note: the shares fell short of the estate (radd), the remainder was returned to the fixed-share heirs.")
    return '\n'.join(lines)
