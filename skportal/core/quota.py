"""Female representation quota for officer rosters.

A roster meets the quota when at least ``threshold`` percent of its
officers are female. An empty roster never meets it.

The shortfall is the exact minimum number of female officers to add:
adding officers grows the denominator too, so ``ceil(total * 0.3) - female``
under-counts (10 officers with 2 women need 2 more, not 1).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List

DEFAULT_THRESHOLD_PERCENT = 30


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class QuotaSummary:
    female_count: int
    total: int
    percentage: float
    threshold: int
    met: bool
    needed: int


def _gender_of(officer: Any) -> Gender:
    value = officer if isinstance(officer, (str, Gender)) else getattr(officer, "gender")
    return Gender(value)


def _counts(officers: Iterable[Any]) -> tuple[int, int]:
    genders: List[Gender] = [_gender_of(o) for o in officers]
    return sum(1 for g in genders if g is Gender.FEMALE), len(genders)


def _is_met(female: int, total: int, threshold: int) -> bool:
    if total == 0:
        return False
    # female / total >= threshold / 100, in integers
    return female * 100 >= threshold * total


def _needed(female: int, total: int, threshold: int) -> int:
    if total == 0:
        return 1
    if _is_met(female, total, threshold):
        return 0
    # smallest n with 100 * (female + n) >= threshold * (total + n)
    deficit = threshold * total - 100 * female
    return -(-deficit // (100 - threshold))


def is_quota_met(officers: Iterable[Any], threshold: int = DEFAULT_THRESHOLD_PERCENT) -> bool:
    """True when the share of female officers reaches the threshold.

    ``officers`` may hold objects with a ``gender`` attribute or bare
    gender values.
    """
    female, total = _counts(officers)
    return _is_met(female, total, threshold)


def officers_needed_for_quota(
    officers: Iterable[Any], threshold: int = DEFAULT_THRESHOLD_PERCENT
) -> int:
    """Minimum number of female officers to add so the quota is met."""
    female, total = _counts(officers)
    return _needed(female, total, threshold)


def quota_summary(officers: Iterable[Any], threshold: int = DEFAULT_THRESHOLD_PERCENT) -> QuotaSummary:
    female, total = _counts(officers)
    percentage = (female / total) * 100 if total else 0.0
    return QuotaSummary(
        female_count=female,
        total=total,
        percentage=percentage,
        threshold=threshold,
        met=_is_met(female, total, threshold),
        needed=_needed(female, total, threshold),
    )
