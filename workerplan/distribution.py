"""
Distribution module - Splits pool-level quantities and rolling update budgets across zones

Every function here is a pure function of (zone index, quantity, zone count), so
the same pool always yields the same per-zone numbers no matter how often it is
planned.
"""
import re
from typing import Union

from .errors import ConfigurationError

Budget = Union[int, str]

_PERCENT_PATTERN = re.compile(r'^\s*(\d+)\s*%\s*$')
_COUNT_PATTERN = re.compile(r'^\s*(\d+)\s*$')


def distribute_over_zones(zone_index: int, total: int, zone_count: int) -> int:
    """
    Return the share of `total` that the zone at `zone_index` receives.

    The first `total % zone_count` zones get one extra unit, so the shares of
    all zones always add up to `total`.
    """
    if zone_count < 1:
        raise ValueError(f"zone count must be at least 1, got {zone_count}")
    if not 0 <= zone_index < zone_count:
        raise ValueError(f"zone index {zone_index} out of range for {zone_count} zones")
    if total < 0:
        raise ValueError(f"cannot distribute a negative total ({total})")

    base, remainder = divmod(total, zone_count)
    if zone_index < remainder:
        return base + 1
    return base


def parse_budget(budget: Budget):
    """
    Parse a rolling update budget.

    Returns a (value, is_percent) tuple. Accepts non-negative integers,
    numeric strings and percentage strings such as "25%".
    """
    if isinstance(budget, bool):
        raise ConfigurationError(f"Invalid budget: {budget!r}")

    if isinstance(budget, int):
        if budget < 0:
            raise ConfigurationError(f"Budget must not be negative, got {budget}")
        return budget, False

    if isinstance(budget, str):
        match = _PERCENT_PATTERN.match(budget)
        if match:
            percent = int(match.group(1))
            if percent > 100:
                raise ConfigurationError(f"Percentage budget must be between 0% and 100%, got {budget}")
            return percent, True

        match = _COUNT_PATTERN.match(budget)
        if match:
            return int(match.group(1)), False

    raise ConfigurationError(f"Invalid budget: {budget!r}")


def resolve_budget(budget: Budget, reference_total: int, round_up: bool = False) -> int:
    """Resolve a budget to an absolute count against `reference_total`"""
    value, is_percent = parse_budget(budget)
    if not is_percent:
        return value

    scaled = value * reference_total
    if round_up:
        return -(-scaled // 100)
    return scaled // 100


def distribute_budget(zone_index: int, budget: Budget, zone_count: int,
                      reference_total: int, round_up: bool = False) -> int:
    """
    Distribute a count or percentage budget across zones.

    Percentages are resolved against `reference_total` first (rounding up or
    down as requested) and the absolute result is then split like any other
    quantity.
    """
    resolved = resolve_budget(budget, reference_total, round_up=round_up)
    return distribute_over_zones(zone_index, resolved, zone_count)


def distribute_max_surge(zone_index: int, max_surge: Budget, zone_count: int, maximum: int) -> int:
    """Surge scales with the pool maximum and rounds up"""
    return distribute_budget(zone_index, max_surge, zone_count, maximum, round_up=True)


def distribute_max_unavailable(zone_index: int, max_unavailable: Budget, zone_count: int, minimum: int) -> int:
    """Unavailability scales with the pool minimum and rounds down"""
    return distribute_budget(zone_index, max_unavailable, zone_count, minimum, round_up=False)
