from __future__ import annotations

from dataclasses import dataclass
from datetime import date

# Statuses whose contracts still hold their units.
OCCUPYING_STATUSES = frozenset({"Active", "Expiring", "Pending"})
CLOSED_STATUSES = frozenset({"Terminated", "Expired"})


def effective_lease_end(
    lease_end: date, termination_date: date | None = None
) -> date:
    """The last occupied day: the earlier of lease end and early termination."""
    if termination_date is not None and termination_date < lease_end:
        return termination_date
    return lease_end


@dataclass(frozen=True, slots=True)
class LeaseActivityPolicy:
    """Defines when a lease counts as occupying space within a window.

    Semantics (intentionally centralized):
    - A lease overlaps [window_start, window_end] if lease_start <= window_end
      AND effective_end >= window_start
    - A lease is "in place" at the window end if lease_start <= window_end
      AND effective_end >= window_end

    Note: all bounds are inclusive.
    """

    window_start: date
    window_end: date

    def overlaps(self, *, lease_start: date, lease_end: date) -> bool:
        return lease_start <= self.window_end and lease_end >= self.window_start

    def in_place_at_end(self, *, lease_start: date, lease_end: date) -> bool:
        return lease_start <= self.window_end and lease_end >= self.window_end

    def starts_within(self, *, lease_start: date) -> bool:
        return self.window_start <= lease_start <= self.window_end

    def ends_within(self, *, lease_end: date) -> bool:
        return self.window_start <= lease_end <= self.window_end
