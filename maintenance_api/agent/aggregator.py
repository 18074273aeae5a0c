"""
Squadron status rollup: the numbers behind /api/squadron-summary and the
local chat replies.

Severity is a fixed total order: Good < Warning < Critical. Any status value
we don't recognise (typos, "Unknown", a number, a missing field) counts as
Warning so an unexpected state shows up on the dashboard instead of passing as safe.

Everything here is a pure function over the flights passed in; callers
re-read the data files per request, so there's nothing to cache or invalidate.
"""
import math
from typing import Any, Iterable

from maintenance_api.models.flight import (
    Flight,
    FlightStatus,
    FlightSummary,
    SquadronSummary,
)

GOOD, WARNING, CRITICAL = 0, 1, 2

SEVERITY = {"Good": GOOD, "Warning": WARNING, "Critical": CRITICAL}
LABELS = {GOOD: "Good", WARNING: "Warning", CRITICAL: "Critical"}


def severity(status: Any) -> int:
    if not isinstance(status, str):
        return WARNING
    return SEVERITY.get(status, WARNING)


def status_label(rank: int) -> str:
    return LABELS[rank]


def worst_severity(flight: Flight) -> int:
    """Max severity over the flight's components; Good when it has none."""
    return max((severity(c.status) for c in flight.components), default=GOOD)


def worst_status(flight: Flight) -> str:
    return status_label(worst_severity(flight))


def pct(part: int, total: int) -> int:
    """Whole-number percentage, rounding halves up. 0 for an empty total."""
    if total <= 0:
        return 0
    return math.floor(100 * part / total + 0.5)


def aggregate(flights: Iterable[Flight]) -> SquadronSummary:
    """Roll component statuses up to per-flight worst status and squadron counts.

    A flight is deployable while its worst status is below Critical.
    Returns a fresh SquadronSummary on every call.
    """
    counts = {GOOD: 0, WARNING: 0, CRITICAL: 0}
    non_deployable: list[str] = []
    per_flight: list[FlightStatus] = []

    for flight in flights:
        worst = worst_severity(flight)
        counts[worst] += 1
        if worst == CRITICAL:
            non_deployable.append(flight.id)
        per_flight.append(
            FlightStatus(id=flight.id, displayName=flight.displayName, worstStatus=status_label(worst))
        )

    total = len(per_flight)
    deployable = total - counts[CRITICAL]
    return SquadronSummary(
        totalFlights=total,
        flightsAllGood=counts[GOOD],
        flightsWithWarnings=counts[WARNING],
        flightsWithCritical=counts[CRITICAL],
        deployableCount=deployable,
        deployablePct=pct(deployable, total),
        inServiceCount=total - deployable,
        nonDeployableIds=non_deployable,
        perFlight=per_flight,
    )


def summarize_flight(flight: Flight) -> FlightSummary:
    """Worst status of one aircraft plus the first component responsible for it."""
    worst = worst_severity(flight)
    if worst == GOOD:
        return FlightSummary(worstStatus=status_label(worst), keyIssue="No issues detected.")

    culprit = next(c for c in flight.components if severity(c.status) == worst)
    key_issue = (
        f"{culprit.label} = {status_label(worst)} "
        f"(maintenanceDue: {culprit.maintenanceDue or 'unknown'})"
    )
    return FlightSummary(worstStatus=status_label(worst), keyIssue=key_issue)
