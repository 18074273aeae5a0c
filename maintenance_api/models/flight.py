"""
Pydantic models for the flight data files and the squadron summary.

Field names follow the JSON documents on disk (camelCase) so documents can be
validated and echoed back without a translation layer. Unknown keys are kept:
the browser client stores extra per-component data we don't interpret.

Component and display fields accept any JSON value. The files are edited by
hand and by the browser, and one odd value (a numeric status, a day count in
maintenanceDue) must not make the whole squadron unreadable.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = None
    displayName: Any = None
    componentName: Any = None
    status: Any = None
    maintenanceDue: Any = None

    @property
    def label(self) -> str:
        return str(self.componentName or self.displayName or self.id or "unknown component")


class Flight(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    displayName: Any = None
    components: list[Component] = []


class FlightsDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    flights: list[Flight] = []


class FlightStatus(BaseModel):
    id: str
    displayName: Any = None
    worstStatus: str


class FlightSummary(BaseModel):
    worstStatus: str
    keyIssue: str


class SquadronSummary(BaseModel):
    totalFlights: int = 0
    flightsAllGood: int = 0
    flightsWithWarnings: int = 0
    flightsWithCritical: int = 0
    deployableCount: int = 0
    deployablePct: int = 0
    inServiceCount: int = 0
    nonDeployableIds: list[str] = []
    perFlight: list[FlightStatus] = []
