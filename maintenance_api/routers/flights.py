"""
Flight data routes: master list, single aircraft (override-aware), override
writes and the squadron rollup.

Data is re-read from disk on every request so edits made by other operators
show up immediately.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from maintenance_api.agent.aggregator import aggregate
from maintenance_api.errors import NotFound
from maintenance_api.models.flight import SquadronSummary
from maintenance_api.storage import FlightStore

router = APIRouter()


def get_store(request: Request) -> FlightStore:
    return request.app.state.store


@router.get("/flights")
def list_flights(store: FlightStore = Depends(get_store)):
    """The master flights document as stored."""
    return store.load_document()


@router.get("/flights/{flight_id}")
def get_flight(flight_id: str, store: FlightStore = Depends(get_store)):
    """One aircraft: the per-flight override if saved, else the master record."""
    flight = store.get_flight(flight_id)
    if flight is None:
        raise NotFound(detail=flight_id)
    return flight


@router.put("/flights/{flight_id}")
def save_flight(
    flight_id: str,
    payload: Any = Body(default=None),
    store: FlightStore = Depends(get_store),
):
    """Overwrite the per-flight override with the request body, stored as sent."""
    store.save_override(flight_id, payload if payload is not None else {})
    return {"saved": True}


@router.get("/squadron-summary", response_model=SquadronSummary)
def squadron_summary(store: FlightStore = Depends(get_store)):
    """Totals, deployable share and per-flight worst status."""
    return aggregate(store.load_flights())
