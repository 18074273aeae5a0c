"""
UI support routes: gesture tuner settings and the gesture sampling trace.

Both payloads are opaque to the server and stored verbatim.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from maintenance_api.routers.flights import get_store
from maintenance_api.storage import FlightStore, append_trace

router = APIRouter()


@router.get("/tuner")
def get_tuner(store: FlightStore = Depends(get_store)):
    """Saved tuner settings; {} when nothing has been saved (or it can't be read)."""
    return store.load_tuner()


@router.put("/tuner")
def save_tuner(payload: Any = Body(default=None), store: FlightStore = Depends(get_store)):
    store.save_tuner(payload if payload is not None else {})
    return {"saved": True}


@router.post("/gesture-log")
def gesture_log(request: Request, payload: Any = Body(default=None)):
    """Append one timestamped sample to the gesture trace (one JSON object per line)."""
    append_trace(request.app.state.settings.log_dir / "gesture.log", payload if payload is not None else {})
    return {"saved": True}
