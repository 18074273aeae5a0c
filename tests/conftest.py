"""
Shared fixtures: an isolated data directory seeded with a small squadron,
settings pointing at it, and a TestClient over a freshly built app.
"""
import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from maintenance_api.config import Settings
from maintenance_api.main import create_app
from maintenance_api.models.flight import Flight

SQUADRON = {
    "flights": [
        {
            "id": "A400-01",
            "displayName": "Grizzly 1",
            "components": [
                {"id": "eng-1", "componentName": "Engine 1", "status": "Good", "maintenanceDue": "2026-03-14"},
                {"id": "hyd", "componentName": "Hydraulic Pump", "status": "Good"},
            ],
        },
        {
            "id": "A400-02",
            "displayName": "Grizzly 2",
            "components": [
                {"id": "eng-3", "componentName": "Engine 3", "status": "Warning", "maintenanceDue": "2025-12-01"},
            ],
        },
        {
            "id": "A400-03",
            "displayName": "Grizzly 3",
            "components": [
                {"id": "apu", "componentName": "APU", "status": "Warning"},
                {"id": "hyd", "componentName": "Hydraulic Pump", "status": "Critical", "maintenanceDue": "2025-11-05"},
            ],
        },
        {"id": "A400-04", "displayName": "Grizzly 4", "components": []},
    ]
}


@pytest.fixture
def squadron_doc():
    return json.loads(json.dumps(SQUADRON))


@pytest.fixture
def squadron(squadron_doc):
    return [Flight.model_validate(f) for f in squadron_doc["flights"]]


@pytest.fixture
def data_dir(tmp_path, squadron_doc):
    data = tmp_path / "data"
    data.mkdir()
    (data / "flights.json").write_text(json.dumps(squadron_doc))
    return data


@pytest.fixture
def settings(data_dir, tmp_path):
    return Settings(
        _env_file=None,
        data_dir=data_dir,
        static_dir=tmp_path / "public",
        azure_openai_endpoint="https://example.openai.azure.com/",
        azure_openai_key="test-key",
        azure_openai_deployment="gpt-test",
        neuro_api_url="https://neuro.example.com/chat",
        neuro_project_name="a400",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def upstream(app):
    """Replace the Azure client with a mock that answers 'Upstream reply.'."""
    mock = AsyncMock()
    mock.complete.return_value = "Upstream reply."
    app.state.chat.client = mock
    return mock


@pytest.fixture
def read_log():
    """Parse an NDJSON log file into a list of dicts."""
    def _read(path):
        return [json.loads(line) for line in path.read_text().splitlines()]
    return _read
