"""Shared fixtures for the clinic finder tests."""

from unittest.mock import MagicMock

import pytest

import config
from chatbot.catalog import ClinicCatalog
from chatbot.ranker import Facility
from database.mongo_client import MongoDBClient


def make_facility(name: str, longitude: float, latitude: float, **overrides) -> Facility:
    fields = {
        "name": name,
        "source": "BCC",
        "specialty": "Multi-Specialty",
        "street": "1 Main St",
        "city": "Los Angeles",
        "county": "Los Angeles",
        "region": "CA",
        "postal_code": "90007",
        "phone": "(213) 555-0100",
        "longitude": longitude,
        "latitude": latitude,
    }
    fields.update(overrides)
    return Facility(**fields)


@pytest.fixture
def three_clinics() -> tuple[Facility, ...]:
    """The three clinics around downtown Los Angeles and Ontario."""
    return (
        make_facility("Southern Calif Medical Group", -118.2744516, 34.0197291),
        make_facility("Stacy Medical Center", -118.2248393, 34.0019771),
        make_facility("Concentra Medical Center", -117.557599, 34.0531719),
    )


@pytest.fixture
def catalog(three_clinics) -> ClinicCatalog:
    return ClinicCatalog(path="unused.txt", facilities=three_clinics)


@pytest.fixture
def db(monkeypatch) -> MongoDBClient:
    """Profile store running on the in-memory fallback."""
    monkeypatch.setattr(config, "MONGODB_URI", "")
    return MongoDBClient()


@pytest.fixture
def llm() -> MagicMock:
    engine = MagicMock()
    engine.recognize.return_value = {"intent": "None", "score": 0.0}
    return engine
