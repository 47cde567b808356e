from __future__ import annotations

import pytest
from flask import Flask
from flask.testing import FlaskClient

from backend.app import create_app
from backend.config import Settings
from backend.core.storage import MemoryScenarioStore


@pytest.fixture()
def app() -> Flask:
    flask_app = create_app(Settings(store="memory", log_level="WARNING"), store=MemoryScenarioStore())
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client


def make_fire_payload(**overrides) -> dict:
    """Inputs for a 26-year-old saving $1,200/month towards $200k/yr of spending."""
    payload = {
        "startingInvestments": 150000,
        "monthlyContributions": 1200,
        "contributionMode": "fixed",
        "currentAge": 26,
        "annualExpenses": 200000,
        "annualReturn": 10,
        "inflationRate": 3,
        "withdrawalRate": 4,
        "windfalls": [],
        "adjustContributionsForInflation": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def fire_payload():
    return make_fire_payload

