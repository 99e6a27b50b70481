import os
import sys
import json
import asyncio
from datetime import datetime

import pytest

# Add the project root directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.campaign_store import CampaignStateStore
from core.llm import GenerationService
from core.session import SessionManager
from core.store import PersistentStore
from workflows.flow import FlowController
from workflows.generation import GenerationOrchestrator

VALID_FRAMEWORK = {
    "coreMessagingHierarchy": [
        "Ship faster",
        "Releases are slow and risky",
        "X automates your release pipeline",
        "Deploy ten times a day with confidence",
        "Start your free trial",
    ],
    "problemSolutionOutcomeNarrative": {
        "problem": "Teams lose days to manual releases.",
        "solution": "X turns every merge into a safe deployment.",
        "outcome": "Faster feedback and fewer incidents.",
    },
    "competitiveDifferentiationPoints": ["Zero-config setup", "Built-in rollbacks"],
}

CAMPAIGN_PAYLOAD = {
    "websiteCopySuite": {
        "heroSection": {"headline": "Release on autopilot", "subHeadline": "No more release days", "callToAction": "Try X"},
    },
    "videoScripts": {"productDemo": {"script": "Open X...", "duration": "60s"}},
}


class FakeGenerationService(GenerationService):
    """Returns queued responses; an item that is an exception is raised instead."""

    def __init__(self, *responses, gate=None):
        self.responses = list(responses)
        self.gate = gate
        self.calls = []

    async def generate(self, prompt, response_schema=None):
        self.calls.append({"prompt": prompt, "schema": response_schema})
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr("core.session.PBKDF2_ITERATIONS", 1000)


@pytest.fixture
def store(tmp_path):
    return PersistentStore(str(tmp_path / "store"))


@pytest.fixture
def campaigns(store):
    return CampaignStateStore(store)


@pytest.fixture
def session(store, campaigns):
    return SessionManager(store, campaign_store=campaigns)


@pytest.fixture
def flow(session):
    return FlowController(session)


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 5, 14, 30, 15)


@pytest.fixture
def make_orchestrator(session, campaigns, fixed_clock):
    def _make(service):
        return GenerationOrchestrator(session, campaigns, service, clock=fixed_clock)
    return _make


@pytest.fixture
def framework_json():
    return json.dumps(VALID_FRAMEWORK)


@pytest.fixture
def campaign_json():
    return json.dumps(CAMPAIGN_PAYLOAD)


@pytest.fixture
def onboarded(session, campaigns, make_orchestrator, framework_json):
    """A signed-up account that has completed onboarding."""
    session.sign_up("owner@x.com", "pw")
    orchestrator = make_orchestrator(FakeGenerationService(framework_json))
    asyncio.run(orchestrator.generate_value_prop("Company Name: X"))
    return session
