"""
Pytest configuration and fixtures for the travel agent test suite.

Provides:
- an isolated ConversationLog per test (SQLite file under tmp_path)
- fake generation model and fake flight gateway (see fakes.py)
- a DispatchContext factory wired to the fakes
"""

import os
import tempfile
from datetime import date

import pytest

# Set test environment before importing app modules
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="travel-agent-logs-"))
os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(prefix="travel-agent-db-"), "test.sqlite3"))
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")

from app.agents.base_agent import DispatchContext
from app.agents.turn_dispatcher import TurnDispatcher
from app.db.conversation_log import ConversationLog
from app.models.agent_models import DispatchConfig

from fakes import FakeFlightService, FakeModel, make_offer


TODAY = date(2026, 3, 10)


@pytest.fixture
def log(tmp_path):
    conversation_log = ConversationLog(tmp_path / "conversations.sqlite3")
    yield conversation_log
    conversation_log.close()


@pytest.fixture
def config():
    return DispatchConfig(
        amadeus_api_key="client-id",
        amadeus_api_secret="client-secret",
        llm_api_key="test-key",
    )


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def flight_service():
    return FakeFlightService(offers=[
        make_offer("1"),
        make_offer("2", carrier="DL", number="200", total="310.00"),
        make_offer("3", carrier="UA", number="300", total="99.99", segments=2),
        make_offer("4", carrier="B6", number="400", total="150.00"),
    ])


@pytest.fixture
def context_factory(model, flight_service):
    def factory(config, conversation_id=None):
        return DispatchContext(
            config=config,
            model=model,
            flight_service_factory=lambda _config: flight_service,
            clock=lambda: TODAY,
            conversation_id=conversation_id,
        )
    return factory


@pytest.fixture
def dispatcher(log, config, context_factory):
    return TurnDispatcher(log, config=config, context_factory=context_factory)
