"""
Tests for keyword intent classification and routing.
"""

import pytest

from app.agents.agent_router import AgentRouter, route
from app.agents.coordinator_agent import CoordinatorAgent
from app.agents.flight_agent import FlightAgent
from app.agents.hotel_agent import HotelAgent
from app.agents.intent_classifier import classify
from app.models.agent_models import AgentStatus, AgentType, Intent


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize("text", [
        "Find flights from NYC to LAX tomorrow",
        "Which AIRLINE is cheapest?",
        "I want to fly to Rome",
    ])
    def test_flight_only(self, text):
        """Flight vocabulary without hotel vocabulary gives exactly {flight}."""
        assert classify(text) == frozenset({Intent.FLIGHT})

    @pytest.mark.parametrize("text", [
        "Recommend a hotel in Tokyo",
        "Any cheap accommodation near the beach?",
        "Where should we stay in Lisbon",
    ])
    def test_hotel_only(self, text):
        """Hotel vocabulary without flight vocabulary gives exactly {hotel}."""
        assert classify(text) == frozenset({Intent.HOTEL})

    def test_both(self):
        """Both vocabularies give {flight, hotel}."""
        assert classify("book me a hotel and a flight to Paris") == frozenset({Intent.FLIGHT, Intent.HOTEL})

    def test_general(self):
        """No vocabulary match falls back to {general}."""
        assert classify("What is the weather like in Spain?") == frozenset({Intent.GENERAL})

    def test_empty_text(self):
        """Empty text is general, never an empty set."""
        assert classify("") == frozenset({Intent.GENERAL})

    def test_substring_match(self):
        """Matching is substring based, so inflections count."""
        assert classify("We stayed downtown last time") == frozenset({Intent.HOTEL})


class TestRoute:
    """Tests for route() and AgentRouter."""

    def test_flight_and_hotel_go_to_coordinator(self):
        """Flight plus hotel routes to the coordinator."""
        assert route({Intent.FLIGHT, Intent.HOTEL}) == AgentType.COORDINATOR

    def test_both_signal(self):
        """An explicit both intent routes to the coordinator."""
        assert route({Intent.BOTH}) == AgentType.COORDINATOR

    def test_single_topics(self):
        """Single topics go to their specialist."""
        assert route({Intent.FLIGHT}) == AgentType.FLIGHT
        assert route({Intent.HOTEL}) == AgentType.HOTEL

    def test_general(self):
        """General routes to the coordinator."""
        assert route({Intent.GENERAL}) == AgentType.COORDINATOR

    def test_router_selects_handlers(self):
        """The default router maps every agent type to its handler."""
        router = AgentRouter()
        assert isinstance(router.select(classify("Find flights from NYC to LAX tomorrow")), FlightAgent)
        assert isinstance(router.select(classify("Recommend a hotel")), HotelAgent)
        assert isinstance(router.select(classify("book me a hotel and a flight to Paris")), CoordinatorAgent)

    def test_handler_status_records(self):
        """Each handler announces its interim status."""
        router = AgentRouter()
        coordinator = router.handlers[AgentType.COORDINATOR].status
        flight = router.handlers[AgentType.FLIGHT].status
        hotel = router.handlers[AgentType.HOTEL].status

        assert (coordinator.agent_status, coordinator.content) == (AgentStatus.THINKING, "Analyzing your request...")
        assert (flight.agent_status, flight.content) == (AgentStatus.SEARCHING, "Searching for flights...")
        assert (hotel.agent_status, hotel.content) == (AgentStatus.SEARCHING, "Searching for hotels...")
