"""
Tests for the turn pipeline: persistence order, routing, flight degrade path
and generation failures.
"""

import pytest

from app.agents.flight_agent import LIVE_RESULTS_PROMPT, NO_LIVE_DATA_PROMPT
from app.agents.turn_dispatcher import history_for_model
from app.core.errors import AuthError, ConfigurationError, ParseError, UpstreamError
from app.models.agent_models import AgentStatus, AgentType, Role
from app.models.conversation_models import NewMessage


FLIGHT_MESSAGE = "Find flights from NYC to LAX tomorrow"

# Emission order within one turn
STATUS_RANK = {
    AgentStatus.THINKING: 0,
    AgentStatus.SEARCHING: 1,
    AgentStatus.COMPLETED: 2,
}


def _roles(messages):
    return [m.role for m in messages]


class TestDispatchFlight:
    """Flight turns, with and without live data."""

    @pytest.mark.asyncio
    async def test_live_offers(self, dispatcher, log, flight_service, model):
        """Route and tomorrow's date reach the gateway; top three offers land in the answer."""
        result = await dispatcher.dispatch(FLIGHT_MESSAGE, None, "user-1")

        assert result.agent == AgentType.FLIGHT
        assert flight_service.searches == [
            {"origin": "NYC", "destination": "LAX", "date": "2026-03-11", "adults": 1}
        ]
        assert model.calls[0]["system_prompt"].startswith(LIVE_RESULTS_PROMPT.split("{results}")[0])
        assert "**AA 100**" in model.calls[0]["system_prompt"]
        assert "B6 400" not in model.calls[0]["system_prompt"]

        messages = log.get_messages(result.conversation_id)
        assert _roles(messages) == [Role.USER, Role.AGENT, Role.ASSISTANT]

        terminal = messages[-1]
        assert terminal.agent_type == AgentType.FLIGHT
        assert terminal.agent_status == AgentStatus.COMPLETED
        assert "USD 245.30" in terminal.content
        assert terminal.content == result.response
        assert terminal.metadata.kind == "flight"
        assert [r.flight_number for r in terminal.metadata.results] == ["AA 100", "DL 200", "UA 300"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        AuthError("Failed to get Amadeus access token", 401),
        UpstreamError("flight", "HTTP 500 from /v2/shopping/flight-offers: internal trace xyz"),
        ParseError("unparseable flight offers: garbage"),
    ])
    async def test_gateway_failure_degrades(self, dispatcher, log, flight_service, model, error):
        """Any gateway failure still completes the turn, without provider error text."""
        flight_service.error = error

        result = await dispatcher.dispatch(FLIGHT_MESSAGE, None, "user-1")

        terminal = log.get_messages(result.conversation_id)[-1]
        assert terminal.role == Role.ASSISTANT
        assert terminal.agent_type == AgentType.FLIGHT
        assert terminal.agent_status == AgentStatus.COMPLETED
        assert terminal.content == model.reply
        assert terminal.metadata is None
        assert str(error) not in terminal.content
        assert "provider error" not in terminal.content
        assert model.calls[0]["system_prompt"] == NO_LIVE_DATA_PROMPT

    @pytest.mark.asyncio
    async def test_no_offers(self, dispatcher, log, flight_service, model):
        """Zero offers answers from the generation-only template."""
        flight_service.offers = []

        result = await dispatcher.dispatch(FLIGHT_MESSAGE, None, "user-1")

        assert result.response == model.reply
        assert model.calls[0]["system_prompt"] == NO_LIVE_DATA_PROMPT

    @pytest.mark.asyncio
    async def test_no_route_skips_search(self, dispatcher, flight_service, model):
        """Without a route there is no gateway call."""
        await dispatcher.dispatch("Which airline has the best legroom?", None, "user-1")

        assert flight_service.searches == []
        assert model.calls[0]["system_prompt"] == NO_LIVE_DATA_PROMPT


class TestDispatchRouting:
    """Coordinator and hotel turns."""

    @pytest.mark.asyncio
    async def test_flight_and_hotel_go_to_coordinator(self, dispatcher, log, flight_service):
        """Mixed requests are answered by the coordinator."""
        result = await dispatcher.dispatch("book me a hotel and a flight to Paris", None, "user-1")

        assert result.agent == AgentType.COORDINATOR
        assert flight_service.searches == []

        status = log.get_messages(result.conversation_id)[1]
        assert status.role == Role.AGENT
        assert status.agent_type == AgentType.COORDINATOR
        assert status.agent_status == AgentStatus.THINKING
        assert status.content == "Analyzing your request..."

    @pytest.mark.asyncio
    async def test_hotel(self, dispatcher, log):
        """Hotel requests are answered by the hotel agent."""
        result = await dispatcher.dispatch("Recommend a hotel in Kyoto", None, "user-1")

        messages = log.get_messages(result.conversation_id)
        assert result.agent == AgentType.HOTEL
        assert messages[1].content == "Searching for hotels..."
        assert messages[2].agent_type == AgentType.HOTEL

    @pytest.mark.asyncio
    async def test_statuses_never_regress(self, dispatcher, log):
        """Within a turn, statuses only move forward."""
        for text in (FLIGHT_MESSAGE, "Plan a weekend in Rome", "Recommend a hotel"):
            result = await dispatcher.dispatch(text, "conv-1", "user-1")

        ranks = []
        for message in log.get_messages(result.conversation_id):
            if message.role == Role.USER:
                ranks = []
                continue
            ranks.append(STATUS_RANK[message.agent_status])
            assert ranks == sorted(ranks)


class TestDispatchConversation:
    """Conversation handling and history."""

    @pytest.mark.asyncio
    async def test_user_message_first(self, dispatcher, log):
        """Exactly one user message per turn, before anything else of that turn."""
        await dispatcher.dispatch("Plan a weekend in Rome", "conv-1", "user-1")
        await dispatcher.dispatch(FLIGHT_MESSAGE, "conv-1", "user-1")

        assert _roles(log.get_messages("conv-1")) == [
            Role.USER, Role.AGENT, Role.ASSISTANT,
            Role.USER, Role.AGENT, Role.ASSISTANT,
        ]

    @pytest.mark.asyncio
    async def test_unknown_id_is_created(self, dispatcher, log):
        """An unknown conversation id is created under that id."""
        result = await dispatcher.dispatch("Plan a weekend in Rome", "conv-new", "user-9")

        assert result.conversation_id == "conv-new"
        assert log.get_conversation("conv-new").user_id == "user-9"

    @pytest.mark.asyncio
    async def test_history_excludes_status_messages(self, dispatcher, model):
        """Prior user/assistant messages reach the model; interim statuses do not."""
        await dispatcher.dispatch("Plan a weekend in Rome", "conv-1", "user-1")
        await dispatcher.dispatch("What about Naples?", "conv-1", "user-1")

        history = model.calls[1]["history"]
        assert [(h.role, h.content) for h in history] == [
            ("user", "Plan a weekend in Rome"),
            ("assistant", model.reply),
        ]
        assert model.calls[1]["message"] == "What about Naples?"


class TestDispatchFailure:
    """Generation failures."""

    @pytest.mark.asyncio
    async def test_generation_failure_leaves_no_terminal(self, dispatcher, log, model):
        """The failure propagates; user and status messages stay, no terminal message."""
        model.error = UpstreamError("generation", "Failed to get response from AI", 502)

        with pytest.raises(UpstreamError):
            await dispatcher.dispatch("Plan a weekend in Rome", "conv-1", "user-1")

        messages = log.get_messages("conv-1")
        assert _roles(messages) == [Role.USER, Role.AGENT]
        assert all(m.agent_status != AgentStatus.COMPLETED for m in messages)

    @pytest.mark.asyncio
    async def test_missing_configuration(self, dispatcher, log, model):
        """A missing credential fails the turn the same way."""
        model.error = ConfigurationError("LLM_API_KEY")

        with pytest.raises(ConfigurationError):
            await dispatcher.dispatch(FLIGHT_MESSAGE, "conv-1", "user-1")

        assert _roles(log.get_messages("conv-1")) == [Role.USER, Role.AGENT]


class TestHistoryForModel:
    """Tests for history_for_model()."""

    def test_filters_agent_role(self, log):
        """Only user and assistant messages are conversation content."""
        log.create_conversation("user-1", "conv-1")
        for role, content in [(Role.USER, "hi"), (Role.AGENT, "Analyzing your request..."), (Role.ASSISTANT, "hello")]:
            log.append(NewMessage(conversation_id="conv-1", role=role, content=content))

        history = history_for_model(log.get_messages("conv-1"))

        assert [(h.role, h.content) for h in history] == [("user", "hi"), ("assistant", "hello")]


class TestLongConversation:
    """Turns on conversations with a long history."""

    @pytest.mark.asyncio
    async def test_newest_messages_are_kept(self, dispatcher, log, model):
        """The model sees the most recent history and a reload ends with the new answer."""
        log.create_conversation("user-1", "conv-1")
        for i in range(1100):
            log.append(NewMessage(conversation_id="conv-1", role=Role.USER, content=f"m{i}"))

        await dispatcher.dispatch("Plan a weekend in Rome", "conv-1", "user-1")

        history = model.calls[0]["history"]
        assert len(history) == 1100
        assert history[-1].content == "m1099"

        reloaded = log.get_messages("conv-1")
        assert _roles(reloaded[-3:]) == [Role.USER, Role.AGENT, Role.ASSISTANT]
        assert reloaded[-1].content == model.reply
