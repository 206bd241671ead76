"""Unit tests for the AI reasoning service.

Prompt construction and reply parsing are tested through a fake provider;
the Gemini and Groq providers are tested with their SDK clients swapped for
recording stubs.
"""

import asyncio
import json
from types import SimpleNamespace

import pytest

from mobility.config import ReasoningConfig
from mobility.errors import ConfigurationError, ReasoningError
from mobility.models import ParkingPrediction, RouteRequest, RouteResult
from mobility.services.ai_reasoning import (
    GeminiRouteReasoner,
    GroqRouteReasoner,
    RouteReasoner,
    create_route_reasoner,
)


def _request(**hints) -> RouteRequest:
    return RouteRequest(
        start_location="India Gate, New Delhi",
        end_location="Qutub Minar, New Delhi",
        **hints,
    )


class TestBuildRoutePrompt:
    """Tests for the labelled route prompt."""

    def test_required_labels(self, reasoner) -> None:
        prompt = reasoner.build_route_prompt(_request())
        assert "Start Location: India Gate, New Delhi" in prompt
        assert "End Location: Qutub Minar, New Delhi" in prompt

    def test_absent_hints_are_omitted(self, reasoner) -> None:
        prompt = reasoner.build_route_prompt(_request())
        assert "Current Traffic Conditions:" not in prompt
        assert "Available Public Transport:" not in prompt
        assert "Available Micro-Mobility Options:" not in prompt
        assert "Departure Time:" not in prompt

    def test_all_hints_are_labelled(self, reasoner) -> None:
        prompt = reasoner.build_route_prompt(
            _request(
                current_traffic_conditions="heavy",
                available_public_transport="metro",
                available_micro_mobility="e-scooter",
                departure_time="now",
            )
        )
        assert "Current Traffic Conditions: heavy" in prompt
        assert "Available Public Transport: metro" in prompt
        assert "Available Micro-Mobility Options: e-scooter" in prompt
        assert "Departure Time: now" in prompt

    def test_labels_in_order(self, reasoner) -> None:
        prompt = reasoner.build_route_prompt(_request(departure_time="now"))
        assert prompt.index("Start Location:") < prompt.index("End Location:")
        assert prompt.index("End Location:") < prompt.index("Departure Time:")

    def test_requests_four_named_fields(self, reasoner) -> None:
        prompt = reasoner.build_route_prompt(_request())
        for key in ("optimalRoute", "estimatedTravelTime", "costEstimate", "routeSummary"):
            assert key in prompt

    def test_currency_policy(self, reasoner) -> None:
        assert "INR" in reasoner.build_route_prompt(_request())

    def test_control_characters_stripped(self, reasoner) -> None:
        request = RouteRequest(start_location="India\x00 Gate", end_location="Qutub\x1b Minar")
        prompt = reasoner.build_route_prompt(request)
        assert "\x00" not in prompt
        assert "\x1b" not in prompt
        assert "Start Location: India Gate" in prompt


class TestOptimizeRoute:
    """Tests for the route optimization call."""

    @pytest.mark.asyncio
    async def test_parses_reply(self, reasoner) -> None:
        result = await reasoner.optimize_route(_request())
        assert isinstance(result, RouteResult)
        assert result.route_summary
        assert result.estimated_travel_time
        assert result.cost_estimate
        assert result.optimal_route

    @pytest.mark.asyncio
    async def test_one_call_per_request(self, reasoner) -> None:
        await reasoner.optimize_route(_request())
        assert reasoner.call_count == 1

    @pytest.mark.asyncio
    async def test_repeated_requests_are_independent(self, make_reasoner, route_reply) -> None:
        second = dict(route_reply, estimatedTravelTime="55 minutes")
        reasoner = make_reasoner(replies=[json.dumps(route_reply), json.dumps(second)])
        first_result = await reasoner.optimize_route(_request())
        second_result = await reasoner.optimize_route(_request())
        assert reasoner.call_count == 2
        assert first_result.estimated_travel_time != second_result.estimated_travel_time

    @pytest.mark.asyncio
    async def test_fenced_json_reply(self, make_reasoner, route_reply) -> None:
        reasoner = make_reasoner(replies=[f"```json\n{json.dumps(route_reply)}\n```"])
        result = await reasoner.optimize_route(_request())
        assert result.cost_estimate == route_reply["costEstimate"]

    @pytest.mark.asyncio
    async def test_backticks_inside_values(self, make_reasoner, route_reply) -> None:
        route_reply["optimalRoute"] = "1. Take metro ```Yellow Line```\n2. Walk"
        reasoner = make_reasoner(replies=[json.dumps(route_reply)])
        result = await reasoner.optimize_route(_request())
        assert result.optimal_route == "1. Take metro ```Yellow Line```\n2. Walk"

    @pytest.mark.asyncio
    async def test_fenced_reply_with_backticks_inside(self, make_reasoner, route_reply) -> None:
        route_reply["routeSummary"] = "Metro via ```Yellow Line```"
        reasoner = make_reasoner(replies=[f"```json\n{json.dumps(route_reply)}\n```"])
        result = await reasoner.optimize_route(_request())
        assert result.route_summary == "Metro via ```Yellow Line```"

    @pytest.mark.asyncio
    async def test_missing_field_is_fatal(self, make_reasoner, route_reply) -> None:
        del route_reply["costEstimate"]
        reasoner = make_reasoner(replies=[json.dumps(route_reply)])
        with pytest.raises(ReasoningError):
            await reasoner.optimize_route(_request())
        assert reasoner.call_count == 1

    @pytest.mark.asyncio
    async def test_blank_field_is_fatal(self, make_reasoner, route_reply) -> None:
        route_reply["routeSummary"] = "   "
        reasoner = make_reasoner(replies=[json.dumps(route_reply)])
        with pytest.raises(ReasoningError):
            await reasoner.optimize_route(_request())

    @pytest.mark.asyncio
    async def test_invalid_json_is_fatal(self, make_reasoner) -> None:
        reasoner = make_reasoner(replies=["Take the metro, it takes about 40 minutes."])
        with pytest.raises(ReasoningError):
            await reasoner.optimize_route(_request())

    @pytest.mark.asyncio
    async def test_empty_reply_is_fatal(self, make_reasoner) -> None:
        reasoner = make_reasoner(replies=[""])
        with pytest.raises(ReasoningError, match="empty reply"):
            await reasoner.optimize_route(_request())

    @pytest.mark.asyncio
    async def test_backend_error_not_retried(self, failing_reasoner) -> None:
        with pytest.raises(ReasoningError) as exc_info:
            await failing_reasoner.optimize_route(_request())
        assert failing_reasoner.call_count == 1
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_timeout_is_reasoning_error(self, make_reasoner) -> None:
        reasoner = make_reasoner(error=asyncio.TimeoutError())
        with pytest.raises(ReasoningError, match="timed out"):
            await reasoner.optimize_route(_request())


class TestPredictParking:
    """Tests for parking prediction."""

    def test_parking_prompt_labels(self, reasoner) -> None:
        prompt = reasoner.build_parking_prompt("Connaught Place", "2024-05-01 09:00")
        assert "Location: Connaught Place" in prompt
        assert "Current Time: 2024-05-01 09:00" in prompt
        assert "peakHoursPrediction" in prompt

    @pytest.mark.asyncio
    async def test_parses_reply(self, make_reasoner, parking_reply) -> None:
        reasoner = make_reasoner(replies=[json.dumps(parking_reply)])
        prediction = await reasoner.predict_parking("Connaught Place", "09:00")
        assert isinstance(prediction, ParkingPrediction)
        assert prediction.peak_hours_prediction
        assert prediction.alternative_parking_suggestions

    @pytest.mark.asyncio
    async def test_route_shaped_reply_is_fatal(self, reasoner) -> None:
        with pytest.raises(ReasoningError):
            await reasoner.predict_parking("Connaught Place", "09:00")


class _RecordingAsyncCall:
    def __init__(self, response) -> None:
        self.response = response
        self.kwargs: list[dict] = []

    async def __call__(self, **kwargs):
        self.kwargs.append(kwargs)
        return self.response


class TestGeminiRouteReasoner:
    """Tests for the Gemini provider."""

    def setup_method(self) -> None:
        config = ReasoningConfig(provider="gemini", api_key="test-key", model_name="gemini-2.5-flash")
        self.service = GeminiRouteReasoner(config)

    def _stub(self, text: str) -> _RecordingAsyncCall:
        call = _RecordingAsyncCall(SimpleNamespace(text=text))
        self.service._client = SimpleNamespace(
            aio=SimpleNamespace(models=SimpleNamespace(generate_content=call))
        )
        return call

    def test_provider_name(self) -> None:
        assert self.service.provider_name == "Gemini"
        assert self.service._timeout == 30.0

    @pytest.mark.asyncio
    async def test_requests_json(self, route_reply) -> None:
        call = self._stub(json.dumps(route_reply))
        result = await self.service.optimize_route(_request())
        assert result.route_summary == route_reply["routeSummary"]
        assert len(call.kwargs) == 1
        kwargs = call.kwargs[0]
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["config"].response_mime_type == "application/json"
        assert "Start Location: India Gate, New Delhi" in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_none_text_is_fatal(self) -> None:
        call = _RecordingAsyncCall(SimpleNamespace(text=None))
        self.service._client = SimpleNamespace(
            aio=SimpleNamespace(models=SimpleNamespace(generate_content=call))
        )
        with pytest.raises(ReasoningError):
            await self.service.optimize_route(_request())


class TestGroqRouteReasoner:
    """Tests for the Groq provider."""

    def setup_method(self) -> None:
        config = ReasoningConfig(provider="groq", api_key="test-key", model_name="llama-3.1-8b-instant")
        self.service = GroqRouteReasoner(config)

    @pytest.mark.asyncio
    async def test_requests_json_object(self, route_reply) -> None:
        message = SimpleNamespace(content=json.dumps(route_reply))
        call = _RecordingAsyncCall(SimpleNamespace(choices=[SimpleNamespace(message=message)]))
        self.service._client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=call))
        )
        result = await self.service.optimize_route(_request())
        assert result.optimal_route == route_reply["optimalRoute"]
        kwargs = call.kwargs[0]
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        assert "End Location: Qutub Minar, New Delhi" in kwargs["messages"][1]["content"]


class TestCreateRouteReasoner:
    """Tests for the provider factory."""

    def test_gemini(self) -> None:
        config = ReasoningConfig(provider="gemini", api_key="test-key", model_name="gemini-2.5-flash")
        assert isinstance(create_route_reasoner(config), GeminiRouteReasoner)

    def test_groq(self) -> None:
        config = ReasoningConfig(provider="groq", api_key="test-key", model_name="llama-3.1-8b-instant")
        service = create_route_reasoner(config)
        assert isinstance(service, GroqRouteReasoner)
        assert isinstance(service, RouteReasoner)

    def test_unknown_provider_rejected_by_config(self) -> None:
        with pytest.raises(ConfigurationError):
            ReasoningConfig(provider="openai", api_key="test-key", model_name="gpt")
