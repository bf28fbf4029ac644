"""
Tests for the heuristic and LLM decision oracles.

The LLM oracle talks to a fake OpenAI-compatible endpoint through
``httpx.MockTransport``, so no network access is needed.
"""

import json

import httpx
import pytest

from worldopoly.core.agents import (
    BuyDecision,
    ChatReply,
    DecisionKind,
    DecisionRequest,
    HeuristicOracle,
    LLMOracle,
    TradeDecision,
)
from worldopoly.core.agents.base import (
    BoardContext,
    PlayerContext,
    build_buy_request,
    build_chat_request,
    build_trade_request,
)
from worldopoly.core.agents.personas import DEFAULT_MODEL_ID, display_name, get_persona, seat_names


def _buy_request(money=500, price=100, model="llama-3.3-70b-versatile"):
    return DecisionRequest(
        decision_kind=DecisionKind.BUY_DECISION,
        player=PlayerContext(id=1, name="Llama 3.3", money=money),
        board_context=BoardContext(tile_id=7, tile_name="Argentina", price=price, group="LightBlue"),
        model_identifier=model,
    )


def _trade_request(money=300):
    return DecisionRequest(
        decision_kind=DecisionKind.TRADE_DECISION,
        player=PlayerContext(id=1, name="Llama 3.3", money=money),
        board_context=BoardContext(tile_id=6, tile_name="Peru", price=100, owner_name="Alice"),
    )


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeLLM:
    """Scripted chat-completions endpoint that records every request."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, httpx.Response):
            return reply
        return _completion(reply)

    def payload(self, index=0):
        return json.loads(self.requests[index].content)


@pytest.fixture
def make_oracle():
    def make(fake, **kwargs):
        client = httpx.Client(transport=httpx.MockTransport(fake))
        return LLMOracle(base_url="http://llm.test/v1", api_key="secret", client=client, **kwargs)

    return make


# Heuristic oracle


def test_heuristic_buys_with_buffer():
    oracle = HeuristicOracle()

    assert oracle.decide_buy(_buy_request(money=150, price=100)).decision == "BUY"
    decision = oracle.decide_buy(_buy_request(money=149, price=100))
    assert decision.decision == "PASS"
    assert decision.reasoning == "Fallback: Insufficient funds"


def test_heuristic_never_trades():
    decision = HeuristicOracle().decide_trade(_trade_request())

    assert not decision.should_trade
    assert decision.offer_amount == 0


def test_decide_dispatches_on_kind():
    oracle = HeuristicOracle()

    assert isinstance(oracle.decide(_buy_request()), BuyDecision)
    assert isinstance(oracle.decide(_trade_request()), TradeDecision)
    reply = oracle.decide(DecisionRequest(decision_kind="CHAT_MESSAGE", player=PlayerContext(name="x", money=0)))
    assert reply == ChatReply(message="Interesting move.")


# Response models


@pytest.mark.parametrize("raw,expected", [("BUY", "BUY"), ("buy", "BUY"), (" Buy ", "BUY"), ("PASS", "PASS"), ("maybe", "PASS")])
def test_buy_decision_normalizes(raw, expected):
    assert BuyDecision(decision=raw).decision == expected


def test_buy_decision_requires_string():
    with pytest.raises(ValueError):
        BuyDecision(decision=1)


def test_trade_decision_accepts_camel_case():
    decision = TradeDecision.model_validate({"shouldTrade": True, "offerAmount": 150})

    assert decision.should_trade
    assert decision.offer_amount == 150

    with pytest.raises(ValueError):
        TradeDecision.model_validate({"shouldTrade": True, "offerAmount": -1})


# LLM oracle


def test_llm_buy_decision(make_oracle):
    fake = FakeLLM('{"decision": "BUY", "reasoning": "Cheap set starter"}')
    oracle = make_oracle(fake)

    decision = oracle.decide_buy(_buy_request())

    assert decision.decision == "BUY"
    assert decision.reasoning == "Cheap set starter"

    request = fake.requests[0]
    assert str(request.url) == "http://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer secret"
    payload = fake.payload()
    assert payload["model"] == "llama-3.3-70b-versatile"
    assert payload["temperature"] == get_persona("llama-3.3-70b-versatile").temperature
    assert payload["response_format"] == {"type": "json_object"}
    assert "aggressive player" in payload["messages"][0]["content"]
    assert "Property: Argentina" in payload["messages"][1]["content"]


def test_llm_extracts_json_from_chatter(make_oracle):
    fake = FakeLLM('Sure! Here is my answer: {"decision": "pass", "reasoning": "Saving up"} Good luck.')

    assert make_oracle(fake).decide_buy(_buy_request()).decision == "PASS"


def test_llm_retries_once_with_error_feedback(make_oracle):
    fake = FakeLLM("I think I'll buy it", '{"decision": "BUY", "reasoning": "ok"}')
    calls = []
    oracle = make_oracle(fake, decision_callback=calls.append)

    decision = oracle.decide_buy(_buy_request())

    assert decision.decision == "BUY"
    assert len(fake.requests) == 2
    retry_prompt = fake.payload(1)["messages"][1]["content"]
    assert "INVALID" in retry_prompt
    assert "I think I'll buy it" in retry_prompt
    assert calls[0]["used_fallback"] is False


def test_llm_falls_back_after_two_bad_answers(make_oracle):
    fake = FakeLLM("nope", '{"decision": 42}')
    calls = []
    oracle = make_oracle(fake, decision_callback=calls.append)

    decision = oracle.decide_buy(_buy_request(money=149, price=100))

    assert decision.decision == "PASS"
    assert decision.reasoning.startswith("Fallback")
    assert len(fake.requests) == 2
    assert calls[0]["used_fallback"] is True
    assert calls[0]["decision_kind"] == "BUY_DECISION"
    assert calls[0]["error"]


def test_llm_falls_back_on_http_error(make_oracle):
    fake = FakeLLM(httpx.Response(500, json={"error": "boom"}), httpx.Response(503))

    decision = make_oracle(fake).decide_buy(_buy_request(money=1000))

    assert decision.decision == "BUY"
    assert decision.reasoning == "Fallback: Have enough money with buffer"


def test_llm_falls_back_on_empty_choices(make_oracle):
    fake = FakeLLM(httpx.Response(200, json={"choices": []}), _completion(""))

    decision = make_oracle(fake).decide_trade(_trade_request())

    assert decision.reasoning == "Fallback: Not trading"


def test_llm_trade_offer_is_capped_at_cash(make_oracle):
    fake = FakeLLM('{"shouldTrade": true, "offerAmount": 900, "reasoning": "Need the set"}')

    decision = make_oracle(fake).decide_trade(_trade_request(money=300))

    assert decision.should_trade
    assert decision.offer_amount == 300


def test_llm_chat_message(make_oracle):
    fake = FakeLLM('"' + "Ha! " * 50 + '"')
    request = DecisionRequest(
        decision_kind=DecisionKind.CHAT_MESSAGE,
        player=PlayerContext(name="Gemma 2", money=100),
        board_context=BoardContext(event="Rent paid", details="$600 on United States"),
        model_identifier="gemma2-9b-it",
    )

    message = make_oracle(fake).chat_message(request)

    assert message.startswith("Ha!")
    assert len(message) <= 120
    assert "response_format" not in fake.payload()


def test_llm_chat_falls_back_to_default_line(make_oracle):
    fake = FakeLLM(httpx.Response(500))
    request = DecisionRequest(decision_kind=DecisionKind.CHAT_MESSAGE, player=PlayerContext(name="x", money=0))

    assert make_oracle(fake).chat_message(request) == "Interesting move."


def test_llm_close_leaves_injected_client_open(make_oracle):
    fake = FakeLLM()
    oracle = make_oracle(fake)
    client = oracle.client

    oracle.close()

    assert not client.is_closed


# Request builders and personas


def test_build_buy_request(basic_game, update_player, own):
    state = own(basic_game, 0, 6)
    state = update_player(state, 0, position=7)

    request = build_buy_request(state, 0, "gemma2-9b-it")

    assert request.decision_kind == DecisionKind.BUY_DECISION
    assert request.player.name == "Alice"
    assert request.player.property_count == 1
    ctx = request.board_context
    assert ctx.tile_name == "Argentina"
    assert ctx.price == 100
    assert ctx.base_rent == 6
    assert (ctx.group_owned, ctx.group_size) == (1, 3)
    assert ctx.opponents == 1
    assert request.model_identifier == "gemma2-9b-it"


def test_build_trade_request_names_owner(basic_game, own):
    state = own(basic_game, 0, 7)

    request = build_trade_request(state, 1, 7)

    assert request.board_context.owner_name == "Alice"
    assert request.model_identifier == DEFAULT_MODEL_ID


def test_build_chat_request(basic_game):
    request = build_chat_request(basic_game, 1, "Passed GO", "Collected $200")

    assert request.decision_kind == DecisionKind.CHAT_MESSAGE
    assert request.board_context.event == "Passed GO"


def test_personas():
    assert display_name("llama-3.3-70b-versatile") == "Llama 3.3"
    assert display_name("my-local-model") == "my-local-model"
    assert get_persona("unknown") == get_persona(DEFAULT_MODEL_ID)
    assert seat_names(["gemma2-9b-it", "gemma2-9b-it", "llama-3.1-8b-instant"]) == [
        "Gemma 2",
        "Gemma 2 2",
        "Llama 8B",
    ]
