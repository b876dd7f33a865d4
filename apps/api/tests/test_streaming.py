import asyncio
import json

import pytest

from chat.classifier import MessageClassifier
from chat.log import ChatLog
from chat.normalizer import normalize
from chat.rules import APOLOGY_TEXT, INTERRUPTED_TEXT, SYSTEM_DIRECTIVE, TECHNICAL_RESPONSE, TIMEOUT_TEXT
from chat.streaming import InvalidTransition, StreamingResponder, StreamState
from chat.suggestions import SuggestionEngine
from models import Speaker
from conftest import HANG, FakeChannel, FakeConnector, closed


def make_responder(connector, idle_timeout=1.0):
    log = ChatLog()
    responder = StreamingResponder(
        log, MessageClassifier(), SuggestionEngine(),
        connect=connector, app_id="zen-test", idle_timeout=idle_timeout,
    )
    return log, responder


def run(responder, text="How are you today?", count=1):
    return asyncio.run(responder.respond(text, "conv-1", count))


def test_fragments_coalesce_into_one_turn():
    channel = FakeChannel("Hel", "lo wor", "ld.")
    log, responder = make_responder(FakeConnector(channel))

    assert run(responder) == StreamState.FINALIZED
    assert len(log) == 1
    assert log.last().text == normalize("Hello world.")
    assert log.last().speaker.value == "assistant"


def test_request_frame_is_sent_once():
    channel = FakeChannel("ok")
    _, responder = make_responder(FakeConnector(channel))
    run(responder, text="I had a long day")

    assert len(channel.sent) == 1
    frame = json.loads(channel.sent[0])
    assert frame == {
        "conversationId": "conv-1",
        "appId": "zen-test",
        "systemPrompt": SYSTEM_DIRECTIVE,
        "message": "I had a long day",
    }


def test_structured_fragments_and_done_frame():
    channel = FakeChannel(
        json.dumps({"type": "message", "message": "Breathe in ,"}),
        json.dumps({"type": "content", "content": " breathe out ."}),
        json.dumps({"type": "done"}),
        "never read",
    )
    log, responder = make_responder(FakeConnector(channel))

    assert run(responder) == StreamState.FINALIZED
    assert [t.text for t in log.turns] == ["Breathe in, breathe out."]
    assert channel.closed


def test_done_sentinel_finalizes():
    channel = FakeChannel("Rest well.", "[DONE]")
    log, responder = make_responder(FakeConnector(channel))

    assert run(responder) == StreamState.FINALIZED
    assert len(log) == 1
    assert channel.closed


def test_malformed_fragment_is_kept_as_text():
    channel = FakeChannel('{"type": "message", "message": "You are ', '{not json', closed(1000))
    log, responder = make_responder(FakeConnector(channel))

    run(responder)
    assert "{not json" in log.last().text


def test_suggestions_follow_cumulative_text():
    channel = FakeChannel("It sounds like you ", "feel exhausted.")
    log, responder = make_responder(FakeConnector(channel))

    run(responder, text="long week")
    assert [c.title for c in log.last().suggestions][0] == "Sleep Sounds"


def test_abnormal_close_without_fragments():
    channel = FakeChannel(closed(1011, "server error"))
    log, responder = make_responder(FakeConnector(channel))

    assert run(responder) == StreamState.FINALIZED
    assert [t.text for t in log.turns] == [INTERRUPTED_TEXT]


def test_lost_connection_counts_as_abnormal():
    channel = FakeChannel("partial", closed(None))
    log, responder = make_responder(FakeConnector(channel))

    run(responder)
    assert [t.text for t in log.turns] == ["partial", INTERRUPTED_TEXT]


def test_normal_close_adds_nothing_extra():
    channel = FakeChannel("All good.", closed(1000))
    log, responder = make_responder(FakeConnector(channel))

    run(responder)
    assert [t.text for t in log.turns] == ["All good."]


def test_error_frame_fails_with_apology():
    channel = FakeChannel("Let me", json.dumps({"type": "error", "message": "upstream 500"}))
    log, responder = make_responder(FakeConnector(channel))

    assert run(responder) == StreamState.FAILED
    assert log.last().text == APOLOGY_TEXT
    assert channel.closed


def test_connect_failure_fails_with_apology():
    log, responder = make_responder(FakeConnector(error=ConnectionRefusedError("refused")))

    assert run(responder) == StreamState.FAILED
    assert [t.text for t in log.turns] == [APOLOGY_TEXT]


def test_transport_error_mid_stream():
    channel = FakeChannel("Hello", OSError("reset by peer"))
    log, responder = make_responder(FakeConnector(channel))

    assert run(responder) == StreamState.FAILED
    assert [t.text for t in log.turns] == ["Hello", APOLOGY_TEXT]


def test_unexpected_error_fails_and_next_cycle_still_runs():
    broken = FakeChannel("Hello", RuntimeError("decoder blew up"))
    healthy = FakeChannel("Back again.")
    log, responder = make_responder(FakeConnector(broken, healthy))

    assert run(responder) == StreamState.FAILED
    assert broken.closed
    assert [t.text for t in log.turns] == ["Hello", APOLOGY_TEXT]

    assert run(responder, count=2) == StreamState.FINALIZED
    assert log.last().text == "Back again."


def test_silent_server_times_out():
    channel = FakeChannel(HANG)
    log, responder = make_responder(FakeConnector(channel), idle_timeout=0.05)

    assert run(responder) == StreamState.FAILED
    assert [t.text for t in log.turns] == [TIMEOUT_TEXT]
    assert channel.closed


def test_intercept_never_connects():
    connector = FakeConnector()
    log, responder = make_responder(connector)

    assert run(responder, text="how do I write a python function") == StreamState.FINALIZED
    assert connector.opened == []
    assert log.last().text == normalize(TECHNICAL_RESPONSE)


def test_new_cycle_closes_prior_channel():
    first = FakeChannel("one")
    second = FakeChannel("two")
    connector = FakeConnector(first, second)
    log, responder = make_responder(connector)

    async def scenario():
        await responder.respond("hi", "conv-1", 1)
        # simulate a channel still open from the previous cycle
        responder._channel = first
        first.closed = False
        await responder.respond("hi again", "conv-1", 2)

    asyncio.run(scenario())
    assert first.closed
    assert [t.text for t in log.turns] == ["one", "two"]


def test_fragment_after_foreign_turn_starts_new_turn():
    log, responder = make_responder(FakeConnector())
    responder._live_turn = log.add("partial", Speaker.ASSISTANT)
    responder._buffer = "partial"
    log.add("interjection", Speaker.ASSISTANT)
    responder._absorb(" more", "hi", 1)
    assert [t.text for t in log.turns] == ["partial", "interjection", "more"]


def test_cannot_start_cycle_while_streaming():
    _, responder = make_responder(FakeConnector())
    responder.state = StreamState.STREAMING
    with pytest.raises(InvalidTransition):
        asyncio.run(responder.respond("hi", "conv-1", 1))
