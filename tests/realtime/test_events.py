"""Tests for board_relay/realtime/events.py — vocabulary and event parsing."""

import pytest

from board_relay.realtime.events import (
    GameEvent,
    RelayError,
    RelayEvent,
    UnknownEventError,
    parse_event,
)


# ── GameEvent enum ──────────────────────────────────────────────────────

class TestGameEvent:
    def test_all_events_defined(self):
        expected = {
            "update-players", "start-game", "next-turn", "message",
            "settlement", "road", "hide-color", "dice-roll", "host-quit",
        }
        assert {e.value for e in GameEvent} == expected

    def test_arity(self):
        assert GameEvent.START_GAME.arity == 2
        assert GameEvent.DICE_ROLL.arity == 2
        assert GameEvent.HOST_QUIT.arity == 0
        assert GameEvent.MESSAGE.arity == 1

    def test_every_event_has_arity(self):
        for event in GameEvent:
            assert event.arity in (0, 1, 2)

    def test_from_name(self):
        assert GameEvent.from_name("dice-roll") is GameEvent.DICE_ROLL
        assert GameEvent.from_name("hide-color") is GameEvent.HIDE_COLOR

    def test_from_name_unknown(self):
        assert GameEvent.from_name("trade-offer") is None
        assert GameEvent.from_name("DICE_ROLL") is None


# ── RelayEvent ──────────────────────────────────────────────────────────

class TestRelayEvent:
    def test_minimal_event(self):
        e = RelayEvent(event=GameEvent.HOST_QUIT, sender_id="a", session_id="global")
        assert e.args == ()
        assert e.name == "host-quit"
        assert e.is_known

    def test_raw_name(self):
        e = RelayEvent(event="trade-offer", sender_id="a", session_id="global", args=(1,))
        assert e.name == "trade-offer"
        assert not e.is_known

    def test_frozen(self):
        e = RelayEvent(event=GameEvent.ROAD, sender_id="a", session_id="global")
        with pytest.raises(AttributeError):
            e.sender_id = "b"


# ── parse_event ─────────────────────────────────────────────────────────

class TestParseEvent:
    def test_every_sample_parses(self, sample_events):
        for name, args in sample_events.items():
            event = parse_event(name, args, sender_id="a", session_id="g")
            assert event.name == name
            assert event.args == args

    def test_dice_roll(self):
        event = parse_event("dice-roll", (3, 5), sender_id="a", session_id="table-1")
        assert event.event is GameEvent.DICE_ROLL
        assert event.sender_id == "a"
        assert event.session_id == "table-1"
        assert event.args == (3, 5)

    def test_payload_is_not_copied(self):
        roster = [{"name": "Ada"}]
        event = parse_event("update-players", (roster,), sender_id="a", session_id="g")
        assert event.args[0] is roster

    def test_unknown_name_strict(self):
        with pytest.raises(UnknownEventError, match="trade-offer"):
            parse_event("trade-offer", (), sender_id="a", session_id="g")

    def test_unknown_name_permissive(self):
        event = parse_event(
            "trade-offer", ({"give": "ore"},), sender_id="a", session_id="g", strict=False
        )
        assert event.event == "trade-offer"
        assert event.args == ({"give": "ore"},)

    def test_unexpected_argument_count_kept(self):
        event = parse_event("message", ({"text": "hi"}, "extra"), sender_id="a", session_id="g")
        assert event.event is GameEvent.MESSAGE
        assert event.args == ({"text": "hi"}, "extra")

    def test_missing_arguments_kept(self):
        event = parse_event("dice-roll", (6,), sender_id="a", session_id="g")
        assert event.event is GameEvent.DICE_ROLL
        assert event.args == (6,)

    def test_errors_are_value_errors(self):
        assert issubclass(UnknownEventError, RelayError)
        assert issubclass(RelayError, ValueError)
