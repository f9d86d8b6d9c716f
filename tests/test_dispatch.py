"""
Tests for the skill check dispatcher: routing, speaker lookup and failures.
"""

import logging
from unittest.mock import MagicMock

import pytest

from utils.dispatch import ChatEvent, SkillCheckDispatcher, event_kind
from utils.failures import FailureKind
from utils.sheets import Character
from utils.skills import Tier


@pytest.fixture
def dispatcher(store, registry) -> SkillCheckDispatcher:
    return SkillCheckDispatcher("!r ", store, registry)


def _event(content, player_id="1001", who="Purple Smart"):
    return ChatEvent(kind=event_kind(content), content=content, player_id=player_id, who=who)


class TestRouting:

    def test_plain_chat_is_ignored(self, dispatcher):
        assert dispatcher.handle(_event("hello everypony")) is None

    def test_other_commands_are_ignored(self, dispatcher):
        assert dispatcher.handle(_event("!char Twilight")) is None

    def test_non_api_events_are_ignored(self, dispatcher):
        event = ChatEvent(kind="general", content="I said !r spell", player_id="1001")
        assert dispatcher.handle(event) is None

    def test_prefix_is_configurable(self, store, registry):
        d = SkillCheckDispatcher("!rim ", store, registry)
        assert d.handle(_event("!r spell")) is None
        assert d.handle(_event("!rim spell")).payload.skill_name == "spell"

    def test_empty_prefix_rejected(self, store, registry):
        with pytest.raises(ValueError):
            SkillCheckDispatcher("", store, registry)


class TestSkillCheck:

    def test_success(self, dispatcher):
        out = dispatcher.handle(_event('!r Mathematics +1 "+2 if used as part of a spell"'))
        assert not out.private
        assert out.sender == "Twilight Sparkle"
        payload = out.payload
        assert payload.char_name == "Twilight Sparkle"
        assert payload.skill_name == "mathematics"
        assert payload.tier is Tier.TRAINED
        assert payload.notes == "+2 if used as part of a spell"
        assert payload.result == "{{ 3d6d1 +1, 12 + 1d0}kl1, 2 + 1d0}kh1  +4[mind] + 0"

    def test_shortened_name_and_stored_notes(self, dispatcher):
        out = dispatcher.handle(_event('!r spell "quietly"'))
        assert out.payload.tier is Tier.IMPROVED
        assert out.payload.notes == "+1 when reading from a book\nquietly"
        assert "4d6d2 +1," in out.payload.result

    def test_success_logs_roll_template(self, dispatcher, caplog):
        with caplog.at_level(logging.INFO, logger="utils.dispatch"):
            dispatcher.handle(_event("!r persuasion"))
        assert "&{template:skillcheck} {{charName=Twilight Sparkle}}" in caplog.text
        assert "{{greater=true}}" in caplog.text


class TestFailures:

    def test_not_speaking_as_anyone(self, dispatcher):
        out = dispatcher.handle(_event("!r spell", player_id="2002", who="Spike"))
        assert out.private
        assert out.payload is None
        assert out.failure.kind is FailureKind.SPEAKING_AS
        assert out.text.startswith("Error processing roll: !r spell")

    def test_active_character_without_sheet(self, store):
        registry = MagicMock()
        registry.get_active.return_value = "Discord"
        out = SkillCheckDispatcher("!r ", store, registry).handle(_event("!r chaos"))
        assert out.failure.kind is FailureKind.SPEAKING_AS
        assert "Discord" in out.failure.message

    def test_unknown_skill(self, dispatcher, caplog):
        with caplog.at_level(logging.WARNING, logger="utils.dispatch"):
            out = dispatcher.handle(_event("!r flying +2"))
        assert out.private
        assert out.failure.kind is FailureKind.SKILL_NOT_FOUND
        assert "!r flying +2" in caplog.text
        assert "SkillNotFoundError" in caplog.text

    def test_bad_format(self, dispatcher):
        out = dispatcher.handle(_event("!r +2"))
        assert out.failure.kind is FailureKind.FORMAT
        assert "Expected format" in out.text

    def test_unexpected_errors_become_private_notices(self, registry):
        store = MagicMock()
        store.find_character_by_identity.return_value = Character(id="Trixie", name="Trixie")
        store.find_character_attributes.side_effect = OSError("disk on fire")
        out = SkillCheckDispatcher("!r ", store, registry).handle(_event("!r magic"))
        assert out.private
        assert out.failure.kind is FailureKind.PROCESSING
        assert "disk on fire" in out.failure.message


def test_event_kind():
    assert event_kind("!r spell") == "api"
    assert event_kind("r spell") == "general"
    assert event_kind("") == "general"
