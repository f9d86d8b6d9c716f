# utils/dispatch.py
"""
Turns a chat message into a skill check.

    "!r Mathematics +1 "+2 if used as part of a spell""
        -> speaker's character -> RollRequest -> SkillRecord -> SkillCheckPayload

Anything that goes wrong becomes a private notice to the player who typed
the command; nothing is ever posted to the channel on failure.
"""
import logging
from dataclasses import dataclass

from utils.compose import SkillCheckPayload, compose_roll
from utils.failures import Failure, FailureKind
from utils.parsing import parse_command
from utils.skills import resolve_skill
from utils.sheets import Character

log = logging.getLogger(__name__)

API_MARK = "!"


@dataclass(frozen=True)
class ChatEvent:
    kind: str          # "api" for !commands, anything else is ignored
    content: str
    player_id: str
    who: str = ""


@dataclass(frozen=True)
class Outbound:
    sender: str
    text: str = ""
    payload: SkillCheckPayload | None = None
    private: bool = False
    failure: Failure | None = None


def event_kind(content: str) -> str:
    return "api" if (content or "").startswith(API_MARK) else "general"


class SkillCheckDispatcher:
    def __init__(self, prefix: str, store, registry):
        if not prefix:
            raise ValueError("skill check prefix can't be empty")
        self.prefix = prefix
        self.store = store
        self.registry = registry

    def handle(self, event: ChatEvent) -> Outbound | None:
        """
        Process one event. Returns None for events that aren't skill checks,
        otherwise the message to send.
        """
        if event.kind != "api" or self.prefix not in event.content:
            return None

        try:
            outcome = self._process(event)
        except Exception as e:
            log.exception("skill check crashed for %r", event.content)
            outcome = Failure(FailureKind.PROCESSING, f"{type(e).__name__}: {e}")

        if isinstance(outcome, Failure):
            log.warning("skill check failed [%s] %s | command: %r",
                        outcome.kind.value, outcome.message, event.content)
            return Outbound(
                sender="ERROR",
                text=f"Error processing roll: {event.content}\n{outcome.message}",
                private=True,
                failure=outcome,
            )
        return outcome

    def _process(self, event: ChatEvent) -> Outbound | Failure:
        character = self.resolve_speaker(event.player_id)
        if isinstance(character, Failure):
            return character

        body = event.content.replace(self.prefix, "", 1)
        request = parse_command(body)
        if isinstance(request, Failure):
            return request

        skill = resolve_skill(self.store, character, request.skill_query)
        if isinstance(skill, Failure):
            return skill

        payload = compose_roll(character.name, skill, request)
        log.info("%s rolls %s: %s", character.name, request.skill_query, payload.to_template())
        return Outbound(sender=character.name, payload=payload)

    def resolve_speaker(self, player_id: str) -> Character | Failure:
        """The character this player is currently speaking as."""
        speaking_as = self.registry.get_active(player_id)
        if not speaking_as:
            return Failure(FailureKind.SPEAKING_AS, "You are not currently speaking as a character.")

        character = (self.store.find_character_by_identity(speaking_as)
                     or self.store.find_character_by_name(speaking_as))
        if character is None:
            return Failure(FailureKind.SPEAKING_AS, f"Bad speakingas value: {speaking_as}")
        return character
