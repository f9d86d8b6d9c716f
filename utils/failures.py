# utils/failures.py
from dataclasses import dataclass
from enum import Enum


class FailureKind(Enum):
    SPEAKING_AS = "SpeakingAsError"
    FORMAT = "FormatError"
    SKILL_NOT_FOUND = "SkillNotFoundError"
    PROCESSING = "ProcessingError"


@dataclass(frozen=True)
class Failure:
    """
    A skill-check stage that could not produce its value.
    Stages return one of these instead of raising; the dispatcher turns it
    into a private notice for the player.
    """
    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
