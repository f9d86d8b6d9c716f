# utils/parsing.py
import re
from dataclasses import dataclass

from utils.failures import Failure, FailureKind

USAGE = 'Expected format: {skill name} [+/- Advantage/Disadvantage modifier] ["any notes about the roll"]'

_MOD_RE = re.compile(r"([+-])\s*(\d+)")

# 1: skill name (anything but + - \ "), 2: the run of +N/-N tokens, 3: quoted note
_COMMAND_RE = re.compile(r'([^+\-\\"]+)((?:\s*[+-]\s*\d+)*)\s*(?:"(.*?)")?')


@dataclass(frozen=True)
class RollRequest:
    skill_query: str
    modifier_delta: int = 0
    note: str | None = None


def parse_modifier_total(expr: str | None) -> int:
    """
    Sum every +N / -N found in expr, e.g. "+2 -1 + 4" -> 5.
    Anything that isn't a signed number is skipped.
    """
    if not expr:
        return 0
    total = 0
    for sign, digits in _MOD_RE.findall(expr):
        if sign == "+":
            total += int(digits)
        else:
            total -= int(digits)
    return total


def parse_command(body: str) -> RollRequest | Failure:
    """
    Split the text after the command prefix into a RollRequest.

      'mathematics +1 "+2 if used as part of a spell"'
        -> RollRequest('mathematics', 1, '+2 if used as part of a spell')
    """
    m = _COMMAND_RE.match(body or "")
    if not m:
        return Failure(FailureKind.FORMAT, f"Bad roll format. {USAGE}")

    query = m.group(1).strip().lower()
    if not query:
        return Failure(FailureKind.FORMAT, f"Missing skill name. {USAGE}")

    return RollRequest(
        skill_query=query,
        modifier_delta=parse_modifier_total(m.group(2)),
        note=m.group(3),
    )
