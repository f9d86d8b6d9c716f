# utils/dice.py
"""
Evaluate the Roll20-style roll expressions built for skill checks.

Supported:
  12, 1d0, 2d6           numbers and NdS dice (d0 always rolls 0)
  4d6d2                  drop the lowest 2 (also dl2, dh2)
  4d6kh2, 4d6kl2         keep highest / lowest 2
  {a, b}kl1, {a, b}kh1   keep lowest / highest of several sub-rolls
  ( ... ), + and -       grouping and arithmetic
  +3[mind]               [labels] are ignored for the math
"""
import random
import re
from dataclasses import dataclass

MAX_DICE = 100
MAX_SIDES = 1000

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<dice>(?P<count>\d*)d(?P<sides>\d+)(?:(?P<op>kh|kl|dh|dl|d)(?P<n>\d+))?)
      | (?P<num>\d+)
      | (?P<label>\[[^\]]*\])
      | (?P<close>\}(?:(?P<gop>kh|kl)(?P<gn>\d+))?)
      | (?P<sym>[-+,{()])
    )""",
    re.X | re.I,
)


@dataclass(frozen=True)
class RollResult:
    expression: str
    total: int
    details: tuple[str, ...] = ()


def _tokenize(expr: str) -> list[re.Match]:
    toks = []
    pos = 0
    while pos < len(expr):
        if not expr[pos:].strip():
            break
        m = _TOKEN_RE.match(expr, pos)
        if not m or m.end() == pos:
            raise ValueError(f"Unexpected '{expr[pos:].strip()[:10]}' in roll.")
        if m.group("label") is None:
            toks.append(m)
        pos = m.end()
    return toks


def _keep(values: list[int], op: str | None, n: int) -> list[int]:
    """Return the values that count toward the total."""
    if not op:
        return list(values)
    op = op.lower()
    ordered = sorted(values)
    if op in ("d", "dl"):
        return ordered[n:]
    if op == "dh":
        return ordered[: max(len(ordered) - n, 0)]
    if op == "kh":
        return ordered[max(len(ordered) - n, 0):] if n else []
    if op == "kl":
        return ordered[:n]
    raise ValueError(f"Unknown keep/drop '{op}'.")


def _fmt_rolls(rolls: list[int], kept: list[int]) -> str:
    left = list(kept)
    out = []
    for r in rolls:
        if r in left:
            left.remove(r)
            out.append(str(r))
        else:
            out.append(f"~~{r}~~")
    return ", ".join(out)


class _Evaluator:
    def __init__(self, expr: str, rng: random.Random):
        self.toks = _tokenize(expr)
        self.pos = 0
        self.rng = rng
        self.details: list[str] = []

    def _peek(self):
        return self.toks[self.pos] if self.pos < len(self.toks) else None

    def _sym(self, tok) -> str | None:
        return tok.group("sym") if tok is not None else None

    def run(self) -> int:
        if not self.toks:
            raise ValueError("Empty roll.")
        total = self.expr()
        if self._peek() is not None:
            raise ValueError(f"Unexpected '{self._peek().group().strip()}' in roll.")
        return total

    def expr(self) -> int:
        total = self.term()
        while self._sym(self._peek()) in ("+", "-"):
            sign = self._sym(self._peek())
            self.pos += 1
            value = self.term()
            total = total + value if sign == "+" else total - value
        return total

    def term(self) -> int:
        tok = self._peek()
        if tok is None:
            raise ValueError("Roll ends too early.")
        self.pos += 1

        if tok.group("num") is not None:
            return int(tok.group("num"))

        if tok.group("dice") is not None:
            return self.dice(tok)

        sym = self._sym(tok)
        if sym == "-":
            return -self.term()
        if sym == "(":
            value = self.expr()
            if self._sym(self._peek()) != ")":
                raise ValueError("Missing ')' in roll.")
            self.pos += 1
            return value
        if sym == "{":
            return self.group()

        raise ValueError(f"Unexpected '{tok.group().strip()}' in roll.")

    def dice(self, tok) -> int:
        count = int(tok.group("count")) if tok.group("count") else 1
        sides = int(tok.group("sides"))
        if count > MAX_DICE:
            raise ValueError(f"Too many dice ({count}); the limit is {MAX_DICE}.")
        if sides > MAX_SIDES:
            raise ValueError(f"Too many sides ({sides}); the limit is {MAX_SIDES}.")
        n = int(tok.group("n")) if tok.group("n") else 0

        rolls = [self.rng.randint(1, sides) if sides else 0 for _ in range(count)]
        kept = _keep(rolls, tok.group("op"), n)
        total = sum(kept)
        if sides:
            self.details.append(f"{tok.group('dice')} → [{_fmt_rolls(rolls, kept)}] = {total}")
        return total

    def group(self) -> int:
        values = [self.expr()]
        while self._sym(self._peek()) == ",":
            self.pos += 1
            values.append(self.expr())

        tok = self._peek()
        if tok is None or tok.group("close") is None:
            raise ValueError("Missing '}' in roll.")
        self.pos += 1

        op = tok.group("gop")
        n = int(tok.group("gn")) if tok.group("gn") else 0
        kept = _keep(values, op, n)
        total = sum(kept)
        if op:
            shown = ", ".join(str(v) for v in values)
            self.details.append(f"{{{shown}}}{op.lower()}{n} → {total}")
        return total


def evaluate(expr: str, rng: random.Random | None = None) -> RollResult:
    """
    Roll `expr` and return its total plus one breakdown line per dice roll
    and keep/drop group. Raises ValueError on anything it can't read.
    """
    ev = _Evaluator(expr or "", rng or random.Random())
    total = ev.run()
    return RollResult(expression=expr, total=total, details=tuple(ev.details))
