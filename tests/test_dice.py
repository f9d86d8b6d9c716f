"""
Tests for the roll expression evaluator.
"""

import random

import pytest

from utils.compose import roll_expression
from utils.dice import evaluate
from utils.skills import GoverningAttribute, SkillRecord, Tier


class LoadedDice:
    """Returns the given faces in order, ignoring the requested range."""

    def __init__(self, *faces):
        self.faces = list(faces)

    def randint(self, lo, hi):
        return self.faces.pop(0)


class TestEvaluate:

    def test_plain_math(self):
        assert evaluate("2 + 3 - 1").total == 4

    def test_dice_sum(self):
        result = evaluate("2d6", LoadedDice(3, 5))
        assert result.total == 8
        assert result.details == ("2d6 → [3, 5] = 8",)

    def test_drop_lowest(self):
        result = evaluate("4d6d2", LoadedDice(1, 6, 2, 5))
        assert result.total == 11
        assert result.details == ("4d6d2 → [~~1~~, 6, ~~2~~, 5] = 11",)

    def test_keep_highest_and_lowest(self):
        assert evaluate("3d6kh1", LoadedDice(2, 6, 4)).total == 6
        assert evaluate("3d6kl1", LoadedDice(2, 6, 4)).total == 2

    def test_d0_is_zero(self):
        assert evaluate("12 + 1d0").total == 12

    def test_group_keep_lowest(self):
        assert evaluate("{5, 12}kl1").total == 5
        assert evaluate("{15, 12}kl1").total == 12

    def test_group_keep_highest(self):
        assert evaluate("{-3, 2}kh1").total == 2

    def test_labels_are_ignored(self):
        assert evaluate("1 +1 [G]  +3[mind] + 0").total == 5

    def test_parentheses_and_negation(self):
        assert evaluate("-(2 + 3) + 10").total == 5

    @pytest.mark.parametrize("expr", ["", "2d6 +", "{1, 2", "2 * 3", "(1 + 2", "abc"])
    def test_bad_expressions(self, expr):
        with pytest.raises(ValueError):
            evaluate(expr)

    def test_dice_limits(self):
        with pytest.raises(ValueError):
            evaluate("500d6")
        with pytest.raises(ValueError):
            evaluate("1d5000")


class TestSkillCheckRolls:
    """The composed skill check expression always clamps to 2..12 before flat terms."""

    def _skill(self, tier):
        return SkillRecord("Spellcasting", GoverningAttribute("mind", 4), tier, misc_bonus=1)

    @pytest.mark.parametrize("tier", list(Tier))
    @pytest.mark.parametrize("adv_dis", [-20, -3, 0, 3, 20])
    def test_clamped(self, tier, adv_dis):
        expr = roll_expression(self._skill(tier), adv_dis)
        bonus = 1 if tier is Tier.GREATER else 0
        rng = random.Random(adv_dis)
        for _ in range(50):
            total = evaluate(expr, rng).total
            assert 2 + bonus + 5 <= total <= 12 + bonus + 5

    def test_huge_advantage_hits_the_ceiling(self):
        expr = roll_expression(self._skill(Tier.UNTRAINED), 30)
        assert evaluate(expr, LoadedDice(1, 1)).total == 12 + 5

    def test_huge_drawback_hits_the_floor(self):
        expr = roll_expression(self._skill(Tier.TRAINED), -30)
        assert evaluate(expr, LoadedDice(6, 6, 6)).total == 2 + 5

    def test_trained_drops_lowest(self):
        expr = roll_expression(self._skill(Tier.TRAINED), 0)
        # 3d6d1 of 1, 4, 5 keeps 9; +4 mind +1 misc
        assert evaluate(expr, LoadedDice(1, 4, 5)).total == 14
