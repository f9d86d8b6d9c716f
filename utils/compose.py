# utils/compose.py
from dataclasses import dataclass

from utils.parsing import RollRequest
from utils.skills import SkillRecord, Tier

NOTE_BREAK = "\n"

# tier -> (dice, sides, dropped lowest)
DICE_POOLS = {
    Tier.UNTRAINED: (2, 6, 0),
    Tier.TRAINED: (3, 6, 1),
    Tier.IMPROVED: (4, 6, 2),
    Tier.GREATER: (4, 6, 2),
}

GREATER_BONUS = "+1 [G] "

ROLL_MIN = 2
ROLL_MAX = 12


@dataclass(frozen=True)
class SkillCheckPayload:
    char_name: str
    skill_name: str
    result: str
    tier: Tier
    notes: str = ""

    @property
    def flags(self) -> dict[str, bool]:
        return {t.value: t is self.tier for t in Tier}

    def to_template(self) -> str:
        """Render as a Roll20 `skillcheck` roll template."""
        out = f"&{{template:skillcheck}} {{{{charName={self.char_name}}}}} "
        out += f"{{{{skillName={self.skill_name}}}}} {{{{result=[[{self.result}]]}}}} "
        out += "".join(f"{{{{{tier}=true}}}} " for tier, on in self.flags.items() if on)
        if self.notes:
            out += f"{{{{notes={self.notes.replace(NOTE_BREAK, '<br>')}}}}}"
        return out


def dice_pool(tier: Tier) -> str:
    count, sides, drop = DICE_POOLS[tier]
    return f"{count}d{sides}d{drop}" if drop else f"{count}d{sides}"


def combine_notes(stored: str, extra: str | None) -> str:
    if stored and extra:
        return stored + NOTE_BREAK + extra
    return stored or extra or ""


def format_adv_dis(total: int) -> str:
    return f"+{total}" if total >= 0 else str(total)


def roll_expression(skill: SkillRecord, adv_dis: int) -> str:
    """
    Build the roll for a skill check, e.g. for a trained skill with +1:

        {{ 3d6d1 +1, 12 + 1d0}kl1, 2 + 1d0}kh1  +3[mind] + 0

    The inner groups keep the dice + Advantages/Drawbacks total between 2
    and 12; the attribute and misc bonus are added after that.
    """
    roll = f"{{{{ {dice_pool(skill.tier)} {format_adv_dis(adv_dis)}, {ROLL_MAX} + 1d0}}kl1, {ROLL_MIN} + 1d0}}kh1 "
    if skill.tier is Tier.GREATER:
        roll += GREATER_BONUS
    attr = skill.governing_attribute
    roll += f" +{attr.value}[{attr.name}] + {skill.misc_bonus}"
    return roll


def compose_roll(char_name: str, skill: SkillRecord, request: RollRequest) -> SkillCheckPayload:
    return SkillCheckPayload(
        char_name=char_name,
        skill_name=request.skill_query,
        result=roll_expression(skill, skill.adv_dis_baseline + request.modifier_delta),
        tier=skill.tier,
        notes=combine_notes(skill.notes, request.note),
    )
