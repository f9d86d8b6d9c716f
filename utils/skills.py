# utils/skills.py
"""
Skill lookup over a character's flat attribute list.

Skill attributes live in three repeating fieldsets (skillsmind, skillsbody,
skillsheart) and are named

    repeating_skills{mind|body|heart}_{row id}_skill{M|B|H}{field}

where every attribute of one skill shares the row id. The fields are:

    skillX       the skill's name (text)
    skillXT      Skill Training checkbox (1 when checked)
    skillXI      Improved Skill Training checkbox
    skillXG      Greater Skill Training checkbox
    skillXMisc   other flat modifiers (number)
    skillXConds  free notes, e.g. conditional modifiers
    skillXAdv    built-in Advantages (number)
    skillXDis    built-in Drawbacks (number)
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum

from utils.failures import Failure, FailureKind
from utils.sheets import AttributeRecord, Character

log = logging.getLogger(__name__)

_KEY_RE = re.compile(
    r"^repeating_skills(?:mind|body|heart)_(?P<index>.+)_skill(?P<kind>[MBH])(?P<field>T|I|G|Misc|Conds|Adv|Dis)?$"
)

KIND_ATTRIBUTE = {"M": "mind", "B": "body", "H": "heart"}

NAME_FIELD = ""


class Tier(Enum):
    UNTRAINED = "untrained"
    TRAINED = "trained"
    IMPROVED = "improved"
    GREATER = "greater"


@dataclass(frozen=True)
class SkillKey:
    group_index: str
    kind: str    # M, B or H
    field: str   # "" for the name field

    @classmethod
    def parse(cls, attr_name: str) -> "SkillKey | None":
        m = _KEY_RE.match(attr_name or "")
        if not m:
            return None
        return cls(m.group("index"), m.group("kind"), m.group("field") or NAME_FIELD)

    def sibling(self, field: str) -> "SkillKey":
        return SkillKey(self.group_index, self.kind, field)


@dataclass(frozen=True)
class GoverningAttribute:
    name: str
    value: int


@dataclass(frozen=True)
class SkillRecord:
    name: str
    governing_attribute: GoverningAttribute
    tier: Tier
    misc_bonus: int = 0
    adv_dis_baseline: int = 0
    notes: str = ""


class SkillIndex:
    """Skill attributes of one character keyed by (row id, kind, field)."""

    def __init__(self, attributes):
        self.by_key: dict[SkillKey, AttributeRecord] = {}
        self.names: list[tuple[SkillKey, AttributeRecord]] = []
        for attr in attributes:
            if "skill" not in attr.name:
                continue
            key = SkillKey.parse(attr.name)
            if key is None:
                continue
            # a repeated key keeps its first attribute, same as a linear scan would
            if key in self.by_key:
                continue
            self.by_key[key] = attr
            if key.field == NAME_FIELD:
                self.names.append((key, attr))

    def find(self, query: str) -> tuple[SkillKey, AttributeRecord] | None:
        """First skill (in store order) whose name contains query, case-insensitive."""
        q = (query or "").lower()
        for key, attr in self.names:
            if q in str(attr.current).lower():
                return key, attr
        return None

    def get(self, key: SkillKey, field: str):
        attr = self.by_key.get(key.sibling(field))
        return None if attr is None else attr.current


def _to_int(value, default: int = 0) -> int:
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except (ValueError, OverflowError):
        try:
            return int(float(str(value).strip()))
        except (ValueError, OverflowError):
            return default


def _checked(value) -> bool:
    return _to_int(value, default=0) == 1


def _tier(trained: bool, improved: bool, greater: bool) -> Tier:
    if greater:
        return Tier.GREATER
    if improved:
        return Tier.IMPROVED
    if trained:
        return Tier.TRAINED
    return Tier.UNTRAINED


def resolve_skill(store, character: Character, query: str) -> SkillRecord | Failure:
    """
    Find the character's skill whose name contains `query` and collect the
    rest of its fieldset into a SkillRecord.

    When several skills match, the first one in the store's order wins.
    """
    index = SkillIndex(store.find_character_attributes(character.id))
    found = index.find(query)
    if found is None:
        return Failure(
            FailureKind.SKILL_NOT_FOUND,
            f"{character.name} has no skill matching '{query}'.",
        )

    key, name_attr = found
    attr_name = KIND_ATTRIBUTE[key.kind]
    attr_value = store.get_character_attribute_value(character.id, attr_name)
    if attr_value is None:
        log.debug("%s has no %s attribute; using 0", character.name, attr_name)

    record = SkillRecord(
        name=str(name_attr.current),
        governing_attribute=GoverningAttribute(attr_name, attr_value or 0),
        tier=_tier(
            trained=_checked(index.get(key, "T")),
            improved=_checked(index.get(key, "I")),
            greater=_checked(index.get(key, "G")),
        ),
        misc_bonus=_to_int(index.get(key, "Misc")),
        adv_dis_baseline=_to_int(index.get(key, "Adv")) - _to_int(index.get(key, "Dis")),
        notes=str(index.get(key, "Conds") or ""),
    )
    log.debug("resolved '%s' for %s -> %s", query, character.name, record)
    return record
