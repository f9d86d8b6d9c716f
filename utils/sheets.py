# utils/sheets.py
"""
Character sheets stored as INI files, one `<Name>.coe` per character:

    [info]
    name = Twilight Sparkle
    owner_id = 123456789

    [attributes]
    mind = 4
    body = 2
    heart = 3
    repeating_skillsmind_-MkA1_skillM = Spellcasting
    repeating_skillsmind_-MkA1_skillMT = 1
"""
import configparser
import logging
import os
import re
from dataclasses import dataclass

log = logging.getLogger(__name__)

SHEET_EXT = ".coe"
ATTR_SECTION = "attributes"


@dataclass(frozen=True)
class AttributeRecord:
    name: str
    current: str | int


@dataclass(frozen=True)
class Character:
    id: str
    name: str
    owner_id: str | None = None


def new_cfg() -> configparser.ConfigParser:
    cfg = configparser.ConfigParser(strict=False, interpolation=None)
    cfg.optionxform = str  # preserve key case
    return cfg


def read_cfg(path: str) -> configparser.ConfigParser:
    cfg = new_cfg()
    cfg.read(path, encoding="utf-8")
    return cfg


def write_cfg(path: str, cfg: configparser.ConfigParser) -> None:
    with open(path, "w", encoding="utf-8") as f:
        cfg.write(f)


def get_compat(cfg: configparser.ConfigParser, section: str, option: str, fallback=None):
    if section not in cfg:
        return fallback
    sec = cfg[section]
    if option in sec:
        return sec.get(option)
    opt_lower = option.lower()
    for k, v in sec.items():
        if k.lower() == opt_lower:
            return v
    return fallback


def getint_compat(cfg: configparser.ConfigParser, section: str, option: str, fallback=0):
    val = get_compat(cfg, section, option, fallback=None)
    if val is None or val == "":
        return fallback
    try:
        return int(str(val).strip())
    except (ValueError, OverflowError):
        try:
            return int(float(str(val).strip()))
        except (ValueError, OverflowError):
            return fallback


def sheet_basename(char_name: str) -> str:
    """Map a display name to its sheet filename stem."""
    return (char_name or "").strip().replace(" ", "_")


def norm_name(s: str) -> str:
    """Lowercase and drop everything but letters and digits: "Twilight_Sparkle" == "twilight sparkle"."""
    return re.sub(r"[^a-z0-9]+", "", (s or "").lower())


class SheetStore:
    """Looks characters and their attributes up in a directory of .coe sheets."""

    def __init__(self, root: str = "."):
        self.root = root

    def path_for(self, character_id: str) -> str:
        """Sheet path for a character; the filename match is case-insensitive."""
        fn = f"{sheet_basename(character_id)}{SHEET_EXT}"
        path = os.path.join(self.root, fn)
        if os.path.exists(path):
            return path
        try:
            lowerdir = {f.lower(): f for f in os.listdir(self.root)}
        except OSError:
            return path
        return os.path.join(self.root, lowerdir.get(fn.lower(), fn))

    def _load(self, character_id: str) -> configparser.ConfigParser | None:
        path = self.path_for(character_id)
        if not os.path.exists(path):
            return None
        try:
            return read_cfg(path)
        except configparser.Error as e:
            log.warning("unreadable sheet %s: %s", path, e)
            return None

    def _character(self, character_id: str, cfg: configparser.ConfigParser) -> Character:
        name = get_compat(cfg, "info", "name", fallback="") or character_id.replace("_", " ")
        owner = get_compat(cfg, "info", "owner_id", fallback="") or None
        return Character(id=character_id, name=name, owner_id=owner)

    def sheet_ids(self) -> list[str]:
        try:
            names = sorted(os.listdir(self.root))
        except OSError as e:
            log.warning("can't list sheets in %s: %s", self.root, e)
            return []
        return [os.path.splitext(fn)[0] for fn in names if fn.lower().endswith(SHEET_EXT)]

    def find_character_by_identity(self, identity: str) -> Character | None:
        if not sheet_basename(identity):
            return None
        cfg = self._load(identity)
        if cfg is None:
            return None
        character_id = os.path.splitext(os.path.basename(self.path_for(identity)))[0]
        return self._character(character_id, cfg)

    def characters(self) -> list[Character]:
        out = []
        for character_id in self.sheet_ids():
            cfg = self._load(character_id)
            if cfg is not None:
                out.append(self._character(character_id, cfg))
        return out

    def find_character_by_name(self, name: str) -> Character | None:
        """Case/space/underscore-insensitive match on the file stem or [info] name."""
        target = norm_name(name)
        if not target:
            return None
        for character in self.characters():
            if norm_name(character.id) == target or norm_name(character.name) == target:
                return character
        return None

    def find_characters(self, query: str) -> list[Character]:
        """
        Characters a player could mean by `query`: the exact match if there is
        one, otherwise every sheet whose name contains it.
        """
        exact = self.find_character_by_name(query)
        if exact is not None:
            return [exact]
        target = norm_name(query)
        if not target:
            return []
        return [c for c in self.characters() if target in norm_name(c.name) or target in norm_name(c.id)]

    def find_character_attributes(self, character_id: str) -> list[AttributeRecord]:
        cfg = self._load(character_id)
        if cfg is None or not cfg.has_section(ATTR_SECTION):
            return []
        return [AttributeRecord(k, v) for k, v in cfg.items(ATTR_SECTION)]

    def get_character_attribute_value(self, character_id: str, attribute_name: str) -> int | None:
        cfg = self._load(character_id)
        if cfg is None:
            return None
        return getint_compat(cfg, ATTR_SECTION, attribute_name, fallback=None)
