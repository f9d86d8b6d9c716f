# utils/players.py
import json
import logging
import os
import threading

from utils.sheets import Character, SheetStore, norm_name, read_cfg, write_cfg

log = logging.getLogger(__name__)

REG_PATH = "data/players.json"
_lock = threading.Lock()


class PlayerRegistry:
    """
    Which characters each Discord user has linked, and which one they are
    currently speaking as ("active"). Stored as

        {"<user id>": {"characters": ["Twilight Sparkle"], "active": "Twilight Sparkle"}}

    Ownership itself lives in each sheet's [info] owner_id.
    """

    def __init__(self, path: str = REG_PATH, store: SheetStore | None = None):
        self.path = path
        self.store = store or SheetStore()

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                log.warning("player registry %s is not valid JSON: %s", self.path, e)
                return {}

    def _save(self, data: dict) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)

    def character(self, char_name: str) -> Character | None:
        return (self.store.find_character_by_identity(char_name)
                or self.store.find_character_by_name(char_name))

    def owns_char(self, user_id: int, char_name: str) -> bool:
        character = self.character(char_name)
        return character is not None and character.owner_id == str(user_id)

    def list_chars(self, user_id: int) -> list[str]:
        with _lock:
            data = self._load()
            return data.get(str(user_id), {}).get("characters", [])

    def get_active(self, user_id: int) -> str | None:
        with _lock:
            data = self._load()
            return data.get(str(user_id), {}).get("active") or None

    def add_char(self, user_id: int, char_name: str) -> None:
        """Index char under user, but only if the .coe says they own it."""
        if not self.owns_char(user_id, char_name):
            raise PermissionError("You do not own this character.")
        with _lock:
            data = self._load()
            entry = data.setdefault(str(user_id), {"characters": [], "active": None})
            if not any(norm_name(c) == norm_name(char_name) for c in entry["characters"]):
                entry["characters"].append(char_name)
            if not entry["active"]:
                entry["active"] = char_name
            self._save(data)

    def set_active(self, user_id: int, char_name: str) -> bool:
        if not self.owns_char(user_id, char_name):
            return False
        with _lock:
            data = self._load()
            entry = data.get(str(user_id), {})
            match = next((c for c in entry.get("characters", []) if norm_name(c) == norm_name(char_name)), None)
            if match is None:
                return False
            entry["active"] = match
            self._save(data)
            return True

    def claim_char(self, user_id: int, char_name: str) -> bool:
        """Claim a .coe that has no owner. Returns True if claim succeeds."""
        character = self.character(char_name)
        if character is None or character.owner_id is not None:
            return False
        path = self.store.path_for(character.id)
        cfg = read_cfg(path)
        if not cfg.has_section("info"):
            cfg.add_section("info")
        cfg["info"]["owner_id"] = str(user_id)
        write_cfg(path, cfg)
        self.add_char(user_id, character.name)
        return True
