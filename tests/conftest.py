"""
Shared fixtures: a sheets directory with two characters and a player
registry where user 1001 speaks as Twilight Sparkle.
"""

import shutil
from pathlib import Path

import pytest

from utils.players import PlayerRegistry
from utils.sheets import SheetStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sheets_dir(tmp_path: Path) -> Path:
    """Copy the fixture sheets somewhere writable."""
    root = tmp_path / "sheets"
    root.mkdir()
    for sheet in FIXTURES_DIR.glob("*.coe"):
        shutil.copy(sheet, root / sheet.name)
    return root


@pytest.fixture
def store(sheets_dir: Path) -> SheetStore:
    return SheetStore(str(sheets_dir))


@pytest.fixture
def registry(tmp_path: Path, store: SheetStore) -> PlayerRegistry:
    """Registry with user 1001 linked to (and speaking as) Twilight Sparkle."""
    reg = PlayerRegistry(str(tmp_path / "data" / "players.json"), store)
    reg.add_char(1001, "Twilight Sparkle")
    return reg


@pytest.fixture
def twilight(store: SheetStore):
    return store.find_character_by_identity("Twilight Sparkle")
