"""
Pytest configuration: make the bot's top-level packages importable from tests.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
