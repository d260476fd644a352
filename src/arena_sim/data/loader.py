"""
Data loading for stats tables shipped with the package.
"""

import json
from pathlib import Path
from typing import Any, Dict

import toml

STATIC_DIR = Path(__file__).resolve().parent / "static"


class DataLoader:
    """Handles loading game data from JSON and TOML files."""

    def __init__(self, data_dir: Path = STATIC_DIR):
        self.data_dir = Path(data_dir)
        self._cache: Dict[str, Any] = {}

    def load_json(self, filename: str) -> Dict[str, Any]:
        """Load data from a JSON file."""
        if f"json_{filename}" in self._cache:
            return self._cache[f"json_{filename}"]

        filepath = self.data_dir / f"{filename}.json"
        if not filepath.exists():
            raise FileNotFoundError(f"Data file not found: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        self._cache[f"json_{filename}"] = data
        return data

    def load_toml(self, filename: str) -> Dict[str, Any]:
        """Load data from a TOML file."""
        if f"toml_{filename}" in self._cache:
            return self._cache[f"toml_{filename}"]

        filepath = self.data_dir / f"{filename}.toml"
        if not filepath.exists():
            raise FileNotFoundError(f"Data file not found: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            data = toml.load(f)

        self._cache[f"toml_{filename}"] = data
        return data

    def get_hostile_table(self) -> Dict[str, Dict[str, Any]]:
        """The per-type hostile stats table."""
        return self.load_json("hostiles")

    def get_hostile_stats(self, hostile_type: str) -> Dict[str, Any]:
        """Stats for one hostile type; unknown types raise KeyError."""
        table = self.get_hostile_table()
        if hostile_type not in table:
            raise KeyError(f"Unknown hostile type: {hostile_type}")
        return table[hostile_type]

    def clear_cache(self):
        """Clear the data cache."""
        self._cache.clear()


# Shared read-only loader
DATA_LOADER = DataLoader()
