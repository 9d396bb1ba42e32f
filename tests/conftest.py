"""Shared fixtures: LethalConstellations config files and a settings store."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import pytest

from quotacap.config.constants import CATEGORY_LIST_FILE, CATEGORY_WORD_FILE
from quotacap.config.registry import CategoryConfigRegistry
from quotacap.config.store import ConfigStore


def write_word_file(config_dir: Path, word: Optional[str] = "Sector") -> Path:
    """Write a LethalConstellations main config; ``word=None`` omits the line."""
    lines = [
        "## Settings file was created by plugin LethalConstellations v0.2.6",
        "## Plugin GUID: com.github.darmuh.LethalConstellations",
        "",
        "[General]",
        "",
        "## Word used for constellations",
        "# Setting type: String",
        "# Default value: Constellation",
    ]
    if word is not None:
        lines.append(f"ConstellationWord = {word}")
    path = config_dir / CATEGORY_WORD_FILE
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_list_file(config_dir: Path, names: Iterable[str], word: str = "Sector") -> Path:
    """Write a generated config with one ``[<word> <name>]`` section per name."""
    lines = [
        "## Settings file was created by plugin LethalConstellations v0.2.6",
        "",
        "[Moons]",
        "",
        "IgnoreList = Gordion",
        "",
    ]
    for name in names:
        lines += [
            f"[{word} {name}]",
            "",
            f"## Moons in the {name} {word.lower()}",
            "# Setting type: String",
            "ConstellationMoons = Experimentation, Assurance",
            "",
        ]
    path = config_dir / CATEGORY_LIST_FILE
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


# --- Fixtures ---

@pytest.fixture
def config_dir(tmp_path):
    """Return an empty host config directory."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def store_path(config_dir):
    return config_dir / "com.example.dynamicquotacap.yaml"


@pytest.fixture
def store(store_path):
    return ConfigStore(store_path)


@pytest.fixture
def registry(store):
    registry = CategoryConfigRegistry(store)
    registry.load_configuration()
    return registry
