"""Discover category names from the LethalConstellations config files.

Two files are read from the host's config directory:

* the main config, for the ``ConstellationWord = <word>`` line that names the
  vocabulary the mod uses for its section headers;
* the generated config, whose ``[<word> <name>]`` section headers enumerate
  the categories.

Both files are optional. Bytes that are not valid UTF-8 are replaced, so one
bad byte never hides the rest of a file. Neither method raises on I/O
problems; failures are logged and turned into the default word or an empty
list.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from quotacap.config.constants import (
    CATEGORY_LIST_FILE,
    CATEGORY_WORD_FILE,
    CATEGORY_WORD_MARKER,
    DEFAULT_CATEGORY_WORD,
)

logger = logging.getLogger(__name__)


def extract_category_name(line: str, prefix: str) -> Optional[str]:
    """Return ``<name>`` from a ``[<word> <name>]`` header line, or None.

    ``prefix`` is the ``[<word> `` opening. Lines that do not start with it,
    lack the closing bracket, or carry an empty name yield None.
    """
    if not line.startswith(prefix):
        return None
    line = line.rstrip()
    if not line.endswith("]"):
        return None
    name = line[len(prefix):-1]
    if not name.strip():
        return None
    return name


class CategoryDiscoveryParser:
    """Read the category word and category names from the external config files."""

    def __init__(
        self,
        config_dir: str | Path,
        word_file: str = CATEGORY_WORD_FILE,
        list_file: str = CATEGORY_LIST_FILE,
    ) -> None:
        self.config_dir = Path(config_dir)
        self.word_path = self.config_dir / word_file
        self.list_path = self.config_dir / list_file

    def resolve_category_word(self) -> str:
        """Return the configured category word, or ``Constellation``."""
        try:
            if not self.word_path.exists():
                logger.warning(
                    "Category word file not found at %s, using default '%s'",
                    self.word_path, DEFAULT_CATEGORY_WORD,
                )
                return DEFAULT_CATEGORY_WORD

            with open(self.word_path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    if line.startswith(CATEGORY_WORD_MARKER):
                        word = line[len(CATEGORY_WORD_MARKER):].strip()
                        if not word:
                            logger.warning("Empty category word in %s, using default", self.word_path)
                            return DEFAULT_CATEGORY_WORD
                        logger.info("Found custom category word: %s", word)
                        return word

            logger.warning("Category word not set in %s, using default", self.word_path)
            return DEFAULT_CATEGORY_WORD
        except OSError as e:
            logger.error("Error reading category word from %s: %s", self.word_path, e)
            return DEFAULT_CATEGORY_WORD

    def parse_category_names(self, word: str) -> List[str]:
        """Return category names from ``[<word> <name>]`` headers in file order."""
        names: List[str] = []
        try:
            if not self.list_path.exists():
                logger.warning("Category list file not found at %s", self.list_path)
                return names

            prefix = f"[{word} "
            with open(self.list_path, "r", encoding="utf-8", errors="replace") as f:
                for lineno, line in enumerate(f, 1):
                    if not line.startswith(prefix):
                        continue
                    name = extract_category_name(line, prefix)
                    if name is None:
                        logger.debug("Skipping malformed header at %s:%d: %r", self.list_path, lineno, line.rstrip())
                        continue
                    if name in names:
                        continue
                    names.append(name)
                    logger.info("Found %s: %s", word.lower(), name)
        except OSError as e:
            logger.error("Error parsing category names from %s: %s", self.list_path, e)
            return []

        return names
