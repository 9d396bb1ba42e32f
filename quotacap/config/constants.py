"""Constants and default values for the Dynamic Quota Cap add-on."""

from __future__ import annotations

DEFAULT_DEBUG_ENABLED = True

# Cap applied when a category has no entry of its own
DEFAULT_QUOTA_CAP = 4000

# -1 means "no cap"
DISABLED_QUOTA_CAP = -1

DEFAULT_CAP_ENABLED = True

# Cap values above this are accepted but reported
MAX_REASONABLE_QUOTA = 1_000_000

DEFAULT_CATEGORY_WORD = "Constellation"

# --- Store sections ---

SECTION_GENERAL = "General"
SECTION_QUOTA_CAPS = "Quota Caps"
SECTION_QUOTA_CAP_TOGGLES = "Quota Cap Toggles"

# --- Store keys and descriptions ---

KEY_ENABLE_DEBUG = "EnableDebug"
CAP_KEY_FORMAT = "{name}_Cap"
ENABLED_KEY_FORMAT = "{name}_Enabled"

DESCRIPTION_ENABLE_DEBUG = "Toggle the debug stuff"
CAP_DESCRIPTION_FORMAT = "Quota cap for {name} {word}"
ENABLED_DESCRIPTION_FORMAT = "Enable quota cap for {name} {word}"

# --- External files (LethalConstellations) ---

CATEGORY_WORD_FILE = "com.github.darmuh.LethalConstellations.cfg"
CATEGORY_LIST_FILE = "LethalConstellations_Generated.cfg"
CATEGORY_WORD_MARKER = "ConstellationWord = "

DEFAULT_STORE_FILE = "com.example.dynamicquotacap.yaml"
CORRUPT_STORE_SUFFIX = ".corrupt"

# --- Generation retry policy ---

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 5
