"""Runtime defaults and filesystem locations."""

import os
from pathlib import Path
from typing import Final

import click

APP_NAME: Final[str] = "chordfinder"

DEFAULT_KEY_ROOT: Final[str] = "C"
DEFAULT_KEY_MODE: Final[str] = "major"

HISTORY_LIMIT: Final[int] = 20               # chord symbols kept, newest first
PROGRESSION_HISTORY_LIMIT: Final[int] = 20   # saved progressions kept
CANDIDATE_LIMIT: Final[int] = 3              # chord guesses shown for note input
MIN_NOTES_FOR_DETECTION: Final[int] = 2

DEFAULT_OCTAVE: Final[int] = 4  # Middle C octave, root of every rendered chord

HOME_ENV_VAR: Final[str] = "CHORDFINDER_HOME"
HISTORY_FILENAME: Final[str] = "history.json"


def data_dir() -> Path:
    """
    Directory holding chordfinder's persisted state.

    ``$CHORDFINDER_HOME`` wins when set; otherwise the platform-specific
    application directory reported by click is used.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME))


def default_history_path() -> Path:
    return data_dir() / HISTORY_FILENAME
