"""Pitch-class primitives: note-name parsing, chroma lookup and transposition."""

import re
from dataclasses import dataclass
from typing import Final, Literal

AccidentalBias = Literal["sharp", "flat"]

SEMITONES_PER_OCTAVE: Final[int] = 12
PERFECT_FOURTH: Final[int] = 5  # semitones

# Chromatic pitch class names (index 0 = C)
SHARP_NAMES: Final[tuple[str, ...]] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)
FLAT_NAMES: Final[tuple[str, ...]] = (
    "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
)

#: Staff order of the natural letters, used to stack notes upwards.
LETTERS: Final[str] = "CDEFGAB"

_LETTER_CHROMA: Final[dict[str, int]] = {
    "C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11,
}
_ACCIDENTAL_OFFSET: Final[dict[str, int]] = {"": 0, "#": 1, "##": 2, "b": -1, "bb": -2}

_NOTE_RE = re.compile(r"^([A-Ga-g])(##|#|bb|b)?(-?\d+)?$")


@dataclass(frozen=True)
class ParsedNote:
    """
    A note name split into its parts.

    Attributes:
        letter:     Upper-case natural letter, "A".."G".
        accidental: "", "#", "##", "b" or "bb".
        octave:     Scientific octave number, or None when absent.
    """

    letter: str
    accidental: str
    octave: int | None = None

    @property
    def name(self) -> str:
        """Pitch-class name without octave, e.g. 'Eb'."""
        return f"{self.letter}{self.accidental}"

    @property
    def chroma(self) -> int:
        return (_LETTER_CHROMA[self.letter] + _ACCIDENTAL_OFFSET[self.accidental]) % SEMITONES_PER_OCTAVE

    @property
    def step(self) -> int:
        """Index of the letter within C D E F G A B."""
        return LETTERS.index(self.letter)


def parse_note(text: str) -> ParsedNote | None:
    """
    Parse a note name with an optional octave ("C", "f#", "Bb3", "E##5").

    Returns:
        ParsedNote, or None if *text* is not a note name.
    """
    if not isinstance(text, str):
        return None
    match = _NOTE_RE.match(text.strip())
    if not match:
        return None
    letter, accidental, octave = match.groups()
    return ParsedNote(
        letter=letter.upper(),
        accidental=accidental or "",
        octave=int(octave) if octave is not None else None,
    )


def chroma(name: str) -> int | None:
    """Pitch class (0-11) of a note name, or None if it cannot be parsed."""
    parsed = parse_note(name)
    return parsed.chroma if parsed is not None else None


def pitch_name(pitch_class: int, bias: AccidentalBias = "sharp") -> str:
    """Chromatic spelling of a pitch class from the fixed sharp or flat table."""
    table = FLAT_NAMES if bias == "flat" else SHARP_NAMES
    return table[pitch_class % SEMITONES_PER_OCTAVE]


def transpose(name: str, semitones: int, bias: AccidentalBias = "sharp") -> str | None:
    """
    Move a note name by a number of semitones.

    The result is spelled from the chromatic table for *bias*; callers that
    need key-aware spelling pass it through the note speller afterwards.
    """
    pitch_class = chroma(name)
    if pitch_class is None:
        return None
    return pitch_name(pitch_class + semitones, bias)
