"""Data models for rendered chord sheets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VexflowNote:
    """A single VexFlow note or chord token."""

    keys: list[str]
    duration: str
    accidentals: list[str | None]


@dataclass(frozen=True)
class VexflowMeasure:
    """
    One chord on the grand staff.

    Attributes:
        symbol: Chord symbol printed above the treble staff.
        roman:  Roman-numeral label printed below it, "" when there is none.
        color:  Function colour name ("green", "blue", "red") or "".
    """

    treble: list[VexflowNote]
    bass: list[VexflowNote]
    symbol: str = ""
    roman: str = ""
    color: str = ""


@dataclass(frozen=True)
class ScoreDocument:
    """Neutral score representation consumed by non-Verovio renderers."""

    title: str
    key_signature: str
    time_signature: str
    beats: int
    beat_value: int
    measures: list[VexflowMeasure]
