"""ChordLibrary: chord-symbol parsing and chord detection backed by pychord."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from pychord import Chord, find_chords_from_notes

from chordfinder.pitch import PERFECT_FOURTH, SEMITONES_PER_OCTAVE, chroma

logger = logging.getLogger(__name__)

ChordQuality = Literal[
    "dominant",
    "major",
    "minor",
    "diminished",
    "half-diminished",
    "augmented",
    "suspended",
    "other",
]

# ── Interval names (semitones above the root) ────────────────────────────────
MAJOR_SECOND = 2
MINOR_THIRD = 3
MAJOR_THIRD = 4
DIMINISHED_FIFTH = 6
PERFECT_FIFTH = 7
AUGMENTED_FIFTH = 8
MINOR_SEVENTH = 10


@dataclass(frozen=True)
class ResolvedChord:
    """
    Pitches of a parsed chord symbol.

    Attributes:
        canonical_symbol: The symbol as the library normalises it.
        root:             Root note name.
        notes:            Chord tones as pitch-class names, bass/root first.
        quality:          Structured quality derived from the chord's intervals.
    """

    canonical_symbol: str
    root: str
    notes: tuple[str, ...]
    quality: ChordQuality


def classify_quality(root: str, notes: Iterable[str]) -> ChordQuality:
    """
    Derive a chord quality from the intervals above *root*.

    A minor seventh over a major third (or over a suspended fourth) is
    dominant; extensions and alterations do not change that.
    """
    root_chroma = chroma(root)
    if root_chroma is None:
        return "other"

    intervals: set[int] = set()
    for note in notes:
        pitch_class = chroma(note)
        if pitch_class is not None:
            intervals.add((pitch_class - root_chroma) % SEMITONES_PER_OCTAVE)

    has_minor_third = MINOR_THIRD in intervals
    has_major_third = MAJOR_THIRD in intervals

    if MINOR_SEVENTH in intervals:
        if has_major_third:
            return "dominant"
        if PERFECT_FOURTH in intervals and not has_minor_third:
            return "dominant"
        if has_minor_third and DIMINISHED_FIFTH in intervals and PERFECT_FIFTH not in intervals:
            return "half-diminished"

    if has_major_third:
        if AUGMENTED_FIFTH in intervals and PERFECT_FIFTH not in intervals:
            return "augmented"
        return "major"
    if has_minor_third:
        if DIMINISHED_FIFTH in intervals and PERFECT_FIFTH not in intervals:
            return "diminished"
        return "minor"
    if MAJOR_SECOND in intervals or PERFECT_FOURTH in intervals:
        return "suspended"
    return "other"


class ChordLibrary(ABC):
    """
    Abstract source of chord-symbol knowledge.

    The rest of chordfinder only needs these two questions answered, so a
    different parser (or a test stub) can be dropped in.
    """

    @abstractmethod
    def resolve_chord_symbol(self, text: str) -> ResolvedChord | None:
        """Parse *text*; None when it is not a chord symbol."""

    @abstractmethod
    def detect_chords_from_notes(self, notes: Sequence[str]) -> list[str]:
        """Candidate chord symbols for a set of note names, best first."""


class PychordLibrary(ChordLibrary):
    """ChordLibrary implemented with pychord."""

    def resolve_chord_symbol(self, text: str) -> ResolvedChord | None:
        if not text:
            return None
        symbol = text[0].upper() + text[1:]
        try:
            parsed = Chord(symbol)
            notes = tuple(parsed.components())
        except ValueError as exc:
            logger.debug("pychord rejected %r: %s", text, exc)
            return None

        if not notes:
            return None

        return ResolvedChord(
            canonical_symbol=parsed.chord,
            root=parsed.root,
            notes=notes,
            quality=classify_quality(parsed.root, notes),
        )

    def detect_chords_from_notes(self, notes: Sequence[str]) -> list[str]:
        if not notes:
            return []
        try:
            found = find_chords_from_notes(list(notes))
        except ValueError as exc:
            logger.debug("pychord found no chord for %s: %s", notes, exc)
            return []

        symbols: list[str] = []
        for candidate in found:
            if candidate.chord not in symbols:
                symbols.append(candidate.chord)
        return symbols
