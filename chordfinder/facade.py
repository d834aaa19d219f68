"""ChordResolutionFacade: turns raw chord or note input into a spelled, analysed result."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Final, Literal

from chordfinder.chord_library import ChordLibrary, PychordLibrary, ResolvedChord
from chordfinder.config import CANDIDATE_LIMIT, MIN_NOTES_FOR_DETECTION
from chordfinder.function_analyzer import ChordFunctionResult, analyze_chord_function
from chordfinder.key_catalog import KeyDefinition
from chordfinder.note_speller import (
    spell_note,
    spell_notes_in_key,
    spell_notes_with_octave_in_key,
    stack_octaves,
)
from chordfinder.pitch import parse_note

LookupStatus = Literal["empty", "invalid", "valid"]
InputType = Literal["chord", "notes"]

PROGRESSION_SEPARATOR: Final[str] = " → "

_CHORD_NOISE_RE = re.compile(r"[(),\s]")
_NOTE_SPLIT_RE = re.compile(r"[,\s]+")
_TRAILING_OCTAVE_RE = re.compile(r"\d+$")
_NOTE_TOKEN_RE = re.compile(r"^[A-Ga-g][#b]?$")


# ── Input helpers ────────────────────────────────────────────────────────────

def sanitize_chord_input(value: str) -> str:
    """Drop parentheses, commas and whitespace: 'C (add9)' -> 'Cadd9'."""
    return _CHORD_NOISE_RE.sub("", value or "")


def strip_octave(note: str) -> str:
    """'C4' -> 'C'."""
    if not note or not isinstance(note, str):
        return ""
    return _TRAILING_OCTAVE_RE.sub("", note).strip()


def is_valid_note(note: str) -> bool:
    """True for a bare note name with at most one accidental ('C', 'f#', 'Db')."""
    if not note or not isinstance(note, str):
        return False
    return bool(_NOTE_TOKEN_RE.match(note.strip()))


def normalize_note(note: str) -> str:
    """'eB' -> 'Eb'."""
    if not note or not isinstance(note, str):
        return ""
    return note[0].upper() + note[1:].lower()


def parse_notes_input(value: str) -> list[str]:
    """Split space- or comma-separated notes and strip their octaves."""
    if not value or not isinstance(value, str):
        return []
    return [strip_octave(token) for token in _NOTE_SPLIT_RE.split(value.strip()) if token]


def detect_input_type(value: str) -> InputType:
    """'notes' when the input holds enough valid note names, otherwise 'chord'."""
    valid = [note for note in parse_notes_input(value) if is_valid_note(note)]
    return "notes" if len(valid) >= MIN_NOTES_FOR_DETECTION else "chord"


# ── Results ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChordLookupResult:
    """
    Outcome of looking up one chord in one key.

    Attributes:
        status:            "empty" for blank input, "invalid" when nothing
                           could be resolved, "valid" otherwise.
        symbol:            Canonical chord symbol (the cleaned input when invalid).
        notes:             Chord tones spelled in the key.
        notes_with_octave: The same tones stacked upwards from octave 4.
        function:          Harmonic function, or None for chords without one.
        quality:           Structured chord quality reported by the library.
    """

    status: LookupStatus
    symbol: str = ""
    notes: tuple[str, ...] = ()
    notes_with_octave: tuple[str, ...] = ()
    function: ChordFunctionResult | None = None
    quality: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"

    @property
    def roman(self) -> str | None:
        return self.function.roman if self.function is not None else None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "symbol": self.symbol,
            "notes": list(self.notes),
            "notes_with_octave": list(self.notes_with_octave),
            "quality": self.quality,
            "function": self.function.as_dict() if self.function is not None else None,
        }


@dataclass(frozen=True)
class CandidateSet:
    """
    Chord guesses for a set of played notes, nothing selected yet.

    Attributes:
        played:     The input notes re-spelled in the key (octaves kept).
        candidates: Up to N valid lookups, best fit first.
    """

    played: tuple[str, ...] = ()
    candidates: tuple[ChordLookupResult, ...] = field(default_factory=tuple)

    @property
    def status(self) -> LookupStatus:
        if not self.played:
            return "empty"
        return "valid" if self.candidates else "invalid"

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "played": list(self.played),
            "candidates": [candidate.as_dict() for candidate in self.candidates],
        }


# ── Facade ───────────────────────────────────────────────────────────────────

class ChordResolutionFacade:
    """
    Single entry point for the presentation layer.

    Wires the chord library (pitches), the note speller (spelling) and the
    function analyzer (harmonic reading) together. Stateless between calls:
    the key is passed with every request.
    """

    def __init__(
        self,
        library: ChordLibrary | None = None,
        candidate_limit: int = CANDIDATE_LIMIT,
    ) -> None:
        """
        Args:
            library:         Chord-symbol source; pychord when omitted.
            candidate_limit: How many chord guesses to return for note input.
        """
        self.library = library if library is not None else PychordLibrary()
        self.candidate_limit = candidate_limit

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_result(self, resolved: ResolvedChord, key: KeyDefinition) -> ChordLookupResult:
        spelled = spell_notes_in_key(resolved.notes, key)
        return ChordLookupResult(
            status="valid",
            symbol=resolved.canonical_symbol,
            notes=tuple(spelled),
            notes_with_octave=tuple(stack_octaves(spelled)),
            function=analyze_chord_function(resolved.canonical_symbol, key, resolved.quality),
            quality=resolved.quality,
        )

    def _spell_played(self, tokens: Iterable[str], key: KeyDefinition) -> list[str]:
        played: list[str] = []
        for token in tokens:
            parsed = parse_note(normalize_note(token))
            if parsed is None:
                continue
            if parsed.octave is None:
                played.append(spell_note(parsed.name, key))
            else:
                played.extend(spell_notes_with_octave_in_key([f"{parsed.name}{parsed.octave}"], key))
        return played

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, raw_input: str, key: KeyDefinition) -> ChordLookupResult:
        """
        Resolve a chord symbol in *key*.

        Returns:
            ChordLookupResult with status "empty", "invalid" or "valid".
        """
        cleaned = sanitize_chord_input(raw_input)
        if not cleaned:
            return ChordLookupResult(status="empty")

        resolved = self.library.resolve_chord_symbol(cleaned)
        if resolved is None or not resolved.notes:
            return ChordLookupResult(status="invalid", symbol=cleaned)

        return self._build_result(resolved, key)

    def detect_candidates(
        self,
        raw_notes: str,
        key: KeyDefinition,
        limit: int | None = None,
    ) -> CandidateSet:
        """
        Suggest chords for space- or comma-separated note names.

        Each candidate is resolved and analysed on its own; the caller picks
        one. Fewer than two valid notes yields an empty candidate list.
        """
        tokens = [token for token in _NOTE_SPLIT_RE.split((raw_notes or "").strip()) if token]
        valid = [normalize_note(note) for note in parse_notes_input(raw_notes) if is_valid_note(note)]
        played = tuple(self._spell_played(tokens, key))

        if len(valid) < MIN_NOTES_FOR_DETECTION:
            return CandidateSet(played=played)

        limit = self.candidate_limit if limit is None else limit
        symbols = self.library.detect_chords_from_notes(valid)[:limit]
        candidates = [self.resolve(symbol, key) for symbol in symbols]
        return CandidateSet(
            played=played,
            candidates=tuple(candidate for candidate in candidates if candidate.is_valid),
        )

    def lookup(self, raw_input: str, key: KeyDefinition) -> ChordLookupResult | CandidateSet:
        """Route note lists to candidate detection and everything else to ``resolve``."""
        if detect_input_type(raw_input) == "notes":
            return self.detect_candidates(raw_input, key)
        return self.resolve(raw_input, key)

    def analyze_progression(
        self, symbols: Iterable[str], key: KeyDefinition
    ) -> list[ChordLookupResult]:
        """Resolve every chord of a progression in the same key."""
        return [self.resolve(symbol, key) for symbol in symbols]

    def annotate_progression(self, symbols: Iterable[str], key: KeyDefinition) -> str:
        """
        One-line progression summary with Roman numerals where known.

        Example:
            "C (I) → Am (vi) → D7 (V/V) → G (V)"
        """
        return self.format_progression(self.analyze_progression(symbols, key))

    @staticmethod
    def format_progression(results: Iterable[ChordLookupResult]) -> str:
        """
        Join already resolved chords into the progression summary.

        Only valid chords with a function carry a numeral. Rejected symbols
        are shown as typed, without one; blank entries are left out.
        """
        parts: list[str] = []
        for result in results:
            if result.status == "empty":
                continue
            if result.is_valid and result.roman is not None:
                parts.append(f"{result.symbol} ({result.roman})")
            else:
                parts.append(result.symbol)
        return PROGRESSION_SEPARATOR.join(parts)
