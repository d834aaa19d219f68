"""FunctionAnalyzer: scale degree, Roman numeral and harmonic function of a chord."""

import re
from dataclasses import asdict, dataclass
from typing import Any, Final, Literal

from chordfinder.key_catalog import KeyDefinition
from chordfinder.pitch import PERFECT_FOURTH, SEMITONES_PER_OCTAVE, chroma, transpose

HarmonicFunction = Literal["tonic", "subdominant", "dominant", "borrowed", "secondary-dominant"]
FunctionColor = Literal["green", "blue", "red"]

DOMINANT_QUALITY: Final[str] = "dominant"
DIMINISHED_MARK: Final[str] = "°"

ROMAN_NUMERALS: Final[tuple[str, ...]] = ("I", "II", "III", "IV", "V", "VI", "VII")

#: Degrees that take a lower-case numeral, and the one that is diminished.
_MINOR_QUALITY_DEGREES: Final[dict[str, tuple[set[int], int]]] = {
    "major": ({2, 3, 6}, 7),
    "minor": ({1, 4, 5}, 2),
}

#: Shared by both modes.
_DEGREE_FUNCTIONS: Final[dict[int, tuple[HarmonicFunction, FunctionColor]]] = {
    1: ("tonic", "green"),
    3: ("tonic", "green"),
    6: ("tonic", "green"),
    2: ("subdominant", "blue"),
    4: ("subdominant", "blue"),
    5: ("dominant", "red"),
    7: ("dominant", "red"),
}

#: Natural minor, semitones above the tonic.
PARALLEL_MINOR_INTERVALS: Final[tuple[int, ...]] = (0, 2, 3, 5, 7, 8, 10)


@dataclass(frozen=True)
class BorrowedLabel:
    roman: str
    color: FunctionColor
    description: str


#: Parallel-minor degree -> label. Degrees 2 and 5 share their root with the
#: major scale and are never reported as borrowed.
BORROWED_CHORDS: Final[dict[int, BorrowedLabel]] = {
    3: BorrowedLabel("bIII", "green", "Flat mediant borrowed from the parallel minor"),
    4: BorrowedLabel("iv", "blue", "Minor subdominant borrowed from the parallel minor"),
    6: BorrowedLabel("bVI", "blue", "Flat submediant borrowed from the parallel minor"),
    7: BorrowedLabel("bVII", "red", "Flat subtonic borrowed from the parallel minor"),
}

_ROOT_RE = re.compile(r"^([A-Ga-g])(##|#|bb|b)?")
_STRIP_RE = re.compile(r"[(),\s]")
# Sevenths that are not dominant: major, minor, minor-major, diminished, half-diminished.
_NON_DOMINANT_SEVENTH_RE = re.compile(r"maj7|ma7|M7|Δ|min7|m7|dim7|o7|°|ø")


@dataclass(frozen=True)
class ChordFunctionResult:
    """
    Harmonic reading of one chord in one key.

    Attributes:
        function:       Functional category.
        roman:          Roman-numeral label, e.g. "vii°", "V/ii", "bVI".
        color:          Display colour tied to the category.
        scale_degree:   Degree of the chord root in the key (1-7), or None
                        when the root is outside the scale.
        chord_root:     Root as read from the symbol, e.g. "F#".
        borrowed_from:  "minor" for chords borrowed from the parallel minor.
        targets_degree: Degree resolved to by a secondary dominant.
        description:    Human-readable explanation for the special cases.
    """

    function: HarmonicFunction
    roman: str
    color: FunctionColor
    scale_degree: int | None
    chord_root: str
    borrowed_from: str | None = None
    targets_degree: int | None = None
    description: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output, without the unset optional fields."""
        return {name: value for name, value in asdict(self).items() if value is not None}


# ── Building blocks ──────────────────────────────────────────────────────────

def extract_chord_root(symbol: str) -> str | None:
    """
    Read the leading note name of a chord symbol ("f#m7b5" -> "F#").

    Returns:
        Root with an upper-case letter, or None if the symbol does not start
        with a note name.
    """
    if not symbol or not isinstance(symbol, str):
        return None
    match = _ROOT_RE.match(_STRIP_RE.sub("", symbol))
    if not match:
        return None
    letter, accidental = match.groups(default="")
    return f"{letter.upper()}{accidental}"


def get_scale_degree(note: str, key: KeyDefinition) -> int | None:
    """1-based degree of *note* in the key's scale, compared by pitch class."""
    pitch_class = chroma(note)
    if pitch_class is None:
        return None
    for index, scale_note in enumerate(key.scale):
        if chroma(scale_note) == pitch_class:
            return index + 1
    return None


def generate_roman_numeral(scale_degree: int, mode: str) -> str:
    """
    Roman numeral for a diatonic triad on *scale_degree*.

    Major: ii iii vi lower-case, vii°. Minor: i iv v lower-case, ii°.
    """
    if not 1 <= scale_degree <= len(ROMAN_NUMERALS):
        return "N/A"

    roman = ROMAN_NUMERALS[scale_degree - 1]
    lower_degrees, diminished_degree = _MINOR_QUALITY_DEGREES.get(mode, (set(), 0))
    if scale_degree == diminished_degree:
        return roman.lower() + DIMINISHED_MARK
    if scale_degree in lower_degrees:
        return roman.lower()
    return roman


def get_harmonic_function(scale_degree: int) -> tuple[HarmonicFunction, FunctionColor]:
    return _DEGREE_FUNCTIONS.get(scale_degree, ("tonic", "green"))


def is_dominant_seventh(symbol: str, quality: str | None = None) -> bool:
    """
    Decide whether a chord has dominant-seventh quality.

    The structured *quality* reported by the chord library is authoritative
    when present. Without it the symbol text is inspected: a "7" that is not
    part of a major, minor, diminished or half-diminished seventh.
    """
    if quality is not None:
        return quality == DOMINANT_QUALITY
    cleaned = _STRIP_RE.sub("", symbol or "")
    return "7" in cleaned and not _NON_DOMINANT_SEVENTH_RE.search(cleaned)


# ── Special cases ────────────────────────────────────────────────────────────

def _secondary_dominant(
    chord_root: str,
    scale_degree: int | None,
    key: KeyDefinition,
) -> ChordFunctionResult | None:
    if scale_degree == 5:
        return None

    target = transpose(chord_root, PERFECT_FOURTH, key.accidental)
    if target is None:
        return None

    target_degree = get_scale_degree(target, key)
    if target_degree is None or target_degree == 1:
        return None
    target_note = key.scale[target_degree - 1]

    target_roman = generate_roman_numeral(target_degree, key.mode)
    return ChordFunctionResult(
        function="secondary-dominant",
        roman=f"V/{target_roman}",
        color="red",
        scale_degree=scale_degree,
        chord_root=chord_root,
        targets_degree=target_degree,
        description=f"Secondary dominant resolving to {target_roman} ({target_note})",
    )


def _borrowed_chord(chord_root: str, key: KeyDefinition) -> ChordFunctionResult | None:
    if key.mode != "major":
        return None

    root_chroma = chroma(chord_root)
    if root_chroma is None:
        return None
    offset = (root_chroma - key.tonic_chroma) % SEMITONES_PER_OCTAVE
    if offset not in PARALLEL_MINOR_INTERVALS or root_chroma in key.diatonic_map:
        return None

    label = BORROWED_CHORDS.get(PARALLEL_MINOR_INTERVALS.index(offset) + 1)
    if label is None:
        return None

    return ChordFunctionResult(
        function="borrowed",
        roman=label.roman,
        color=label.color,
        scale_degree=None,
        chord_root=chord_root,
        borrowed_from="minor",
        description=label.description,
    )


# ── Public API ───────────────────────────────────────────────────────────────

def analyze_chord_function(
    symbol: str,
    key: KeyDefinition,
    quality: str | None = None,
) -> ChordFunctionResult | None:
    """
    Classify a chord symbol (or bare root) within *key*.

    Order of precedence: secondary dominant, diatonic degree, chord borrowed
    from the parallel minor (major keys only). A chord that fits none of
    these yields None, which means "no function to display" rather than an
    error.

    Args:
        symbol:  Chord symbol or root name, e.g. "A7", "Bdim", "Ab".
        key:     Key to analyse against.
        quality: Structured chord quality from the chord library, when known
                 (e.g. "dominant"); otherwise the symbol text is used.
    """
    if key is None:
        return None

    chord_root = extract_chord_root(symbol)
    if chord_root is None:
        return None

    scale_degree = get_scale_degree(chord_root, key)

    if is_dominant_seventh(symbol, quality):
        secondary = _secondary_dominant(chord_root, scale_degree, key)
        if secondary is not None:
            return secondary

    if scale_degree is not None:
        harmonic_function, color = get_harmonic_function(scale_degree)
        return ChordFunctionResult(
            function=harmonic_function,
            roman=generate_roman_numeral(scale_degree, key.mode),
            color=color,
            scale_degree=scale_degree,
            chord_root=chord_root,
        )

    return _borrowed_chord(chord_root, key)
