"""KeyCatalog: the supported major/minor keys and their diatonic spellings."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final, Literal

from chordfinder.errors import KeyCatalogError
from chordfinder.pitch import AccidentalBias, chroma

logger = logging.getLogger(__name__)

Mode = Literal["major", "minor"]

MODES: Final[tuple[str, ...]] = ("major", "minor")
SCALE_LENGTH: Final[int] = 7


@dataclass(frozen=True)
class KeyDefinition:
    """
    One key of the catalog.

    Attributes:
        id:           Tonic note name, e.g. "F#".
        mode:         "major" or "minor".
        scale:        The seven scale-degree spellings, degree 1 first.
        accidental:   Preferred accidental for notes outside the scale.
        diatonic_map: Read-only chroma -> diatonic spelling lookup, derived
                      from *scale* on construction.
    """

    id: str
    mode: Mode
    scale: tuple[str, ...]
    accidental: AccidentalBias
    diatonic_map: Mapping[int, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        mapping: dict[int, str] = {}
        for note in self.scale:
            pitch_class = chroma(note)
            if pitch_class is not None:
                mapping[pitch_class] = note
        object.__setattr__(self, "diatonic_map", MappingProxyType(mapping))

    @property
    def label(self) -> str:
        """Display name, e.g. 'Bb minor'."""
        return f"{self.id} {self.mode}"

    @property
    def tonic_chroma(self) -> int:
        pitch_class = chroma(self.id)
        return pitch_class if pitch_class is not None else 0


# ── Literal scale tables ─────────────────────────────────────────────────────
# Spellings are curated by hand: C# major needs E#/B#, Cb major needs Cb/Fb.

MAJOR_SCALES: Final[list[tuple[str, tuple[str, ...], AccidentalBias]]] = [
    ("C", ("C", "D", "E", "F", "G", "A", "B"), "sharp"),
    ("G", ("G", "A", "B", "C", "D", "E", "F#"), "sharp"),
    ("D", ("D", "E", "F#", "G", "A", "B", "C#"), "sharp"),
    ("A", ("A", "B", "C#", "D", "E", "F#", "G#"), "sharp"),
    ("E", ("E", "F#", "G#", "A", "B", "C#", "D#"), "sharp"),
    ("B", ("B", "C#", "D#", "E", "F#", "G#", "A#"), "sharp"),
    ("F#", ("F#", "G#", "A#", "B", "C#", "D#", "E#"), "sharp"),
    ("C#", ("C#", "D#", "E#", "F#", "G#", "A#", "B#"), "sharp"),
    ("F", ("F", "G", "A", "Bb", "C", "D", "E"), "flat"),
    ("Bb", ("Bb", "C", "D", "Eb", "F", "G", "A"), "flat"),
    ("Eb", ("Eb", "F", "G", "Ab", "Bb", "C", "D"), "flat"),
    ("Ab", ("Ab", "Bb", "C", "Db", "Eb", "F", "G"), "flat"),
    ("Db", ("Db", "Eb", "F", "Gb", "Ab", "Bb", "C"), "flat"),
    ("Gb", ("Gb", "Ab", "Bb", "Cb", "Db", "Eb", "F"), "flat"),
    ("Cb", ("Cb", "Db", "Eb", "Fb", "Gb", "Ab", "Bb"), "flat"),
]

MINOR_SCALES: Final[list[tuple[str, tuple[str, ...], AccidentalBias]]] = [
    ("A", ("A", "B", "C", "D", "E", "F", "G"), "sharp"),
    ("E", ("E", "F#", "G", "A", "B", "C", "D"), "sharp"),
    ("B", ("B", "C#", "D", "E", "F#", "G", "A"), "sharp"),
    ("F#", ("F#", "G#", "A", "B", "C#", "D", "E"), "sharp"),
    ("C#", ("C#", "D#", "E", "F#", "G#", "A", "B"), "sharp"),
    ("G#", ("G#", "A#", "B", "C#", "D#", "E", "F#"), "sharp"),
    ("D#", ("D#", "E#", "F#", "G#", "A#", "B", "C#"), "sharp"),
    ("A#", ("A#", "B#", "C#", "D#", "E#", "F#", "G#"), "sharp"),
    ("D", ("D", "E", "F", "G", "A", "Bb", "C"), "flat"),
    ("G", ("G", "A", "Bb", "C", "D", "Eb", "F"), "flat"),
    ("C", ("C", "D", "Eb", "F", "G", "Ab", "Bb"), "flat"),
    ("F", ("F", "G", "Ab", "Bb", "C", "Db", "Eb"), "flat"),
    ("Bb", ("Bb", "C", "Db", "Eb", "F", "Gb", "Ab"), "flat"),
    ("Eb", ("Eb", "F", "Gb", "Ab", "Bb", "Cb", "Db"), "flat"),
    ("Ab", ("Ab", "Bb", "Cb", "Db", "Eb", "Fb", "Gb"), "flat"),
]

#: Root order offered to users; roots absent from the catalog are skipped.
ORDERED_MAJOR_ROOTS: Final[tuple[str, ...]] = (
    "C", "C#", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B", "Cb", "Db", "Gb",
)
ORDERED_MINOR_ROOTS: Final[tuple[str, ...]] = (
    "A", "A#", "B", "C", "C#", "D", "Eb", "E", "F", "F#", "G", "G#",
)


def _build_definitions() -> list[KeyDefinition]:
    definitions = [
        KeyDefinition(id=root, mode="major", scale=scale, accidental=bias)
        for root, scale, bias in MAJOR_SCALES
    ]
    definitions += [
        KeyDefinition(id=root, mode="minor", scale=scale, accidental=bias)
        for root, scale, bias in MINOR_SCALES
    ]
    return definitions


def validate_key_definition(key: KeyDefinition) -> None:
    """
    Check the structural invariants of a single key.

    Raises:
        KeyCatalogError: On an unknown mode/accidental, a scale that is not
                         exactly seven parseable notes, or two degrees that
                         share a pitch class.
    """
    if key.mode not in MODES:
        raise KeyCatalogError(f"{key.id}: unknown mode '{key.mode}'.")
    if key.accidental not in ("sharp", "flat"):
        raise KeyCatalogError(f"{key.label}: unknown accidental bias '{key.accidental}'.")
    if len(key.scale) != SCALE_LENGTH:
        raise KeyCatalogError(
            f"{key.label}: scale has {len(key.scale)} notes, expected {SCALE_LENGTH}."
        )
    unparsable = [note for note in key.scale if chroma(note) is None]
    if unparsable:
        raise KeyCatalogError(f"{key.label}: cannot read scale notes {unparsable}.")
    if len(key.diatonic_map) != SCALE_LENGTH:
        raise KeyCatalogError(f"{key.label}: scale degrees collide in pitch class.")
    if chroma(key.scale[0]) != key.tonic_chroma:
        raise KeyCatalogError(f"{key.label}: first scale degree is not the tonic.")


class KeyCatalog:
    """
    Immutable, validated collection of KeyDefinitions indexed by (root, mode).

    Build one at start-up (see ``default_catalog``) and hand it to whatever
    needs key lookups; there is no process-wide instance.
    """

    def __init__(self, definitions: Iterable[KeyDefinition]) -> None:
        self._definitions: tuple[KeyDefinition, ...] = tuple(definitions)
        if not self._definitions:
            raise KeyCatalogError("A key catalog needs at least one key.")

        index: dict[tuple[str, str], KeyDefinition] = {}
        for key in self._definitions:
            validate_key_definition(key)
            if (key.id, key.mode) in index:
                raise KeyCatalogError(f"Duplicate key definition for {key.label}.")
            index[(key.id, key.mode)] = key
        self._index = MappingProxyType(index)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def default(self) -> KeyDefinition:
        """The first catalog entry, used when a lookup misses."""
        return self._definitions[0]

    def find(self, root: str, mode: str) -> KeyDefinition | None:
        """Exact lookup; None when (root, mode) is not in the catalog."""
        return self._index.get((root, mode))

    def get(self, root: str, mode: str) -> KeyDefinition:
        """
        Look up a key, falling back to the catalog default on a miss.

        Interactive callers only offer valid roots. Use ``find`` to detect
        unknown keys instead.
        """
        key = self.find(root, mode)
        if key is None:
            logger.warning(
                "Unknown key %s %s; falling back to %s", root, mode, self.default.label
            )
            return self.default
        return key

    def roots(self, mode: str) -> list[str]:
        """Roots available in *mode*, in presentation order."""
        ordered = ORDERED_MINOR_ROOTS if mode == "minor" else ORDERED_MAJOR_ROOTS
        available = [key.id for key in self._definitions if key.mode == mode]
        roots = [root for root in ordered if root in available]
        roots += [root for root in available if root not in roots]
        return roots

    def __iter__(self) -> Iterator[KeyDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, tuple) and len(item) == 2:
            return item in self._index
        return False


def default_catalog() -> KeyCatalog:
    """Build the standard 15 major + 15 minor key catalog."""
    return KeyCatalog(_build_definitions())
