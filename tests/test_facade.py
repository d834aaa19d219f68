"""Tests for ChordResolutionFacade, with a stub library and with pychord."""

from collections.abc import Sequence

import pytest

from chordfinder.chord_library import ChordLibrary, ResolvedChord, classify_quality
from chordfinder.facade import (
    CandidateSet,
    ChordLookupResult,
    ChordResolutionFacade,
    detect_input_type,
    is_valid_note,
    normalize_note,
    parse_notes_input,
    sanitize_chord_input,
    strip_octave,
)
from chordfinder.key_catalog import KeyCatalog, KeyDefinition


class StubLibrary(ChordLibrary):
    """Answers from a fixed symbol table and records detection calls."""

    def __init__(self, chords: dict[str, tuple[str, ...]], detections: Sequence[str] = ()) -> None:
        self.chords = chords
        self.detections = list(detections)
        self.detect_calls: list[list[str]] = []

    def resolve_chord_symbol(self, text: str) -> ResolvedChord | None:
        notes = self.chords.get(text)
        if notes is None:
            return None
        return ResolvedChord(
            canonical_symbol=text,
            root=notes[0] if notes else "",
            notes=notes,
            quality=classify_quality(notes[0], notes) if notes else "other",
        )

    def detect_chords_from_notes(self, notes: Sequence[str]) -> list[str]:
        self.detect_calls.append(list(notes))
        return list(self.detections)


STUB_CHORDS: dict[str, tuple[str, ...]] = {
    "C": ("C", "E", "G"),
    "Am": ("A", "C", "E"),
    "Em#5": ("E", "G", "B#"),
    "Db7": ("Db", "F", "Ab", "Cb"),
    "Empty": (),
}


@pytest.fixture
def stub_facade() -> ChordResolutionFacade:
    return ChordResolutionFacade(StubLibrary(STUB_CHORDS, detections=["C", "Nope", "Am", "Em#5"]))


@pytest.fixture
def facade() -> ChordResolutionFacade:
    return ChordResolutionFacade()


# ── Input helpers ────────────────────────────────────────────────────────────

def test_sanitize_chord_input() -> None:
    assert sanitize_chord_input(" C (add9) ") == "Cadd9"
    assert sanitize_chord_input("G7,") == "G7"
    assert sanitize_chord_input("") == ""


def test_strip_octave_and_normalize() -> None:
    assert strip_octave("C#4") == "C#"
    assert normalize_note("eB") == "Eb"
    assert normalize_note("") == ""


def test_is_valid_note() -> None:
    assert is_valid_note("f#")
    assert is_valid_note("Db")
    assert not is_valid_note("C##")
    assert not is_valid_note("Cm")
    assert not is_valid_note("")


def test_parse_notes_input() -> None:
    assert parse_notes_input("C4, E4  G4") == ["C", "E", "G"]
    assert parse_notes_input("  ") == []


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        ("C E", "notes"),
        ("c, e, g", "notes"),
        ("C4 Eb4 G4", "notes"),
        ("C", "chord"),
        ("Cmaj7", "chord"),
        ("C Xm", "chord"),
        ("", "chord"),
    ],
)
def test_detect_input_type(value: str, kind: str) -> None:
    assert detect_input_type(value) == kind


# ── resolve ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("raw", ["", "   ", "( , )"])
def test_blank_input_is_empty(raw: str, stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    result = stub_facade.resolve(raw, c_major)
    assert result.status == "empty"
    assert result.notes == ()
    assert result.function is None


def test_unknown_symbol_is_invalid(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    result = stub_facade.resolve("Xyz (9)", c_major)
    assert result == ChordLookupResult(status="invalid", symbol="Xyz9")
    assert not result.is_valid


def test_symbol_without_notes_is_invalid(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    assert stub_facade.resolve("Empty", c_major).status == "invalid"


def test_resolve_spells_in_sharp_key(stub_facade: ChordResolutionFacade, catalog: KeyCatalog) -> None:
    result = stub_facade.resolve("Db7", catalog.get("C#", "major"))
    assert result.is_valid
    assert result.notes == ("C#", "E#", "G#", "B")
    assert result.notes_with_octave == ("C#4", "E#4", "G#4", "B4")
    assert result.quality == "dominant"
    assert result.roman == "V/IV"


def test_resolve_stacks_octaves_upwards(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    result = stub_facade.resolve("Am", c_major)
    assert result.notes == ("A", "C", "E")
    assert result.notes_with_octave == ("A4", "C5", "E5")
    assert result.roman == "vi"


def test_result_as_dict(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    data = stub_facade.resolve("C", c_major).as_dict()
    assert data["status"] == "valid"
    assert data["notes"] == ["C", "E", "G"]
    assert data["function"]["roman"] == "I"
    assert ChordLookupResult(status="empty").as_dict()["function"] is None


# ── detect_candidates / lookup ───────────────────────────────────────────────

def test_candidates_keep_only_valid_and_respect_limit(c_major: KeyDefinition) -> None:
    library = StubLibrary(STUB_CHORDS, detections=["C", "Nope", "Am", "Em#5"])
    facade = ChordResolutionFacade(library, candidate_limit=3)
    candidates = facade.detect_candidates("c e g", c_major)

    assert library.detect_calls == [["C", "E", "G"]]
    assert [candidate.symbol for candidate in candidates.candidates] == ["C", "Am"]
    assert candidates.status == "valid"


def test_explicit_limit_overrides_default(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    candidates = stub_facade.detect_candidates("C E G", c_major, limit=1)
    assert [candidate.symbol for candidate in candidates.candidates] == ["C"]


def test_played_notes_are_spelled_with_octaves(catalog: KeyCatalog) -> None:
    library = StubLibrary(STUB_CHORDS)
    facade = ChordResolutionFacade(library)
    candidates = facade.detect_candidates("Gb4 C#3 d", catalog.get("D", "major"))

    assert candidates.played == ("F#4", "C#3", "D")
    assert library.detect_calls == [["Gb", "C#", "D"]]
    assert candidates.candidates == ()
    assert candidates.status == "invalid"


def test_too_few_notes_skip_detection(c_major: KeyDefinition) -> None:
    library = StubLibrary(STUB_CHORDS, detections=["C"])
    facade = ChordResolutionFacade(library)

    assert facade.detect_candidates("Db", c_major) == CandidateSet(played=("C#",))
    assert facade.detect_candidates("", c_major).status == "empty"
    assert library.detect_calls == []


def test_lookup_routes_by_input_type(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    assert isinstance(stub_facade.lookup("C E G", c_major), CandidateSet)
    assert isinstance(stub_facade.lookup("Am", c_major), ChordLookupResult)


def test_candidate_set_as_dict(stub_facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    data = stub_facade.detect_candidates("C E G", c_major).as_dict()
    assert data["played"] == ["C", "E", "G"]
    assert [candidate["symbol"] for candidate in data["candidates"]] == ["C", "Am"]


# ── Progressions ─────────────────────────────────────────────────────────────

def test_annotate_progression(facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    assert (
        facade.annotate_progression(["C", "Am", "D7", "G"], c_major)
        == "C (I) → Am (vi) → D7 (V/V) → G (V)"
    )


def test_annotate_progression_leaves_rejected_chords_unlabelled(
    stub_facade: ChordResolutionFacade, c_major: KeyDefinition
) -> None:
    # Ab and G7 are unknown to the stub library, so they carry no numeral.
    assert stub_facade.annotate_progression(["C", "Ab", "G7", "Hm"], c_major) == "C (I) → Ab → G7 → Hm"


def test_annotate_progression_rejected_by_pychord(
    facade: ChordResolutionFacade, c_major: KeyDefinition
) -> None:
    assert facade.annotate_progression(["Cfoo", "G"], c_major) == "Cfoo → G (V)"


def test_format_progression_reuses_results(
    stub_facade: ChordResolutionFacade, c_major: KeyDefinition
) -> None:
    results = stub_facade.analyze_progression(["Am", "", "Nope", "C"], c_major)
    assert ChordResolutionFacade.format_progression(results) == "Am (vi) → Nope → C (I)"


def test_analyze_progression_keeps_order(facade: ChordResolutionFacade, a_minor: KeyDefinition) -> None:
    results = facade.analyze_progression(["Am", "Xyz", "E7"], a_minor)
    assert [result.status for result in results] == ["valid", "invalid", "valid"]
    assert results[2].roman == "v"


# ── End to end with pychord ──────────────────────────────────────────────────

def test_pychord_secondary_dominant(facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    result = facade.resolve("A7", c_major)
    assert result.notes == ("A", "C#", "E", "G")
    assert result.function is not None
    assert result.function.function == "secondary-dominant"
    assert result.roman == "V/ii"


def test_pychord_flat_key_spelling(facade: ChordResolutionFacade, catalog: KeyCatalog) -> None:
    result = facade.resolve("Ab", catalog.get("Eb", "major"))
    assert result.notes == ("Ab", "C", "Eb")
    assert result.roman == "IV"


def test_pychord_notes_input(facade: ChordResolutionFacade, c_major: KeyDefinition) -> None:
    candidates = facade.lookup("C E G", c_major)
    assert isinstance(candidates, CandidateSet)
    assert candidates.candidates[0].symbol == "C"
    assert candidates.candidates[0].roman == "I"


def test_resolve_is_repeatable(facade: ChordResolutionFacade, catalog: KeyCatalog) -> None:
    key = catalog.get("F#", "minor")
    assert facade.resolve("C#7", key) == facade.resolve("C#7", key)
