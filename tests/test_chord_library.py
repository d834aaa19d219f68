"""Tests for chord quality classification and the pychord-backed library."""

import pytest

from chordfinder.chord_library import PychordLibrary, classify_quality


@pytest.mark.parametrize(
    ("root", "notes", "quality"),
    [
        ("C", ["C", "E", "G"], "major"),
        ("C", ["C", "E", "G", "B"], "major"),
        ("A", ["A", "C", "E"], "minor"),
        ("D", ["D", "F", "A", "C"], "minor"),
        ("G", ["G", "B", "D", "F"], "dominant"),
        ("G", ["G", "B", "D", "F", "A"], "dominant"),
        ("G", ["G", "C", "D", "F"], "dominant"),
        ("B", ["B", "D", "F", "A"], "half-diminished"),
        ("B", ["B", "D", "F"], "diminished"),
        ("B", ["B", "D", "F", "Ab"], "diminished"),
        ("C", ["C", "E", "G#"], "augmented"),
        ("C", ["C", "F", "G"], "suspended"),
        ("C", ["C", "D", "G"], "suspended"),
        ("C", ["C", "G"], "other"),
        ("H", ["C", "E", "G"], "other"),
    ],
)
def test_classify_quality(root: str, notes: list[str], quality: str) -> None:
    assert classify_quality(root, notes) == quality


def test_classify_quality_reads_enharmonic_spellings() -> None:
    assert classify_quality("Db", ["Db", "F", "Ab", "Cb"]) == "dominant"


@pytest.fixture
def library() -> PychordLibrary:
    return PychordLibrary()


def test_resolve_minor_triad(library: PychordLibrary) -> None:
    resolved = library.resolve_chord_symbol("Am")
    assert resolved is not None
    assert resolved.canonical_symbol == "Am"
    assert resolved.root == "A"
    assert resolved.notes == ("A", "C", "E")
    assert resolved.quality == "minor"


def test_resolve_dominant_seventh(library: PychordLibrary) -> None:
    resolved = library.resolve_chord_symbol("A7")
    assert resolved is not None
    assert resolved.notes == ("A", "C#", "E", "G")
    assert resolved.quality == "dominant"


def test_resolve_capitalizes_root(library: PychordLibrary) -> None:
    resolved = library.resolve_chord_symbol("am")
    assert resolved is not None
    assert resolved.canonical_symbol == "Am"


@pytest.mark.parametrize("text", ["", "Xyz", "Cfoo"])
def test_resolve_rejects_non_chords(text: str, library: PychordLibrary) -> None:
    assert library.resolve_chord_symbol(text) is None


def test_detect_major_triad(library: PychordLibrary) -> None:
    symbols = library.detect_chords_from_notes(["C", "E", "G"])
    assert symbols[0] == "C"
    assert len(symbols) == len(set(symbols))


def test_detect_without_notes(library: PychordLibrary) -> None:
    assert library.detect_chords_from_notes([]) == []
