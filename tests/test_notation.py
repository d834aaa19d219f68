"""Tests for ABC notation output."""

import pytest

from chordfinder.notation import (
    build_abc_chord,
    build_abc_document,
    signature_accidentals,
    to_abc_key,
    to_abc_note,
)


@pytest.mark.parametrize(
    ("note", "abc"),
    [
        ("C4", "C"),
        ("C5", "c"),
        ("C6", "c'"),
        ("C3", "C,"),
        ("A2", "A,,"),
        ("F#5", "^f"),
        ("Bb4", "_B"),
        ("E#4", "^E"),
        ("Fbb3", "__F,"),
        ("G##4", "^^G"),
        ("D", "D"),
    ],
)
def test_to_abc_note(note: str, abc: str) -> None:
    assert to_abc_note(note) == abc


def test_to_abc_note_default_octave() -> None:
    assert to_abc_note("D", default_octave=5) == "d"


def test_to_abc_note_leaves_unreadable_input() -> None:
    assert to_abc_note("H2") == "H2"


def test_build_abc_chord() -> None:
    assert build_abc_chord(["A4", "C5", "E5"]) == "[A c e]1"


@pytest.mark.parametrize(
    ("root", "mode", "field"),
    [("Eb", "major", "Eb"), ("F#", "minor", "F#m"), ("", "minor", "C"), (None, "major", "C")],
)
def test_to_abc_key(root: str | None, mode: str, field: str) -> None:
    assert to_abc_key(root, mode) == field


def test_build_abc_document_with_title() -> None:
    document = build_abc_document(
        [["C4", "E4", "G4"], ["A4", "C5", "E5"]], "C", "major", title="Demo"
    )
    assert document == "X:1\nT:Demo\nK:C\n[C E G]1 | [A c e]1"


def test_build_abc_document_skips_empty_chords() -> None:
    document = build_abc_document([["D4", "F4", "A4"], []], "D", "minor")
    assert document.splitlines() == ["X:1", "K:Dm", "[D F A]1"]


D_MAJOR_SIGNATURE = signature_accidentals(["D", "E", "F#", "G", "A", "B", "C#"])


def test_signature_accidentals() -> None:
    assert D_MAJOR_SIGNATURE == {
        "D": "", "E": "", "F": "#", "G": "", "A": "", "B": "", "C": "#",
    }


@pytest.mark.parametrize(
    ("note", "abc"),
    [
        ("C4", "=C"),
        ("C#4", "C"),
        ("F#5", "f"),
        ("F4", "=F"),
        ("E4", "E"),
        ("Bb3", "_B,"),
        ("C##4", "^^C"),
    ],
)
def test_to_abc_note_against_signature(note: str, abc: str) -> None:
    assert to_abc_note(note, signature=D_MAJOR_SIGNATURE) == abc


def test_build_abc_document_writes_naturals_under_key() -> None:
    document = build_abc_document(
        [["C4", "E4", "G4"]], "D", "major", signature=D_MAJOR_SIGNATURE
    )
    assert document == "X:1\nK:D\n[=C E G]1"
