"""NoteSpeller: key-aware spelling of pitch names."""

from collections.abc import Iterable

from chordfinder.config import DEFAULT_OCTAVE
from chordfinder.key_catalog import KeyDefinition
from chordfinder.pitch import LETTERS, chroma, parse_note, pitch_name


def spell_note(note: str, key: KeyDefinition) -> str:
    """
    Spell a single note the way *key* writes it.

    1. Unparseable input is returned unchanged.
    2. A pitch class that belongs to the scale takes its diatonic spelling,
       even when that means E# or Cb (C# major spells F as "E#").
    3. Anything else comes from the fixed sharp or flat table, chosen by
       the key's accidental bias.
    """
    pitch_class = chroma(note)
    if pitch_class is None:
        return note

    diatonic = key.diatonic_map.get(pitch_class)
    if diatonic:
        return diatonic

    return pitch_name(pitch_class, key.accidental)


def spell_notes_in_key(notes: Iterable[str], key: KeyDefinition) -> list[str]:
    """Spell each note in *key*; order and length are preserved."""
    return [spell_note(note, key) for note in notes]


def spell_notes_with_octave_in_key(notes: Iterable[str], key: KeyDefinition) -> list[str]:
    """
    Re-spell notes that carry an octave ("Gb4" -> "F#4" in D major).

    The octave number is reattached as written. Entries without a readable
    pitch class or octave pass through untouched.
    """
    spelled: list[str] = []
    for note in notes:
        parsed = parse_note(note)
        if parsed is None or parsed.octave is None:
            spelled.append(note)
            continue
        spelled.append(f"{spell_note(parsed.name, key)}{parsed.octave}")
    return spelled


def stack_octaves(notes: Iterable[str], base_octave: int = DEFAULT_OCTAVE) -> list[str]:
    """
    Attach octaves so the notes climb the staff from the first one.

    The first note sits in *base_octave*; each following note is placed on
    the lowest staff position above its predecessor, so a root-position
    chord reads bottom to top. Staff position is letter + octave, which
    keeps B# and Cb on the line they are written on.

    Example:
        ["A", "C", "E"] -> ["A4", "C5", "E5"]
    """
    stacked: list[str] = []
    previous_position: int | None = None

    for note in notes:
        parsed = parse_note(note)
        if parsed is None:
            stacked.append(note)
            continue

        octave = base_octave
        position = octave * len(LETTERS) + parsed.step
        if previous_position is not None:
            while position <= previous_position:
                octave += 1
                position += len(LETTERS)

        stacked.append(f"{parsed.name}{octave}")
        previous_position = position

    return stacked
