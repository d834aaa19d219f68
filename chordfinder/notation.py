"""ABC notation text for spelled chords, consumed by ABC-capable renderers."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Final

from chordfinder.config import DEFAULT_OCTAVE
from chordfinder.pitch import parse_note

_ABC_ACCIDENTALS: Final[dict[str, str]] = {"#": "^", "##": "^^", "b": "_", "bb": "__"}
ABC_NATURAL: Final[str] = "="

#: ABC's reference octave: upper-case letters sit in octave 4, lower-case in 5.
ABC_LOWER_OCTAVE: Final[int] = 5


def signature_accidentals(scale: Iterable[str]) -> dict[str, str]:
    """Letter -> accidental a key signature applies, read from the key's scale."""
    signature: dict[str, str] = {}
    for name in scale:
        parsed = parse_note(name)
        if parsed is not None:
            signature[parsed.letter] = parsed.accidental
    return signature


def to_abc_note(
    note: str,
    default_octave: int = DEFAULT_OCTAVE,
    signature: Mapping[str, str] | None = None,
) -> str:
    """
    Convert a note such as "F#5" to ABC ("^f").

    Octave 4 is upper-case, octave 5 and above lower-case with one "'" per
    extra octave, octave 3 and below upper-case with one "," per octave
    down. Notes without an octave use *default_octave*; unreadable input is
    returned unchanged.

    With a key *signature* (see ``signature_accidentals``) an accidental is
    written only where the note departs from the signature, and a natural
    letter the signature alters gets "=" (C in D major is "=C").
    """
    parsed = parse_note(note)
    if parsed is None:
        return note

    if signature is None:
        accidental = _ABC_ACCIDENTALS.get(parsed.accidental, "")
    elif parsed.accidental == signature.get(parsed.letter, ""):
        accidental = ""
    else:
        accidental = _ABC_ACCIDENTALS.get(parsed.accidental, ABC_NATURAL)
    octave = parsed.octave if parsed.octave is not None else default_octave

    if octave >= ABC_LOWER_OCTAVE:
        marks = "'" * (octave - ABC_LOWER_OCTAVE)
        return f"{accidental}{parsed.letter.lower()}{marks}"
    marks = "," * (ABC_LOWER_OCTAVE - 1 - octave)
    return f"{accidental}{parsed.letter}{marks}"


def build_abc_chord(
    notes_with_octave: Iterable[str],
    default_octave: int = DEFAULT_OCTAVE,
    signature: Mapping[str, str] | None = None,
) -> str:
    """ABC chord token lasting one unit, e.g. '[C E G]1'."""
    tokens = (to_abc_note(note, default_octave, signature) for note in notes_with_octave)
    return f"[{' '.join(tokens)}]1"


def to_abc_key(root: str | None, mode: str) -> str:
    """ABC K: field value: 'Eb' for E-flat major, 'F#m' for F-sharp minor."""
    if not root:
        return "C"
    suffix = "m" if mode == "minor" else ""
    return f"{root}{suffix}"


def build_abc_document(
    chords: Sequence[Sequence[str]],
    root: str,
    mode: str,
    title: str = "",
    signature: Mapping[str, str] | None = None,
) -> str:
    """
    Full ABC tune: header plus one bar per chord.

    Args:
        chords:    Each entry is a chord's notes with octaves, bottom first.
        root:      Key root used for the key signature.
        mode:      "major" or "minor".
        title:     Optional T: field.
        signature: Accidentals of the K: key, so notes are written against
                   it. Without one every accidental is written out.
    """
    header = ["X:1"]
    if title:
        header.append(f"T:{title}")
    header.append(f"K:{to_abc_key(root, mode)}")
    body = " | ".join(build_abc_chord(notes, signature=signature) for notes in chords if notes)
    return "\n".join(header + [body])
