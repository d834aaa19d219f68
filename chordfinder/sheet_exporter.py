"""SheetExporter: engraves analysed chords as HTML, VexFlow Markdown or ABC."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Final

from chordfinder.facade import ChordLookupResult
from chordfinder.key_catalog import KeyDefinition
from chordfinder.notation import build_abc_document, signature_accidentals, to_abc_key
from chordfinder.pitch import ParsedNote, parse_note
from chordfinder.sheet_models import ScoreDocument, VexflowMeasure, VexflowNote
from chordfinder.sheet_renderers import (
    AbcTextRenderer,
    SheetRenderer,
    VerovioHtmlRenderer,
    VexflowMarkdownRenderer,
)

SUPPORTED_FORMATS: Final[set[str]] = {"html", "md-vexflow", "abc"}

TIME_SIGNATURE: Final[str] = "4/4"
BEATS: Final[int] = 4
BEAT_VALUE: Final[int] = 4
BASS_OCTAVE: Final[int] = 3  # left-hand root, one octave under the chord


def to_music21_name(note: str) -> str:
    """'Bb4' -> 'B-4'; music21 writes flats as '-'."""
    parsed = parse_note(note)
    if parsed is None:
        return note
    octave = "" if parsed.octave is None else str(parsed.octave)
    return f"{parsed.letter}{parsed.accidental.replace('b', '-')}{octave}"


class SheetExporter:
    """
    Write a sequence of chord lookups as sheet output, one whole-note
    measure per chord on a grand staff in the key's signature.

    Supported formats:
    - ``html``: music21 score -> MusicXML -> verovio SVG in an HTML page.
    - ``md-vexflow``: Markdown with an embedded VexFlow script.
    - ``abc``: plain ABC notation text.
    """

    def __init__(self, title: str = "", output_format: str = "html") -> None:
        self.title = title
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        self.output_format = normalized
        self.renderer = self._build_renderer(normalized)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_renderer(self, output_format: str) -> SheetRenderer:
        if output_format == "html":
            return VerovioHtmlRenderer()
        if output_format == "abc":
            return AbcTextRenderer()
        return VexflowMarkdownRenderer()

    def _valid_chords(self, lookups: Sequence[ChordLookupResult]) -> list[ChordLookupResult]:
        chords = [lookup for lookup in lookups if lookup.is_valid and lookup.notes_with_octave]
        if not chords:
            raise ValueError("Nothing to render: no valid chords were given.")
        return chords

    def _bass_note(self, lookup: ChordLookupResult) -> str:
        return f"{lookup.notes[0]}{BASS_OCTAVE}"

    def _build_score(self, chords: Sequence[ChordLookupResult], key: KeyDefinition) -> Any:
        from music21 import chord, clef, meter, metadata, note, stream
        from music21 import key as m21key

        score = stream.Score()
        if self.title:
            score.metadata = metadata.Metadata(title=self.title)

        treble = stream.Part()
        bass = stream.Part()
        for part, part_clef in ((treble, clef.TrebleClef()), (bass, clef.BassClef())):
            part.append(part_clef)
            part.append(m21key.Key(to_music21_name(key.id), key.mode))
            part.append(meter.TimeSignature(TIME_SIGNATURE))

        for lookup in chords:
            upper = chord.Chord([to_music21_name(name) for name in lookup.notes_with_octave])
            upper.quarterLength = float(BEATS)
            if lookup.roman:
                upper.addLyric(lookup.roman)
            treble.append(upper)

            root = note.Note(to_music21_name(self._bass_note(lookup)))
            root.quarterLength = float(BEATS)
            bass.append(root)

        score.insert(0, treble)
        score.insert(0, bass)
        return score

    def _score_to_musicxml_bytes(self, score: Any) -> bytes:
        from music21.musicxml.m21ToXml import GeneralObjectExporter

        exporter = GeneralObjectExporter(score)
        return exporter.parse()

    def _accidental_against_key(self, parsed: ParsedNote, signature: dict[str, str]) -> str | None:
        """Accidental to print, or None when the key signature covers it."""
        if parsed.accidental == signature.get(parsed.letter, ""):
            return None
        return parsed.accidental or "n"

    def _to_vexflow_note(self, notes: Sequence[str], signature: dict[str, str]) -> VexflowNote:
        keys: list[str] = []
        accidentals: list[str | None] = []
        for name in notes:
            parsed = parse_note(name)
            if parsed is None or parsed.octave is None:
                continue
            keys.append(f"{parsed.name.lower()}/{parsed.octave}")
            accidentals.append(self._accidental_against_key(parsed, signature))
        return VexflowNote(keys=keys, duration="w", accidentals=accidentals)

    def _build_document(
        self, chords: Sequence[ChordLookupResult], key: KeyDefinition
    ) -> ScoreDocument:
        signature = signature_accidentals(key.scale)
        measures = [
            VexflowMeasure(
                treble=[self._to_vexflow_note(lookup.notes_with_octave, signature)],
                bass=[self._to_vexflow_note([self._bass_note(lookup)], signature)],
                symbol=lookup.symbol,
                roman=lookup.roman or "",
                color=lookup.function.color if lookup.function is not None else "",
            )
            for lookup in chords
        ]
        return ScoreDocument(
            title=self.title,
            key_signature=to_abc_key(key.id, key.mode),
            time_signature=TIME_SIGNATURE,
            beats=BEATS,
            beat_value=BEAT_VALUE,
            measures=measures,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, lookups: Sequence[ChordLookupResult], key: KeyDefinition) -> str:
        """
        Render valid lookups to the selected format; invalid ones are skipped.

        Raises:
            ValueError: If no lookup is valid or the engraver rejects the score.
        """
        chords = self._valid_chords(lookups)

        if self.output_format == "abc":
            return self.renderer.render(
                title=self.title,
                abc_text=build_abc_document(
                    [lookup.notes_with_octave for lookup in chords],
                    key.id,
                    key.mode,
                    title=self.title,
                    signature=signature_accidentals(key.scale),
                ),
            )

        document = self._build_document(chords, key)
        if self.output_format == "html":
            return self.renderer.render(
                title=self.title,
                musicxml_bytes=self._score_to_musicxml_bytes(self._build_score(chords, key)),
                score_document=document,
            )
        return self.renderer.render(title=self.title, score_document=document)

    def export(
        self,
        lookups: Sequence[ChordLookupResult],
        key: KeyDefinition,
        output_path: str,
    ) -> None:
        """
        Render and write to *output_path*.

        Raises:
            ValueError: If rendering fails or there is nothing to render.
            OSError: If the output file cannot be written.
        """
        content = self.render(lookups, key)
        with open(output_path, "w", encoding="utf-8") as fh:
            fh.write(content)
