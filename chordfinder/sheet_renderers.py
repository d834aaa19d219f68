"""Renderer implementations for chord sheet output formats."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, Final, cast

from chordfinder.sheet_models import ScoreDocument

#: CSS colours for the harmonic-function palette.
FUNCTION_COLORS: Final[dict[str, str]] = {
    "green": "#2e7d32",
    "blue": "#1565c0",
    "red": "#c62828",
}
NEUTRAL_COLOR: Final[str] = "#555555"


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        abc_text: str | None = None,
    ) -> str:
        """Render output into a file content string."""


class VerovioHtmlRenderer(SheetRenderer):
    """Engrave MusicXML with verovio and wrap the SVG in a standalone HTML page."""

    # Verovio layout (abstract units, ~0.1 mm each); sized for a few chords per line
    _PAGE_WIDTH: int = 2100
    _PAGE_HEIGHT: int = 2970
    _SCALE: int = 45
    _PAGE_MARGIN: int = 80

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        abc_text: str | None = None,
    ) -> str:
        if musicxml_bytes is None:
            raise ValueError("musicxml_bytes is required for HTML rendering.")

        svgs = self.render_svgs(musicxml_bytes)
        return self.build_html(title, svgs, score_document)

    def render_svgs(self, musicxml_bytes: bytes) -> list[str]:
        """
        Engrave a MusicXML document into one SVG string per page.

        Raises:
            ValueError: If verovio rejects the MusicXML data.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "pageWidth": self._PAGE_WIDTH,
                "pageHeight": self._PAGE_HEIGHT,
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
            }
        )

        if not tk.loadData(musicxml_bytes.decode("utf-8")):
            raise ValueError("verovio could not load the MusicXML data.")

        return [self._render_page_svg(tk, page_no) for page_no in range(1, tk.getPageCount() + 1)]

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        # Older verovio bindings reject keyword arguments.
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            return cast(str, toolkit.renderToSVG(page_no))

    def build_analysis(self, score_document: ScoreDocument | None) -> str:
        """Colour-coded list of chords with their Roman numerals."""
        if score_document is None or not score_document.measures:
            return ""

        items = []
        for measure in score_document.measures:
            color = FUNCTION_COLORS.get(measure.color, NEUTRAL_COLOR)
            roman = _escape_html(measure.roman) if measure.roman else "&ndash;"
            items.append(
                f'    <li style="border-color: {color}">'
                f'<span class="symbol">{_escape_html(measure.symbol)}</span>'
                f'<span class="roman" style="color: {color}">{roman}</span></li>'
            )
        key_label = _escape_html(score_document.key_signature)
        return (
            f'  <section class="analysis">\n'
            f"    <h2>Key: {key_label}</h2>\n"
            f"    <ol>\n" + "\n".join(items) + "\n    </ol>\n  </section>\n"
        )

    def build_html(
        self,
        title: str,
        svgs: list[str],
        score_document: ScoreDocument | None = None,
    ) -> str:
        """
        Assemble the HTML page: optional heading, the analysis strip, then
        one ``.sheet`` block per engraved page.
        """
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        analysis = self.build_analysis(score_document)
        sheets = "\n".join(f'  <div class="sheet">{svg}</div>' for svg in svgs)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    body {{
      font-family: "Helvetica Neue", Arial, sans-serif;
      background: #fafafa;
      color: #222;
      margin: 0 auto;
      max-width: 900px;
      padding: 1.5rem;
    }}
    h1 {{ font-size: 1.5rem; text-align: center; }}
    h2 {{ font-size: 1rem; font-weight: normal; color: #555; }}
    .analysis ol {{
      display: flex;
      flex-wrap: wrap;
      gap: 0.5rem;
      list-style: none;
      padding: 0;
    }}
    .analysis li {{
      border: 2px solid;
      border-radius: 6px;
      background: #fff;
      padding: 0.25rem 0.6rem;
    }}
    .analysis .roman {{ margin-left: 0.4rem; font-weight: bold; }}
    .sheet {{ background: #fff; margin-top: 1rem; padding: 0.5rem; }}
    .sheet svg {{ display: block; width: 100%; height: auto; }}
    @media print {{
      body {{ background: #fff; padding: 0; }}
      .sheet {{ page-break-after: always; }}
      .sheet:last-child {{ page-break-after: avoid; }}
    }}
  </style>
</head>
<body>
{heading}{analysis}{sheets}
</body>
</html>"""


class VexflowMarkdownRenderer(SheetRenderer):
    """Render a score document into Markdown with an embedded VexFlow script."""

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        abc_text: str | None = None,
    ) -> str:
        if score_document is None:
            raise ValueError("score_document is required for md-vexflow rendering.")

        title_safe = _escape_html(title)
        score_json = json.dumps(asdict(score_document), separators=(",", ":"))
        score_json = score_json.replace("</", "<\\/")
        colors_json = json.dumps(FUNCTION_COLORS, separators=(",", ":"))

        return f"""# {title_safe}

Key: **{_escape_html(score_document.key_signature)}**. This Markdown uses embedded JavaScript + VexFlow; open it in a viewer that runs scripts.

<div id="chordfinder-score"></div>
<script id="chordfinder-score-data" type="application/json">{score_json}</script>
<script type="module">
  import {{
    Accidental,
    Annotation,
    Formatter,
    Renderer,
    Stave,
    StaveConnector,
    StaveNote,
    Voice
  }} from "https://cdn.jsdelivr.net/npm/vexflow@4.2.3/build/esm/entry/vexflow.js";

  const colors = {colors_json};
  const host = document.getElementById("chordfinder-score");
  const payload = JSON.parse(document.getElementById("chordfinder-score-data").textContent);
  const measures = payload.measures || [];
  const width = 200;

  const renderer = new Renderer(host, Renderer.Backends.SVG);
  renderer.resize(width * measures.length + 120, 260);
  const context = renderer.getContext();

  const toStaveNotes = (entries, clef) => entries.map((entry) => {{
    const staveNote = new StaveNote({{ clef, keys: entry.keys, duration: entry.duration }});
    entry.accidentals.forEach((symbol, index) => {{
      if (symbol) {{
        staveNote.addModifier(new Accidental(symbol), index);
      }}
    }});
    return staveNote;
  }});

  let x = 10;
  measures.forEach((measure, index) => {{
    const first = index === 0;
    const staveWidth = first ? width + 100 : width;
    const treble = new Stave(x, 30, staveWidth);
    const bass = new Stave(x, 140, staveWidth);
    if (first) {{
      treble.addClef("treble").addKeySignature(payload.key_signature).addTimeSignature(payload.time_signature);
      bass.addClef("bass").addKeySignature(payload.key_signature).addTimeSignature(payload.time_signature);
    }}
    treble.setContext(context).draw();
    bass.setContext(context).draw();
    if (first) {{
      const brace = new StaveConnector(treble, bass);
      brace.setType(StaveConnector.type.BRACE);
      brace.setContext(context).draw();
    }}

    const trebleNotes = toStaveNotes(measure.treble, "treble");
    trebleNotes[0].addModifier(new Annotation(measure.symbol), 0);
    if (measure.roman) {{
      const roman = new Annotation(measure.roman)
        .setVerticalJustification(Annotation.VerticalJustify.BOTTOM);
      roman.setStyle({{ fillStyle: colors[measure.color] || "#555555" }});
      trebleNotes[0].addModifier(roman, 0);
    }}

    const trebleVoice = new Voice({{ num_beats: payload.beats, beat_value: payload.beat_value }}).setMode(Voice.Mode.SOFT);
    const bassVoice = new Voice({{ num_beats: payload.beats, beat_value: payload.beat_value }}).setMode(Voice.Mode.SOFT);
    trebleVoice.addTickables(trebleNotes);
    bassVoice.addTickables(toStaveNotes(measure.bass, "bass"));
    new Formatter().joinVoices([trebleVoice]).joinVoices([bassVoice]).format([trebleVoice, bassVoice], width - 40);
    trebleVoice.draw(context, treble);
    bassVoice.draw(context, bass);

    x += staveWidth;
  }});
</script>
"""


class AbcTextRenderer(SheetRenderer):
    """Emit the ABC tune as-is, for abcjs or any other ABC engraver."""

    @property
    def default_extension(self) -> str:
        return ".abc"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
        abc_text: str | None = None,
    ) -> str:
        if not abc_text:
            raise ValueError("abc_text is required for abc rendering.")
        return abc_text if abc_text.endswith("\n") else abc_text + "\n"
