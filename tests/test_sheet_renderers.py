"""Unit tests for renderers used by SheetExporter."""

import pytest

from chordfinder.sheet_models import ScoreDocument, VexflowMeasure, VexflowNote
from chordfinder.sheet_renderers import (
    AbcTextRenderer,
    VerovioHtmlRenderer,
    VexflowMarkdownRenderer,
)


def _sample_document() -> ScoreDocument:
    return ScoreDocument(
        title="Demo",
        key_signature="Eb",
        time_signature="4/4",
        beats=4,
        beat_value=4,
        measures=[
            VexflowMeasure(
                treble=[VexflowNote(keys=["eb/4", "g/4", "bb/4"], duration="w", accidentals=[None, None, None])],
                bass=[VexflowNote(keys=["eb/3"], duration="w", accidentals=[None])],
                symbol="Eb",
                roman="I",
                color="green",
            ),
            VexflowMeasure(
                treble=[VexflowNote(keys=["b/4", "d/5", "f#/5"], duration="w", accidentals=["n", None, "#"])],
                bass=[VexflowNote(keys=["b/3"], duration="w", accidentals=["n"])],
                symbol="B",
            ),
        ],
    )


# ── VexFlow Markdown ─────────────────────────────────────────────────────────

def test_vexflow_markdown_renderer_has_heading() -> None:
    renderer = VexflowMarkdownRenderer()
    content = renderer.render(title="My Song", score_document=_sample_document())
    assert content.startswith("# My Song")
    assert "Key: **Eb**" in content


def test_vexflow_markdown_renderer_includes_container_and_script() -> None:
    renderer = VexflowMarkdownRenderer()
    content = renderer.render(title="Song", score_document=_sample_document())
    assert '<div id="chordfinder-score"></div>' in content
    assert 'id="chordfinder-score-data"' in content
    assert 'type="module"' in content


def test_vexflow_markdown_renderer_includes_vexflow_import() -> None:
    renderer = VexflowMarkdownRenderer()
    content = renderer.render(title="Song", score_document=_sample_document())
    assert "cdn.jsdelivr.net/npm/vexflow" in content
    assert "addKeySignature" in content


def test_vexflow_markdown_renderer_embeds_score_payload() -> None:
    renderer = VexflowMarkdownRenderer()
    content = renderer.render(title="Song", score_document=_sample_document())
    assert '"time_signature":"4/4"' in content
    assert '"key_signature":"Eb"' in content
    assert '"keys":["eb/4","g/4","bb/4"]' in content
    assert '"roman":"I"' in content


def test_vexflow_markdown_renderer_escapes_script_close() -> None:
    document = ScoreDocument(
        title="x", key_signature="C", time_signature="4/4", beats=4, beat_value=4,
        measures=[VexflowMeasure(treble=[], bass=[], symbol="</script>")],
    )
    content = VexflowMarkdownRenderer().render(title="x", score_document=document)
    assert '"symbol":"<\\/script>"' in content


def test_vexflow_markdown_renderer_requires_document() -> None:
    with pytest.raises(ValueError, match="score_document"):
        VexflowMarkdownRenderer().render(title="Song")


# ── Verovio HTML ─────────────────────────────────────────────────────────────

def test_build_html_title_in_title_tag_and_h1() -> None:
    html = VerovioHtmlRenderer().build_html("My Song", ["<svg></svg>"])
    assert "<title>My Song</title>" in html
    assert "<h1>My Song</h1>" in html


def test_build_html_empty_title_no_h1() -> None:
    html = VerovioHtmlRenderer().build_html("", ["<svg></svg>"])
    assert "<h1>" not in html


def test_build_html_escapes_title() -> None:
    html = VerovioHtmlRenderer().build_html("<Cool> & Co", ["<svg></svg>"])
    assert "&lt;Cool&gt; &amp; Co" in html


def test_build_html_one_sheet_per_page() -> None:
    html = VerovioHtmlRenderer().build_html("T", ["<svg>p1</svg>", "<svg>UNIQUE_MARKER</svg>"])
    assert html.count('<div class="sheet">') == 2
    assert "UNIQUE_MARKER" in html


def test_build_html_print_styles() -> None:
    html = VerovioHtmlRenderer().build_html("", ["<svg></svg>"])
    assert html.startswith("<!DOCTYPE html>")
    assert "@media print" in html
    assert "page-break-after: always" in html
    assert html.rstrip().endswith("</html>")


def test_build_html_includes_colored_analysis() -> None:
    html = VerovioHtmlRenderer().build_html("", ["<svg></svg>"], _sample_document())
    assert '<section class="analysis">' in html
    assert "<h2>Key: Eb</h2>" in html
    assert '<span class="roman" style="color: #2e7d32">I</span>' in html
    assert '<span class="roman" style="color: #555555">&ndash;</span>' in html


def test_build_analysis_without_document_is_empty() -> None:
    assert VerovioHtmlRenderer().build_analysis(None) == ""


def test_html_renderer_requires_musicxml() -> None:
    with pytest.raises(ValueError, match="musicxml_bytes"):
        VerovioHtmlRenderer().render(title="T")


# ── ABC ──────────────────────────────────────────────────────────────────────

def test_abc_renderer_adds_trailing_newline() -> None:
    renderer = AbcTextRenderer()
    assert renderer.default_extension == ".abc"
    assert renderer.render(title="", abc_text="X:1\nK:C\n[C E G]1") == "X:1\nK:C\n[C E G]1\n"
    assert renderer.render(title="", abc_text="X:1\n") == "X:1\n"


def test_abc_renderer_requires_text() -> None:
    with pytest.raises(ValueError, match="abc_text"):
        AbcTextRenderer().render(title="")
