"""chordfinder CLI entry point."""

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import click

from chordfinder import __version__
from chordfinder.config import default_history_path
from chordfinder.errors import HistoryError
from chordfinder.facade import (
    PROGRESSION_SEPARATOR,
    CandidateSet,
    ChordLookupResult,
    ChordResolutionFacade,
    normalize_note,
)
from chordfinder.function_analyzer import ChordFunctionResult
from chordfinder.history import HistoryStore
from chordfinder.key_catalog import MODES, KeyCatalog, KeyDefinition, default_catalog

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


# ── Helpers ────────────────────────────────────────────────────────────────────

def _load_store(ctx: click.Context) -> HistoryStore:
    return HistoryStore.load(ctx.obj["history_path"])


def _save_store(store: HistoryStore) -> None:
    """Persist history; a failure here never fails the command."""
    try:
        store.save()
    except HistoryError as exc:
        click.echo(f"  WARNING: {exc}", err=True)


def _select_key(ctx: click.Context, store: HistoryStore, root: str | None, mode: str | None) -> KeyDefinition:
    """Pick the key from options, falling back to the last key used."""
    catalog: KeyCatalog = ctx.obj["catalog"]
    mode = mode or store.key_mode
    candidate_root = normalize_note(root) if root else store.key_root

    key = catalog.find(candidate_root, mode)
    if key is None:
        roots = catalog.roots(mode)
        if root:
            raise click.BadParameter(
                f"'{root}' is not a {mode} key. Use one of: {', '.join(roots)}.",
                param_hint="--key",
            )
        # The remembered root may not exist in the other mode (e.g. Cb minor).
        key = catalog.get(roots[0] if roots else candidate_root, mode)

    store.key_root, store.key_mode = key.id, key.mode
    return key


def _describe_function(function: ChordFunctionResult | None) -> str:
    if function is None:
        return "non-diatonic (N/A)"
    text = click.style(f"{function.roman} ({function.function})", fg=function.color, bold=True)
    if function.description:
        text += f" - {function.description}"
    return text


def _echo_lookup(result: ChordLookupResult, key: KeyDefinition) -> None:
    click.echo(f"{result.symbol} in {key.label}")
    click.echo(f"  Notes    : {' '.join(result.notes)}")
    click.echo(f"  Voicing  : {' '.join(result.notes_with_octave)}")
    click.echo(f"  Function : {_describe_function(result.function)}")


def _echo_candidates(candidates: CandidateSet, key: KeyDefinition) -> None:
    click.echo(f"Notes {' '.join(candidates.played)} in {key.label}")
    if not candidates.candidates:
        click.echo("  No matching chord found.")
        return
    for index, candidate in enumerate(candidates.candidates, start=1):
        click.echo(
            f"  {index}. {candidate.symbol:<10} {' '.join(candidate.notes):<16} "
            f"{_describe_function(candidate.function)}"
        )


def key_options(command: Callable[..., None]) -> Callable[..., None]:
    """Attach the shared --key/--mode options."""
    command = click.option(
        "--mode",
        "-m",
        type=click.Choice(MODES, case_sensitive=False),
        default=None,
        help="Key mode. Defaults to the last mode used.",
    )(command)
    command = click.option(
        "--key",
        "-k",
        "root",
        default=None,
        metavar="ROOT",
        help="Key root, e.g. C, F#, Bb. Defaults to the last key used (initially C).",
    )(command)
    return command


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="chordfinder")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.option(
    "--history-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="PATH",
    help="History JSON file. Defaults to $CHORDFINDER_HOME/history.json.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, history_file: Path | None) -> None:
    """chordfinder: spell chords in a key and read their harmonic function."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.ensure_object(dict)
    ctx.obj["catalog"] = default_catalog()
    ctx.obj["facade"] = ChordResolutionFacade()
    ctx.obj["history_path"] = history_file if history_file is not None else default_history_path()


# ── chord subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("text", nargs=-1, required=True)
@key_options
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--no-history", is_flag=True, help="Do not record the chord in history.")
@click.pass_context
def chord(
    ctx: click.Context,
    text: tuple[str, ...],
    root: str | None,
    mode: str | None,
    as_json: bool,
    no_history: bool,
) -> None:
    """
    Spell a chord symbol in a key and show its function.

    TEXT is a chord symbol, or two or more note names to get chord
    suggestions for.

    \b
    Examples:
      chordfinder chord F#m7b5 --key C# --mode major
      chordfinder chord A7 -k C
      chordfinder chord C E G Bb
    """
    store = _load_store(ctx)
    key = _select_key(ctx, store, root, mode)
    facade: ChordResolutionFacade = ctx.obj["facade"]

    result = facade.lookup(" ".join(text), key)
    logger.debug("Lookup of %r in %s -> %s", text, key.label, result.status)

    if as_json:
        click.echo(json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
    elif isinstance(result, CandidateSet):
        _echo_candidates(result, key)
    elif result.is_valid:
        _echo_lookup(result, key)

    if result.status != "valid":
        if not as_json:
            click.echo("  ERROR: No chord matches that input. Check the symbol.", err=True)
        _save_store(store)
        sys.exit(1)

    if isinstance(result, ChordLookupResult) and not no_history:
        store.chords.add(result.symbol)
    _save_store(store)


# ── progression subcommand ─────────────────────────────────────────────────────

@main.command()
@click.argument("chords", nargs=-1, required=True)
@key_options
@click.option("--save", is_flag=True, help="Store the progression in progression history.")
@click.pass_context
def progression(
    ctx: click.Context,
    chords: tuple[str, ...],
    root: str | None,
    mode: str | None,
    save: bool,
) -> None:
    """
    Label every chord of a progression with its Roman numeral.

    \b
    Examples:
      chordfinder progression C Am D7 G7 C --key C
      chordfinder progression Am F C G -k A -m minor --save
    """
    store = _load_store(ctx)
    key = _select_key(ctx, store, root, mode)
    facade: ChordResolutionFacade = ctx.obj["facade"]

    results = facade.analyze_progression(chords, key)
    for symbol, result in zip(chords, results):
        if not result.is_valid:
            click.echo(f"  WARNING: '{symbol}' is not a chord symbol.", err=True)

    click.echo(f"Key: {key.label}")
    click.echo(facade.format_progression(results))

    if save:
        saved = [result.symbol for result in results if result.is_valid]
        if store.progressions.add(saved):
            click.echo(f"Saved ({len(store.progressions)} stored).")
    _save_store(store)


# ── history subcommand ─────────────────────────────────────────────────────────

@main.command()
@click.option("--progressions", "-p", is_flag=True, help="Show saved progressions instead of chords.")
@click.option("--clear", is_flag=True, help="Erase the selected history.")
@click.pass_context
def history(ctx: click.Context, progressions: bool, clear: bool) -> None:
    """List or clear recent chords and saved progressions."""
    store = _load_store(ctx)

    if clear:
        if progressions:
            store.progressions.clear()
        else:
            store.chords.clear()
        _save_store(store)
        click.echo("History cleared.")
        return

    if progressions:
        entries = [PROGRESSION_SEPARATOR.join(item) for item in store.progressions.items]
    else:
        entries = store.chords.items

    if not entries:
        click.echo("History is empty.")
        return
    for index, entry in enumerate(entries, start=1):
        click.echo(f"  {index:>2}. {entry}")


# ── keys subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODES, case_sensitive=False),
    default="major",
    show_default=True,
)
@click.pass_context
def keys(ctx: click.Context, mode: str) -> None:
    """List supported key roots with their scales."""
    catalog: KeyCatalog = ctx.obj["catalog"]
    for key_root in catalog.roots(mode):
        key = catalog.get(key_root, mode)
        click.echo(f"  {key.id:<3} {' '.join(key.scale)}")


# ── sheet subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("chords", nargs=-1, required=True)
@key_options
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination file. Defaults to chords.<ext> for the chosen format.",
)
@click.option("--title", default="", metavar="TEXT", help="Title shown above the score.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "md-vexflow", "abc"], case_sensitive=False),
    default="html",
    show_default=True,
    help="html (verovio SVG), md-vexflow (Markdown + VexFlow) or abc (ABC text).",
)
@click.pass_context
def sheet(
    ctx: click.Context,
    chords: tuple[str, ...],
    root: str | None,
    mode: str | None,
    output: str | None,
    title: str,
    output_format: str,
) -> None:
    """
    Engrave chords on a grand staff in the key's signature.

    \b
    Examples:
      chordfinder sheet C Am F G7 --key C
      chordfinder sheet Ebmaj7 Ab7 --key Eb --format md-vexflow -o song.md
      chordfinder sheet F#m7b5 B7 Em -k E -m minor --format abc
    """
    from chordfinder.sheet_exporter import SheetExporter

    store = _load_store(ctx)
    key = _select_key(ctx, store, root, mode)
    facade: ChordResolutionFacade = ctx.obj["facade"]

    exporter = SheetExporter(title=title, output_format=output_format)
    resolved_output = output if output is not None else f"chords{exporter.renderer.default_extension}"

    click.echo(f"chordfinder v{__version__}")
    click.echo(f"  Key    : {key.label}")
    click.echo(f"  Format : {exporter.output_format}")
    click.echo(f"  Output : {resolved_output}")

    results = facade.analyze_progression(chords, key)
    for symbol, result in zip(chords, results):
        if not result.is_valid:
            click.echo(f"  WARNING: skipping '{symbol}', not a chord symbol.", err=True)

    try:
        exporter.export(results, key, resolved_output)
    except OSError as exc:
        click.echo(f"  ERROR: Could not write output file - {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not render score - {exc}", err=True)
        sys.exit(1)

    _save_store(store)
    click.echo(f"Done!  Wrote '{resolved_output}'.")
