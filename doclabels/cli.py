"""
CLI interface for document labels.

Usage:
    doclabels show 1AbC
    doclabels add 1AbC "Q1" --title "Report"
    doclabels find "Q1"
    doclabels export "Q1" q1.json
    doclabels import q1.json
"""

import json
import os
import sys
import time
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .api import Labels
from .errors import IndexOutOfRange
from .logging_config import configure_quiet_mode, enable_debug_mode
from .types import Session


# Configure quiet mode by default
# Set DOCLABELS_VERBOSE=1 to enable debug mode via environment
if os.environ.get("DOCLABELS_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"doclabels {version('doclabels')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_store_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _store_callback(value: Optional[Path]):
    global _store_override
    if value is not None:
        _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


app = typer.Typer(
    name="doclabels",
    help="Ordered labels for documents, shared across sessions.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar="DOCLABELS_STORE_PATH",
        help="Path to the store directory",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """Ordered labels for documents, shared across sessions."""


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

StoreOption = Annotated[
    Optional[Path],
    typer.Option(
        "--store", "-s",
        envvar="DOCLABELS_STORE_PATH",
        help="Path to the store directory (default: ~/.doclabels/)"
    )
]

DocArgument = Annotated[str, typer.Argument(help="Document ID or document URL")]


def _get_labels(store: Optional[Path]) -> Labels:
    """Open the label store, handling errors gracefully."""
    import atexit

    actual_store = store if store is not None else _get_store_override()
    try:
        labels = Labels(actual_store)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    atexit.register(labels.close)
    return labels


def _open(labels: Labels, doc: str, title: Optional[str] = None,
          url: Optional[str] = None) -> Session:
    """Open a session from a document ID or URL argument."""
    if "://" in doc:
        try:
            return labels.session_for_url(doc, title=title)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    return labels.open_session(doc, title=title, url=url)


def _render_labels(session: Session) -> str:
    if _get_json_output():
        return json.dumps({
            "id": session.document_id,
            "title": session.title,
            "url": session.url,
            "labels": session.labels,
        }, ensure_ascii=False)
    if not session.labels:
        return f"{session.title} ({session.document_id}): no labels"
    lines = [f"{session.title} ({session.document_id})"]
    for i, label in enumerate(session.labels):
        lines.append(f"  {i}  {label}")
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Label Commands
# -----------------------------------------------------------------------------

@app.command()
def show(
    doc: DocArgument,
    store: StoreOption = None,
):
    """Show a document's labels in order."""
    labels = _get_labels(store)
    session = _open(labels, doc)
    typer.echo(_render_labels(session))


@app.command()
def add(
    doc: DocArgument,
    label: Annotated[str, typer.Argument(help="Label text")],
    title: Annotated[Optional[str], typer.Option(
        "--title", "-t", help="Document title to store with the labels"
    )] = None,
    url: Annotated[Optional[str], typer.Option(
        "--url", help="Document URL to store with the labels"
    )] = None,
    store: StoreOption = None,
):
    """Append a label to a document (duplicates allowed)."""
    if not label.strip():
        typer.echo("Error: label must not be blank", err=True)
        raise typer.Exit(1)
    labels = _get_labels(store)
    session = _open(labels, doc, title=title, url=url)
    labels.store.add_label(session, label)
    typer.echo(_render_labels(session))


@app.command()
def remove(
    doc: DocArgument,
    index: Annotated[int, typer.Argument(help="Position of the label (from 'show')")],
    store: StoreOption = None,
):
    """Remove the label at a position."""
    labels = _get_labels(store)
    session = _open(labels, doc)
    try:
        labels.store.remove_label(session, index)
    except IndexOutOfRange as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(_render_labels(session))


@app.command()
def move(
    doc: DocArgument,
    from_index: Annotated[int, typer.Argument(help="Current position")],
    to_index: Annotated[int, typer.Argument(help="New position")],
    store: StoreOption = None,
):
    """Move a label to a new position."""
    labels = _get_labels(store)
    session = _open(labels, doc)
    try:
        labels.store.reorder_label(session, from_index, to_index)
    except IndexOutOfRange as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(_render_labels(session))


# -----------------------------------------------------------------------------
# Index Commands
# -----------------------------------------------------------------------------

@app.command()
def find(
    label: Annotated[str, typer.Argument(help="Exact label (case-sensitive)")],
    current: Annotated[Optional[str], typer.Option(
        "--current", "-c", help="Mark this document ID as current"
    )] = None,
    store: StoreOption = None,
):
    """List documents carrying a label."""
    labels = _get_labels(store)
    refs = labels.find(label, current_doc_id=current)
    if _get_json_output():
        typer.echo(json.dumps([r.to_dict() for r in refs], ensure_ascii=False))
        return
    if not refs:
        typer.echo("No documents")
        return
    for ref in refs:
        marker = " (current)" if ref.is_current else ""
        typer.echo(f"{ref.id}  {ref.title}{marker}  {ref.url}")


@app.command("labels")
def list_labels(
    store: StoreOption = None,
):
    """List all labels with their document counts."""
    labels = _get_labels(store)
    counts = labels.list_labels()
    if _get_json_output():
        typer.echo(json.dumps(counts, ensure_ascii=False))
        return
    if not counts:
        typer.echo("No labels")
        return
    for label, count in counts.items():
        typer.echo(f"{count:4d}  {label}")


# -----------------------------------------------------------------------------
# Export / Import
# -----------------------------------------------------------------------------

@app.command("export")
def export_label(
    label: Annotated[str, typer.Argument(help="Label to export")],
    output: Annotated[str, typer.Argument(
        help="Output file path (use '-' for stdout)"
    )] = "-",
    store: StoreOption = None,
):
    """Export the documents carrying a label to JSON."""
    labels = _get_labels(store)
    payload = labels.export_label(label)
    text = payload.to_json()

    if output == "-":
        typer.echo(text)
    else:
        Path(output).write_text(text + "\n", encoding="utf-8")
        typer.echo(
            f"Exported label \"{label}\" with {len(payload.documents)} document(s) to {output}",
            err=True,
        )


@app.command("import")
def import_label(
    file: Annotated[str, typer.Argument(help="JSON export file to import ('-' for stdin)")],
    store: StoreOption = None,
):
    """Add an exported label to the documents it lists."""
    if file == "-":
        text = sys.stdin.read()
    else:
        path = Path(file)
        if not path.exists():
            typer.echo(f"Error: file not found: {file}", err=True)
            raise typer.Exit(1)
        text = path.read_text(encoding="utf-8")

    labels = _get_labels(store)
    result = labels.import_label(text)
    if _get_json_output():
        typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
    else:
        typer.echo(result.message, err=not result.success)
    if not result.success:
        raise typer.Exit(1)


# -----------------------------------------------------------------------------
# Change Detection
# -----------------------------------------------------------------------------

@app.command()
def watch(
    doc: DocArgument,
    interval: Annotated[float, typer.Option(
        "--interval", "-i", help="Seconds between checks"
    )] = 2.0,
    count: Annotated[Optional[int], typer.Option(
        "--count", "-n", help="Stop after this many checks (default: run until interrupted)"
    )] = None,
    store: StoreOption = None,
):
    """Print a document's labels whenever another session changes them."""
    if interval <= 0:
        typer.echo("Error: --interval must be positive", err=True)
        raise typer.Exit(1)
    labels = _get_labels(store)
    session = _open(labels, doc)
    watcher = labels.watch(session)
    watcher.on_external_change(lambda _: typer.echo(_render_labels(session)))

    typer.echo(_render_labels(session))
    checks = 0
    while count is None or checks < count:
        time.sleep(interval)
        watcher.check()
        checks += 1


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="doclabels CLI")
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
