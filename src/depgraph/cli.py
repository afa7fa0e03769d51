"""depgraph CLI - typer application entry point."""

from __future__ import annotations

import atexit
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from depgraph.models.work_items import CONNECTION_TYPE_LABELS
from depgraph.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from depgraph.config import AnalysisConfig
    from depgraph.graph.errors import GraphInputError
    from depgraph.models.analysis import AnalysisResult
    from depgraph.models.suggestions import SuggestionReview

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="depgraph",
    help="depgraph: dependency analysis for work item graphs.",
    no_args_is_help=True,
)
console = Console()
log = get_logger(__name__)

SEVERITY_STYLES = {"high": "red", "medium": "yellow", "low": "dim"}

# Config path (set by callback, used by commands)
_config_path: Path | None = None


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to {log-dir}/logs/debug.jsonl.",
        ),
    ] = False,
    log_dir: Annotated[
        Path,
        typer.Option(
            "--log-dir",
            help="Directory that receives logs/ when --log is set (default: current directory).",
        ),
    ] = Path(),
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file or directory containing depgraph.yaml.",
            envvar="DEPGRAPH_CONFIG",
        ),
    ] = None,
) -> None:
    """depgraph: dependency analysis for work item graphs."""
    global _config_path
    _config_path = config

    if log:
        configure_logging(verbosity=verbose, log_to_file=True, log_root=log_dir)
        atexit.register(close_file_logging)
    else:
        configure_logging(verbosity=verbose)


def _load_config() -> AnalysisConfig:
    """Load engine config from --config, exit with error if it is invalid."""
    from depgraph.config import ConfigError, load_config

    path = _config_path
    if path is None and Path("depgraph.yaml").exists():
        path = Path()
    try:
        return load_config(path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1) from None


def _fail(error: GraphInputError, as_json: bool) -> NoReturn:
    """Report a malformed-input error and exit with code 1."""
    log.info("input_rejected", error=type(error).__name__, message=str(error))
    if as_json:
        typer.echo(json.dumps(error.to_dict(), indent=2))
    else:
        console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)
        hints = error.to_dict().get("didYouMean", {})
        for missing_id, matches in hints.items():
            console.print(f"  Did you mean {', '.join(matches)} for '{missing_id}'?")
    raise typer.Exit(1)


def _echo_json(data: dict[str, Any] | list[Any]) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


# =============================================================================
# Output rendering
# =============================================================================


def _print_analysis(result: AnalysisResult, names: dict[str, str]) -> None:
    """Render an analysis result as rich tables."""
    score_style = "green" if result.health_score >= 80 else "yellow"
    if result.health_score < 50:
        score_style = "red"
    console.print()
    console.print(f"Health score: [{score_style}]{result.health_score}[/{score_style}]/100")

    if result.has_cycles:
        table = Table(title=f"Circular dependencies ({len(result.cycles)})")
        table.add_column("Severity", style="bold")
        table.add_column("Path", style="cyan")
        table.add_column("Top fix")
        for cycle in result.cycles:
            style = SEVERITY_STYLES[cycle.severity]
            path = " -> ".join([*cycle.path, cycle.path[0]])
            top_fix = cycle.suggested_fixes[0].reason if cycle.suggested_fixes else "-"
            table.add_row(f"[{style}]{cycle.severity}[/{style}]", path, top_fix)
        console.print(table)
    else:
        console.print(f"Project duration: [bold]{result.project_duration_days:g}[/bold] days")
        if result.critical_path:
            critical = ", ".join(names.get(i, i) for i in result.critical_path)
            console.print(f"Critical path: [cyan]{critical}[/cyan]")

    table = Table(title="Work items")
    table.add_column("Item", style="cyan")
    table.add_column("Start", justify="right")
    table.add_column("Finish", justify="right")
    table.add_column("Slack", justify="right")
    table.add_column("Deps", justify="right")
    table.add_column("Risk", justify="right")
    for node in result.nodes:
        marker = " [bold red]*[/bold red]" if node.is_on_critical_path else ""
        table.add_row(
            names.get(node.work_item_id, node.work_item_id) + marker,
            _days(node.earliest_start),
            _days(node.earliest_finish),
            _days(node.slack),
            f"{node.dependency_count}/{node.dependent_count}",
            f"{node.risk_score:.1f}",
        )
    console.print(table)

    if result.bottlenecks:
        bottlenecks = ", ".join(names.get(i, i) for i in result.bottlenecks)
        console.print(f"Bottlenecks: [yellow]{bottlenecks}[/yellow]")
    for warning in result.warnings:
        console.print(f"[yellow]![/yellow] {warning}")
    console.print()


def _days(value: float | None) -> str:
    return "-" if value is None else f"{value:g}"


def _print_review(review: SuggestionReview, show_rejected: bool) -> None:
    table = Table(title=f"Accepted suggestions ({len(review.accepted)})")
    table.add_column("Source", style="cyan")
    table.add_column("Type")
    table.add_column("Target", style="cyan")
    table.add_column("Confidence", justify="right")
    table.add_column("Reason", style="dim")
    for s in review.accepted:
        kind = CONNECTION_TYPE_LABELS.get(s.connection_type, s.connection_type)
        if s.creates_cycle:
            kind += " [red](creates cycle)[/red]"
        table.add_row(
            s.source_work_item.name or s.source_id,
            kind,
            s.target_work_item.name or s.target_id,
            f"{s.confidence:.2f}",
            s.reason,
        )
    console.print(table)

    if show_rejected and review.rejected:
        table = Table(title=f"Rejected suggestions ({len(review.rejected)})")
        table.add_column("Source", style="cyan")
        table.add_column("Type")
        table.add_column("Target", style="cyan")
        table.add_column("Reason", style="bold")
        table.add_column("Detail", style="dim")
        for r in review.rejected:
            c = r.candidate
            table.add_row(c.source_id, c.connection_type, c.target_id, r.reason, r.detail)
        console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from depgraph import __version__

    console.print(f"depgraph v{__version__}")


@app.command()
def analyze(
    request: Annotated[Path, typer.Argument(help="Analysis request (JSON or YAML).")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the analysis result as camelCase JSON."),
    ] = False,
    fail_on_cycles: Annotated[
        bool,
        typer.Option("--fail-on-cycles", help="Exit with code 2 when cycles are found."),
    ] = False,
) -> None:
    """Analyse a snapshot: cycles, critical path, bottlenecks and health."""
    from depgraph.analysis import analyze_request
    from depgraph.documents import load_request
    from depgraph.graph.errors import GraphInputError

    config = _load_config()
    try:
        snapshot = load_request(request)
        result = analyze_request(snapshot, config)
    except GraphInputError as e:
        _fail(e, as_json)

    if as_json:
        _echo_json(result.model_dump(mode="json", by_alias=True))
    else:
        names = {item.id: item.display_name for item in snapshot.work_items}
        _print_analysis(result, names)

    if fail_on_cycles and result.has_cycles:
        raise typer.Exit(2)


@app.command()
def suggest(
    request: Annotated[Path, typer.Argument(help="Suggestion request (JSON or YAML).")],
    min_confidence: Annotated[
        float | None,
        typer.Option(
            "--min-confidence",
            min=0.0,
            max=1.0,
            help="Acceptance threshold (default: from config, 0.6).",
        ),
    ] = None,
    connection_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Only accept suggestions of this connection type."),
    ] = None,
    show_rejected: Annotated[
        bool,
        typer.Option("--show-rejected", help="Also list rejected candidates with reasons."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print accepted and rejected suggestions as JSON."),
    ] = False,
) -> None:
    """Validate AI-proposed connections before they are shown for approval."""
    from depgraph.documents import load_suggestion_request
    from depgraph.graph.errors import GraphInputError
    from depgraph.graph.suggestions import review_suggestions

    config = _load_config()
    threshold = min_confidence if min_confidence is not None else config.min_confidence
    try:
        doc = load_suggestion_request(request)
        review = review_suggestions(
            doc.candidates,
            doc.work_items,
            doc.connections,
            min_confidence=threshold,
            connection_type=connection_type or doc.connection_type,
        )
    except GraphInputError as e:
        _fail(e, as_json)

    if as_json:
        _echo_json(review.model_dump(mode="json", by_alias=True))
    else:
        _print_review(review, show_rejected)


@app.command("apply-fix")
def apply_fix_command(
    request: Annotated[Path, typer.Argument(help="Analysis request holding the connections.")],
    connection_id: Annotated[
        str, typer.Option("--connection-id", help="Id of the connection to fix.")
    ],
    action: Annotated[
        str,
        typer.Option(
            "--action",
            "-a",
            help="remove_connection, reverse_connection or change_type.",
        ),
    ],
    new_type: Annotated[
        str | None,
        typer.Option("--new-type", help="Target type for change_type (default: relates_to)."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the updated request here (default: in place)."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the acknowledgement as JSON."),
    ] = False,
) -> None:
    """Apply one cycle fix and write the updated snapshot.

    No analysis is run; re-run 'depgraph analyze' on the result.
    """
    from depgraph.documents import load_request, parse_document, save_request
    from depgraph.graph.errors import ConnectionNotFoundError, GraphInputError
    from depgraph.graph.fixes import apply_fix
    from depgraph.graph.store import DictConnectionStore
    from depgraph.models.documents import FixRequest

    try:
        snapshot = load_request(request)
        fix = parse_document(
            {"connectionId": connection_id, "action": action, "newType": new_type},
            FixRequest,
            source="<command line>",
        )
        store = DictConnectionStore(snapshot.connections)
        ack = apply_fix(store, fix)
    except GraphInputError as e:
        _fail(e, as_json)
    except ConnectionNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1) from None

    updated = snapshot.model_copy(update={"connections": store.all()})
    destination = save_request(updated, output or request)

    if as_json:
        _echo_json(ack.model_dump(mode="json", by_alias=True))
    else:
        console.print(f"[green]✓[/green] {ack.message}")
        console.print(f"  Updated snapshot: {destination}")


@app.command("check-edge")
def check_edge(
    request: Annotated[Path, typer.Argument(help="Analysis request (JSON or YAML).")],
    source: Annotated[str, typer.Argument(help="Source work item id.")],
    target: Annotated[str, typer.Argument(help="Target work item id.")],
    connection_type: Annotated[
        str, typer.Option("--type", "-t", help="Connection type of the proposed edge.")
    ] = "dependency",
) -> None:
    """Check whether a proposed connection is valid and would close a cycle.

    Exits with code 1 if the connection is invalid and 2 if it would
    create a cycle.
    """
    from depgraph.documents import load_request
    from depgraph.graph.errors import GraphInputError
    from depgraph.graph.suggestions import review_suggestions
    from depgraph.models.suggestions import SuggestionCandidate

    candidate = SuggestionCandidate(
        source_id=source,
        target_id=target,
        connection_type=connection_type,
        confidence=1.0,
    )
    try:
        snapshot = load_request(request)
        review = review_suggestions(
            [candidate], snapshot.work_items, snapshot.connections, min_confidence=0.0
        )
    except GraphInputError as e:
        _fail(e, as_json=False)

    if review.rejected:
        rejection = review.rejected[0]
        console.print(f"[red]✗[/red] {source} -> {target}: {rejection.detail}")
        raise typer.Exit(1)

    if review.accepted[0].creates_cycle:
        console.print(f"[red]✗[/red] {source} -> {target} would create a circular dependency")
        raise typer.Exit(2)
    console.print(f"[green]✓[/green] {source} -> {target} can be added")


@app.command()
def export(
    request: Annotated[Path, typer.Argument(help="Analysis request (JSON or YAML).")],
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory for the exported file."),
    ] = Path("export"),
    export_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Export format."),
    ] = "json",
) -> None:
    """Export the snapshot with its critical path and health score."""
    from depgraph.analysis import analyze_request
    from depgraph.documents import load_request
    from depgraph.export import build_export_context, get_exporter
    from depgraph.graph.errors import GraphInputError

    try:
        exporter = get_exporter(export_format)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(1) from None

    config = _load_config()
    try:
        snapshot = load_request(request)
        result = analyze_request(snapshot, config)
    except GraphInputError as e:
        _fail(e, as_json=False)

    context = build_export_context(snapshot, result)
    output_file = exporter.export(context, output_dir)
    log.info("export_written", path=str(output_file), format=exporter.format_name)

    console.print(f"[green]✓[/green] Exported {len(snapshot.work_items)} work item(s)")
    console.print(f"  Location: {output_file}")


if __name__ == "__main__":
    app()
