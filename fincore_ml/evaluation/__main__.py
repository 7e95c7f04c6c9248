"""Evaluation CLI for fincore_ml."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from fincore_ml.config.settings import get_settings
from fincore_ml.evaluation.metrics import EvaluationMetrics, aggregate_metrics
from fincore_ml.evaluation.runner import load_evaluation_data, run_replay
from fincore_ml.inference import normalize

app = typer.Typer(
    name="fincore-ml-eval",
    help="Evaluation tools for fincore transaction classification.",
    no_args_is_help=True,
)
console = Console()


def _print_summary(metrics: EvaluationMetrics) -> None:
    table = Table(title="Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Transactions", str(metrics.total))
    table.add_row("Accuracy", f"{metrics.accuracy:.1%}")
    table.add_row("Coverage", f"{metrics.coverage:.1%}")
    table.add_row("Precision (classified)", f"{metrics.precision:.1%}")
    table.add_row("Auto-validated", str(metrics.auto_validated))
    table.add_row("Auto-validated precision", f"{metrics.auto_validated_precision:.1%}")

    console.print(table)


def _print_source_breakdown(metrics: EvaluationMetrics) -> None:
    table = Table(title="By Source")
    table.add_column("Source", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Correct", justify="right")

    for source in ("rule", "pattern", "ai", "none"):
        counts = metrics.by_source.get(source)
        if not counts:
            continue
        table.add_row(source, str(counts["total"]), str(counts["correct"]))

    console.print(table)


@app.command("normalize")
def normalize_cmd(
    descriptions: list[str] = typer.Argument(..., help="Raw descriptions"),
) -> None:
    """Show how descriptions are normalized."""
    table = Table(title="Normalization")
    table.add_column("Raw", style="dim")
    table.add_column("Normalized", style="cyan")

    for description in descriptions:
        table.add_row(description, normalize(description) or "[dim]-[/dim]")

    console.print(table)


@app.command()
def replay(
    csv_path: Path = typer.Argument(..., help="Labelled transactions CSV"),
    n_folds: int = typer.Option(5, "--folds", "-k", help="Number of folds"),
    metric: str | None = typer.Option(
        None,
        "--metric",
        "-m",
        help="Similarity metric: token_overlap, token_set_ratio, ratio",
    ),
) -> None:
    """Replay labelled history through the pipeline with k-fold splits."""
    if not csv_path.exists():
        console.print(f"[red]Error: File not found: {csv_path}[/red]")
        raise typer.Exit(1)

    settings = get_settings()
    if metric is not None:
        settings = settings.model_copy(update={"similarity_metric": metric})

    rows = load_evaluation_data(csv_path)
    if len(rows) < n_folds:
        console.print(
            f"[red]Need at least {n_folds} transactions, found {len(rows)}[/red]"
        )
        raise typer.Exit(1)

    console.print(
        f"[bold]{n_folds}-Fold Replay (metric={settings.similarity_metric})[/bold]"
    )
    console.print(f"[dim]Loaded {len(rows)} transactions from {csv_path}[/dim]\n")

    fold_results = run_replay(rows, settings, n_folds=n_folds)

    # Per-fold results
    table = Table(title="Per-Fold Results")
    table.add_column("Fold", style="cyan")
    table.add_column("Accuracy", justify="right")
    table.add_column("Coverage", justify="right")

    for result in fold_results:
        table.add_row(
            result.scenario,
            f"{result.metrics.accuracy:.1%}",
            f"{result.metrics.coverage:.1%}",
        )

    console.print(table)
    console.print()

    aggregated = aggregate_metrics([r.metrics for r in fold_results])
    _print_summary(aggregated)
    _print_source_breakdown(aggregated)


if __name__ == "__main__":
    app()
