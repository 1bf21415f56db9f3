"""
Command-line interface for latent-explorer.
"""

import functools
import json
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress
from rich.table import Table

from .config import get_settings
from .errors import ExplorerError
from .lab import VectorExpression
from .logging import FORMATS, LEVELS, get_logger, setup_logging
from .metrics import available_metrics
from .service import ExplorerService, NeighborView

console = Console()
logger = get_logger(__name__)


def handle_errors(func):
    """Report engine errors as a red message and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ExplorerError, FileNotFoundError) as e:
            logger.debug("command_failed", error=type(e).__name__)
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise click.exceptions.Exit(1)

    return wrapper


def _service(file: str, pca: Optional[str], metric: Optional[str] = None) -> ExplorerService[str]:
    service: ExplorerService[str] = ExplorerService()
    if metric:
        service.set_metric(metric)

    with Progress(transient=True, console=console) as progress:
        progress.add_task("Loading embeddings...", total=None)
        service.load_files(file, pca)
    return service


def _neighbor_table(neighbors: list[NeighborView[str]], metric: str) -> Table:
    table = Table()
    table.add_column("Rank", style="dim", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Distance", justify="right")
    if metric == "cosine":
        table.add_column("Similarity", justify="right")

    for rank, n in enumerate(neighbors, 1):
        row = [str(rank), str(n.id), f"{n.distance:.5f}"]
        if metric == "cosine":
            sim = 1.0 - n.distance
            color = "green" if sim > 0.9 else "yellow" if sim > 0.7 else "white"
            row.append(f"[{color}]{sim:.5f}[/{color}]")
        table.add_row(*row)
    return table


def _neighbors_json(neighbors: list[NeighborView[str]]) -> list[dict]:
    return [{"id": n.id, "distance": n.distance} for n in neighbors]


pca_option = click.option(
    "--pca", type=click.Path(exists=True), help="Reduced vectors file (derived with PCA if omitted)"
)
metric_option = click.option(
    "--metric", type=click.Choice(list(available_metrics()), case_sensitive=False), help="Distance metric"
)
json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


@click.group()
@click.option("--log-level", type=click.Choice(LEVELS, case_sensitive=False), help="Minimum log level")
@click.option("--log-format", type=click.Choice(FORMATS), help="Log output format")
@handle_errors
def main(log_level: Optional[str], log_format: Optional[str]):
    """
    Explore embedding spaces: neighbors, semantic scales and analogies.

    FILE is a full-dimension embedding file (.json, .jsonl, .npz, .csv).
    A sibling pca_vectors.json is picked up automatically.

    Examples:

        latent-explorer info data/full_vectors.json

        latent-explorer neighbors data/full_vectors.json --id king -k 5

        latent-explorer scale data/full_vectors.json poor rich -n 15

        latent-explorer analogy data/full_vectors.json "king - man + woman"

        latent-explorer group data/full_vectors.json cat dog horse
    """
    settings = get_settings()
    setup_logging(
        level=(log_level or settings.log_level).upper(),
        format=log_format or settings.log_format,
    )


@main.command()
@click.argument("file", type=click.Path(exists=True))
@pca_option
@json_option
@handle_errors
def info(file: str, pca: Optional[str], as_json: bool):
    """
    Show ids, representations and dimensions of a dataset.
    """
    service = _service(file, pca)
    reps = service.available_representations()
    dims = {r.name: service.representation_dimension(r) for r in reps}

    if as_json:
        output = {
            "file": file,
            "n_ids": len(service.group),
            "representations": dims,
            "metric": service.metric_id,
        }
        console.print_json(json.dumps(output))
        return

    lines = "\n".join(f"  {name}: {dim} dims" for name, dim in dims.items())
    console.print()
    console.print(Panel(
        f"[bold]File:[/bold] {file}\n"
        f"[bold]IDs:[/bold] {len(service.group):,}\n"
        f"[bold]Representations:[/bold]\n{lines}\n"
        f"[bold]Metric:[/bold] {service.metric_id}",
        title="Embedding Store Info",
        border_style="blue",
    ))


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--id", "query_id", required=True, help="Query id")
@click.option("--k", "-k", type=int, help="Number of neighbors")
@pca_option
@metric_option
@json_option
@handle_errors
def neighbors(file: str, query_id: str, k: Optional[int], pca: Optional[str], metric: Optional[str], as_json: bool):
    """
    Find nearest neighbors of a stored id.
    """
    service = _service(file, pca, metric)
    results = service.nearest_neighbors(query_id, k)

    if as_json:
        console.print_json(json.dumps({
            "query": query_id,
            "metric": service.metric_id,
            "neighbors": _neighbors_json(results),
        }))
        return

    console.print()
    console.print(f"[bold]Nearest neighbors to {query_id}[/bold] [dim]({service.metric_id})[/dim]")
    console.print()
    console.print(_neighbor_table(results, service.metric_id))


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.argument("a_id")
@click.argument("b_id")
@click.option("--top", "-n", default=20, help="Number of ids to keep")
@click.option("--purity/--closest", default=True, help="Filter by purity (centered axis) or by distance to the axis")
@click.option("--include-anchors/--exclude-anchors", default=True, help="Keep the two anchors in the scale")
@pca_option
@json_option
@handle_errors
def scale(
    file: str,
    a_id: str,
    b_id: str,
    top: int,
    purity: bool,
    include_anchors: bool,
    pca: Optional[str],
    as_json: bool,
):
    """
    Project the vocabulary onto the semantic axis A -> B.
    """
    service = _service(file, pca)
    scores = service.custom_projection_scale(a_id, b_id, top, include_anchors, purity)

    if as_json:
        console.print_json(json.dumps({
            "a": a_id,
            "b": b_id,
            "filter": "purity" if purity else "closest",
            "scale": [
                {
                    "id": s.id,
                    "coordinate": s.coordinate,
                    "orthogonal_distance": s.orthogonal_distance,
                    "purity": s.purity,
                }
                for s in scores
            ],
        }))
        return

    console.print()
    console.print(f"[bold]Semantic scale {a_id} -> {b_id}[/bold]")
    console.print(f"[dim]{len(scores)} ids, filtered by {'purity' if purity else 'distance to axis'}[/dim]")
    console.print()

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Coordinate", justify="right")
    table.add_column("Off-axis", justify="right")
    table.add_column("Purity", justify="right")

    for s in scores:
        style = "bold" if s.id in (a_id, b_id) else ""
        table.add_row(
            str(s.id),
            f"{s.coordinate:.4f}",
            f"{s.orthogonal_distance:.4f}",
            f"{s.purity:.3f}",
            style=style,
        )

    console.print(table)


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.argument("expression")
@click.option("--k", "-k", type=int, help="Number of answers")
@pca_option
@metric_option
@json_option
@handle_errors
def analogy(file: str, expression: str, k: Optional[int], pca: Optional[str], metric: Optional[str], as_json: bool):
    """
    Solve a vector arithmetic expression such as "king - man + woman".
    """
    expr = VectorExpression.parse(expression)
    service = _service(file, pca, metric)
    result = service.solve(expr, k)

    if as_json:
        console.print_json(json.dumps({
            "expression": str(expr),
            "metric": service.metric_id,
            "neighbors": _neighbors_json(list(result.neighbors)),
        }))
        return

    console.print()
    console.print(f"[bold]{expr}[/bold] [dim]({service.metric_id}, inputs excluded)[/dim]")
    console.print()
    console.print(_neighbor_table(list(result.neighbors), service.metric_id))


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.argument("ids", nargs=-1, required=True)
@click.option("--k", "-k", type=int, help="Number of neighbors")
@click.option("--include-selected", is_flag=True, help="Allow the selected ids in the results")
@pca_option
@metric_option
@json_option
@handle_errors
def group(
    file: str,
    ids: tuple[str, ...],
    k: Optional[int],
    include_selected: bool,
    pca: Optional[str],
    metric: Optional[str],
    as_json: bool,
):
    """
    Find the ids nearest to the centroid of a selection.
    """
    service = _service(file, pca, metric)
    result = service.subspace_grouping(ids, k, exclude_selected=not include_selected)

    if as_json:
        console.print_json(json.dumps({
            "selected": list(ids),
            "metric": service.metric_id,
            "neighbors": _neighbors_json(list(result.neighbors)),
        }))
        return

    console.print()
    console.print(f"[bold]Centroid of {', '.join(ids)}[/bold] [dim]({service.metric_id})[/dim]")
    console.print()
    console.print(_neighbor_table(list(result.neighbors), service.metric_id))


if __name__ == "__main__":
    main()
