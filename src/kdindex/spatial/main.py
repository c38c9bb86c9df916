"""Query a k-d tree built over a random point cloud."""

from typing import Annotated

import jax
import typer
from rich.console import Console
from rich.table import Table

from kdindex.spatial.kd_tree import PruningStrategy, SpatialTree, linear_scan_k_nearest
from kdindex.spatial.metrics import get_metric
from kdindex.utils.timer import capture_time

console = Console()

app = typer.Typer(pretty_exceptions_show_locals=False)


def random_points(n_points: int, dimension: int, seed: int):
    """Uniform points in the unit cube, labeled by their index."""
    coordinates = jax.random.uniform(jax.random.PRNGKey(seed), (n_points, dimension))
    return [(row, index) for index, row in enumerate(coordinates.tolist())]


@app.command()
def main(
    target: Annotated[
        list[float], typer.Argument(help="The query coordinate, one value per axis")
    ],
    n_points: Annotated[int, typer.Option(help="The number of random points")] = 1000,
    k: Annotated[int, typer.Option(help="The number of neighbors")] = 5,
    metric: Annotated[str, typer.Option(help="The distance metric")] = "euclidean",
    pruning: Annotated[
        PruningStrategy, typer.Option(help="The subtree pruning rule")
    ] = PruningStrategy.hyperplane,
    seed: Annotated[int, typer.Option(help="The random seed")] = 42,
):
    """Build a tree over random points and print the nearest neighbors of TARGET."""
    distance = get_metric(metric)
    points = random_points(n_points, len(target), seed)

    with capture_time() as build_time:
        tree = SpatialTree.build(list(points))
    if tree is None:
        raise typer.BadParameter("n-points must be positive")
    console.print(
        f"Built tree over {len(tree)} points in {build_time():.3f}s "
        f"(height {tree.height()})"
    )

    with capture_time() as query_time:
        neighbors = tree.query_k_nearest(target, k, distance, pruning)
    console.print(f"Query took {query_time():.4f}s")

    table = Table(title=f"{k} nearest to {tuple(target)} ({metric}, {pruning.value})")
    table.add_column("rank", justify="right")
    table.add_column("label", justify="right")
    table.add_column("distance", justify="right")
    table.add_column("coordinate")
    for rank, neighbor in enumerate(neighbors, start=1):
        table.add_row(
            str(rank),
            str(neighbor.value),
            f"{neighbor.distance:.4f}",
            ", ".join(f"{c:.3f}" for c in neighbor.coordinate),
        )
    console.print(table)

    expected = {n.value for n in linear_scan_k_nearest(points, target, k, distance)}
    if expected == {n.value for n in neighbors}:
        console.print("[green]Matches the exhaustive scan[/green]")
    else:
        console.print("[yellow]Differs from the exhaustive scan[/yellow]")


if __name__ == "__main__":
    app()
