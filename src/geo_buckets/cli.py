"""CLI entrypoint for geo-buckets."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from geo_buckets.config import IndexConfig
from geo_buckets.errors import InvalidInput
from geo_buckets.index import DistanceBucketIndex
from geo_buckets.loader import load_points
from geo_buckets.models import Bucket

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _pivot_options(func):
    func = click.option("--min-distance", type=float, default=None,
                        help="Bucket width in miles (env GEO_BUCKETS_MIN_DISTANCE).")(func)
    func = click.option("--lon", type=float, default=None,
                        help="Pivot longitude (env GEO_BUCKETS_PIVOT_LON).")(func)
    func = click.option("--lat", type=float, default=None,
                        help="Pivot latitude (env GEO_BUCKETS_PIVOT_LAT).")(func)
    return func


def _build_index(path: Path, lat, lon, min_distance) -> DistanceBucketIndex:
    try:
        env = IndexConfig.from_env()
        config = IndexConfig.build(
            env.pivot_lat if lat is None else lat,
            env.pivot_lon if lon is None else lon,
            env.min_distance if min_distance is None else min_distance,
        )
    except InvalidInput as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        result = load_points(path)
    except (OSError, ValueError) as exc:
        raise click.ClickException(f"Cannot read {path}: {exc}") from exc

    index = DistanceBucketIndex(config=config)
    skipped = result.skipped
    for point in result.points:
        try:
            index.add(point.latitude, point.longitude, point.payload)
        except InvalidInput as exc:
            logger.warning("Skipping point %r: %s", point, exc)
            skipped += 1

    if skipped:
        err_console.print(f"[yellow]Skipped {skipped} malformed row(s)[/]")
    return index


def _bucket_table(buckets: tuple[Bucket, ...], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", width=4)
    table.add_column("Distance (mi)", justify="right")
    table.add_column("Records", justify="right")
    table.add_column("Payloads")

    for i, bucket in enumerate(buckets):
        payloads = ", ".join(escape(str(p)) for p in bucket.payloads if p is not None)
        table.add_row(str(i), f"{bucket.distance:.3f}", str(len(bucket)), payloads or "-")
    return table


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool):
    """Geo Buckets: group points by their distance from a pivot."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_pivot_options
@click.option("--json", "as_json", is_flag=True, help="Print buckets as JSON.")
def buckets(path: Path, lat, lon, min_distance, as_json: bool):
    """Bucket every point in PATH and list the buckets."""
    index = _build_index(path, lat, lon, min_distance)
    snapshot = index.list()

    if as_json:
        click.echo(json.dumps([b.to_dict() for b in snapshot], indent=2))
        return

    console.print(_bucket_table(
        snapshot,
        f"Buckets around ({index.pivot_lat}, {index.pivot_lon}), width {index.min_distance:g} mi",
    ))


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("query_lat", type=float)
@click.argument("query_lon", type=float)
@_pivot_options
@click.option("--ignore-min", is_flag=True, help="Return the nearest bucket even if out of range.")
def closest(path: Path, query_lat: float, query_lon: float, lat, lon, min_distance,
            ignore_min: bool):
    """Show the bucket of PATH nearest QUERY_LAT QUERY_LON."""
    index = _build_index(path, lat, lon, min_distance)
    try:
        bucket = index.find_closest(query_lat, query_lon, ignore_minimum=ignore_min)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc)) from exc

    if bucket is None:
        console.print(f"[yellow]No bucket within {index.min_distance:g} mi of that point[/]")
        return

    table = Table(title=f"Closest bucket ({bucket.distance:.3f} mi from pivot)")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")
    table.add_column("Distance (mi)", justify="right")
    table.add_column("Payload")
    for record in bucket.records:
        table.add_row(
            f"{record.latitude:.5f}",
            f"{record.longitude:.5f}",
            f"{record.distance:.3f}",
            "-" if record.payload is None else escape(str(record.payload)),
        )
    console.print(table)


if __name__ == "__main__":
    cli()
