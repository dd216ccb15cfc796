"""CLI entry point for geotiling."""

from __future__ import annotations

import logging
import math
import sys

import click

from geotiling.core.types import MAX_RECTANGLE, Cartographic
from geotiling.correction import COORDINATE_SYSTEMS, convert
from geotiling.errors import ConfigurationError
from geotiling.tiling import TilingScheme, default_registry


def _fail(message: str) -> None:
    """Print a red error message to stderr and exit with status 1."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _create_scheme(name: str) -> TilingScheme:
    try:
        return default_registry.create(name)
    except ConfigurationError as e:
        _fail(str(e))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log scheme construction at DEBUG level")
def main(verbose: bool) -> None:
    """Inspect tiling schemes and convert coordinates.

    Examples:

        # List the built-in schemes
        python -m geotiling schemes

        # Tile containing Beijing on the Baidu grid at level 10
        python -m geotiling locate bd09_mercator 116.404 39.915 --level 10

        # Extent of a Web Mercator tile in meters
        python -m geotiling rect web_mercator 0 0 1 --native
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
def schemes() -> None:
    """List the registered tiling schemes."""
    click.echo(click.style("Tiling schemes", fg="cyan", bold=True))
    click.echo(click.style("=" * 40, fg="cyan"))
    for name, preset in sorted(default_registry.presets.items()):
        click.echo(f"{click.style(name, bold=True)} [{preset.family}] {preset.description}")


@main.command()
@click.argument("name")
@click.argument("lon", type=float)
@click.argument("lat", type=float)
@click.option("--level", "-l", type=int, default=0, show_default=True, help="Logical zoom level")
def locate(name: str, lon: float, lat: float, level: int) -> None:
    """Print the tile of scheme NAME containing LON/LAT (WGS84 degrees)."""
    scheme = _create_scheme(name)
    address = scheme.position_to_tile_xy(Cartographic.from_degrees(lon, lat), level)
    if address is None:
        click.echo(click.style("outside scheme", fg="yellow"))
        return
    click.echo(f"x={address.x} y={address.y} level={address.level}")


@main.command()
@click.argument("name")
@click.argument("x", type=int)
@click.argument("y", type=int)
@click.argument("level", type=int)
@click.option("--native", is_flag=True, help="Print native units instead of degrees")
def rect(name: str, x: int, y: int, level: int, native: bool) -> None:
    """Print the extent of tile X/Y/LEVEL of scheme NAME as west south east north."""
    scheme = _create_scheme(name)
    if native:
        rectangle = scheme.tile_xy_to_native_rectangle(x, y, level)
    else:
        rectangle = scheme.tile_xy_to_rectangle(x, y, level)
    if rectangle is MAX_RECTANGLE:
        click.echo(click.style(f"level {level} has no resolution", fg="yellow"))
        return
    if not native:
        rectangle = rectangle.to_degrees()
    click.echo(" ".join(f"{value:.9f}" for value in rectangle))


@main.command(name="convert")
@click.argument("lon", type=float)
@click.argument("lat", type=float)
@click.option(
    "--from", "source", type=click.Choice(COORDINATE_SYSTEMS), default="wgs84", show_default=True,
    help="Coordinate system of the input",
)
@click.option(
    "--to", "target", type=click.Choice(COORDINATE_SYSTEMS), default="gcj02", show_default=True,
    help="Coordinate system of the output",
)
def convert_command(lon: float, lat: float, source: str, target: str) -> None:
    """Convert LON/LAT degrees between coordinate systems."""
    if not (math.isfinite(lon) and math.isfinite(lat)):
        _fail("coordinates must be finite")
    out_lng, out_lat = convert(lon, lat, source, target)
    click.echo(f"{out_lng:.9f} {out_lat:.9f}")


if __name__ == "__main__":
    main()
