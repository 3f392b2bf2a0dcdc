"""Command-line interface for bclayers."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    import geopandas as gpd

    from bclayers.schemas.layers import LayerKind

app = typer.Typer(
    name="bclayers",
    help="Ingest and normalize BC vegetation, ecosystem, hydrology and cutblock layers.",
    no_args_is_help=True,
)

console = Console()


def _summary_table(title: str, layers: dict["LayerKind", "gpd.GeoDataFrame"]) -> Table:
    """Summarize ingested layers."""
    table = Table(title=title)
    table.add_column("Layer", style="cyan")
    table.add_column("Features", style="green", justify="right")
    table.add_column("Geometry column", style="green")
    table.add_column("Geometry types", style="green")
    table.add_column("CRS", style="dim")

    for kind, gdf in layers.items():
        types = sorted(gdf.geometry.geom_type.dropna().unique().tolist())
        table.add_row(
            kind.name,
            str(len(gdf)),
            gdf.geometry.name,
            ", ".join(types) or "-",
            str(gdf.crs.to_string()) if gdf.crs is not None else "-",
        )
    return table


@app.command()
def ingest(
    kind: Annotated[
        str,
        typer.Argument(help="Layer kind: vri, bem, wetlands, rivers or ccb."),
    ],
    source: Annotated[
        str | None,
        typer.Option(
            "--source",
            "-s",
            help="Local dataset locator. Omit to fetch from the BC Data Catalogue.",
        ),
    ] = None,
    layer: Annotated[
        str | None,
        typer.Option("--layer", "-l", help="Layer name inside the dataset."),
    ] = None,
    aoi: Annotated[
        str | None,
        typer.Option("--aoi", "-a", help="Area of interest as WKT."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the layer to this file (.gpkg, .fgb, .shp or .geojson).",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Log level."),
    ] = "WARNING",
) -> None:
    """Ingest a single layer."""
    from bclayers.config.settings import driver_for_path
    from bclayers.errors import IngestError
    from bclayers.export import write_layer
    from bclayers.ingestion.ingestor import ingest as ingest_layer
    from bclayers.schemas.layers import LayerKind
    from bclayers.utils.logging import configure_logging

    configure_logging(level=log_level)

    try:
        layer_kind = LayerKind.from_string(kind)
        driver = driver_for_path(output) if output is not None else None
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    origin = source if source is not None else "BC Data Catalogue"
    console.print(f"[blue]Ingesting {layer_kind.name} from {origin}[/blue]")

    try:
        gdf = ingest_layer(layer_kind, source, layer, aoi)
    except IngestError as e:
        console.print(f"[red]Ingestion failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(_summary_table(f"{layer_kind.name} layer", {layer_kind: gdf}))

    if output is not None and driver is not None:
        write_layer(gdf, output, driver=driver, layer=layer_kind.value)
        console.print(f"\n[green]Saved to: {output}[/green]")


@app.command()
def run(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration YAML file.",
            exists=True,
            dir_okay=False,
        ),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Ingest without writing outputs."),
    ] = False,
) -> None:
    """Ingest every enabled layer of a configuration file."""
    import yaml

    from bclayers.config.loader import load_config
    from bclayers.errors import IngestError
    from bclayers.export import write_layer
    from bclayers.ingestion.catalog import BCDataCatalogue
    from bclayers.ingestion.ingestor import build_requests, ingest_many
    from bclayers.utils.logging import configure_logging

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        ingest_config = load_config(config)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(
        level=ingest_config.logging.level,
        json_output=ingest_config.logging.json_output,
    )

    requests = build_requests(ingest_config)
    if not requests:
        console.print("[yellow]No enabled layers in configuration[/yellow]")
        raise typer.Exit(code=0)

    console.print(
        f"[dim]Layers: {', '.join(r.kind.name for r in requests)}[/dim]"
    )

    try:
        layers = ingest_many(
            requests,
            max_workers=ingest_config.max_workers,
            catalog=BCDataCatalogue(ingest_config.catalog),
        )
    except IngestError as e:
        console.print(f"[red]Ingestion failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(_summary_table(f"Project {ingest_config.project}", layers))

    if dry_run:
        return

    for kind, gdf in layers.items():
        path = write_layer(
            gdf,
            ingest_config.output_path(kind),
            driver=ingest_config.output.driver,
            layer=kind.value,
        )
        console.print(f"[green]Saved {kind.name} to: {path}[/green]")


@app.command()
def layers() -> None:
    """Show the supported layer kinds and their defaults."""
    from bclayers.schemas.layers import LAYER_SPECS

    table = Table(title="Supported layers")
    table.add_column("Kind", style="cyan")
    table.add_column("Default layer")
    table.add_column("Catalogue record")
    table.add_column("Geometry column")
    table.add_column("MultiPolygon")
    table.add_column("AOI")

    for spec in LAYER_SPECS.values():
        table.add_row(
            spec.kind.value,
            spec.default_layer,
            spec.record_id or "[dim]local only[/dim]",
            spec.geometry_column,
            "yes" if spec.force_multipolygon else "no",
            "clip" if spec.clip_to_aoi else "filter",
        )

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from bclayers import __version__

    console.print(f"bclayers version {__version__}")


if __name__ == "__main__":
    app()
