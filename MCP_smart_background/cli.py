"""CLI entry point for Smart Background Removal MCP Server."""

import logging

import click

from MCP_smart_background.constants import (
    DEFAULT_MAX_DIMENSION,
    DEFAULT_SAMPLE_DEPTH,
    DEFAULT_TOLERANCE,
    MAX_TOLERANCE,
    MIN_DOMINANT_SHARE,
    MIN_TOLERANCE,
)
from MCP_smart_background.exceptions import SmartBackgroundError
from MCP_smart_background.server import mcp
from MCP_smart_background.services.background_remover import (
    dominant_edge_share,
    remove_background_from_file,
)
from MCP_smart_background.services.codec import decode_rgba
from MCP_smart_background.services.options import SmartRemovalOptions

LOG_LEVELS = ["debug", "info", "warning", "error"]


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Smart Background Removal MCP Server CLI.

    If no command is specified, runs the server with default stdio transport.
    """
    if ctx.invoked_subcommand is None:
        # Default behavior: run serve with stdio transport
        ctx.invoke(serve)


@cli.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http", "http"]),
    default="stdio",
    help="Transport protocol for the MCP server.",
)
@click.option(
    "--port",
    type=int,
    default=8083,
    help="Port for HTTP/SSE transport.",
)
@click.option(
    "--host",
    type=str,
    default="127.0.0.1",
    help="Host for HTTP/SSE transport.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="info",
    help="Log level for the server.",
)
def serve(transport: str, port: int, host: str, log_level: str) -> None:
    """Start the MCP server.

    By default, uses stdio transport for compatibility with VS Code MCP clients.

    Examples:
        mcp-smart-background serve                              # stdio transport (default)
        mcp-smart-background serve --transport streamable-http  # HTTP transport on port 8083
    """
    if transport == "stdio":
        mcp.run()
    elif transport == "sse":
        mcp.run(transport="sse", host=host, port=port, log_level=log_level)
    elif transport in ("streamable-http", "http"):
        mcp.run(transport="streamable-http", host=host, port=port, log_level=log_level)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output PNG path. Defaults to the input name with '_nobg' appended.",
)
@click.option(
    "--tolerance",
    type=click.FloatRange(MIN_TOLERANCE, MAX_TOLERANCE),
    default=DEFAULT_TOLERANCE,
    show_default=True,
    help="Color tolerance for background matching.",
)
@click.option(
    "--sample-depth",
    type=click.IntRange(min=1),
    default=DEFAULT_SAMPLE_DEPTH,
    show_default=True,
    help="How many pixels deep to sample from each edge.",
)
@click.option(
    "--edge-smoothing/--no-edge-smoothing",
    default=False,
    show_default=True,
    help="Apply legacy anti-alias smoothing.",
)
@click.option(
    "--max-dimension",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DIMENSION,
    show_default=True,
    help="Larger images are processed downscaled to this size.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="warning",
    help="Log level.",
)
def remove(
    input_path: str,
    output_path: str | None,
    tolerance: float,
    sample_depth: int,
    edge_smoothing: bool,
    max_dimension: int,
    log_level: str,
) -> None:
    """Remove the background from INPUT_PATH and write a transparent PNG."""
    _configure_logging(log_level)
    options = SmartRemovalOptions(
        tolerance=tolerance,
        sample_depth=sample_depth,
        edge_smoothing=edge_smoothing,
        max_dimension=max_dimension,
    )
    try:
        result_path, report = remove_background_from_file(input_path, output_path, options)
    except (SmartBackgroundError, OSError) as e:
        raise click.ClickException(str(e)) from e

    if report.applied:
        click.echo(
            f"{result_path}: removed {report.pixels_removed} background pixels "
            f"({report.width}x{report.height})"
        )
    else:
        click.echo(f"{result_path}: no border colors detected, image left unchanged")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
def check(input_path: str) -> None:
    """Report whether INPUT_PATH has a dominant border color.

    Exits with status 1 when smart removal is not recommended.
    """
    try:
        with open(input_path, "rb") as f:
            raster = decode_rgba(f.read())
    except OSError as e:
        raise click.ClickException(f"Could not read image: {e}") from e

    share = dominant_edge_share(raster)
    suitable = share > MIN_DOMINANT_SHARE
    click.echo(
        f"{input_path}: dominant edge color covers {share:.1%} of edge samples, "
        f"smart removal {'recommended' if suitable else 'not recommended'}"
    )
    if not suitable:
        raise SystemExit(1)


def main() -> None:
    """Run the Smart Background Removal CLI."""
    cli()


if __name__ == "__main__":
    main()
