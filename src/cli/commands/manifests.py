"""Manifest rendering commands."""

from pathlib import Path

import typer

from src.cli.utils.context import CLIContext
from src.core.exceptions import ManifestError
from src.manifests import load_render_context, render_openfga, render_yaml

app = typer.Typer(help="Render Kubernetes manifests")


@app.command("render")
def render(
    ctx: typer.Context,
    config_file: Path = typer.Argument(..., help="YAML render configuration"),
):
    """
    Render the OpenFGA deployment and service as YAML.

    Prints nothing when OpenFGA is disabled.
    """
    cli_ctx: CLIContext = ctx.obj

    try:
        render_ctx = load_render_context(config_file)
    except ManifestError as e:
        cli_ctx.formatter.print_error(e.message)
        raise typer.Exit(1)

    objects = render_openfga(render_ctx)
    if objects:
        cli_ctx.console.print(
            render_yaml(objects).rstrip(), markup=False, highlight=False, soft_wrap=True
        )
