import logging
from typing import Annotated

import typer

from crate_analysis.cli.convert import convert
from crate_analysis.cli.inspect import inspect, lookup, validate
from crate_analysis.config import get_log_level

app = typer.Typer(
    name="crate-analysis",
    help="Inspect and convert crate analysis documents.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    if verbose:
        logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")


app.command("inspect")(inspect)
app.command("validate")(validate)
app.command("convert")(convert)
app.command("lookup")(lookup)


def main() -> None:
    app()
