#!/usr/bin/env python3
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from devtools import pprint

from dts2fable.fixes import run_pipeline
from dts2fable.logger import logger
from dts2fable.settings import TranslatorSettings
from dts2fable.translator import read_source_file


def _setup_logging(debug: bool) -> None:
    # Ensure stdlib logger emits records so structlog output is visible
    level = logging.DEBUG if debug else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    else:
        for handler in root.handlers:
            handler.setLevel(level)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "source",
    type=click.Path(
        exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path
    ),
)
@click.option(
    "--namespace",
    type=str,
    default=None,
    help="Root namespace (default: source file name).",
)
@click.option(
    "--fixed/--raw",
    default=True,
    help="Dump the IR after the fix passes, or right after merging.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug logging to see every degraded node.",
)
def main(source: Path, namespace: Optional[str], fixed: bool, debug: bool) -> None:
    """
    Parse a TypeScript definition file and pretty-print its IR.
    """
    _setup_logging(debug)

    settings = TranslatorSettings()
    ns = namespace or source.name.split(".")[0]
    f = read_source_file(str(source), ns, source.read_bytes(), settings)
    if fixed:
        f = run_pipeline(f, settings)

    logger.debug("ir_dump", modules=len(f.modules))
    pprint(f)


if __name__ == "__main__":
    main()
