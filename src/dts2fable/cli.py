import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic_settings import SettingsConfigDict

from dts2fable import settings
from dts2fable.errors import TranslationError
from dts2fable.translator import translate_file


def load_settings(
    env_prefix: Optional[str] = "DTS2FABLE_",
    env_file: Optional[str] = None,
    **kwargs,
) -> settings.TranslatorSettings:
    config_dict = SettingsConfigDict(
        env_prefix=env_prefix or "",
        env_file=env_file,
    )

    class Settings(settings.TranslatorSettings):
        model_config = config_dict

    return Settings(**kwargs)


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
    "paths",
    nargs=-1,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "--namespace",
    type=str,
    default=None,
    help="Root namespace of the generated module (default: output file name).",
)
@click.option(
    "--convert-imports/--no-convert-imports",
    default=None,
    help="Turn `declare` variables into Import bindings.",
)
@click.option(
    "--debug/--no-debug",
    default=None,
    help="Enable debug logging (default: DTS2FABLE_DEBUG).",
)
def main(
    paths: Tuple[Path, ...],
    namespace: Optional[str],
    convert_imports: Optional[bool],
    debug: Optional[bool],
) -> None:
    """
    Translate TypeScript definition files into F# Fable bindings.

    PATHS come in pairs: the .d.ts file to read, then the .fs file to write.
    """
    overrides = {}
    if debug is not None:
        overrides["debug"] = debug
    if namespace:
        overrides["namespace"] = namespace
    if convert_imports is not None:
        overrides["convert_ambient_imports"] = convert_imports
    cfg = load_settings(**overrides)
    _setup_logging(cfg.debug)

    if not paths:
        raise click.UsageError("Please provide the path to a TypeScript definition file")
    if len(paths) % 2:
        raise click.UsageError("Please provide the path to the F# file to be written")

    for ts_path, fs_path in zip(paths[::2], paths[1::2]):
        try:
            out = translate_file(ts_path, fs_path, cfg)
        except (TranslationError, OSError) as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Wrote {out}")


if __name__ == "__main__":
    main()
