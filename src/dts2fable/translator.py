from pathlib import Path
from typing import List, Optional, Union

from dts2fable.fixes import run_pipeline
from dts2fable.logger import logger
from dts2fable.lowering import read_declarations
from dts2fable.merging import merge_modules
from dts2fable.models import FsFile, FsModule
from dts2fable.printer import print_file
from dts2fable.settings import TranslatorSettings


def read_source_file(
    path: str,
    namespace: str,
    source: bytes,
    settings: Optional[TranslatorSettings] = None,
) -> FsFile:
    """
    Lower and merge one declaration source. Top-level statements go into the
    anonymous global module of the returned file.
    """
    settings = settings or TranslatorSettings()
    gbl = FsModule(name="", types=read_declarations(source, path))
    modules = [md for md in merge_modules([gbl]) if isinstance(md, FsModule)]
    return FsFile(name=namespace, opens=list(settings.opens), modules=modules)


def translate_source(
    source: Union[str, bytes],
    namespace: str,
    settings: Optional[TranslatorSettings] = None,
    path: str = "<source>",
) -> List[str]:
    """Translate declaration source text into F# lines."""
    settings = settings or TranslatorSettings()
    if isinstance(source, str):
        source = source.encode("utf-8")
    f = read_source_file(path, namespace, source, settings)
    f = run_pipeline(f, settings)
    return print_file(f)


def translate_file(
    ts_path: Union[str, Path],
    fs_path: Union[str, Path],
    settings: Optional[TranslatorSettings] = None,
) -> Path:
    """
    Translate the declaration file at *ts_path* and write the bindings to
    *fs_path*. The namespace defaults to the output file name without its
    extension.
    """
    settings = settings or TranslatorSettings()
    ts_path = Path(ts_path)
    fs_path = Path(fs_path)
    namespace = settings.namespace or fs_path.stem

    logger.debug("Translating declaration file", input=str(ts_path), namespace=namespace)
    lines = translate_source(ts_path.read_bytes(), namespace, settings, path=str(ts_path))

    fs_path.parent.mkdir(parents=True, exist_ok=True)
    fs_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    logger.info("Wrote F# bindings", output=str(fs_path), lines=len(lines))
    return fs_path
