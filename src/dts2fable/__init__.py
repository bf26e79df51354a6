from dts2fable.settings import TranslatorSettings
from dts2fable.translator import read_source_file, translate_file, translate_source

__all__ = [
    "TranslatorSettings",
    "read_source_file",
    "translate_file",
    "translate_source",
]
