from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_opens() -> List[str]:
    return ["System", "Fable.Core", "Fable.Import.JS"]


class TranslatorSettings(BaseSettings):
    """Settings for one translation run."""

    model_config = SettingsConfigDict(env_prefix="DTS2FABLE_")

    namespace: Optional[str] = Field(
        default=None,
        description=(
            "Root namespace written in the `module rec` header. "
            "If None, the output file name without extension is used."
        ),
    )
    opens: List[str] = Field(
        default_factory=_get_default_opens,
        description="Namespaces opened at the top of every generated file.",
    )
    browser_prefix: str = Field(
        default="HTML",
        description="Type names starting with this prefix pull in the browser namespace.",
    )
    browser_namespace: str = Field(
        default="Fable.Import.Browser",
        description="Namespace opened when a browser type is referenced.",
    )
    static_suffix: str = Field(
        default="Static",
        description="Suffix of the synthetic interface holding static members of a class.",
    )
    exports_name: str = Field(
        default="IExports",
        description="Name of the synthetic interface collecting module-level values.",
    )
    max_union_arity: int = Field(
        default=6,
        description=(
            "Largest union printed as an erased union type (U2..Un). "
            "Wider unions degrade to `obj`."
        ),
    )
    convert_ambient_imports: bool = Field(
        default=False,
        description=(
            "If True, `declare` variables are turned into import bindings "
            "carrying their enclosing namespace path."
        ),
    )
    debug: bool = Field(default=False, description="Enable debug logging.")
