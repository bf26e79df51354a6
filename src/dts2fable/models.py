from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class FsEnumCaseType(str, Enum):
    NUMERIC = "numeric"
    STRING = "string"
    UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# IR variants
#
# Every variant is an immutable pydantic model tagged by `kind`; `FsType` is
# the discriminated union over all of them. Rewrites build new nodes with
# `model_copy(update=...)`, equality is structural.
# ---------------------------------------------------------------------------


class _FsNode(BaseModel):
    model_config = ConfigDict(frozen=True)


class FsInterface(_FsNode):
    kind: Literal["interface"] = "interface"
    is_static: bool = False  # holds only extracted static members
    name: str
    type_parameters: List["FsType"] = Field(default_factory=list)
    inherits: List["FsType"] = Field(default_factory=list)
    members: List["FsType"] = Field(default_factory=list)

    @property
    def has_static_members(self) -> bool:
        return any(is_static(m) for m in self.members)

    @property
    def static_members(self) -> List["FsType"]:
        return [m for m in self.members if is_static(m)]

    @property
    def non_static_members(self) -> List["FsType"]:
        return [m for m in self.members if not is_static(m)]


class FsEnumCase(_FsNode):
    name: str
    type: FsEnumCaseType
    value: Optional[str] = None


class FsEnum(_FsNode):
    kind: Literal["enum"] = "enum"
    name: str
    cases: List[FsEnumCase] = Field(default_factory=list)

    @property
    def type(self) -> FsEnumCaseType:
        """The weakest case kind: unknown beats string beats numeric."""
        if any(c.type == FsEnumCaseType.UNKNOWN for c in self.cases):
            return FsEnumCaseType.UNKNOWN
        if any(c.type == FsEnumCaseType.STRING for c in self.cases):
            return FsEnumCaseType.STRING
        return FsEnumCaseType.NUMERIC


class FsParam(_FsNode):
    kind: Literal["param"] = "param"
    name: str
    optional: bool = False
    param_array: bool = False
    type: "FsType"


class FsFunction(_FsNode):
    kind: Literal["function"] = "function"
    emit: Optional[str] = None
    is_static: bool = False
    name: Optional[str] = None  # declarations have them, signatures do not
    type_parameters: List["FsType"] = Field(default_factory=list)
    params: List[FsParam] = Field(default_factory=list)
    return_type: "FsType"


class FsProperty(_FsNode):
    kind: Literal["property"] = "property"
    emit: Optional[str] = None
    is_static: bool = False
    index: Optional[FsParam] = None
    name: str
    option: bool = False
    type: "FsType"


class FsArray(_FsNode):
    kind: Literal["array"] = "array"
    type: "FsType"


class FsTodo(_FsNode):
    kind: Literal["todo"] = "todo"


class FsNone(_FsNode):
    kind: Literal["none"] = "none"


class FsMapped(_FsNode):
    kind: Literal["mapped"] = "mapped"
    name: str


class FsUnion(_FsNode):
    kind: Literal["union"] = "union"
    option: bool = False
    types: List["FsType"] = Field(default_factory=list)


class FsAlias(_FsNode):
    kind: Literal["alias"] = "alias"
    name: str
    type: "FsType"
    type_parameters: List["FsType"] = Field(default_factory=list)


class FsGeneric(_FsNode):
    kind: Literal["generic"] = "generic"
    type: "FsType"
    type_parameters: List["FsType"] = Field(default_factory=list)


class FsTuple(_FsNode):
    kind: Literal["tuple"] = "tuple"
    types: List["FsType"] = Field(default_factory=list)


class FsVariable(_FsNode):
    kind: Literal["variable"] = "variable"
    has_declare: bool = False
    name: str
    type: "FsType"


class FsImport(_FsNode):
    kind: Literal["import"] = "import"
    namespace: List[str] = Field(default_factory=list)
    variable: str
    type: str  # already printed


class FsStringLiteral(_FsNode):
    kind: Literal["string_literal"] = "string_literal"
    value: str


class FsThis(_FsNode):
    kind: Literal["this"] = "this"


class FsModule(_FsNode):
    kind: Literal["module"] = "module"
    name: str  # empty only for the global module of a file
    types: List["FsType"] = Field(default_factory=list)


class FsFile(_FsNode):
    kind: Literal["file"] = "file"
    name: str
    opens: List[str] = Field(default_factory=list)
    modules: List[FsModule] = Field(default_factory=list)


FsType = Annotated[
    Union[
        FsInterface,
        FsEnum,
        FsProperty,
        FsParam,
        FsArray,
        FsTodo,
        FsNone,
        FsMapped,
        FsFunction,
        FsUnion,
        FsAlias,
        FsGeneric,
        FsTuple,
        FsModule,
        FsFile,
        FsVariable,
        FsStringLiteral,
        FsImport,
        FsThis,
    ],
    Field(discriminator="kind"),
]

for _model in (
    FsInterface,
    FsParam,
    FsFunction,
    FsProperty,
    FsArray,
    FsUnion,
    FsAlias,
    FsGeneric,
    FsTuple,
    FsVariable,
    FsModule,
    FsFile,
):
    _model.model_rebuild()


# Shared sentinels; the models are frozen so sharing them is safe.
TODO = FsTodo()
NONE = FsNone()
THIS = FsThis()


def mapped(name: str) -> FsMapped:
    return FsMapped(name=name)


OBJ = mapped("obj")
UNIT = mapped("unit")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def as_function(tp: FsType) -> Optional[FsFunction]:
    return tp if isinstance(tp, FsFunction) else None


def as_interface(tp: FsType) -> Optional[FsInterface]:
    return tp if isinstance(tp, FsInterface) else None


def as_generic(tp: FsType) -> Optional[FsGeneric]:
    return tp if isinstance(tp, FsGeneric) else None


def as_module(tp: FsType) -> Optional[FsModule]:
    return tp if isinstance(tp, FsModule) else None


def as_string_literal(tp: FsType) -> Optional[str]:
    return tp.value if isinstance(tp, FsStringLiteral) else None


def is_module(tp: FsType) -> bool:
    return isinstance(tp, FsModule)


def is_string_literal(tp: FsType) -> bool:
    return isinstance(tp, FsStringLiteral)


def is_string_literal_param(p: FsParam) -> bool:
    return is_string_literal(p.type)


def is_static(tp: FsType) -> bool:
    if isinstance(tp, (FsFunction, FsProperty, FsInterface)):
        return tp.is_static
    return False


def dedupe(types: List[FsType]) -> List[FsType]:
    """Drop structurally equal duplicates, keeping the first occurrence."""
    out: List[FsType] = []
    for tp in types:
        if tp not in out:
            out.append(tp)
    return out
