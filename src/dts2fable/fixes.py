"""
Whole-tree rewrites applied between merging and printing.

Every pass is built on `fix_type`, which rewrites children before handing the
rebuilt node to a local rule. `run_pipeline` applies the passes in the order
they depend on each other; each pass can also be used on its own.
"""

from typing import Callable, List, Optional

from dts2fable.errors import PipelineError
from dts2fable.keywords import escape_word, unescape_word
from dts2fable.logger import logger
from dts2fable.models import (
    OBJ,
    FsAlias,
    FsArray,
    FsFile,
    FsFunction,
    FsGeneric,
    FsImport,
    FsInterface,
    FsMapped,
    FsModule,
    FsParam,
    FsProperty,
    FsThis,
    FsTuple,
    FsType,
    FsUnion,
    FsVariable,
    as_function,
    as_generic,
    as_interface,
    as_module,
    as_string_literal,
    dedupe,
    is_string_literal_param,
    mapped,
)
from dts2fable.printer import print_type
from dts2fable.settings import TranslatorSettings

Fix = Callable[[FsType], FsType]


# ---------------------------------------------------------------------------
# Rewrite primitives
# ---------------------------------------------------------------------------


def _fix_all(fix: Fix, types: List[FsType]) -> List[FsType]:
    return [fix_type(fix, t) for t in types]


def _fix_param(fix: Fix, p: FsParam) -> FsParam:
    out = fix(p.model_copy(update={"type": fix_type(fix, p.type)}))
    if not isinstance(out, FsParam):
        raise PipelineError(f"param {p.name!r} must be mapped to a param, got {out.kind}")
    return out


def _fix_modules(fix: Fix, modules: List[FsModule]) -> List[FsModule]:
    fixed = (as_module(fix_type(fix, md)) for md in modules)
    return [md for md in fixed if md is not None]


def fix_type(fix: Fix, tp: FsType) -> FsType:
    """Rewrite *tp* bottom-up: children first, then *fix* on the rebuilt node."""
    if isinstance(tp, FsInterface):
        tp = tp.model_copy(
            update={
                "type_parameters": _fix_all(fix, tp.type_parameters),
                "inherits": _fix_all(fix, tp.inherits),
                "members": _fix_all(fix, tp.members),
            }
        )
    elif isinstance(tp, FsProperty):
        tp = tp.model_copy(
            update={
                "index": _fix_param(fix, tp.index) if tp.index is not None else None,
                "type": fix_type(fix, tp.type),
            }
        )
    elif isinstance(tp, (FsParam, FsArray, FsVariable)):
        tp = tp.model_copy(update={"type": fix_type(fix, tp.type)})
    elif isinstance(tp, FsFunction):
        tp = tp.model_copy(
            update={
                "type_parameters": _fix_all(fix, tp.type_parameters),
                "params": [_fix_param(fix, p) for p in tp.params],
                "return_type": fix_type(fix, tp.return_type),
            }
        )
    elif isinstance(tp, (FsUnion, FsTuple)):
        tp = tp.model_copy(update={"types": _fix_all(fix, tp.types)})
    elif isinstance(tp, (FsAlias, FsGeneric)):
        tp = tp.model_copy(
            update={
                "type": fix_type(fix, tp.type),
                "type_parameters": _fix_all(fix, tp.type_parameters),
            }
        )
    elif isinstance(tp, FsModule):
        tp = tp.model_copy(update={"types": _fix_all(fix, tp.types)})
    elif isinstance(tp, FsFile):
        tp = tp.model_copy(update={"modules": _fix_modules(fix, tp.modules)})
    # enums, mapped names, literals, imports and sentinels have no children
    return fix(tp)


def fix_file(fix: Fix, f: FsFile) -> FsFile:
    """Apply *fix* to every module of *f*; modules rewritten into something else are dropped."""
    return f.model_copy(update={"modules": _fix_modules(fix, f.modules)})


def fix_module(fix: Fix, md: FsModule) -> FsModule:
    return md.model_copy(update={"types": _fix_all(fix, md.types)})


def fix_tic(type_parameters: List[FsType], tp: FsType) -> FsType:
    """Quote every mapped name in *tp* that is one of *type_parameters*: `T` -> `'T`."""
    if not type_parameters:
        return tp
    names = {print_type(t) for t in type_parameters}

    def fix(t: FsType) -> FsType:
        if isinstance(t, FsMapped) and t.name in names:
            return mapped(f"'{t.name}")
        return t

    return fix_type(fix, tp)


# ---------------------------------------------------------------------------
# Auxiliary fixes, applied per module right after merging
# ---------------------------------------------------------------------------


def fix_this(md: FsModule) -> FsModule:
    """Replace `this` return types with the enclosing interface applied to its own type parameters."""

    def fix(tp: FsType) -> FsType:
        if not isinstance(tp, FsInterface):
            return tp
        self_type = FsGeneric(type=mapped(tp.name), type_parameters=tp.type_parameters)
        members = [
            m.model_copy(update={"return_type": self_type})
            if isinstance(m, FsFunction) and isinstance(m.return_type, FsThis)
            else m
            for m in tp.members
        ]
        return tp.model_copy(update={"members": members})

    return fix_module(fix, md)


def fix_node_array(md: FsModule, marker: str = "NodeArray") -> FsModule:
    """Collapse `NodeArray<T>` into a plain array of `T`."""

    def fix(tp: FsType) -> FsType:
        gn = as_generic(tp)
        if (
            gn is not None
            and isinstance(gn.type, FsMapped)
            and gn.type.name == marker
            and len(gn.type_parameters) == 1
        ):
            return FsArray(type=gn.type_parameters[0])
        return tp

    return fix_module(fix, md)


def fix_date_time(md: FsModule) -> FsModule:
    def fix(tp: FsType) -> FsType:
        if isinstance(tp, FsMapped) and tp.name == "Date":
            return mapped("DateTime")
        return tp

    return fix_module(fix, md)


def convert_imports(namespace: List[str], md: FsModule) -> FsModule:
    """
    Turn `declare`d variables into import bindings carrying the namespace
    path of their module, and re-home existing imports the same way.
    """
    path = namespace + [md.name] if md.name else namespace
    types: List[FsType] = []
    for tp in md.types:
        if isinstance(tp, FsModule):
            tp = convert_imports(path, tp)
        elif isinstance(tp, FsImport):
            tp = tp.model_copy(update={"namespace": path})
        elif isinstance(tp, FsVariable) and tp.has_declare:
            tp = FsImport(namespace=path, variable=tp.name, type=print_type(tp.type))
        types.append(tp)
    return md.model_copy(update={"types": types})


# ---------------------------------------------------------------------------
# Numbered passes
# ---------------------------------------------------------------------------


def fix_opens(
    f: FsFile,
    prefix: str = "HTML",
    namespace: str = "Fable.Import.Browser",
) -> FsFile:
    """Open the browser namespace when any referenced type name starts with *prefix*."""
    found: List[str] = []

    def fix(tp: FsType) -> FsType:
        if isinstance(tp, FsMapped) and tp.name.startswith(prefix):
            found.append(tp.name)
        return tp

    fix_type(fix, f)
    if not found or namespace in f.opens:
        return f
    logger.debug("Browser types referenced", example=found[0], open=namespace)
    return f.model_copy(update={"opens": f.opens + [namespace]})


def fix_static(f: FsFile, suffix: str = "Static") -> FsFile:
    """Move static members of each interface into a sibling `<Name>Static` interface."""

    def split(tp: FsType) -> List[FsType]:
        if not isinstance(tp, FsInterface) or tp.is_static or not tp.has_static_members:
            return [tp]
        return [
            tp.model_copy(update={"members": tp.non_static_members}),
            tp.model_copy(
                update={
                    "is_static": True,
                    "name": f"{tp.name}{suffix}",
                    "inherits": [],
                    "members": tp.static_members,
                }
            ),
        ]

    def fix(tp: FsType) -> FsType:
        if not isinstance(tp, FsModule):
            return tp
        return tp.model_copy(update={"types": [t for x in tp.types for t in split(x)]})

    return fix_file(fix, f)


def _static_accessor_name(name: str, suffix: str) -> str:
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return name


def create_iexports(
    f: FsFile, name: str = "IExports", suffix: str = "Static"
) -> FsFile:
    """
    Prepend to every module an interface collecting its module-level values:
    variables, free functions and one accessor per static-holder interface.
    """

    def exported(tp: FsType) -> Optional[FsType]:
        if isinstance(tp, (FsVariable, FsFunction)):
            return tp
        if isinstance(tp, FsInterface) and tp.is_static:
            return FsProperty(
                name=_static_accessor_name(tp.name, suffix), type=mapped(tp.name)
            )
        return None

    def fix(tp: FsType) -> FsType:
        if not isinstance(tp, FsModule):
            return tp
        members = [m for m in (exported(t) for t in tp.types) if m is not None]
        if not members:
            return tp
        exports = FsInterface(name=name, members=members)
        return tp.model_copy(update={"types": [exports] + tp.types})

    return fix_file(fix, f)


def fix_escape_words(f: FsFile) -> FsFile:
    def fix(tp: FsType) -> FsType:
        if isinstance(tp, FsMapped):
            return mapped(escape_word(tp.name))
        if isinstance(tp, FsFunction):
            if tp.name is None:
                return tp
            return tp.model_copy(update={"name": escape_word(tp.name)})
        if isinstance(
            tp, (FsParam, FsProperty, FsInterface, FsModule, FsVariable, FsAlias)
        ):
            return tp.model_copy(update={"name": escape_word(tp.name)})
        if isinstance(tp, FsImport):
            return tp.model_copy(update={"variable": escape_word(tp.variable)})
        return tp

    return fix_file(fix, f)


def add_tic_for_generic_functions(f: FsFile) -> FsFile:
    def fix(tp: FsType) -> FsType:
        it = as_interface(tp)
        if it is None:
            return tp
        members = [
            fix_tic(m.type_parameters, m) if as_function(m) is not None else m
            for m in it.members
        ]
        return it.model_copy(update={"members": members})

    return fix_file(fix, f)


def add_tic_for_generic_types(f: FsFile) -> FsFile:
    def fix(tp: FsType) -> FsType:
        if isinstance(tp, (FsInterface, FsAlias)):
            return fix_tic(tp.type_parameters, tp)
        return tp

    return fix_file(fix, f)


def fix_overloading_on_string_parameters(f: FsFile) -> FsFile:
    """
    `on(event: "click", handler: H)` becomes `on_click(handler: H)` emitted
    as `$0.on('click',$1...)`.
    """

    def fix(tp: FsType) -> FsType:
        fn = as_function(tp)
        if (
            fn is None
            or fn.name is None
            or fn.emit is not None
            or not fn.params
            or not is_string_literal_param(fn.params[0])
        ):
            return tp
        literal = as_string_literal(fn.params[0].type)
        raw_name = unescape_word(fn.name)
        return fn.model_copy(
            update={
                "emit": f"$0.{raw_name}('{literal}',$1...)",
                "name": escape_word(f"{raw_name}_{literal}"),
                "params": fn.params[1:],
            }
        )

    return fix_file(fix, f)


def fix_duplicates_in_union(f: FsFile, max_arity: int = 6) -> FsFile:
    """Dedupe union alternatives; unions still wider than *max_arity* become `obj`."""

    def fix(tp: FsType) -> FsType:
        if not isinstance(tp, FsUnion):
            return tp
        types = dedupe(tp.types)
        if len(types) > max_arity:
            logger.debug("Union too wide, using obj", arity=len(types), max_arity=max_arity)
            return OBJ
        return tp.model_copy(update={"types": types})

    return fix_file(fix, f)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def run_pipeline(f: FsFile, settings: Optional[TranslatorSettings] = None) -> FsFile:
    """Normalize a merged file so the printer can render it."""
    settings = settings or TranslatorSettings()

    modules = f.modules
    if settings.convert_ambient_imports:
        modules = [convert_imports([f.name], md) for md in modules]
    modules = [fix_date_time(fix_node_array(fix_this(md))) for md in modules]
    f = f.model_copy(update={"modules": modules})

    f = fix_opens(f, prefix=settings.browser_prefix, namespace=settings.browser_namespace)
    f = fix_static(f, suffix=settings.static_suffix)
    f = create_iexports(f, name=settings.exports_name, suffix=settings.static_suffix)
    f = fix_escape_words(f)
    f = add_tic_for_generic_functions(f)
    f = add_tic_for_generic_types(f)
    f = fix_overloading_on_string_parameters(f)
    f = fix_duplicates_in_union(f, max_arity=settings.max_union_arity)
    logger.debug("Fix passes applied", file=f.name, modules=len(f.modules))
    return f
