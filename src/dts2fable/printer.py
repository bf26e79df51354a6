"""
Render the IR as F# binding declarations.

`print_file` produces the output as a list of lines; the `print_*` helpers
below it format single members and type expressions.
"""

from typing import List

from dts2fable.errors import PrinterError
from dts2fable.keywords import create_enum_name
from dts2fable.logger import logger
from dts2fable.models import (
    FsAlias,
    FsArray,
    FsEnum,
    FsEnumCaseType,
    FsFile,
    FsFunction,
    FsGeneric,
    FsImport,
    FsInterface,
    FsMapped,
    FsModule,
    FsNone,
    FsProperty,
    FsStringLiteral,
    FsTodo,
    FsTuple,
    FsType,
    FsUnion,
    FsVariable,
)

INDENT = "    "


def _attr_string(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


def _option(flag: bool) -> str:
    return " option" if flag else ""


def print_type(tp: FsType) -> str:
    if isinstance(tp, FsMapped):
        return tp.name
    if isinstance(tp, (FsTodo, FsNone)):
        return "TODO"
    if isinstance(tp, FsArray):
        return f"ResizeArray<{print_type(tp.type)}>"
    if isinstance(tp, FsUnion):
        if not tp.types:
            return f"obj{_option(tp.option)}"
        if len(tp.types) == 1:
            return f"{print_type(tp.types[0])}{_option(tp.option)}"
        alternatives = ", ".join(print_type(t) for t in tp.types)
        return f"U{len(tp.types)}<{alternatives}>{_option(tp.option)}"
    if isinstance(tp, FsGeneric):
        base = print_type(tp.type)
        if not tp.type_parameters:
            return base
        return f"{base}<{', '.join(print_type(t) for t in tp.type_parameters)}>"
    if isinstance(tp, FsFunction):
        if tp.params:
            types = [p.type for p in tp.params] + [tp.return_type]
        else:
            types = [FsMapped(name="unit"), tp.return_type]
        return "(" + " -> ".join(print_type(t) for t in types) + ")"
    if isinstance(tp, FsTuple):
        return " * ".join(print_type(t) for t in tp.types)
    if isinstance(tp, FsVariable):
        return f"abstract {tp.name}: {print_type(tp.type)} with get, set"
    if isinstance(tp, FsStringLiteral):
        return "string"
    logger.warning("Unsupported type in print_type", kind=tp.kind)
    return "TODO"


def print_function(f: FsFunction) -> str:
    if f.name is None:
        raise PrinterError("function member without a name")
    line = []
    if f.emit is not None:
        line.append(f'[<Emit "{_attr_string(f.emit)}">] ')
    line.append(f"abstract {f.name}")
    params = []
    for p in f.params:
        opt = "?" if p.optional else ""
        if p.param_array:
            if not isinstance(p.type, FsArray):
                raise PrinterError(
                    f"function {f.name} has a rest parameter {p.name} that is not an array"
                )
            params.append(f"[<ParamArray>] {opt}{p.name}: {print_type(p.type.type)}")
        else:
            params.append(f"{opt}{p.name}: {print_type(p.type)}")
    if params:
        line.append(f": {' * '.join(params)}")
    else:
        line.append(": unit")
    line.append(f" -> {print_type(f.return_type)}")
    return "".join(line)


def print_property(pr: FsProperty) -> str:
    emit = f'[<Emit "{_attr_string(pr.emit)}">] ' if pr.emit is not None else ""
    index = f"{pr.index.name}: {print_type(pr.index.type)} -> " if pr.index is not None else ""
    return (
        f"{emit}abstract {pr.name}: {index}{print_type(pr.type)}{_option(pr.option)}"
        " with get, set"
    )


def print_type_parameters(tps: List[FsType]) -> str:
    if not tps:
        return ""
    return "<" + ", ".join(print_type(t) for t in tps) + ">"


def _print_interface(lines: List[str], indent: str, it: FsInterface) -> None:
    lines.append("")
    lines.append(
        f"{indent}type [<AllowNullLiteral>] {it.name}{print_type_parameters(it.type_parameters)} ="
    )
    body: List[str] = [f"inherit {print_type(ih)}" for ih in it.inherits]
    for mbr in it.members:
        if isinstance(mbr, FsFunction):
            body.append(print_function(mbr))
        elif isinstance(mbr, FsProperty):
            body.append(print_property(mbr))
        else:
            body.append(print_type(mbr))
    if not body:
        body.append("interface end")
    lines.extend(f"{indent}{INDENT}{b}" for b in body)


def _print_enum_case_name(name: str) -> str:
    normalized = create_enum_name(name)
    if normalized == name:
        return f"| {name}"
    return f'| [<CompiledName "{_attr_string(name)}">] {normalized}'


def _print_enum(lines: List[str], indent: str, en: FsEnum) -> None:
    lines.append("")
    kind = en.type
    if kind == FsEnumCaseType.UNKNOWN:
        lines.append(f"{indent}type {en.name} =")
        lines.append(f"{indent}{INDENT}obj")
        return
    if kind == FsEnumCaseType.NUMERIC:
        lines.append(f"{indent}type [<RequireQualifiedAccess>] {en.name} =")
    else:
        lines.append(f"{indent}type [<StringEnum>] [<RequireQualifiedAccess>] {en.name} =")
    for case in en.cases:
        line = _print_enum_case_name(case.name)
        if kind == FsEnumCaseType.NUMERIC and case.value is not None:
            line += f" = {case.value}"
        lines.append(f"{indent}{INDENT}{line}")


def print_module(lines: List[str], indent: str, md: FsModule) -> None:
    """Append the lines of *md* to *lines*; named modules open a nested block."""
    if md.name:
        lines.append("")
        lines.append(f"{indent}module {md.name} =")
        indent += INDENT
    for tp in md.types:
        if isinstance(tp, FsInterface):
            _print_interface(lines, indent, tp)
        elif isinstance(tp, FsEnum):
            _print_enum(lines, indent, tp)
        elif isinstance(tp, FsAlias):
            lines.append("")
            lines.append(
                f"{indent}type {tp.name}{print_type_parameters(tp.type_parameters)} ="
            )
            lines.append(f"{indent}{INDENT}{print_type(tp.type)}")
        elif isinstance(tp, FsImport):
            lines.append("")
            ns = ".".join(tp.namespace)
            lines.append(
                f'{indent}let [<Import("*","{_attr_string(ns)}")>] {tp.variable}: {tp.type} = jsNative'
            )
        elif isinstance(tp, FsModule):
            print_module(lines, indent, tp)
        # values are reached through IExports; sentinels have no output


def print_file(f: FsFile) -> List[str]:
    lines = [f"module rec {f.name}"]
    lines.extend(f"open {o}" for o in f.opens)
    for md in f.modules:
        if md.types:
            print_module(lines, "", md)
    return lines
