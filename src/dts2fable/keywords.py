"""
Static lookup tables used by the fix passes and the printer.

Both tables are built once at import time and never written afterwards.
"""

import re

# F# keywords and identifiers reserved for future use.
RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "abstract",
        "and",
        "as",
        "assert",
        "base",
        "begin",
        "class",
        "default",
        "delegate",
        "do",
        "done",
        "downcast",
        "downto",
        "elif",
        "else",
        "end",
        "exception",
        "extern",
        "false",
        "finally",
        "fixed",
        "for",
        "fun",
        "function",
        "global",
        "if",
        "in",
        "inherit",
        "inline",
        "interface",
        "internal",
        "lazy",
        "let",
        "match",
        "member",
        "module",
        "mutable",
        "namespace",
        "new",
        "not",
        "null",
        "of",
        "open",
        "or",
        "override",
        "private",
        "public",
        "rec",
        "return",
        "select",
        "sig",
        "static",
        "struct",
        "then",
        "to",
        "true",
        "try",
        "type",
        "upcast",
        "use",
        "val",
        "void",
        "when",
        "while",
        "with",
        "yield",
        # reserved
        "atomic",
        "break",
        "checked",
        "component",
        "const",
        "constraint",
        "constructor",
        "continue",
        "eager",
        "event",
        "external",
        "functor",
        "include",
        "method",
        "mixin",
        "object",
        "parallel",
        "process",
        "protected",
        "pure",
        "sealed",
        "tailcall",
        "trait",
        "virtual",
        "volatile",
    }
)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_']*$")
_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_]+")


def _is_identifier_path(name: str) -> bool:
    return all(_IDENT_RE.match(part) for part in name.split("."))


def escape_word(name: str) -> str:
    """
    Return *name* usable as an F# identifier: reserved words and names with
    characters F# does not accept are wrapped in double backticks.
    Escaping an already escaped name is a no-op.
    """
    if not name or (name.startswith("``") and name.endswith("``")):
        return name
    if name in RESERVED_WORDS or not _is_identifier_path(name):
        return f"``{name}``"
    return name


def unescape_word(name: str) -> str:
    if len(name) > 4 and name.startswith("``") and name.endswith("``"):
        return name[2:-2]
    return name


def create_enum_name(name: str) -> str:
    """
    Normalize an enum case name into a PascalCase identifier,
    e.g. ``"click"`` -> ``"Click"``, ``"foo-bar"`` -> ``"FooBar"``.
    """
    parts = [p for p in _NON_IDENT_RE.split(name) if p]
    if not parts:
        return "Empty"
    out = "".join(p[0].upper() + p[1:] for p in parts)
    if out[0].isdigit():
        out = f"_{out}"
    return escape_word(out)
