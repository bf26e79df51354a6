"""
Adapter over the tree-sitter TypeScript grammar.

Lowering only talks to the parser through this module: it asks for the
declaration-grammar kind of a node (`kind_of`), its source text
(`get_node_text`) and a handful of structural accessors. Tree-sitter wrapper
nodes that the declaration grammar does not know about are peeled off by
`unwrap_statement` and `unwrap_type`.
"""

from enum import Enum
from typing import Iterator, List, Optional, Set, Tuple

import tree_sitter as ts
import tree_sitter_typescript as tsts

TS_LANGUAGE = ts.Language(tsts.language_typescript())
_parser: Optional[ts.Parser] = None


def _get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(TS_LANGUAGE)
    return _parser


def parse_source(source: bytes) -> ts.Tree:
    return _get_parser().parse(source)


class SyntaxKind(str, Enum):
    # statements
    InterfaceDeclaration = "InterfaceDeclaration"
    ClassDeclaration = "ClassDeclaration"
    EnumDeclaration = "EnumDeclaration"
    TypeAliasDeclaration = "TypeAliasDeclaration"
    VariableStatement = "VariableStatement"
    FunctionDeclaration = "FunctionDeclaration"
    ModuleDeclaration = "ModuleDeclaration"
    ImportDeclaration = "ImportDeclaration"
    ExportDeclaration = "ExportDeclaration"
    ExportAssignment = "ExportAssignment"
    NamespaceExportDeclaration = "NamespaceExportDeclaration"
    # members
    MethodSignature = "MethodSignature"
    MethodDeclaration = "MethodDeclaration"
    PropertySignature = "PropertySignature"
    PropertyDeclaration = "PropertyDeclaration"
    Constructor = "Constructor"
    IndexSignature = "IndexSignature"
    CallSignature = "CallSignature"
    ConstructSignature = "ConstructSignature"
    GetAccessor = "GetAccessor"
    SetAccessor = "SetAccessor"
    # keyword types
    StringKeyword = "StringKeyword"
    NumberKeyword = "NumberKeyword"
    BooleanKeyword = "BooleanKeyword"
    AnyKeyword = "AnyKeyword"
    VoidKeyword = "VoidKeyword"
    SymbolKeyword = "SymbolKeyword"
    UnknownKeyword = "UnknownKeyword"
    NeverKeyword = "NeverKeyword"
    ObjectKeyword = "ObjectKeyword"
    UndefinedKeyword = "UndefinedKeyword"
    NullKeyword = "NullKeyword"
    # type nodes
    TypeReference = "TypeReference"
    ArrayType = "ArrayType"
    UnionType = "UnionType"
    TupleType = "TupleType"
    FunctionType = "FunctionType"
    ConstructorType = "ConstructorType"
    LiteralType = "LiteralType"
    ThisType = "ThisType"
    TypeLiteral = "TypeLiteral"
    IntersectionType = "IntersectionType"
    MappedType = "MappedType"
    IndexedAccessType = "IndexedAccessType"
    TypeQuery = "TypeQuery"
    TypeOperator = "TypeOperator"
    TypePredicate = "TypePredicate"
    ConditionalType = "ConditionalType"
    TemplateLiteralType = "TemplateLiteralType"
    InferType = "InferType"
    ExpressionWithTypeArguments = "ExpressionWithTypeArguments"
    ParenthesizedType = "ParenthesizedType"
    # trivia
    Comment = "Comment"
    Unknown = "Unknown"


_DECLARATION_KINDS: dict[str, SyntaxKind] = {
    "interface_declaration": SyntaxKind.InterfaceDeclaration,
    "class_declaration": SyntaxKind.ClassDeclaration,
    "abstract_class_declaration": SyntaxKind.ClassDeclaration,
    "enum_declaration": SyntaxKind.EnumDeclaration,
    "type_alias_declaration": SyntaxKind.TypeAliasDeclaration,
    "variable_declaration": SyntaxKind.VariableStatement,
    "lexical_declaration": SyntaxKind.VariableStatement,
    "function_declaration": SyntaxKind.FunctionDeclaration,
    "function_signature": SyntaxKind.FunctionDeclaration,
    "generator_function_declaration": SyntaxKind.FunctionDeclaration,
    "module": SyntaxKind.ModuleDeclaration,
    "internal_module": SyntaxKind.ModuleDeclaration,
    "import_statement": SyntaxKind.ImportDeclaration,
    "import_alias": SyntaxKind.ImportDeclaration,
    "index_signature": SyntaxKind.IndexSignature,
    "property_signature": SyntaxKind.PropertySignature,
    "public_field_definition": SyntaxKind.PropertyDeclaration,
    "call_signature": SyntaxKind.CallSignature,
    "construct_signature": SyntaxKind.ConstructSignature,
    "comment": SyntaxKind.Comment,
}

_METHOD_NODE_TYPES = ("method_signature", "method_definition", "abstract_method_signature")

_PREDEFINED_KINDS: dict[str, SyntaxKind] = {
    "string": SyntaxKind.StringKeyword,
    "number": SyntaxKind.NumberKeyword,
    "bigint": SyntaxKind.NumberKeyword,
    "boolean": SyntaxKind.BooleanKeyword,
    "any": SyntaxKind.AnyKeyword,
    "void": SyntaxKind.VoidKeyword,
    "symbol": SyntaxKind.SymbolKeyword,
    "unique symbol": SyntaxKind.SymbolKeyword,
    "unknown": SyntaxKind.UnknownKeyword,
    "never": SyntaxKind.NeverKeyword,
    "object": SyntaxKind.ObjectKeyword,
    "undefined": SyntaxKind.UndefinedKeyword,
    "null": SyntaxKind.NullKeyword,
}

_TYPE_KINDS: dict[str, SyntaxKind] = {
    "type_identifier": SyntaxKind.TypeReference,
    "nested_type_identifier": SyntaxKind.TypeReference,
    "generic_type": SyntaxKind.TypeReference,
    "array_type": SyntaxKind.ArrayType,
    "union_type": SyntaxKind.UnionType,
    "tuple_type": SyntaxKind.TupleType,
    "function_type": SyntaxKind.FunctionType,
    "constructor_type": SyntaxKind.ConstructorType,
    "literal_type": SyntaxKind.LiteralType,
    "this_type": SyntaxKind.ThisType,
    "this": SyntaxKind.ThisType,
    "intersection_type": SyntaxKind.IntersectionType,
    "lookup_type": SyntaxKind.IndexedAccessType,
    "type_query": SyntaxKind.TypeQuery,
    "index_type_query": SyntaxKind.TypeOperator,
    "readonly_type": SyntaxKind.TypeOperator,
    "type_predicate": SyntaxKind.TypePredicate,
    "type_predicate_annotation": SyntaxKind.TypePredicate,
    "asserts": SyntaxKind.TypePredicate,
    "asserts_annotation": SyntaxKind.TypePredicate,
    "conditional_type": SyntaxKind.ConditionalType,
    "template_literal_type": SyntaxKind.TemplateLiteralType,
    "infer_type": SyntaxKind.InferType,
    "parenthesized_type": SyntaxKind.ParenthesizedType,
}

# Clauses whose entries are `Name<Args>` heritage references.
_HERITAGE_CLAUSES = ("extends_clause", "implements_clause", "extends_type_clause")

# Nodes that only carry a `: T` prefix around the type we are interested in.
_ANNOTATION_TYPES = (
    "type_annotation",
    "omitting_type_annotation",
    "opting_type_annotation",
    "adding_type_annotation",
)


def get_node_text(node: Optional[ts.Node]) -> str:
    """
    Get text of the tree sitter node
    """
    if not node or not node.text:
        return ""

    return node.text.decode("utf-8", errors="replace")


def remove_quotes(s: Optional[str]) -> str:
    if s is None:
        return ""
    return s.replace('"', "").replace("'", "")


def has_token(node: ts.Node, token: str) -> bool:
    """True when *node* has a direct (usually anonymous) child of type *token*."""
    return any(c.type == token for c in node.children)


def named_children(node: Optional[ts.Node]) -> Iterator[ts.Node]:
    """Named children without comments."""
    if node is None:
        return
    for c in node.named_children:
        if c.type != "comment":
            yield c


def field(node: ts.Node, name: str) -> Optional[ts.Node]:
    return node.child_by_field_name(name)


def line_of(node: ts.Node) -> int:
    return node.start_point[0] + 1


def unwrap_statement(node: ts.Node) -> Tuple[ts.Node, Set[str]]:
    """
    Peel off `export`, `declare` and expression-statement wrappers that
    tree-sitter puts around a declaration. Returns the declaration node and
    the modifiers collected from the wrappers.
    """
    mods: Set[str] = set()
    while True:
        if node.type == "export_statement":
            decl = field(node, "declaration")
            if decl is None:
                return node, mods
            mods.add("export")
            node = decl
        elif node.type == "ambient_declaration":
            inner = next(
                (
                    c
                    for c in named_children(node)
                    if c.type in _DECLARATION_KINDS
                    or c.type in ("ambient_declaration", "export_statement")
                ),
                None,
            )
            mods.add("declare")
            if inner is None:
                # `declare global { ... }` keeps the ambient node itself
                return node, mods
            node = inner
        elif node.type == "expression_statement":
            inner = next(
                (c for c in node.named_children if c.type == "internal_module"), None
            )
            if inner is None:
                return node, mods
            node = inner
        else:
            return node, mods


def unwrap_type(node: ts.Node) -> ts.Node:
    """Strip `: T` annotation wrappers down to the type node."""
    while node.type in _ANNOTATION_TYPES:
        inner = [c for c in node.named_children if c.type != "comment"]
        if not inner:
            break
        node = inner[-1]
    return node


def _export_kind(node: ts.Node) -> SyntaxKind:
    if has_token(node, "=") or has_token(node, "default"):
        return SyntaxKind.ExportAssignment
    if has_token(node, "as") and has_token(node, "namespace"):
        return SyntaxKind.NamespaceExportDeclaration
    return SyntaxKind.ExportDeclaration


def _method_kind(node: ts.Node) -> SyntaxKind:
    name = remove_quotes(get_node_text(field(node, "name")))
    if name == "constructor":
        return SyntaxKind.Constructor
    if has_token(node, "get"):
        return SyntaxKind.GetAccessor
    if has_token(node, "set"):
        return SyntaxKind.SetAccessor
    if node.type == "method_definition":
        return SyntaxKind.MethodDeclaration
    return SyntaxKind.MethodSignature


def is_mapped_object_type(node: ts.Node) -> bool:
    """`{ [K in keyof T]: ... }` is an object type holding a mapped-type clause."""
    members = list(named_children(node))
    return (
        len(members) == 1
        and members[0].type == "index_signature"
        and any(c.type == "mapped_type_clause" for c in members[0].named_children)
    )


def kind_of(node: ts.Node) -> SyntaxKind:
    """Map a tree-sitter node onto the declaration-grammar vocabulary."""
    t = node.type
    if t != "type_arguments" and node.parent is not None and node.parent.type in _HERITAGE_CLAUSES:
        return SyntaxKind.ExpressionWithTypeArguments
    if t in _DECLARATION_KINDS:
        return _DECLARATION_KINDS[t]
    if t in _METHOD_NODE_TYPES:
        return _method_kind(node)
    if t == "export_statement":
        return _export_kind(node)
    if t == "ambient_declaration" and has_token(node, "global"):
        return SyntaxKind.ModuleDeclaration
    if t == "predefined_type":
        return _PREDEFINED_KINDS.get(get_node_text(node).strip(), SyntaxKind.Unknown)
    if t in _TYPE_KINDS:
        return _TYPE_KINDS[t]
    if t == "object_type":
        return SyntaxKind.MappedType if is_mapped_object_type(node) else SyntaxKind.TypeLiteral
    if t in ("null", "undefined"):
        return SyntaxKind.NullKeyword if t == "null" else SyntaxKind.UndefinedKeyword
    return SyntaxKind.Unknown


def is_nullish_type(node: ts.Node) -> bool:
    """`null` and `undefined` in type position, whatever node wraps them."""
    if node.type not in ("literal_type", "predefined_type", "type_identifier", "null", "undefined"):
        return False
    return get_node_text(node).strip() in ("null", "undefined")


def flatten_union(node: ts.Node) -> List[ts.Node]:
    """tree-sitter nests `A | B | C` as `((A | B) | C)`; return `[A, B, C]`."""
    out: List[ts.Node] = []
    for c in named_children(node):
        if c.type == "union_type":
            out.extend(flatten_union(c))
        else:
            out.append(c)
    return out

