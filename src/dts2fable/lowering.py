from typing import Callable, List, Optional, Set

import tree_sitter as ts

from dts2fable.errors import LoweringError
from dts2fable.logger import logger
from dts2fable.models import (
    NONE,
    OBJ,
    THIS,
    TODO,
    UNIT,
    FsAlias,
    FsArray,
    FsEnum,
    FsEnumCase,
    FsEnumCaseType,
    FsFunction,
    FsGeneric,
    FsInterface,
    FsModule,
    FsParam,
    FsProperty,
    FsStringLiteral,
    FsTuple,
    FsType,
    FsUnion,
    FsVariable,
    as_string_literal,
    dedupe,
    mapped,
)
from dts2fable.syntax import (
    SyntaxKind,
    field,
    flatten_union,
    get_node_text,
    has_token,
    is_nullish_type,
    kind_of,
    line_of,
    named_children,
    parse_source,
    remove_quotes,
    unwrap_statement,
    unwrap_type,
)

# Emission templates
INDEXER_EMIT = "$0[$1]{{=$2}}"
INVOKE_EMIT = "$0($1...)"
CREATE_EMIT = "new $0($1...)"

_PARAMETER_TYPES = ("required_parameter", "optional_parameter", "rest_parameter")
_TUPLE_MEMBER_TYPES = (
    "tuple_parameter",
    "optional_tuple_parameter",
    "required_parameter",
    "optional_parameter",
)


class DeclarationReader:
    """
    Lowers the syntax tree of one declaration file into IR.

    Unsupported type nodes and statements never raise: they degrade to the
    `TODO` sentinel (or `obj`) and leave a diagnostic in the log. A type
    reference without a name is fatal.
    """

    def __init__(self, path: str = "<source>") -> None:
        self.path = path
        self._statement_handlers: dict[
            SyntaxKind, Callable[[ts.Node, Set[str]], FsType]
        ] = {
            SyntaxKind.InterfaceDeclaration: self._read_interface,
            SyntaxKind.ClassDeclaration: self._read_class,
            SyntaxKind.EnumDeclaration: self._read_enum,
            SyntaxKind.TypeAliasDeclaration: self._read_alias,
            SyntaxKind.VariableStatement: self._read_variable,
            SyntaxKind.FunctionDeclaration: self._read_function_declaration,
            SyntaxKind.ModuleDeclaration: self._read_module,
            SyntaxKind.ExportAssignment: self._read_export_assignment,
            SyntaxKind.ImportDeclaration: self._unsupported_statement,
            SyntaxKind.ExportDeclaration: self._unsupported_statement,
            SyntaxKind.NamespaceExportDeclaration: self._unsupported_statement,
        }
        self._member_handlers: dict[SyntaxKind, Callable[[ts.Node], FsType]] = {
            SyntaxKind.IndexSignature: self._read_index_signature,
            SyntaxKind.MethodSignature: self._read_method,
            SyntaxKind.MethodDeclaration: self._read_method,
            SyntaxKind.PropertySignature: self._read_property,
            SyntaxKind.PropertyDeclaration: self._read_property,
            SyntaxKind.CallSignature: self._read_call_signature,
            SyntaxKind.ConstructSignature: self._read_construct_signature,
            SyntaxKind.Constructor: self._read_construct_signature,
            SyntaxKind.GetAccessor: self._read_accessor,
            SyntaxKind.SetAccessor: self._read_accessor,
        }
        self._type_handlers: dict[SyntaxKind, Callable[[ts.Node], FsType]] = {
            SyntaxKind.StringKeyword: lambda n: mapped("string"),
            SyntaxKind.NumberKeyword: lambda n: mapped("float"),
            SyntaxKind.BooleanKeyword: lambda n: mapped("bool"),
            SyntaxKind.AnyKeyword: lambda n: OBJ,
            SyntaxKind.VoidKeyword: lambda n: UNIT,
            SyntaxKind.SymbolKeyword: lambda n: mapped("Symbol"),
            SyntaxKind.UnknownKeyword: lambda n: OBJ,
            SyntaxKind.NeverKeyword: lambda n: OBJ,
            SyntaxKind.ObjectKeyword: lambda n: OBJ,
            SyntaxKind.UndefinedKeyword: lambda n: OBJ,
            SyntaxKind.NullKeyword: lambda n: OBJ,
            SyntaxKind.TypePredicate: lambda n: mapped("bool"),
            SyntaxKind.TypeReference: self._read_type_reference,
            SyntaxKind.ArrayType: self._read_array_type,
            SyntaxKind.UnionType: self._read_union_type,
            SyntaxKind.TupleType: self._read_tuple_type,
            SyntaxKind.FunctionType: self._read_function_type,
            SyntaxKind.LiteralType: self._read_literal_type,
            SyntaxKind.ThisType: lambda n: THIS,
            SyntaxKind.TypeLiteral: self._opaque_type,
            SyntaxKind.IntersectionType: self._opaque_type,
            SyntaxKind.MappedType: self._opaque_type,
            SyntaxKind.IndexedAccessType: self._opaque_type,
            SyntaxKind.TypeQuery: self._opaque_type,
            SyntaxKind.TypeOperator: self._opaque_type,
            SyntaxKind.ParenthesizedType: self._opaque_type,
            SyntaxKind.ConstructorType: self._opaque_type,
            SyntaxKind.ConditionalType: self._opaque_type,
            SyntaxKind.TemplateLiteralType: self._opaque_type,
            SyntaxKind.InferType: self._opaque_type,
        }

    # --- entry points -----------------------------------------------
    def read_program(self, root: ts.Node) -> List[FsType]:
        return self._read_statements(root)

    def read_statement(self, node: ts.Node) -> Optional[FsType]:
        """
        Lower one statement. Returns None for trivia (comments, empty
        statements) which have no counterpart in the declaration grammar.
        """
        decl, mods = unwrap_statement(node)
        kind = kind_of(decl)
        if kind == SyntaxKind.Comment or decl.type == "empty_statement":
            return None
        handler = self._statement_handlers.get(kind)
        if handler is None:
            self._warn_unsupported(decl, context="statement")
            return TODO
        return handler(decl, mods)

    def read_type_node(self, node: ts.Node) -> FsType:
        node = unwrap_type(node)
        handler = self._type_handlers.get(kind_of(node))
        if handler is None:
            self._warn_unsupported(node, context="type")
            return TODO
        return handler(node)

    # --- helpers ----------------------------------------------------
    def _debug_node(self, node: ts.Node, msg: str, **fields) -> None:
        logger.debug(
            msg,
            path=self.path,
            node_type=node.type,
            line=line_of(node),
            raw=get_node_text(node)[:200],
            **fields,
        )

    def _warn_unsupported(self, node: ts.Node, *, context: str) -> None:
        logger.warning(
            "Unsupported TypeScript node kind",
            path=self.path,
            context=context,
            node_type=node.type,
            line=line_of(node),
            raw=get_node_text(node)[:200],
        )

    def _read_statements(self, block: Optional[ts.Node]) -> List[FsType]:
        out: List[FsType] = []
        for child in named_children(block):
            tp = self.read_statement(child)
            if tp is not None:
                out.append(tp)
        return out

    def _read_property_name(self, node: Optional[ts.Node]) -> str:
        return remove_quotes(get_node_text(node))

    def _read_type_parameters(self, node: Optional[ts.Node]) -> List[FsType]:
        out: List[FsType] = []
        for tp in named_children(node):
            if tp.type != "type_parameter":
                continue
            name_node = field(tp, "name") or next(named_children(tp), None)
            out.append(mapped(get_node_text(name_node)))
        return out

    def _read_optional_type(self, node: ts.Node, field_name: str, default: FsType) -> FsType:
        type_node = field(node, field_name)
        if type_node is None:
            return default
        return self.read_type_node(type_node)

    def _read_parameter(self, node: ts.Node) -> FsParam:
        pattern = field(node, "pattern") or field(node, "name")
        if pattern is None:
            pattern = next(
                (
                    c
                    for c in named_children(node)
                    if c.type
                    not in (
                        "type_annotation",
                        "accessibility_modifier",
                        "override_modifier",
                        "decorator",
                    )
                ),
                None,
            )
        param_array = node.type == "rest_parameter"
        name = get_node_text(pattern)
        if pattern is not None and pattern.type == "rest_pattern":
            param_array = True
            inner = next(named_children(pattern), None)
            name = get_node_text(inner) if inner is not None else name
        name = name.lstrip(".")
        return FsParam(
            name=name,
            optional=node.type == "optional_parameter",
            param_array=param_array,
            type=self._read_optional_type(node, "type", OBJ),
        )

    def _read_parameters(self, node: Optional[ts.Node]) -> List[FsParam]:
        return [
            self._read_parameter(p)
            for p in named_children(node)
            if p.type in _PARAMETER_TYPES
        ]

    def _read_return_type(self, node: ts.Node) -> FsType:
        rt = field(node, "return_type") or field(node, "type")
        if rt is None:
            return UNIT
        return self.read_type_node(rt)

    def _read_function_like(
        self,
        node: ts.Node,
        *,
        name: Optional[str],
        emit: Optional[str] = None,
        is_static: bool = False,
        return_type: Optional[FsType] = None,
    ) -> FsFunction:
        return FsFunction(
            emit=emit,
            is_static=is_static,
            name=name,
            type_parameters=self._read_type_parameters(field(node, "type_parameters")),
            params=self._read_parameters(field(node, "parameters")),
            return_type=(
                return_type if return_type is not None else self._read_return_type(node)
            ),
        )

    # --- heritage ---------------------------------------------------
    def _read_heritage_type(self, node: ts.Node) -> FsGeneric:
        """An `extends`/`implements` entry: the expression text applied to its type arguments."""
        if node.type == "generic_type":
            name = get_node_text(field(node, "name"))
            args = field(node, "type_arguments")
        else:
            name = get_node_text(node)
            args = None
        if not name:
            raise LoweringError(
                "heritage clause without a type name", path=self.path, line=line_of(node)
            )
        return FsGeneric(
            type=mapped(name),
            type_parameters=[self.read_type_node(a) for a in named_children(args)],
        )

    def _read_interface_heritage(self, node: ts.Node) -> List[FsType]:
        out: List[FsType] = []
        for clause in named_children(node):
            if clause.type != "extends_type_clause":
                continue
            out.extend(
                self._read_heritage_type(c)
                for c in named_children(clause)
                if kind_of(c) == SyntaxKind.ExpressionWithTypeArguments
            )
        return out

    def _read_class_heritage(self, node: ts.Node) -> List[FsType]:
        heritage = next(
            (c for c in named_children(node) if c.type == "class_heritage"), None
        )
        out: List[FsType] = []
        for clause in named_children(heritage):
            if clause.type == "implements_clause":
                out.extend(self._read_heritage_type(c) for c in named_children(clause))
            elif clause.type == "extends_clause":
                # `extends A<T>` arrives as an expression followed by its type arguments
                for c in named_children(clause):
                    if kind_of(c) == SyntaxKind.ExpressionWithTypeArguments:
                        out.append(self._read_heritage_type(c))
                    elif c.type == "type_arguments" and out:
                        last = out[-1]
                        out[-1] = last.model_copy(
                            update={
                                "type_parameters": [
                                    self.read_type_node(a) for a in named_children(c)
                                ]
                            }
                        )
        return out

    # --- members ----------------------------------------------------
    def _read_members(self, body: Optional[ts.Node]) -> List[FsType]:
        members: List[FsType] = []
        accessors: Set[str] = set()
        for ch in named_children(body):
            if ch.type == "decorator":
                continue
            kind = kind_of(ch)
            handler = self._member_handlers.get(kind)
            if handler is None:
                self._warn_unsupported(ch, context="member")
                members.append(TODO)
                continue
            member = handler(ch)
            if kind in (SyntaxKind.GetAccessor, SyntaxKind.SetAccessor):
                # a get/set pair is one read-write property
                if member.name in accessors:
                    continue
                accessors.add(member.name)
            members.append(member)
        return members

    def _read_index_signature(self, node: ts.Node) -> FsType:
        name_node = field(node, "name")
        if name_node is None:
            self._debug_node(node, "Mapped type clause in member position")
            return TODO
        index = FsParam(
            name=get_node_text(name_node),
            type=self._read_optional_type(node, "index_type", OBJ),
        )
        type_node = field(node, "type")
        return FsProperty(
            emit=INDEXER_EMIT,
            index=index,
            name="Item",
            option=type_node is not None and type_node.type == "opting_type_annotation",
            type=self.read_type_node(type_node) if type_node is not None else NONE,
        )

    def _read_method(self, node: ts.Node) -> FsType:
        return self._read_function_like(
            node,
            name=self._read_property_name(field(node, "name")),
            is_static=has_token(node, "static"),
        )

    def _read_property(self, node: ts.Node) -> FsType:
        return FsProperty(
            is_static=has_token(node, "static"),
            name=self._read_property_name(field(node, "name")),
            option=has_token(node, "?"),
            type=self._read_optional_type(node, "type", NONE),
        )

    def _read_accessor(self, node: ts.Node) -> FsType:
        if has_token(node, "get"):
            tp = self._read_optional_type(node, "return_type", NONE)
        else:
            params = self._read_parameters(field(node, "parameters"))
            tp = params[0].type if params else NONE
        return FsProperty(
            is_static=has_token(node, "static"),
            name=self._read_property_name(field(node, "name")),
            option=has_token(node, "?"),
            type=tp,
        )

    def _read_call_signature(self, node: ts.Node) -> FsType:
        fn = self._read_function_like(node, name="Invoke", emit=INVOKE_EMIT)
        return fn.model_copy(update={"type_parameters": []})

    def _read_construct_signature(self, node: ts.Node) -> FsType:
        return self._read_function_like(
            node, name="Create", emit=CREATE_EMIT, is_static=True, return_type=THIS
        )

    # --- statements -------------------------------------------------
    def _read_interface(self, node: ts.Node, mods: Set[str]) -> FsType:
        body = field(node, "body") or next(
            (c for c in node.children if c.type in ("interface_body", "object_type")),
            None,
        )
        return FsInterface(
            name=get_node_text(field(node, "name")),
            type_parameters=self._read_type_parameters(field(node, "type_parameters")),
            inherits=self._read_interface_heritage(node),
            members=self._read_members(body),
        )

    def _read_class(self, node: ts.Node, mods: Set[str]) -> FsType:
        body = field(node, "body") or next(
            (c for c in node.children if c.type == "class_body"), None
        )
        return FsInterface(
            name=get_node_text(field(node, "name")) or "TODO_NoClassName",
            type_parameters=self._read_type_parameters(field(node, "type_parameters")),
            inherits=self._read_class_heritage(node),
            members=self._read_members(body),
        )

    def _read_enum_case(self, node: ts.Node) -> FsEnumCase:
        if node.type != "enum_assignment":
            return FsEnumCase(
                name=self._read_property_name(node), type=FsEnumCaseType.UNKNOWN
            )
        name = self._read_property_name(field(node, "name"))
        value = field(node, "value")
        if value is not None and value.type == "number":
            return FsEnumCase(
                name=name, type=FsEnumCaseType.NUMERIC, value=get_node_text(value)
            )
        if value is not None and value.type == "string":
            return FsEnumCase(
                name=name,
                type=FsEnumCaseType.STRING,
                value=get_node_text(value)[1:-1],
            )
        # computed values such as `-1` or `1 << 2`
        return FsEnumCase(name=name, type=FsEnumCaseType.UNKNOWN)

    def _read_enum(self, node: ts.Node, mods: Set[str]) -> FsType:
        body = field(node, "body")
        return FsEnum(
            name=get_node_text(field(node, "name")),
            cases=[self._read_enum_case(m) for m in named_children(body)],
        )

    def _read_alias(self, node: ts.Node, mods: Set[str]) -> FsType:
        value = field(node, "value")
        if value is None:
            value = list(named_children(node))[-1]
        tp = self.read_type_node(value)
        name = get_node_text(field(node, "name"))
        if isinstance(tp, FsUnion) and tp.types:
            literals = [as_string_literal(t) for t in tp.types]
            if all(sl is not None for sl in literals):
                # a union of string literals reads best as a string enum
                return FsEnum(
                    name=name,
                    cases=[
                        FsEnumCase(name=sl, type=FsEnumCaseType.STRING)
                        for sl in literals
                    ],
                )
        return FsAlias(
            name=name,
            type=tp,
            type_parameters=self._read_type_parameters(field(node, "type_parameters")),
        )

    def _read_variable(self, node: ts.Node, mods: Set[str]) -> FsType:
        declarators = [c for c in named_children(node) if c.type == "variable_declarator"]
        if not declarators:
            self._warn_unsupported(node, context="variable")
            return TODO
        if len(declarators) > 1:
            self._debug_node(node, "Only the first variable binding is kept")
        vd = declarators[0]
        return FsVariable(
            has_declare="declare" in mods,
            name=get_node_text(field(vd, "name")),
            type=self._read_optional_type(vd, "type", OBJ),
        )

    def _read_function_declaration(self, node: ts.Node, mods: Set[str]) -> FsType:
        name = get_node_text(field(node, "name")) or None
        return self._read_function_like(node, name=name)

    def _read_module_name(self, node: Optional[ts.Node]) -> str:
        if node is not None and node.type == "string":
            return remove_quotes(get_node_text(node))
        return get_node_text(node).replace('"', "")

    def _read_module(self, node: ts.Node, mods: Set[str]) -> FsType:
        if node.type == "ambient_declaration":
            # declare global { ... }
            segments = ["global"]
            body = next((c for c in node.children if c.type == "statement_block"), None)
        else:
            name_node = field(node, "name")
            name = self._read_module_name(name_node)
            if name_node is not None and name_node.type == "nested_identifier":
                segments = name.split(".")
            else:
                segments = [name]
            body = field(node, "body")
        md = FsModule(name=segments[-1], types=self._read_statements(body))
        for seg in reversed(segments[:-1]):
            md = FsModule(name=seg, types=[md])
        return md

    def _read_export_assignment(self, node: ts.Node, mods: Set[str]) -> FsType:
        self._debug_node(node, "Export assignment dropped")
        return NONE

    def _unsupported_statement(self, node: ts.Node, mods: Set[str]) -> FsType:
        self._debug_node(node, "Import/export statement dropped", kind=kind_of(node).value)
        return TODO

    # --- types ------------------------------------------------------
    def _opaque_type(self, node: ts.Node) -> FsType:
        self._debug_node(node, "Type mapped to obj", kind=kind_of(node).value)
        return OBJ

    def _read_type_reference(self, node: ts.Node) -> FsType:
        if node.type == "generic_type":
            name = get_node_text(field(node, "name"))
            if not name:
                raise LoweringError(
                    f"type reference name is null: {get_node_text(node)}",
                    path=self.path,
                    line=line_of(node),
                )
            return FsGeneric(
                type=mapped(name),
                type_parameters=[
                    self.read_type_node(a)
                    for a in named_children(field(node, "type_arguments"))
                ],
            )
        txt = get_node_text(node).strip()
        if not txt:
            raise LoweringError(
                "type reference name is null", path=self.path, line=line_of(node)
            )
        if "." in txt:
            txt = txt[: txt.index(".")]
        return mapped(txt)

    def _read_array_type(self, node: ts.Node) -> FsType:
        element = next(named_children(node), None)
        if element is None:
            self._warn_unsupported(node, context="array")
            return TODO
        return FsArray(type=self.read_type_node(element))

    def _read_union_type(self, node: ts.Node) -> FsType:
        alternatives = flatten_union(node)
        return FsUnion(
            option=any(is_nullish_type(a) for a in alternatives),
            types=dedupe(
                [self.read_type_node(a) for a in alternatives if not is_nullish_type(a)]
            ),
        )

    def _read_tuple_element(self, node: ts.Node) -> FsType:
        if node.type in ("optional_type", "rest_type"):
            inner = next(named_children(node), None)
            return self.read_type_node(inner) if inner is not None else TODO
        if node.type in _TUPLE_MEMBER_TYPES:
            return self._read_optional_type(node, "type", OBJ)
        return self.read_type_node(node)

    def _read_tuple_type(self, node: ts.Node) -> FsType:
        return FsTuple(types=[self._read_tuple_element(c) for c in named_children(node)])

    def _read_function_type(self, node: ts.Node) -> FsType:
        return self._read_function_like(node, name=None)

    def _read_literal_type(self, node: ts.Node) -> FsType:
        literal = next(named_children(node), None)
        if literal is not None and literal.type == "string":
            return FsStringLiteral(value=remove_quotes(get_node_text(literal)))
        return OBJ


def read_declarations(source: bytes, path: str = "<source>") -> List[FsType]:
    """Parse declaration source and lower its top-level statements."""
    tree = parse_source(source)
    return DeclarationReader(path).read_program(tree.root_node)
