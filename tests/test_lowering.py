from dts2fable.lowering import CREATE_EMIT, INDEXER_EMIT, INVOKE_EMIT, read_declarations
from dts2fable.models import (
    NONE,
    OBJ,
    THIS,
    TODO,
    UNIT,
    FsAlias,
    FsArray,
    FsEnum,
    FsEnumCaseType,
    FsFunction,
    FsGeneric,
    FsInterface,
    FsModule,
    FsParam,
    FsProperty,
    FsStringLiteral,
    FsTuple,
    FsUnion,
    FsVariable,
    mapped,
)


def _read(src: str):
    return read_declarations(src.encode("utf-8"), "test.d.ts")


def _read_one(src: str):
    types = _read(src)
    assert len(types) == 1, types
    return types[0]


def _var_type(type_src: str):
    var = _read_one(f"declare var v: {type_src};")
    assert isinstance(var, FsVariable)
    return var.type


# --------------------------------------------------------------------------- #
# Types
# --------------------------------------------------------------------------- #
def test_keyword_types():
    assert _var_type("string") == mapped("string")
    assert _var_type("number") == mapped("float")
    assert _var_type("boolean") == mapped("bool")
    assert _var_type("any") == OBJ
    assert _var_type("void") == UNIT
    assert _var_type("symbol") == mapped("Symbol")
    assert _var_type("unknown") == OBJ
    assert _var_type("never") == OBJ


def test_type_references():
    assert _var_type("Foo") == mapped("Foo")
    # qualified names keep their first segment
    assert _var_type("A.B.C") == mapped("A")
    assert _var_type("Map<string, Foo>") == FsGeneric(
        type=mapped("Map"), type_parameters=[mapped("string"), mapped("Foo")]
    )
    assert _var_type("Foo[]") == FsArray(type=mapped("Foo"))


def test_nullable_union_folds_into_option():
    tp = _var_type("string | null")
    assert tp == FsUnion(option=True, types=[mapped("string")])

    tp = _var_type("undefined | Foo | number")
    assert tp == FsUnion(option=True, types=[mapped("Foo"), mapped("float")])

    tp = _var_type("string | number | string")
    assert tp == FsUnion(option=False, types=[mapped("string"), mapped("float")])


def test_tuple_and_function_types():
    assert _var_type("[string, number]") == FsTuple(types=[mapped("string"), mapped("float")])

    fn = _var_type("(a: string, b?: number) => boolean")
    assert isinstance(fn, FsFunction)
    assert fn.name is None
    assert fn.params == [
        FsParam(name="a", type=mapped("string")),
        FsParam(name="b", optional=True, type=mapped("float")),
    ]
    assert fn.return_type == mapped("bool")


def test_literal_and_opaque_types():
    assert _var_type('"click"') == FsStringLiteral(value="click")
    assert _var_type("42") == OBJ
    assert _var_type("{ a: string }") == OBJ
    assert _var_type("A & B") == OBJ
    assert _var_type("keyof Foo") == OBJ
    assert _var_type("typeof foo") == OBJ
    assert _var_type("Foo['bar']") == OBJ
    assert _var_type("(string)") == OBJ


# --------------------------------------------------------------------------- #
# Declarations
# --------------------------------------------------------------------------- #
def test_interface_members():
    it = _read_one(
        """
        interface Foo<T> extends Bar<T>, Baz {
            a: string;
            b?: number;
            c;
            m(x: T, ...rest: any[]): void;
            [key: string]: T;
            (x: number): string;
            new (x: number): Foo<T>;
        }
        """
    )
    assert isinstance(it, FsInterface)
    assert it.name == "Foo"
    assert it.is_static is False
    assert it.type_parameters == [mapped("T")]
    assert it.inherits == [
        FsGeneric(type=mapped("Bar"), type_parameters=[mapped("T")]),
        FsGeneric(type=mapped("Baz"), type_parameters=[]),
    ]

    a, b, c, m, item, invoke, create = it.members
    assert a == FsProperty(name="a", type=mapped("string"))
    assert b == FsProperty(name="b", option=True, type=mapped("float"))
    assert c == FsProperty(name="c", type=NONE)

    assert isinstance(m, FsFunction)
    assert m.name == "m"
    assert m.params == [
        FsParam(name="x", type=mapped("T")),
        FsParam(name="rest", param_array=True, type=FsArray(type=OBJ)),
    ]
    assert m.return_type == UNIT

    assert item == FsProperty(
        emit=INDEXER_EMIT,
        index=FsParam(name="key", type=mapped("string")),
        name="Item",
        type=mapped("T"),
    )

    assert invoke.name == "Invoke"
    assert invoke.emit == INVOKE_EMIT
    assert invoke.return_type == mapped("string")

    assert create.name == "Create"
    assert create.emit == CREATE_EMIT
    assert create.is_static is True
    assert create.return_type == THIS


def test_class_members_and_heritage():
    it = _read_one(
        """
        declare class Point<T> extends Base<T> implements IPoint {
            constructor(x: number, y: number);
            static origin(): Point<T>;
            static count: number;
            x: number;
            get size(): number;
            set size(v: number);
            clone(): this;
        }
        """
    )
    assert isinstance(it, FsInterface)
    assert it.name == "Point"
    assert it.inherits == [
        FsGeneric(type=mapped("Base"), type_parameters=[mapped("T")]),
        FsGeneric(type=mapped("IPoint"), type_parameters=[]),
    ]
    names = [m.name for m in it.members]
    assert names == ["Create", "origin", "count", "x", "size", "clone"]
    assert [m.name for m in it.static_members] == ["Create", "origin", "count"]

    create = it.members[0]
    assert [p.name for p in create.params] == ["x", "y"]
    assert create.return_type == THIS

    size = it.members[4]
    assert size == FsProperty(name="size", type=mapped("float"))
    assert it.members[5].return_type == THIS


def test_enum_cases():
    en = _read_one('enum E { A = 1, B = "b", C = -1, D }')
    assert isinstance(en, FsEnum)
    assert [(c.name, c.type, c.value) for c in en.cases] == [
        ("A", FsEnumCaseType.NUMERIC, "1"),
        ("B", FsEnumCaseType.STRING, "b"),
        ("C", FsEnumCaseType.UNKNOWN, None),
        ("D", FsEnumCaseType.UNKNOWN, None),
    ]
    assert en.type == FsEnumCaseType.UNKNOWN

    en = _read_one("declare const enum N { A = 1, B = 2 }")
    assert en.type == FsEnumCaseType.NUMERIC
    assert [c.value for c in en.cases] == ["1", "2"]


def test_string_literal_union_alias_becomes_string_enum():
    en = _read_one('type Dir = "up" | "down";')
    assert isinstance(en, FsEnum)
    assert en.name == "Dir"
    assert [(c.name, c.type, c.value) for c in en.cases] == [
        ("up", FsEnumCaseType.STRING, None),
        ("down", FsEnumCaseType.STRING, None),
    ]

    al = _read_one("type Id<T> = T | number;")
    assert al == FsAlias(
        name="Id",
        type=FsUnion(types=[mapped("T"), mapped("float")]),
        type_parameters=[mapped("T")],
    )


def test_variables_and_functions():
    var = _read_one("declare var a: string, b: number;")
    assert var == FsVariable(has_declare=True, name="a", type=mapped("string"))

    var = _read_one("export const c;")
    assert var == FsVariable(has_declare=False, name="c", type=OBJ)

    fn = _read_one("declare function g(x, y?: number);")
    assert isinstance(fn, FsFunction)
    assert fn.name == "g"
    assert fn.params == [
        FsParam(name="x", type=OBJ),
        FsParam(name="y", optional=True, type=mapped("float")),
    ]
    assert fn.return_type == UNIT


def test_modules():
    md = _read_one("declare namespace A.B { interface I {} }")
    assert md == FsModule(name="A", types=[FsModule(name="B", types=[FsInterface(name="I")])])

    md = _read_one('declare module "foo-bar" { function f(): void; }')
    assert isinstance(md, FsModule)
    assert md.name == "foo-bar"
    assert [t.name for t in md.types] == ["f"]

    md = _read_one("declare global { interface Window { x: number } }")
    assert md.name == "global"
    assert md.types[0].name == "Window"

    md = _read_one("namespace Outer { namespace Inner { } }")
    assert md == FsModule(name="Outer", types=[FsModule(name="Inner")])


def test_unsupported_statements_degrade():
    types = _read(
        """
        import x = require("x");
        export { a, b };
        export as namespace Lib;
        export = Lib;
        """
    )
    assert types == [TODO, TODO, TODO, NONE]


def test_comments_are_skipped():
    types = _read(
        """
        // leading comment
        /** doc */
        interface A {
            // member comment
            x: number;
        }
        """
    )
    assert len(types) == 1
    assert [m.name for m in types[0].members] == ["x"]
