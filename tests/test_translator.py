from pathlib import Path

from dts2fable import TranslatorSettings, read_source_file, translate_file, translate_source
from dts2fable.models import FsInterface, FsModule

SAMPLES = Path(__file__).parent / "samples"

HEADER = [
    "open System",
    "open Fable.Core",
    "open Fable.Import.JS",
]


def _body(lines):
    assert lines[0].startswith("module rec ")
    assert lines[1:4] == HEADER
    return lines[4:]


def test_numeric_enum_round_trip():
    lines = translate_source("enum E { A = 1, B = 2 }", "Test")
    assert lines[0] == "module rec Test"
    assert _body(lines) == [
        "",
        "type [<RequireQualifiedAccess>] E =",
        "    | A = 1",
        "    | B = 2",
    ]


def test_declare_var_becomes_iexports_member():
    lines = translate_source("declare var foo: string;", "Test")
    assert _body(lines) == [
        "",
        "type [<AllowNullLiteral>] IExports =",
        "    abstract foo: string with get, set",
    ]


def test_declare_var_becomes_import_binding():
    settings = TranslatorSettings(convert_ambient_imports=True)
    lines = translate_source(
        "declare var foo: string;\ndeclare namespace N { var bar: number; }",
        "Test",
        settings,
    )
    body = _body(lines)
    assert body[:2] == ["", 'let [<Import("*","Test")>] foo: string = jsNative']
    assert '    let [<Import("*","Test.N")>] bar: float = jsNative' not in body
    # only `declare`d variables are imports; `bar` stays a value of N
    assert "    type [<AllowNullLiteral>] IExports =" in body
    assert "        abstract bar: float with get, set" in body


def test_namespaces_merge():
    src = """
    declare namespace N { interface A { x: number } }
    declare namespace N { interface B { y: string } }
    """
    assert _body(translate_source(src, "Test")) == [
        "",
        "module N =",
        "",
        "    type [<AllowNullLiteral>] A =",
        "        abstract x: float with get, set",
        "",
        "    type [<AllowNullLiteral>] B =",
        "        abstract y: string with get, set",
    ]


def test_string_literal_overload():
    src = 'interface Emitter { on(event: "click", handler: (e: string) => void): void; }'
    assert _body(translate_source(src, "Test")) == [
        "",
        "type [<AllowNullLiteral>] Emitter =",
        "    [<Emit \"$0.on('click',$1...)\">] abstract on_click: handler: (string -> unit) -> unit",
    ]


def test_class_statics():
    src = """
    declare class Point {
        constructor(x: number, y: number);
        static origin(): Point;
        x: number;
    }
    """
    assert _body(translate_source(src, "Test")) == [
        "",
        "type [<AllowNullLiteral>] IExports =",
        "    abstract Point: PointStatic with get, set",
        "",
        "type [<AllowNullLiteral>] Point =",
        "    abstract x: float with get, set",
        "",
        "type [<AllowNullLiteral>] PointStatic =",
        '    [<Emit "new $0($1...)">] abstract Create: x: float * y: float -> Point',
        "    abstract origin: unit -> Point",
    ]


def test_constructor_keeps_string_literal_parameter():
    src = "declare class Shape { constructor(kind: 'a'); }"
    assert _body(translate_source(src, "Test")) == [
        "",
        "type [<AllowNullLiteral>] IExports =",
        "    abstract Shape: ShapeStatic with get, set",
        "",
        "type [<AllowNullLiteral>] Shape =",
        "    interface end",
        "",
        "type [<AllowNullLiteral>] ShapeStatic =",
        '    [<Emit "new $0($1...)">] abstract Create: kind: string -> Shape',
    ]


def test_read_source_file_merges_into_global_module():
    f = read_source_file(
        "test.d.ts",
        "Test",
        b"interface A { x: number }\ninterface A { y: number }",
    )
    assert f.name == "Test"
    assert f.opens == ["System", "Fable.Core", "Fable.Import.JS"]
    assert len(f.modules) == 1
    gbl = f.modules[0]
    assert isinstance(gbl, FsModule) and gbl.name == ""
    assert len(gbl.types) == 1
    assert isinstance(gbl.types[0], FsInterface)
    assert [m.name for m in gbl.types[0].members] == ["x", "y"]


def test_translate_sample_file(tmp_path):
    out = translate_file(SAMPLES / "shapes.d.ts", tmp_path / "Fable.Import.Shapes.fs")
    assert out == tmp_path / "Fable.Import.Shapes.fs"
    text = out.read_text(encoding="utf-8")
    assert text.endswith("\n")
    lines = text.splitlines()

    assert lines[0] == "module rec Fable.Import.Shapes"
    assert "open Fable.Import.Browser" in lines

    expected_in_order = [
        "type [<AllowNullLiteral>] IExports =",
        "    abstract version: string with get, set",
        "module Shapes =",
        "    type [<AllowNullLiteral>] IExports =",
        "        abstract Circle: CircleStatic with get, set",
        "        abstract draw: shape: Shape * [<ParamArray>] targets: HTMLCanvasElement -> unit",
        "    type [<RequireQualifiedAccess>] Color =",
        "        | Red = 1",
        "        | Green = 2",
        "    type [<StringEnum>] [<RequireQualifiedAccess>] Corner =",
        '        | [<CompiledName "top-left">] TopLeft',
        '        | [<CompiledName "bottom-right">] BottomRight',
        "    type [<AllowNullLiteral>] Shape =",
        "        abstract area: unit -> float",
        "        abstract scale: factor: float -> Shape",
        "        abstract name: string with get, set",
        "        abstract color: Color option with get, set",
        "        [<Emit \"$0.on('resize',$1...)\">] abstract on_resize: handler: (float -> unit) -> unit",
        "    type [<AllowNullLiteral>] Circle =",
        "        inherit Shape",
        "        abstract radius: float with get, set",
        "        abstract scale: factor: float -> Circle",
        "    type [<AllowNullLiteral>] CircleStatic =",
        '        [<Emit "new $0($1...)">] abstract Create: radius: float -> Circle',
        "        abstract unit: unit -> Circle",
    ]
    positions = [lines.index(line) for line in expected_in_order]
    assert positions == sorted(positions)
    # `export =` leaves nothing behind
    assert not any("TODO" in line for line in lines)


def test_namespace_setting_overrides_file_name(tmp_path):
    src = tmp_path / "lib.d.ts"
    src.write_text("interface A {}", encoding="utf-8")
    out = translate_file(src, tmp_path / "out" / "Lib.fs", TranslatorSettings(namespace="My.Lib"))
    assert out.read_text(encoding="utf-8").splitlines()[0] == "module rec My.Lib"
