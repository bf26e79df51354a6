import pytest

from dts2fable.keywords import create_enum_name, escape_word, unescape_word


@pytest.mark.parametrize(
    "name, expected",
    [
        ("foo", "foo"),
        ("type", "``type``"),
        ("end", "``end``"),
        ("foo-bar", "``foo-bar``"),
        ("Foo.Bar", "Foo.Bar"),
        ("Foo.type", "Foo.type"),
        ("$", "``$``"),
        ("1st", "``1st``"),
        ("", ""),
    ],
)
def test_escape_word(name, expected):
    assert escape_word(name) == expected


def test_escape_word_is_idempotent():
    once = escape_word("module")
    assert once == "``module``"
    assert escape_word(once) == once
    assert unescape_word(once) == "module"
    assert unescape_word("plain") == "plain"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("click", "Click"),
        ("Red", "Red"),
        ("top-left", "TopLeft"),
        ("foo bar", "FooBar"),
        ("2d", "_2d"),
        ("", "Empty"),
        ("---", "Empty"),
    ],
)
def test_create_enum_name(name, expected):
    assert create_enum_name(name) == expected
