"""
test_literals.py - Testes da classificacao de valores iniciais

Proposito:
    Validar a uniao etiquetada de ValueLiteral produzida por parse_value,
    incluindo signal(), expressoes opacas e erros.
"""

from __future__ import annotations

import pytest

from mtmc.ast.nodes import (
    ArrayLiteral,
    BooleanLiteral,
    ExpressionLiteral,
    LiteralKind,
    NullLiteral,
    NumberLiteral,
    ObjectLiteral,
    SignalLiteral,
    StringLiteral,
    js_string,
)
from mtmc.parser.literals import parse_value


def _value(text: str):
    result = parse_value(text, line=1)
    assert result.is_ok(), result
    return result.unwrap()


# =============================================================================
# LITERAIS
# =============================================================================


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0", NumberLiteral(0)),
        ("-12", NumberLiteral(-12)),
        ("9.5", NumberLiteral(9.5)),
        ("'Ana'", StringLiteral("Ana")),
        ('"Ana"', StringLiteral("Ana")),
        ("true", BooleanLiteral(True)),
        ("false", BooleanLiteral(False)),
        ("null", NullLiteral()),
        ("~", NullLiteral()),
    ],
)
def test_scalar_literals(text, expected):
    assert _value(text) == expected


def test_string_escapes():
    assert _value(r"'it\'s'") == StringLiteral("it's")
    assert _value(r'"a\nb"') == StringLiteral("a\nb")


def test_array_literal_with_trailing_comma():
    assert _value("[1, 2, 3,]") == ArrayLiteral([1, 2, 3])


def test_empty_collections():
    assert _value("[]") == ArrayLiteral([])
    assert _value("{}") == ObjectLiteral({})


def test_object_literal_with_bare_and_quoted_keys():
    value = _value("{ name: 'Ana', 'age': 30, tags: ['a'] }")
    assert isinstance(value, ObjectLiteral)
    assert value.value == {"name": "Ana", "age": 30, "tags": ["a"]}


def test_nested_objects_in_array():
    value = _value('[{"id": 1}, {"id": 2}]')
    assert value.value == [{"id": 1}, {"id": 2}]
    assert value.to_js() == '[{"id": 1}, {"id": 2}]'


def test_trailing_comment_is_ignored():
    assert _value("42 // resposta") == NumberLiteral(42)


# =============================================================================
# TIPOS INFERIDOS
# =============================================================================


@pytest.mark.parametrize(
    "text, inferred",
    [
        ("1", "number"),
        ("1.5", "float"),
        ("'x'", "string"),
        ("true", "boolean"),
        ("null", "null"),
        ("[]", "array"),
        ("{}", "object"),
        ("Date.now()", None),
    ],
)
def test_inferred_type(text, inferred):
    assert _value(text).inferred_type() == inferred


# =============================================================================
# SIGNAL E EXPRESSOES
# =============================================================================


def test_signal_literal():
    value = _value("signal('globalCount', 5)")
    assert isinstance(value, SignalLiteral)
    assert value.kind is LiteralKind.SIGNAL
    assert value.key == "globalCount"
    assert value.initial_value == NumberLiteral(5)
    assert value.inferred_type() == "number"
    assert value.to_js() == "5"


def test_signal_without_initial_value():
    value = _value("signal('user')")
    assert value.initial_value == NullLiteral()


def test_signal_to_dict():
    value = _value("signal('theme', 'dark')")
    assert value.to_dict() == {
        "type": "signal",
        "key": "theme",
        "initialValue": {"type": "string", "value": "dark"},
    }


def test_signal_key_must_be_string():
    result = parse_value("signal($key, 1)", line=4)
    assert result.is_err()
    assert result.error.message == "A chave de signal() deve ser um texto literal"
    assert result.error.line == 4


def test_signal_with_too_many_arguments():
    result = parse_value("signal('a', 1, 2)")
    assert result.is_err()
    assert "signal()" in result.error.message


def test_expression_literal():
    value = _value("$count * 2")
    assert isinstance(value, ExpressionLiteral)
    assert value.value == "$count * 2"
    assert value.to_js() == "$count * 2"


def test_number_followed_by_operator_is_expression():
    assert _value("1 + 2") == ExpressionLiteral("1 + 2")


def test_signal_call_inside_expression_is_expression():
    assert isinstance(_value("signal('a', 1).value"), ExpressionLiteral)


# =============================================================================
# ERROS
# =============================================================================


def test_missing_value():
    result = parse_value("   ", line=2)
    assert result.is_err()
    assert result.error.message == "Valor ausente apos '='"
    assert result.error.line == 2


def test_unbalanced_value():
    result = parse_value("[1, 2", line=3)
    assert result.is_err()
    assert result.error.message == "'[' sem fechamento"
    assert result.error.line == 3


def test_js_string_escapes_quotes_and_script_close():
    assert js_string("it's") == "'it\\'s'"
    assert js_string("</script>") == "'<\\/script>'"
