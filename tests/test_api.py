"""
test_api.py - Testes para a API em memoria do MTM

Proposito:
    Validar mtmc.transform() e TransformResult: selecao de alvo, componente
    de erro, modo estrito, lotes e estatisticas.

Componentes testados:
    - transform(): fonte + alvo -> TransformResult
    - transform_many(): varios arquivos de uma vez
    - summarize(): TransformStats agregadas
    - ComponentTransformer.generate(): geracao a partir de ParseResult
    - Target.lookup(): resolucao de nomes de alvo
"""

from __future__ import annotations

import logging

import pytest

import mtmc
from conftest import COUNTER_SOURCE, LIST_SOURCE, SIGNAL_SOURCE, TARGETS, UNTERMINATED_SOURCE
from mtmc.api import parse, summarize, transform, transform_many
from mtmc.codegen.base import Target, TransformOptions
from mtmc.codegen.react import ReactStrategy
from mtmc.compiler import ComponentTransformer


# =============================================================================
# Todos os alvos
# =============================================================================

class TestAllTargets:
    """Componentes validos geram codigo sem erros em todos os alvos."""

    @pytest.mark.parametrize("target", TARGETS)
    @pytest.mark.parametrize("source", [COUNTER_SOURCE, SIGNAL_SOURCE, LIST_SOURCE])
    def test_valid_component_succeeds(self, source, target):
        result = transform(source, target)
        assert result.success
        assert result.errors == ()
        assert result.warnings == ()
        assert result.target == target
        assert result.code.endswith("\n")

    @pytest.mark.parametrize("target", TARGETS)
    def test_sigils_are_removed(self, compile_counter, target):
        code = compile_counter(target).code
        assert "$count" not in code
        assert "$increment" not in code

    @pytest.mark.parametrize("target", TARGETS)
    def test_blocking_error_yields_error_component(self, target):
        result = transform(UNTERMINATED_SOURCE, target)
        assert not result.success
        assert result.errors[0].type == "parse_error"
        assert "mtm-error" in result.code
        assert "Erro de transformacao MTM em <component>: Bloco {#if} sem {/if} correspondente" in result.code

    @pytest.mark.parametrize("target", TARGETS)
    def test_while_warns_in_every_target(self, target):
        result = transform("$n! = 1\n<template>{#while $n}<p>x</p>{/while}</template>", target)
        assert result.success
        warning = result.warnings[0]
        assert warning.type == "semantic_warning"
        assert "{#while $n}" in warning.message
        assert f"nao tem equivalente declarativo em {target}" in warning.message

    @pytest.mark.parametrize("target", TARGETS)
    def test_transform_is_deterministic(self, target):
        assert transform(COUNTER_SOURCE, target).code == transform(COUNTER_SOURCE, target).code

    @pytest.mark.parametrize(
        "target, update",
        [
            ("react", "setItems([...items, text])"),
            ("vue", "items.value = [...items.value, text]"),
            ("svelte", "items = [...items, text]"),
            ("vanilla", "update('items', items = [...items, text])"),
        ],
    )
    def test_spread_references_are_rewritten(self, target, update):
        source = (
            "$items! = []\n"
            "$add = ($text) => { $items = [...$items, $text] }\n"
            "<template><p>{[...$items].length}</p></template>"
        )
        result = transform(source, target)
        assert result.warnings == ()
        assert update in result.code
        assert "$items" not in result.code
        assert "[...items].length" in result.code


# =============================================================================
# Selecao de alvo
# =============================================================================

class TestTargetSelection:
    """Alvos sao resolvidos sem diferenciar maiusculas, com aliases."""

    def test_lookup(self):
        assert Target.lookup("Vue") is Target.VUE
        assert Target.lookup(" REACT ") is Target.REACT
        assert Target.lookup("javascript") is Target.VANILLA
        assert Target.lookup(Target.SVELTE) is Target.SVELTE
        assert Target.lookup("x") is None
        assert Target.lookup(None) is None

    def test_alias_in_transform(self):
        assert transform(COUNTER_SOURCE, "JS").target == "vanilla"

    def test_enum_target(self):
        assert transform(COUNTER_SOURCE, Target.SVELTE).target == "svelte"

    def test_unknown_target(self):
        result = transform(COUNTER_SOURCE, "angular")
        assert not result.success
        assert result.target == "angular"
        error = result.errors[0]
        assert error.type == "transform_error"
        assert "angular" in error.message
        assert "react" in error.suggestion
        assert "mtm-error" in result.code
        assert "framework alvo desconhecido" in result.code

    def test_default_target_is_react(self):
        assert transform(COUNTER_SOURCE).target == "react"


# =============================================================================
# Diagnosticos
# =============================================================================

class TestDiagnostics:
    """Avisos semanticos emitidos durante a geracao."""

    def test_undeclared_variable(self):
        result = transform("<template><p>{$missing}</p></template>", "react")
        assert result.success
        warning = result.warnings[0]
        assert warning.message == "Variavel '$missing' nao declarada no script"
        assert warning.line == 1

    def test_undeclared_variable_suggests_close_name(self):
        result = transform("$count! = 0\n<template><p>{$cont}</p></template>", "vue")
        assert result.warnings[0].suggestion == "Voce quis dizer '$count'?"

    def test_attribute_close_to_event_name(self):
        source = "$go = () => 1\n<template><button clik={$go}>x</button></template>"
        result = transform(source, "svelte")
        assert len(result.warnings) == 1
        assert "'click'" in result.warnings[0].message

    def test_bare_non_function_handler(self):
        result = transform("$count! = 0\n<template><button click={$count}>x</button></template>", "react")
        assert result.warnings[0].message == "Handler '$count' do evento click nao e uma funcao declarada"

    def test_warnings_are_deduplicated(self):
        result = transform("<template>{$missing}{$missing}</template>", "react")
        assert len(result.warnings) == 1

    @pytest.mark.parametrize("target", TARGETS)
    def test_write_to_constant_in_function(self, target):
        result = transform("$title = 'a'\n$rename = () => { $title = 'b' }", target)
        assert result.success
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.type == "semantic_warning"
        assert warning.message == "Atribuicao a '$title', que nao e reativa; o alvo a declara como constante"
        assert warning.line == 2
        assert "$title!" in warning.suggestion

    @pytest.mark.parametrize("target", TARGETS)
    def test_write_to_constant_in_event_handler(self, target):
        source = "$title = 'a'\n<template><button click={() => $title = 'b'}>x</button></template>"
        result = transform(source, target)
        assert [w.message for w in result.warnings] == [
            "Atribuicao a '$title', que nao e reativa; o alvo a declara como constante"
        ]
        assert result.warnings[0].line == 2

    def test_write_to_reactive_variable_does_not_warn(self):
        result = transform("$title! = 'a'\n$rename = () => { $title = 'b' }", "svelte")
        assert result.warnings == ()

    def test_get_diagnostics(self):
        result = transform(UNTERMINATED_SOURCE, "react")
        text = result.get_diagnostics()
        assert "=== ERROS ===" in text
        assert "Bloco {#if} sem {/if} correspondente" in text

    def test_to_dict(self):
        data = transform(COUNTER_SOURCE, "vue", TransformOptions(filename="Counter.mtm")).to_dict()
        assert set(data) == {"code", "target", "filename", "errors", "warnings"}
        assert data["filename"] == "Counter.mtm"
        assert data["errors"] == []

    def test_parsed_result_is_attached(self):
        result = transform(COUNTER_SOURCE, "react")
        assert result.parsed is not None
        assert "count" in result.parsed.variables


# =============================================================================
# Opcoes e modo estrito
# =============================================================================

DUPLICATE_SOURCE = "$a! = 1\n$a! = 2\n<template>{$a}</template>"


class TestOptions:
    """TransformOptions controla nome, modo estrito e falhas internas."""

    def test_non_blocking_error_still_generates(self):
        result = transform(DUPLICATE_SOURCE, "react")
        assert not result.success
        assert "ja foi declarada" in result.errors[0].message
        assert "useState" in result.code
        assert "mtm-error" not in result.code

    def test_strict_mode_blocks_any_error(self):
        result = transform(DUPLICATE_SOURCE, "react", TransformOptions(strict=True))
        assert not result.success
        assert "mtm-error" in result.code
        assert "ja foi declarada" in result.code

    def test_error_component_uses_filename(self):
        result = transform(UNTERMINATED_SOURCE, "svelte", TransformOptions(filename="Broken.mtm"))
        assert "Erro de transformacao MTM em Broken.mtm:" in result.code
        assert result.filename == "Broken.mtm"

    def test_internal_failure_is_reported(self, monkeypatch, caplog):
        def boom(self, function):
            raise RuntimeError("boom")

        monkeypatch.setattr(ReactStrategy, "emit_function", boom)
        with caplog.at_level(logging.ERROR, logger="mtmc.compiler"):
            result = transform(COUNTER_SOURCE, "react")

        assert not result.success
        assert result.errors[0].type == "transform_error"
        assert result.errors[0].message == "Falha interna na geracao de codigo react: boom"
        assert "mtm-error" in result.code
        assert "Falha ao gerar codigo react" in caplog.text

    def test_generate_from_parse_result(self):
        parsed = parse(COUNTER_SOURCE)
        result = ComponentTransformer().generate(parsed, "svelte", TransformOptions())
        assert result.success
        assert result.parsed is parsed
        assert "let count = 0;" in result.code


# =============================================================================
# Lotes
# =============================================================================

class TestBatch:
    """transform_many() e summarize()."""

    def test_transform_many_uses_file_names(self):
        results = transform_many(
            {"Counter.mtm": COUNTER_SOURCE, "todo-list.mtm": LIST_SOURCE},
            "react",
        )
        assert list(results) == ["Counter.mtm", "todo-list.mtm"]
        assert results["Counter.mtm"].filename == "Counter.mtm"
        assert "export default function Counter(" in results["Counter.mtm"].code
        assert "export default function TodoList(" in results["todo-list.mtm"].code

    def test_transform_many_keeps_base_options(self):
        results = transform_many({"A.mtm": SIGNAL_SOURCE}, "vue", TransformOptions(signal_module="./s.js"))
        assert "import { signal } from './s.js';" in results["A.mtm"].code

    def test_summarize(self):
        results = transform_many(
            {"Counter.mtm": COUNTER_SOURCE, "Broken.mtm": UNTERMINATED_SOURCE, "Warn.mtm": "<template>{$x}</template>"},
            "svelte",
        )
        stats = summarize(results.values())
        assert stats.file_count == 3
        assert stats.success_count == 2
        assert stats.error_count == 1
        assert stats.warning_count == 1


# =============================================================================
# Imports do modulo
# =============================================================================

class TestModuleImports:
    """Testes para imports do modulo mtmc."""

    def test_api_available(self):
        assert callable(mtmc.parse)
        assert callable(mtmc.transform)
        assert callable(mtmc.transform_many)
        assert callable(mtmc.summarize)

    def test_types_available(self):
        assert hasattr(mtmc, "TransformResult")
        assert hasattr(mtmc, "ParseResult")
        assert hasattr(mtmc, "Target")
        assert hasattr(mtmc, "ConditionalNode")

    def test_version_available(self):
        assert mtmc.__version__ == "0.1.0"
