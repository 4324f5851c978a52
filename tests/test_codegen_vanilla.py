"""
test_codegen_vanilla.py - Testes da geracao em JavaScript puro

Proposito:
    Validar a funcao fabrica: estado em closure, update/notify nas
    mutacoes, render() com template literals, listeners de eventos e
    inscricoes de re-renderizacao.
"""

from __future__ import annotations

from conftest import CONDITIONAL_SOURCE, COUNTER_SOURCE, LIST_SOURCE, SIGNAL_SOURCE, UNTERMINATED_SOURCE
from mtmc.api import transform
from mtmc.codegen.vanilla import template_text


def _vanilla(source: str):
    return transform(source, "vanilla")


# =============================================================================
# ESTADO
# =============================================================================


def test_counter_state_and_functions():
    result = _vanilla(COUNTER_SOURCE)
    code = result.code
    assert result.success
    assert code.startswith("export default function Component(props = {}) {")
    assert "  let count = 0;" in code
    assert "  const double = () => count * 2;" in code
    assert "const increment = () => {\n    update('count', count++)\n  };" in code


def test_mutation_forms():
    source = (
        "$count! = 0\n"
        "$reset = () => { $count = 0 }\n"
        "$add = ($n) => { $count += $n }\n"
        "$dec = () => { --$count }\n"
    )
    code = _vanilla(source).code
    assert "update('count', count = 0)" in code
    assert "update('count', count += n)" in code
    assert "update('count', --count)" in code


def test_computed_read_is_call():
    code = _vanilla("$a! = 1\n$b = $a + 1\n<template><p>{$b}</p></template>").code
    assert '<span data-mtm-bind="b">${escapeHtml(b())}</span>' in code
    assert "subscribe('a', () => notify('b'));" in code


def test_signal_variable():
    code = _vanilla(SIGNAL_SOURCE).code
    assert code.startswith("import { signal } from '../shared/ultra-modern-signal.js';\n\nexport default function")
    assert "let globalCount = globalCountShared;" in code
    assert "signal.on('globalCount', (value) => {" in code
    assert "notify('globalCount');" in code
    assert "setGlobalCount(globalCount + 1)" in code


# =============================================================================
# RENDER
# =============================================================================


def test_counter_render():
    code = _vanilla(COUNTER_SOURCE).code
    assert "const render = () => {" in code
    assert "let html = '';" in code
    assert '<p><span data-mtm-bind="count">${escapeHtml(count)}</span></p>' in code
    assert 'data-mtm-on-click="${listen(\'click\', increment)}"' in code
    assert "element.innerHTML = html;" in code
    assert "node.addEventListener(type, handler);" in code
    assert code.rstrip().endswith("render();\n  return element;\n}")


def test_counter_subscriptions():
    code = _vanilla(COUNTER_SOURCE).code
    assert "subscribe('count', () => notify('double'));" in code
    assert "element.querySelectorAll('[data-mtm-bind=\"count\"]').forEach((node) => {" in code
    assert "node.textContent = count;" in code
    assert "subscribe('count', render);" not in code


def test_list_render():
    code = _vanilla(LIST_SOURCE).code
    assert "for (const item of items) {" in code
    assert 'key="${escapeHtml(item.id)}"' in code
    assert "${escapeHtml(item.name)}" in code
    assert '<span data-mtm-bind="total">${escapeHtml(total())}</span>' in code
    assert "subscribe('items', () => notify('total'));" in code
    assert "subscribe('items', render);" in code


def test_loop_with_index():
    source = "$items! = []\n<template>{#each $items as item, i}<b>{i}</b>{/each}</template>"
    assert "items.forEach((item, i) => {" in _vanilla(source).code


def test_conditional():
    code = _vanilla(CONDITIONAL_SOURCE).code
    assert "html += `<div>`;" in code
    assert "if (x) {" in code
    assert "} else {" in code
    assert "html += `<p>N</p>`;" in code
    assert "subscribe('x', render);" in code


def test_else_if_chain():
    source = "$a! = 1\n$b! = 2\n<template>{#if $a}A{:else if $b}B{/if}</template>"
    code = _vanilla(source).code
    assert "} else if (b) {" in code
    assert "subscribe('b', render);" in code


def test_for_block():
    code = _vanilla("<template>{#for i=1 to 3}<b>{i}</b>{/for}</template>").code
    assert "for (let i = 1; i <= 3; i++) {" in code
    assert "html += `<b>${escapeHtml(i)}</b>`;" in code


def test_while_block():
    result = _vanilla("$n! = 1\n<template>{#while $n}<p>x</p>{/while}</template>")
    assert "if (n) {" in result.code
    assert "em vanilla" in result.warnings[0].message


def test_inline_event_handler():
    source = "$count! = 0\n<template><button click={() => $count++}>+</button></template>"
    assert "listen('click', () => update('count', count++))" in _vanilla(source).code


def test_template_text_escaping():
    assert template_text("a `b` ${c} \\") == "a \\`b\\` \\${c} \\\\"


def test_backticks_in_markup_are_escaped():
    code = _vanilla("<template><p>`x`</p></template>").code
    assert "html += `<p>\\`x\\`</p>`;" in code


def test_user_imports_are_kept_verbatim():
    code = _vanilla("import { a as b } from \"lib\"\n$n! = 1").code
    assert code.startswith('import { a as b } from "lib";\n')


def test_error_component():
    result = _vanilla(UNTERMINATED_SOURCE)
    assert not result.success
    assert "element.className = 'mtm-error';" in result.code
    assert "element.textContent = 'Erro de transformacao MTM em <component>: Bloco {#if} sem {/if} correspondente';" in result.code
