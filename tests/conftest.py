"""
conftest.py - Fixtures compartilhadas para testes do compilador MTM

Proposito:
    Fornecer componentes de exemplo e resultados ja analisados para os
    testes de parser, geracao de codigo e API.

Componentes principais:
    - COUNTER_SOURCE, SIGNAL_SOURCE, LIST_SOURCE: componentes de exemplo
    - fixtures de ParseResult e de transformacao por alvo

Dependencias criticas:
    - pytest: gerenciamento de fixtures
"""

from __future__ import annotations

import pytest

from mtmc.api import parse, transform
from mtmc.ast.results import ParseResult

COUNTER_SOURCE = """\
$count! = 0
$double = $count * 2
$increment = () => {
  $count++
}

<template>
  <div class="counter">
    <p>{$count}</p>
    <button click={$increment}>+</button>
  </div>
</template>
"""

SIGNAL_SOURCE = """\
$globalCount = signal('globalCount', 0)
$bump = () => {
  $globalCount++
}

<template>
  <span>{$globalCount}</span>
  <button click={$bump}>bump</button>
</template>
"""

LIST_SOURCE = """\
$items! = [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
$total = $items.length

<template>
  <ul>
    {#each $items as item}
      <li key={item.id}>{item.name}</li>
    {/each}
  </ul>
  <p>{$total}</p>
</template>
"""

CONDITIONAL_SOURCE = """\
$x! = true

<template><div>{#if $x}<p>Y</p>{:else}<p>N</p>{/if}</div></template>
"""

UNTERMINATED_SOURCE = """\
$x! = true

<template>
  {#if $x}
    <p>aberto</p>
</template>
"""

TARGETS = ("react", "vue", "svelte", "vanilla")


@pytest.fixture()
def counter_parsed() -> ParseResult:
    return parse(COUNTER_SOURCE)


@pytest.fixture()
def list_parsed() -> ParseResult:
    return parse(LIST_SOURCE)


@pytest.fixture()
def compile_counter():
    """Transforma o contador no alvo informado."""

    def _compile(target: str):
        return transform(COUNTER_SOURCE, target)

    return _compile
