"""
api.py - API publica para analise e transformacao em memoria

Proposito:
    Expor funcoes que analisam e transformam componentes MTM a partir de
    strings, sem I/O em disco. Ideal para plugins de build, servidores de
    desenvolvimento e testes.

Componentes principais:
    - parse(): fonte -> ParseResult
    - transform(): fonte + alvo -> TransformResult
    - transform_many(): {arquivo: fonte} -> {arquivo: TransformResult}
    - summarize(): estatisticas agregadas de um lote

Dependencias criticas:
    - mtmc.parser.component: ComponentParser
    - mtmc.compiler: ComponentTransformer

Exemplo de uso:
    import mtmc
    result = mtmc.transform("$count! = 0\\n<template>{$count}</template>", "react")
    if result.success:
        print(result.code)

Notas de implementacao:
    - Nenhuma funcao lanca excecoes; falhas vem em errors/warnings.
    - Cada chamada e independente e pode rodar em paralelo.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, Optional

from mtmc.ast.results import ParseResult, TransformResult
from mtmc.codegen.base import TransformOptions
from mtmc.compiler import ComponentTransformer, TransformStats
from mtmc.parser.component import ComponentParser


def parse(source: str) -> ParseResult:
    """
    Analisa um componente MTM.

    Args:
        source: texto do componente (sem front matter)

    Returns:
        ParseResult imutavel; erros de sintaxe ficam em errors
    """
    return ComponentParser().parse(source)


def transform(
    source: str,
    target: object = "react",
    options: Optional[TransformOptions] = None,
) -> TransformResult:
    """
    Transforma um componente MTM em codigo do framework alvo.

    Args:
        source: texto do componente
        target: "react", "vue", "svelte" ou "vanilla" (aliases: js, javascript)
        options: TransformOptions opcional

    Returns:
        TransformResult com codigo, erros, avisos e o ParseResult usado
    """
    return ComponentTransformer().transform(source, target, options)


def transform_many(
    contents: Dict[str, str],
    target: object = "react",
    options: Optional[TransformOptions] = None,
) -> Dict[str, TransformResult]:
    """
    Transforma varios componentes de uma vez.

    Example:
        results = transform_many({"Counter.mtm": src_a, "Todo.mtm": src_b}, "vue")
        broken = [name for name, r in results.items() if not r.success]
    """
    base = options or TransformOptions()
    transformer = ComponentTransformer()
    results: Dict[str, TransformResult] = {}
    for filename, source in contents.items():
        results[filename] = transformer.transform(source, target, replace(base, filename=filename))
    return results


def summarize(results: Iterable[TransformResult]) -> TransformStats:
    return TransformStats.from_results(results)
