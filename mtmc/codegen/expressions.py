"""
expressions.py - Reescrita de referencias $nome em expressoes JavaScript

Proposito:
    Substituir cada referencia $nome em posicao de codigo pela forma do
    framework alvo e, quando solicitado, converter mutacoes ($x++, $x = v,
    $x += v) na chamada de atualizacao correspondente.

Componentes principais:
    - rewrite_code: reescrita com resolvedor de nomes e de mutacoes
    - MUTATION_ASSIGNMENT: operadores de atribuicao reconhecidos

Dependencias criticas:
    - mtmc.parser.scanner: posicoes de codigo e fim de expressao

Exemplo de uso:
    rewrite_code("$count * 2", resolve=lambda name: name)  # "count * 2"

Notas de implementacao:
    - Strings e comentarios nao sao alterados; em template literals apenas
      o interior de ${...} e reescrito.
    - O lado direito de uma atribuicao e reescrito recursivamente antes de
      ser entregue ao resolvedor de mutacoes.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from mtmc.parser.scanner import find_expression_end, iter_references

Resolver = Callable[[str], str]
Mutator = Callable[[str, str, Optional[str]], Optional[str]]

POSTFIX = re.compile(r"\s*(\+\+|--)")
MUTATION_ASSIGNMENT = re.compile(r"\s*(\*\*|\?\?|\|\||&&|<<|>>>|>>|[+\-*/%&|^])?=(?![=>])")


def rewrite_code(text: str, resolve: Resolver, mutate: Optional[Mutator] = None) -> str:
    """
    Reescreve referencias $nome.

    Args:
        text: codigo JavaScript com referencias $nome
        resolve: nome -> forma de leitura no alvo
        mutate: (nome, operador, operando) -> codigo de atualizacao, ou None
            para manter a mutacao nativa. Operadores: '++', '--', '++pre',
            '--pre', '=', '+=', '-=', etc.
    """
    out = []
    cursor = 0
    for start, end, name in list(iter_references(text)):
        if start < cursor:
            continue
        if mutate is not None:
            lowered = _lower_mutation(text, start, end, name, resolve, mutate)
            if lowered is not None:
                span_start, span_end, replacement = lowered
                out.append(text[cursor:span_start])
                out.append(replacement)
                cursor = span_end
                continue
        out.append(text[cursor:start])
        out.append(resolve(name))
        cursor = end
    out.append(text[cursor:])
    return "".join(out)


def _lower_mutation(
    text: str,
    start: int,
    end: int,
    name: str,
    resolve: Resolver,
    mutate: Mutator,
) -> Optional[tuple[int, int, str]]:
    prefix = text[max(start - 2, 0):start]
    if prefix in ("++", "--"):
        replacement = mutate(name, prefix + "pre", None)
        if replacement is not None:
            return start - 2, end, replacement
        return None

    postfix = POSTFIX.match(text, end)
    if postfix is not None:
        replacement = mutate(name, postfix.group(1), None)
        if replacement is not None:
            return start, postfix.end(), replacement
        return None

    assignment = MUTATION_ASSIGNMENT.match(text, end)
    if assignment is None:
        return None
    rhs_start = assignment.end()
    rhs_end = find_expression_end(text, rhs_start)
    rhs = text[rhs_start:rhs_end]
    operand = rewrite_code(rhs.strip(), resolve, mutate)
    operator = (assignment.group(1) or "") + "="
    replacement = mutate(name, operator, operand)
    if replacement is None:
        return None
    trailing = len(rhs) - len(rhs.rstrip())
    return start, rhs_end - trailing, replacement


def binary_operator(operator: str) -> str:
    """'+=' -> '+'."""
    return operator[:-1]
