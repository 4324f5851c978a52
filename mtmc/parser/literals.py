"""
literals.py - Classificacao do lado direito de declaracoes

Proposito:
    Converter o texto apos '=' em um ValueLiteral: literal JSON-like,
    signal('chave', inicial) ou expressao JavaScript preservada.

Componentes principais:
    - parse_value: classificacao com Result[ValueLiteral, ParseError]
    - parse_signal: chamada signal(...) com chave obrigatoriamente string

Dependencias criticas:
    - mtmc.parser.lexer: regra inicial "value" da gramatica
    - mtmc.parser.scanner: balanceamento e divisao de argumentos

Exemplo de uso:
    from mtmc.parser.literals import parse_value
    result = parse_value("[1, 2, 3]", line=4)
    if result.is_ok():
        literal = result.unwrap()

Notas de implementacao:
    - Texto vazio ou desbalanceado gera Err; qualquer outro texto que nao
      seja literal vira ExpressionLiteral.
"""

from __future__ import annotations

import re

from mtmc.ast.nodes import ExpressionLiteral, NullLiteral, SignalLiteral, StringLiteral, ValueLiteral
from mtmc.ast.results import Err, Ok, ParseError, Result
from mtmc.parser.lexer import MtmSyntaxError, parse_fragment
from mtmc.parser.scanner import check_balance, find_matching, split_top_level, strip_comments
from mtmc.parser.transformer import MtmTransformer

SIGNAL_CALL = re.compile(r"signal\s*\(")
LITERAL_START = re.compile(r"""^(?:["'\[{~]|[+-]?\.?\d|true\b|false\b|null\b)""")


def parse_value(text: str, line: int | None = None) -> Result[ValueLiteral, ParseError]:
    stripped = strip_comments(text)
    if not stripped:
        return Err(
            ParseError(
                "Valor ausente apos '='",
                line=line,
                suggestion="Informe um valor, por exemplo `$nome! = 0`",
            )
        )

    issue = check_balance(stripped)
    if issue is not None:
        return Err(ParseError(issue.message, line=_shift(line, issue.line), suggestion=issue.suggestion))

    signal = SIGNAL_CALL.match(stripped)
    if signal is not None and find_matching(stripped, signal.end() - 1) == len(stripped) - 1:
        return parse_signal(stripped[signal.end():-1], line)

    if LITERAL_START.match(stripped):
        try:
            tree = parse_fragment(stripped, "value", line or 1)
            return Ok(MtmTransformer().transform(tree))
        except MtmSyntaxError:
            pass

    return Ok(ExpressionLiteral(stripped))


def parse_signal(arguments: str, line: int | None = None) -> Result[ValueLiteral, ParseError]:
    """Interpreta os argumentos de signal(chave, inicial)."""
    args = [arg.strip() for arg in split_top_level(arguments)]
    if args and args[-1] == "":
        args.pop()
    if not args or len(args) > 2:
        return Err(
            ParseError(
                "signal() espera uma chave e um valor inicial",
                line=line,
                suggestion="Use `signal('chave', valorInicial)`",
            )
        )

    key_result = parse_value(args[0], line)
    if key_result.is_err():
        return key_result
    key = key_result.unwrap()
    if not isinstance(key, StringLiteral):
        return Err(
            ParseError(
                "A chave de signal() deve ser um texto literal",
                line=line,
                suggestion=f"Use `signal('{args[0].strip(chr(36))}', ...)`",
            )
        )

    if len(args) == 1:
        return Ok(SignalLiteral(key=key.value, initial_value=NullLiteral()))
    return parse_value(args[1], line).map(lambda initial: SignalLiteral(key=key.value, initial_value=initial))


def _shift(line: int | None, relative: int) -> int | None:
    if line is None:
        return None
    return line + relative - 1
