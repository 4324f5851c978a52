"""
lexer.py - Carregamento e execucao do parser Lark

Proposito:
    Ler a gramatica MTM e expor o parsing de fragmentos isolados
    (cabecalhos de declaracao, literais, imports, exports, blocos do template).

Componentes principais:
    - load_grammar: leitura do arquivo mtm.lark do pacote
    - create_parser: construcao do parser LALR com varias regras iniciais
    - parse_fragment: parsing com tratamento de erros

Dependencias criticas:
    - lark: parser LALR e excecoes de sintaxe
    - importlib.resources: acesso a dados do pacote

Exemplo de uso:
    from mtmc.parser.lexer import parse_fragment
    tree = parse_fragment("$count!: number", "declaration_head")

Notas de implementacao:
    - O lexer contextual permite que palavras-chave (as, from, true) sejam
      nomes comuns onde a gramatica espera um identificador.
    - Erros de sintaxe geram MtmSyntaxError com linha ajustada ao arquivo.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Optional

from lark import Lark, Tree
from lark.exceptions import UnexpectedInput

from mtmc.error_handler import create_pedagogical_error

START_RULES = (
    "declaration_head",
    "param_head",
    "value",
    "import_stmt",
    "export_head",
    "each_binding",
    "for_header",
)


@dataclass
class MtmSyntaxError(Exception):
    """
    Erro de sintaxe em um fragmento.

    Attributes:
        message: descricao curta do erro
        line: linha no arquivo do componente
        column: coluna dentro do fragmento
        suggestion: sintaxe correta sugerida
        expected: lista de tokens esperados (quando disponivel)
    """

    message: str
    line: int
    column: int
    suggestion: Optional[str] = None
    expected: Optional[list[str]] = None

    def __str__(self) -> str:
        return f"{self.line}:{self.column}: {self.message}"


@lru_cache(maxsize=1)
def load_grammar() -> str:
    """Carrega o arquivo mtm.lark a partir do pacote mtmc.grammar."""
    grammar_path = resources.files("mtmc.grammar").joinpath("mtm.lark")
    return grammar_path.read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def create_parser() -> Lark:
    """Cria o parser LALR compartilhado por todas as regras iniciais."""
    return Lark(
        load_grammar(),
        parser="lalr",
        lexer="contextual",
        start=list(START_RULES),
        maybe_placeholders=False,
        propagate_positions=True,
    )


def parse_fragment(text: str, rule: str, line: int = 1) -> Tree:
    """
    Parseia um fragmento com a regra inicial indicada.

    Args:
        text: fragmento de codigo
        rule: uma das START_RULES
        line: linha do arquivo onde o fragmento comeca
    """
    parser = create_parser()
    try:
        return parser.parse(text, start=rule)
    except UnexpectedInput as exc:
        message, suggestion = create_pedagogical_error(exc, text, rule)
        fragment_line = getattr(exc, "line", 1) or 1
        if fragment_line < 1:
            fragment_line = 1
        expected = getattr(exc, "expected", None)
        raise MtmSyntaxError(
            message=message,
            line=line + fragment_line - 1,
            column=getattr(exc, "column", 0) or 0,
            suggestion=suggestion,
            expected=sorted(expected) if expected else None,
        ) from exc
