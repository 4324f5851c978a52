"""
error_handler.py - Gerador de mensagens de erro pedagogicas para MTM

Proposito:
    Transformar erros brutos do Lark e falhas estruturais do template em
    mensagens curtas acompanhadas de uma sugestao com a sintaxe correta.

Componentes principais:
    - MtmErrorHandler: gerador principal de mensagens pedagogicas
    - Detectores de padroes: _is_missing_value, _is_reserved_word, etc.
    - Sugestoes por similaridade: suggest_block_keyword, suggest_name

Dependencias criticas:
    - lark.exceptions: UnexpectedToken, UnexpectedCharacters, UnexpectedInput
    - difflib: nomes parecidos para variaveis nao declaradas

Exemplo de uso:
    from mtmc.error_handler import MtmErrorHandler
    handler = MtmErrorHandler()
    message, suggestion = handler.handle_unexpected_token(exc, "$count!", "declaration_head")

Notas de implementacao:
    - Mensagens sao de uma linha; detalhes e exemplos vao para a sugestao.
    - Cada regra inicial da gramatica tem uma dica de sintaxe propria.
"""

from __future__ import annotations

import difflib
from typing import Iterable, List, Optional, Tuple

from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

BLOCK_KEYWORDS = ("if", "each", "for", "while")

RULE_LABELS = {
    "declaration_head": "declaracao",
    "param_head": "parametro",
    "value": "valor",
    "import_stmt": "import",
    "export_head": "export",
    "each_binding": "{#each}",
    "for_header": "{#for}",
}

RULE_HINTS = {
    "declaration_head": "Declare variaveis como `$nome! = valor` (reativa) ou `$nome: tipo = valor`",
    "param_head": "Parametros seguem a forma `$nome` ou `$nome: tipo = padrao`",
    "value": "Use texto entre aspas, numero, true/false, null, [lista] ou {objeto}",
    "import_stmt": (
        "Use `import nome from 'modulo'`, `import { a, b as c } from 'modulo'` "
        "ou `import * as ns from 'modulo'`"
    ),
    "export_head": (
        "Use `export const nome = ...`, `export function nome() {}`, "
        "`export default nome` ou `export { a, b }`"
    ),
    "each_binding": "Use `{#each $itens as item}` ou `{#each $itens as item, indice}`",
    "for_header": "Use `{#for i=0 to 9}` com limites inteiros",
}

RESERVED_WORDS = {
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "export", "extends", "finally",
    "for", "function", "if", "import", "in", "instanceof", "let", "new",
    "return", "super", "switch", "this", "throw", "try", "typeof", "var",
    "void", "while", "with", "yield", "await",
}


class MtmErrorHandler:
    """
    Gerador de mensagens de erro pedagogicas.

    Example:
        handler = MtmErrorHandler()
        try:
            tree = parser.parse(fragment, start="declaration_head")
        except UnexpectedToken as e:
            message, hint = handler.handle_unexpected_token(e, fragment, "declaration_head")
    """

    def __init__(self) -> None:
        self.block_keywords = BLOCK_KEYWORDS

    def handle_unexpected_token(
        self,
        error: UnexpectedToken,
        fragment: str,
        rule: str,
    ) -> Tuple[str, Optional[str]]:
        """
        Processa erro UnexpectedToken e gera mensagem pedagogica.

        Returns:
            Tupla (mensagem curta, sugestao)
        """
        label = RULE_LABELS.get(rule, rule)
        token = error.token

        if self._is_missing_value(error):
            return (
                f"Fim inesperado em {label}: '{fragment.strip()}' esta incompleto",
                RULE_HINTS.get(rule),
            )

        msg = f"Token inesperado '{token}' em {label}"
        expected = self._humanize_expected_tokens(sorted(error.expected or []))
        if expected:
            msg += f" (esperado: {', '.join(expected[:5])})"
        return msg, RULE_HINTS.get(rule)

    def handle_unexpected_characters(
        self,
        error: UnexpectedCharacters,
        fragment: str,
        rule: str,
    ) -> Tuple[str, Optional[str]]:
        label = RULE_LABELS.get(rule, rule)
        char = getattr(error, "char", None)
        if char in ("'", '"'):
            return f"Texto sem aspas de fechamento em {label}", "Feche o texto com a mesma aspa usada na abertura"
        return f"Caractere inesperado {char!r} em {label}", RULE_HINTS.get(rule)

    # =========================================================================
    # DETECTORES DE PADROES
    # =========================================================================

    def _is_missing_value(self, error: UnexpectedToken) -> bool:
        """Fragmento terminou antes de completar a regra."""
        return error.token is None or error.token.type == "$END"

    def _is_reserved_word(self, word: str) -> bool:
        return word in RESERVED_WORDS

    def reserved_word_message(self, name: str) -> Optional[Tuple[str, str]]:
        """Mensagem para $nome cujo identificador JavaScript seria palavra reservada."""
        if not self._is_reserved_word(name):
            return None
        return (
            f"'${name}' gera o identificador reservado '{name}'",
            f"Escolha outro nome, por exemplo `${name}Value`",
        )

    # =========================================================================
    # SUGESTOES POR SIMILARIDADE
    # =========================================================================

    def suggest_block_keyword(self, keyword: str) -> Optional[str]:
        """Sugere o bloco conhecido mais proximo de uma palavra-chave digitada errada."""
        best: Optional[str] = None
        best_distance = 3
        for known in self.block_keywords:
            distance = self._levenshtein_distance(keyword.lower(), known)
            if distance < best_distance:
                best, best_distance = known, distance
        return best

    def suggest_event_name(self, name: str, events: Iterable[str]) -> Optional[str]:
        """Evento conhecido a uma edicao de distancia do atributo informado."""
        lowered = name.lower()
        for event in sorted(events):
            if lowered != event and self._levenshtein_distance(lowered, event) == 1:
                return event
        return None

    def suggest_name(self, name: str, candidates: Iterable[str]) -> Optional[str]:
        matches = difflib.get_close_matches(name, list(candidates), n=1, cutoff=0.6)
        return matches[0] if matches else None

    def unknown_block_message(self, keyword: str) -> Tuple[str, str]:
        suggestion = self.suggest_block_keyword(keyword)
        if suggestion:
            return (
                f"Bloco desconhecido {{#{keyword}}}. Voce quis dizer {{#{suggestion}}}?",
                f"Blocos validos: {', '.join('{#' + kw + '}' for kw in self.block_keywords)}",
            )
        return (
            f"Bloco desconhecido {{#{keyword}}}",
            f"Blocos validos: {', '.join('{#' + kw + '}' for kw in self.block_keywords)}",
        )

    def _levenshtein_distance(self, s1: str, s2: str) -> int:
        """Numero de edicoes necessarias para transformar s1 em s2."""
        if len(s1) < len(s2):
            return self._levenshtein_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]

    # =========================================================================
    # UTILITARIOS
    # =========================================================================

    def _humanize_expected_tokens(self, expected: List[str]) -> List[str]:
        """
        Converte nomes de tokens tecnicos para nomes amigaveis.

        Example:
            ["VARIABLE", "COLON"] -> ["variavel $nome", "':'"]
        """
        friendly_names = {
            "VARIABLE": "variavel $nome",
            "PARAM_NAME": "nome de parametro",
            "NAME": "identificador",
            "REACTIVE": "'!'",
            "COLON": "':'",
            "COMMA": "','",
            "EQUAL": "'='",
            "SEMICOLON": "';'",
            "DOUBLE_QUOTED": "texto entre aspas",
            "SINGLE_QUOTED": "texto entre aspas",
            "NUMBER": "numero",
            "INT": "inteiro",
            "LSQB": "'['",
            "RSQB": "']'",
            "LBRACE": "'{'",
            "RBRACE": "'}'",
            "ARRAY_SUFFIX": "'[]'",
        }

        result: List[str] = []
        for token in expected:
            name = friendly_names.get(token, token.lower())
            if name not in result:
                result.append(name)
        return result


def create_pedagogical_error(
    exc: UnexpectedInput,
    fragment: str,
    rule: str,
) -> Tuple[str, Optional[str]]:
    """
    Factory function para criar mensagens pedagogicas a partir de excecoes.

    Example:
        try:
            tree = parser.parse(fragment, start="value")
        except (UnexpectedToken, UnexpectedCharacters) as e:
            message, hint = create_pedagogical_error(e, fragment, "value")
    """
    handler = MtmErrorHandler()

    if isinstance(exc, UnexpectedToken):
        return handler.handle_unexpected_token(exc, fragment, rule)
    elif isinstance(exc, UnexpectedCharacters):
        return handler.handle_unexpected_characters(exc, fragment, rule)
    else:
        return f"Erro de sintaxe em {RULE_LABELS.get(rule, rule)}: {exc}", RULE_HINTS.get(rule)
