"""
test_error_handler.py - Testes para mensagens pedagogicas de erro

Valida que o MtmErrorHandler converte erros do Lark em mensagens curtas
com sugestao e que as sugestoes por similaridade funcionam.
"""

import pytest

from mtmc.ast.results import Diagnostics, ParseError, SemanticWarning, TransformError
from mtmc.error_handler import MtmErrorHandler
from mtmc.parser.lexer import MtmSyntaxError, parse_fragment
from mtmc.parser.template import EVENT_ATTRIBUTES


class TestPedagogicalErrors:
    """Erros de sintaxe em fragmentos viram MtmSyntaxError com sugestao."""

    def test_incomplete_declaration(self):
        with pytest.raises(MtmSyntaxError) as exc_info:
            parse_fragment("$count!:", "declaration_head")

        error = exc_info.value
        assert error.message.startswith("Fim inesperado em declaracao")
        assert "$count!:" in error.message
        assert error.suggestion is not None
        assert "$nome!" in error.suggestion

    def test_unexpected_character(self):
        with pytest.raises(MtmSyntaxError) as exc_info:
            parse_fragment("$1abc", "declaration_head")

        assert "em declaracao" in exc_info.value.message

    def test_unexpected_token_lists_expected(self):
        with pytest.raises(MtmSyntaxError) as exc_info:
            parse_fragment("$count!!", "declaration_head")

        error = exc_info.value
        assert error.message.startswith("Token inesperado '!'")
        assert error.expected

    def test_line_is_shifted_to_file_line(self):
        with pytest.raises(MtmSyntaxError) as exc_info:
            parse_fragment("$count!:", "declaration_head", line=7)

        assert exc_info.value.line == 7
        assert str(exc_info.value).startswith("7:")

    def test_import_hint(self):
        with pytest.raises(MtmSyntaxError) as exc_info:
            parse_fragment("import { a from './x'", "import_stmt")

        assert "import" in exc_info.value.message
        assert "import * as ns from 'modulo'" in exc_info.value.suggestion

    def test_valid_fragments_do_not_raise(self):
        assert parse_fragment("$count!: number", "declaration_head") is not None
        assert parse_fragment("...$rest", "param_head") is not None
        assert parse_fragment("item, index", "each_binding") is not None
        assert parse_fragment("i=0 to 9", "for_header") is not None


class TestSuggestions:
    """Sugestoes por distancia de edicao e por similaridade."""

    @pytest.mark.parametrize(
        "typo, expected",
        [("iff", "if"), ("eahc", "each"), ("fro", "for"), ("whlie", "while"), ("IF", "if")],
    )
    def test_suggest_block_keyword(self, typo, expected):
        assert MtmErrorHandler().suggest_block_keyword(typo) == expected

    def test_suggest_block_keyword_too_far(self):
        assert MtmErrorHandler().suggest_block_keyword("switch") is None

    def test_unknown_block_message(self):
        message, suggestion = MtmErrorHandler().unknown_block_message("eachh")
        assert message == "Bloco desconhecido {#eachh}. Voce quis dizer {#each}?"
        assert "{#while}" in suggestion

    def test_unknown_block_message_without_suggestion(self):
        message, _ = MtmErrorHandler().unknown_block_message("switch")
        assert message == "Bloco desconhecido {#switch}"

    def test_suggest_event_name(self):
        handler = MtmErrorHandler()
        assert handler.suggest_event_name("clik", EVENT_ATTRIBUTES) == "click"
        assert handler.suggest_event_name("Submitt", EVENT_ATTRIBUTES) == "submit"
        assert handler.suggest_event_name("click", EVENT_ATTRIBUTES) is None
        assert handler.suggest_event_name("title", EVENT_ATTRIBUTES) is None

    def test_suggest_name(self):
        handler = MtmErrorHandler()
        assert handler.suggest_name("cont", ["count", "items"]) == "count"
        assert handler.suggest_name("zzz", ["count", "items"]) is None

    def test_reserved_word_message(self):
        handler = MtmErrorHandler()
        message, suggestion = handler.reserved_word_message("class")
        assert "reservado 'class'" in message
        assert "$classValue" in suggestion
        assert handler.reserved_word_message("count") is None


class TestErrorHandlerUtilities:
    """Testes para funcoes utilitarias do error handler."""

    def test_levenshtein_distance(self):
        handler = MtmErrorHandler()
        assert handler._levenshtein_distance("kitten", "sitting") == 3
        assert handler._levenshtein_distance("", "abc") == 3
        assert handler._levenshtein_distance("each", "each") == 0

    def test_humanize_expected_tokens(self):
        handler = MtmErrorHandler()

        friendly = handler._humanize_expected_tokens(["VARIABLE", "COLON", "COLON", "DOUBLE_QUOTED", "SINGLE_QUOTED", "FOO"])

        assert friendly == ["variavel $nome", "':'", "texto entre aspas", "foo"]


class TestDiagnostics:
    """Taxonomia de diagnosticos e agregacao."""

    def test_types_and_severity(self):
        assert ParseError("x").type == "parse_error"
        assert TransformError("x").type == "transform_error"
        warning = SemanticWarning("x")
        assert warning.type == "semantic_warning"
        assert warning.severity.value == "warning"

    def test_to_diagnostic(self):
        error = ParseError("Valor ausente", line=3, suggestion="Informe um valor")
        assert error.to_diagnostic() == "[parse_error] linha 3: Valor ausente\n  Sugestao: Informe um valor"

    def test_to_diagnostic_without_line(self):
        assert TransformError("falhou").to_diagnostic() == "[transform_error] componente: falhou"

    def test_to_dict(self):
        data = ParseError("x", line=2, blocking=True).to_dict()
        assert data["type"] == "parse_error"
        assert data["line"] == 2
        assert data["blocking"] is True
        assert data["severity"] == "error"

    def test_collector_routes_by_severity_and_dedupes_warnings(self):
        diagnostics = Diagnostics()
        diagnostics.add(ParseError("a"))
        diagnostics.add(SemanticWarning("w", line=1))
        diagnostics.add(SemanticWarning("w", line=1))
        assert len(diagnostics.errors) == 1
        assert len(diagnostics.warnings) == 1
        text = diagnostics.to_diagnostics()
        assert "=== ERROS ===" in text
        assert "=== AVISOS ===" in text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
