"""
script.py - Analise da parte de script de um componente MTM

Proposito:
    Percorrer as instrucoes de nivel zero do script e extrair declaracoes
    de variaveis ($nome), funcoes arrow, imports e exports.

Componentes principais:
    - ScriptAnalyzer: classificador de instrucoes
    - ScriptAnalysis: colecoes extraidas

Dependencias criticas:
    - mtmc.parser.scanner: divisao de instrucoes e casamento de delimitadores
    - mtmc.parser.lexer/transformer: cabecalhos, imports e exports via Lark
    - mtmc.parser.literals: classificacao do lado direito

Exemplo de uso:
    analyzer = ScriptAnalyzer(source, diagnostics)
    analysis = analyzer.analyze(script_text)

Notas de implementacao:
    - Uma funcao `export default function Nome(props) { ... }` envolvendo o
      componente e desembrulhada: o corpo vira o escopo analisado.
    - A marcacao computed depende do conjunto completo de declaracoes e e
      feita em uma segunda passada, independente da ordem no arquivo.
    - Declaracoes duplicadas geram parse_error; vale a primeira.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mtmc.ast.nodes import (
    ExportKind,
    ExportNode,
    ExpressionLiteral,
    FunctionNode,
    ImportNode,
    Param,
    Variable,
)
from mtmc.ast.results import Diagnostics, ParseError, handle_result
from mtmc.error_handler import MtmErrorHandler
from mtmc.parser.lexer import MtmSyntaxError, parse_fragment
from mtmc.parser.literals import parse_value
from mtmc.parser.scanner import (
    Statement,
    find_assignment,
    find_matching,
    find_top_level,
    referenced_names,
    split_statements,
    split_top_level,
    strip_comments,
)
from mtmc.parser.transformer import DeclarationHead, MtmTransformer

logger = logging.getLogger(__name__)

IMPORT_START = re.compile(r"import(?=[\s{*'\"])")
EXPORT_START = re.compile(r"export\b")
DEFAULT_FUNCTION = re.compile(r"export\s+default\s+(?:async\s+)?function\b")
ASYNC_PREFIX = re.compile(r"async\b")
SIMPLE_PARAM = re.compile(r"\$?[A-Za-z_][\w$]*")


@dataclass
class ScriptAnalysis:
    variables: Dict[str, Variable] = field(default_factory=dict)
    functions: Dict[str, FunctionNode] = field(default_factory=dict)
    imports: List[ImportNode] = field(default_factory=list)
    exports: List[ExportNode] = field(default_factory=list)


@dataclass
class ArrowParts:
    params: str
    body: str
    is_async: bool
    is_expression_body: bool


class ScriptAnalyzer:
    def __init__(self, source: str, diagnostics: Diagnostics, handler: Optional[MtmErrorHandler] = None):
        self.source = source
        self.diagnostics = diagnostics
        self.handler = handler or MtmErrorHandler()
        self._pending: List[Variable] = []
        self._analysis = ScriptAnalysis()

    def analyze(self, script_text: str) -> ScriptAnalysis:
        self._analyze_region(script_text, 0, len(script_text), allow_wrapper=True)
        self._resolve_computed()
        return self._analysis

    def _analyze_region(self, script_text: str, start: int, end: int, allow_wrapper: bool) -> None:
        statements, issues = split_statements(script_text[start:end], start, self.source)
        for issue in issues:
            self._error(issue.message, issue.line, issue.suggestion)
        for statement in statements:
            self._classify(script_text, statement, allow_wrapper)

    def _classify(self, script_text: str, statement: Statement, allow_wrapper: bool) -> None:
        text = statement.text
        if text.startswith(("//", "/*")):
            return
        if text.startswith("$"):
            self._declaration(statement)
        elif IMPORT_START.match(text):
            self._import(statement)
        elif allow_wrapper and DEFAULT_FUNCTION.match(text):
            self._component_wrapper(script_text, statement)
        elif EXPORT_START.match(text):
            self._export(statement)
        else:
            logger.debug("Instrucao ignorada na linha %s: %s", statement.line, text[:40])

    def _error(self, message: str, line: Optional[int], suggestion: Optional[str] = None) -> None:
        self.diagnostics.add(ParseError(message, line=line, suggestion=suggestion))

    # ===== DECLARACOES =====

    def _declaration(self, statement: Statement) -> None:
        text = statement.text
        eq = find_assignment(text)
        if eq == -1:
            self._error(
                f"Declaracao sem atribuicao: '{text.strip()}'",
                statement.line,
                "Declare variaveis como `$nome! = valor` ou funcoes como `$nome = () => { ... }`",
            )
            return

        head = self._parse_head(text[:eq], statement.line)
        if head is None:
            return
        reserved = self.handler.reserved_word_message(head.name)
        if reserved is not None:
            self._error(reserved[0], statement.line, reserved[1])
            return
        if head.name in self._analysis.variables or head.name in self._analysis.functions:
            self._error(
                f"'${head.name}' ja foi declarada; a primeira declaracao sera mantida",
                statement.line,
                "Renomeie uma das declaracoes",
            )
            return

        rhs = text[eq + 1:]
        arrow = self._match_arrow(strip_comments(rhs))
        if arrow is not None:
            self._function(head, arrow, statement.line)
            return

        handle_result(
            parse_value(rhs, statement.line),
            on_ok=lambda value: self._add_variable(head, value, statement.line),
            on_err=self.diagnostics.add,
        )

    def _parse_head(self, text: str, line: int) -> Optional[DeclarationHead]:
        try:
            tree = parse_fragment(text, "declaration_head", line)
        except MtmSyntaxError as exc:
            self._error(exc.message, exc.line, exc.suggestion)
            return None
        return MtmTransformer().transform(tree)

    def _add_variable(self, head: DeclarationHead, value, line: int) -> None:
        variable = Variable(
            name=head.name,
            reactive=head.reactive,
            has_type_annotation=head.type is not None,
            type=head.type if head.type is not None else value.inferred_type(),
            value=value,
            line=line,
        )
        self._analysis.variables[head.name] = variable
        self._pending.append(variable)

    def _resolve_computed(self) -> None:
        """Marca como computed expressoes que referenciam outras variaveis declaradas."""
        declared = set(self._analysis.variables)
        for variable in self._pending:
            if not isinstance(variable.value, ExpressionLiteral):
                continue
            deps = [name for name in referenced_names(variable.value.value) if name != variable.name]
            if any(name in declared for name in deps):
                variable.computed = True
                variable.reactive = False

    # ===== FUNCOES =====

    def _match_arrow(self, rhs: str) -> Optional[ArrowParts]:
        text = rhs.strip()
        is_async = False
        if ASYNC_PREFIX.match(text):
            is_async = True
            text = text[5:].lstrip()

        if text.startswith("("):
            close = find_matching(text, 0)
            if close == -1:
                return None
            params = text[1:close]
            rest = text[close + 1:].lstrip()
            if rest.startswith(":"):
                arrow_at = find_top_level(rest, "=>")
                if arrow_at == -1:
                    return None
                rest = rest[arrow_at:]
        else:
            match = SIMPLE_PARAM.match(text)
            if match is None:
                return None
            params = match.group(0)
            rest = text[match.end():].lstrip()

        if not rest.startswith("=>"):
            return None
        body = rest[2:].strip()
        if body.startswith("{") and find_matching(body, 0) == len(body) - 1:
            inner = body[1:-1].strip("\n")
            return ArrowParts(params, textwrap.dedent(inner).strip(), is_async, False)
        return ArrowParts(params, body, is_async, True)

    def _function(self, head: DeclarationHead, arrow: ArrowParts, line: int) -> None:
        if arrow.is_expression_body and not arrow.body:
            self._error(f"Funcao '${head.name}' sem corpo", line, "Use `$nome = () => { ... }`")
            return
        self._analysis.functions[head.name] = FunctionNode(
            name=head.name,
            params=self._params(arrow.params, line),
            body=arrow.body,
            is_arrow=True,
            is_async=arrow.is_async,
            is_expression_body=arrow.is_expression_body,
            line=line,
        )

    def _params(self, text: str, line: int) -> List[Param]:
        params: List[Param] = []
        for chunk in split_top_level(text):
            chunk = chunk.strip()
            if not chunk:
                continue
            default: Optional[str] = None
            eq = find_assignment(chunk)
            if eq != -1:
                default = chunk[eq + 1:].strip()
                chunk = chunk[:eq].strip()
            try:
                head = MtmTransformer().transform(parse_fragment(chunk, "param_head", line))
            except MtmSyntaxError:
                # destructuring ({ a, b }) ou [a, b]: preservado como escrito
                params.append(Param(name=chunk, default=default))
                continue
            params.append(
                Param(
                    name=head.name,
                    type=head.type,
                    has_type_annotation=head.type is not None,
                    default=default,
                )
            )
        return params

    # ===== IMPORTS E EXPORTS =====

    def _import(self, statement: Statement) -> None:
        raw = statement.text.strip()
        try:
            tree = parse_fragment(raw, "import_stmt", statement.line)
        except MtmSyntaxError as exc:
            self._error(f"Import nao reconhecido: {exc.message}", exc.line, exc.suggestion)
            return
        self._analysis.imports.append(MtmTransformer(raw=raw, line=statement.line).transform(tree))

    def _export_head(self, text: str) -> str:
        cut = len(text)
        for target in ("(", "="):
            index = find_top_level(text, target)
            if index != -1 and text[index:index + 2] not in ("==", "=>"):
                cut = min(cut, index)
        brace = find_top_level(text, "{")
        if brace != -1 and not re.match(r"export\s*\{", text):
            cut = min(cut, brace)
        return text[:cut]

    def _export(self, statement: Statement) -> Optional[ExportNode]:
        raw = statement.text.strip()
        head = self._export_head(raw)
        try:
            tree = parse_fragment(head, "export_head", statement.line)
        except MtmSyntaxError as exc:
            self._error(f"Export nao reconhecido: {exc.message}", exc.line, exc.suggestion)
            return None
        export = MtmTransformer(raw=raw, line=statement.line).transform(tree)
        if export.type is ExportKind.NAMED and not export.is_function:
            eq = find_assignment(raw)
            if eq != -1 and self._match_arrow(raw[eq + 1:]) is not None:
                export.is_function = True
        self._analysis.exports.append(export)
        return export

    def _component_wrapper(self, script_text: str, statement: Statement) -> None:
        """Desembrulha `export default function Nome(props) { ... }`."""
        export = self._export(statement)
        if export is None:
            return
        text = statement.text
        paren = find_top_level(text, "(")
        close = find_matching(text, paren) if paren != -1 else -1
        brace = text.find("{", close + 1) if close != -1 else -1
        if brace == -1 or find_matching(text, brace) == -1:
            return
        export.is_component = True
        export.raw = text[:brace].strip()
        body_start = statement.start + brace + 1
        body_end = statement.start + find_matching(text, brace)
        self._analyze_region(script_text, body_start, body_end, allow_wrapper=False)
