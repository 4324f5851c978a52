"""
component.py - Parser de componentes MTM (fonte -> ParseResult)

Proposito:
    Orquestrar a extracao da regiao <template>, a analise do script e a
    analise do template, produzindo um ParseResult imutavel.

Componentes principais:
    - ComponentParser: parser reutilizavel e sem estado entre chamadas

Dependencias criticas:
    - mtmc.parser.scanner: localizacao do template
    - mtmc.parser.script: ScriptAnalyzer
    - mtmc.parser.template: TemplateAnalyzer

Exemplo de uso:
    from mtmc.parser.component import ComponentParser
    result = ComponentParser().parse("$count! = 0\\n<template><p>{$count}</p></template>")

Notas de implementacao:
    - parse() nunca lanca excecoes: falhas inesperadas viram parse_error
      bloqueante e sao registradas no log.
    - O script e analisado com o template substituido por espacos, o que
      mantem as linhas reportadas iguais as do arquivo fonte.
"""

from __future__ import annotations

import logging

from mtmc.ast.results import Diagnostics, ParseError, ParseResult
from mtmc.error_handler import MtmErrorHandler
from mtmc.parser.scanner import blank_out, find_template_regions
from mtmc.parser.script import ScriptAnalyzer
from mtmc.parser.template import TemplateAnalyzer

logger = logging.getLogger(__name__)


class ComponentParser:
    def __init__(self, handler: MtmErrorHandler | None = None):
        self.handler = handler or MtmErrorHandler()

    def parse(self, source: str) -> ParseResult:
        if not source or not source.strip():
            return ParseResult()
        diagnostics = Diagnostics()
        try:
            return self._parse(source, diagnostics)
        except Exception as exc:
            logger.exception("Falha inesperada ao analisar componente")
            diagnostics.add(ParseError(f"Erro interno do parser: {exc}", blocking=True))
            return ParseResult(errors=tuple(diagnostics.errors))

    def _parse(self, source: str, diagnostics: Diagnostics) -> ParseResult:
        regions, issues = find_template_regions(source)
        for issue in issues:
            diagnostics.add(ParseError(issue.message, line=issue.line, suggestion=issue.suggestion, blocking=True))

        script_text = source
        for region in regions:
            script_text = blank_out(script_text, region.start, region.end)
        for extra in regions[1:]:
            diagnostics.add(
                ParseError(
                    "Mais de um bloco <template> no componente; apenas o primeiro e usado",
                    line=source.count("\n", 0, extra.start) + 1,
                    suggestion="Combine o markup em um unico <template>",
                )
            )

        script = ScriptAnalyzer(source, diagnostics, self.handler).analyze(script_text)

        template = ""
        template_nodes = None
        if regions:
            region = regions[0]
            template = source[region.content_start:region.content_end]
            template_nodes = TemplateAnalyzer(
                source, region.content_start, script.functions, diagnostics, self.handler
            ).analyze(template)

        logger.debug(
            "Componente analisado: %d variaveis, %d funcoes, %d erros",
            len(script.variables),
            len(script.functions),
            len(diagnostics.errors),
        )
        return ParseResult(
            variables=script.variables,
            functions=script.functions,
            template=template.strip(),
            bindings=tuple(template_nodes.bindings) if template_nodes else (),
            events=tuple(template_nodes.events) if template_nodes else (),
            control_flow=tuple(template_nodes.control_flow) if template_nodes else (),
            imports=tuple(script.imports),
            exports=tuple(script.exports),
            errors=tuple(diagnostics.errors),
            nodes=tuple(template_nodes.nodes) if template_nodes else (),
        )
