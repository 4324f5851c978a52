"""
compiler.py - Driver de transformacao MTM (fonte -> codigo do framework alvo)

Proposito:
    Executar o pipeline parse -> escolha da estrategia -> geracao, sempre
    devolvendo um TransformResult com codigo valido no alvo.

Componentes principais:
    - ComponentTransformer: percorre o ParseResult e delega a estrategia
    - STRATEGIES: mapa Target -> classe de CodeGenStrategy
    - TransformStats: contagens agregadas de um lote de transformacoes

Dependencias criticas:
    - mtmc.parser.component: ComponentParser
    - mtmc.codegen: estrategias por framework

Exemplo de uso:
    transformer = ComponentTransformer()
    result = transformer.transform(source, "react", TransformOptions(filename="Counter.mtm"))
    if not result.success:
        print(result.get_diagnostics())

Notas de implementacao:
    - transform() nunca lanca excecoes: erros bloqueantes, alvo desconhecido
      ou falha interna produzem o componente de erro do alvo.
    - Alvo desconhecido gera o componente de erro em JavaScript puro.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Type

from mtmc.ast.results import Diagnostics, ParseResult, TransformError, TransformResult
from mtmc.codegen.base import CodeGenStrategy, ComponentParts, Target, TransformOptions
from mtmc.codegen.react import ReactStrategy
from mtmc.codegen.svelte import SvelteStrategy
from mtmc.codegen.vanilla import VanillaStrategy
from mtmc.codegen.vue import VueStrategy
from mtmc.parser.component import ComponentParser

logger = logging.getLogger(__name__)

STRATEGIES: Dict[Target, Type[CodeGenStrategy]] = {
    Target.REACT: ReactStrategy,
    Target.VUE: VueStrategy,
    Target.SVELTE: SvelteStrategy,
    Target.VANILLA: VanillaStrategy,
}

ERROR_SUMMARY_LIMIT = 3


@dataclass
class TransformStats:
    file_count: int = 0
    success_count: int = 0
    error_count: int = 0
    warning_count: int = 0

    @classmethod
    def from_results(cls, results: Iterable[TransformResult]) -> "TransformStats":
        stats = cls()
        for result in results:
            stats.file_count += 1
            stats.success_count += int(result.success)
            stats.error_count += len(result.errors)
            stats.warning_count += len(result.warnings)
        return stats


class ComponentTransformer:
    def __init__(self, parser: Optional[ComponentParser] = None):
        self.parser = parser or ComponentParser()

    def transform(
        self,
        source: str,
        target: object,
        options: Optional[TransformOptions] = None,
    ) -> TransformResult:
        options = options or TransformOptions()
        parsed = self.parser.parse(source)
        return self.generate(parsed, target, options)

    def generate(self, parsed: ParseResult, target: object, options: TransformOptions) -> TransformResult:
        """Gera codigo a partir de um ParseResult ja produzido."""
        diagnostics = Diagnostics()
        diagnostics.extend(list(parsed.errors))

        resolved = Target.lookup(target)
        if resolved is None:
            diagnostics.add(
                TransformError(
                    f"Framework alvo desconhecido: '{target}'",
                    suggestion=f"Use um de: {', '.join(t.value for t in Target)}",
                )
            )
            strategy = VanillaStrategy(parsed, options, diagnostics)
            code = strategy.emit_error_component(f"framework alvo desconhecido '{target}'", options.filename)
            return self._result(code, str(target), options, diagnostics, parsed)

        strategy = STRATEGIES[resolved](parsed, options, diagnostics)
        logger.debug("Estrategia %s selecionada para %s", type(strategy).__name__, options.filename)

        blocking = parsed.blocking_errors(options.strict)
        if blocking:
            logger.debug("%d erro(s) bloqueante(s) em %s", len(blocking), options.filename)
            code = strategy.emit_error_component(self._summary(blocking), options.filename)
            return self._result(code, resolved.value, options, diagnostics, parsed)

        try:
            code = self._emit(strategy, parsed)
        except Exception as exc:
            logger.exception("Falha ao gerar codigo %s para %s", resolved.value, options.filename)
            diagnostics.add(TransformError(f"Falha interna na geracao de codigo {resolved.value}: {exc}"))
            code = strategy.emit_error_component(str(exc), options.filename)
        return self._result(code, resolved.value, options, diagnostics, parsed)

    def _emit(self, strategy: CodeGenStrategy, parsed: ParseResult) -> str:
        parts = ComponentParts(name=strategy.component_name())
        parts.state = [strategy.emit_variable(variable) for variable in parsed.variables.values()]
        parts.functions = [strategy.emit_function(function) for function in parsed.functions.values()]
        parts.markup = strategy.render_markup(parsed.nodes)
        return strategy.emit_component_shell(parts)

    def _summary(self, errors: List) -> str:
        messages = [error.message for error in errors[:ERROR_SUMMARY_LIMIT]]
        if len(errors) > ERROR_SUMMARY_LIMIT:
            messages.append(f"(+{len(errors) - ERROR_SUMMARY_LIMIT} erro(s))")
        return "; ".join(messages)

    def _result(
        self,
        code: str,
        target: str,
        options: TransformOptions,
        diagnostics: Diagnostics,
        parsed: ParseResult,
    ) -> TransformResult:
        return TransformResult(
            code=code,
            target=target,
            filename=options.filename,
            errors=tuple(diagnostics.errors),
            warnings=tuple(diagnostics.warnings),
            parsed=parsed,
        )
