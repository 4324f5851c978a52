"""
svelte.py - Estrategia de geracao para Svelte

Proposito:
    Emitir um componente .svelte: estado em let, derivados em declaracoes
    reativas $:, funcoes comuns e blocos nativos {#if}/{#each}.

Componentes principais:
    - SvelteStrategy: implementacao de CodeGenStrategy para Svelte

Dependencias criticas:
    - mtmc.codegen.base: contrato e utilitarios compartilhados

Exemplo de uso:
    strategy = SvelteStrategy(parsed, TransformOptions(), Diagnostics())
    strategy.emit_variable(parsed.variables["double"])  # "$: double = count * 2;"

Notas de implementacao:
    - Atribuicoes a variaveis locais ja sao reativas no Svelte; apenas
      signals sao reescritos para o setter compartilhado.
    - Exports nomeados vao para <script context="module">.
"""

from __future__ import annotations

from typing import List, Optional

from mtmc.ast.nodes import (
    AttributeNode,
    Binding,
    ConditionalNode,
    ControlFlowNode,
    Event,
    ForNode,
    FunctionNode,
    LoopNode,
    Variable,
    WhileNode,
    js_string,
)
from mtmc.codegen.base import CodeGenStrategy, ComponentParts, Target


class SvelteStrategy(CodeGenStrategy):
    target = Target.SVELTE

    # ===== ESTADO =====

    def mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        if not variable.is_signal:
            return None
        return f"{self.setter_name(variable.name)}({self.updated_value(variable.name, operator, operand)})"

    def emit_variable(self, variable: Variable) -> str:
        name = variable.name
        if variable.is_signal:
            return "\n".join(
                [
                    self.signal_source(variable),
                    f"let {name} = {self.shared_name(name)};",
                    self.signal_subscription(variable, f"{name} = value;"),
                ]
            )
        if variable.computed:
            return f"$: {name} = {self.literal(variable)};"
        if variable.reactive:
            return f"let {name} = {self.literal(variable)};"
        return f"const {name} = {self.literal(variable)};"

    def emit_function(self, function: FunctionNode) -> str:
        body = self.function_body(function)
        if function.is_expression_body:
            body = f"return {body};"
        prefix = "async " if function.is_async else ""
        return f"{prefix}function {function.name}({self.params(function)}) {self.block(body)}"

    # ===== MARKUP =====

    def emit_binding(self, binding: Binding) -> str:
        return "{" + self.markup_expression(binding.expression, binding.line) + "}"

    def emit_attribute(self, attribute: AttributeNode) -> str:
        return f"{attribute.name}={{{self.markup_expression(attribute.expression, attribute.line)}}}"

    def emit_event(self, event: Event) -> str:
        handler = self.callable_handler(event)
        return f"on:{event.type}={{{handler}}}"

    def emit_control_flow(self, node: ControlFlowNode) -> str:
        match node:
            case ConditionalNode():
                return self._conditional(node)
            case LoopNode():
                iterable = self.markup_expression(node.iterable, node.line)
                alias = f"{node.item_name}, {node.index_name}" if node.index_name else node.item_name
                with self.scope(node.item_name, node.index_name):
                    body = self.render_markup(node.children)
                return f"{{#each {iterable} as {alias}}}{body}{{/each}}"
            case ForNode():
                with self.scope(node.variable):
                    body = self.render_markup(node.children)
                return f"{{#each {self.for_range(node)} as {node.variable}}}{body}{{/each}}"
            case WhileNode():
                condition = self.markup_expression(node.condition, node.line)
                return f"{{#if {condition}}}{self.render_markup(node.children)}{{/if}}"
        raise TypeError(f"Bloco de controle desconhecido: {node.type}")

    def _conditional(self, node: ConditionalNode) -> str:
        rendered: List[str] = []
        for index, (condition, children) in enumerate(node.branches()):
            marker = "#if" if index == 0 else ":else if"
            expression = self.markup_expression(condition, node.line)
            rendered.append(f"{{{marker} {expression}}}{self.render_markup(children)}")
        final = node.final_else()
        if final is not None:
            rendered.append("{:else}" + self.render_markup(final))
        rendered.append("{/if}")
        return "".join(rendered)

    # ===== MODULO =====

    def emit_component_shell(self, parts: ComponentParts) -> str:
        blocks: List[str] = []
        exports = self.named_exports()
        if exports:
            blocks.append('<script context="module">\n' + self.indent("\n".join(exports)) + "\n</script>")

        header = self.user_imports()
        signal = self.signal_import()
        if signal:
            header.insert(0, signal)
        sections = ["\n".join(header), "\n".join(parts.state), "\n\n".join(parts.functions)]
        script = "\n\n".join(section for section in sections if section)
        blocks.append(f"<script>\n{self.indent(script)}\n</script>" if script else "<script></script>")

        markup = self.tidy(parts.markup)
        if markup:
            blocks.append(markup)
        return "\n\n".join(blocks) + "\n"

    def emit_error_component(self, message: str, filename: str) -> str:
        text = js_string(self.error_text(message, filename))
        return (
            "<script>\n"
            f"{self.unit}const message = {text};\n"
            "</script>\n\n"
            '<div class="mtm-error" role="alert">{message}</div>\n'
        )
