"""
vue.py - Estrategia de geracao para Vue 3 (Single File Component)

Proposito:
    Emitir um SFC com <template> e <script setup>: estado em ref(),
    derivados em computed() e diretivas v-if/v-for/@evento no template.

Componentes principais:
    - VueStrategy: implementacao de CodeGenStrategy para Vue
    - attribute_value: escape de expressoes dentro de atributos

Dependencias criticas:
    - mtmc.codegen.base: contrato e utilitarios compartilhados

Exemplo de uso:
    strategy = VueStrategy(parsed, TransformOptions(), Diagnostics())
    strategy.emit_variable(parsed.variables["count"])  # "const count = ref(0);"

Notas de implementacao:
    - No script, refs e computeds sao lidos com .value; no template, pelo nome.
    - Exports nomeados vao para um <script> comum ao lado do <script setup>.
    - Blocos de controle usam <template v-...> para nao introduzir elementos.
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


def attribute_value(expression: str) -> str:
    """Escapa uma expressao para uso entre aspas duplas em um atributo."""
    return expression.replace('"', "&quot;")


class VueStrategy(CodeGenStrategy):
    target = Target.VUE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._apis: List[str] = []

    def _use(self, api: str) -> None:
        if api not in self._apis:
            self._apis.append(api)

    # ===== ESTADO =====

    def read_reference(self, name: str) -> str:
        variable = self.variable(name)
        if variable is not None and (variable.is_mutable or variable.computed):
            return f"{name}.value"
        return name

    def mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        if not variable.is_signal:
            return None
        current = f"{variable.name}.value"
        return f"{self.setter_name(variable.name)}({self.updated_value(current, operator, operand)})"

    def markup_mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        if not variable.is_signal:
            return None
        return f"{self.setter_name(variable.name)}({self.updated_value(variable.name, operator, operand)})"

    def emit_variable(self, variable: Variable) -> str:
        name = variable.name
        if variable.is_signal:
            self._use("ref")
            return "\n".join(
                [
                    self.signal_source(variable),
                    f"const {name} = ref({self.shared_name(name)});",
                    self.signal_subscription(variable, f"{name}.value = value;"),
                ]
            )
        if variable.computed:
            self._use("computed")
            return f"const {name} = computed(() => {self.literal(variable)});"
        if variable.reactive:
            self._use("ref")
            return f"const {name} = ref({self.literal(variable)});"
        return f"const {name} = {self.literal(variable)};"

    def emit_function(self, function: FunctionNode) -> str:
        head = f"{'async ' if function.is_async else ''}({self.params(function)}) =>"
        body = self.function_body(function)
        if function.is_expression_body:
            return f"const {function.name} = {head} {body};"
        return f"const {function.name} = {head} {self.block(body)};"

    # ===== MARKUP =====

    def emit_binding(self, binding: Binding) -> str:
        return "{{ " + self.markup_expression(binding.expression, binding.line) + " }}"

    def emit_attribute(self, attribute: AttributeNode) -> str:
        expression = self.markup_expression(attribute.expression, attribute.line)
        return f':{attribute.name}="{attribute_value(expression)}"'

    def emit_event(self, event: Event) -> str:
        return f'@{event.type}="{attribute_value(self.event_handler(event))}"'

    def emit_control_flow(self, node: ControlFlowNode) -> str:
        match node:
            case ConditionalNode():
                return self._conditional(node)
            case LoopNode():
                iterable = self.markup_expression(node.iterable, node.line)
                alias = f"({node.item_name}, {node.index_name})" if node.index_name else node.item_name
                with self.scope(node.item_name, node.index_name):
                    body = self.render_markup(node.children)
                source = f"{alias} in {iterable}"
                return f'<template v-for="{attribute_value(source)}">{body}</template>'
            case ForNode():
                with self.scope(node.variable):
                    body = self.render_markup(node.children)
                source = f"{node.variable} in {self.for_range(node)}"
                return f'<template v-for="{attribute_value(source)}">{body}</template>'
            case WhileNode():
                condition = self.markup_expression(node.condition, node.line)
                return f'<template v-if="{attribute_value(condition)}">{self.render_markup(node.children)}</template>'
        raise TypeError(f"Bloco de controle desconhecido: {node.type}")

    def _conditional(self, node: ConditionalNode) -> str:
        rendered: List[str] = []
        for index, (condition, children) in enumerate(node.branches()):
            directive = "v-if" if index == 0 else "v-else-if"
            expression = attribute_value(self.markup_expression(condition, node.line))
            rendered.append(f'<template {directive}="{expression}">{self.render_markup(children)}</template>')
        final = node.final_else()
        if final is not None:
            rendered.append(f"<template v-else>{self.render_markup(final)}</template>")
        return "".join(rendered)

    # ===== MODULO =====

    def emit_component_shell(self, parts: ComponentParts) -> str:
        markup = self.tidy(parts.markup)
        blocks = [f"<template>\n{self.indent(markup)}\n</template>" if markup else "<template></template>"]

        exports = self.named_exports()
        if exports:
            blocks.append("<script>\n" + "\n".join(exports) + "\n</script>")

        setup: List[str] = []
        vue_names = list(self._apis)
        for imp in self.parsed.imports:
            if imp.source != "vue":
                continue
            for spec in imp.named_imports:
                if spec.to_source() not in vue_names:
                    vue_names.append(spec.to_source())
        if vue_names:
            setup.append(f"import {{ {', '.join(vue_names)} }} from 'vue';")
        signal = self.signal_import()
        if signal:
            setup.append(signal)
        setup.extend(self.user_imports("vue"))
        sections = [
            "\n".join(setup),
            f"defineOptions({{ name: {js_string(parts.name)} }});",
            "\n".join(parts.state),
            "\n\n".join(parts.functions),
        ]
        script = "\n\n".join(section for section in sections if section)
        blocks.append(f"<script setup>\n{script}\n</script>")
        return "\n\n".join(blocks) + "\n"

    def emit_error_component(self, message: str, filename: str) -> str:
        text = js_string(self.error_text(message, filename))
        return (
            '<template>\n'
            f'{self.unit}<div class="mtm-error" role="alert">{{{{ message }}}}</div>\n'
            "</template>\n\n"
            "<script setup>\n"
            f"defineOptions({{ name: {js_string(self.component_name())} }});\n\n"
            f"const message = {text};\n"
            "</script>\n"
        )
