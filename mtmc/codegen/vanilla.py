"""
vanilla.py - Estrategia de geracao para JavaScript puro (DOM)

Proposito:
    Emitir uma funcao fabrica que cria o elemento raiz, guarda o estado em
    variaveis de closure e re-renderiza o markup quando o estado muda.

Componentes principais:
    - VanillaStrategy: implementacao de CodeGenStrategy sem framework
    - RUNTIME_HELPERS: assinantes, notificacao, escape de HTML e listeners

Dependencias criticas:
    - mtmc.codegen.base: contrato e utilitarios compartilhados

Exemplo de uso:
    strategy = VanillaStrategy(parsed, TransformOptions(), Diagnostics())
    strategy.emit_function(parsed.functions["increment"])
    # "const increment = () => {\\n  update('count', count++);\\n};"

Notas de implementacao:
    - O markup vira uma funcao render() que concatena template literals;
      blocos de controle viram if/for explicitos.
    - Bindings simples de estado sao envolvidos em <span data-mtm-bind> e
      atualizados via textContent; demais dependencias re-executam render().
    - Eventos sao registrados em listeners durante o render e ligados com
      addEventListener depois de innerHTML.
"""

from __future__ import annotations

from typing import List, Optional, Set

from mtmc.ast.nodes import (
    AttributeNode,
    Binding,
    ConditionalNode,
    ControlFlowNode,
    Event,
    ForNode,
    FunctionNode,
    LoopNode,
    MarkupNode,
    TextNode,
    Variable,
    WhileNode,
    js_string,
)
from mtmc.codegen.base import CodeGenStrategy, ComponentParts, Target
from mtmc.parser.scanner import referenced_names

RUNTIME_HELPERS = """\
const element = document.createElement('div');
element.className = 'mtm-component';
const subscribers = new Map();
const subscribe = (name, callback) => {
  if (!subscribers.has(name)) subscribers.set(name, new Set());
  subscribers.get(name).add(callback);
};
const notify = (name) => {
  (subscribers.get(name) || []).forEach((callback) => callback());
};
const update = (name, value) => {
  notify(name);
  return value;
};
const escapeHtml = (value) => String(value ?? '').replace(/[&<>"']/g, (ch) => (
  { '&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;' }[ch]
));
let listeners = [];
const listen = (type, handler) => listeners.push({ type, handler }) - 1;"""


def template_text(text: str) -> str:
    """Escapa texto literal para dentro de um template literal."""
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class VanillaStrategy(CodeGenStrategy):
    target = Target.VANILLA

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._render_deps: List[str] = []
        self._bound: List[str] = []

    def _track(self, text: str, into: Optional[List[str]] = None) -> None:
        collected = self._render_deps if into is None else into
        for name in referenced_names(text):
            if self.in_scope(name) or name in collected:
                continue
            variable = self.variable(name)
            if variable is not None and (variable.is_mutable or variable.computed):
                collected.append(name)

    # ===== ESTADO =====

    def read_reference(self, name: str) -> str:
        variable = self.variable(name)
        if variable is not None and variable.computed:
            return f"{name}()"
        return name

    def markup_reference(self, name: str) -> str:
        return self.read_reference(name)

    def mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        name = variable.name
        if variable.is_signal:
            return f"{self.setter_name(name)}({self.updated_value(name, operator, operand)})"
        match operator:
            case "++pre" | "--pre":
                expression = f"{operator[:2]}{name}"
            case "++" | "--":
                expression = f"{name}{operator}"
            case _:
                expression = f"{name} {operator} {operand}"
        return f"update({js_string(name)}, {expression})"

    def emit_variable(self, variable: Variable) -> str:
        name = variable.name
        if variable.is_signal:
            return "\n".join(
                [
                    self.signal_source(variable),
                    f"let {name} = {self.shared_name(name)};",
                    self.signal_subscription(variable, f"{name} = value;\n{self.unit}notify({js_string(name)});"),
                ]
            )
        if variable.computed:
            return f"const {name} = () => {self.literal(variable)};"
        if variable.reactive:
            return f"let {name} = {self.literal(variable)};"
        return f"const {name} = {self.literal(variable)};"

    def emit_function(self, function: FunctionNode) -> str:
        head = f"{'async ' if function.is_async else ''}({self.params(function)}) =>"
        body = self.function_body(function)
        if function.is_expression_body:
            return f"const {function.name} = {head} {body};"
        return f"const {function.name} = {head} {self.block(body)};"

    # ===== MARKUP =====

    def render_markup(self, nodes: List[MarkupNode]) -> str:
        """Sequencia de instrucoes que acrescentam o markup em `html`."""
        statements: List[str] = []
        buffer: List[str] = []

        def flush() -> None:
            literal = "".join(buffer)
            buffer.clear()
            if literal.strip():
                statements.append(f"html += `{literal}`;")

        for node in nodes:
            if isinstance(node, ControlFlowNode):
                flush()
            rendered = self.emit_node(node)
            if isinstance(node, ControlFlowNode):
                statements.append(rendered)
            else:
                buffer.append(rendered)
        flush()
        return "\n".join(statements)

    def emit_text(self, node: TextNode) -> str:
        return template_text(node.text)

    def emit_binding(self, binding: Binding) -> str:
        expression = self.markup_expression(binding.expression, binding.line)
        name = binding.variable_name
        variable = self.variable(name) if binding.is_variable and name else None
        if variable is not None and (variable.is_mutable or variable.computed) and not self.in_scope(name):
            if name not in self._bound:
                self._bound.append(name)
            return f'<span data-mtm-bind="{name}">${{escapeHtml({expression})}}</span>'
        self._track(binding.expression)
        return f"${{escapeHtml({expression})}}"

    def emit_attribute(self, attribute: AttributeNode) -> str:
        self._track(attribute.expression)
        expression = self.markup_expression(attribute.expression, attribute.line)
        return f'{attribute.name}="${{escapeHtml({expression})}}"'

    def emit_event(self, event: Event) -> str:
        handler = self.callable_handler(event)
        return f'data-mtm-on-{event.type}="${{listen({js_string(event.type)}, {handler})}}"'

    def emit_control_flow(self, node: ControlFlowNode) -> str:
        match node:
            case ConditionalNode():
                return self._conditional(node)
            case LoopNode():
                self._track(node.iterable)
                iterable = self.markup_expression(node.iterable, node.line)
                with self.scope(node.item_name, node.index_name):
                    body = self.render_markup(node.children)
                if node.index_name:
                    return f"{iterable}.forEach(({node.item_name}, {node.index_name}) => {self.block(body)});"
                return f"for (const {node.item_name} of {iterable}) {self.block(body)}"
            case ForNode():
                with self.scope(node.variable):
                    body = self.render_markup(node.children)
                var = node.variable
                return f"for (let {var} = {node.start}; {var} <= {node.end}; {var}++) {self.block(body)}"
            case WhileNode():
                self._track(node.condition)
                condition = self.markup_expression(node.condition, node.line)
                return f"if ({condition}) {self.block(self.render_markup(node.children))}"
        raise TypeError(f"Bloco de controle desconhecido: {node.type}")

    def _conditional(self, node: ConditionalNode) -> str:
        rendered: List[str] = []
        for index, (condition, children) in enumerate(node.branches()):
            self._track(condition)
            keyword = "if" if index == 0 else "else if"
            expression = self.markup_expression(condition, node.line)
            rendered.append(f"{keyword} ({expression}) {self.block(self.render_markup(children))}")
        final = node.final_else()
        if final is not None:
            rendered.append(f"else {self.block(self.render_markup(final))}")
        return " ".join(rendered)

    # ===== MODULO =====

    def _subscriptions(self) -> List[str]:
        lines: List[str] = []
        for variable in self.parsed.variables.values():
            if not variable.computed:
                continue
            sources: List[str] = []
            self._track(variable.value.to_js(), into=sources)
            for source in sources:
                if source != variable.name:
                    lines.append(f"subscribe({js_string(source)}, () => notify({js_string(variable.name)}));")
        rerender: Set[str] = set(self._render_deps)
        for name in self._render_deps:
            lines.append(f"subscribe({js_string(name)}, render);")
        for name in self._bound:
            if name in rerender:
                continue
            selector = js_string(f'[data-mtm-bind="{name}"]')
            lines.append(
                f"subscribe({js_string(name)}, () => {{\n"
                f"{self.unit}element.querySelectorAll({selector}).forEach((node) => {{\n"
                f"{self.unit * 2}node.textContent = {self.read_reference(name)};\n"
                f"{self.unit}}});\n"
                "});"
            )
        return lines

    def _render_function(self, markup: str) -> str:
        attach = (
            "listeners.forEach(({ type, handler }, index) => {\n"
            f"{self.unit}const node = element.querySelector(`[data-mtm-on-${{type}}=\"${{index}}\"]`);\n"
            f"{self.unit}if (node) node.addEventListener(type, handler);\n"
            "});"
        )
        body = "\n".join(["listeners = [];", "let html = '';", markup, "element.innerHTML = html;", attach])
        return f"const render = () => {self.block(body)};"

    def emit_component_shell(self, parts: ComponentParts) -> str:
        header: List[str] = []
        signal = self.signal_import()
        if signal:
            header.append(signal)
        header.extend(self.user_imports())
        exports = self.named_exports()
        if exports:
            if header:
                header.append("")
            header.extend(exports)

        sections = [
            RUNTIME_HELPERS,
            "\n".join(parts.state),
            "\n\n".join(parts.functions),
            self._render_function(parts.markup),
            "\n".join(self._subscriptions()),
            "render();\nreturn element;",
        ]
        body = self.indent("\n\n".join(section for section in sections if section))
        component = f"export default function {parts.name}(props = {{}}) {{\n{body}\n}}\n"
        if header:
            return "\n".join(header) + "\n\n" + component
        return component

    def emit_error_component(self, message: str, filename: str) -> str:
        text = js_string(self.error_text(message, filename))
        lines = [
            "const element = document.createElement('div');",
            "element.className = 'mtm-error';",
            "element.setAttribute('role', 'alert');",
            f"element.textContent = {text};",
            "return element;",
        ]
        body = self.indent("\n".join(lines))
        return f"export default function {self.component_name()}(props = {{}}) {{\n{body}\n}}\n"
