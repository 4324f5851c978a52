"""
react.py - Estrategia de geracao para React (function components + hooks)

Proposito:
    Emitir um modulo ES com um function component: estado em useState,
    derivados em useMemo, funcoes em useCallback e o template em JSX.

Componentes principais:
    - ReactStrategy: implementacao de CodeGenStrategy para React
    - REACT_EVENT_NAMES: nomes de evento DOM -> props onX do React
    - style_object: converte style="a: b" em objeto JSX

Dependencias criticas:
    - mtmc.codegen.base: contrato e utilitarios compartilhados

Exemplo de uso:
    strategy = ReactStrategy(parsed, TransformOptions(), Diagnostics())
    strategy.emit_variable(parsed.variables["count"])
    # "const [count, setCount] = useState(0);"

Notas de implementacao:
    - Mutacoes viram chamadas de setter: $count++ -> setCount(prev => prev + 1).
    - Signals usam o setter compartilhado; o estado local e atualizado pela
      inscricao em signal.on dentro de um useEffect.
    - Loops cujo corpo nao e um unico elemento com key na tag de abertura
      sao envolvidos em React.Fragment com key igual ao indice.
"""

from __future__ import annotations

import re
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

REACT_HOOKS = ("useState", "useEffect", "useMemo", "useCallback")

REACT_EVENT_NAMES = {
    "click": "onClick",
    "dblclick": "onDoubleClick",
    "mousedown": "onMouseDown",
    "mouseup": "onMouseUp",
    "mouseover": "onMouseOver",
    "mouseout": "onMouseOut",
    "mousemove": "onMouseMove",
    "mouseenter": "onMouseEnter",
    "mouseleave": "onMouseLeave",
    "contextmenu": "onContextMenu",
    "keydown": "onKeyDown",
    "keyup": "onKeyUp",
    "keypress": "onKeyPress",
    "focus": "onFocus",
    "blur": "onBlur",
    "change": "onChange",
    "input": "onInput",
    "submit": "onSubmit",
    "reset": "onReset",
    "load": "onLoad",
    "scroll": "onScroll",
    "touchstart": "onTouchStart",
    "touchend": "onTouchEnd",
    "touchmove": "onTouchMove",
    "touchcancel": "onTouchCancel",
}

ATTRIBUTE_RENAMES = {"class": "className", "for": "htmlFor", "tabindex": "tabIndex", "readonly": "readOnly"}

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

TAG_ATTRIBUTE = re.compile(r"(\s)(class|for|tabindex|readonly)(\s*=)")
STYLE_ATTRIBUTE = re.compile(r"(\s)style\s*=\s*([\"'])(.*?)\2", re.DOTALL)
HTML_COMMENT = re.compile(r"<!--(.*?)-->", re.DOTALL)
KEY_ATTRIBUTE = re.compile(r"\skey\s*=")


def style_object(declarations: str) -> str:
    """'color: red; font-size: 12px' -> "{{ color: 'red', fontSize: '12px' }}"."""
    entries: List[str] = []
    for declaration in declarations.split(";"):
        if ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip()
        if prop.startswith("--"):
            key = js_string(prop)
        else:
            key = re.sub(r"-([a-z])", lambda m: m.group(1).upper(), prop)
        entries.append(f"{key}: {js_string(value.strip())}")
    if not entries:
        return "{{}}"
    return "{{ " + ", ".join(entries) + " }}"


def event_prop(event_type: str) -> str:
    return REACT_EVENT_NAMES.get(event_type, "on" + event_type[:1].upper() + event_type[1:])


class ReactStrategy(CodeGenStrategy):
    target = Target.REACT

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._hooks: Set[str] = set()

    # ===== ESTADO =====

    def mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        setter = self.setter_name(variable.name)
        if variable.is_signal:
            return f"{setter}({self.updated_value(variable.name, operator, operand)})"
        if operator == "=":
            return f"{setter}({operand})"
        return f"{setter}(prev => {self.updated_value('prev', operator, operand)})"

    def emit_variable(self, variable: Variable) -> str:
        name = variable.name
        setter = self.setter_name(name)
        if variable.is_signal:
            self._hooks.update(("useState", "useEffect"))
            key = js_string(variable.value.key)
            return "\n".join(
                [
                    self.signal_source(variable),
                    f"const [{name}, {setter}Local] = useState({self.shared_name(name)});",
                    f"useEffect(() => signal.on({key}, {setter}Local), []);",
                ]
            )
        if variable.computed:
            self._hooks.add("useMemo")
            deps = ", ".join(self.dependencies(variable.value.value, exclude=(name,)))
            return f"const {name} = useMemo(() => {self.literal(variable)}, [{deps}]);"
        if variable.reactive:
            self._hooks.add("useState")
            return f"const [{name}, {setter}] = useState({self.literal(variable)});"
        return f"const {name} = {self.literal(variable)};"

    def emit_function(self, function: FunctionNode) -> str:
        self._hooks.add("useCallback")
        exclude = [function.name, *self.param_names(function)]
        deps = ", ".join(self.dependencies(function.body, exclude=exclude))
        head = f"{'async ' if function.is_async else ''}({self.params(function)}) =>"
        body = self.function_body(function)
        if function.is_expression_body:
            return f"const {function.name} = useCallback({head} {body}, [{deps}]);"
        return f"const {function.name} = useCallback({head} {self.block(body)}, [{deps}]);"

    # ===== MARKUP =====

    def emit_text(self, node: TextNode) -> str:
        text = node.text
        if not node.in_tag:
            return HTML_COMMENT.sub(lambda m: "{/*" + m.group(1) + "*/}", text)
        text = TAG_ATTRIBUTE.sub(lambda m: m.group(1) + ATTRIBUTE_RENAMES[m.group(2)] + m.group(3), text)
        text = STYLE_ATTRIBUTE.sub(lambda m: f"{m.group(1)}style={style_object(m.group(3))}", text)
        stripped = text.rstrip()
        if (
            node.tag_name in VOID_ELEMENTS
            and stripped.endswith(">")
            and not stripped.endswith("/>")
            and not text.lstrip().startswith("</")
        ):
            text = stripped[:-1].rstrip() + " />" + text[len(stripped):]
        return text

    def emit_binding(self, binding: Binding) -> str:
        return "{" + self.markup_expression(binding.expression, binding.line) + "}"

    def emit_attribute(self, attribute: AttributeNode) -> str:
        name = ATTRIBUTE_RENAMES.get(attribute.name, attribute.name)
        return f"{name}={{{self.markup_expression(attribute.expression, attribute.line)}}}"

    def emit_event(self, event: Event) -> str:
        handler = self.callable_handler(event)
        return f"{event_prop(event.type)}={{{handler}}}"

    def emit_control_flow(self, node: ControlFlowNode) -> str:
        match node:
            case ConditionalNode():
                return self._conditional(node)
            case LoopNode():
                return self._loop(node)
            case ForNode():
                return self._for(node)
            case WhileNode():
                condition = self.markup_expression(node.condition, node.line)
                return f"{{{condition} && {self._fragment(node.children)}}}"
        raise TypeError(f"Bloco de controle desconhecido: {node.type}")

    def _fragment(self, children: List[MarkupNode]) -> str:
        return f"(<>{self.render_markup(children)}</>)"

    def _conditional(self, node: ConditionalNode) -> str:
        branches = node.branches()
        final = node.final_else()
        if len(branches) == 1 and final is None:
            condition = self.markup_expression(node.condition, node.line)
            return f"{{{condition} && {self._fragment(node.children)}}}"
        expression = self._fragment(final) if final is not None else "null"
        for condition, children in reversed(branches):
            expression = f"{self.markup_expression(condition, node.line)} ? {self._fragment(children)} : {expression}"
        return "{" + expression + "}"

    def _loop(self, node: LoopNode) -> str:
        iterable = self.markup_expression(node.iterable, node.line)
        with self.scope(node.item_name, node.index_name):
            body = self.render_markup(node.children)
        if self._keyed_root(node.children):
            params = f"({node.item_name}, {node.index_name})" if node.index_name else node.item_name
            return f"{{{iterable}.map({params} => ({body.strip()}))}}"
        index = node.index_name or "index"
        return (
            f"{{{iterable}.map(({node.item_name}, {index}) => "
            f"(<React.Fragment key={{{index}}}>{body}</React.Fragment>))}}"
        )

    def _for(self, node: ForNode) -> str:
        with self.scope(node.variable):
            body = self.render_markup(node.children)
        return (
            f"{{{self.for_range(node)}.map(({node.variable}) => "
            f"(<React.Fragment key={{{node.variable}}}>{body}</React.Fragment>))}}"
        )

    def _keyed_root(self, children: List[MarkupNode]) -> bool:
        """Um unico elemento raiz, com key na propria tag de abertura."""
        roots = 0
        depth = 0
        in_root_tag = False
        keyed = False
        for child in children:
            if isinstance(child, TextNode) and child.in_tag:
                text = child.text.strip()
                if text.startswith("</"):
                    depth -= 1
                    continue
                if text.startswith("<"):
                    if depth == 0:
                        roots += 1
                        in_root_tag = True
                    depth += 1
                if in_root_tag and KEY_ATTRIBUTE.search(" " + child.text):
                    keyed = True
                if text.endswith(">"):
                    in_root_tag = False
                    if text.endswith("/>") or child.tag_name in VOID_ELEMENTS:
                        depth -= 1
                continue
            if depth == 0:
                if isinstance(child, TextNode) and not child.text.strip():
                    continue
                return False
            if in_root_tag and isinstance(child, AttributeNode) and child.name == "key":
                keyed = True
        return roots == 1 and keyed

    # ===== MODULO =====

    def _react_import(self) -> str:
        names = [hook for hook in REACT_HOOKS if hook in self._hooks]
        for imp in self.parsed.imports:
            if imp.source != "react":
                continue
            for spec in imp.named_imports:
                if spec.to_source() not in names:
                    names.append(spec.to_source())
        if not names:
            return "import React from 'react';"
        return f"import React, {{ {', '.join(names)} }} from 'react';"

    def emit_component_shell(self, parts: ComponentParts) -> str:
        header = [self._react_import()]
        signal = self.signal_import()
        if signal:
            header.append(signal)
        header.extend(self.user_imports("react", bound=("React",)))
        exports = self.named_exports()
        if exports:
            header.append("")
            header.extend(exports)

        markup = self.tidy(parts.markup)
        if markup:
            render = "return (\n" + self.indent("<>\n" + self.indent(markup) + "\n</>") + "\n);"
        else:
            render = "return null;"
        sections = ["\n".join(parts.state), "\n\n".join(parts.functions), render]
        body = self.indent("\n\n".join(section for section in sections if section))
        component = f"export default function {parts.name}(props = {{}}) {{\n{body}\n}}"
        return "\n".join(header) + "\n\n" + component + "\n"

    def emit_error_component(self, message: str, filename: str) -> str:
        text = js_string(self.error_text(message, filename))
        return (
            "import React from 'react';\n\n"
            f"export default function {self.component_name()}(props = {{}}) {{\n"
            f"{self.unit}return React.createElement('div', {{ className: 'mtm-error', role: 'alert' }}, {text});\n"
            "}\n"
        )
