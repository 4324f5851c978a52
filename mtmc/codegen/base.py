"""
base.py - Interface comum das estrategias de geracao de codigo

Proposito:
    Definir CodeGenStrategy, o contrato que cada framework alvo implementa,
    e os utilitarios compartilhados: resolucao de simbolos, reescrita de
    expressoes, imports/exports do usuario e diagnosticos de geracao.

Componentes principais:
    - Target: enum fechado de frameworks alvo (com aliases)
    - TransformOptions: configuracao explicita por chamada
    - ComponentParts: pecas montadas pelo driver antes do shell final
    - CodeGenStrategy: classe abstrata com uma operacao por categoria

Dependencias criticas:
    - mtmc.codegen.expressions: reescrita de $nome e de mutacoes
    - mtmc.ast: ParseResult, nos e diagnosticos

Exemplo de uso:
    strategy = ReactStrategy(parsed, TransformOptions(), Diagnostics())
    code = strategy.emit_component_shell(parts)

Notas de implementacao:
    - Estrategias sao funcoes puras de (ParseResult, opcoes); a unica
      saida lateral sao avisos adicionados ao coletor de diagnosticos.
    - Nomes de escopo de loop ({#each ... as item}) nao geram aviso de
      variavel nao declarada.
"""

from __future__ import annotations

import re
import textwrap
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import PurePath
from typing import ClassVar, Iterable, Iterator, List, Optional, Set, Tuple

from mtmc.ast.nodes import (
    AttributeNode,
    Binding,
    ControlFlowNode,
    Event,
    ExpressionLiteral,
    ForNode,
    FunctionNode,
    ImportKind,
    ImportNode,
    MarkupNode,
    TextNode,
    Variable,
    WhileNode,
    js_string,
)
from mtmc.ast.results import Diagnostics, ParseResult, SemanticWarning
from mtmc.codegen.expressions import binary_operator, rewrite_code
from mtmc.error_handler import MtmErrorHandler
from mtmc.parser.scanner import referenced_names
from mtmc.parser.template import EVENT_ATTRIBUTES

DEFAULT_SIGNAL_MODULE = "../shared/ultra-modern-signal.js"
TARGET_ALIASES = {"javascript": "vanilla", "js": "vanilla"}
BARE_REFERENCE = re.compile(r"\$([A-Za-z_][\w$]*)")
SIMPLE_OPERAND = re.compile(r"[\w$.]+")
CALLABLE_EXPRESSION = re.compile(r"(async\s+)?(function\b|\([^()]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)")


class Target(str, Enum):
    REACT = "react"
    VUE = "vue"
    SVELTE = "svelte"
    VANILLA = "vanilla"

    @classmethod
    def lookup(cls, value: object) -> Optional["Target"]:
        """Resolve o alvo sem diferenciar maiusculas; None se desconhecido."""
        if isinstance(value, Target):
            return value
        key = str(value or "").strip().lower()
        key = TARGET_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


@dataclass(frozen=True)
class TransformOptions:
    filename: str = "<component>"
    component_name: Optional[str] = None
    signal_module: str = DEFAULT_SIGNAL_MODULE
    strict: bool = False
    indent: int = 2


@dataclass
class ComponentParts:
    name: str
    state: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    markup: str = ""


def group(operand: str) -> str:
    """Envolve o operando em parenteses quando nao e um termo simples."""
    return operand if SIMPLE_OPERAND.fullmatch(operand) else f"({operand})"


def is_callable_expression(text: str) -> bool:
    """Expressao que ja e uma funcao (arrow ou function)."""
    return CALLABLE_EXPRESSION.match(text.strip()) is not None


def pascal_case(text: str) -> str:
    parts = [part for part in re.split(r"[^A-Za-z0-9]+", text) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


class CodeGenStrategy(ABC):
    """
    Estrategia de geracao para um framework alvo.

    Uma instancia atende a uma unica chamada de transform(); o estado
    acumulado (avisos, escopos de loop, hooks usados) nao e compartilhado.
    """

    target: ClassVar[Target]

    def __init__(self, parsed: ParseResult, options: TransformOptions, diagnostics: Diagnostics):
        self.parsed = parsed
        self.options = options
        self.diagnostics = diagnostics
        self.handler = MtmErrorHandler()
        self.unit = " " * max(options.indent, 0)
        self._scopes: List[Set[str]] = []

    # ===== SIMBOLOS =====

    def variable(self, name: str) -> Optional[Variable]:
        return self.parsed.variables.get(name)

    def is_function(self, name: str) -> bool:
        return name in self.parsed.functions

    def is_declared(self, name: str) -> bool:
        return name in self.parsed.variables or name in self.parsed.functions

    def has_signals(self) -> bool:
        return any(var.is_signal for var in self.parsed.variables.values())

    def setter_name(self, name: str) -> str:
        return "set" + name[:1].upper() + name[1:]

    def shared_name(self, name: str) -> str:
        return f"{name}Shared"

    def in_scope(self, name: str) -> bool:
        return any(name in scope for scope in self._scopes)

    @contextmanager
    def scope(self, *names: Optional[str]) -> Iterator[None]:
        """Escopo de nomes locais de loop durante a renderizacao dos filhos."""
        self._scopes.append({name for name in names if name})
        try:
            yield
        finally:
            self._scopes.pop()

    def dependencies(self, text: str, exclude: Iterable[str] = ()) -> List[str]:
        """Nomes declarados referenciados em text, na ordem de aparicao."""
        skip = set(exclude)
        return [name for name in referenced_names(text) if self.is_declared(name) and name not in skip]

    def component_name(self) -> str:
        export = self.parsed.default_export()
        if export is not None and export.name:
            return export.name
        if self.options.component_name:
            return self.options.component_name
        stem = pascal_case(PurePath(self.options.filename).stem)
        if stem and stem[0].isalpha():
            return stem
        return "Component"

    # ===== EXPRESSOES =====

    def read_reference(self, name: str) -> str:
        """Forma de leitura de $nome no script do alvo."""
        return name

    def markup_reference(self, name: str) -> str:
        """Forma de leitura de $nome no markup do alvo."""
        return name

    def mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        """Codigo de atualizacao de uma variavel de estado; None mantem a escrita nativa."""
        return None

    def markup_mutation(self, variable: Variable, operator: str, operand: Optional[str]) -> Optional[str]:
        return self.mutation(variable, operator, operand)

    def _script_mutate(self, name: str, operator: str, operand: Optional[str], line: Optional[int]) -> Optional[str]:
        variable = self.variable(name)
        if variable is None:
            return None
        if not variable.is_mutable:
            self.warn_constant_write(variable, line)
            return None
        return self.mutation(variable, operator, operand)

    def _markup_mutate(self, name: str, operator: str, operand: Optional[str], line: Optional[int]) -> Optional[str]:
        variable = self.variable(name)
        if variable is None or self.in_scope(name):
            return None
        if not variable.is_mutable:
            self.warn_constant_write(variable, line)
            return None
        return self.markup_mutation(variable, operator, operand)

    def updated_value(self, current: str, operator: str, operand: Optional[str]) -> str:
        """Novo valor de uma variavel apos a mutacao ('++', '=', '+=', ...)."""
        match operator:
            case "++" | "++pre":
                return f"{current} + 1"
            case "--" | "--pre":
                return f"{current} - 1"
            case "=":
                return operand or "undefined"
            case _:
                return f"{current} {binary_operator(operator)} {group(operand or 'undefined')}"

    def script_expression(self, text: str, line: Optional[int] = None) -> str:
        return rewrite_code(text, self.read_reference, partial(self._script_mutate, line=line))

    def markup_expression(self, text: str, line: Optional[int] = None, mutations: bool = False) -> str:
        self.check_references(text, line)
        mutate = partial(self._markup_mutate, line=line) if mutations else None
        return rewrite_code(text, self._scoped_markup_reference, mutate)

    def _scoped_markup_reference(self, name: str) -> str:
        if self.in_scope(name):
            return name
        return self.markup_reference(name)

    def check_references(self, text: str, line: Optional[int]) -> None:
        for name in referenced_names(text):
            if self.is_declared(name) or self.in_scope(name):
                continue
            close = self.handler.suggest_name(name, self.parsed.declared_names())
            self.warn(
                f"Variavel '${name}' nao declarada no script",
                line,
                f"Voce quis dizer '${close}'?" if close else f"Declare `${name} = valor` no script",
            )

    def literal(self, variable: Variable) -> str:
        if isinstance(variable.value, ExpressionLiteral):
            return self.script_expression(variable.value.value, variable.line)
        return variable.value.to_js()

    def params(self, function: FunctionNode) -> str:
        rendered: List[str] = []
        for param in function.params:
            text = param.js_name
            if param.default is not None:
                text += f" = {self.script_expression(param.default)}"
            rendered.append(text)
        return ", ".join(rendered)

    def function_body(self, function: FunctionNode) -> str:
        return self.script_expression(function.body, function.line)

    def event_handler(self, event: Event) -> str:
        if event.is_function and event.function_name:
            return self.read_function(event.function_name)
        reference = BARE_REFERENCE.fullmatch(event.handler)
        if reference is not None and not self.in_scope(reference.group(1)):
            self.warn(
                f"Handler '{event.handler}' do evento {event.type} nao e uma funcao declarada",
                event.line,
                f"Declare `{event.handler} = () => {{ ... }}` no script",
            )
        return self.markup_expression(event.handler, event.line, mutations=True)

    def read_function(self, name: str) -> str:
        return name

    def callable_handler(self, event: Event) -> str:
        """Handler como funcao: expressoes inline sao envolvidas em arrow."""
        handler = self.event_handler(event)
        bare = BARE_REFERENCE.fullmatch(event.handler) is not None
        if event.is_function or bare or is_callable_expression(handler):
            return handler
        return f"() => {handler}"

    # ===== CATEGORIAS =====

    @abstractmethod
    def emit_variable(self, variable: Variable) -> str:
        ...

    @abstractmethod
    def emit_function(self, function: FunctionNode) -> str:
        ...

    @abstractmethod
    def emit_binding(self, binding: Binding) -> str:
        ...

    @abstractmethod
    def emit_event(self, event: Event) -> str:
        ...

    @abstractmethod
    def emit_attribute(self, attribute: AttributeNode) -> str:
        ...

    @abstractmethod
    def emit_control_flow(self, node: ControlFlowNode) -> str:
        ...

    @abstractmethod
    def emit_component_shell(self, parts: ComponentParts) -> str:
        ...

    @abstractmethod
    def emit_error_component(self, message: str, filename: str) -> str:
        ...

    def emit_text(self, node: TextNode) -> str:
        return node.text

    def emit_node(self, node: MarkupNode) -> str:
        if isinstance(node, TextNode):
            return self.emit_text(node)
        if isinstance(node, Binding):
            return self.emit_binding(node)
        if isinstance(node, Event):
            return self.emit_event(node)
        if isinstance(node, AttributeNode):
            self.check_attribute_name(node)
            return self.emit_attribute(node)
        if isinstance(node, ControlFlowNode):
            if isinstance(node, WhileNode):
                self.warn_while(node)
            return self.emit_control_flow(node)
        raise TypeError(f"No de template desconhecido: {type(node).__name__}")

    def render_markup(self, nodes: Iterable[MarkupNode]) -> str:
        return "".join(self.emit_node(node) for node in nodes)

    # ===== UTILITARIOS =====

    def warn(self, message: str, line: Optional[int] = None, suggestion: Optional[str] = None) -> None:
        self.diagnostics.add(SemanticWarning(message, line=line, suggestion=suggestion))

    def warn_while(self, node: WhileNode) -> None:
        # Nenhum alvo tem laco declarativo: cada gerador emite o corpo uma
        # unica vez sob a condicao (um guarda), e o aviso torna isso visivel.
        self.warn(
            f"{{#while {node.condition}}} nao tem equivalente declarativo em {self.target.value}; "
            "o corpo e renderizado uma vez enquanto a condicao for verdadeira",
            node.line,
            "Prefira {#each} sobre uma lista ou {#if} explicito",
        )

    def warn_constant_write(self, variable: Variable, line: Optional[int]) -> None:
        self.warn(
            f"Atribuicao a '${variable.name}', que nao e reativa; o alvo a declara como constante",
            line,
            f"Declare `${variable.name}! = ...` para que o valor possa mudar",
        )

    def check_attribute_name(self, attribute: AttributeNode) -> None:
        reference = BARE_REFERENCE.fullmatch(attribute.expression)
        if reference is None or not self.is_function(reference.group(1)):
            return
        event = self.handler.suggest_event_name(attribute.name, EVENT_ATTRIBUTES)
        if event is not None:
            self.warn(
                f"Atributo '{attribute.name}' recebe a funcao {attribute.expression}; voce quis dizer o evento '{event}'?",
                attribute.line,
                f"Use `{event}={{{attribute.expression}}}`",
            )

    def indent(self, text: str, levels: int = 1) -> str:
        prefix = self.unit * levels
        return "\n".join(prefix + line if line.strip() else "" for line in text.splitlines())

    def block(self, body: str) -> str:
        if not body.strip():
            return "{}"
        return "{\n" + self.indent(body) + "\n}"

    def tidy(self, markup: str) -> str:
        """Remove a indentacao comum do markup renderizado."""
        return textwrap.dedent(markup).strip()

    def param_names(self, function: FunctionNode) -> List[str]:
        return [param.js_name.lstrip(".") for param in function.params]

    def for_range(self, node: ForNode) -> str:
        return f"Array.from({{ length: {node.count} }}, (_, index) => index + {node.start})"

    def imports_name(self, name: str, source: str) -> bool:
        return any(imp.source == source and name in imp.names() for imp in self.parsed.imports)

    def signal_import(self) -> Optional[str]:
        if not self.has_signals() or self.imports_name("signal", self.options.signal_module):
            return None
        return f"import {{ signal }} from {js_string(self.options.signal_module)};"

    def user_imports(self, framework: Optional[str] = None, bound: Tuple[str, ...] = ()) -> List[str]:
        """
        Imports do usuario, reemitidos como foram escritos.

        Do modulo do framework os especificadores nomeados ja estao no import
        gerado; restam o default (se ainda nao ligado em bound) e o namespace.
        """
        lines: List[str] = []
        for imp in self.parsed.imports:
            if framework is None or imp.source != framework:
                lines.append(f"{imp.raw};" if imp.raw else imp.to_source())
                continue
            if imp.default_import and imp.default_import not in bound:
                lines.append(ImportNode(ImportKind.DEFAULT, imp.source, default_import=imp.default_import).to_source())
            if imp.namespace_import:
                lines.append(
                    ImportNode(ImportKind.NAMESPACE, imp.source, namespace_import=imp.namespace_import).to_source()
                )
        return lines

    def named_exports(self) -> List[str]:
        return [export.to_source() for export in self.parsed.named_exports() if export.to_source()]

    def signal_subscription(self, variable: Variable, assignment: str) -> str:
        key = js_string(variable.value.key)
        return f"signal.on({key}, (value) => {{\n{self.unit}{assignment}\n}});"

    def signal_source(self, variable: Variable) -> str:
        key = js_string(variable.value.key)
        return (
            f"const [{self.shared_name(variable.name)}, {self.setter_name(variable.name)}] = "
            f"signal.use({key}, {variable.value.to_js()});"
        )

    def error_text(self, message: str, filename: str) -> str:
        return f"Erro de transformacao MTM em {filename}: {message}"
