"""
nodes.py - Dataclasses da AST de componentes MTM

Proposito:
    Definir os nos produzidos pela analise de um componente MTM.
    Centraliza literais de valor, declaracoes de script e nos do template.

Componentes principais:
    - Literais: StringLiteral, NumberLiteral, BooleanLiteral, NullLiteral,
      ArrayLiteral, ObjectLiteral, SignalLiteral, ExpressionLiteral
    - Script: Variable, Param, FunctionNode, ImportNode, ExportNode
    - Template: TextNode, Binding, AttributeNode, Event
    - Fluxo de controle: ConditionalNode, LoopNode, ForNode, WhileNode

Dependencias criticas:
    - dataclasses: estruturacao dos nos
    - enum: enums de tipo de literal, import, export e fluxo

Exemplo de uso:
    from mtmc.ast.nodes import Variable, NumberLiteral
    var = Variable(name="count", reactive=True, value=NumberLiteral(0))

Notas de implementacao:
    - Todos os nos expoem to_dict() com chaves camelCase para consumidores JS.
    - Literais sabem se serializar como JavaScript via to_js().
    - Conteudos de blocos (if_content, content) sao fatias cruas do template.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union


class LiteralKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"
    SIGNAL = "signal"
    EXPRESSION = "expression"


class ImportKind(Enum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"
    SIDE_EFFECT = "side-effect"


class ExportKind(Enum):
    DEFAULT = "default"
    NAMED = "named"


class FlowKind(Enum):
    CONDITIONAL = "conditional"
    LOOP = "loop"
    FOR = "for"
    WHILE = "while"


def js_string(value: str) -> str:
    """Serializa texto como string JavaScript entre aspas simples."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
        .replace("</", "<\\/")
    )
    return f"'{escaped}'"


# ===== LITERAIS DE VALOR =====


@dataclass(frozen=True)
class ValueLiteral:
    """Classe base da uniao etiquetada de valores iniciais."""

    KIND: ClassVar[LiteralKind] = LiteralKind.EXPRESSION

    @property
    def kind(self) -> LiteralKind:
        return self.KIND

    def inferred_type(self) -> Optional[str]:
        return self.KIND.value

    def to_python(self) -> Any:
        raise NotImplementedError

    def to_js(self) -> str:
        return json.dumps(self.to_python(), ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.KIND.value, "value": self.to_python()}


@dataclass(frozen=True)
class StringLiteral(ValueLiteral):
    value: str
    KIND: ClassVar[LiteralKind] = LiteralKind.STRING

    def to_python(self) -> Any:
        return self.value

    def to_js(self) -> str:
        return js_string(self.value)


@dataclass(frozen=True)
class NumberLiteral(ValueLiteral):
    value: Union[int, float]
    KIND: ClassVar[LiteralKind] = LiteralKind.NUMBER

    def inferred_type(self) -> Optional[str]:
        return "float" if isinstance(self.value, float) else "number"

    def to_python(self) -> Any:
        return self.value

    def to_js(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class BooleanLiteral(ValueLiteral):
    value: bool
    KIND: ClassVar[LiteralKind] = LiteralKind.BOOLEAN

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class NullLiteral(ValueLiteral):
    KIND: ClassVar[LiteralKind] = LiteralKind.NULL

    def to_python(self) -> Any:
        return None


@dataclass(frozen=True)
class ArrayLiteral(ValueLiteral):
    value: List[Any] = field(default_factory=list)
    KIND: ClassVar[LiteralKind] = LiteralKind.ARRAY

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ObjectLiteral(ValueLiteral):
    value: Dict[str, Any] = field(default_factory=dict)
    KIND: ClassVar[LiteralKind] = LiteralKind.OBJECT

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class SignalLiteral(ValueLiteral):
    """Estado compartilhado: signal('chave', valorInicial)."""

    key: str
    initial_value: ValueLiteral = field(default_factory=NullLiteral)
    KIND: ClassVar[LiteralKind] = LiteralKind.SIGNAL

    def inferred_type(self) -> Optional[str]:
        return self.initial_value.inferred_type()

    def to_python(self) -> Any:
        return {"key": self.key, "initialValue": self.initial_value.to_dict()}

    def to_js(self) -> str:
        return self.initial_value.to_js()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.KIND.value,
            "key": self.key,
            "initialValue": self.initial_value.to_dict(),
        }


@dataclass(frozen=True)
class ExpressionLiteral(ValueLiteral):
    """Expressao JavaScript preservada como texto."""

    value: str
    KIND: ClassVar[LiteralKind] = LiteralKind.EXPRESSION

    def inferred_type(self) -> Optional[str]:
        return None

    def to_python(self) -> Any:
        return self.value

    def to_js(self) -> str:
        return self.value


# ===== DECLARACOES DE SCRIPT =====


@dataclass
class Variable:
    name: str
    reactive: bool = False
    computed: bool = False
    has_type_annotation: bool = False
    type: Optional[str] = None
    value: ValueLiteral = field(default_factory=NullLiteral)
    line: Optional[int] = None

    @property
    def is_signal(self) -> bool:
        return isinstance(self.value, SignalLiteral)

    @property
    def is_mutable(self) -> bool:
        """Variaveis cujo valor muda em tempo de execucao (estado ou signal)."""
        return (self.reactive or self.is_signal) and not self.computed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "reactive": self.reactive,
            "computed": self.computed,
            "hasTypeAnnotation": self.has_type_annotation,
            "type": self.type,
            "value": self.value.to_dict(),
            "line": self.line,
        }


@dataclass
class Param:
    name: str
    type: Optional[str] = None
    has_type_annotation: bool = False
    default: Optional[str] = None

    @property
    def js_name(self) -> str:
        """Nome sem o prefixo $ (preservando rest/spread)."""
        if self.name.startswith("...$"):
            return "..." + self.name[4:]
        return self.name[1:] if self.name.startswith("$") else self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "hasTypeAnnotation": self.has_type_annotation,
            "default": self.default,
        }


@dataclass
class FunctionNode:
    name: str
    params: List[Param] = field(default_factory=list)
    body: str = ""
    is_arrow: bool = True
    is_async: bool = False
    is_expression_body: bool = False
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "params": [p.to_dict() for p in self.params],
            "isArrow": self.is_arrow,
            "isAsync": self.is_async,
            "body": self.body,
            "isExpressionBody": self.is_expression_body,
            "line": self.line,
        }


@dataclass(frozen=True)
class ImportSpecifier:
    imported: str
    local: str

    def to_source(self) -> str:
        if self.imported == self.local:
            return self.imported
        return f"{self.imported} as {self.local}"


@dataclass
class ImportNode:
    type: ImportKind
    source: str
    default_import: Optional[str] = None
    named_imports: List[ImportSpecifier] = field(default_factory=list)
    namespace_import: Optional[str] = None
    raw: str = ""
    line: Optional[int] = None

    def names(self) -> List[str]:
        """Nomes locais introduzidos pelo import."""
        names: List[str] = []
        if self.default_import:
            names.append(self.default_import)
        names.extend(spec.local for spec in self.named_imports)
        if self.namespace_import:
            names.append(self.namespace_import)
        return names

    def to_source(self) -> str:
        source = js_string(self.source)
        if self.type is ImportKind.SIDE_EFFECT:
            return f"import {source};"
        clauses: List[str] = []
        if self.default_import:
            clauses.append(self.default_import)
        if self.namespace_import:
            clauses.append(f"* as {self.namespace_import}")
        elif self.type is ImportKind.NAMED or self.named_imports:
            specs = ", ".join(spec.to_source() for spec in self.named_imports)
            clauses.append(f"{{ {specs} }}")
        return f"import {', '.join(clauses)} from {source};"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "source": self.source,
            "defaultImport": self.default_import,
            "namedImports": [spec.to_source() for spec in self.named_imports],
            "namespaceImport": self.namespace_import,
            "raw": self.raw,
            "line": self.line,
        }


@dataclass
class ExportNode:
    type: ExportKind
    name: Optional[str] = None
    names: List[ImportSpecifier] = field(default_factory=list)
    is_function: bool = False
    is_component: bool = False
    raw: str = ""
    line: Optional[int] = None

    def exported_names(self) -> List[str]:
        if self.names:
            return [spec.local for spec in self.names]
        return [self.name] if self.name else []

    def to_source(self) -> str:
        """Reconstroi a instrucao de export para o modulo gerado."""
        if self.is_component:
            return f"export default {self.name};" if self.name else ""
        if self.raw:
            return self.raw
        if self.names:
            specs = ", ".join(spec.to_source() for spec in self.names)
            return f"export {{ {specs} }};"
        if self.type is ExportKind.DEFAULT and self.name:
            return f"export default {self.name};"
        return ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "name": self.name,
            "names": [spec.to_source() for spec in self.names],
            "isFunction": self.is_function,
            "isComponent": self.is_component,
            "raw": self.raw,
            "line": self.line,
        }


# ===== NOS DO TEMPLATE =====


@dataclass
class TextNode:
    text: str
    in_tag: bool = False
    tag_name: Optional[str] = None
    position: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "text",
            "text": self.text,
            "inTag": self.in_tag,
            "tagName": self.tag_name,
            "position": self.position,
        }


@dataclass
class Binding:
    expression: str
    is_variable: bool = False
    variable_name: Optional[str] = None
    position: int = 0
    line: Optional[int] = None
    type: str = "data"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "expression": self.expression,
            "isVariable": self.is_variable,
            "variableName": self.variable_name,
            "position": self.position,
            "line": self.line,
        }


@dataclass
class AttributeNode:
    name: str
    expression: str
    position: int = 0
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "attribute",
            "name": self.name,
            "expression": self.expression,
            "position": self.position,
            "line": self.line,
        }


@dataclass
class Event:
    type: str
    handler: str
    is_function: bool = False
    is_inline: bool = True
    function_name: Optional[str] = None
    attribute: str = ""
    position: int = 0
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "handler": self.handler,
            "isFunction": self.is_function,
            "isInline": self.is_inline,
            "functionName": self.function_name,
            "attribute": self.attribute,
            "position": self.position,
            "line": self.line,
        }


@dataclass
class ControlFlowNode:
    """Base dos blocos {#...}. children guarda a subarvore do corpo."""

    children: List["MarkupNode"] = field(default_factory=list)
    position: int = 0
    line: Optional[int] = None
    depth: int = 0
    KIND: ClassVar[FlowKind] = FlowKind.CONDITIONAL

    @property
    def type(self) -> str:
        return self.KIND.value

    def _base_dict(self) -> Dict[str, Any]:
        return {
            "type": self.KIND.value,
            "position": self.position,
            "line": self.line,
            "depth": self.depth,
        }


@dataclass
class ConditionalNode(ControlFlowNode):
    condition: str = ""
    if_content: str = ""
    else_content: Optional[str] = None
    else_if: Optional["ConditionalNode"] = None
    else_children: Optional[List["MarkupNode"]] = None
    KIND: ClassVar[FlowKind] = FlowKind.CONDITIONAL

    def branches(self) -> List[Tuple[str, List["MarkupNode"]]]:
        """Lista (condicao, filhos) seguindo a cadeia de else-if."""
        chain: List[Tuple[str, List["MarkupNode"]]] = []
        node: Optional[ConditionalNode] = self
        while node is not None:
            chain.append((node.condition, node.children))
            node = node.else_if
        return chain

    def final_else(self) -> Optional[List["MarkupNode"]]:
        node = self
        while node.else_if is not None:
            node = node.else_if
        return node.else_children

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data.update(
            {
                "condition": self.condition,
                "ifContent": self.if_content,
                "elseContent": self.else_content,
                "elseIf": self.else_if.to_dict() if self.else_if else None,
            }
        )
        return data


@dataclass
class LoopNode(ControlFlowNode):
    iterable: str = ""
    item_name: str = "item"
    index_name: Optional[str] = None
    content: str = ""
    KIND: ClassVar[FlowKind] = FlowKind.LOOP

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data.update(
            {
                "iterable": self.iterable,
                "itemName": self.item_name,
                "indexName": self.index_name,
                "content": self.content,
            }
        )
        return data


@dataclass
class ForNode(ControlFlowNode):
    variable: str = "i"
    start: int = 0
    end: int = 0
    content: str = ""
    KIND: ClassVar[FlowKind] = FlowKind.FOR

    @property
    def count(self) -> int:
        return max(self.end - self.start + 1, 0)

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data.update(
            {
                "variable": self.variable,
                "start": self.start,
                "end": self.end,
                "content": self.content,
            }
        )
        return data


@dataclass
class WhileNode(ControlFlowNode):
    condition: str = ""
    content: str = ""
    KIND: ClassVar[FlowKind] = FlowKind.WHILE

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data.update({"condition": self.condition, "content": self.content})
        return data


MarkupNode = Union[TextNode, Binding, AttributeNode, Event, ControlFlowNode]
