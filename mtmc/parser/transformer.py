"""
transformer.py - Conversao de parse trees de fragmentos para nos MTM

Proposito:
    Transformar as arvores produzidas por parse_fragment em valores tipados:
    cabecalhos de declaracao, parametros, literais, imports, exports e
    cabecalhos de blocos do template.

Componentes principais:
    - MtmTransformer: Transformer principal do Lark
    - DeclarationHead, ParamHead, TypeAnnotation, ImportClause: intermediarios

Dependencias criticas:
    - lark: Transformer, Token
    - mtmc.ast.nodes: literais, ImportNode, ExportNode

Exemplo de uso:
    from mtmc.parser.lexer import parse_fragment
    from mtmc.parser.transformer import MtmTransformer
    head = MtmTransformer().transform(parse_fragment("$count!", "declaration_head"))

Notas de implementacao:
    - Strings aceitam aspas simples ou duplas e escapes no estilo JavaScript.
    - Inteiros viram int e numeros com ponto ou expoente viram float.
    - Uma declaracao com anotacao de tipo (`$preco: float = 1`) e reativa
      mesmo sem o marcador `!`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from lark import Token, Transformer

from mtmc.ast.nodes import (
    ArrayLiteral,
    BooleanLiteral,
    ExportKind,
    ExportNode,
    ImportKind,
    ImportNode,
    ImportSpecifier,
    NullLiteral,
    NumberLiteral,
    ObjectLiteral,
    StringLiteral,
    ValueLiteral,
)

ESCAPE_PATTERN = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)
SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _decode_escape(match: re.Match) -> str:
    code = match.group(1)
    if code.startswith("u{"):
        return chr(int(code[2:-1], 16))
    if code.startswith("u") and len(code) == 5:
        return chr(int(code[1:], 16))
    if code.startswith("x") and len(code) == 3:
        return chr(int(code[1:], 16))
    return SIMPLE_ESCAPES.get(code, code)


def _unquote(token: str) -> str:
    return ESCAPE_PATTERN.sub(_decode_escape, token[1:-1])


def _tokens(items: List[Any], kind: str) -> List[str]:
    return [str(item) for item in items if isinstance(item, Token) and item.type == kind]


@dataclass
class TypeAnnotation:
    text: str


@dataclass
class DeclarationHead:
    name: str
    reactive: bool = False
    type: Optional[str] = None


@dataclass
class ParamHead:
    name: str
    optional: bool = False
    type: Optional[str] = None


@dataclass
class ImportClause:
    default: Optional[str] = None
    named: List[ImportSpecifier] = field(default_factory=list)
    namespace: Optional[str] = None
    has_braces: bool = False


class MtmTransformer(Transformer):
    def __init__(self, raw: str = "", line: Optional[int] = None):
        super().__init__()
        self.raw = raw
        self.line = line

    def DOUBLE_QUOTED(self, token: Token) -> str:  # noqa: N802
        return _unquote(str(token))

    def SINGLE_QUOTED(self, token: Token) -> str:  # noqa: N802
        return _unquote(str(token))

    def NUMBER(self, token: Token) -> int | float:  # noqa: N802
        text = str(token)
        if re.fullmatch(r"[+-]?\d+", text):
            return int(text)
        return float(text)

    def INT(self, token: Token) -> int:  # noqa: N802
        return int(str(token))

    # ===== DECLARACOES E TIPOS =====

    def declaration_head(self, items: List[Any]) -> DeclarationHead:
        name = _tokens(items, "VARIABLE")[0][1:]
        annotation = next((item for item in items if isinstance(item, TypeAnnotation)), None)
        return DeclarationHead(
            name=name,
            reactive=bool(_tokens(items, "REACTIVE")) or annotation is not None,
            type=annotation.text if annotation else None,
        )

    def param_head(self, items: List[Any]) -> ParamHead:
        annotation = next((item for item in items if isinstance(item, TypeAnnotation)), None)
        return ParamHead(
            name=_tokens(items, "PARAM_NAME")[0],
            optional=bool(_tokens(items, "OPTIONAL_MARK")),
            type=annotation.text if annotation else None,
        )

    def type_annotation(self, items: List[Any]) -> TypeAnnotation:
        return TypeAnnotation(items[0])

    def type_union(self, items: List[Any]) -> str:
        return " | ".join(items)

    def type_expr(self, items: List[Any]) -> str:
        return "".join(str(item) for item in items)

    def literal_type(self, items: List[Any]) -> str:
        literal, *suffixes = items
        return f"'{literal.value}'" + "".join(str(s) for s in suffixes)

    def type_name(self, items: List[Any]) -> str:
        return ".".join(str(item) for item in items)

    def type_args(self, items: List[Any]) -> str:
        return "<" + ", ".join(items) + ">"

    # ===== LITERAIS =====

    def string(self, items: List[Any]) -> StringLiteral:
        return StringLiteral(items[0])

    def number(self, items: List[Any]) -> NumberLiteral:
        return NumberLiteral(items[0])

    def true(self, items: List[Any]) -> BooleanLiteral:
        return BooleanLiteral(True)

    def false(self, items: List[Any]) -> BooleanLiteral:
        return BooleanLiteral(False)

    def null(self, items: List[Any]) -> NullLiteral:
        return NullLiteral()

    def array(self, items: List[Any]) -> ArrayLiteral:
        return ArrayLiteral([item.to_python() for item in items])

    def object(self, items: List[Any]) -> ObjectLiteral:
        return ObjectLiteral(dict(items))

    def pair(self, items: List[Any]) -> Tuple[str, Any]:
        key, value = items
        if isinstance(key, ValueLiteral):
            key = str(key.to_python())
        return key, value.to_python()

    def name_key(self, items: List[Any]) -> str:
        return str(items[0])

    # ===== IMPORTS =====

    def default_clause(self, items: List[Any]) -> ImportClause:
        return ImportClause(default=str(items[0]))

    def named_clause(self, items: List[Any]) -> ImportClause:
        return ImportClause(named=list(items), has_braces=True)

    def namespace_clause(self, items: List[Any]) -> ImportClause:
        return ImportClause(namespace=_tokens(items, "NAME")[-1])

    def default_named_clause(self, items: List[Any]) -> ImportClause:
        default, clause = items
        return ImportClause(default=str(default), named=clause.named, has_braces=True)

    def default_namespace_clause(self, items: List[Any]) -> ImportClause:
        default, clause = items
        return ImportClause(default=str(default), namespace=clause.namespace)

    def specifier(self, items: List[Any]) -> ImportSpecifier:
        names = _tokens(items, "NAME")
        return ImportSpecifier(imported=names[0], local=names[-1])

    def import_from(self, items: List[Any]) -> ImportNode:
        clause = next(item for item in items if isinstance(item, ImportClause))
        source = next(item for item in items if isinstance(item, StringLiteral)).value
        if clause.namespace:
            kind = ImportKind.NAMESPACE
        elif clause.has_braces and not clause.default:
            kind = ImportKind.NAMED
        else:
            kind = ImportKind.DEFAULT
        return ImportNode(
            type=kind,
            source=source,
            default_import=clause.default,
            named_imports=clause.named,
            namespace_import=clause.namespace,
            raw=self.raw,
            line=self.line,
        )

    def import_side_effect(self, items: List[Any]) -> ImportNode:
        source = next(item for item in items if isinstance(item, StringLiteral)).value
        return ImportNode(type=ImportKind.SIDE_EFFECT, source=source, raw=self.raw, line=self.line)

    # ===== EXPORTS =====

    def _export(self, kind: ExportKind, items: List[Any], is_function: bool = False) -> ExportNode:
        names = _tokens(items, "NAME")
        return ExportNode(
            type=kind,
            name=names[0] if names else None,
            is_function=is_function,
            raw=self.raw,
            line=self.line,
        )

    def export_default_function(self, items: List[Any]) -> ExportNode:
        return self._export(ExportKind.DEFAULT, items, is_function=True)

    def export_default_name(self, items: List[Any]) -> ExportNode:
        return self._export(ExportKind.DEFAULT, items)

    def export_declaration(self, items: List[Any]) -> ExportNode:
        return self._export(ExportKind.NAMED, items)

    def export_function(self, items: List[Any]) -> ExportNode:
        return self._export(ExportKind.NAMED, items, is_function=True)

    def export_class(self, items: List[Any]) -> ExportNode:
        return self._export(ExportKind.NAMED, items)

    def export_list(self, items: List[Any]) -> ExportNode:
        specs = [item for item in items if isinstance(item, ImportSpecifier)]
        return ExportNode(type=ExportKind.NAMED, names=specs, raw=self.raw, line=self.line)

    # ===== CABECALHOS DE BLOCOS =====

    def each_binding(self, items: List[Any]) -> Tuple[str, Optional[str]]:
        names = [str(item).lstrip("$") for item in items]
        return names[0], names[1] if len(names) > 1 else None

    def for_header(self, items: List[Any]) -> Tuple[str, int, int]:
        bounds = [item for item in items if isinstance(item, int)]
        return str(items[0]).lstrip("$"), bounds[0], bounds[1]
