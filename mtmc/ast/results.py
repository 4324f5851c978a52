"""
results.py - Tipos de resultado e diagnosticos do compilador MTM

Proposito:
    Definir Result/Ok/Err para fluxo de erros tipado nos analisadores.
    Centralizar os diagnosticos (parse_error, transform_error, semantic_warning)
    e os registros imutaveis ParseResult e TransformResult.

Componentes principais:
    - Result, Ok, Err: tipos genericos para sucesso/erro
    - Diagnostic e subclasses: ParseError, TransformError, SemanticWarning
    - Diagnostics: agregador de erros e avisos
    - ParseResult, TransformResult: saidas de parse() e transform()

Dependencias criticas:
    - mtmc.ast.nodes: nos de script e template
    - dataclasses/typing/enum: estrutura e tipagem

Exemplo de uso:
    from mtmc.ast.results import Ok, Err, ParseError
    result = Err(ParseError("Valor ausente", line=3))

Notas de implementacao:
    - Diagnosticos sao imutaveis e carregam mensagens prontas para o usuario.
    - ParseError.blocking marca erros que impedem a geracao de codigo.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Generic, List, Optional, Tuple, TypeVar, Union

from mtmc.ast.nodes import (
    Binding,
    ControlFlowNode,
    Event,
    ExportKind,
    ExportNode,
    FunctionNode,
    ImportNode,
    MarkupNode,
    Variable,
)

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Representa sucesso com valor."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return Ok(fn(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    """Representa falha com erro tipado."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"Tentou unwrap() em Err: {self.error}")

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return self


Result = Union[Ok[T], Err[E]]


class ErrorSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticType(Enum):
    PARSE_ERROR = "parse_error"
    TRANSFORM_ERROR = "transform_error"
    SEMANTIC_WARNING = "semantic_warning"


@dataclass(frozen=True)
class Diagnostic:
    """Classe base de todos os diagnosticos."""

    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    suggestion: Optional[str] = None
    severity: ErrorSeverity = field(init=False, default=ErrorSeverity.ERROR)
    TYPE: ClassVar[DiagnosticType] = DiagnosticType.PARSE_ERROR
    DEFAULT_SEVERITY: ClassVar[ErrorSeverity] = ErrorSeverity.ERROR

    def __post_init__(self) -> None:
        object.__setattr__(self, "severity", self.DEFAULT_SEVERITY)

    @property
    def type(self) -> str:
        return self.TYPE.value

    def to_diagnostic(self) -> str:
        where = f"linha {self.line}" if self.line is not None else "componente"
        if self.line is not None and self.column is not None:
            where += f", coluna {self.column}"
        msg = f"[{self.type}] {where}: {self.message}"
        if self.suggestion:
            msg += f"\n  Sugestao: {self.suggestion}"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "suggestion": self.suggestion,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ParseError(Diagnostic):
    """Erro de analise; blocking=True impede a extracao do template."""

    blocking: bool = False
    TYPE: ClassVar[DiagnosticType] = DiagnosticType.PARSE_ERROR

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["blocking"] = self.blocking
        return data


@dataclass(frozen=True)
class TransformError(Diagnostic):
    """Falha durante a geracao de codigo ou alvo desconhecido."""

    TYPE: ClassVar[DiagnosticType] = DiagnosticType.TRANSFORM_ERROR


@dataclass(frozen=True)
class SemanticWarning(Diagnostic):
    """Construcao aceita com ressalvas (variavel nao declarada, {#while}...)."""

    TYPE: ClassVar[DiagnosticType] = DiagnosticType.SEMANTIC_WARNING
    DEFAULT_SEVERITY: ClassVar[ErrorSeverity] = ErrorSeverity.WARNING


@dataclass
class Diagnostics:
    """Agregador de diagnosticos durante parse/transform."""

    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> None:
        match diagnostic.severity:
            case ErrorSeverity.ERROR:
                self.errors.append(diagnostic)
            case ErrorSeverity.WARNING:
                if diagnostic not in self.warnings:
                    self.warnings.append(diagnostic)

    def extend(self, diagnostics: List[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def to_diagnostics(self) -> str:
        lines: List[str] = []
        if self.errors:
            lines.append("=== ERROS ===")
            for err in self.errors:
                lines.append(err.to_diagnostic())
                lines.append("")
        if self.warnings:
            lines.append("=== AVISOS ===")
            for warn in self.warnings:
                lines.append(warn.to_diagnostic())
                lines.append("")
        return "\n".join(lines)


@dataclass(frozen=True)
class ParseResult:
    """Representacao imutavel de um componente analisado."""

    variables: Dict[str, Variable] = field(default_factory=dict)
    functions: Dict[str, FunctionNode] = field(default_factory=dict)
    template: str = ""
    bindings: Tuple[Binding, ...] = ()
    events: Tuple[Event, ...] = ()
    control_flow: Tuple[ControlFlowNode, ...] = ()
    imports: Tuple[ImportNode, ...] = ()
    exports: Tuple[ExportNode, ...] = ()
    errors: Tuple[ParseError, ...] = ()
    nodes: Tuple[MarkupNode, ...] = ()

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def blocking_errors(self, strict: bool = False) -> List[ParseError]:
        if strict:
            return list(self.errors)
        return [err for err in self.errors if err.blocking]

    def default_export(self) -> Optional[ExportNode]:
        for export in self.exports:
            if export.type is ExportKind.DEFAULT:
                return export
        return None

    def named_exports(self) -> List[ExportNode]:
        return [export for export in self.exports if export.type is ExportKind.NAMED]

    def declared_names(self) -> List[str]:
        return list(self.variables) + list(self.functions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variables": {name: var.to_dict() for name, var in self.variables.items()},
            "functions": {name: fn.to_dict() for name, fn in self.functions.items()},
            "template": self.template,
            "bindings": [b.to_dict() for b in self.bindings],
            "events": [e.to_dict() for e in self.events],
            "controlFlow": [node.to_dict() for node in self.control_flow],
            "imports": [imp.to_dict() for imp in self.imports],
            "exports": [exp.to_dict() for exp in self.exports],
            "errors": [err.to_dict() for err in self.errors],
        }


@dataclass(frozen=True)
class TransformResult:
    """Codigo gerado para um framework alvo com seus diagnosticos."""

    code: str
    target: str
    filename: str = "<component>"
    errors: Tuple[Diagnostic, ...] = ()
    warnings: Tuple[Diagnostic, ...] = ()
    parsed: Optional[ParseResult] = None

    @property
    def success(self) -> bool:
        return not self.errors

    def get_diagnostics(self) -> str:
        collected = Diagnostics(errors=list(self.errors), warnings=list(self.warnings))
        return collected.to_diagnostics()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "target": self.target,
            "filename": self.filename,
            "errors": [err.to_dict() for err in self.errors],
            "warnings": [warn.to_dict() for warn in self.warnings],
        }


def handle_result(
    result: Result[T, Diagnostic],
    on_ok: Callable[[T], None],
    on_err: Callable[[Diagnostic], None],
) -> None:
    """Helper para pattern matching em Result."""
    match result:
        case Ok(value):
            on_ok(value)
        case Err(error):
            on_err(error)
