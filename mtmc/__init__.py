"""
MTM: Compilador de componentes multi-framework

Compila componentes MTM (variaveis $reativas!, funcoes e um <template>
com bindings, eventos e blocos de controle) para React, Vue, Svelte ou
JavaScript puro.

API em Memoria:
    >>> import mtmc
    >>> result = mtmc.transform("$count! = 0\\n<template><p>{$count}</p></template>", "vue")
    >>> result.success
    True
    >>> parsed = mtmc.parse("$count! = 0")
    >>> parsed.variables["count"].reactive
    True
"""

from mtmc.api import (
    parse,
    transform,
    transform_many,
    summarize,
)

from mtmc.compiler import (
    ComponentTransformer,
    TransformStats,
)

from mtmc.codegen.base import (
    CodeGenStrategy,
    Target,
    TransformOptions,
)

from mtmc.parser.component import ComponentParser

# AST Nodes
from mtmc.ast.nodes import (
    Variable,
    FunctionNode,
    Param,
    Binding,
    Event,
    AttributeNode,
    ConditionalNode,
    LoopNode,
    ForNode,
    WhileNode,
    ImportNode,
    ExportNode,
)

# Result types
from mtmc.ast.results import (
    Ok,
    Err,
    ParseResult,
    TransformResult,
    Diagnostic,
    ParseError,
    TransformError,
    SemanticWarning,
)

__version__ = "0.1.0"
__all__ = [
    # API em memoria
    "parse",
    "transform",
    "transform_many",
    "summarize",
    # Compilador
    "ComponentTransformer",
    "ComponentParser",
    "TransformStats",
    "CodeGenStrategy",
    "Target",
    "TransformOptions",
    # AST
    "Variable",
    "FunctionNode",
    "Param",
    "Binding",
    "Event",
    "AttributeNode",
    "ConditionalNode",
    "LoopNode",
    "ForNode",
    "WhileNode",
    "ImportNode",
    "ExportNode",
    # Results
    "Ok",
    "Err",
    "ParseResult",
    "TransformResult",
    "Diagnostic",
    "ParseError",
    "TransformError",
    "SemanticWarning",
]
