"""
template.py - Tokenizacao e analise do template de um componente MTM

Proposito:
    Converter o texto do template em uma arvore de nos (texto, bindings,
    atributos, eventos e blocos de controle) e nas listas planas em ordem
    de documento exigidas pelo ParseResult.

Componentes principais:
    - TemplateTokenizer: varredura em modo texto / modo tag
    - TemplateAnalyzer: parser descendente recursivo dos blocos {#...}{/...}
    - TemplateAnalysis: arvore e listas planas

Dependencias criticas:
    - mtmc.parser.scanner: casamento de chaves ciente de strings
    - mtmc.parser.lexer/transformer: cabecalhos {#each} e {#for}
    - mtmc.error_handler: sugestoes para blocos desconhecidos

Exemplo de uso:
    analyzer = TemplateAnalyzer(source, offset, functions, diagnostics)
    analysis = analyzer.analyze(template_text)

Notas de implementacao:
    - Erros estruturais ({ sem fechamento, blocos sem par, cabecalhos
      invalidos) sao parse_error bloqueantes.
    - Conteudos (if_content, content) sao fatias cruas do template.
    - controlFlow e pre-ordem e nao inclui os nos else-if encadeados.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

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
    WhileNode,
)
from mtmc.ast.results import Diagnostics, ParseError
from mtmc.error_handler import MtmErrorHandler
from mtmc.parser.lexer import MtmSyntaxError, parse_fragment
from mtmc.parser.scanner import find_matching, line_of
from mtmc.parser.transformer import MtmTransformer

EVENT_ATTRIBUTES = frozenset(
    {
        "click", "dblclick", "mousedown", "mouseup", "mouseover", "mouseout",
        "mousemove", "mouseenter", "mouseleave", "contextmenu", "keydown",
        "keyup", "keypress", "focus", "blur", "change", "input", "submit",
        "reset", "load", "unload", "resize", "scroll", "touchstart",
        "touchend", "touchmove", "touchcancel",
    }
)

RAW_TEXT_ELEMENTS = frozenset({"script", "style"})
KNOWN_BLOCKS = ("if", "each", "for", "while")

TAG_START = re.compile(r"<(/?)([A-Za-z][\w:.-]*)")
ATTRIBUTE_BEFORE = re.compile(r"([A-Za-z_:@][\w:.@-]*)=$")
VARIABLE_EXPRESSION = re.compile(r"\$([A-Za-z_][\w$]*)")
BLOCK_OPEN = re.compile(r"#(\w*)\s*(.*)", re.DOTALL)
BRANCH = re.compile(r":else(?:\s+if\b\s*(.*))?\s*$", re.DOTALL)
AS_SEPARATOR = re.compile(r"\s+as\s+")
EVENT_PREFIXES = ("on:", "@", "on")


def event_type_of(attribute: str) -> Optional[str]:
    """Tipo de evento DOM de um atributo: click, onclick, onClick, on:click ou @click."""
    lowered = attribute.lower()
    if lowered in EVENT_ATTRIBUTES:
        return lowered
    for prefix in EVENT_PREFIXES:
        if lowered.startswith(prefix) and lowered[len(prefix):] in EVENT_ATTRIBUTES:
            return lowered[len(prefix):]
    return None


@dataclass
class Token:
    kind: str  # text | expression | open | branch | close
    start: int
    end: int
    text: str = ""
    attribute: Optional[str] = None
    in_tag: bool = False
    tag_name: Optional[str] = None
    keyword: Optional[str] = None
    header: str = ""


@dataclass
class TemplateAnalysis:
    nodes: List[MarkupNode] = field(default_factory=list)
    bindings: List[Binding] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    control_flow: List[ControlFlowNode] = field(default_factory=list)


class TemplateTokenizer:
    """Divide o template em tokens de texto, expressoes e marcadores de bloco."""

    def __init__(self, template: str, report):
        self.template = template
        self.report = report
        self.tokens: List[Token] = []
        self._text_start = 0

    def tokenize(self) -> List[Token]:
        text = self.template
        n = len(text)
        i = 0
        while i < n:
            ch = text[i]
            if ch == "<":
                if text.startswith("<!--", i):
                    end = text.find("-->", i + 4)
                    i = n if end == -1 else end + 3
                    continue
                match = TAG_START.match(text, i)
                if match is not None:
                    self._flush(i)
                    i = self._scan_tag(match)
                    self._text_start = i
                    continue
            elif ch == "{":
                self._flush(i)
                i = self._scan_brace(i, in_tag=False, tag_name=None)
                self._text_start = i
                continue
            i += 1
        self._flush(n)
        return self.tokens

    def _flush(self, end: int, in_tag: bool = False, tag_name: Optional[str] = None) -> None:
        if end > self._text_start:
            self.tokens.append(
                Token("text", self._text_start, end, self.template[self._text_start:end], in_tag=in_tag, tag_name=tag_name)
            )
        self._text_start = end

    def _scan_tag(self, match: re.Match) -> int:
        text = self.template
        n = len(text)
        tag_name = match.group(2).lower()
        closing = bool(match.group(1))
        self._text_start = match.start()
        i = match.end()
        while i < n:
            ch = text[i]
            if ch in ("'", '"'):
                end = text.find(ch, i + 1)
                i = n if end == -1 else end + 1
                continue
            if ch == "{":
                attribute = ATTRIBUTE_BEFORE.search(text, self._text_start, i)
                if attribute is not None:
                    self._flush(attribute.start(), in_tag=True, tag_name=tag_name)
                    self._text_start = attribute.start()
                    i = self._scan_brace(i, in_tag=True, tag_name=tag_name, attribute=attribute.group(1))
                else:
                    self._flush(i, in_tag=True, tag_name=tag_name)
                    i = self._scan_brace(i, in_tag=True, tag_name=tag_name)
                self._text_start = i
                continue
            if ch == ">":
                self._flush(i + 1, in_tag=True, tag_name=tag_name)
                self_closing = text[i - 1] == "/"
                if not closing and not self_closing and tag_name in RAW_TEXT_ELEMENTS:
                    return self._skip_raw_text(i + 1, tag_name)
                return i + 1
            i += 1
        self._flush(n, in_tag=True, tag_name=tag_name)
        return n

    def _skip_raw_text(self, start: int, tag_name: str) -> int:
        """Conteudo de <script>/<style> e texto literal ate a tag de fechamento."""
        closing = re.compile(rf"</{tag_name}\s*>", re.IGNORECASE).search(self.template, start)
        end = len(self.template) if closing is None else closing.start()
        self._text_start = start
        self._flush(end)
        return end

    def _scan_brace(
        self,
        start: int,
        in_tag: bool,
        tag_name: Optional[str],
        attribute: Optional[str] = None,
    ) -> int:
        close = find_matching(self.template, start)
        if close == -1:
            self.report(
                "Chave '{' sem fechamento no template",
                start,
                "Feche a interpolacao com '}' ou escape a chave literal",
            )
            token_start = self._text_start if attribute else start
            self.tokens.append(Token("text", token_start, start + 1, self.template[token_start:start + 1], in_tag=in_tag, tag_name=tag_name))
            return start + 1

        content = self.template[start + 1:close]
        stripped = content.strip()
        token_start = self._text_start if attribute else start
        if attribute is None and stripped[:1] in ("#", ":", "/"):
            if in_tag:
                self.report(
                    f"Marcador de bloco {{{stripped}}} dentro de uma tag",
                    start,
                    "Blocos {#...} envolvem elementos inteiros, nao atributos",
                )
                return close + 1
            self.tokens.append(self._block_token(stripped, start, close + 1))
            return close + 1

        self.tokens.append(
            Token(
                "expression",
                token_start,
                close + 1,
                stripped,
                attribute=attribute,
                in_tag=in_tag,
                tag_name=tag_name,
            )
        )
        return close + 1

    def _block_token(self, content: str, start: int, end: int) -> Token:
        if content.startswith("#"):
            match = BLOCK_OPEN.match(content)
            keyword = match.group(1) if match else ""
            header = match.group(2).strip() if match else ""
            return Token("open", start, end, content, keyword=keyword, header=header)
        if content.startswith(":"):
            branch = BRANCH.match(content)
            if branch is None:
                return Token("branch", start, end, content, keyword=content[1:].split()[0] if len(content) > 1 else "")
            condition = branch.group(1)
            keyword = "else" if condition is None else "else if"
            return Token("branch", start, end, content, keyword=keyword, header=(condition or "").strip())
        return Token("close", start, end, content, keyword=content[1:].strip())


class TemplateAnalyzer:
    def __init__(
        self,
        source: str,
        offset: int,
        functions: Dict[str, FunctionNode],
        diagnostics: Diagnostics,
        handler: Optional[MtmErrorHandler] = None,
    ):
        self.source = source
        self.offset = offset
        self.functions = functions
        self.diagnostics = diagnostics
        self.handler = handler or MtmErrorHandler()
        self.template = ""
        self._tokens: List[Token] = []
        self._pos = 0
        self._open: List[str] = []
        self._result = TemplateAnalysis()

    def analyze(self, template: str) -> TemplateAnalysis:
        self.template = template
        self._tokens = TemplateTokenizer(template, self._blocking).tokenize()
        self._pos = 0
        nodes, _ = self._parse_sequence(0)
        self._result.nodes = nodes
        self._result.control_flow = [node for node in self._result.control_flow if node is not None]
        return self._result

    # ===== DIAGNOSTICOS =====

    def _line(self, position: int) -> int:
        return line_of(self.source, self.offset + position)

    def _blocking(self, message: str, position: int, suggestion: Optional[str] = None) -> None:
        self.diagnostics.add(ParseError(message, line=self._line(position), suggestion=suggestion, blocking=True))

    # ===== SEQUENCIAS E BLOCOS =====

    def _parse_sequence(self, depth: int) -> Tuple[List[MarkupNode], Optional[Token]]:
        nodes: List[MarkupNode] = []
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            if token.kind == "text":
                nodes.append(TextNode(token.text, in_tag=token.in_tag, tag_name=token.tag_name, position=token.start))
                self._pos += 1
            elif token.kind == "expression":
                node = self._expression_node(token)
                if node is not None:
                    nodes.append(node)
                self._pos += 1
            elif token.kind == "open":
                self._pos += 1
                nodes.extend(self._parse_block(token, depth))
            elif token.kind == "branch":
                if self._open and self._open[-1] == "if":
                    return nodes, token
                self._blocking(
                    f"{{{token.text}}} fora de um bloco {{#if}}",
                    token.start,
                    "Use {:else} apenas entre {#if ...} e {/if}",
                )
                self._pos += 1
            else:
                if token.keyword in self._open:
                    return nodes, token
                self._blocking(
                    f"{{/{token.keyword}}} sem {{#{token.keyword}}} correspondente",
                    token.start,
                    "Remova o fechamento ou abra o bloco antes dele",
                )
                self._pos += 1
        return nodes, None

    def _parse_block(self, opener: Token, depth: int) -> List[MarkupNode]:
        keyword = opener.keyword or ""
        if keyword not in KNOWN_BLOCKS:
            message, suggestion = self.handler.unknown_block_message(keyword)
            self._blocking(message, opener.start, suggestion)
            return []

        slot = len(self._result.control_flow)
        self._result.control_flow.append(None)
        self._open.append(keyword)
        try:
            if keyword == "if":
                node = self._parse_if(opener, depth)
            else:
                node, children = self._parse_body_block(opener, keyword, depth)
                if node is None:
                    return children
        finally:
            self._open.pop()
        self._result.control_flow[slot] = node
        return [node]

    def _close_block(self, opener: Token, terminator: Optional[Token]) -> int:
        """Consome o fechamento correto e devolve o fim do conteudo do bloco."""
        keyword = opener.keyword
        if terminator is not None and terminator.kind == "close" and terminator.keyword == keyword:
            self._pos += 1
            return terminator.start
        self._blocking(
            f"Bloco {{#{keyword}}} sem {{/{keyword}}} correspondente",
            opener.start,
            f"Feche o bloco com {{/{keyword}}}",
        )
        return terminator.start if terminator is not None else len(self.template)

    def _parse_if(self, opener: Token, depth: int) -> ConditionalNode:
        if not opener.header:
            self._blocking("{#if} sem condicao", opener.start, "Use {#if $condicao}")

        branches: List[Tuple[str, Token, List[MarkupNode], int, int]] = []
        condition, marker = opener.header, opener
        else_token: Optional[Token] = None
        else_children: Optional[List[MarkupNode]] = None
        end = len(self.template)

        while True:
            children, terminator = self._parse_sequence(depth + 1)
            content_end = terminator.start if terminator is not None else len(self.template)
            if else_token is None:
                branches.append((condition, marker, children, marker.end, content_end))
            else:
                else_children = children
            if terminator is not None and terminator.kind == "branch":
                self._pos += 1
                if else_token is not None:
                    self._blocking("Ramo apos {:else} no mesmo {#if}", terminator.start, "{:else} deve ser o ultimo ramo")
                    continue
                if terminator.keyword == "else if":
                    if not terminator.header:
                        self._blocking("{:else if} sem condicao", terminator.start, "Use {:else if $condicao}")
                    condition, marker = terminator.header, terminator
                elif terminator.keyword == "else":
                    else_token = terminator
                else:
                    self._blocking(f"Ramo desconhecido {{{terminator.text}}}", terminator.start, "Use {:else} ou {:else if ...}")
                    else_token = terminator
                continue
            end = self._close_block(opener, terminator)
            break

        else_content = self.template[else_token.end:end].strip() if else_token is not None else None
        node: Optional[ConditionalNode] = None
        for index in range(len(branches) - 1, -1, -1):
            cond, mark, children, content_start, content_end = branches[index]
            last = index == len(branches) - 1
            node = ConditionalNode(
                condition=cond,
                if_content=self.template[content_start:content_end].strip(),
                else_content=else_content if last else None,
                else_if=node,
                children=children,
                else_children=else_children if last else None,
                position=mark.start,
                line=self._line(mark.start),
                depth=depth,
            )
        return node

    def _parse_body_block(
        self, opener: Token, keyword: str, depth: int
    ) -> Tuple[Optional[ControlFlowNode], List[MarkupNode]]:
        header_node = self._block_header(opener, keyword)
        children, terminator = self._parse_sequence(depth + 1)
        end = self._close_block(opener, terminator)
        if header_node is None:
            return None, children
        header_node.children = children
        header_node.content = self.template[opener.end:end].strip()
        header_node.position = opener.start
        header_node.line = self._line(opener.start)
        header_node.depth = depth
        return header_node, children

    def _block_header(self, opener: Token, keyword: str) -> Optional[ControlFlowNode]:
        header = opener.header
        if keyword == "while":
            if not header:
                self._blocking("{#while} sem condicao", opener.start, "Use {#while $condicao}")
                return None
            return WhileNode(condition=header)

        if keyword == "each":
            separators = list(AS_SEPARATOR.finditer(header))
            if not separators:
                self._blocking(
                    f"Cabecalho invalido em {{#each {header}}}: falta 'as'",
                    opener.start,
                    "Use `{#each $itens as item}` ou `{#each $itens as item, indice}`",
                )
                return None
            last = separators[-1]
            iterable = header[:last.start()].strip()
            binding = header[last.end():].strip()
            try:
                item, index = MtmTransformer().transform(parse_fragment(binding, "each_binding", self._line(opener.start)))
            except MtmSyntaxError as exc:
                self._blocking(exc.message, opener.start, exc.suggestion)
                return None
            if not iterable:
                self._blocking("{#each} sem lista", opener.start, "Use `{#each $itens as item}`")
                return None
            return LoopNode(iterable=iterable, item_name=item, index_name=index)

        try:
            variable, start, end = MtmTransformer().transform(parse_fragment(header, "for_header", self._line(opener.start)))
        except MtmSyntaxError as exc:
            self._blocking(f"Cabecalho invalido em {{#for {header}}}: {exc.message}", opener.start, exc.suggestion)
            return None
        return ForNode(variable=variable, start=start, end=end)

    # ===== EXPRESSOES =====

    def _expression_node(self, token: Token) -> Optional[MarkupNode]:
        expression = token.text
        line = self._line(token.start)
        if token.attribute is not None:
            name = token.attribute
            event_type = event_type_of(name)
            if event_type is not None:
                return self._event(token, name, event_type, expression, line)
            node = AttributeNode(name=name, expression=expression, position=token.start, line=line)
            return node
        if not expression:
            self.diagnostics.add(ParseError("Interpolacao vazia {} no template", line=line, suggestion="Remova as chaves ou informe uma expressao"))
            return None
        variable = VARIABLE_EXPRESSION.fullmatch(expression)
        binding = Binding(
            expression=expression,
            is_variable=variable is not None,
            variable_name=variable.group(1) if variable else None,
            position=token.start,
            line=line,
        )
        self._result.bindings.append(binding)
        return binding

    def _event(self, token: Token, name: str, event_type: str, handler: str, line: int) -> Event:
        reference = VARIABLE_EXPRESSION.fullmatch(handler)
        is_function = reference is not None and reference.group(1) in self.functions
        event = Event(
            type=event_type,
            handler=handler,
            is_function=is_function,
            is_inline=not is_function,
            function_name=reference.group(1) if is_function else None,
            attribute=name,
            position=token.start,
            line=line,
        )
        self._result.events.append(event)
        return event
