"""
scanner.py - Varredura textual ciente de strings, comentarios e delimitadores

Proposito:
    Fornecer as primitivas de baixo nivel usadas pelos analisadores de script
    e template: casamento de delimitadores, divisao em nivel zero, separacao
    de instrucoes e localizacao da regiao <template>.

Componentes principais:
    - find_matching / check_balance: casamento de ( [ { respeitando strings
    - split_top_level / find_top_level: busca fora de aninhamento
    - split_statements: divisao do script em instrucoes
    - find_template_regions / blank_out: extracao do template
    - code_spans / iter_references: ocorrencias de $nome em posicoes de codigo

Dependencias criticas:
    - re: padroes de referencia e de tags

Exemplo de uso:
    from mtmc.parser.scanner import split_statements
    statements, issues = split_statements("$count! = 0\\n$name = 'x'")

Notas de implementacao:
    - Strings '...' e "..." nao atravessam quebras de linha.
    - Template literals `...` sao percorridos; apenas ${...} e codigo.
    - Uma quebra de linha encerra a instrucao em nivel zero, exceto quando a
      linha termina em operador ou a seguinte comeca com . ? : && ||.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

QUOTES = "'\"`"
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}

REFERENCE_PATTERN = re.compile(r"(?<![\w$])(?:(?<=\.\.\.)|(?<!\.))\$([A-Za-z_][\w$]*)")
TEMPLATE_TAG_PATTERN = re.compile(r"<(/?)template\b[^>]*>", re.IGNORECASE)

CONTINUATION_ENDINGS = set("=+-*/%&|^<>?:,.([{")
CONTINUATION_STARTS = (".", "?", ":", "&&", "||", "=>", ")", "]", "}")


@dataclass
class Statement:
    text: str
    start: int
    line: int


@dataclass
class ScanIssue:
    message: str
    offset: int
    line: int
    suggestion: Optional[str] = None


def line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, max(offset, 0)) + 1


def skip_string(text: str, start: int) -> int:
    """Indice logo apos a string iniciada em start, ou -1 se nao fechada."""
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if quote == "`" and text.startswith("${", i):
            end = find_matching(text, i + 1)
            if end == -1:
                return -1
            i = end + 1
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return -1
        i += 1
    return -1


def skip_comment(text: str, start: int) -> int:
    """Indice apos o comentario em start; start se nao houver comentario."""
    if text.startswith("//", start):
        end = text.find("\n", start)
        return len(text) if end == -1 else end
    if text.startswith("/*", start):
        end = text.find("*/", start + 2)
        return len(text) if end == -1 else end + 2
    return start


def find_matching(text: str, start: int) -> int:
    """Indice do delimitador que fecha text[start], ou -1 se desbalanceado."""
    stack = [OPENERS[text[start]]]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            if end == -1:
                return -1
            i = end
            continue
        if ch == "/":
            end = skip_comment(text, i)
            if end != i:
                i = end
                continue
        if ch in OPENERS:
            stack.append(OPENERS[ch])
        elif ch in CLOSERS:
            if ch != stack[-1]:
                return -1
            stack.pop()
            if not stack:
                return i
        i += 1
    return -1


def check_balance(text: str) -> Optional[ScanIssue]:
    """Primeiro problema de aninhamento ou de string encontrado, se houver."""
    stack: List[Tuple[str, int]] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            if end == -1:
                return ScanIssue(
                    f"Texto iniciado com {ch} sem fechamento",
                    i,
                    line_of(text, i),
                    "Feche o texto com a mesma aspa usada na abertura",
                )
            i = end
            continue
        if ch == "/":
            end = skip_comment(text, i)
            if end != i:
                i = end
                continue
        if ch in OPENERS:
            stack.append((ch, i))
        elif ch in CLOSERS:
            if not stack or stack[-1][0] != CLOSERS[ch]:
                return ScanIssue(f"'{ch}' sem abertura correspondente", i, line_of(text, i))
            stack.pop()
        i += 1
    if stack:
        opener, offset = stack[-1]
        return ScanIssue(
            f"'{opener}' sem fechamento",
            offset,
            line_of(text, offset),
            f"Adicione '{OPENERS[opener]}' correspondente",
        )
    return None


def _iter_top_level(text: str, start: int = 0) -> Iterator[int]:
    """Gera os indices de caracteres em nivel zero fora de strings e comentarios."""
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            i = n if end == -1 else end
            continue
        if ch == "/":
            end = skip_comment(text, i)
            if end != i:
                i = end
                continue
        if ch in OPENERS:
            if depth == 0:
                yield i
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        elif depth == 0:
            yield i
        i += 1


def find_top_level(text: str, target: str, start: int = 0) -> int:
    for i in _iter_top_level(text, start):
        if text.startswith(target, i):
            return i
    return -1


def find_assignment(text: str) -> int:
    """Primeiro '=' de atribuicao em nivel zero (ignora ==, =>, <=, >=)."""
    for i in _iter_top_level(text):
        if text[i] != "=":
            continue
        nxt = text[i + 1] if i + 1 < len(text) else ""
        prev = text[i - 1] if i > 0 else ""
        if nxt in ("=", ">") or prev in ("=", "<", ">"):
            continue
        return i
    return -1


def split_top_level(text: str, separator: str = ",") -> List[str]:
    parts: List[str] = []
    last = 0
    for i in _iter_top_level(text):
        if text.startswith(separator, i):
            parts.append(text[last:i])
            last = i + len(separator)
    parts.append(text[last:])
    return parts


def strip_comments(text: str) -> str:
    """Remove comentarios // e /* */ fora de strings."""
    out: List[str] = []
    i = 0
    last = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            i = n if end == -1 else end
            continue
        if ch == "/":
            end = skip_comment(text, i)
            if end != i:
                out.append(text[last:i])
                i = last = end
                continue
        i += 1
    out.append(text[last:])
    return "".join(out).strip()


# ===== INSTRUCOES =====


def _last_significant(chars: List[str]) -> str:
    for ch in reversed(chars):
        if not ch.isspace():
            return ch
    return ""


def _continues(text: str, newline_at: int, statement_chars: List[str]) -> bool:
    last = _last_significant(statement_chars)
    if last and last in CONTINUATION_ENDINGS:
        if last in "+-" and len(statement_chars) >= 2:
            tail = "".join(statement_chars).rstrip()
            if tail.endswith(("++", "--")):
                return False
        return True
    ahead = text[newline_at + 1:].lstrip()
    return ahead.startswith(CONTINUATION_STARTS)


def _scan_statement(text: str, start: int) -> Tuple[int, Optional[ScanIssue]]:
    """Fim da instrucao iniciada em start (exclusivo) ou um problema."""
    stack: List[Tuple[str, int]] = []
    chars: List[str] = []
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            if end == -1:
                return i, ScanIssue(
                    f"Texto iniciado com {ch} sem fechamento",
                    i,
                    line_of(text, i),
                    "Feche o texto com a mesma aspa usada na abertura",
                )
            chars.append(ch)
            i = end
            continue
        if ch == "/":
            end = skip_comment(text, i)
            if end != i:
                i = end
                continue
        if ch in OPENERS:
            stack.append((ch, i))
        elif ch in CLOSERS:
            if not stack or stack[-1][0] != CLOSERS[ch]:
                return i, ScanIssue(f"'{ch}' sem abertura correspondente", i, line_of(text, i))
            stack.pop()
        elif not stack:
            if ch == ";":
                return i, None
            if ch == "\n" and not _continues(text, i, chars):
                return i, None
        chars.append(ch)
        i += 1
    if stack:
        opener, offset = stack[0]
        return n, ScanIssue(
            f"'{opener}' sem fechamento",
            offset,
            line_of(text, offset),
            f"Adicione '{OPENERS[opener]}' correspondente",
        )
    return n, None


def split_statements(text: str, base_offset: int = 0, source: Optional[str] = None) -> Tuple[List[Statement], List[ScanIssue]]:
    """
    Divide o script em instrucoes de nivel zero.

    Args:
        text: trecho do script
        base_offset: deslocamento de text dentro de source
        source: texto completo (para calcular linhas); padrao e o proprio text

    Returns:
        (instrucoes, problemas). Apos um problema a varredura recomeca
        na linha seguinte ao ponto em que a instrucao comecou.
    """
    full = source if source is not None else text
    statements: List[Statement] = []
    issues: List[ScanIssue] = []
    i = 0
    n = len(text)
    while i < n:
        while i < n and (text[i].isspace() or text[i] == ";"):
            i += 1
        if i >= n:
            break
        start = i
        end, issue = _scan_statement(text, start)
        if issue is not None:
            issue.offset += base_offset
            issue.line = line_of(full, issue.offset)
            issues.append(issue)
            newline = text.find("\n", start)
            i = n if newline == -1 else newline + 1
            continue
        chunk = text[start:end].rstrip()
        if chunk:
            statements.append(Statement(chunk, base_offset + start, line_of(full, base_offset + start)))
        i = end + 1
    return statements, issues


# ===== REGIAO DO TEMPLATE =====


@dataclass
class Region:
    start: int
    content_start: int
    content_end: int
    end: int


def find_template_regions(text: str) -> Tuple[List[Region], List[ScanIssue]]:
    """Regioes <template>...</template> de nivel zero, respeitando aninhamento."""
    regions: List[Region] = []
    issues: List[ScanIssue] = []
    depth = 0
    open_match: Optional[re.Match] = None
    for match in TEMPLATE_TAG_PATTERN.finditer(text):
        closing = bool(match.group(1))
        if not closing:
            if depth == 0:
                open_match = match
            depth += 1
            continue
        if depth == 0:
            issues.append(
                ScanIssue(
                    "</template> sem <template> correspondente",
                    match.start(),
                    line_of(text, match.start()),
                    "Remova a tag de fechamento ou adicione <template> antes dela",
                )
            )
            continue
        depth -= 1
        if depth == 0 and open_match is not None:
            regions.append(Region(open_match.start(), open_match.end(), match.start(), match.end()))
            open_match = None
    if depth > 0 and open_match is not None:
        issues.append(
            ScanIssue(
                "<template> sem </template> correspondente",
                open_match.start(),
                line_of(text, open_match.start()),
                "Feche o bloco com </template>",
            )
        )
        # o restante do arquivo e markup; nao deve ser lido como script
        regions.append(Region(open_match.start(), open_match.end(), len(text), len(text)))
    return regions, issues


def blank_out(text: str, start: int, end: int) -> str:
    """Substitui text[start:end] por espacos, preservando quebras de linha."""
    segment = re.sub(r"[^\n]", " ", text[start:end])
    return text[:start] + segment + text[end:]


# ===== REFERENCIAS $nome =====


def _template_literal_spans(text: str, start: int, end: int, spans: List[Tuple[int, int]]) -> int:
    i = start + 1
    while i < end:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if text.startswith("${", i):
            close = find_matching(text, i + 1)
            if close == -1:
                return end
            spans.extend(code_spans(text, i + 2, close))
            i = close + 1
            continue
        if ch == "`":
            return i + 1
        i += 1
    return end


def code_spans(text: str, start: int = 0, end: Optional[int] = None) -> List[Tuple[int, int]]:
    """Intervalos de text que sao codigo (fora de strings e comentarios)."""
    end = len(text) if end is None else end
    spans: List[Tuple[int, int]] = []
    segment = start
    i = start
    while i < end:
        ch = text[i]
        if ch in "'\"":
            spans.append((segment, i))
            close = skip_string(text, i)
            i = end if close == -1 or close > end else close
            segment = i
            continue
        if ch == "`":
            spans.append((segment, i))
            i = _template_literal_spans(text, i, end, spans)
            segment = i
            continue
        if ch == "/" and text.startswith(("//", "/*"), i):
            spans.append((segment, i))
            i = min(skip_comment(text, i), end)
            segment = i
            continue
        i += 1
    spans.append((segment, end))
    return sorted(span for span in spans if span[0] < span[1])


def iter_references(text: str) -> Iterator[Tuple[int, int, str]]:
    """Gera (inicio, fim, nome) para cada $nome em posicao de codigo."""
    for start, end in code_spans(text):
        for match in REFERENCE_PATTERN.finditer(text, start, end):
            yield match.start(), match.end(), match.group(1)


def referenced_names(text: str) -> List[str]:
    names: List[str] = []
    for _, _, name in iter_references(text):
        if name not in names:
            names.append(name)
    return names


def find_expression_end(text: str, start: int) -> int:
    """Fim de uma expressao iniciada em start: ; , quebra de linha ou fechamento externo."""
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in QUOTES:
            end = skip_string(text, i)
            i = n if end == -1 else end
            continue
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            if depth == 0:
                return i
            depth -= 1
        elif depth == 0 and ch in ";,\n":
            return i
        i += 1
    return n
