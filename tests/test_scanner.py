"""
test_scanner.py - Testes da varredura de texto ciente de delimitadores

Proposito:
    Validar divisao de instrucoes, casamento de chaves, divisao por
    virgulas de nivel zero e localizacao da regiao <template>.
"""

from __future__ import annotations

from mtmc.parser.scanner import (
    blank_out,
    check_balance,
    find_assignment,
    find_matching,
    find_template_regions,
    find_top_level,
    referenced_names,
    split_statements,
    split_top_level,
    strip_comments,
)


# =============================================================================
# INSTRUCOES
# =============================================================================


def test_split_statements_by_newline():
    statements, issues = split_statements("$a! = 1\n$b! = 2\n")
    assert issues == []
    assert [s.text for s in statements] == ["$a! = 1", "$b! = 2"]
    assert [s.line for s in statements] == [1, 2]


def test_split_statements_by_semicolon():
    statements, _ = split_statements("$a! = 1; $b! = 2")
    assert [s.text for s in statements] == ["$a! = 1", "$b! = 2"]


def test_split_statements_joins_continuation_lines():
    statements, _ = split_statements("$total = $a +\n  $b\n$c! = 3")
    assert len(statements) == 2
    assert statements[0].text == "$total = $a +\n  $b"
    assert statements[1].line == 3


def test_split_statements_keeps_block_body_together():
    text = "$inc = () => {\n  $count++\n}\n$x! = 1"
    statements, _ = split_statements(text)
    assert len(statements) == 2
    assert statements[0].text.endswith("}")


def test_split_statements_postfix_increment_ends_statement():
    statements, _ = split_statements("$a++\n$b! = 1")
    assert [s.text for s in statements] == ["$a++", "$b! = 1"]


def test_split_statements_reports_unclosed_string_and_recovers():
    statements, issues = split_statements("$a = 'aberto\n$b! = 2")
    assert len(issues) == 1
    assert "sem fechamento" in issues[0].message
    assert issues[0].line == 1
    assert [s.text for s in statements] == ["$b! = 2"]


def test_split_statements_uses_source_for_lines():
    source = "\n\n$a! = 1"
    statements, _ = split_statements(source[2:], base_offset=2, source=source)
    assert statements[0].line == 3


# =============================================================================
# DELIMITADORES
# =============================================================================


def test_find_matching_skips_strings():
    text = "{ a: '}' }"
    assert find_matching(text, 0) == len(text) - 1


def test_find_matching_unbalanced():
    assert find_matching("(a, [b)", 0) == -1


def test_check_balance_ok():
    assert check_balance("f(a, [1, 2], { b: '(' })") is None


def test_check_balance_stray_closer():
    issue = check_balance("(a]")
    assert issue is not None
    assert issue.message == "']' sem abertura correspondente"


def test_check_balance_missing_closer():
    issue = check_balance("[1, 2")
    assert issue.message == "'[' sem fechamento"
    assert issue.suggestion == "Adicione ']' correspondente"


def test_split_top_level_ignores_nested_commas():
    assert split_top_level("a, f(b, c), [d, e]") == ["a", " f(b, c)", " [d, e]"]


def test_find_top_level_finds_opening_paren():
    assert find_top_level("export function helper() {}", "(") == 22


def test_find_top_level_skips_nested_target():
    assert find_top_level("f(a = 1) = 2", "=") == 9


def test_find_assignment_ignores_comparisons_and_arrows():
    assert find_assignment("$a == 1") == -1
    assert find_assignment("$f => 1") == -1
    text = "$x! = $a >= 1"
    assert find_assignment(text) == 4


def test_strip_comments_keeps_strings():
    assert strip_comments("'http://x' // comentario") == "'http://x'"
    assert strip_comments("1 /* bloco */ + 2") == "1  + 2"


# =============================================================================
# REGIAO DO TEMPLATE
# =============================================================================


def test_find_template_region_simple():
    text = "$a! = 1\n<template><p>x</p></template>"
    regions, issues = find_template_regions(text)
    assert issues == []
    assert len(regions) == 1
    region = regions[0]
    assert text[region.content_start:region.content_end] == "<p>x</p>"


def test_find_template_region_nested():
    text = "<template><template>x</template></template>"
    regions, _ = find_template_regions(text)
    assert len(regions) == 1
    region = regions[0]
    assert text[region.content_start:region.content_end] == "<template>x</template>"
    assert region.end == len(text)


def test_find_template_region_unclosed():
    regions, issues = find_template_regions("<template><p>x</p>")
    assert len(issues) == 1
    assert issues[0].message == "<template> sem </template> correspondente"
    assert regions[0].content_end == len("<template><p>x</p>")


def test_find_template_region_stray_close():
    _, issues = find_template_regions("</template>")
    assert issues[0].message == "</template> sem <template> correspondente"


def test_blank_out_preserves_lines():
    text = "a\n<template>\nx\n</template>\nb"
    start = text.index("<")
    end = text.rindex(">") + 1
    blanked = blank_out(text, start, end)
    assert blanked.count("\n") == text.count("\n")
    assert blanked.strip().split() == ["a", "b"]


# =============================================================================
# REFERENCIAS
# =============================================================================


def test_referenced_names_skip_strings_and_comments():
    assert referenced_names("$a + '$b' // $c") == ["a"]


def test_referenced_names_inside_template_literal():
    assert referenced_names("`total: ${$count}` + $count") == ["count"]


def test_referenced_names_ignore_member_access():
    assert referenced_names("obj.$x + $y") == ["y"]


def test_referenced_names_include_spread():
    assert referenced_names("[...$a, { ...$b }, x.$c]") == ["a", "b"]
