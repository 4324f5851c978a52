"""Analise de componentes MTM: script, template e fragmentos via Lark."""
