"""Estrategias de geracao de codigo por framework alvo."""
