"""Nos da AST e tipos de resultado do compilador MTM."""
