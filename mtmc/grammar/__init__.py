"""Gramatica Lark dos fragmentos de script MTM."""
