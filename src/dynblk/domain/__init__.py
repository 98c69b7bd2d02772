"""Domain layer — block kinds, row expressions, capabilities and errors.

This layer depends only on stdlib, pydantic and sympy.
It must never import from services, infrastructure, commands, or config.
"""
