"""Service layer — block construction and regeneration runs.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
