"""Infrastructure layer — library persistence, graph engine, symbol store.

This layer depends on stdlib, the domain layer and third-party libs
(SQLAlchemy, NetworkX, SymPy).
It must never import from services, commands, or output.
"""
