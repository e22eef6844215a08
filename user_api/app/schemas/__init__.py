"""
Pydantic schema definitions for API payloads.

Schemas are separated from the table definition in ``core.db`` to
decouple the API representation from persistence.
"""
