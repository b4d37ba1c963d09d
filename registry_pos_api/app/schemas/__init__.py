"""
Pydantic schema definitions for API payloads.

Each domain (products, registry, auth) defines its own Pydantic
models for request and response bodies.  Schemas are separated from
the storage layer so the same models travel through both the SQLite
and the JSON-file stores.
"""
