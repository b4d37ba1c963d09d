"""
Service layer abstraction.

Each service encapsulates business logic for a domain and works on a
``Store`` passed in by the caller, so the same logic runs against the
SQLite and the JSON-file backends without changing API handlers.
"""
