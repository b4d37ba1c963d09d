"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  Each domain (products, registry, auth) has its schemas in
``schemas``, its business logic in ``services`` and its router in
``api/v1/endpoints``.  Storage, configuration, logging and the device
gate live in ``core``.
"""

from .main import app  # noqa: F401
