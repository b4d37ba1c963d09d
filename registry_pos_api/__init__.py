"""
Top-level package for the Registry POS API.

This file makes ``registry_pos_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``registry_pos_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
