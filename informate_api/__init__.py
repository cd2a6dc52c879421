"""
Top-level package for the Informate API.

This file makes ``informate_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``informate_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
