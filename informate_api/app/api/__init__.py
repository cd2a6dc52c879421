"""
API routers.

Endpoints are grouped by version under ``api/<version>/``.
"""
