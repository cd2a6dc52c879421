"""
Endpoint subpackage for API v1.

Each module defines an ``APIRouter`` for one domain (events, bookmarks,
auth).  The routers are aggregated in ``router.py``.
"""
