"""
Service layer abstraction.

Each service encapsulates business logic for a domain (events,
bookmarks, users) on top of the SQLite helpers in ``core.db``.  API
handlers only translate HTTP input into service calls; services raise
the errors defined in ``core.errors``.
"""
