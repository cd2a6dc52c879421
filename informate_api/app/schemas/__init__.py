"""
Pydantic schema definitions for API payloads.

Each domain (events, users) defines its own models for request and
response bodies; ``common`` holds the ``{success, message, data}``
envelope.  Schemas are separated from the SQL in ``services`` to
decouple API representation from persistence.
"""
