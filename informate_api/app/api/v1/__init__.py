"""
Version 1 of the API.

This subpackage bundles the endpoints consumed by the Informate mobile
app.  Breaking changes should be introduced in a new version subpackage
(e.g. ``v2``).
"""
