"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks the feature packages use (DB wiring,
settings, logging). Keep resource-specific SQL and request handling in the
corresponding feature package (e.g. `users/`).
"""
