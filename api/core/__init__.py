"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (DB pool, SQL
helpers). Feature-specific SQL and request logic lives in the feature package
(e.g. `sites/`).
"""
