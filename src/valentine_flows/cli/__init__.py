"""Command-line interface for valentine-flows.

Every command prints a single JSON envelope on stdout:
``{"success": true, "data": ...}`` or
``{"success": false, "error": ..., "data": {"error_code": ...}}``.
"""
