"""
Per-domain repository modules for database access.

Route handlers and services call these functions; each takes the request's
`Session` as first argument and commits its own writes unless noted.
"""
