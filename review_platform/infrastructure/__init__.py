"""Infrastructure modules for the review platform.

Provides the async database engine and session management used by the
SQL-backed upload catalog.
"""
