"""
Repository tests package.

Runs the store-backed repositories against an in-memory SQLite database.
"""
