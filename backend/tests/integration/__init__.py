"""
Integration tests package.

Runs the service container and the Flask API over an in-memory SQLite
document store.
"""
