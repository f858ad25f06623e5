"""
Unit tests package.

Contains isolated tests for entities and services, with repositories,
sinks and the clock replaced by mocks from tests.factories.
"""
