"""
Club statistics backend test suite

Tests are organized into:
- unit/: Tests for individual functions and services
- integration/: Tests for API endpoints against an in-memory store
- fixtures/: Reusable test data and setup
"""
