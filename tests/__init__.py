"""
Test Suite

Contains unit tests for the backend system.

Structure:
- tests/unit/: Tests for individual components (normalizers, joiner, assembler,
  notifier, managers, provider clients with mocked HTTP, API endpoints)
- tests/unit/conftest.py: shared catalog fixtures and in-memory provider doubles

Uses pytest with pytest-asyncio for testing async functionality.
"""
