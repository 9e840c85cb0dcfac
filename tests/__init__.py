"""Test package marker so suites can import ``tests.conftest`` helpers."""
