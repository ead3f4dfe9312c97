"""
purlkit — integration test package

File: tests/integration/__init__.py
Last updated: 2026-10-17

Purpose
- Test package marker file.

Functional requirements
- Must not import purlkit at import time; keep test collection fast.
- Offline only.
"""
