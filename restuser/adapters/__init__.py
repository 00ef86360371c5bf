"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations of the directory port (pooled HTTP
    transport, REST gateway, and an in-memory test double).

Dependencies:
    Individual submodules depend on ``requests`` and the domain protocol
    definitions.

Call context:
    Imported by ``restuser.app.factory`` for runtime wiring and by tests for
    mocks and transport-level behavior verification.
"""
