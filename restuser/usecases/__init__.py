"""Use-case layer for host-facing user storage workflows.

Modules here coordinate domain objects and the directory port without
performing transport I/O directly.
"""
