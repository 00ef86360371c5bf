"""Application composition layer.

Wires settings, the pooled REST gateway and per-unit-of-work providers into
the objects an identity host asks for.
"""
