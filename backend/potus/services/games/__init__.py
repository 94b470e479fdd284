"""Game domain services: judging, round lifecycle, scoring and winners.

This package contains the engine that HTTP routes call into, keeping
request handling separated from core game mechanics. ``GameCoordinator``
is the entry point; the other modules are the pieces it sequences.
"""
