"""
Trade setup engine.

Turns a normalized per-instrument catalyst snapshot into a trade
recommendation: signal, entry/stop/target ladder, risk-sized position and a
compliance grade.
"""

__version__ = "1.0.0"
