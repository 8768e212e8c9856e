"""Top-level package for the Commute Impact Calculator.

This package turns a commuter's answers (transport mode, vehicle,
route and travel pattern) into a bounded impact score, monthly
cost/emissions/time estimates and ranked alternative suggestions.
"""

__version__ = "1.0.0"
