"""
Assembly Tool Package

A configuration-validation and pricing engine for component assemblies.
Resolves selectable components through compatibility rules, prices
selections through ordered pricing rules, and issues time-bounded quotes.
"""

__version__ = "1.0.0"
