"""Valuation, trade search and calibration engine for dynasty fantasy leagues."""

__version__ = "0.1.0"
