"""Stipend Calc - Travel nurse offer comparison and stipend tax tools."""

__version__ = "0.3.0"
