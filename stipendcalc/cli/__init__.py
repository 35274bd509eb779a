"""Stipend Calc CLI."""
