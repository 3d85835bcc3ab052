"""Oxygen Salesforce proxy: lead capture and conversion backend."""

__version__ = "1.0.0"
