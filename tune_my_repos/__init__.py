"""Governance and compliance analysis for GitHub repositories."""

__version__ = "0.1.0"
