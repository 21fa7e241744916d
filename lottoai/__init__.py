"""Lottery history analysis and AI-assisted number suggestions."""
