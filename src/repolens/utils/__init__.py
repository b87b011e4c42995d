"""Utility modules for repolens."""
