"""Resolve chart references into locally cached chart archives."""
