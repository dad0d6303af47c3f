"""Catalog discovery and detail-page resolution."""
