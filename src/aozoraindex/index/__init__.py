"""Persistence, search and the collection pipeline."""
