"""Corpus index, directory walker, search and persistence."""
