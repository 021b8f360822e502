"""Content extraction for supported file kinds."""
