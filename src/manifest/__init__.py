"""Build manifest loading."""
