"""Blob store backends."""
