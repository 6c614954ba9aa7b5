"""Reconciliation, prefetch, interception and lifecycle."""
