"""Structured logging setup."""
