"""Determinism verification of cache artifacts."""
