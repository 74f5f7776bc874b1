"""Operational tooling for evolution runs."""
