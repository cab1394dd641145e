"""Bundled per-topic question banks."""
