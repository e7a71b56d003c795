"""Artifact fetchers: the interface and its local/remote implementations."""
