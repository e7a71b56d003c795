"""Descriptor parsing for module artifacts."""
