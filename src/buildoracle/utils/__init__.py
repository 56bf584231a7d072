"""Filesystem and logging utilities."""
