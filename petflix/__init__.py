"""Petflix notification delivery service."""
