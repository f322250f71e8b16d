"""Adapters implementing core ports and serving probe reports."""
