"""Core domain: event correlation, metric channels and report documents."""
