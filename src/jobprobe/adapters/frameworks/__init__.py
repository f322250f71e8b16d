"""Framework adapters serving probe reports over HTTP."""
