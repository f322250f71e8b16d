"""Session adapters implementing ProbeSessionPort."""

from jobprobe.adapters.session.in_memory import InMemorySession
from jobprobe.adapters.session.local import LocalSession

__all__ = ["InMemorySession", "LocalSession"]
