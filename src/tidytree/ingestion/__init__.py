"""Path policy, hashing, and traversal."""

from .detectors import DEFAULT_CHUNK_SIZE, HashService
from .policy import PathPolicy

__all__ = ["DEFAULT_CHUNK_SIZE", "HashService", "PathPolicy"]
