"""Live filesystem watching."""

from .service import ChangeWatcher, ObserverFactory, OutcomeCallback

__all__ = ["ChangeWatcher", "ObserverFactory", "OutcomeCallback"]
