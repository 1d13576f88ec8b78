"""Utilities: storage, configuration, logging, errors."""

from .config import AppConfig
from .storage import LocalStorage, HistoryDatabase, PreferenceStore

__all__ = ["AppConfig", "LocalStorage", "HistoryDatabase", "PreferenceStore"]
