from daydigest.history.store import HistoryStore

__all__ = ["HistoryStore"]
