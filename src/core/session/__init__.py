from .store import SessionStore, new_session_id

__all__ = ["SessionStore", "new_session_id"]
