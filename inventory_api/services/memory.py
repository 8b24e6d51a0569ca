import threading
from collections import deque
from typing import Deque, Dict, List

from pydantic import BaseModel

DEFAULT_MAX_EXCHANGES = 5


class Exchange(BaseModel):
    user: str
    bot: str


class ConversationMemory:
    """
    Short-term, process-local chat history: the last few exchanges per user.

    Nothing is persisted; history is gone when the process exits. ``lock(user_id)``
    returns a per-user lock that callers hold for a whole read-generate-append
    cycle so two requests from the same user cannot overwrite each other's
    exchange. Different users never share a lock.

    Entries (history and lock) are kept for every user seen until the process
    exits; nothing is evicted per user.
    """

    def __init__(self, max_exchanges: int = DEFAULT_MAX_EXCHANGES):
        if max_exchanges < 1:
            raise ValueError("max_exchanges must be at least 1")
        self.max_exchanges = max_exchanges
        self._history: Dict[str, Deque[Exchange]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock(self, user_id: str) -> threading.Lock:
        with self._guard:
            user_lock = self._locks.get(user_id)
            if user_lock is None:
                user_lock = self._locks[user_id] = threading.Lock()
            return user_lock

    def history(self, user_id: str) -> List[Exchange]:
        """Oldest first."""
        with self._guard:
            return list(self._history.get(user_id, ()))

    def append(self, user_id: str, user_text: str, bot_text: str) -> None:
        with self._guard:
            exchanges = self._history.get(user_id)
            if exchanges is None:
                exchanges = self._history[user_id] = deque(maxlen=self.max_exchanges)
            # deque drops the oldest exchange once maxlen is reached
            exchanges.append(Exchange(user=user_text, bot=bot_text))

