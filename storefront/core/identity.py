"""Identity tracking for cart partitioning"""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

GUEST_KEY = "guest"

IdentityListener = Callable[[Optional[str], Optional[str]], None]


def identity_key(user_id: Optional[str]) -> str:
    """Storage key for an identity; guests share one key, users never collide with it"""
    if user_id is None:
        return GUEST_KEY
    return f"user:{user_id}"


class IdentityResolver:
    """
    Holds the current identity (None for guest) and notifies listeners
    whenever it changes.

    Listeners receive (previous, current) and run synchronously, in
    subscription order, before set_identity returns.
    """

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> Optional[str]:
        return self._user_id

    @property
    def is_guest(self) -> bool:
        return self._user_id is None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_identity(self, user_id: Optional[str]) -> bool:
        """Change the current identity. Returns False if nothing changed."""
        if user_id == self._user_id:
            return False

        previous = self._user_id
        self._user_id = user_id
        logger.info(f"Identity changed: {identity_key(previous)} -> {identity_key(user_id)}")

        for listener in list(self._listeners):
            listener(previous, user_id)
        return True

    def login(self, user_id: str) -> bool:
        return self.set_identity(user_id)

    def logout(self) -> bool:
        return self.set_identity(None)
