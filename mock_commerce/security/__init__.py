# Request authentication

from .auth import Caller, require_user, require_admin

__all__ = ["Caller", "require_user", "require_admin"]
