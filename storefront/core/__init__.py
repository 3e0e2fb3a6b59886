# Core modules

from .config import Settings, get_settings
from .identity import IdentityResolver, identity_key, GUEST_KEY

__all__ = ["Settings", "get_settings", "IdentityResolver", "identity_key", "GUEST_KEY"]
