from slowapi import Limiter
from slowapi.util import get_remote_address

from twex.config import get_settings

# Module-level so route decorators can reference it; create_app toggles
# `enabled` from the settings it is given.
limiter = Limiter(key_func=get_remote_address)


def auth_limit() -> str:
    return get_settings().AUTH_RATE_LIMIT
