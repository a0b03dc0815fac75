"""
Shared Flask extension instances.

Created as a separate module to avoid circular imports when route
blueprints need access to extensions that are initialised in the
application factory.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Storage is read from RATELIMIT_STORAGE_URI when init_app() runs, so
# production can point it at Redis while development stays in memory.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["100 per minute"],
)
