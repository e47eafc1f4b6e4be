"""Cached token record.

The token store reader lives in ``vault_login_core.cache.reader``; it depends
on the sink package, which itself depends on the record defined here.
"""

from .token import GRACE_PERIOD_SECONDS, CachedToken

__all__ = [
    "GRACE_PERIOD_SECONDS",
    "CachedToken",
]
