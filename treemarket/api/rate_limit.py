"""
Rate limiting for write endpoints.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from treemarket.config import settings


limiter = Limiter(key_func=get_remote_address)

WRITE_LIMIT = f"{settings.rate_limit_requests}/minute"
