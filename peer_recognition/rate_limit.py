"""
peer_recognition/rate_limit.py
Shared slowapi limiter for write endpoints
"""
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from peer_recognition.config.feature_flags import get_bool_env

WRITE_LIMIT = os.getenv("RATE_LIMIT_WRITES", "120/minute")

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_bool_env("RATE_LIMIT_ENABLED", True),
)
