"""Common utilities for the short link service."""

from .validators import is_valid_url, is_valid_long_url, is_valid_short_code
from .url_builder import build_short_url, normalize_path_prefix
from .network import default_base_url, get_local_ip
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_valid_long_url",
    "is_valid_short_code",
    "build_short_url",
    "normalize_path_prefix",
    "default_base_url",
    "get_local_ip",
    "setup_logging",
]
