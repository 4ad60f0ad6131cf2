"""Core business logic for the short link service."""

from .shortcode import ShortCodeGenerator, generate_code
from .service import LinkService

__all__ = ["ShortCodeGenerator", "generate_code", "LinkService"]
