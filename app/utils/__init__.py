"""Инициализация утилит."""

from .phone import format_phone, validate_phone
from .text import escape_html, format_price, sanitize_text

__all__ = [
    "format_phone",
    "validate_phone",
    "escape_html",
    "format_price",
    "sanitize_text",
]
