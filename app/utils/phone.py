# app/utils/phone.py
"""Телефоны Узбекистана: +998 и 9 цифр."""

import re
from typing import Optional

PHONE_RE = re.compile(r"\+?998[0-9]{9}", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s")


def validate_phone(phone: str) -> bool:
    """
    True если номер подходит под +998XXXXXXXXX (плюс необязателен,
    пробелы в любом месте игнорируются).
    """
    return bool(PHONE_RE.fullmatch(_WHITESPACE_RE.sub("", phone)))


def format_phone(phone: str) -> Optional[str]:
    """
    Привести номер к виду +998XXXXXXXXX.

    Пример:
        format_phone("998 90 123 45 67")  # "+998901234567"
        format_phone("12345")             # None
    """
    clean = _WHITESPACE_RE.sub("", phone)
    if not PHONE_RE.fullmatch(clean):
        return None
    return clean if clean.startswith("+") else f"+{clean}"
