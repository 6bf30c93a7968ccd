"""Очистка текста, экранирование для Telegram и форматирование сумм."""

import re
from typing import Any

from aiogram.utils.text_decorations import html_decoration

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")


def sanitize_text(value: str, max_length: int) -> str:
    """
    Обрезать пробелы, длину и убрать < и > (минимальная защита от HTML-инъекций).

    Пример:
        sanitize_text("  <b>Ali</b> ", 100)  # "bAli/b"
    """
    return _ANGLE_BRACKETS_RE.sub("", value.strip()[:max_length])


def escape_html(value: Any) -> str:
    """Текст клиента для сообщения с parse_mode="HTML": & < > экранируются."""
    return html_decoration.quote(str(value))


def format_price(amount: int) -> str:
    """30000 -> "30 000 so'm" """
    return f"{amount:,}".replace(",", " ") + " so'm"
