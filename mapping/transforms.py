"""
Функции преобразования значений вебхука в значения полей amoCRM.

Все функции чистые: (value, payload) -> значение или None.
"""
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .resolver import resolve

# amoCRM обрезает длинные названия сделок
LEAD_NAME_MAX_LENGTH = 250
LEAD_NAME_PREFIX = "Lead from AI manager"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FRACTION_RE = re.compile(r"(\d{2}:\d{2}:\d{2}\.)(\d+)")


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def lead_name(value: Any, payload: Dict[str, Any]) -> str:
    """
    Название сделки: договорённости из звонка, иначе имя клиента или телефон.
    """
    if value:
        text = _as_text(value)
        if len(text) > LEAD_NAME_MAX_LENGTH:
            return text[:LEAD_NAME_MAX_LENGTH - 3] + "..."
        return text

    client_name = resolve(payload, "call.agreements.client_name")
    if client_name:
        return f"{LEAD_NAME_PREFIX}: {client_name}"
    phone = resolve(payload, "contact.phone")
    if phone:
        return f"{LEAD_NAME_PREFIX}: {phone}"
    return LEAD_NAME_PREFIX


def contact_name(value: Any, payload: Dict[str, Any]) -> str:
    if value:
        name = _as_text(value).strip()
        if name:
            return name

    phone = resolve(payload, "contact.phone")
    if phone:
        return f"Contact {phone}"
    return "Unnamed contact"


def parse_price(value: Any, payload: Optional[Dict[str, Any]] = None) -> Optional[int]:
    """
    Цена сделки целым числом.
    "1500 руб" -> 1500, 1500.9 -> 1500, "договорная" -> None.
    """
    if not value or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else None
    return None


def format_call_duration(value: Any, payload: Optional[Dict[str, Any]] = None) -> str:
    """
    Длительность звонка из миллисекунд в строку "M min S sec".
    Нечисловое значение -> ValueError/TypeError.
    """
    if isinstance(value, bool):
        raise TypeError(f"Некорректная длительность звонка: {value!r}")
    duration_ms = float(value)
    if not math.isfinite(duration_ms):
        raise ValueError(f"Некорректная длительность звонка: {value!r}")
    minutes = int(duration_ms // 60000)
    seconds = int((duration_ms % 60000) // 1000)
    return f"{minutes} min {seconds} sec"


def to_epoch_seconds(value: Any, payload: Optional[Dict[str, Any]] = None) -> int:
    """
    Время начала звонка в unix timestamp (секунды).

    Число трактуется как миллисекунды, строка - как ISO 8601.
    Время без таймзоны считается UTC.
    """
    if isinstance(value, bool):
        raise TypeError(f"Некорректное время звонка: {value!r}")
    if isinstance(value, (int, float)):
        return int(value // 1000)
    if not isinstance(value, str):
        raise TypeError(f"Некорректное время звонка: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat до 3.11 понимает только 3 или 6 знаков долей секунды
    text = _FRACTION_RE.sub(lambda m: m.group(1) + m.group(2)[:6].ljust(6, "0"), text)
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return math.floor(dt.timestamp())


def normalize_phone(value: Any, payload: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Телефон для amoCRM: только цифры, код страны 7 и '+' в начале.
    8XXXXXXXXXX -> +7XXXXXXXXXX, 9XXXXXXXXX -> +79XXXXXXXXX.
    """
    digits = re.sub(r"\D+", "", _as_text(value))
    if not digits:
        return None
    if digits.startswith("8") and len(digits) == 11:
        digits = "7" + digits[1:]
    if digits.startswith("7"):
        return f"+{digits}"
    return f"+7{digits}"
