"""
Получение значения из вложенного payload по пути вида 'call.agreements.client_name'.
"""
from typing import Any

# Маркеры источника в дескрипторе поля, а не реальные пути в payload
STATIC_SOURCE = "static"
MULTIPLE_SOURCE = "multiple"


class _NotFound:
    """Значение по пути отсутствует (в отличие от явного null в JSON)"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


def is_missing(value: Any) -> bool:
    """None (null в JSON) и NOT_FOUND считаются отсутствующим значением"""
    return value is None or value is NOT_FOUND


def resolve(payload: Any, path: str) -> Any:
    """
    Проходит по payload сегмент за сегментом.

    Никогда не бросает исключений: если промежуточный ключ отсутствует или
    значение по пути нельзя обойти (строка, число, None), возвращает NOT_FOUND.
    Числовые сегменты работают как индексы списков.

    Args:
        payload: Корневой объект вебхука
        path: Путь через точку

    Returns:
        Значение или NOT_FOUND
    """
    if not path or path in (STATIC_SOURCE, MULTIPLE_SOURCE):
        return NOT_FOUND

    current = payload
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return NOT_FOUND
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return NOT_FOUND
            current = current[index]
        else:
            return NOT_FOUND
    return current
