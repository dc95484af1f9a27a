"""
Сборка custom_fields_values для контакта и сделки.

Каждое поле добавляется, только если задан его ID в настройках и в вебхуке
есть значение. Ошибка в одном поле не мешает остальным.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .resolver import is_missing, resolve
from .types import FieldRef, Transform

logger = logging.getLogger(__name__)

# Тип телефона/email в amoCRM: WORK, MOB, HOME, PRIV, OTHER
ENUM_WORK = "WORK"


@dataclass(frozen=True)
class CustomFieldSource:
    name: str
    ref: Optional[FieldRef]  # None - поле не настроено
    path: str
    transform: Optional[Transform] = None
    enum_code: Optional[str] = None


def _build_entry(source: CustomFieldSource, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if source.ref is None:
        return None
    value = resolve(payload, source.path)
    if not value:
        return None
    if source.transform is not None:
        value = source.transform(value, payload)
        if is_missing(value):
            return None

    entry_value: Dict[str, Any] = {"value": value}
    if source.enum_code:
        entry_value["enum_code"] = source.enum_code
    return {**source.ref.as_entry_key(), "values": [entry_value]}


class CustomFieldBundle:
    """
    Transform для поля custom_fields_values (источник MULTIPLE).
    Возвращает список записей или None, если список пуст.
    """

    def __init__(self, entity: str, sources: Sequence[CustomFieldSource]):
        self.entity = entity
        self.sources = tuple(sources)

    @property
    def is_configured(self) -> bool:
        return any(source.ref is not None for source in self.sources)

    def __call__(self, value: Any, payload: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        entries = []
        for source in self.sources:
            try:
                entry = _build_entry(source, payload)
            except Exception as e:
                logger.warning(f"⚠️ Пропускаем кастомное поле {self.entity}.{source.name}: {e}")
                continue
            if entry is not None:
                entries.append(entry)
        return entries or None
