"""
Применение EntityMapping к данным вебхука.

Политика ошибок: поле, которое не удалось вычислить, пропускается с
предупреждением в логе, остальные поля считаются как обычно. Наружу
пробрасывается только ConfigurationError (не задано обязательное static-значение).
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ConfigurationError, FieldComputationError
from .resolver import NOT_FOUND, is_missing, resolve
from .types import EntityMapping, FieldDescriptor, SourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldResult:
    name: str
    value: Any = NOT_FOUND
    error: Optional[FieldComputationError] = None

    @property
    def has_value(self) -> bool:
        return self.error is None and not is_missing(self.value)


def check_required(mapping: EntityMapping) -> None:
    """Проверяет обязательные static-поля до вычисления остальных полей"""
    for name, descriptor in mapping.items():
        if descriptor.required and descriptor.source is SourceKind.STATIC and is_missing(descriptor.value):
            setting = descriptor.setting or name
            raise ConfigurationError(
                f"{setting} не установлен в переменных окружения. "
                f"Это обязательное поле '{name}' для {mapping.name}.",
                setting=descriptor.setting,
            )


def _raw_value(payload: Dict[str, Any], descriptor: FieldDescriptor) -> Any:
    if descriptor.source is SourceKind.STATIC:
        return descriptor.value
    if descriptor.source is SourceKind.MULTIPLE:
        return descriptor.transform(None, payload)

    raw = resolve(payload, descriptor.path)
    if descriptor.transform is not None:
        return descriptor.transform(raw, payload)
    return raw


def compute_field(payload: Dict[str, Any], mapping_name: str, name: str, descriptor: FieldDescriptor) -> FieldResult:
    try:
        value = _raw_value(payload, descriptor)
    except Exception as e:
        return FieldResult(name, error=FieldComputationError(mapping_name, name, e))

    if is_missing(value):
        value = NOT_FOUND if descriptor.default is None else descriptor.default
    return FieldResult(name, value=value)


def apply_mapping(payload: Dict[str, Any], mapping: EntityMapping) -> Dict[str, Any]:
    """
    Собирает плоский словарь полей amoCRM.

    Args:
        payload: Данные вебхука (не изменяются)
        mapping: Правила для сущности

    Returns:
        Поля со значениями; поля без значения в результат не попадают
    """
    check_required(mapping)

    result: Dict[str, Any] = {}
    for name, descriptor in mapping.items():
        field_result = compute_field(payload, mapping.name, name, descriptor)
        if field_result.error is not None:
            logger.warning(f"⚠️ Ошибка при обработке поля {mapping.name}.{name}: {field_result.error.cause}")
            continue
        if field_result.has_value:
            result[name] = field_result.value
    return result
