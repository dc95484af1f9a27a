"""
Ошибки движка маппинга и валидации входящего вебхука.
"""
from typing import Optional


class ConfigurationError(Exception):
    """Обязательная настройка не задана или задана некорректно"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message)
        self.setting = setting


class FieldComputationError(Exception):
    """
    Не удалось вычислить одно поле маппинга.

    Никогда не пробрасывается наружу из apply_mapping: поле просто
    пропускается, а ошибка пишется в лог.
    """

    def __init__(self, mapping_name: str, field_name: str, cause: Exception):
        super().__init__(f"{mapping_name}.{field_name}: {cause}")
        self.mapping_name = mapping_name
        self.field_name = field_name
        self.cause = cause


class PayloadValidationError(Exception):
    """Вебхук не содержит обязательных веток contact / call"""
