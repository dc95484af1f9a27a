"""
Настройки маппинга: ID воронки, статуса и кастомных полей amoCRM.

Читаются из окружения один раз и передаются в сборщики маппингов явно.
"""
import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError
from .types import FieldRef

logger = logging.getLogger(__name__)

_FIELD_CODE_RE = re.compile(r"^[A-Za-z_]+$")


def parse_int_setting(name: str, raw: Optional[str]) -> Optional[int]:
    """Пусто -> None, не число -> ConfigurationError"""
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f'Некорректный формат {name}: "{raw}". Должно быть число.', setting=name) from None


def parse_field_ref(name: str, raw: Optional[str]) -> Optional[FieldRef]:
    """
    ID кастомного поля ("123456") или код стандартного поля ("PHONE").
    Некорректное значение отключает поле с предупреждением.
    """
    if raw is None or not raw.strip():
        return None
    value = raw.strip()
    if value.isdigit():
        return FieldRef(field_id=int(value))
    if _FIELD_CODE_RE.match(value):
        return FieldRef(field_code=value.upper())
    logger.warning(f"⚠️ {name}={value!r} не похоже на ID или код поля, поле отключено")
    return None


@dataclass(frozen=True)
class MappingSettings:
    pipeline_id: Optional[int] = None
    status_id: Optional[int] = None

    # Контакт
    phone_field: Optional[FieldRef] = None
    email_field: Optional[FieldRef] = None
    contact_company_field: Optional[FieldRef] = None
    contact_city_field: Optional[FieldRef] = None

    # Сделка
    agreements_field: Optional[FieldRef] = None
    client_facts_field: Optional[FieldRef] = None
    sms_text_field: Optional[FieldRef] = None
    call_duration_field: Optional[FieldRef] = None
    call_started_field: Optional[FieldRef] = None
    call_record_url_field: Optional[FieldRef] = None
    call_history_field: Optional[FieldRef] = None
    agreements_time_field: Optional[FieldRef] = None
    region_field: Optional[FieldRef] = None
    company_field: Optional[FieldRef] = None

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "MappingSettings":
        def ref(name: str) -> Optional[FieldRef]:
            return parse_field_ref(name, env.get(name))

        return cls(
            pipeline_id=parse_int_setting("AMOCRM_PIPELINE_ID", env.get("AMOCRM_PIPELINE_ID")),
            status_id=parse_int_setting("AMOCRM_STATUS_ID", env.get("AMOCRM_STATUS_ID")),
            phone_field=ref("AMOCRM_PHONE_FIELD_ID"),
            email_field=ref("AMOCRM_EMAIL_FIELD_ID"),
            contact_company_field=ref("AMOCRM_CONTACT_COMPANY_FIELD_ID"),
            contact_city_field=ref("AMOCRM_CONTACT_CITY_FIELD_ID"),
            agreements_field=ref("AMOCRM_AGREEMENTS_FIELD_ID"),
            client_facts_field=ref("AMOCRM_CLIENT_FACTS_FIELD_ID"),
            sms_text_field=ref("AMOCRM_SMS_TEXT_FIELD_ID"),
            call_duration_field=ref("AMOCRM_CALL_DURATION_FIELD_ID"),
            call_started_field=ref("AMOCRM_CALL_STARTED_FIELD_ID"),
            call_record_url_field=ref("AMOCRM_CALL_RECORD_URL_FIELD_ID"),
            call_history_field=ref("AMOCRM_CALL_HISTORY_FIELD_ID"),
            agreements_time_field=ref("AMOCRM_AGREEMENTS_TIME_FIELD_ID"),
            region_field=ref("AMOCRM_REGION_FIELD_ID"),
            company_field=ref("AMOCRM_COMPANY_FIELD_ID"),
        )
