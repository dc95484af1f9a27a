from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mapping.entities import build_contact_fields, build_lead_fields
from mapping.errors import PayloadValidationError
from mapping.settings import MappingSettings
from services.amocrm import AmoCRMError, AmoCRMService, amocrm_service

from .types import CallSyncResult

logger = logging.getLogger(__name__)


def validate_webhook_payload(payload: Any) -> Dict[str, Any]:
    """
    Минимальная проверка вебхука: JSON-объект с ветками contact и call.
    Сами ветки могут быть пустыми объектами.
    """
    if not isinstance(payload, dict) or not payload:
        raise PayloadValidationError("Данные не предоставлены. Отправьте JSON в теле запроса")
    if not isinstance(payload.get("contact"), dict) or not isinstance(payload.get("call"), dict):
        raise PayloadValidationError("Отсутствуют обязательные поля: contact или call")
    return payload


def _contact_id_as_int(contact_id: Any) -> Optional[int]:
    if contact_id is None or isinstance(contact_id, bool):
        return None
    try:
        value = int(str(contact_id).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def link_primary_contact(lead_fields: Dict[str, Any], contact_id: Any) -> Dict[str, Any]:
    """
    Привязывает контакт к сделке как основной (_embedded.contacts, is_main).
    Возвращает новый словарь, lead_fields не меняется.
    """
    cid = _contact_id_as_int(contact_id)
    if cid is None:
        return dict(lead_fields)

    embedded = dict(lead_fields.get("_embedded") or {})
    embedded["contacts"] = [{"id": cid, "is_main": True}]
    return {**lead_fields, "_embedded": embedded}


async def sync_call_to_amocrm(
    payload: Dict[str, Any],
    settings: MappingSettings,
    crm: AmoCRMService = amocrm_service,
) -> CallSyncResult:
    """
    Основной сценарий:
    payload -> маппинг контакта и сделки -> создать контакт -> создать сделку с контактом

    Оба маппинга собираются до первого запроса в amoCRM, поэтому ошибка
    конфигурации (нет AMOCRM_PIPELINE_ID) всплывает без сетевых вызовов.
    Ошибка создания контакта не фатальна: сделка создаётся без него.
    """
    validate_webhook_payload(payload)

    contact_fields = build_contact_fields(payload, settings)
    lead_fields = build_lead_fields(payload, settings)

    logger.info("📋 Создаём контакт в amoCRM")
    contact_id = None
    try:
        contact = await crm.create_contact(contact_fields)
        contact_id = contact.id
    except AmoCRMError as e:
        logger.warning(f"⚠️ Не удалось создать контакт: {e}. Продолжаем создание сделки без контакта")

    logger.info("📋 Создаём сделку в amoCRM")
    lead = await crm.create_lead(link_primary_contact(lead_fields, contact_id))
    return CallSyncResult(lead_id=lead.id, contact_id=contact_id, data=lead.data)
