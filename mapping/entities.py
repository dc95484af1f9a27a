"""
МАППИНГ ДАННЫХ: вебхук -> amoCRM.

Какие данные из вебхука попадают в какие поля контакта и сделки.
Чтобы изменить соответствие, поменяйте путь или transform в нужном поле.
"""
from typing import Any, Dict

from .applier import apply_mapping
from .custom_fields import ENUM_WORK, CustomFieldBundle, CustomFieldSource
from .settings import MappingSettings
from .transforms import (
    contact_name,
    format_call_duration,
    lead_name,
    normalize_phone,
    parse_price,
    to_epoch_seconds,
)
from .types import EntityMapping, FieldDescriptor

LEAD = "lead"
CONTACT = "contact"


def lead_custom_fields(settings: MappingSettings) -> CustomFieldBundle:
    return CustomFieldBundle(LEAD, [
        CustomFieldSource("agreements", settings.agreements_field, "call.agreements.agreements"),
        CustomFieldSource("client_facts", settings.client_facts_field, "call.agreements.client_facts"),
        CustomFieldSource("sms_text", settings.sms_text_field, "call.agreements.smsText"),
        CustomFieldSource("call_duration", settings.call_duration_field, "call.duration", format_call_duration),
        CustomFieldSource("call_started", settings.call_started_field, "call.startedAt", to_epoch_seconds),
        CustomFieldSource("call_record_url", settings.call_record_url_field, "call.recordUrl"),
        CustomFieldSource("call_history", settings.call_history_field, "call.agreements.historycall"),
        CustomFieldSource("agreements_time", settings.agreements_time_field, "call.agreements.agreements_time"),
        CustomFieldSource("region", settings.region_field, "contact.dadataPhoneInfo.region"),
        CustomFieldSource("company", settings.company_field, "contact.additionalFields.company"),
    ])


def contact_custom_fields(settings: MappingSettings) -> CustomFieldBundle:
    return CustomFieldBundle(CONTACT, [
        CustomFieldSource("phone", settings.phone_field, "contact.phone", normalize_phone, enum_code=ENUM_WORK),
        CustomFieldSource("email", settings.email_field, "contact.additionalFields.email", enum_code=ENUM_WORK),
        CustomFieldSource("company", settings.contact_company_field, "contact.additionalFields.company"),
        CustomFieldSource("city", settings.contact_city_field, "contact.additionalFields.city"),
    ])


def build_lead_mapping(settings: MappingSettings) -> EntityMapping:
    """Маппинг для СДЕЛОК (leads)"""
    return EntityMapping(LEAD, {
        # Название: договорённости из звонка, иначе имя клиента / телефон
        "name": FieldDescriptor.from_path("call.agreements.agreements", lead_name),
        "pipeline_id": FieldDescriptor.static(settings.pipeline_id, required=True, setting="AMOCRM_PIPELINE_ID"),
        "status_id": FieldDescriptor.static(settings.status_id, setting="AMOCRM_STATUS_ID"),
        "price": FieldDescriptor.from_path("call.agreements.price", parse_price),
        "custom_fields_values": FieldDescriptor.multiple(lead_custom_fields(settings)),
    })


def build_contact_mapping(settings: MappingSettings) -> EntityMapping:
    """Маппинг для КОНТАКТОВ"""
    return EntityMapping(CONTACT, {
        "name": FieldDescriptor.from_path("call.agreements.client_name", contact_name),
        "custom_fields_values": FieldDescriptor.multiple(contact_custom_fields(settings)),
    })


def build_lead_fields(payload: Dict[str, Any], settings: MappingSettings) -> Dict[str, Any]:
    return apply_mapping(payload, build_lead_mapping(settings))


def build_contact_fields(payload: Dict[str, Any], settings: MappingSettings) -> Dict[str, Any]:
    return apply_mapping(payload, build_contact_mapping(settings))
