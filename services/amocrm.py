"""
Сервис для работы с AmoCRM API v4.
Создание контактов и сделок из данных вебхука.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from config import AMOCRM_ACCESS_TOKEN, AMOCRM_SUBDOMAIN
from mapping.errors import ConfigurationError

logger = logging.getLogger(__name__)


class AmoCRMError(Exception):
    """AmoCRM вернул ошибку или недоступен"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class CreatedEntity:
    id: Optional[int]
    data: Dict[str, Any]


def build_base_url(subdomain: Optional[str]) -> str:
    """
    https://{subdomain}.amocrm.ru из AMOCRM_SUBDOMAIN.
    Пробелы, слэши и прочие лишние символы выбрасываются.
    """
    if not subdomain or not subdomain.strip():
        raise ConfigurationError(
            "AMOCRM_SUBDOMAIN не установлен в переменных окружения. Проверьте файл .env",
            setting="AMOCRM_SUBDOMAIN",
        )
    clean = re.sub(r"[^a-zA-Z0-9-]", "", subdomain.strip())
    if not clean:
        raise ConfigurationError(
            "AMOCRM_SUBDOMAIN содержит недопустимые символы или пустой. "
            "Укажите поддомен аккаунта amoCRM (например: mycompany для mycompany.amocrm.ru)",
            setting="AMOCRM_SUBDOMAIN",
        )
    return f"https://{clean}.amocrm.ru"


def extract_error_message(response: httpx.Response, fallback: str) -> str:
    """Понятное сообщение об ошибке из ответа amoCRM"""
    try:
        data = response.json()
    except ValueError:
        return response.text or fallback

    if isinstance(data, dict):
        for key in ("error", "detail", "title"):
            if data.get(key):
                return str(data[key])
    if isinstance(data, str) and data:
        return data
    return f"Ошибка API: {json.dumps(data, ensure_ascii=False)}"


def extract_created_id(data: Any, entity_type: str) -> Optional[int]:
    """
    amoCRM возвращает созданные сущности в _embedded.{entity_type}[0].id.
    Ответ другой формы -> None.
    """
    if not isinstance(data, dict):
        return None
    embedded = data.get("_embedded")
    if not isinstance(embedded, dict):
        return None
    items = embedded.get(entity_type)
    if not isinstance(items, list) or not items or not isinstance(items[0], dict):
        return None
    return items[0].get("id")


class AmoCRMService:
    """Класс для работы с AmoCRM API"""

    def __init__(
        self,
        subdomain: Optional[str] = AMOCRM_SUBDOMAIN,
        access_token: Optional[str] = AMOCRM_ACCESS_TOKEN,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.subdomain = subdomain
        self.access_token = access_token
        self._transport = transport

    @property
    def base_url(self) -> str:
        return f"{build_base_url(self.subdomain)}/api/v4"

    @property
    def headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise ConfigurationError(
                "AMOCRM_ACCESS_TOKEN не установлен в переменных окружения",
                setting="AMOCRM_ACCESS_TOKEN",
            )
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def _create(self, entity_type: str, fields: Dict[str, Any]) -> CreatedEntity:
        """
        POST /api/v4/{entity_type} с одной сущностью.

        Args:
            entity_type: contacts или leads
            fields: Плоский словарь полей после маппинга

        Returns:
            ID созданной сущности и весь ответ amoCRM
        """
        url = f"{self.base_url}/{entity_type}"
        headers = self.headers
        logger.debug(f"Данные для отправки в {url}: {json.dumps([fields], ensure_ascii=False)}")

        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=[fields])
        except httpx.HTTPError as e:
            logger.error(f"❌ AmoCRM недоступен: POST {url}: {e}")
            raise AmoCRMError(f"Ошибка запроса к amoCRM: {e}") from e

        if response.is_error:
            message = extract_error_message(response, f"Ошибка при создании {entity_type} в amoCRM")
            logger.error(f"❌ AmoCRM вернул {response.status_code} для POST {url}: {response.text[:500]}")
            raise AmoCRMError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Неожиданный ответ amoCRM на POST {url}: {response.text[:500]}")
            data = {}
        return CreatedEntity(id=extract_created_id(data, entity_type), data=data)

    async def create_contact(self, contact_fields: Dict[str, Any]) -> CreatedEntity:
        """Создаёт контакт, возвращает его ID"""
        created = await self._create("contacts", contact_fields)
        logger.info(f"✅ Контакт создан в amoCRM: {created.id}")
        return created

    async def create_lead(self, lead_fields: Dict[str, Any]) -> CreatedEntity:
        """Создаёт сделку, возвращает её ID"""
        created = await self._create("leads", lead_fields)
        logger.info(f"✅ Сделка создана в amoCRM: {created.id}")
        return created


# Синглтон для использования во всём приложении
amocrm_service = AmoCRMService()
