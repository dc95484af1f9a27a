"""
Конфигурация приложения.
Все секретные ключи и ID полей amoCRM берутся из переменных окружения.
"""
import os
from functools import lru_cache

from dotenv import load_dotenv

from mapping.settings import MappingSettings, parse_int_setting

# Загружаем .env файл для локальной разработки
load_dotenv()

# ============== AmoCRM ==============
AMOCRM_SUBDOMAIN = os.getenv("AMOCRM_SUBDOMAIN")  # например: mycompany для mycompany.amocrm.ru
AMOCRM_ACCESS_TOKEN = os.getenv("AMOCRM_ACCESS_TOKEN")

# ID воронки обязателен для создания сделки, статус - опционально (по умолчанию первый)
AMOCRM_PIPELINE_ID = os.getenv("AMOCRM_PIPELINE_ID")
AMOCRM_STATUS_ID = os.getenv("AMOCRM_STATUS_ID")

# ============== Вебхук Sasha AI ==============
# Секрет для проверки подписи X-Webhook-Signature (HMAC-SHA256)
WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET")

# ============== Приложение ==============
SERVICE_NAME = "sasha-webhook-to-amocrm"
SERVICE_VERSION = "1.0.0"
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
DEFAULT_PORT = 3333


def port_from_env(env) -> int:
    """
    CONTAINER_PORT - порт внутри Docker контейнера, PORT - для запуска без Docker.
    Не число -> ConfigurationError с именем переменной.
    """
    for name in ("CONTAINER_PORT", "PORT"):
        port = parse_int_setting(name, env.get(name))
        if port is not None:
            return port
    return DEFAULT_PORT


PORT = port_from_env(os.environ)


@lru_cache(maxsize=1)
def get_mapping_settings() -> MappingSettings:
    """
    ID воронки, статуса и кастомных полей (AMOCRM_*_FIELD_ID).

    Читается один раз; при некорректном AMOCRM_PIPELINE_ID / AMOCRM_STATUS_ID
    бросает ConfigurationError (и будет пробовать снова при следующем вызове).
    """
    return MappingSettings.from_env(os.environ)


def validate_config():
    """
    Проверяет конфигурацию.

    На старте не валим процесс: healthcheck должен отвечать, даже если
    часть переменных не задана.

    Возвращает список отсутствующих переменных (пустой список = всё ок).
    """
    required = [
        ("AMOCRM_SUBDOMAIN", AMOCRM_SUBDOMAIN),
        ("AMOCRM_ACCESS_TOKEN", AMOCRM_ACCESS_TOKEN),
        ("AMOCRM_PIPELINE_ID", AMOCRM_PIPELINE_ID),
        ("WEBHOOK_SECRET", WEBHOOK_SECRET),
    ]
    return [name for name, value in required if not value]
