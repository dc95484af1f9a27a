"""
Главный файл приложения.
FastAPI сервер: принимает вебхуки Sasha AI о звонках и создаёт контакт и сделку в AmoCRM.

Запуск:
    uvicorn main:app --host 0.0.0.0 --port 3333 --reload
"""
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from automations.call_to_amocrm.handler import sync_call_to_amocrm
from config import DEBUG, PORT, SERVICE_NAME, SERVICE_VERSION, WEBHOOK_SECRET, get_mapping_settings, validate_config
from mapping.entities import contact_custom_fields, lead_custom_fields
from mapping.errors import ConfigurationError, PayloadValidationError
from services.amocrm import AmoCRMError, amocrm_service
from services.signature import verify_webhook_signature

# Настраиваем логирование
logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = {
    "webhook": "POST /webhook",
    "test": "POST /test/amocrm/lead",
    "health": "GET /health",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Обработчик жизненного цикла приложения"""
    logger.info(f"🚀 Сервер запущен на порту {PORT}")
    missing = validate_config()
    if missing:
        # Не валим процесс: /health должен отвечать, а вебхуки вернут понятную ошибку
        logger.warning(f"⚠️ ВНИМАНИЕ: не заданы переменные окружения: {', '.join(missing)}")
    try:
        settings = get_mapping_settings()
        if not lead_custom_fields(settings).is_configured:
            logger.info("ℹ️ ID кастомных полей сделки не заданы, custom_fields_values сделки не отправляются")
        if not contact_custom_fields(settings).is_configured:
            logger.info("ℹ️ ID полей контакта не заданы, custom_fields_values контакта не отправляются")
    except ConfigurationError as e:
        logger.error(f"❌ Ошибка конфигурации: {e}")

    yield

    logger.info("🔴 Сервер остановлен")


app = FastAPI(
    title="Sasha AI → AmoCRM",
    description="Перенос звонков AI менеджера в контакты и сделки AmoCRM",
    version=SERVICE_VERSION,
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


def _error(status_code: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(content={"success": False, "error": error, **extra}, status_code=status_code)


async def _process_payload(data: Any, success_message: str) -> JSONResponse:
    """Маппинг + отправка в amoCRM с переводом ошибок в HTTP-ответ"""
    try:
        settings = get_mapping_settings()
        result = await sync_call_to_amocrm(data, settings, amocrm_service)
    except PayloadValidationError as e:
        logger.error(f"❌ Некорректный вебхук: {e}")
        return _error(400, str(e))
    except ConfigurationError as e:
        logger.error(f"❌ Ошибка конфигурации: {e}")
        return _error(500, str(e), message=f"Ошибка при отправке вебхука: {e}")
    except AmoCRMError as e:
        status_code = e.status_code or 500
        logger.error(f"❌ Ошибка amoCRM ({status_code}): {e}")
        return _error(status_code, str(e), message=f"Ошибка при отправке вебхука: {e}", statusCode=status_code)
    except Exception as e:
        logger.exception(f"❌ Критическая ошибка при обработке вебхука: {e}")
        return _error(500, str(e) or "Внутренняя ошибка сервера")

    logger.info(f"✅ Сделка создана в amoCRM: {result.lead_id} (контакт: {result.contact_id})")
    return JSONResponse(content={
        "success": True,
        "message": success_message,
        "leadId": result.lead_id,
        "contactId": result.contact_id,
        "data": result.data,
    })


@app.get("/")
async def root():
    """Описание сервиса"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "webhook": "POST /webhook - Приём вебхуков от Sasha AI",
            "test": "POST /test/amocrm/lead - Тестовая отправка сделки (без проверки подписи)",
            "health": "GET /health - Проверка работоспособности",
        },
        "message": "Для отправки вебхуков используйте POST /webhook",
    }


@app.get("/health")
async def health():
    """Health check"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }


@app.post("/webhook")
async def sasha_webhook(request: Request):
    """
    Webhook endpoint для Sasha AI.

    Тело проверяется по подписи X-Webhook-Signature до парсинга JSON.
    """
    logger.info("📥 Получен вебхук от Sasha AI")
    signature = request.headers.get("x-webhook-signature")
    if not signature:
        return _error(401, "Отсутствует заголовок X-Webhook-Signature")
    if not WEBHOOK_SECRET:
        logger.error("❌ WEBHOOK_SECRET не настроен")
        return _error(500, "WEBHOOK_SECRET не настроен")

    body = await request.body()
    if not body:
        return _error(400, "Тело запроса пустое")
    if not verify_webhook_signature(body, signature, WEBHOOK_SECRET):
        logger.warning("⚠️ Неверная подпись вебхука")
        return _error(401, "Неверная подпись вебхука")

    try:
        data = json.loads(body)
    except ValueError as e:
        logger.error(f"❌ Ошибка парсинга JSON: {e}. Начало тела: {body[:500]!r}")
        return _error(400, "Ошибка парсинга JSON", message=str(e))
    logger.debug(f"Body: {json.dumps(data, ensure_ascii=False)}")

    return await _process_payload(data, "Сделка успешно создана в amoCRM")


@app.post("/test/amocrm/lead")
async def test_amocrm_lead(request: Request):
    """
    Тестовый endpoint: отправка сделки в amoCRM вручную.
    Тело - JSON в формате вебхука Sasha AI. Подпись не проверяется.
    """
    try:
        data = await request.json()
    except ValueError as e:
        return _error(400, "Ошибка парсинга JSON", message=str(e))
    return await _process_payload(data, "Тестовая сделка успешно создана в amoCRM")


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)
    return _error(
        404,
        "Endpoint не найден",
        message=f"Путь {request.method} {request.url.path} не существует",
        availableEndpoints=AVAILABLE_ENDPOINTS,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=PORT,
        reload=DEBUG
    )
