"""
Проверка подписи вебхука Sasha AI.
Заголовок X-Webhook-Signature = hex(HMAC-SHA256(сырое тело запроса, WEBHOOK_SECRET)).
"""
import hashlib
import hmac
from typing import Union


def compute_signature(payload: Union[bytes, str], secret: str) -> str:
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: Union[bytes, str], signature: str, secret: str) -> bool:
    """
    Сравнение в постоянном времени.
    Пустая подпись или подпись не в hex -> False.
    """
    if not signature or not secret:
        return False
    signature = signature.strip().lower()
    if signature.startswith("sha256="):
        signature = signature[len("sha256="):]
    if not signature.isascii():
        return False
    return hmac.compare_digest(compute_signature(payload, secret), signature)
