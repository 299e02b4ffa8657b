import logging
from typing import Any, Dict, Optional

import httpx

from config import GEMINI_API_BASE, GEMINI_API_KEY, GEMINI_MODEL, NOTES_TIMEOUT_SEC

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_FALLBACK = "Не удалось сгенерировать заметки с помощью ИИ."
FAILURE_FALLBACK = (
    "Не удалось сгенерировать заметки с помощью ИИ. "
    "Пожалуйста, проверьте консоль на наличие ошибок и введите заметки вручную."
)


def build_prompt(location_name: str, address: str) -> str:
    return (
        f"Сгенерируй краткие и четкие заметки по установке и обслуживанию портативной зарядной станции "
        f"для телефонов в месте \"{location_name}\" по адресу \"{address}\". Включи пункты о проверке "
        f"целостности кабелей, очистке поверхности, обеспечении хорошей видимости и регулярной проверке "
        f"работоспособности. Ответ дай на русском языке."
    )


def _extract_text(data: Dict[str, Any]) -> str:
    parts = []
    for candidate in data.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            text = part.get("text")
            if text:
                parts.append(text)
        if parts:
            break
    return "".join(parts).strip()


async def generate_installation_notes(location_name: str, address: str,
                                      client: Optional[httpx.AsyncClient] = None,
                                      api_key: Optional[str] = GEMINI_API_KEY) -> str:
    """Ask Gemini for installation notes. Never raises: failures yield a fallback text."""
    if not api_key:
        logger.warning("GEMINI_API_KEY is not set, returning fallback notes")
        return FAILURE_FALLBACK

    url = f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"
    payload = {"contents": [{"parts": [{"text": build_prompt(location_name, address)}]}]}

    try:
        if client is None:
            async with httpx.AsyncClient() as own_client:
                r = await own_client.post(url, params={"key": api_key}, json=payload, timeout=NOTES_TIMEOUT_SEC)
        else:
            r = await client.post(url, params={"key": api_key}, json=payload, timeout=NOTES_TIMEOUT_SEC)
        r.raise_for_status()
        text = _extract_text(r.json())
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error generating installation notes: {e}")
        return FAILURE_FALLBACK

    return text or EMPTY_RESPONSE_FALLBACK
