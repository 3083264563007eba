# barberpro/llm_client.py
"""
Cliente liviano para textos e imágenes generados por IA (OpenAI).

Son mejoras opcionales del panel: ninguna función de este módulo lanza
excepciones al llamador. Sin API key, o ante cualquier error/timeout,
se devuelve un valor de reemplazo.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Optional

from openai import AsyncOpenAI  # SDK ≥ 1.14

from barberpro.config import get_settings

logger = logging.getLogger("llm")

NO_KEY_MESSAGE = "API Key não configurada."
EMPTY_MESSAGE = "Descrição indisponível no momento."
FAILURE_MESSAGE = "Não foi possível gerar a descrição automaticamente."

CopyKind = Literal["service", "bio"]


@lru_cache
def _client() -> Optional[AsyncOpenAI]:
    settings = get_settings()
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY no configurada, IA deshabilitada")
        return None
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.LLM_TIMEOUT or 60.0)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------
def build_copy_prompt(kind: CopyKind, name: str, keywords: str) -> str:
    if kind == "service":
        return (
            f'Escreva uma descrição curta, atrativa e sofisticada para um serviço de barbearia '
            f'chamado "{name}". Use estas palavras-chave/características: {keywords}. '
            f"Máximo de 2 frases."
        )
    return (
        f'Escreva uma biografia profissional curta e confiante para um barbeiro chamado "{name}". '
        f"Use estas características: {keywords}. Máximo de 2 frases."
    )


# ------------------------------------------------------------------
# Texto
# ------------------------------------------------------------------
async def generate_copy(kind: CopyKind, name: str, keywords: str) -> str:
    client = _client()
    if client is None:
        return NO_KEY_MESSAGE

    prompt = build_copy_prompt(kind, name, keywords)
    logger.info("LLM prompt → %s", prompt)
    try:
        response = await client.chat.completions.create(
            model=get_settings().LLM_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            top_p=0.95,
            max_tokens=200,
        )
    except Exception:  # cualquier falla degrada a placeholder
        logger.exception("Error generando texto con IA")
        return FAILURE_MESSAGE

    logger.info("LLM response → %s", response)
    text = (response.choices[0].message.content or "").strip() if response.choices else ""
    return text or EMPTY_MESSAGE


# ------------------------------------------------------------------
# Imagen
# ------------------------------------------------------------------
async def generate_image(prompt: str) -> Optional[str]:
    """Logo cuadrado como data URI PNG, o None si no se pudo generar."""
    client = _client()
    if client is None:
        return None

    logger.info("Image prompt → %s", prompt)
    try:
        response = await client.images.generate(
            model=get_settings().IMAGE_MODEL,
            prompt=prompt,
            size="1024x1024",
            n=1,
        )
    except Exception:  # cualquier falla degrada a placeholder
        logger.exception("Error generando imagen con IA")
        return None

    for image in response.data or []:
        if image.b64_json:
            return f"data:image/png;base64,{image.b64_json}"
    logger.warning("La respuesta de imágenes no trajo datos base64")
    return None
