"""
Gemini client construction and chat calls.

Gemini is reached through its OpenAI-compatible endpoint, so each key
gets its own AsyncOpenAI client. Building a client makes no network call.
"""

import logging
from typing import Any, Dict, List

from openai import AsyncOpenAI

from config import Settings

logger = logging.getLogger(__name__)


def create_client(credential: str, settings: Settings) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=credential,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout,
        max_retries=0,  # retries are handled by KeyRotator
    )


def normalize_content(content: Any) -> str:
    """Coerce a chat message's content to a string."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return str(content)


async def invoke(client: AsyncOpenAI, messages: List[Dict[str, str]], settings: Settings) -> str:
    """Run one chat completion and return the reply text."""
    logger.info(f"Calling {settings.llm_model} with {len(messages)} messages")
    response = await client.chat.completions.create(
        model=settings.llm_model,
        messages=messages,
        temperature=settings.temperature,
        max_tokens=settings.max_output_tokens,
    )
    return normalize_content(response.choices[0].message.content)
