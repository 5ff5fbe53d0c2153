import logging
from dataclasses import dataclass
from typing import Optional

from config import Settings
from key_rotation import KeyRotator
from llm_client import invoke
from newsroom_rules import (
    DEFAULT_TITLE,
    SYSTEM_PROMPT_FORMAT,
    SYSTEM_PROMPT_REPORT,
    SYSTEM_PROMPT_REWRITE,
    FormatOptions,
    NewsFormat,
    build_format_prompt,
    build_regenerate_prompt,
    build_report_prompt,
    build_rewrite_prompt,
    fill_blank_numbered_lines,
)

# Configure logger
logger = logging.getLogger(__name__)


def safe_title(title: Optional[str]) -> str:
    return (title or "").strip() or DEFAULT_TITLE


@dataclass
class ScriptRequest:
    """Inputs for format-aware script generation."""

    title: Optional[str] = None
    format: Optional[NewsFormat] = None
    category: Optional[str] = None
    location: Optional[str] = None
    brief: Optional[str] = None
    base_content: Optional[str] = None
    instructions: Optional[str] = None
    options: Optional[FormatOptions] = None

    @property
    def is_rewrite(self) -> bool:
        return bool((self.base_content or "").strip() or (self.instructions or "").strip())


class ScriptGenerator:
    """Builds prompts and sends every LLM call through the key rotator."""

    def __init__(self, rotator: KeyRotator, settings: Settings):
        self.rotator = rotator
        self.settings = settings

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        async def work(client):
            return await invoke(client, messages, self.settings)

        return await self.rotator.with_key_rotation(work)

    async def generate_report(self, title=None, category=None, location=None, brief=None) -> str:
        """Write a full Gujarati news report from the story metadata."""
        title = safe_title(title)
        logger.info(f"Generating report: {title[:80]}")
        return await self._complete(
            SYSTEM_PROMPT_REPORT,
            build_report_prompt(title, category, location, brief),
        )

    async def rewrite_article(self, content: str, instructions: str) -> str:
        """Rewrite stored article content following editor instructions."""
        logger.info(f"Rewriting article ({len(content)} chars) with instructions: {instructions[:100]}")
        return await self._complete(SYSTEM_PROMPT_REWRITE, build_rewrite_prompt(content, instructions))

    async def generate_script(self, request: ScriptRequest) -> str:
        """
        Generate a broadcast script, or revise draft content.

        Draft revision is used when the request carries base content or
        instructions; otherwise the prompt follows the requested format.
        """
        title = safe_title(request.title)

        if request.is_rewrite:
            logger.info(f"Regenerating draft for: {title[:80]}")
            return await self._complete(
                SYSTEM_PROMPT_REWRITE,
                build_regenerate_prompt(
                    title,
                    request.category,
                    request.location,
                    request.brief,
                    base_content=request.base_content,
                    instructions=request.instructions,
                ),
            )

        logger.info(f"Generating {request.format.value if request.format else 'generic'} script for: {title[:80]}")
        content = await self._complete(
            SYSTEM_PROMPT_FORMAT,
            build_format_prompt(
                request.format,
                title,
                request.category,
                request.location,
                request.brief,
                options=request.options,
            ),
        )

        if request.format == NewsFormat.AV:
            content = fill_blank_numbered_lines(content)
        return content
