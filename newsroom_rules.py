# Gujarati Broadcast Newsroom Prompts

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

DEFAULT_TITLE = "સમાચાર રિપોર્ટ"

# Used for AV anchor lines the model left blank
BLANK_LINE_FILLER = "આજના મુખ્ય મુદ્દા પર એક સંક્ષિપ્ત, સ્પષ્ટ વાક્ય."

DEFAULT_TOPICS = ["Accident", "Rain", "Political", "Sports", "Crime"]

# System prompts
SYSTEM_PROMPT_REPORT = (
    "You are a professional Gujarati broadcast news anchor and editor. Write complete, "
    "factual news reports strictly in Gujarati language with a neutral, formal anchor-style "
    "tone. Use markdown with headings and short paragraphs. Avoid sensationalism. If facts "
    "are missing, clearly state assumptions."
)

SYSTEM_PROMPT_REWRITE = (
    "You are a professional Gujarati broadcast news anchor and editor. Rewrite or edit the "
    "provided news article per the user's instructions strictly in Gujarati language, "
    "maintaining a neutral, formal anchor-style tone. Use markdown format, preserve key "
    "facts; if adding, mark as assumptions."
)

SYSTEM_PROMPT_FORMAT = (
    "You are a professional Gujarati broadcast news anchor and editor. Write output strictly "
    "in Gujarati with a neutral, formal anchor-style tone. Use markdown. Avoid sensationalism. "
    "If facts are missing, clearly state assumptions. CRITICAL: Obey the requested structure "
    "EXACTLY. For every section that specifies a count (e.g., Top Band, VO Script, Express "
    "lines, Rundown stories), output EXACTLY that many items—no more, no less. Do NOT add "
    "extra bullets, do NOT omit any. Do NOT leave any numbered item blank; each item must "
    "contain a complete, meaningful sentence in Gujarati. Do NOT reorder any pre-listed, "
    "numbered, or topic-tagged lines provided in the template."
)

REPORT_REQUIREMENTS = """Requirements:
- Use a professional Gujarati news anchor tone: precise, neutral, formal, clear.
- 6-10 short paragraphs with clear sections and a concise intro.
- Include key facts, quotes (if not provided, mark as attributed or hypothetical), dates, numbers when relevant.
- Include a short summary at the end under 'સારાંશ'.
- Output markdown only and Gujarati only."""

OUTPUT_STRUCTURE = "આઉટપુટ બંધારણ (Gujarati only, markdown only):"


class NewsFormat(str, Enum):
    """Broadcast output formats."""

    AV = "AV"
    PKG = "PKG"
    AV_GFX = "AV_GFX"
    EXPRESS = "EXPRESS"
    BULLETIN_26M = "BULLETIN_26M"
    SPECIAL = "SPECIAL"


@dataclass
class FormatOptions:
    """Optional per-format counts."""

    vo_count: Optional[int] = None
    top_band_count: Optional[int] = None
    story_count: Optional[int] = None
    topics: List[str] = field(default_factory=list)


@dataclass
class FormatCounts:
    top_band_count: int
    vo_count: int
    story_count: int


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def resolve_counts(fmt: Optional[NewsFormat], options: Optional[FormatOptions] = None) -> FormatCounts:
    options = options or FormatOptions()
    default = 10 if fmt == NewsFormat.SPECIAL else 5

    top_band = _clamp(options.top_band_count if options.top_band_count is not None else default, 1, 10)
    vo = _clamp(options.vo_count if options.vo_count is not None else default, 1, 12)
    stories = _clamp(options.story_count if options.story_count is not None else 30, 5, 40)

    # AV is always 7 anchor lines and 5 top bands
    if fmt == NewsFormat.AV:
        vo, top_band = 7, 5

    return FormatCounts(top_band_count=top_band, vo_count=vo, story_count=stories)


def resolve_topics(fmt: Optional[NewsFormat], options: Optional[FormatOptions] = None) -> List[str]:
    if options and options.topics:
        return list(options.topics)
    if fmt == NewsFormat.BULLETIN_26M:
        return ["General"]
    return list(DEFAULT_TOPICS)


def _or_default(value: Optional[str], default: str) -> str:
    return value if value is not None else default


def _header(title, category, location, brief) -> str:
    return (
        f"શીર્ષક: {title}\n"
        f"વિભાગ: {_or_default(category, 'General')}\n"
        f"સ્થળ: {_or_default(location, 'N/A')}\n"
        f"સંદર્ભ: {_or_default(brief, '')}"
    )


def _bullets(count: int) -> str:
    return "\n".join("- " for _ in range(count))


def _numbered(count: int) -> str:
    return "\n".join(f"{i + 1})" for i in range(count))


def _vo_sections(count: int, lines: int) -> str:
    return "\n\n".join(
        f"## VO Script {i + 1} ({lines}-line paragraph)\n(Write a single {lines}-line paragraph in Gujarati)"
        for i in range(count)
    )


def build_report_prompt(title: str, category=None, location=None, brief=None) -> str:
    """Prompt for a generic full news report."""
    return (
        "Write a complete news report. Output must be in Gujarati only.\n"
        f"Title: {title}\n"
        f"Category: {_or_default(category, 'General')}\n"
        f"Location: {_or_default(location, 'N/A')}\n"
        f"Brief/context: {_or_default(brief, '')}\n\n"
        f"{REPORT_REQUIREMENTS}"
    )


def build_rewrite_prompt(content: str, instructions: str) -> str:
    """Prompt for rewriting a stored article."""
    return (
        f"Current article (markdown):\n\n{content}\n\n"
        f"Instructions: {instructions}\n\n"
        "Return the full updated article in Gujarati only, markdown only."
    )


def build_regenerate_prompt(
    title: str,
    category=None,
    location=None,
    brief=None,
    base_content: Optional[str] = None,
    instructions: Optional[str] = None,
) -> str:
    """Prompt for revising draft content that has not been stored yet."""
    return (
        f"Title: {title}\n"
        f"Category: {_or_default(category, 'General')}\n"
        f"Location: {_or_default(location, 'N/A')}\n"
        f"Brief/context: {_or_default(brief, '')}\n\n"
        f"Current article (markdown):\n\n{base_content or ''}\n\n"
        f"Instructions: {instructions or 'Revise and improve clarity keeping the same facts.'}\n\n"
        "Return the full updated article in Gujarati only, markdown only. "
        "Include a 'સારાંશ' section at the end."
    )


def bulletin_seconds_per_story() -> int:
    # 26 minutes minus four 90s breaks, spread over 30 story slots
    return (26 * 60 - 4 * 90) // 30


def build_rundown(topics: List[str], story_count: int) -> str:
    """Numbered rundown lines grouped by topic, earlier topics taking the remainder."""
    topics = topics or ["General"]
    base, rem = divmod(story_count, len(topics))
    lines = []
    idx = 1
    for ti, topic in enumerate(topics):
        for _ in range(base + (1 if ti < rem else 0)):
            lines.append(f"\n{idx}) [{topic or 'General'}] –")
            idx += 1
    return "".join(lines)


def _bulletin_prompt(title: str, topics: List[str], story_count: int) -> str:
    secs = bulletin_seconds_per_story()
    first = topics[0] if topics else "General"
    second = topics[1] if len(topics) > 1 else ""
    timing = []
    for block in range(5):
        start = block * 6 + 1
        timing.append(f"- Stories {start}–{start + 5}: ~{secs}s/Story")
        if block < 4:
            timing.append(f"- Break {block + 1}: ~90s")
    return (
        f"# {title} – 26 મિનિટ બુલેટિન રૂન્ડાઉન\n\n"
        f"## Rundown ({story_count} stories)\n"
        f"(નોંધ: ટોપિક પ્રમાણે ગ્રૂપિંગ કરવું: પહેલા તમામ '{first}' પછી '{second}' વગેરે. "
        f"ક્રમ બદલો નહીં અને કુલ આઇટમ્સ બરાબર {story_count} જ હોવા જોઇએ.)"
        f"{build_rundown(topics, story_count)}\n\n"
        "## Timing Guide\n" + "\n".join(timing)
    )


def build_format_prompt(
    fmt: Optional[NewsFormat],
    title: str,
    category=None,
    location=None,
    brief=None,
    options: Optional[FormatOptions] = None,
) -> str:
    """
    Build the user prompt for a broadcast format.

    Falls back to the generic report prompt when no format is given.
    """
    counts = resolve_counts(fmt, options)
    header = _header(title, category, location, brief)

    if fmt == NewsFormat.AV:
        return (
            f"{header}\n\n{OUTPUT_STRUCTURE}\n# {title}\n\n"
            "## Anchor Script\n"
            "(Write a single 300-word paragraph in Gujarati. Do NOT use any numbered format like "
            "1), 2), 3). Write one continuous flowing paragraph with complete sentences and "
            "detailed content.)\n\n"
            f"## Top Band ({counts.top_band_count})\n{_bullets(counts.top_band_count)}"
        )

    if fmt == NewsFormat.PKG:
        return (
            f"{header}\n\n{OUTPUT_STRUCTURE}\n# {title}\n\n"
            f"## Anchor Opening (2 lines)\n{_numbered(2)}\n\n"
            f"{_vo_sections(counts.vo_count, 15)}\n\n"
            f"## Anchor Closing Summary (5 lines)\n{_numbered(5)}\n\n"
            f"## Top Band ({counts.top_band_count})\n{_bullets(counts.top_band_count)}"
        )

    if fmt == NewsFormat.AV_GFX:
        return (
            f"{header}\n\n{OUTPUT_STRUCTURE}\n# {title}\n\n"
            "## Story\n(Write a 150-word story in Gujarati. Keep it concise and focused on the key points.)\n\n"
            f"## Top Bands ({counts.top_band_count})\n{_bullets(counts.top_band_count)}"
        )

    if fmt == NewsFormat.EXPRESS:
        return f"{header}\n\n{OUTPUT_STRUCTURE}\n# {title}\n\n## Express Summary (2 lines)\n{_numbered(2)}"

    if fmt == NewsFormat.BULLETIN_26M:
        return _bulletin_prompt(title, resolve_topics(fmt, options), counts.story_count)

    if fmt == NewsFormat.SPECIAL:
        gfx = "\n".join(f"{i + 1}) A)  B)  C)" for i in range(counts.top_band_count))
        return (
            f"{header}\n\n# {title}\n\n"
            f"## Anchor Opening (8 lines)\n{_numbered(8)}\n\n"
            f"{_vo_sections(counts.vo_count, 30)}\n\n"
            f"## Anchor Closing Summary (5 lines)\n{_numbered(5)}\n\n"
            f"## Top Band ({counts.top_band_count})\n{_bullets(counts.top_band_count)}\n\n"
            f"## Top Band GFX ({counts.top_band_count} × 3 variants)\n{gfx}"
        )

    return build_report_prompt(title, category, location, brief)


_BLANK_NUMBERED = re.compile(r"^([ \t]*\d+\)[ \t]*)$", re.MULTILINE)
_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)


def fill_blank_numbered_lines(content: str) -> str:
    return _BLANK_NUMBERED.sub(lambda m: f"{m.group(1)}{BLANK_LINE_FILLER}", content)


def derive_title(content: str, fallback: Optional[str] = None) -> Optional[str]:
    """First level-one markdown heading, else the fallback."""
    match = _HEADING.search(content or "")
    if match:
        return match.group(1).strip()
    return fallback
