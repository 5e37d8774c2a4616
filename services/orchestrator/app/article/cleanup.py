"""Post-processing of provider text before it is appended to an article."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_META_TAIL = re.compile(r'"meta_description":.*$', re.DOTALL | re.IGNORECASE)
_CONCLUSION_HEADING = re.compile(r"^##\s*Conclusion\s*", re.MULTILINE | re.IGNORECASE)

FAILURE_HEADING = "### Generation Error"


@dataclass(frozen=True)
class TitleMeta:
    title: str
    meta_description: str


def fallback_title(keyword: str) -> str:
    return f"{keyword} Guide"


def parse_title_meta(raw: str, keyword: str) -> TitleMeta:
    """Read ``{"title", "meta_description"}`` from a provider reply.

    Malformed JSON never fails the run: the raw text (minus braces and any
    trailing ``"meta_description": ...``) becomes the title and the meta
    description is left empty. The title is cut to its first non-empty line.
    """

    match = _JSON_OBJECT.search(raw)
    candidate = match.group(0) if match else raw
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError:
        payload = None
    if not isinstance(payload, dict):
        logger.warning("Title/meta reply was not a JSON object; using raw text as title")
        title = _single_line(_META_TAIL.sub("", raw.replace("{", "").replace("}", "")))
        return TitleMeta(title=title or fallback_title(keyword), meta_description="")

    title = _single_line(str(payload.get("title") or ""))
    meta = str(payload.get("meta_description") or "").strip()
    return TitleMeta(title=title or fallback_title(keyword), meta_description=meta)


def _single_line(title: str) -> str:
    for line in title.splitlines():
        line = line.strip().lstrip("#").strip()
        if line:
            return line
    return ""


def strip_leading_title(text: str, title: str) -> str:
    """Drop the article title when the provider echoes it as the first line."""

    cleaned = text.strip()
    if not title.strip():
        return cleaned
    pattern = re.compile(rf"^(?:#+\s*)?{re.escape(title.strip())}\s*\n+", re.IGNORECASE)
    return pattern.sub("", cleaned, count=1).strip()


def strip_conclusion_heading(text: str) -> str:
    return _CONCLUSION_HEADING.sub("", text, count=1).strip()


def format_failure_block(message: str) -> str:
    return (
        f"{FAILURE_HEADING}\n\n"
        "Article generation failed with the following error:\n\n"
        f"```\n{message}\n```\n\n"
        "**Possible reasons:**\n"
        "- A provider rate limit or daily token quota was reached.\n"
        "- A provider API key is invalid or exhausted.\n\n"
        "Check the provider limits, then retry the job.\n"
    )
