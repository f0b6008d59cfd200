from __future__ import annotations

import json
import logging
import re
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def chat_completion(
    messages: list[dict[str, str]],
    *,
    temperature: float = 0.3,
    max_tokens: int | None = None,
    json_mode: bool = False,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str:
    """
    Send a chat completion to Groq and return the first choice's text.

    Raises whatever the Groq client raises; callers decide on the fallback.
    """
    client = Groq(api_key=config.api_key, timeout=config.timeout)
    kwargs: dict[str, Any] = {
        "model": config.model,
        "messages": messages,
        "max_tokens": max_tokens or config.max_tokens,
        "temperature": temperature,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(**kwargs)
    content = response.choices[0].message.content or ""
    logger.debug("Groq %s replied with %d chars", config.model, len(content))
    return content


def parse_json_object(text: str | None) -> dict[str, Any] | None:
    """
    Parse model output into a dict.

    Tries the whole string first, then the outermost ``{...}`` span, so
    replies wrapped in markdown fences or prose still parse.
    """
    if not text:
        return None

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(text)
        if not match:
            return None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None

    return parsed if isinstance(parsed, dict) else None
