"""Natural-language summary of a record sample via the Gemini REST API.

Only the sampling is part of the analytics core. The HTTP call is a
best-effort collaborator: every failure is turned into failure markup and
never raised to the caller.
"""

import logging
import os
import re
from typing import Sequence

import requests

from log_insights.models import LogRecord

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 150
DEFAULT_MIN_CONTENT_LENGTH = 5

MISSING_KEY_MARKUP = "<p class='text-red-500'>API Key missing. Please configure environment variables.</p>"
FAILURE_MARKUP = "<p class='text-red-500'>生成 AI 分析时出错，请检查日志。</p>"
EMPTY_MARKUP = "<p class='text-slate-400'>没有可供分析的提问记录。</p>"

_FENCE = re.compile(r"```(?:html)?")

PROMPT_TEMPLATE = """\
You are a senior data analyst for Shanghai Metals Market (SMM).
Analyze the following user queries sent to our AI assistant.

Data sample:
{sample}

Task:
Write a concise, professional analysis of user behaviour.
ALL OUTPUT MUST BE IN SIMPLIFIED CHINESE.

Cover these dimensions:
1. 🔍 用户画像: who the users are (traders, analysts, ...) and what defines them.
2. 🔥 关注热点: which metals or data points are requested most.
3. 💡 策略建议: two or three concrete product or content recommendations.

Output format:
Return raw HTML only, no Markdown and no code fences, no wrapper div.
- Headers: <h3 class="text-lg font-bold text-slate-800 mt-6 mb-3 flex items-center gap-2"> starting with an emoji
- Lists: <ul class="list-disc pl-5 space-y-2 mb-4 text-slate-600"> with <li> items
- Paragraphs: <p class="mb-4 text-slate-600 leading-relaxed">
- Emphasis: <strong class="text-indigo-600 font-semibold">
"""


def sample_records(
    records: Sequence[LogRecord],
    limit: int = DEFAULT_SAMPLE_SIZE,
    min_length: int = DEFAULT_MIN_CONTENT_LENGTH,
) -> list[LogRecord]:
    """First `limit` records whose content is longer than `min_length` characters."""
    sample = []
    for record in records:
        if len(sample) >= limit:
            break
        if len(record.content) > min_length:
            sample.append(record)
    return sample


def build_prompt(sample: Sequence[LogRecord]) -> str:
    lines = "\n".join(f'- [{r.company or "User"}] asked: "{r.content}"' for r in sample)
    return PROMPT_TEMPLATE.format(sample=lines)


def strip_fences(text: str) -> str:
    """Remove Markdown code fences the model sometimes adds anyway."""
    return _FENCE.sub("", text)


class Summarizer:
    """Client for the text-generation collaborator."""

    def __init__(
        self,
        model="gemini-2.5-flash",
        base_url="https://generativelanguage.googleapis.com/v1beta/models",
        api_key=None,
        timeout=120,
        sample_size=DEFAULT_SAMPLE_SIZE,
        min_content_length=DEFAULT_MIN_CONTENT_LENGTH,
        session=None,
    ):
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._sample_size = sample_size
        self._min_content_length = min_content_length
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config):
        """Build a Summarizer from the `summarizer` config section."""
        section = config["summarizer"]
        return cls(
            model=section["model"],
            base_url=section["base_url"],
            api_key=os.environ.get(section["api_key_env"]),
            timeout=section["timeout_seconds"],
            sample_size=section["sample_size"],
            min_content_length=section["min_content_length"],
        )

    @property
    def has_api_key(self):
        return bool(self._api_key)

    def summarize(self, records: Sequence[LogRecord]) -> str:
        """Return HTML markup describing the records, or failure markup."""
        if not self._api_key:
            logger.warning("API key is not set; summarization disabled")
            return MISSING_KEY_MARKUP

        sample = sample_records(records, self._sample_size, self._min_content_length)
        if not sample:
            return EMPTY_MARKUP

        try:
            text = self._generate(build_prompt(sample))
        except (requests.RequestException, AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Summarization request failed: %s", exc)
            return FAILURE_MARKUP

        logger.info("Summarized %d sampled records", len(sample))
        return strip_fences(text)

    def _generate(self, prompt: str) -> str:
        url = f"{self._base_url}/{self._model}:generateContent"
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        r = self._session.post(url, headers=headers, json=body, timeout=self._timeout)
        r.raise_for_status()
        parts = r.json()["candidates"][0]["content"]["parts"]
        if not isinstance(parts, list) or not all(isinstance(part, dict) for part in parts):
            raise ValueError(f"Unexpected response parts: {parts!r}")
        return "".join(part.get("text", "") for part in parts)
