from __future__ import annotations

import asyncio
import base64
import inspect
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import google.genai as genai

from consensus.config import IMAGE_MODEL, TEMPERATURE, TEXT_MODEL
from consensus.schemas import RequestType

logger = logging.getLogger(__name__)


@dataclass
class ExecutorResult:
    content: Any
    model: str = ""
    confidence: float | None = None                      # executor's own quality signal, if any
    reasoning: str = ""


class TaskExecutor(ABC):
    """Capability the engine calls once per node (and once more on fallback)."""

    @abstractmethod
    async def execute(self, payload: Any, request_type: RequestType) -> Any:
        ...

    @property
    @abstractmethod
    def executor_id(self) -> str:
        ...


class CallableExecutor(TaskExecutor):
    """Adapts a plain sync or async function ``fn(payload, request_type)``.

    Sync functions run in a worker thread so they never block the round.
    """

    def __init__(self, fn: Callable[[Any, RequestType], Any], name: str = "callable"):
        self._fn = fn
        self._name = name

    @property
    def executor_id(self) -> str:
        return self._name

    async def execute(self, payload: Any, request_type: RequestType) -> Any:
        if inspect.iscoroutinefunction(self._fn):
            return await self._fn(payload, request_type)
        result = await asyncio.to_thread(self._fn, payload, request_type)
        if inspect.isawaitable(result):
            return await result
        return result


# ── Gemini ──────────────────────────────────────────────────────────

SELF_REPORT_INSTRUCTION = """\
After completing the task, respond with ONLY a JSON object in this exact format (no other text):
{
  "result": "your answer",
  "confidence": score_between_0_and_1,
  "reasoning": "Brief explanation of your answer (2-3 sentences max)"
}
"""

TASK_PREFIXES: dict[RequestType, str] = {
    RequestType.GENERATE: "",
    RequestType.ANALYZE: "Analyze this image: ",
    RequestType.ENHANCE: "Enhance this prompt for better AI art generation: ",
    RequestType.VALIDATE: "Validate and score this AI art concept: ",
}


def _extract_json(text: str) -> dict:
    """Extract the first JSON object from model output, tolerating markdown fences."""
    text = text.strip()
    if text.startswith("{"):
        return json.loads(text)

    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if match:
        return json.loads(match.group(1))

    start = text.index("{")
    end = text.rindex("}") + 1
    return json.loads(text[start:end])


def _prompt_text(payload: Any) -> str:
    if isinstance(payload, dict):
        return str(payload.get("prompt", ""))
    return str(payload)


class GeminiExecutor(TaskExecutor):
    """Routes each request type to a Gemini model, mirroring the art pipeline.

    ``generate`` goes to the image-capable model and may return inline images.
    Every other type goes to the text model and is asked for a JSON
    self-report, which becomes the response's confidence and reasoning.
    """

    def __init__(self, text_model: str | None = None, image_model: str | None = None):
        self._text_model = text_model or TEXT_MODEL
        self._image_model = image_model or IMAGE_MODEL
        self._client = genai.Client(api_key=os.environ["GEMINI_API_KEY"])

    @property
    def executor_id(self) -> str:
        return f"gemini:{self._text_model}"

    async def execute(self, payload: Any, request_type: RequestType) -> ExecutorResult:
        prompt = TASK_PREFIXES[request_type] + _prompt_text(payload)
        if request_type == RequestType.GENERATE:
            return await self._generate(prompt)

        resp = await asyncio.to_thread(
            self._client.models.generate_content,
            model=self._text_model,
            contents=prompt,
            config=genai.types.GenerateContentConfig(
                system_instruction=SELF_REPORT_INSTRUCTION,
                temperature=TEMPERATURE,
                response_modalities=["TEXT"],
            ),
        )
        text = resp.text or ""
        try:
            data = _extract_json(text)
        except (json.JSONDecodeError, ValueError):
            logger.warning("No JSON self-report from %s, using raw text", self._text_model)
            return ExecutorResult(content=text, model=self._text_model)

        confidence = data.get("confidence")
        return ExecutorResult(
            content=data.get("result", text),
            model=self._text_model,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
            reasoning=str(data.get("reasoning", "")),
        )

    async def _generate(self, prompt: str) -> ExecutorResult:
        resp = await asyncio.to_thread(
            self._client.models.generate_content,
            model=self._image_model,
            contents=prompt,
            config=genai.types.GenerateContentConfig(
                temperature=TEMPERATURE,
                response_modalities=["TEXT", "IMAGE"],
            ),
        )
        texts: list[str] = []
        images: list[dict[str, str]] = []
        for candidate in resp.candidates or []:
            for part in candidate.content.parts or []:
                if part.text:
                    texts.append(part.text)
                elif part.inline_data is not None:
                    images.append({
                        "mime_type": part.inline_data.mime_type,
                        "data": base64.b64encode(part.inline_data.data).decode(),
                    })
        return ExecutorResult(
            content={"text": "\n".join(texts), "images": images},
            model=self._image_model,
            reasoning="\n".join(texts),
        )


def get_default_executor() -> TaskExecutor:
    """Return the Gemini executor, failing early when no API key is configured."""
    if not os.environ.get("GEMINI_API_KEY"):
        raise RuntimeError("GEMINI_API_KEY not set. Get one free at https://aistudio.google.com/apikey")
    return GeminiExecutor()
