"""
OpenAI JSON client

Thin async wrapper that sends a system prompt + OCR text and returns the
model's answer parsed as a JSON object. Any failure is raised as an
LLMProviderError; deciding what to do about it is the orchestrator's job.
"""

import json
from typing import Dict, Optional

from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from exceptions import LLMProviderError, LLMResponseError


DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIJSONClient:
    """
    Chat-completions client constrained to JSON-object output.

    The per-request timeout matches the orchestrator deadline.
    """

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        logger.info(f"OpenAI JSON client ready (model={model})")

    async def complete_json(self, system_prompt: str, user_text: str, timeout_ms: int) -> Dict:
        """
        Ask the model for a JSON object.

        Args:
            system_prompt: Instructions, including the expected keys
            user_text: OCR text to analyse
            timeout_ms: Request timeout in milliseconds

        Returns:
            Parsed JSON object

        Raises:
            LLMResponseError: Answer was empty, not JSON, or not an object
            LLMProviderError: Transport/API failure
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": f"OCR text:\n\n{user_text or ''}"},
                ],
                response_format={"type": "json_object"},
                temperature=0,
                timeout=timeout_ms / 1000,
            )
        except OpenAIError as e:
            raise LLMProviderError(f"OpenAI request failed: {e}") from e

        content = ""
        if response.choices:
            content = (response.choices[0].message.content or "").strip()
        return parse_json_object(content)


def parse_json_object(content: str) -> Dict:
    """Parse model output, insisting on a top-level JSON object"""
    if not content:
        raise LLMResponseError("Empty model response")
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Model response is not JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMResponseError(f"Model response is {type(parsed).__name__}, expected object")
    return parsed


def build_llm_client(config: Dict) -> Optional[OpenAIJSONClient]:
    """
    Create the LLM client from configuration.

    Returns None when no API key is configured; callers treat that as
    "LLM unavailable" and stay on the regex path.
    """
    llm_config = config.get('llm', {})
    api_key = llm_config.get('api_key')
    if not api_key:
        return None
    return OpenAIJSONClient(api_key=api_key, model=llm_config.get('model') or DEFAULT_MODEL)
