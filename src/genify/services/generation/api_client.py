"""API Client for the chat completion endpoint
=============================================

Minimal client for an OpenAI-compatible chat API.

Features:
- Model listing with requests; failures degrade to an empty list
- Streaming chat completions with aiohttp, decoded from the
  server-sent event stream as text fragments
- No retries: every failure is either absorbed or raised once
"""

import asyncio
import codecs
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Mapping, Optional, Sequence

import aiohttp
import requests

from genify.constants import (
    DEFAULT_API_BASE,
    DEFAULT_TEMPERATURE,
    EVENT_DATA_PREFIX,
    NON_CHAT_MODEL_MARKERS,
    STREAM_TERMINATOR,
)
from genify.services.service_base import StreamError

from .project import ChatMessage, Model

logger = logging.getLogger(__name__)


def is_chat_model(model: Model) -> bool:
    """False for image and video models."""
    return not any(marker in model.id for marker in NON_CHAT_MODEL_MARKERS)


def _extract_delta(payload: Any) -> Optional[str]:
    """Return ``choices[0].delta.content`` if the event carries one."""
    try:
        content = payload['choices'][0]['delta']['content']
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


async def iter_event_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Decode an event stream into content fragments.

    Chunks are decoded incrementally and split on newlines; a partial
    trailing line is held until the next chunk. The terminator payload
    ends iteration without reading further chunks. Unparseable events
    are skipped.
    """
    decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
    buffer = ''

    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        lines = buffer.split('\n')
        buffer = lines.pop()

        for line in lines:
            if not line.startswith(EVENT_DATA_PREFIX):
                continue
            data = line[len(EVENT_DATA_PREFIX):].rstrip('\r')
            if data == STREAM_TERMINATOR:
                return

            try:
                parsed = json.loads(data)
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed event: {data[:100]}")
                continue

            content = _extract_delta(parsed)
            if content:
                yield content


class ModelClient:
    """Client for model listing and streamed chat completions.

    Usage:
        client = ModelClient(base_url="https://host/v1", api_key="...")
        models = client.list_models()
        async for fragment in client.stream_completion(models[0].id, messages):
            ...
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        api_key: str = '',
        temperature: float = DEFAULT_TEMPERATURE,
        request_timeout: int = 30,
        stream_timeout: int = 300,
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.temperature = temperature
        self.request_timeout = request_timeout
        self.stream_timeout = stream_timeout

        if not self.api_key:
            logger.warning("GENIFY_API_KEY not set; requests will be sent without a valid token")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'ModelClient':
        """Build a client from a Flask config mapping."""
        return cls(
            base_url=config.get('GENIFY_API_BASE', DEFAULT_API_BASE),
            api_key=config.get('GENIFY_API_KEY', ''),
            temperature=config.get('GENIFY_TEMPERATURE', DEFAULT_TEMPERATURE),
            request_timeout=config.get('GENIFY_REQUEST_TIMEOUT', 30),
            stream_timeout=config.get('GENIFY_STREAM_TIMEOUT', 300),
        )

    @property
    def models_url(self) -> str:
        return f"{self.base_url}/models"

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, model: str, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [m.to_dict() for m in messages],
            "stream": True,
            "temperature": self.temperature,
        }

    def list_models(self) -> List[Model]:
        """Fetch chat models; returns an empty list on any failure."""
        try:
            response = requests.get(
                self.models_url,
                headers=self._headers(),
                timeout=self.request_timeout,
            )
            response.raise_for_status()
            data = response.json()
            models = [Model.from_dict(item) for item in data['data']]
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching models: {e}")
            return []
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed models response: {e}")
            return []

        chat_models = [m for m in models if is_chat_model(m)]
        logger.info(f"Fetched {len(chat_models)} chat models ({len(models) - len(chat_models)} filtered out)")
        return chat_models

    async def stream_completion(self, model: str, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """Stream a chat completion as text fragments in arrival order.

        Raises:
            StreamError: on a non-success status or a transport failure.
        """
        payload = self._payload(model, messages)
        logger.info(f"Streaming completion from {model} ({len(messages)} messages)")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.completions_url,
                    json=payload,
                    headers=self._headers(),
                    timeout=aiohttp.ClientTimeout(total=self.stream_timeout),
                ) as response:
                    if not 200 <= response.status < 300:
                        raise StreamError(f"HTTP error! status: {response.status}")

                    async for fragment in iter_event_stream(response.content.iter_any()):
                        yield fragment
        except aiohttp.ClientError as e:
            logger.warning(f"Network error in streaming chat completion: {e}")
            raise StreamError(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            logger.warning(f"Timeout after {self.stream_timeout}s in streaming chat completion")
            raise StreamError("Request timeout") from e
