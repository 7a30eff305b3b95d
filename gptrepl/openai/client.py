"""OpenAI completion client built on the official ``openai`` SDK.

Establishment calls ``chat.completions.create(..., stream=True)``; any SDK
exception raised there is classified into a network-family ``ReplError`` so
the retry policy can act on it. The returned SDK stream is handed to a
producer thread (:func:`gptrepl.base.streaming.start_stream`), which owns it
and closes it exactly once.

Timeouts and connection pooling are left to the SDK defaults.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from openai import OpenAI

from ..base.errors import ReplError, classify_exception
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import Message
from ..base.streaming import ChatStream, start_stream

__all__ = ["OpenAICompletionClient", "translate_chunk"]


def translate_chunk(chunk: Any) -> Optional[str]:
    """Return the text carried by one ``ChatCompletionChunk`` (or ``None``)."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return None
    delta = getattr(choices[0], "delta", None)
    if delta is None:
        return None
    return getattr(delta, "content", None)


class OpenAICompletionClient:
    """``CompletionClient`` talking to the OpenAI Chat Completions API.

    Parameters
    ----------
    api_key:
        Credential passed to the SDK.
    base_url:
        Optional alternate endpoint (OpenAI-compatible servers).
    client_factory:
        Callable building the SDK client; defaults to ``openai.OpenAI``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        client_factory: Callable[..., Any] = OpenAI,
    ) -> None:
        kwargs = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = client_factory(**kwargs)
        self._logger = get_logger("gptrepl.openai")

    def send_context(self, messages: Sequence[Message], model: str) -> ChatStream:
        payload = [m.to_dict() for m in messages]
        try:
            sdk_stream = self._client.chat.completions.create(
                model=model,
                messages=payload,
                stream=True,
            )
        except Exception as e:  # noqa: BLE001 - SDK and transport errors are normalized here
            code = classify_exception(e)
            normalized_log_event(
                self._logger,
                "exchange.error",
                LogContext(model=model),
                phase="establish",
                error_code=code.value,
                error=str(e),
            )
            raise ReplError(code=code, message=str(e), raw=e) from e
        return start_stream(sdk_stream, translate_chunk)
