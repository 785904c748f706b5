"""
Two-tier reply generation.

PRIMARY_ATTEMPT posts the turn to the configured relay (an n8n webhook or any
compatible endpoint). When that fails, exactly one FALLBACK_ATTEMPT calls the
provider's chat-completions API directly with a locally assembled prompt.
Failure of both ends the turn with OrchestrationExhausted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import httpx

from cyberguard.errors import OrchestrationExhausted, ProviderFailure
from cyberguard.logging_config import logger
from cyberguard.models import ROLE_USER, Message
from cyberguard.provider.prompts import FALLBACK_APOLOGY, get_system_prompt
from cyberguard.schemas import OrchestrationResult, ProviderAttempt, ProviderMessage
from cyberguard.services.history_service import serialize_history
from cyberguard.settings import settings


# ---------------------------------------------------------------------------
# Reply extraction strategies
# ---------------------------------------------------------------------------


class ReplyExtractor(Protocol):
    name: str

    def __call__(self, payload: Any) -> str | None: ...


@dataclass(frozen=True)
class FieldExtractor:
    """Top-level string field of a JSON object, e.g. {"response": "..."}."""

    field: str

    @property
    def name(self) -> str:
        return f"field:{self.field}"

    def __call__(self, payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        value = payload.get(self.field)
        if isinstance(value, str) and value:
            return value
        return None


@dataclass(frozen=True)
class SerializedPayloadExtractor:
    """Last resort: the whole payload as JSON text."""

    name: str = "serialized_payload"

    def __call__(self, payload: Any) -> str | None:
        if payload is None:
            return None
        return json.dumps(payload, ensure_ascii=False)


@dataclass(frozen=True)
class FirstChoiceContentExtractor:
    """OpenAI-style `choices[0].message.content`."""

    name: str = "choices[0].message.content"

    def __call__(self, payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict):
            return None
        message = first.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        if isinstance(content, str) and content:
            return content
        return None


RELAY_REPLY_EXTRACTORS: tuple[ReplyExtractor, ...] = (
    FieldExtractor("response"),
    FieldExtractor("output"),
    FieldExtractor("text"),
    SerializedPayloadExtractor(),
)

COMPLETION_REPLY_EXTRACTORS: tuple[ReplyExtractor, ...] = (FirstChoiceContentExtractor(),)


def extract_reply(payload: Any, extractors: Sequence[ReplyExtractor]) -> str | None:
    """Run extractors in order; the first non-empty result wins."""
    for extractor in extractors:
        reply = extractor(payload)
        if reply:
            return reply
    return None


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class ReplyProvider(Protocol):
    name: str

    async def complete(self, *, message: str, history: Sequence[Message], model: str) -> str: ...


def _read_json(provider: str, resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderFailure(
            provider,
            f"{provider} returned a non-JSON body",
            upstream_status=resp.status_code,
            body=resp.text,
        ) from exc


class RelayClient:
    """Primary delegation endpoint: receives {message, history, model}."""

    name = "relay"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        url: str,
        timeout: float,
        extractors: Sequence[ReplyExtractor] = RELAY_REPLY_EXTRACTORS,
    ) -> None:
        self._client = client
        self._url = url
        self._timeout = timeout
        self._extractors = tuple(extractors)

    async def complete(self, *, message: str, history: Sequence[Message], model: str) -> str:
        body = {"message": message, "history": serialize_history(history), "model": model}
        try:
            resp = await self._client.post(self._url, json=body, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise ProviderFailure(self.name, f"relay request failed: {exc!r}") from exc

        if not resp.is_success:
            raise ProviderFailure(
                self.name,
                f"relay returned {resp.status_code}",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        reply = extract_reply(_read_json(self.name, resp), self._extractors)
        if not reply:
            raise ProviderFailure(self.name, "relay response carried no reply", upstream_status=resp.status_code)
        return reply


def build_fallback_messages(
    *,
    system_prompt: str,
    history: Sequence[Message],
    message: str,
) -> list[ProviderMessage]:
    """
    System prompt, then the history window, then the new user message unless
    the window already ends with exactly that user turn.
    """
    messages = [ProviderMessage(role="system", content=system_prompt)]
    messages.extend(ProviderMessage(role=item.role, content=item.content) for item in history)

    last = messages[-1]
    if last.role != ROLE_USER or last.content != message:
        messages.append(ProviderMessage(role=ROLE_USER, content=message))
    return messages


class OpenRouterClient:
    """Direct chat-completions call used when the relay is unavailable."""

    name = "openrouter"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str,
        api_key: str | None,
        timeout: float,
        max_tokens: int,
        temperature: float,
        referer: str | None = None,
        title: str | None = None,
        system_prompt: str | None = None,
    ) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._api_key = api_key
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._referer = referer
        self._title = title
        self._system_prompt = system_prompt

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._title:
            headers["X-Title"] = self._title
        return headers

    async def complete(self, *, message: str, history: Sequence[Message], model: str) -> str:
        if not self._api_key:
            raise ProviderFailure(self.name, "OPENROUTER_API_KEY not set")

        messages = build_fallback_messages(
            system_prompt=self._system_prompt or get_system_prompt(),
            history=history,
            message=message,
        )
        body = {
            "model": model,
            "messages": [m.as_payload() for m in messages],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }
        try:
            resp = await self._client.post(
                self._url, json=body, headers=self._headers(), timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise ProviderFailure(self.name, f"openrouter request failed: {exc!r}") from exc

        if not resp.is_success:
            raise ProviderFailure(
                self.name,
                f"OpenRouter error {resp.status_code}: {resp.text}",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        reply = extract_reply(_read_json(self.name, resp), COMPLETION_REPLY_EXTRACTORS)
        return reply or FALLBACK_APOLOGY


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def _failed_attempt(stage: str, exc: ProviderFailure) -> ProviderAttempt:
    return ProviderAttempt(
        stage=stage,
        ok=False,
        error=exc.message,
        upstream_status=exc.upstream_status,
    )


class ChatOrchestrator:
    def __init__(self, primary: ReplyProvider, fallback: ReplyProvider) -> None:
        self.primary = primary
        self.fallback = fallback

    async def generate_reply(
        self,
        *,
        message: str,
        history: Sequence[Message],
        model: str,
    ) -> OrchestrationResult:
        try:
            reply = await self.primary.complete(message=message, history=history, model=model)
        except ProviderFailure as primary_exc:
            primary_error = primary_exc
            logger.warning(
                "%s failed, falling back to direct %s call: %s",
                self.primary.name,
                self.fallback.name,
                primary_exc.message,
            )
            attempts = [_failed_attempt("primary", primary_error)]
        else:
            return OrchestrationResult(
                reply=reply,
                model=model,
                attempts=[ProviderAttempt(stage="primary", ok=True)],
            )

        try:
            reply = await self.fallback.complete(message=message, history=history, model=model)
        except ProviderFailure as fallback_exc:
            logger.error(
                "Both providers failed (model=%s): primary=%s; fallback=%s",
                model,
                primary_error.message,
                fallback_exc.message,
            )
            raise OrchestrationExhausted(primary_error, fallback_exc) from fallback_exc

        attempts.append(ProviderAttempt(stage="fallback", ok=True))
        return OrchestrationResult(reply=reply, model=model, attempts=attempts)


def build_orchestrator(client: httpx.AsyncClient) -> ChatOrchestrator:
    """Wire the relay and the OpenRouter fallback from settings."""
    primary = RelayClient(
        client,
        url=settings.relay_webhook_url,
        timeout=settings.upstream_timeout,
    )
    fallback = OpenRouterClient(
        client,
        base_url=settings.openrouter_base_url,
        api_key=settings.openrouter_api_key,
        timeout=settings.upstream_timeout,
        max_tokens=settings.fallback_max_tokens,
        temperature=settings.fallback_temperature,
        referer=settings.openrouter_referer,
        title=settings.openrouter_title,
    )
    return ChatOrchestrator(primary, fallback)


__all__ = [
    "COMPLETION_REPLY_EXTRACTORS",
    "ChatOrchestrator",
    "FieldExtractor",
    "FirstChoiceContentExtractor",
    "OpenRouterClient",
    "RELAY_REPLY_EXTRACTORS",
    "RelayClient",
    "ReplyExtractor",
    "ReplyProvider",
    "SerializedPayloadExtractor",
    "build_fallback_messages",
    "build_orchestrator",
    "extract_reply",
]
