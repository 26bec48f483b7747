"""Completion client for the campaign analysis request."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from anthropic import Anthropic
from openai import OpenAI

from Campaign_analyzer.config import CompletionConfig
from Campaign_analyzer.errors import CompletionError
from Campaign_analyzer.models import AnalysisResult
from Campaign_analyzer.repair import repair_analysis_response


def build_request_body(prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
    return {"prompt": prompt, "temperature": temperature, "maxTokens": int(max_tokens)}


def extract_response_text(envelope: Any) -> str:
    """Return ``content[0].text`` from a provider message envelope."""
    content = envelope.get("content") if isinstance(envelope, dict) else None
    if not isinstance(content, list) or not content:
        raise CompletionError("Completion response did not contain any content.")
    first = content[0]
    text = first.get("text") if isinstance(first, dict) else getattr(first, "text", None)
    if not isinstance(text, str):
        raise CompletionError("Completion response did not contain text content.")
    return text


def _provider_message(payload: Any) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return "Unknown error"


class CompletionClient:
    """Send one prompt and return the provider's message envelope.

    ``proxy`` posts ``{prompt, temperature, maxTokens}`` to a relay that owns
    the API key; ``anthropic`` and ``openai`` call the SDKs directly. There is
    no retry: a failed call raises :class:`CompletionError`.
    """

    def __init__(self, config: CompletionConfig, *, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session

    def _get_api_key(self) -> str:
        api_key = self.config.api_key()
        if not api_key:
            raise CompletionError(
                f"API key not found in environment variable '{self.config.api_key_env}'."
            )
        return api_key

    def _call_proxy(self, body: Dict[str, Any]) -> Dict[str, Any]:
        http = self.session or requests
        try:
            response = http.post(self.config.proxy_url, json=body, timeout=self.config.timeout)
        except requests.RequestException as exc:
            raise CompletionError(f"API request failed: {exc}") from exc
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not response.ok:
            raise CompletionError(
                f"API request failed: {response.status_code} - {_provider_message(payload)}",
                status_code=response.status_code,
            )
        if not isinstance(payload, dict):
            raise CompletionError("API request failed: response body was not a JSON object.")
        return payload

    def _call_anthropic(self, body: Dict[str, Any]) -> Dict[str, Any]:
        client = Anthropic(api_key=self._get_api_key())
        try:
            response = client.messages.create(
                model=self.config.model,
                max_tokens=body["maxTokens"],
                temperature=body["temperature"],
                messages=[{"role": "user", "content": body["prompt"]}],
            )
        except Exception as exc:
            raise CompletionError(
                f"API request failed: {getattr(exc, 'status_code', 'error')} - {exc}",
                status_code=getattr(exc, "status_code", None),
            ) from exc
        if hasattr(response, "model_dump"):
            return response.model_dump()
        return {"content": [{"type": "text", "text": block.text} for block in response.content if hasattr(block, "text")]}

    def _call_openai(self, body: Dict[str, Any]) -> Dict[str, Any]:
        client = OpenAI(api_key=self._get_api_key())
        try:
            response = client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": body["prompt"]}],
                temperature=body["temperature"],
                max_completion_tokens=body["maxTokens"],
            )
        except Exception as exc:
            raise CompletionError(
                f"API request failed: {getattr(exc, 'status_code', 'error')} - {exc}",
                status_code=getattr(exc, "status_code", None),
            ) from exc
        message = response.choices[0].message
        if isinstance(message.content, str):
            text = message.content
        else:
            text = "".join(
                block["text"] if isinstance(block, dict) and "text" in block else str(block)
                for block in message.content or []
            )
        return {"content": [{"type": "text", "text": text}]}

    def complete(self, prompt: str, *, temperature: Optional[float] = None) -> Dict[str, Any]:
        body = build_request_body(
            prompt,
            self.config.temperature if temperature is None else temperature,
            self.config.max_tokens,
        )
        provider = self.config.provider.lower()
        if provider == "proxy":
            return self._call_proxy(body)
        if provider == "openai":
            return self._call_openai(body)
        if provider == "anthropic":
            return self._call_anthropic(body)
        raise CompletionError(f"Unknown completion provider '{self.config.provider}'.")

    def analyze(self, prompt: str, *, temperature: Optional[float] = None) -> AnalysisResult:
        """Run the completion and repair whatever text comes back."""
        envelope = self.complete(prompt, temperature=temperature)
        return repair_analysis_response(extract_response_text(envelope))
