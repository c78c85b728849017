import logging

import requests

from storefront.errors import ModelResponseError, NetworkFailure

logger = logging.getLogger(__name__)


def chat_headers(api_key):
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


class ChatCompletionClient:
    """
    Minimal client for an OpenAI-compatible chat completions endpoint.

    Only the first choice's message content is consumed.
    """

    def __init__(self, api_url, api_key, model, temperature=0.7, max_tokens=1000, http=None, timeout=None):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.http = http or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, http=None):
        return cls(
            api_url=config["OPENAI_API_URL"],
            api_key=config["OPENAI_API_KEY"],
            model=config["OPENAI_MODEL"],
            temperature=config["OPENAI_TEMPERATURE"],
            max_tokens=config["OPENAI_MAX_TOKENS"],
            http=http,
            timeout=config.get("HTTP_TIMEOUT"),
        )

    def build_payload(self, messages):
        return {
            "model": self.model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def complete(self, messages):
        """Send one chat turn and return the assistant text."""
        try:
            response = self.http.post(
                self.api_url,
                json=self.build_payload(messages),
                headers=chat_headers(self.api_key),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkFailure(f"Request to language model failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning("[Advisor] Model error body: %s", response.text[:500])
            raise NetworkFailure(
                f"AI service error (code: {response.status_code})",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ModelResponseError("Invalid response from AI service") from e

        choices = body.get("choices") or []
        if not choices:
            raise ModelResponseError("No response from AI")

        content = (choices[0].get("message") or {}).get("content")
        if content is None:
            raise ModelResponseError("No response from AI")
        return content
