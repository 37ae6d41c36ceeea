import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from quizgen.core.errors import AIGatewayError


@dataclass
class ChatCompletionClient:
    """
    OpenAI-chat compatible completion gateway (Groq by default).
    """

    base_url: str
    model: str
    api_key: Optional[str] = None
    timeout_seconds: int = 60
    temperature: float = 0.7
    max_tokens: int = 2048
    system_prompt: str = "You are a quiz generator that outputs valid JSON only."

    def __post_init__(self):
        self.logger = logging.getLogger(__name__)

    def generate(self, prompt: str) -> str:
        url = self.base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise AIGatewayError(f"completion API call failed: {exc}") from exc

        if resp.status_code >= 300:
            raise AIGatewayError(f"completion API error status={resp.status_code} body={resp.text[:500]}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise AIGatewayError(f"completion API returned non-JSON body: {resp.text[:200]}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AIGatewayError(f"completion API response has unexpected shape: {str(data)[:200]}") from exc

        if not content:
            raise AIGatewayError("completion API returned empty content")

        self.logger.debug("completion received", extra={"model": self.model, "chars": len(content)})
        return content
