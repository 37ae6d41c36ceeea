import logging

from google import genai
from google.api_core.exceptions import NotFound
from google.genai import types as genai_types
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from quizgen.core.errors import AIGatewayError


class GeminiClient:
    """Gemini-backed completion gateway returning raw response text."""

    def __init__(
        self,
        api_key: str,
        model_name: str,
        model_preferences: list[str],
        max_output_tokens: int,
        temperature: float = 0.7,
        max_attempts: int = 2,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name
        self.model_preferences = model_preferences
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.max_attempts = max_attempts
        self._resolved_model: str | None = None

    def _resolve_model(self) -> str:
        if self._resolved_model:
            return self._resolved_model

        try:
            available = [m.name for m in self.client.models.list()]
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("Gemini model listing failed, using configured model: %s", exc)
            self._resolved_model = self._ensure_model_path(self.model_name or self.model_preferences[0])
            return self._resolved_model

        normalized = {self._normalize_model_name(n): n for n in available}
        for cand in [self.model_name, *self.model_preferences]:
            key = self._normalize_model_name(cand)
            match = normalized.get(key) or next(
                (original for name, original in normalized.items() if name.startswith(key)), None
            )
            if match:
                self._resolved_model = self._ensure_model_path(match)
                self.logger.info("Using Gemini model: %s", self._resolved_model)
                return self._resolved_model

        fallback = available[0] if available else self.model_name
        self._resolved_model = self._ensure_model_path(fallback)
        self.logger.warning("Preferred Gemini model not available, falling back to %s", self._resolved_model)
        return self._resolved_model

    def _normalize_model_name(self, name: str) -> str:
        return name.replace("models/", "").strip()

    def _ensure_model_path(self, name: str) -> str:
        return name if name.startswith("models/") else f"models/{name}"

    def _generate_content(self, prompt: str, model_name: str):
        for attempt in Retrying(
            reraise=True,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(1),
            retry=retry_if_exception(lambda exc: not isinstance(exc, (TypeError, NotFound))),
        ):
            with attempt:
                return self.client.models.generate_content(
                    model=model_name,
                    contents=prompt,
                    config=genai_types.GenerateContentConfig(
                        max_output_tokens=self.max_output_tokens,
                        temperature=self.temperature,
                        response_mime_type="application/json",
                    ),
                )

    def generate(self, prompt: str) -> str:
        model_name = self._resolve_model()
        try:
            response = self._generate_content(prompt, model_name)
        except NotFound as exc:
            self.logger.error("Gemini model not found: %s", model_name)
            raise AIGatewayError(f"Gemini model not found: {model_name}") from exc
        except Exception as exc:  # noqa: BLE001
            raise AIGatewayError(f"Gemini generation failed: {exc}") from exc

        text = self._extract_text(response)
        if not text:
            raise AIGatewayError("Gemini returned an empty response")
        return text

    def _extract_text(self, response) -> str:
        if getattr(response, "text", None):
            return response.text
        candidates = getattr(response, "candidates", None)
        if candidates:
            parts = [getattr(part, "text", None) for part in candidates[0].content.parts]
            return "\n".join(p for p in parts if p)
        return ""
