from types import SimpleNamespace

import pytest

from quizgen.clients import gemini_client
from quizgen.clients.gemini_client import GeminiClient
from quizgen.core.errors import AIGatewayError


class FakeModels:
    def __init__(self, names, responses):
        self.names = names
        self.responses = list(responses)
        self.calls = []

    def list(self):
        return [SimpleNamespace(name=n) for n in self.names]

    def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_models(monkeypatch):
    holder = {}

    def _install(names, responses):
        models = FakeModels(names, responses)
        holder["models"] = models
        monkeypatch.setattr(gemini_client.genai, "Client", lambda api_key: SimpleNamespace(models=models))
        return models

    return _install


def _client(**kwargs):
    defaults = {
        "api_key": "key",
        "model_name": "models/gemini-2.5-flash",
        "model_preferences": ["models/gemini-2.0-flash"],
        "max_output_tokens": 2048,
        "max_attempts": 1,
    }
    defaults.update(kwargs)
    return GeminiClient(**defaults)


def test_returns_response_text(fake_models):
    models = fake_models(["models/gemini-2.5-flash"], [SimpleNamespace(text='{"questions": []}')])

    text = _client().generate("prompt")

    assert text == '{"questions": []}'
    assert models.calls[0]["model"] == "models/gemini-2.5-flash"
    assert models.calls[0]["config"].response_mime_type == "application/json"


def test_falls_back_to_preferred_model(fake_models):
    models = fake_models(["models/gemini-2.0-flash-001"], [SimpleNamespace(text="{}")])

    _client().generate("prompt")

    assert models.calls[0]["model"] == "models/gemini-2.0-flash-001"


def test_joins_candidate_parts(fake_models):
    parts = [SimpleNamespace(text='{"a":'), SimpleNamespace(text=" 1}")]
    response = SimpleNamespace(text=None, candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])
    fake_models(["models/gemini-2.5-flash"], [response])

    assert _client().generate("prompt") == '{"a":\n 1}'


def test_empty_response_is_gateway_error(fake_models):
    fake_models(["models/gemini-2.5-flash"], [SimpleNamespace(text="", candidates=None)])

    with pytest.raises(AIGatewayError):
        _client().generate("prompt")


def test_sdk_failure_is_gateway_error(fake_models):
    fake_models(["models/gemini-2.5-flash"], [RuntimeError("quota exceeded")])

    with pytest.raises(AIGatewayError, match="quota exceeded"):
        _client().generate("prompt")
