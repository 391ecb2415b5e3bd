"""
Tests for the Gemini restoration client with a stubbed SDK client.
"""

import base64
from types import SimpleNamespace

import pytest
from google.genai.types import Modality

from glowback.errors import EncodingError, RemoteServiceError
from glowback.services.gemini import RESTORE_PROMPT, GeminiRestorationService, first_image


def _response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def _text(t):
    return SimpleNamespace(text=t, inline_data=None)


def _image(data):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type="image/png"))


class FakeModels:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc:
            raise self.exc
        return self.response


def _service(models, model="gemini-test"):
    return GeminiRestorationService(model=model, client=SimpleNamespace(models=models))


class TestRestore:

    def test_returns_first_image_part(self):
        models = FakeModels(_response(_text("here you go"), _image(b"IMG1"), _image(b"IMG2")))
        assert _service(models).restore(base64.b64encode(b"raw").decode(), "image/jpeg") == b"IMG1"

    def test_request_shape(self):
        models = FakeModels(_response(_image(b"x")))
        _service(models).restore(base64.b64encode(b"raw-bytes").decode(), "image/jpeg")

        call = models.calls[0]
        assert call["model"] == "gemini-test"
        part, prompt = call["contents"]
        assert part.inline_data.data == b"raw-bytes"
        assert part.inline_data.mime_type == "image/jpeg"
        assert prompt == RESTORE_PROMPT
        assert list(call["config"].response_modalities) == [Modality.IMAGE]

    def test_no_image_returns_none(self):
        models = FakeModels(_response(_text("sorry")))
        assert _service(models).restore(base64.b64encode(b"raw").decode(), "image/png") is None

    def test_sdk_error_is_wrapped(self):
        models = FakeModels(exc=RuntimeError("429 RESOURCE_EXHAUSTED"))
        with pytest.raises(RemoteServiceError) as ei:
            _service(models).restore(base64.b64encode(b"raw").decode(), "image/png")
        assert str(ei.value) == "Gemini API Error: 429 RESOURCE_EXHAUSTED"
        assert isinstance(ei.value.__cause__, RuntimeError)

    def test_bad_base64(self):
        with pytest.raises(EncodingError):
            _service(FakeModels()).restore("***not base64***", "image/png")


@pytest.mark.parametrize("response", [
    SimpleNamespace(candidates=None),
    SimpleNamespace(candidates=[]),
    SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
    SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=None))]),
])
def test_first_image_tolerates_empty_responses(response):
    assert first_image(response) is None


def test_prompt_forbids_new_content():
    assert "colorize" in RESTORE_PROMPT
    assert "Do not add any elements" in RESTORE_PROMPT
