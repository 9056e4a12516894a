"""Adapter tests against in-memory stand-ins for the vendor SDK clients."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from aiclient.llm.errors import LLMCapabilityError, LLMConfigurationError
from aiclient.llm.providers import (
    AnthropicProvider,
    FireworksProvider,
    GeminiProvider,
    OpenAICompatibleProvider,
    OpenAIProvider,
)
from aiclient.llm.types import InvocationRequest, Message, Usage


class _FakeStream:
    """Context-managed iterable mimicking SDK stream objects."""

    def __init__(self, items):
        self._items = list(items)
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True
        return False

    def __iter__(self):
        return iter(self._items)


class _Recorder:
    """Callable that records kwargs and returns a canned value."""

    def __init__(self, result):
        self.result = result
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        return self.result


def _request(**kwargs) -> InvocationRequest:
    messages = kwargs.pop(
        "messages",
        [Message(role="user", content="Hello"), Message(role="assistant", content="Hi"), Message(role="user", content="Bye")],
    )
    return InvocationRequest(model=kwargs.pop("model", "gpt-4o"), messages=messages, system_prompt="Be brief", **kwargs)


def _openai_client(create_result):
    create = _Recorder(create_result)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


def test_openai_invoke_prepends_system_message_and_maps_usage() -> None:
    completion = SimpleNamespace(
        id="chatcmpl-1",
        choices=[SimpleNamespace(message=SimpleNamespace(content="Hello there"))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3, total_tokens=15),
    )
    client, create = _openai_client(completion)
    request = _request(temperature=0.2, max_output_tokens=64)

    response = OpenAIProvider(client=client).invoke(request)

    assert response.content == "Hello there"
    assert response.usage == Usage(input_tokens=12, output_tokens=3, total_tokens=15)
    assert response.provider_request_id == "chatcmpl-1"
    sent = create.calls[0]
    assert sent["messages"][0] == {"role": "system", "content": "Be brief"}
    assert [m["role"] for m in sent["messages"][1:]] == ["user", "assistant", "user"]
    assert sent["temperature"] == 0.2
    assert sent["max_completion_tokens"] == 64
    assert len(request.messages) == 3


def test_openai_invoke_handles_missing_usage_and_choices() -> None:
    client, _ = _openai_client(SimpleNamespace(choices=[], usage=None))
    response = OpenAIProvider(client=client).invoke(_request())
    assert response.content == ""
    assert response.usage == Usage()


def test_openai_stream_yields_deltas_and_final_usage_chunk() -> None:
    def chunk(text, usage=None):
        choices = [SimpleNamespace(delta=SimpleNamespace(content=text))] if text is not None else []
        return SimpleNamespace(id="c1", choices=choices, usage=usage)

    stream = _FakeStream(
        [chunk("Hel"), chunk("lo"), chunk(None, SimpleNamespace(prompt_tokens=5, completion_tokens=2, total_tokens=7))]
    )
    client, create = _openai_client(stream)

    chunks = list(OpenAIProvider(client=client).stream(_request()))

    assert [c.content for c in chunks] == ["Hel", "lo", ""]
    assert chunks[0].usage == Usage()
    assert chunks[-1].usage == Usage(5, 2, 7)
    assert create.calls[0]["stream"] is True
    assert create.calls[0]["stream_options"] == {"include_usage": True}
    assert stream.closed


def test_openai_stream_abandoned_midway_closes_transport() -> None:
    stream = _FakeStream([SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content="x"))], usage=None)] * 3)
    client, _ = _openai_client(stream)

    chunks = OpenAIProvider(client=client).stream(_request())
    next(chunks)
    chunks.close()

    assert stream.closed


def test_openai_images_and_speech() -> None:
    images = _Recorder(SimpleNamespace(data=[SimpleNamespace(url="http://img", revised_prompt="a red cat")]))
    speech = _Recorder(SimpleNamespace(content=b"abc"))
    client = SimpleNamespace(images=SimpleNamespace(generate=images), audio=SimpleNamespace(speech=SimpleNamespace(create=speech)))
    provider = OpenAIProvider(client=client)

    image = provider.generate_image("dall-e-3", "a cat", "1024x1024", 1)
    audio = provider.generate_speech("tts-1", "Hello", "alloy")

    assert (image.url, image.revised_prompt) == ("http://img", "a red cat")
    assert images.calls[0] == {"model": "dall-e-3", "prompt": "a cat", "n": 1, "size": "1024x1024"}
    assert audio == "YWJj"
    assert speech.calls[0] == {"model": "tts-1", "input": "Hello", "voice": "alloy"}


def test_openai_requires_api_key(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(LLMConfigurationError, match="OPENAI_API_KEY"):
        OpenAIProvider()


def test_openai_compatible_requires_base_url() -> None:
    with pytest.raises(LLMConfigurationError):
        OpenAICompatibleProvider(base_url="", api_key="k")


def test_fireworks_maps_model_paths_and_uses_max_tokens() -> None:
    completion = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="ok"))],
        usage=SimpleNamespace(prompt_tokens=1, completion_tokens=1, total_tokens=2),
    )
    client, create = _openai_client(completion)
    provider = FireworksProvider(client=client)

    provider.invoke(_request(model="deepseek-r1", max_output_tokens=10))
    provider.invoke(_request(model="my-finetune"))
    provider.invoke(_request(model="accounts/me/models/custom"))

    assert [c["model"] for c in create.calls] == [
        "accounts/fireworks/models/deepseek-r1",
        "my-finetune",
        "accounts/me/models/custom",
    ]
    assert create.calls[0]["max_tokens"] == 10
    assert provider.name == "fireworks"
    assert not provider.capabilities.supports_images


def test_fireworks_requires_api_key(monkeypatch) -> None:
    monkeypatch.delenv("FIREWORKS_API_KEY", raising=False)
    with pytest.raises(LLMConfigurationError, match="FIREWORKS_API_KEY"):
        FireworksProvider()


def test_anthropic_invoke_uses_native_system_and_computes_total() -> None:
    message = SimpleNamespace(
        id="msg_1",
        content=[SimpleNamespace(type="text", text="Hel"), SimpleNamespace(type="tool_use"), SimpleNamespace(type="text", text="lo")],
        usage=SimpleNamespace(input_tokens=4, output_tokens=6),
    )
    create = _Recorder(message)
    provider = AnthropicProvider(client=SimpleNamespace(messages=SimpleNamespace(create=create)))
    request = _request(
        model="claude-3-5-haiku-latest",
        messages=[Message(role="system", content="Extra rule"), Message(role="user", content="Hello")],
    )

    response = provider.invoke(request)

    assert response.content == "Hello"
    assert response.usage == Usage(input_tokens=4, output_tokens=6, total_tokens=10)
    sent = create.calls[0]
    assert sent["system"] == "Be brief\n\nExtra rule"
    assert sent["messages"] == [{"role": "user", "content": "Hello"}]
    assert sent["max_tokens"] == 4096
    assert "temperature" not in sent


def test_anthropic_stream_reports_usage_on_message_delta() -> None:
    events = [
        SimpleNamespace(type="message_start", message=SimpleNamespace(id="msg_2", usage=SimpleNamespace(input_tokens=9, output_tokens=1))),
        SimpleNamespace(type="content_block_start"),
        SimpleNamespace(type="content_block_delta", delta=SimpleNamespace(type="text_delta", text="Bon")),
        SimpleNamespace(type="content_block_delta", delta=SimpleNamespace(type="text_delta", text="jour")),
        SimpleNamespace(type="message_delta", usage=SimpleNamespace(output_tokens=5)),
        SimpleNamespace(type="message_stop"),
    ]
    stream = _FakeStream(events)
    provider = AnthropicProvider(client=SimpleNamespace(messages=SimpleNamespace(stream=_Recorder(stream))))

    chunks = list(provider.stream(_request(model="claude-3-5-sonnet-latest")))

    assert [c.content for c in chunks] == ["Bon", "jour", ""]
    assert chunks[0].usage == Usage()
    assert chunks[-1].usage == Usage(input_tokens=9, output_tokens=5, total_tokens=14)
    assert chunks[-1].provider_request_id == "msg_2"
    assert stream.closed


def test_anthropic_lacks_images_and_requires_key(monkeypatch) -> None:
    provider = AnthropicProvider(client=SimpleNamespace())
    assert not provider.capabilities.supports_images
    with pytest.raises(LLMCapabilityError):
        provider.generate_image("claude-3-5-sonnet-latest", "cat", "1024x1024", 1)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(LLMConfigurationError, match="ANTHROPIC_API_KEY"):
        AnthropicProvider()


def test_gemini_invoke_maps_roles_and_usage_metadata() -> None:
    result = SimpleNamespace(
        text="Bonjour",
        response_id="g-1",
        usage_metadata=SimpleNamespace(prompt_token_count=2, candidates_token_count=3, total_token_count=7),
    )
    generate = _Recorder(result)
    provider = GeminiProvider(client=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))

    response = provider.invoke(_request(model="gemini-2.0-flash", temperature=0))

    assert response.content == "Bonjour"
    assert response.usage == Usage(input_tokens=2, output_tokens=3, total_tokens=7)
    sent = generate.calls[0]
    assert [c["role"] for c in sent["contents"]] == ["user", "model", "user"]
    assert sent["contents"][0]["parts"] == [{"text": "Hello"}]
    assert sent["config"] == {"system_instruction": "Be brief", "temperature": 0}


def test_gemini_stream_yields_chunks() -> None:
    chunks_in = [
        SimpleNamespace(text="a", usage_metadata=None),
        SimpleNamespace(text=None, usage_metadata=SimpleNamespace(prompt_token_count=1, candidates_token_count=2)),
    ]
    provider = GeminiProvider(
        client=SimpleNamespace(models=SimpleNamespace(generate_content_stream=_Recorder(iter(chunks_in))))
    )

    chunks = list(provider.stream(_request(model="gemini-2.0-flash")))

    assert [c.content for c in chunks] == ["a", ""]
    assert chunks[1].usage == Usage(input_tokens=1, output_tokens=2, total_tokens=3)


def test_gemini_requires_api_key(monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(LLMConfigurationError, match="GEMINI_API_KEY"):
        GeminiProvider()
