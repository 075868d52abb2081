from __future__ import annotations

from dataclasses import replace

import pytest

from ssage.pipeline import Pipeline
from ssage.types import Request


class RecordingProvider:
    def __init__(self, response: str = "ok", tokens: list[str] | None = None) -> None:
        self.response = response
        self.tokens = tokens if tokens is not None else [response]
        self.prompts: list[str] = []

    @property
    def name(self) -> str:
        return "recording"

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response

    def generate_stream(self, prompt: str, on_token) -> str:
        self.prompts.append(prompt)
        for token in self.tokens:
            on_token(token)
        return "".join(self.tokens)


class TagMiddleware:
    """Appends its tag to the prompt on the way in and to the response on the way out."""

    def __init__(self, tag: str, trail: list[str]) -> None:
        self.tag = tag
        self.trail = trail

    def wrap(self, call_next):
        def _handler(req: Request) -> str:
            self.trail.append(f"in:{self.tag}")
            out = call_next(replace(req, prompt=req.prompt + self.tag))
            self.trail.append(f"out:{self.tag}")
            return out + self.tag

        return _handler

    def wrap_stream(self, call_next):
        def _handler(req: Request, on_token) -> str:
            self.trail.append(f"in:{self.tag}")
            out = call_next(replace(req, prompt=req.prompt + self.tag), on_token)
            self.trail.append(f"out:{self.tag}")
            return out

        return _handler


class FailingProvider(RecordingProvider):
    def generate(self, prompt: str) -> str:
        raise RuntimeError("backend down")

    def generate_stream(self, prompt: str, on_token) -> str:
        raise RuntimeError("backend down")


def test_pipeline_without_middlewares_calls_provider_directly():
    provider = RecordingProvider(response="hello")
    pipe = Pipeline(provider)

    assert pipe.run("ls -la", "explain") == "hello"
    assert provider.prompts == ["ls -la"]


def test_first_middleware_is_outermost():
    trail: list[str] = []
    provider = RecordingProvider(response="r")
    pipe = Pipeline(provider, TagMiddleware("A", trail), TagMiddleware("B", trail))

    out = pipe.run("p", "explain")

    assert provider.prompts == ["pAB"]
    assert out == "rBA"
    assert trail == ["in:A", "in:B", "out:B", "out:A"]


def test_stream_ordering_matches_one_shot():
    trail: list[str] = []
    provider = RecordingProvider(tokens=["x"])
    pipe = Pipeline(provider, TagMiddleware("A", trail), TagMiddleware("B", trail))

    pipe.run_stream("p", "explain", lambda _token: None)

    assert provider.prompts == ["pAB"]
    assert trail == ["in:A", "in:B", "out:B", "out:A"]


def test_stream_returns_accumulated_text_and_delivers_every_token():
    provider = RecordingProvider(tokens=["Hel", "lo", " world"])
    pipe = Pipeline(provider)
    seen: list[str] = []

    out = pipe.run_stream("p", "explain", seen.append)

    assert seen == ["Hel", "lo", " world"]
    assert out == "Hello world"


def test_middlewares_are_kept_in_declared_order():
    trail: list[str] = []
    a = TagMiddleware("A", trail)
    b = TagMiddleware("B", trail)
    pipe = Pipeline(RecordingProvider(), a, b)

    assert pipe.middlewares == (a, b)


def test_provider_errors_propagate_unchanged():
    pipe = Pipeline(FailingProvider())

    with pytest.raises(RuntimeError, match="backend down"):
        pipe.run("p", "explain")
    with pytest.raises(RuntimeError, match="backend down"):
        pipe.run_stream("p", "explain", lambda _token: None)
