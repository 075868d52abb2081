from __future__ import annotations

import platform

import pytest

from ssage.middlewares import ContextEnhancer
from ssage.middlewares.enhancer import system_context
from ssage.types import Request


@pytest.fixture
def fixed_host(monkeypatch):
    monkeypatch.setattr(platform, "system", lambda: "Linux")
    monkeypatch.setattr(platform, "machine", lambda: "x86_64")
    monkeypatch.setenv("SHELL", "/bin/zsh")


def test_system_context_format(fixed_host):
    assert system_context() == "[System context: OS=linux, Arch=amd64, Shell=/bin/zsh]\n"


@pytest.mark.parametrize(
    "machine, label",
    [("aarch64", "arm64"), ("arm64", "arm64"), ("i686", "386"), ("riscv64", "riscv64")],
)
def test_arch_labels(monkeypatch, machine, label):
    monkeypatch.setattr(platform, "machine", lambda: machine)
    assert f"Arch={label}," in system_context()


def test_missing_shell_reports_unknown(monkeypatch):
    monkeypatch.delenv("SHELL", raising=False)
    assert "Shell=unknown]" in system_context()


def test_enhancer_prefixes_prompt_and_keeps_command(fixed_host):
    seen: list[Request] = []

    def downstream(req: Request) -> str:
        seen.append(req)
        return "done"

    original = Request(prompt="explain ls", command="explain")
    out = ContextEnhancer().wrap(downstream)(original)

    assert out == "done"
    assert seen[0].prompt == (
        "[System context: OS=linux, Arch=amd64, Shell=/bin/zsh]\nexplain ls"
    )
    assert seen[0].command == "explain"
    assert original.prompt == "explain ls"


def test_enhancer_stream_passes_callback_through(fixed_host):
    tokens: list[str] = []

    def downstream(req: Request, on_token) -> str:
        assert req.prompt.startswith("[System context: ")
        on_token("a")
        on_token("b")
        return "ab"

    out = ContextEnhancer().wrap_stream(downstream)(Request(prompt="p", command="tip"), tokens.append)

    assert out == "ab"
    assert tokens == ["a", "b"]
