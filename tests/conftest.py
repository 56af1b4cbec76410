from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"

_module_ids = itertools.count()


class FakeBus:
    """Records what generated proxies ask of the bus."""

    def __init__(self, replies: Dict[str, Any] | None = None,
                 properties: Dict[str, Any] | None = None) -> None:
        self.replies = dict(replies or {})
        self.properties = dict(properties or {})
        self.calls: list[tuple] = []
        self.handlers: dict[str, Callable[..., None]] = {}

    def call(self, destination, path, interface, member, signature, args, no_reply=False):
        self.calls.append((destination, path, interface, member, signature, tuple(args), no_reply))
        return self.replies.get(member, [])

    def get_property(self, destination, path, interface, name):
        return self.properties[name]

    def set_property(self, destination, path, interface, name, signature, value):
        self.calls.append((destination, path, interface, f"set {name}", signature, (value,), False))
        self.properties[name] = value

    def subscribe(self, destination, path, interface, member, handler):
        self.handlers[member] = handler
        return f"{interface}.{member}"

    def emit(self, member: str, *body: Any) -> None:
        self.handlers[member](*body)


class AsyncFakeBus(FakeBus):
    """Same as FakeBus, with awaitable calls and property access."""

    async def call(self, *args, **kwargs):
        return FakeBus.call(self, *args, **kwargs)

    async def get_property(self, *args):
        return FakeBus.get_property(self, *args)

    async def set_property(self, *args):
        return FakeBus.set_property(self, *args)


@pytest.fixture
def calc_xml() -> str:
    return (SAMPLES_DIR / "com.example.Calc.xml").read_text(encoding="utf-8")


@pytest.fixture
def player_xml() -> str:
    return (SAMPLES_DIR / "org.example.MediaPlayer.xml").read_text(encoding="utf-8")


@pytest.fixture
def make_bus() -> type[FakeBus]:
    return FakeBus


@pytest.fixture
def make_async_bus() -> type[AsyncFakeBus]:
    return AsyncFakeBus


@pytest.fixture
def load_bindings() -> Callable[[str], dict]:
    """Execute generated code and return its module namespace."""

    def _load(code: str) -> dict:
        namespace: dict = {"__name__": f"generated_bindings_{next(_module_ids)}"}
        exec(compile(code, "<generated>", "exec"), namespace)
        return namespace

    return _load
