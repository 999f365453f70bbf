"""Test setup for narfetch."""

from __future__ import annotations

import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class NarBuilder:
    """Serialize small file trees into NAR bytes.

    Nodes are plain tuples: ``("regular", data, executable)``,
    ``("symlink", target)`` and ``("directory", {name: node})``.
    """

    @staticmethod
    def file(data: bytes, *, executable: bool = False) -> tuple:
        return ("regular", data, executable)

    @staticmethod
    def symlink(target: str | bytes) -> tuple:
        if isinstance(target, str):
            target = target.encode("utf-8")
        return ("symlink", target)

    @staticmethod
    def directory(children: dict | None = None) -> tuple:
        return ("directory", children or {})

    @staticmethod
    def string(data: bytes) -> bytes:
        return len(data).to_bytes(8, "little") + data + b"\0" * (-len(data) % 8)

    def node(self, node: tuple) -> bytes:
        out = [self.string(b"("), self.string(b"type"), self.string(node[0].encode())]
        if node[0] == "regular":
            _, data, executable = node
            if executable:
                out += [self.string(b"executable"), self.string(b"")]
            out += [self.string(b"contents"), self.string(data)]
        elif node[0] == "symlink":
            out += [self.string(b"target"), self.string(node[1])]
        else:
            for name in sorted(node[1]):
                raw_name = name.encode() if isinstance(name, str) else name
                out += [
                    self.string(b"entry"),
                    self.string(b"("),
                    self.string(b"name"),
                    self.string(raw_name),
                    self.string(b"node"),
                    self.node(node[1][name]),
                    self.string(b")"),
                ]
        out.append(self.string(b")"))
        return b"".join(out)

    def build(self, root: tuple) -> bytes:
        return self.string(b"nix-archive-1") + self.node(root)


class FakeBinaryCache:
    """Canned responses keyed by URL, served through ``httpx.MockTransport``.

    Unregistered URLs answer 404. Registering an exception makes the
    transport raise it. Every requested URL is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.responses: dict[str, httpx.Response | Exception] = {}
        self.requests: list[str] = []

    def add(self, url: str, content: bytes | str = b"", status_code: int = 200) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.responses[url] = httpx.Response(status_code, content=content)

    def fail(self, url: str, exc: Exception) -> None:
        self.responses[url] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        response = self.responses.get(url)
        if response is None:
            return httpx.Response(404, content=b"404 not found")
        if isinstance(response, Exception):
            raise response
        return httpx.Response(response.status_code, content=response.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport)


@pytest.fixture
def nar() -> NarBuilder:
    """Builder for NAR archives."""
    return NarBuilder()


@pytest.fixture
def fake_cache() -> FakeBinaryCache:
    """Fake binary cache backend."""
    return FakeBinaryCache()
