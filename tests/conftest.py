"""Shared fixtures for the IBM Video embed test-suite."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Callable, Dict, Iterator, Tuple, Union

import httpx
import pytest
from rich.console import Console

from ibmvideo.config.settings import Settings

API_BASE_URL = "https://api.video.test"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """In-memory stand-in for the IBM Video API and its thumbnail host."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, response: Route) -> None:
        self.routes[(method.upper(), url)] = response

    def add_json(self, url: str, payload: object) -> None:
        self.add("GET", url, httpx.Response(200, content=json.dumps(payload).encode("utf-8")))

    def count(self, method: str, url: str) -> int:
        return sum(1 for request in self.requests if request.method == method and str(request.url) == url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, str(request.url)))
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        return route


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream: FakeUpstream) -> Iterator[httpx.Client]:
    client = httpx.Client(transport=httpx.MockTransport(upstream.handler))
    yield client
    client.close()


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def thumbnails_dir(tmp_path: Path) -> Path:
    return tmp_path / "thumbnails"


@pytest.fixture
def settings(thumbnails_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        api_base_url=API_BASE_URL,
        thumbnails_directory=str(thumbnails_dir),
    )


def console_output(console: Console) -> str:
    return console.file.getvalue()
