# SPDX-License-Identifier: MIT
"""
Shared fixtures: provider traffic is served by ``httpx.MockTransport``.
"""
import httpx
import pytest


class Recorder:
    """
    Route requests by host (or full URL prefix) and record every call.

    A route is either ``(status, json_body)`` or a callable taking the
    request and returning a response.
    """

    def __init__(self, routes=None, default_status=401):
        self.routes = dict(routes or {})
        self.default_status = default_status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        for prefix, route in self.routes.items():
            if url.startswith(prefix) or request.url.host == prefix:
                if callable(route):
                    return route(request)
                status, body = route
                return httpx.Response(status, json=body)
        return httpx.Response(self.default_status, json={})

    def count(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def client_for():
    """Build an AsyncClient whose traffic goes to *handler*."""

    def build(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return build
