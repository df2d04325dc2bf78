"""
Integration tests: signing client against an app protected by the middleware.
"""

import pytest
import structlog.testing
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from httpsign import HTTPSignClient, new_authenticator
from httpsign.middleware import HTTPSignMiddleware

FORWARDED_HEADERS = ("Authorization", "Signature", "nonce", "Digest", "Content-Type")


async def health(request: Request):
    return JSONResponse({"status": "healthy"})


async def profile(request: Request):
    return JSONResponse({"key_id": request.state.key_id})


async def echo(request: Request):
    body = await request.body()
    return JSONResponse({"echo": body.decode("utf-8"), "key_id": request.state.key_id})


def _send(test_client, prepared, **overrides):
    """Replay a signed requests.PreparedRequest through the Starlette test client."""
    headers = {
        name: value for name, value in prepared.headers.items()
        if name in FORWARDED_HEADERS
    }
    body = overrides.pop("body", prepared.body)
    path = overrides.pop("path", prepared.path_url)
    return test_client.request(prepared.method, path, headers=headers, content=body)


class TestIntegration:
    """Integration tests with a Starlette server."""
    KEY_ID = "client1"
    SERVER_URL = "http://testserver"
    SECRET_KEY = "python-client-demo-secret"

    @pytest.fixture
    def server(self):
        """Create the protected app."""
        app = Starlette(routes=[
            Route("/api/public/health", health),
            Route("/api/protected/profile", profile),
            Route("/api/protected/echo", echo, methods=["POST"]),
        ])
        app.add_middleware(
            HTTPSignMiddleware,
            authenticator=new_authenticator(f"{self.KEY_ID}:{self.SECRET_KEY}"),
            public_paths={"/api/public/health"},
        )
        return TestClient(app)

    @pytest.fixture
    def client(self):
        """Create signing client."""
        return HTTPSignClient(self.SERVER_URL, self.KEY_ID, self.SECRET_KEY)

    def test_public_health_endpoint(self, server):
        """Test public health endpoint (no auth required)."""
        response = server.get("/api/public/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_protected_endpoint_without_auth(self, server):
        """Test that protected endpoints reject unsigned requests."""
        response = server.get("/api/protected/profile")

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}
        assert response.headers["WWW-Authenticate"] == "Signature"

    def test_protected_profile_endpoint(self, server, client):
        """Test signed access to profile endpoint."""
        response = _send(server, client.prepare("GET", "/api/protected/profile"))

        assert response.status_code == 200
        assert response.json()["key_id"] == self.KEY_ID

    def test_query_string(self, server, client):
        prepared = client.prepare("GET", "/api/protected/profile?verbose=1&x=a%20b")
        response = _send(server, prepared)

        assert response.status_code == 200

    def test_echo_endpoint(self, server, client):
        """Test signed POST; the body still reaches the endpoint."""
        prepared = client.prepare("POST", "/api/protected/echo", json_data={"message": "hi"})
        response = _send(server, prepared)

        assert response.status_code == 200
        assert response.json()["echo"] == '{"message":"hi"}'

    def test_replay_rejected(self, server, client):
        prepared = client.prepare("GET", "/api/protected/profile")

        assert _send(server, prepared).status_code == 200
        assert _send(server, prepared).status_code == 401

    def test_tampered_body_rejected(self, server, client):
        prepared = client.prepare("POST", "/api/protected/echo", data="original")
        response = _send(server, prepared, body=b"tampered")

        assert response.status_code == 401

    def test_tampered_path_rejected(self, server, client):
        prepared = client.prepare("GET", "/api/protected/profile")
        response = _send(server, prepared, path="/api/protected/echo")

        assert response.status_code == 401

    def test_wrong_secret_rejected(self, server):
        other = HTTPSignClient(self.SERVER_URL, self.KEY_ID, "wrong-secret")
        response = _send(server, other.prepare("GET", "/api/protected/profile"))

        assert response.status_code == 401

    def test_oversized_nonce_rejected(self, server, client):
        """A validly signed request with a huge numeric nonce gets a 401."""
        client.signer.nonce_factory = lambda: "9" * 400
        response = _send(server, client.prepare("GET", "/api/protected/profile"))

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    def test_rejection_logged_once(self, server):
        with structlog.testing.capture_logs() as logs:
            server.get("/api/protected/profile")

        rejections = [entry for entry in logs if entry["log_level"] in ("warning", "info")]
        assert [entry["event"] for entry in rejections] == ["request_rejected"]
        assert rejections[0]["reason"] == "malformed_signature_header"

    def test_rejections_look_alike(self, server, client):
        """Different failures produce identical responses."""
        unknown = HTTPSignClient(self.SERVER_URL, "nobody", self.SECRET_KEY)
        prepared = client.prepare("GET", "/api/protected/profile")
        _send(server, prepared)

        responses = [
            server.get("/api/protected/profile"),
            _send(server, unknown.prepare("GET", "/api/protected/profile")),
            _send(server, prepared),
        ]

        assert {r.status_code for r in responses} == {401}
        assert len({r.content for r in responses}) == 1
