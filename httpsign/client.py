"""
HTTP client that signs every request it sends.

This module wraps a ``requests.Session`` so that each outgoing request is
prepared, signed with a Signer and then sent with the configured timeout.
"""

import json
from typing import Dict, Optional
from urllib.parse import urljoin

import requests
import structlog

from .constants import DEFAULT_CONFIG, HEADER_CONTENT_TYPE
from .exceptions import (
    ConfigurationError,
    InputTooLargeError,
    TransportError
)
from .keypair import parse_key_pair
from .signer import Signer

logger = structlog.get_logger(__name__)


class HTTPSignClient:
    """
    HTTP client for making signed requests.

    Every request carries nonce, Digest and Authorization headers that an
    Authenticator on the other end can verify.
    """

    def __init__(self, base_url: str, key_id: str, secret_key: str, **config):
        """
        Initialize the client.

        Args:
            base_url: Base URL for relative request paths (may be empty)
            key_id: Access key id sent with every signature
            secret_key: Shared secret (must match server)
            **config: Configuration options (max_input_size, timeout)
        """
        self.base_url = base_url.rstrip('/')
        self.key_id = key_id
        self.secret_key = secret_key

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}

        # Validate configuration
        self._validate_config()

        self.signer = Signer(key_id, secret_key)
        self.session = requests.Session()

    @classmethod
    def from_key_pair(cls, base_url: str, key_pair: str, **config) -> "HTTPSignClient":
        """Create a client from an ``accessKeyID:secretAccessKey`` string."""
        key_id, secret_key = parse_key_pair(key_pair)
        return cls(base_url, key_id, secret_key, **config)

    def _validate_config(self):
        """Validate client configuration."""
        if not self.key_id:
            raise ConfigurationError("key_id cannot be empty")

        if not self.secret_key:
            raise ConfigurationError("secret_key cannot be empty")

        if self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['max_input_size'] <= 0:
            raise ConfigurationError("max_input_size must be positive")

    def _check_input_size(self, data: bytes):
        """Check if input data exceeds size limit."""
        if len(data) > self.config['max_input_size']:
            raise InputTooLargeError(
                f"Input size {len(data)} exceeds limit {self.config['max_input_size']}"
            )

    def _prepare_request_body(self, json_data=None, data=None) -> bytes:
        """Prepare request body for signing."""
        if json_data is not None:
            return json.dumps(json_data, separators=(',', ':')).encode('utf-8')
        elif data is not None:
            if isinstance(data, str):
                return data.encode('utf-8')
            elif isinstance(data, bytes):
                return data
            else:
                return str(data).encode('utf-8')
        else:
            return b''

    def _url(self, path: str) -> str:
        if path.startswith(('http://', 'https://')):
            return path
        if not self.base_url:
            raise ConfigurationError(f"relative path {path!r} without base_url")
        return urljoin(self.base_url + '/', path.lstrip('/'))

    def prepare(self, method: str, path: str, json_data=None, data=None,
                headers: Optional[Dict[str, str]] = None) -> requests.PreparedRequest:
        """
        Build and sign a request without sending it.

        Args:
            method: HTTP method
            path: URL path (relative to base_url) or absolute URL
            json_data: JSON data to send
            data: Raw data to send
            headers: Extra headers

        Returns:
            Signed requests.PreparedRequest

        Raises:
            InputTooLargeError: If the body exceeds max_input_size
            TransportError: If the request cannot be built or signed
        """
        body = self._prepare_request_body(json_data, data)
        self._check_input_size(body)

        headers = dict(headers or {})

        # Set content type for JSON
        if json_data is not None:
            headers[HEADER_CONTENT_TYPE] = 'application/json'

        request = requests.Request(
            method.upper(),
            self._url(path),
            headers=headers,
            data=body or None,
        )
        try:
            prepared = self.session.prepare_request(request)
        except (requests.RequestException, ValueError) as e:
            raise TransportError(f"invalid request: {e}")
        return self.signer.sign(prepared)

    def request(self, method: str, path: str, json=None, data=None,
                headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """
        Make a signed HTTP request.

        Returns:
            requests.Response object

        Raises:
            TransportError: If the request fails or times out
        """
        prepared = self.prepare(method, path, json_data=json, data=data, headers=headers)

        try:
            response = self.session.send(prepared, timeout=self.config['timeout'])
        except requests.Timeout as e:
            raise TransportError(f"HTTP request timed out: {e}")
        except requests.RequestException as e:
            raise TransportError(f"HTTP request failed: {e}")

        logger.debug(
            "response_received",
            method=prepared.method,
            url=prepared.url,
            status=response.status_code,
        )
        return response

    def get(self, path: str, **kwargs) -> requests.Response:
        """Make signed GET request."""
        return self.request('GET', path, **kwargs)

    def post(self, path: str, json=None, data=None, **kwargs) -> requests.Response:
        """Make signed POST request."""
        return self.request('POST', path, json=json, data=data, **kwargs)

    def put(self, path: str, json=None, data=None, **kwargs) -> requests.Response:
        """Make signed PUT request."""
        return self.request('PUT', path, json=json, data=data, **kwargs)

    def delete(self, path: str, **kwargs) -> requests.Response:
        """Make signed DELETE request."""
        return self.request('DELETE', path, **kwargs)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
