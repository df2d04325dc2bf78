"""
Signature header formatting and parsing.

    Authorization: Signature keyId="abc",algorithm="hmac-sha512",
        headers="(request-target) nonce digest",signature="<base64>"

The verifier also accepts the same parameters in a bare ``Signature``
header.
"""

import base64
import binascii
import re
from typing import Mapping, Optional

from .constants import AUTHORIZATION_SCHEME, HEADER_AUTHORIZATION, HEADER_SIGNATURE
from .exceptions import MalformedSignatureHeader
from .models import SignatureParams

_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')
_REQUIRED_PARAMS = ("keyId", "algorithm", "headers", "signature")


def format_signature_header(params: SignatureParams) -> str:
    """Format the value of the Authorization header (scheme included)."""
    encoded = base64.b64encode(params.signature).decode('ascii')
    return (
        f'{AUTHORIZATION_SCHEME} keyId="{params.key_id}",'
        f'algorithm="{params.algorithm}",'
        f'headers="{" ".join(params.headers)}",'
        f'signature="{encoded}"'
    )


def parse_signature_params(value: str) -> SignatureParams:
    """
    Parse signature parameters, with or without the ``Signature`` scheme.

    Raises:
        MalformedSignatureHeader: If a parameter is missing or empty, or the
            signature is not valid base64
    """
    prefix = f"{AUTHORIZATION_SCHEME} "
    if value.startswith(prefix):
        value = value[len(prefix):]

    params = {match.group(1): match.group(2) for match in _PARAM_RE.finditer(value)}
    missing = [name for name in _REQUIRED_PARAMS if not params.get(name)]
    if missing:
        raise MalformedSignatureHeader(f"missing signature parameters: {', '.join(missing)}")

    try:
        signature = base64.b64decode(params["signature"], validate=True)
    except (binascii.Error, ValueError):
        raise MalformedSignatureHeader("signature is not valid base64")

    return SignatureParams(
        key_id=params["keyId"],
        algorithm=params["algorithm"],
        headers=params["headers"].split(),
        signature=signature,
    )


def extract_signature_params(headers: Mapping[str, str]) -> SignatureParams:
    """
    Find and parse the signature carried by a request.

    Args:
        headers: Request headers with lowercased names

    Raises:
        MalformedSignatureHeader: If no signature header is present or it
            cannot be parsed
    """
    value: Optional[str] = None
    authorization = headers.get(HEADER_AUTHORIZATION.lower(), "")
    if authorization.startswith(f"{AUTHORIZATION_SCHEME} "):
        value = authorization
    elif headers.get(HEADER_SIGNATURE.lower()):
        value = headers[HEADER_SIGNATURE.lower()]

    if value is None:
        raise MalformedSignatureHeader("missing signature header")
    return parse_signature_params(value)
