"""
Constants for the httpsign library.
Header names and defaults shared by the signer and the authenticator.
"""

# HTTP Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_SIGNATURE = "Signature"
HEADER_DIGEST = "Digest"
HEADER_NONCE = "nonce"
HEADER_CONTENT_TYPE = "Content-Type"

# Authorization scheme prefix: "Authorization: Signature keyId=..."
AUTHORIZATION_SCHEME = "Signature"

# Pseudo-header covering the method and path
REQUEST_TARGET = "(request-target)"

# Headers every signed request must cover
REQUIRED_HEADERS = (REQUEST_TARGET, "nonce", "digest")
DEFAULT_SIGNED_HEADERS = REQUIRED_HEADERS

DIGEST_ALGORITHM = "SHA-256"

# Environment variables
ENV_KEY_PAIRS = "HTTPSIGN_KEY_PAIRS"
ENV_ACCESS_KEY_PAIR = "ACCESS_KEY_PAIR"

# Default configuration values
DEFAULT_CONFIG = {
    'max_input_size': 33554432, # 32MB in bytes
    'timeout': 60,              # HTTP timeout in seconds
}

# Other constants
MAX_INPUT_SIZE = 32 * 1024 * 1024  # 32MB
DEFAULT_NONCE_WINDOW = 5 * 60       # 5 minutes in seconds
