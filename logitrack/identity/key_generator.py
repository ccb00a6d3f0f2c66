"""
Name: API Key Secret Generator

Responsibilities:
  - Produce opaque, prefixed secrets for integration API keys

Constraints:
  - At least 256 bits from the OS CSPRNG (secrets module)
  - Output depends on entropy only, never on time or counters
"""

import base64
import secrets

DEFAULT_PREFIX = "LT_API_"
MIN_BYTES = 32


def generate_api_key(prefix: str = DEFAULT_PREFIX, num_bytes: int = MIN_BYTES) -> str:
    """
    R: Return `prefix + base64(random bytes)`.

    Raises:
        ValueError: if fewer than 32 bytes are requested
    """
    if num_bytes < MIN_BYTES:
        raise ValueError(f"API keys need at least {MIN_BYTES} random bytes")
    raw = secrets.token_bytes(num_bytes)
    return prefix + base64.b64encode(raw).decode("ascii")
