"""
Name: API Key Generator Tests

Responsibilities:
  - Check prefix, entropy size and uniqueness of generated secrets
"""

import base64

import pytest

from logitrack.identity.key_generator import generate_api_key


@pytest.mark.unit
class TestGenerateApiKey:
    def test_key_carries_default_prefix(self):
        key = generate_api_key()
        assert key.startswith("LT_API_")

    def test_body_decodes_to_32_random_bytes(self):
        key = generate_api_key()
        body = key[len("LT_API_"):]
        assert len(base64.b64decode(body)) == 32

    def test_custom_prefix_is_used_verbatim(self):
        assert generate_api_key(prefix="TEST_").startswith("TEST_")

    def test_rejects_fewer_than_32_bytes(self):
        with pytest.raises(ValueError):
            generate_api_key(num_bytes=16)

    def test_keys_do_not_repeat(self):
        """10,000 consecutive keys are pairwise distinct."""
        keys = {generate_api_key() for _ in range(10_000)}
        assert len(keys) == 10_000
