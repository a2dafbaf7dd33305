import base64
import re

import pytest

from packages.taskboard.workspace.tokens import generate_invitation_token, urlsafe_encode

URLSAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def test_token_is_unpadded_base64url_of_32_bytes():
    token = generate_invitation_token()

    assert len(token) == 43
    assert URLSAFE.match(token)
    assert len(base64.urlsafe_b64decode(token + "=")) == 32


def test_tokens_do_not_collide_on_large_sample():
    tokens = {generate_invitation_token() for _ in range(10_000)}

    assert len(tokens) == 10_000


def test_urlsafe_encode_strips_padding():
    assert urlsafe_encode(b"\xfb\xff") == "-_8"


def test_token_length_rejects_non_positive():
    with pytest.raises(ValueError):
        generate_invitation_token(0)
