"""Tests for bearer-token verification"""
import time

import jwt
import pytest

from hazardscan.core.exceptions import Unauthenticated
from hazardscan.core.identity import JWTIdentityProvider
from conftest import TEST_JWT_SECRET


def sign(payload: dict, secret: str = TEST_JWT_SECRET) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


class TestJWTIdentityProvider:

    def test_resolves_subject_profile_and_role(self, identity_provider):
        token = sign({
            "sub": "user_abc",
            "email": "abc@example.com",
            "given_name": "Grace",
            "family_name": "Hopper",
            "picture": "https://img.test/abc.png",
            "metadata": {"appRole": "superadmin"},
        })

        identity = identity_provider.resolve(token)
        assert identity.user_id == "user_abc"
        assert identity.role == "superadmin"
        assert identity.email == "abc@example.com"
        assert (identity.first_name, identity.last_name) == ("Grace", "Hopper")
        assert identity.image_url == "https://img.test/abc.png"

    def test_role_is_optional(self, identity_provider):
        identity = identity_provider.resolve(sign({"sub": "user_abc"}))
        assert identity.role is None
        assert identity.email is None

    def test_custom_role_claim(self):
        provider = JWTIdentityProvider(secret_key=TEST_JWT_SECRET, role_claim="role")
        assert provider.resolve(sign({"sub": "u", "role": "superadmin"})).role == "superadmin"

    @pytest.mark.parametrize("token", [
        "not-a-jwt",
        sign({"sub": "u"}, secret="another-secret-0123456789abcdef-xyz"),
        sign({"email": "missing-sub@example.com"}),
        sign({"sub": "u", "exp": int(time.time()) - 60}),
    ])
    def test_rejects_bad_tokens(self, identity_provider, token):
        with pytest.raises(Unauthenticated) as exc_info:
            identity_provider.resolve(token)
        assert exc_info.value.status_code == 401

    def test_issuer_and_audience_enforced(self):
        provider = JWTIdentityProvider(secret_key=TEST_JWT_SECRET, issuer="https://idp.test", audience="hazardscan")

        good = sign({"sub": "u", "iss": "https://idp.test", "aud": "hazardscan"})
        assert provider.resolve(good).user_id == "u"

        with pytest.raises(Unauthenticated):
            provider.resolve(sign({"sub": "u", "iss": "https://evil.test", "aud": "hazardscan"}))
        with pytest.raises(Unauthenticated):
            provider.resolve(sign({"sub": "u", "iss": "https://idp.test", "aud": "other"}))

    def test_unconfigured_provider_rejects_everything(self):
        provider = JWTIdentityProvider()
        with pytest.raises(Unauthenticated):
            provider.resolve(sign({"sub": "u"}))
