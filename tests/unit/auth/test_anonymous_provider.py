"""Tests for the Supabase anonymous sign-in provider."""

import json
from uuid import UUID

import httpx
import pytest
from jose import jwt

from core.exceptions import IdentityProvisioningError
from infrastructure.auth.anonymous_provider import SupabaseAnonymousAuthProvider

SIGNUP_URL = "https://project.supabase.co/auth/v1/signup"
USER_ID = "6f1c1f43-6a4e-4a36-9f43-1b2f2c9d7a10"


def make_token(**claims) -> str:
    payload = {"sub": USER_ID, "role": "authenticated", "is_anonymous": True}
    payload.update(claims)
    return jwt.encode(payload, "not-the-real-secret", algorithm="HS256")


def provider_for(handler) -> SupabaseAnonymousAuthProvider:
    return SupabaseAnonymousAuthProvider(
        signup_url=SIGNUP_URL,
        anon_key="anon-key",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestSignInAnonymously:
    @pytest.mark.asyncio
    async def test_returns_session_with_claims(self):
        token = make_token()
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={"access_token": token, "user": {"id": USER_ID, "is_anonymous": True}},
            )

        session = await provider_for(handler).sign_in_anonymously()

        assert session.user_id == UUID(USER_ID)
        assert session.access_token == token
        assert session.claims["role"] == "authenticated"
        assert session.claims["sub"] == USER_ID

        request = requests[0]
        assert str(request.url) == SIGNUP_URL
        assert request.method == "POST"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"
        assert json.loads(request.content) == {"data": {}}

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        provider = provider_for(lambda request: httpx.Response(422, json={"msg": "disabled"}))

        with pytest.raises(IdentityProvisioningError) as exc_info:
            await provider.sign_in_anonymously()

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Auth error"

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(IdentityProvisioningError):
            await provider_for(handler).sign_in_anonymously()

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        provider = provider_for(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(IdentityProvisioningError):
            await provider.sign_in_anonymously()

    @pytest.mark.parametrize(
        "body",
        [
            {"user": {"id": USER_ID}},
            {"access_token": "x"},
            {"access_token": "x", "user": None},
            [],
        ],
    )
    @pytest.mark.asyncio
    async def test_missing_session_raises(self, body):
        provider = provider_for(lambda request: httpx.Response(200, json=body))

        with pytest.raises(IdentityProvisioningError):
            await provider.sign_in_anonymously()

    @pytest.mark.asyncio
    async def test_undecodable_token_raises(self):
        provider = provider_for(
            lambda request: httpx.Response(
                200, json={"access_token": "not-a-jwt", "user": {"id": USER_ID}}
            )
        )

        with pytest.raises(IdentityProvisioningError):
            await provider.sign_in_anonymously()

    @pytest.mark.asyncio
    async def test_invalid_user_id_raises(self):
        provider = provider_for(
            lambda request: httpx.Response(
                200, json={"access_token": make_token(), "user": {"id": "not-a-uuid"}}
            )
        )

        with pytest.raises(IdentityProvisioningError):
            await provider.sign_in_anonymously()
