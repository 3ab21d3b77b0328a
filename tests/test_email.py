"""Tests for the Postmark email service."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from vegan_aisle.services.email import EmailService


def make_service(api_key: str | None = "postmark-token") -> EmailService:
    service = EmailService()
    service.api_key = api_key
    service._configured = bool(api_key)
    service.from_email = "hello@theveganaisle.com"
    service.client_url = "https://theveganaisle.com"
    return service


def mock_postmark(response=None, error=None):
    http_client = MagicMock()
    if error is not None:
        http_client.post = AsyncMock(side_effect=error)
    else:
        http_client.post = AsyncMock(return_value=response)
    async_client = MagicMock()
    async_client.return_value.__aenter__ = AsyncMock(return_value=http_client)
    async_client.return_value.__aexit__ = AsyncMock(return_value=False)
    return patch("vegan_aisle.services.email.httpx.AsyncClient", async_client), http_client


@pytest.mark.asyncio
async def test_unconfigured_service_pretends_to_send():
    service = make_service(api_key=None)
    assert await service.send_email("a@example.com", "Hi", "<p>Hi</p>", "Hi") is True


@pytest.mark.asyncio
async def test_reset_email_contains_link():
    service = make_service()
    patcher, http_client = mock_postmark(response=MagicMock())

    with patcher:
        sent = await service.send_password_reset_email("a@example.com", "tok123", "Alex")

    assert sent is True
    payload = http_client.post.await_args.kwargs["json"]
    headers = http_client.post.await_args.kwargs["headers"]
    assert headers["X-Postmark-Server-Token"] == "postmark-token"
    assert payload["To"] == "a@example.com"
    assert payload["From"] == "hello@theveganaisle.com"
    assert "https://theveganaisle.com/reset-password?token=tok123" in payload["TextBody"]
    assert "Hi Alex," in payload["TextBody"]


@pytest.mark.asyncio
async def test_send_failure_returns_false():
    service = make_service()
    patcher, _ = mock_postmark(error=httpx.ConnectError("down"))

    with patcher:
        assert await service.send_password_changed_email("a@example.com") is False


@pytest.mark.asyncio
async def test_html_body_is_escaped():
    service = make_service()
    patcher, http_client = mock_postmark(response=MagicMock())

    with patcher:
        await service.send_password_changed_email("a@example.com", "<b>Eve</b>")

    html = http_client.post.await_args.kwargs["json"]["HtmlBody"]
    assert "&lt;b&gt;Eve&lt;/b&gt;" in html
