"""Tests for RetryingTransport - opt-in retry, backoff, and rate-limit handling."""

from __future__ import annotations

from unittest.mock import ANY, AsyncMock, patch

import httpx
import pytest

from archsync.targets.azure_devops._retrying_transport import RetryingTransport

_BACKOFF = "archsync.targets.azure_devops._retrying_transport.RetryingTransport._sleep_backoff"
_PAUSE = "archsync.targets.azure_devops._retrying_transport.RetryingTransport._apply_rate_limit_pause"


def _make_response(status_code: int = 200, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status_code=status_code, headers=headers or {})


def _make_request() -> httpx.Request:
    return httpx.Request("POST", "https://dev.azure.com/contoso/Contoso/_apis/wit/wiql")


class TestConstruction:
    def test_retries_disabled_by_default(self) -> None:
        assert RetryingTransport().max_retries == 0

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_retries"):
            RetryingTransport(max_retries=-1)


class TestWithoutRetries:
    @pytest.mark.asyncio
    @patch(_BACKOFF, new_callable=AsyncMock)
    async def test_transient_status_is_returned_as_is(self, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(503)

        response = await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert response.status_code == 503
        assert inner.handle_async_request.call_count == 1
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = httpx.ConnectError("refused")

        with pytest.raises(httpx.ConnectError, match="refused"):
            await RetryingTransport(transport=inner).handle_async_request(_make_request())

        assert inner.handle_async_request.call_count == 1


class TestWithRetries:
    @pytest.mark.asyncio
    @patch(_BACKOFF, new_callable=AsyncMock)
    async def test_retries_transport_error_then_succeeds(self, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [httpx.TransportError("reset"), _make_response(200)]

        response = await RetryingTransport(transport=inner, max_retries=2).handle_async_request(_make_request())

        assert response.status_code == 200
        assert inner.handle_async_request.call_count == 2
        mock_backoff.assert_awaited_once_with(ANY, 0)

    @pytest.mark.asyncio
    @patch(_BACKOFF, new_callable=AsyncMock)
    async def test_gives_up_after_max_retries(self, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(502)

        response = await RetryingTransport(transport=inner, max_retries=2).handle_async_request(_make_request())

        assert response.status_code == 502
        assert inner.handle_async_request.call_count == 3
        assert mock_backoff.await_count == 2

    @pytest.mark.asyncio
    @patch(_BACKOFF, new_callable=AsyncMock)
    @patch(_PAUSE, new_callable=AsyncMock)
    async def test_429_pauses_with_retry_after(self, mock_pause: AsyncMock, mock_backoff: AsyncMock) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.side_effect = [_make_response(429, {"Retry-After": "2"}), _make_response(200)]

        response = await RetryingTransport(transport=inner, max_retries=1).handle_async_request(_make_request())

        assert response.status_code == 200
        mock_pause.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self) -> None:
        inner = AsyncMock(spec=httpx.AsyncBaseTransport)
        inner.handle_async_request.return_value = _make_response(400)

        response = await RetryingTransport(transport=inner, max_retries=3).handle_async_request(_make_request())

        assert response.status_code == 400
        assert inner.handle_async_request.call_count == 1


@pytest.mark.parametrize(
    ("headers", "expected"),
    [({}, 0.0), ({"Retry-After": "3"}, 3.0), ({"Retry-After": "-1"}, 0.0), ({"Retry-After": "soon"}, 0.0)],
)
def test_parse_retry_after(headers: dict[str, str], expected: float) -> None:
    assert RetryingTransport._parse_retry_after(_make_response(429, headers)) == expected
