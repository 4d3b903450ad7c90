import json

import httpx
import pytest
import respx
from httpx import Response

from scratch_client.core.api_client import ScratchClient, get_scratch_client
from scratch_client.core.errors import TransportFailure
from scratch_client.schemas.scratch import LoginSession


@pytest.mark.asyncio
async def test_fetch_decodes_json(respx_mock):
    """Test fetch returns status, JSON body and headers."""
    client = ScratchClient(base_url="https://mock.api")
    route = respx_mock.get("https://mock.api/users/mres").mock(
        return_value=Response(200, json={"username": "mres"})
    )

    response = await client.fetch("users/mres")

    assert route.called
    assert response.ok
    assert response.status == 200
    assert response.json_body == {"username": "mres"}
    assert response.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_fetch_params(respx_mock):
    client = ScratchClient(base_url="https://mock.api")
    route = respx_mock.get("https://mock.api/users/mres/followers").mock(
        return_value=Response(200, json=[])
    )

    await client.fetch("users/mres/followers", params={"offset": 40, "limit": 40})

    url = str(route.calls.last.request.url)
    assert "offset=40" in url
    assert "limit=40" in url


@pytest.mark.asyncio
async def test_fetch_post_payload(respx_mock):
    client = ScratchClient(base_url="https://mock.api")
    route = respx_mock.post("https://mock.api/login/").mock(
        return_value=Response(200, json=[{"success": 1}])
    )

    await client.fetch("login/", method="POST", json={"username": "mres"})

    assert json.loads(route.calls.last.request.content) == {"username": "mres"}


@pytest.mark.asyncio
async def test_fetch_error_status_is_returned(respx_mock):
    """4xx 不重试，交由调用方判断"""
    client = ScratchClient(base_url="https://mock.api")
    route = respx_mock.get("https://mock.api/projects/1").mock(
        return_value=Response(404, json={"code": "NotFound"})
    )

    response = await client.fetch("projects/1")

    assert route.call_count == 1
    assert not response.ok
    assert response.status == 404


@pytest.mark.asyncio
async def test_fetch_retries_server_errors(respx_mock):
    """5xx 重试后返回最后一次响应"""
    client = ScratchClient(base_url="https://mock.api", max_retries=2)
    client.RETRY_MIN_WAIT = 0
    client.RETRY_MAX_WAIT = 0
    route = respx_mock.get("https://mock.api/projects/1").mock(
        side_effect=[Response(503, json={}), Response(200, json={"id": 1})]
    )

    response = await client.fetch("projects/1")

    assert route.call_count == 2
    assert response.json_body == {"id": 1}


@pytest.mark.asyncio
async def test_fetch_zero_retries(respx_mock):
    """max_retries=0 时 5xx 只请求一次"""
    client = ScratchClient(base_url="https://mock.api", max_retries=0)
    route = respx_mock.get("https://mock.api/projects/1").mock(
        return_value=Response(503, json={})
    )

    response = await client.fetch("projects/1")

    assert client.max_retries == 0
    assert route.call_count == 1
    assert response.status == 503


@pytest.mark.asyncio
async def test_fetch_network_error(respx_mock):
    client = ScratchClient(base_url="https://mock.api", max_retries=1)
    respx_mock.get("https://mock.api/projects/1").mock(
        side_effect=httpx.ConnectError("refused")
    )

    with pytest.raises(TransportFailure) as exc_info:
        await client.fetch("projects/1")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_fetch_invalid_json(respx_mock):
    client = ScratchClient(base_url="https://mock.api")
    respx_mock.get("https://mock.api/projects/1").mock(
        return_value=Response(200, text="<html>")
    )

    with pytest.raises(TransportFailure):
        await client.fetch("projects/1")


@pytest.mark.asyncio
async def test_fetch_empty_body(respx_mock):
    client = ScratchClient(base_url="https://mock.api")
    respx_mock.delete("https://mock.api/things/1").mock(return_value=Response(204))

    response = await client.fetch("things/1", method="DELETE")

    assert response.json_body is None


@pytest.mark.asyncio
async def test_unsupported_method():
    client = ScratchClient(base_url="https://mock.api")
    with pytest.raises(ValueError):
        await client.fetch("things/1", method="PATCH")


@pytest.mark.asyncio
@respx.mock
async def test_session_token_only_sent_to_api_host():
    """X-Token 只注入到 API 域名的请求"""
    client = ScratchClient(base_url="https://mock.api")
    client.session = LoginSession(
        username="mres", session_id="sid", csrf_token="a", api_token="tok"
    )
    api_route = respx.get("https://mock.api/users/mres").mock(
        return_value=Response(200, json={})
    )
    site_route = respx.get("https://mock.site/session").mock(
        return_value=Response(200, json={})
    )

    await client.fetch("users/mres")
    await client.fetch("https://mock.site/session")

    assert api_route.calls.last.request.headers["X-Token"] == "tok"
    assert "X-Token" not in site_route.calls.last.request.headers


def test_get_scratch_client_singleton():
    assert get_scratch_client() is get_scratch_client()
