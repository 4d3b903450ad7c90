"""
测试共享辅助函数

提供模拟传输层响应与按 URL 路由的假传输函数。
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

from scratch_client.core.api_client import TransportResponse


def make_response(data: Any, status: int = 200, cookies: dict | None = None) -> TransportResponse:
    """
    创建模拟的传输层响应。

    Args:
        data: 响应 JSON 数据
        status: HTTP 状态码
        cookies: 响应设置的 cookie
    """
    return TransportResponse(status=status, json_body=data, cookies=cookies or {})


def routed_fetch(routes: dict[str, list[Any]]) -> AsyncMock:
    """
    按 URL 依次返回预设响应的 fetch mock。

    routes 的值按调用顺序消费；元素为异常时抛出，为 TransportResponse 时原样
    返回，其他值包装为 200 响应。
    """

    async def _fetch(url: str, **kwargs: Any) -> TransportResponse:
        item = routes[url].pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, TransportResponse):
            return item
        return make_response(item)

    return AsyncMock(side_effect=_fetch)
