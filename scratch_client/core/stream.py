"""
PaginatedStream - 基于 offset/limit 的分页流

将分页接口转换为惰性、单向、单次的异步迭代器。空页是唯一的终止条件：
即使某页不满 page_size，也会再请求一次下一页来确认结束。

使用示例:
    async for follower in user.get_followers():
        print(await follower.get_username())
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, List, Optional

from scratch_client.core.api_client import TransportResponse
from scratch_client.core.config import settings
from scratch_client.core.errors import (
    FetchFailure,
    StreamTransformFailure,
    TransportFailure,
)

logger = logging.getLogger(__name__)

FetchPage = Callable[[int, int], Awaitable[List[Any]]]
Transform = Callable[[Any], Any]


class PaginatedStream:
    """
    惰性分页流

    - 页按 offset 严格递增顺序请求，同一时刻最多一个请求在途
    - 每页内记录按返回顺序产出
    - 请求失败或转换失败后流终止，不可恢复
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: Optional[int] = None,
        transform: Optional[Transform] = None,
    ):
        """
        Args:
            fetch_page: (offset, limit) -> 记录列表
            page_size: 每页数量，默认 settings.SCRATCH_PAGE_SIZE
            transform: 单条记录转换函数
        """
        self.page_size = page_size or settings.SCRATCH_PAGE_SIZE
        self._fetch_page = fetch_page
        self._transform = transform
        self._offset = 0
        self._page_offset = 0  # 当前页的 offset
        self._page: deque = deque()
        self._done = False
        self._lock = asyncio.Lock()

    @property
    def done(self) -> bool:
        return self._done

    def __aiter__(self) -> "PaginatedStream":
        return self

    async def __anext__(self) -> Any:
        async with self._lock:
            while not self._page:
                if self._done:
                    raise StopAsyncIteration
                await self._load_next_page()

            record = self._page.popleft()
            if self._transform is None:
                return record
            try:
                return self._transform(record)
            except Exception as e:
                self._close()
                logger.error(
                    "Stream transform failed in page at offset %d: %s",
                    self._page_offset,
                    e,
                )
                raise StreamTransformFailure(record, e) from e

    async def _load_next_page(self) -> None:
        offset = self._offset
        logger.debug("Fetching page: offset=%d, limit=%d", offset, self.page_size)
        try:
            page = await self._fetch_page(offset, self.page_size)
        except Exception:
            self._close()
            raise

        if not page:
            logger.debug("Empty page at offset=%d, stream exhausted", offset)
            self._close()
            return

        self._page_offset = offset
        self._offset = offset + self.page_size
        self._page.extend(page)

    def _close(self) -> None:
        self._done = True
        self._page.clear()

    async def collect(self, limit: Optional[int] = None) -> List[Any]:
        """
        读取流中的记录到列表

        Args:
            limit: 最多读取的记录数，达到后不再请求后续页
        """
        results: List[Any] = []
        if limit is not None and limit <= 0:
            return results
        async for item in self:
            results.append(item)
            if limit is not None and len(results) >= limit:
                break
        return results


def api_stream(
    fetch: Callable[..., Awaitable[TransportResponse]],
    base_endpoint: str,
    transform_result: Optional[Transform] = None,
    page_size: Optional[int] = None,
) -> PaginatedStream:
    """
    从 Scratch API 集合接口构建分页流

    请求形如 `{base_endpoint}?offset=0&limit=40`，响应必须是 JSON 数组。

    Args:
        fetch: 传输函数 (ScratchClient.fetch)
        base_endpoint: 集合 endpoint，例如 'users/mres/followers'
        transform_result: 单条记录转换函数
        page_size: 每页数量

    Raises (迭代时):
        FetchFailure: 非成功状态码
        TransportFailure: 响应不是 JSON 数组
    """

    async def fetch_page(offset: int, limit: int) -> List[Any]:
        response = await fetch(base_endpoint, params={"offset": offset, "limit": limit})
        if not response.ok:
            raise FetchFailure(
                f"Fetching {base_endpoint} (offset={offset}) failed with HTTP {response.status}",
                url=base_endpoint,
                status=response.status,
            )
        if not isinstance(response.json_body, list):
            raise TransportFailure(
                f"Expected a JSON array from {base_endpoint}, "
                f"got {type(response.json_body).__name__}",
                url=base_endpoint,
                status=response.status,
            )
        logger.debug(
            "Retrieved %d records from %s (offset=%d)",
            len(response.json_body),
            base_endpoint,
            offset,
        )
        return response.json_body

    return PaginatedStream(fetch_page, page_size=page_size, transform=transform_result)
