"""
APIDocument - 惰性/部分加载的远程实体

一个文档可以携带来自父级列表的部分字段 (seed)，首次访问缺失字段时
才从网络获取完整记录，且整个生命周期内最多成功获取一次。

状态机:
- Unhydrated (初始状态，与 seed 字段数量无关)
- Hydrated (终态，仅 reload() 可重新同步)

使用示例:
    user = User("griffpatch")
    bio = await user.get_bio()      # 触发一次 GET users/griffpatch
    country = await user.get_country()  # 不再发请求
"""

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from scratch_client.core.api_client import TransportResponse, get_scratch_client
from scratch_client.core.errors import FetchFailure, TransportFailure, UnresolvedEndpoint

logger = logging.getLogger(__name__)

Fetch = Callable[..., Awaitable[TransportResponse]]


class _Unknown(enum.Enum):
    UNKNOWN = "unknown"

    def __repr__(self) -> str:
        return "UNKNOWN"


# 字段尚未知 (区别于远端记录中值为 None 的字段)
UNKNOWN = _Unknown.UNKNOWN


class APIDocument:
    """
    Scratch API 中可单独获取的"文档"基类

    子类必须实现 get_endpoint()，例如 "users/mres"。
    """

    def __init__(
        self,
        seed: Optional[Dict[str, Any]] = None,
        fetch: Optional[Fetch] = None,
    ):
        """
        Args:
            seed: 已知字段 (通常来自父级列表响应)
            fetch: 传输函数，默认使用全局 ScratchClient.fetch
        """
        self.fetch = fetch or get_scratch_client().fetch
        self.known_fields: Dict[str, Any] = dict(seed or {})
        self.is_hydrated = False

        # 合并并发加载请求，保证同一时刻最多一个请求在途
        self._load_lock = asyncio.Lock()

    def get_endpoint(self) -> str:
        """
        文档对应的 API endpoint，由子类实现

        Returns:
            例如 'users/mres'
        """
        raise UnresolvedEndpoint(
            f"{type(self).__name__} does not define an API endpoint"
        )

    def lookup(self, key: str) -> Any:
        """不触发网络请求的字段查询，缺失时返回 UNKNOWN"""
        return self.known_fields.get(key, UNKNOWN)

    def seed(self, fields: Dict[str, Any]) -> None:
        """
        补充尚未知的字段，不覆盖已有字段

        已加载完整记录的文档忽略 seed。
        """
        if self.is_hydrated:
            return
        for key, value in fields.items():
            self.known_fields.setdefault(key, value)

    async def _fetch_api_details(self) -> Dict[str, Any]:
        endpoint = self.get_endpoint()
        logger.debug("Fetching API details: endpoint=%s", endpoint)

        response = await self.fetch(endpoint)
        if not response.ok:
            raise FetchFailure(
                f"Fetching {endpoint} failed with HTTP {response.status}",
                url=endpoint,
                status=response.status,
            )
        if not isinstance(response.json_body, dict):
            raise TransportFailure(
                f"Expected a JSON object from {endpoint}, "
                f"got {type(response.json_body).__name__}",
                url=endpoint,
                status=response.status,
            )
        return response.json_body

    async def load_api_details(self) -> None:
        """
        如尚未加载，从 API 获取完整记录

        通常无需手动调用，优先使用具体的字段方法 (如 User.get_username)。
        获取失败时文档保持 Unhydrated，下次访问会重试。

        Raises:
            FetchFailure: 网络错误或非成功状态码
            UnresolvedEndpoint: 子类未实现 get_endpoint
        """
        # 快速路径：已加载则直接返回
        if self.is_hydrated:
            return

        async with self._load_lock:
            # 双重检查：等待锁期间其他协程可能已完成加载
            if self.is_hydrated:
                return

            api_details = await self._fetch_api_details()
            self.known_fields = dict(api_details)
            self.is_hydrated = True
            logger.info("Hydrated %s (%d fields)", self.get_endpoint(), len(api_details))

    async def reload(self) -> None:
        """强制重新获取完整记录，替换所有已知字段"""
        async with self._load_lock:
            api_details = await self._fetch_api_details()
            self.known_fields = dict(api_details)
            self.is_hydrated = True
            logger.info("Reloaded %s", self.get_endpoint())

    async def get_api_detail(self, key: str, default: Any = None) -> Any:
        """
        获取单个字段，必要时先加载完整记录

        已知字段 (包括 seed) 永远不触发网络请求。
        加载后远端记录仍不包含该字段时返回 default。
        """
        value = self.lookup(key)
        if value is not UNKNOWN:
            return value

        await self.load_api_details()
        value = self.lookup(key)
        return default if value is UNKNOWN else value

    def __repr__(self) -> str:
        state = "hydrated" if self.is_hydrated else "unhydrated"
        try:
            endpoint = self.get_endpoint()
        except UnresolvedEndpoint:
            endpoint = "?"
        return f"<{type(self).__name__} {endpoint} ({state})>"
