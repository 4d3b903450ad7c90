"""
Scratch API 异步传输层

ScratchClient.fetch 是文档与分页流使用的唯一网络能力:
fetch(url, method=..., json=..., params=..., headers=...) -> TransportResponse
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from scratch_client.core.config import settings
from scratch_client.core.errors import TransportFailure

logger = logging.getLogger(__name__)

_scratch_client = None
_scratch_client_lock = threading.Lock()  # 线程安全锁

# 定义可重试的异常类型
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.ConnectTimeout,
)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")


def _should_retry_response(response: httpx.Response) -> bool:
    """检查响应是否需要重试（5xx 服务端错误）"""
    return response.status_code >= 500


class RetryableHTTPError(Exception):
    """可重试的 HTTP 错误"""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}: {response.text[:200]}")


@dataclass
class TransportResponse:
    """Decoded result of one HTTP exchange."""

    status: int
    json_body: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status < 400


class SessionAuth(httpx.Auth):
    """
    Injects the logged-in session's API token as X-Token on requests
    addressed to the API host.
    """

    def __init__(self, client: "ScratchClient"):
        self._client = client

    async def async_auth_flow(self, request: httpx.Request):
        session = self._client.session
        if session is not None and request.url.host == self._client.api_host:
            request.headers["X-Token"] = session.api_token
        yield request


class ScratchClient:
    """
    Scratch API 异步客户端

    特性:
    - 登录后自动注入 X-Token
    - 自动重试机制 (网络错误、超时、5xx 错误)
    - 指数退避策略
    - 响应统一解码为 TransportResponse
    """

    # 重试配置
    MAX_RETRIES = 3
    RETRY_MIN_WAIT = 1  # 最小等待时间（秒）
    RETRY_MAX_WAIT = 10  # 最大等待时间（秒）

    def __init__(self, base_url: Optional[str] = None, max_retries: Optional[int] = None):
        self.base_url = base_url or settings.SCRATCH_API_BASE_URL
        self.max_retries = self.MAX_RETRIES if max_retries is None else max_retries
        self.session = None  # LoginSession, set by AuthManager after login
        logger.info("Initializing ScratchClient with base_url=%s", self.base_url)
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            auth=SessionAuth(self),
            timeout=httpx.Timeout(settings.HTTP_TIMEOUT),
            trust_env=False,
        )
        self.api_host = httpx.URL(self.base_url).host
        logger.debug("ScratchClient initialized successfully")

    def _get_retry_decorator(self):
        """获取重试装饰器配置"""
        return retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(
                multiplier=1, min=self.RETRY_MIN_WAIT, max=self.RETRY_MAX_WAIT
            ),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS + (RetryableHTTPError,)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        json: Optional[Any] = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        """
        带重试的请求方法

        Raises:
            RetryableHTTPError: 重试耗尽后仍为 5xx
            httpx.HTTPError: 网络错误
        """
        if method not in SUPPORTED_METHODS:
            logger.error("Unsupported HTTP method: %s", method)
            raise ValueError(f"Unsupported HTTP method: {method}")

        @self._get_retry_decorator()
        async def _do_request():
            logger.debug("Making %s request to %s params=%s", method, url, params)
            response = await self.client.request(
                method, url, json=json, params=params, headers=headers
            )
            logger.debug("Response status: %d from %s", response.status_code, url)

            # 5xx 错误触发重试
            if _should_retry_response(response):
                logger.warning(
                    "Received %d from %s, will retry...", response.status_code, url
                )
                raise RetryableHTTPError(response)

            if response.status_code >= 400:
                logger.error(
                    "HTTP error %d from %s: %s",
                    response.status_code,
                    url,
                    response.text[:200],
                )
            else:
                logger.info(
                    "Request successful: %s %s -> %d",
                    method,
                    url,
                    response.status_code,
                )
            return response

        return await _do_request()

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        json: Optional[Any] = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> TransportResponse:
        """
        发起请求并解码 JSON 响应体

        状态码不在此处解释，交由调用方判断 (TransportResponse.ok)。

        Raises:
            TransportFailure: 请求无法完成或响应体不是合法 JSON
        """
        try:
            response = await self._request_with_retry(
                method, url, json=json, params=params, headers=headers
            )
        except RetryableHTTPError as e:
            # 重试耗尽，返回最后一次 5xx 响应
            response = e.response
        except httpx.HTTPError as e:
            logger.error("Request %s %s failed (network error): %s", method, url, e)
            raise TransportFailure(f"{method} {url} failed: {e}", url=url) from e

        if not response.content:
            json_body = None
        else:
            try:
                json_body = response.json()
            except ValueError as e:
                logger.error("Response from %s is not valid JSON: %s", url, e)
                raise TransportFailure(
                    f"Could not decode response from {url}: {e}",
                    url=url,
                    status=response.status_code,
                ) from e

        return TransportResponse(
            status=response.status_code,
            json_body=json_body,
            headers=response.headers,
            cookies={cookie.name: cookie.value for cookie in response.cookies.jar},
        )

    async def close(self):
        """关闭客户端连接"""
        logger.info("Closing ScratchClient connection")
        await self.client.aclose()
        logger.debug("ScratchClient connection closed")


def get_scratch_client() -> ScratchClient:
    """
    获取全局单例客户端（线程安全）

    使用双重检查锁定模式，防止多线程/多协程并发时重复实例化。
    """
    global _scratch_client

    # 快速路径：已初始化则直接返回
    if _scratch_client is not None:
        logger.debug("Reusing existing ScratchClient singleton instance")
        return _scratch_client

    # 慢路径：使用锁保护初始化
    with _scratch_client_lock:
        if _scratch_client is not None:
            logger.debug("Reusing existing ScratchClient singleton instance (after lock)")
            return _scratch_client

        logger.debug("Creating new ScratchClient singleton instance")
        _scratch_client = ScratchClient()

    return _scratch_client
