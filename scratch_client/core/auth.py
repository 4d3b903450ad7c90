"""
Scratch 登录会话管理

流程:
1. POST {site}/login/ 提交用户名密码，从 Set-Cookie 中取 scratchsessionsid
2. GET {site}/session 携带 session id 换取 API token
3. 可选：会话持久化到本地文件，下次启动时恢复
"""

import getpass
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple

from pydantic import ValidationError

from scratch_client.core.api_client import ScratchClient, get_scratch_client
from scratch_client.core.config import settings
from scratch_client.core.errors import FetchFailure, LoginFailure, TransportFailure
from scratch_client.schemas.scratch import LoginSession

logger = logging.getLogger(__name__)

# A simple fake CSRF token is accepted by the site.
FAKE_CSRF_TOKEN = "a"

SESSION_COOKIE = "scratchsessionsid"

Prompt = Callable[[], Awaitable[Tuple[str, str]]]


def _mask_token(token: Optional[str], visible_chars: int = 4) -> str:
    """对 token 进行脱敏处理，仅显示前几个字符"""
    if not token or len(token) <= visible_chars:
        return "***"
    return f"{token[:visible_chars]}***"


async def _console_prompt() -> Tuple[str, str]:
    username = input("username: ")
    password = getpass.getpass("password: ")
    return username, password


class AuthManager:
    def __init__(
        self,
        client: Optional[ScratchClient] = None,
        prompt: Optional[Prompt] = None,
    ):
        self.client = client or get_scratch_client()
        self.prompt = prompt or _console_prompt
        self.site_url = settings.SCRATCH_SITE_BASE_URL

    def _activate(self, session: LoginSession) -> LoginSession:
        self.client.session = session
        logger.info(
            "Logged in as %s (api_token=%s)",
            session.username,
            _mask_token(session.api_token),
        )
        return session

    async def login(self, username: str, password: str) -> LoginSession:
        """
        Log into the Scratch website and API.

        Raises:
            LoginFailure: 用户名或密码错误，或响应中缺少 session cookie
            FetchFailure: 网络错误或非成功状态码
        """
        url = f"{self.site_url}/login/"
        logger.debug("Logging in: username=%s", username)

        response = await self.client.fetch(
            url,
            method="POST",
            json={"username": username, "password": password},
            headers={
                "Cookie": f"scratchcsrftoken={FAKE_CSRF_TOKEN}",
                "X-Requested-With": "XMLHttpRequest",
                "X-CSRFToken": FAKE_CSRF_TOKEN,
                "Referer": self.site_url,
            },
        )
        if not response.ok:
            raise FetchFailure(
                f"Login request failed with HTTP {response.status}",
                url=url,
                status=response.status,
            )

        body = response.json_body
        if not isinstance(body, list) or not body or not isinstance(body[0], dict):
            raise TransportFailure(
                f"Unexpected login response: {body!r}", url=url, status=response.status
            )
        result = body[0]
        if not result.get("success"):
            logger.error("Login failed for %s: %s", username, result.get("msg"))
            raise LoginFailure(result.get("msg") or "Login failed")

        session_id = response.cookies.get(SESSION_COOKIE)
        if not session_id:
            raise LoginFailure(f"Login response did not set {SESSION_COOKIE}")

        api_token = await self._fetch_api_token(session_id)
        session = LoginSession(
            username=result.get("username") or username,
            session_id=session_id,
            csrf_token=FAKE_CSRF_TOKEN,
            api_token=api_token,
        )
        return self._activate(session)

    async def _fetch_api_token(self, session_id: str) -> str:
        """根据 session id 获取 API token"""
        url = f"{self.site_url}/session"
        response = await self.client.fetch(
            url,
            headers={
                "Cookie": f"{SESSION_COOKIE}={session_id}",
                "X-Requested-With": "XMLHttpRequest",
            },
        )
        if not response.ok:
            raise FetchFailure(
                f"Session request failed with HTTP {response.status}",
                url=url,
                status=response.status,
            )
        try:
            api_token = response.json_body["user"]["token"]
        except (KeyError, TypeError) as e:
            raise LoginFailure(f"Session {_mask_token(session_id)} has no API token") from e

        logger.debug("Fetched API token: %s", _mask_token(api_token))
        return api_token

    async def login_prompt(self) -> LoginSession:
        """Show a command-line prompt to log into Scratch."""
        username, password = await self.prompt()
        return await self.login(username, password)

    async def login_or_restore(self, session_file: Optional[str] = None) -> LoginSession:
        """
        登录 Scratch；如存在会话文件则从中恢复

        恢复时重新获取 API token；文件不存在时提示登录并写入会话文件。
        会话文件损坏时抛出异常，不会覆盖。
        """
        path = Path(session_file or settings.SCRATCH_SESSION_FILE)

        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Session file %s not found, prompting for login", path)
            session = await self.login_prompt()
            path.write_text(
                session.model_dump_json(exclude={"api_token"}), encoding="utf-8"
            )
            logger.debug("Session saved to %s", path)
            return session

        try:
            session = LoginSession.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Session file %s is invalid: %s", path, e)
            raise

        logger.info("Restoring session for %s from %s", session.username, path)
        session.api_token = await self._fetch_api_token(session.session_id)
        return self._activate(session)

    def logout(self) -> None:
        self.client.session = None
        # 登录响应写入的 scratchsessionsid 保存在连接的 cookie jar 中
        self.client.client.cookies.clear()
        logger.info("Session cleared")
