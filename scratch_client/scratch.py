"""
Scratch - 客户端门面

持有传输层、登录管理器和两个身份缓存 (用户、项目)，保证同一实体
在进程内只有一个文档实例。

使用示例:
    scratch = Scratch()
    user = scratch.get_user("griffpatch")
    print(await user.get_bio())

    async for project in user.get_shared_projects():
        print(await project.get_title())   # 列表中已包含 title，无额外请求
"""

import logging
from typing import Any, Dict, Optional, Union

from scratch_client.core.api_client import ScratchClient, get_scratch_client
from scratch_client.core.auth import AuthManager, Prompt
from scratch_client.core.cache import IdentityCache, normalize_project_id, normalize_username
from scratch_client.providers.scratch import Project, User
from scratch_client.schemas.scratch import LoginSession

logger = logging.getLogger(__name__)


class UserFactory:
    def __init__(self, scratch: "Scratch"):
        self.scratch = scratch

    def create(self, key: str, seed: Optional[Dict[str, Any]]) -> User:
        return User(key, seed=seed, fetch=self.scratch.client.fetch, scratch=self.scratch)


class ProjectFactory:
    def __init__(self, scratch: "Scratch"):
        self.scratch = scratch

    def create(self, key: int, seed: Optional[Dict[str, Any]]) -> Project:
        return Project(key, seed=seed, fetch=self.scratch.client.fetch, scratch=self.scratch)


class Scratch:
    """Class containing methods for interacting with the Scratch API."""

    def __init__(
        self,
        client: Optional[ScratchClient] = None,
        prompt: Optional[Prompt] = None,
        merge_seed_on_hit: bool = False,
    ):
        """
        Args:
            client: 传输客户端，默认使用全局单例
            prompt: 命令行登录提示函数
            merge_seed_on_hit: 缓存命中时是否补充未知的 seed 字段
        """
        self.client = client or get_scratch_client()
        self.auth = AuthManager(client=self.client, prompt=prompt)
        self.users: IdentityCache[User] = IdentityCache(
            UserFactory(self),
            normalize_key=normalize_username,
            merge_seed_on_hit=merge_seed_on_hit,
        )
        self.projects: IdentityCache[Project] = IdentityCache(
            ProjectFactory(self),
            normalize_key=normalize_project_id,
            merge_seed_on_hit=merge_seed_on_hit,
        )

    @property
    def session(self) -> Optional[LoginSession]:
        return self.client.session

    def get_user(self, username: str, seed: Optional[Dict[str, Any]] = None) -> User:
        return self.users.get_or_create(username, seed)

    def get_project(
        self, project_id: Union[int, str], seed: Optional[Dict[str, Any]] = None
    ) -> Project:
        return self.projects.get_or_create(project_id, seed)

    async def login(self, username: str, password: str) -> LoginSession:
        return await self.auth.login(username, password)

    async def login_prompt(self) -> LoginSession:
        return await self.auth.login_prompt()

    async def login_or_restore(self, session_file: Optional[str] = None) -> LoginSession:
        return await self.auth.login_or_restore(session_file)

    async def close(self):
        await self.client.close()
