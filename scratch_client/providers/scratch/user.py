"""
User - Scratch 网站用户

对应 API:
- GET /users/:username
- GET /users/:username/followers?offset=&limit=
- GET /users/:username/following?offset=&limit=
- GET /users/:username/projects?offset=&limit=
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from scratch_client.core.document import APIDocument, Fetch
from scratch_client.core.stream import PaginatedStream, api_stream
from scratch_client.providers.scratch.project import Project
from scratch_client.schemas.scratch import UserHistory, UserProfile

logger = logging.getLogger(__name__)

# 内嵌用户对象 (列表记录、项目作者) 中只有这些顶层字段是完整的；
# profile/history 等嵌套对象可能只含部分字段，不能作为 seed
USER_SEED_FIELDS = ("id", "username", "scratchteam")


def user_seed(record: Dict[str, Any]) -> Dict[str, Any]:
    """从内嵌用户记录中提取可作为 seed 的字段"""
    return {key: value for key, value in record.items() if key in USER_SEED_FIELDS}


class User(APIDocument):
    """Class representing a Scratch website user."""

    def __init__(
        self,
        username: str,
        seed: Optional[Dict[str, Any]] = None,
        fetch: Optional[Fetch] = None,
        scratch=None,
    ):
        """
        Args:
            username: 用于获取 API 详情的用户名
            seed: 已知字段
            fetch: 传输函数
            scratch: 所属 Scratch 门面，用于从身份缓存获取关联文档
        """
        super().__init__(seed=seed, fetch=fetch)
        self._username = username
        self.scratch = scratch

    def get_endpoint(self) -> str:
        return f"users/{self._username}"

    async def get_id(self) -> int:
        return await self.get_api_detail("id")

    async def get_username(self) -> str:
        return await self.get_api_detail("username")

    async def get_scratch_team_status(self) -> bool:
        """Gets whether the user is part of the Scratch Team or not."""
        return await self.get_api_detail("scratchteam")

    async def get_join_date(self) -> Optional[datetime]:
        history = await self.get_api_detail("history")
        if history is None:
            return None
        return UserHistory.model_validate(history).joined

    async def _get_profile(self) -> UserProfile:
        profile = await self.get_api_detail("profile")
        return UserProfile.model_validate(profile or {})

    async def get_status(self) -> Optional[str]:
        """Gets the user's status ("what I'm working on")."""
        return (await self._get_profile()).status

    async def get_bio(self) -> Optional[str]:
        """Gets the user's bio ("about me")."""
        return (await self._get_profile()).bio

    async def get_country(self) -> Optional[str]:
        return (await self._get_profile()).country

    def _user_from_record(self, record: Dict[str, Any]) -> "User":
        username = record["username"]
        if self.scratch is not None:
            return self.scratch.get_user(username, user_seed(record))
        return User(username, seed=user_seed(record), fetch=self.fetch)

    def _project_from_record(self, record: Dict[str, Any]) -> Project:
        project_id = record["id"]
        if self.scratch is not None:
            return self.scratch.get_project(project_id, record)
        return Project(project_id, seed=record, fetch=self.fetch)

    def get_following(self, page_size: Optional[int] = None) -> PaginatedStream:
        """Users this user follows, newest first."""
        return api_stream(
            self.fetch,
            f"users/{self._username}/following",
            transform_result=self._user_from_record,
            page_size=page_size,
        )

    def get_followers(self, page_size: Optional[int] = None) -> PaginatedStream:
        """Users following this user, newest first."""
        return api_stream(
            self.fetch,
            f"users/{self._username}/followers",
            transform_result=self._user_from_record,
            page_size=page_size,
        )

    def get_shared_projects(self, page_size: Optional[int] = None) -> PaginatedStream:
        """
        Projects created and shared by the user.

        The API lists these from oldest to newest.
        """
        return api_stream(
            self.fetch,
            f"users/{self._username}/projects",
            transform_result=self._project_from_record,
            page_size=page_size,
        )
