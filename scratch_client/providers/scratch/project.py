"""
Project - Scratch 项目

对应 API: GET /projects/:id
"""

import logging
from typing import Any, Dict, Optional

from scratch_client.core.document import APIDocument, Fetch
from scratch_client.schemas.scratch import ProjectAuthor

logger = logging.getLogger(__name__)


class Project(APIDocument):
    """Class representing a Scratch project."""

    def __init__(
        self,
        project_id: int,
        seed: Optional[Dict[str, Any]] = None,
        fetch: Optional[Fetch] = None,
        scratch=None,
    ):
        super().__init__(seed=seed, fetch=fetch)
        self._id = project_id
        self.scratch = scratch

    def get_endpoint(self) -> str:
        return f"projects/{self._id}"

    async def get_id(self) -> int:
        return await self.get_api_detail("id")

    async def get_title(self) -> str:
        return await self.get_api_detail("title")

    async def _get_author(self) -> ProjectAuthor:
        author = await self.get_api_detail("author")
        return ProjectAuthor.model_validate(author)

    async def get_author(self) -> str:
        """Gets the username of the project's author."""
        return (await self._get_author()).username

    async def get_author_user(self):
        """
        获取作者对应的 User 文档

        作者信息作为 seed 传入，读取 id/username 等字段无需额外请求。
        """
        from scratch_client.providers.scratch.user import User, user_seed

        author = await self.get_api_detail("author")
        username = ProjectAuthor.model_validate(author).username
        seed = user_seed(author)
        if self.scratch is not None:
            return self.scratch.get_user(username, seed)
        return User(username, seed=seed, fetch=self.fetch)
