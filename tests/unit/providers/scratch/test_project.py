"""
Project 测试模块
"""

from unittest.mock import AsyncMock

import pytest

from scratch_client.core.errors import FetchFailure
from scratch_client.providers.scratch import Project, User
from tests.helpers import make_response

PROJECT_DETAILS = {
    "id": 10128407,
    "title": "Paper Minecraft",
    "author": {"id": 1882674, "username": "griffpatch", "scratchteam": False},
}


class TestProject:
    """测试项目字段方法"""

    def test_endpoint(self):
        assert Project(10128407, fetch=AsyncMock()).get_endpoint() == "projects/10128407"

    @pytest.mark.asyncio
    async def test_fields(self):
        fetch = AsyncMock(return_value=make_response(PROJECT_DETAILS))
        project = Project(10128407, fetch=fetch)

        assert await project.get_id() == 10128407
        assert await project.get_title() == "Paper Minecraft"
        assert await project.get_author() == "griffpatch"
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_author_user_is_seeded(self):
        """测试作者 User 由项目数据 seed，读取 id 无需请求"""
        fetch = AsyncMock(return_value=make_response(PROJECT_DETAILS))
        project = Project(10128407, fetch=fetch)

        author = await project.get_author_user()

        assert isinstance(author, User)
        assert await author.get_id() == 1882674
        assert fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_author_user_loads_full_profile(self):
        """测试项目中作者的 profile 不完整时，读取 bio 仍会请求用户详情"""
        project_details = {
            "id": 10128407,
            "title": "Paper Minecraft",
            "author": {
                "id": 1882674,
                "username": "griffpatch",
                "scratchteam": False,
                "history": {"joined": "2012-10-24T12:59:31.000Z"},
                "profile": {"id": None, "images": {}},
            },
        }
        user_details = {
            "id": 1882674,
            "username": "griffpatch",
            "profile": {"id": 1267497, "status": "", "bio": "MIT", "country": ""},
        }
        fetch = AsyncMock(
            side_effect=[make_response(project_details), make_response(user_details)]
        )
        project = Project(10128407, fetch=fetch)

        author = await project.get_author_user()

        assert await author.get_bio() == "MIT"
        assert fetch.await_count == 2
        assert fetch.await_args_list[1].args[0] == "users/griffpatch"

    @pytest.mark.asyncio
    async def test_not_found(self):
        fetch = AsyncMock(return_value=make_response({"code": "NotFound"}, status=404))
        project = Project(1, fetch=fetch)

        with pytest.raises(FetchFailure):
            await project.get_title()
        assert not project.is_hydrated
