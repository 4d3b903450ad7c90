"""
Scratch 文档层

- User: 用户资料与关注/粉丝/作品分页流
- Project: 项目详情

使用示例:
    from scratch_client.providers.scratch import User

    user = User("griffpatch")
    async for follower in user.get_followers():
        print(await follower.get_username())
"""

from .project import Project
from .user import User

__all__ = [
    "Project",
    "User",
]
