"""
Scratch API 异步客户端

核心组件:
- APIDocument: 惰性加载文档
- IdentityCache: 身份缓存
- PaginatedStream: 分页流
- Scratch: 客户端门面
"""

from scratch_client.core.cache import IdentityCache
from scratch_client.core.document import UNKNOWN, APIDocument
from scratch_client.core.errors import (
    FetchFailure,
    LoginFailure,
    ScratchError,
    StreamTransformFailure,
    TransportFailure,
    UnresolvedEndpoint,
)
from scratch_client.core.stream import PaginatedStream, api_stream
from scratch_client.providers.scratch import Project, User
from scratch_client.scratch import Scratch

__all__ = [
    "APIDocument",
    "FetchFailure",
    "IdentityCache",
    "LoginFailure",
    "PaginatedStream",
    "Project",
    "Scratch",
    "ScratchError",
    "StreamTransformFailure",
    "TransportFailure",
    "UNKNOWN",
    "UnresolvedEndpoint",
    "User",
    "api_stream",
]
