"""
Scratch 客户端异常定义

层级:
- ScratchError
  - FetchFailure: 请求未得到可用结果 (非 2xx 状态码等)
    - TransportFailure: 请求无法完成或响应体无法解码
  - UnresolvedEndpoint: 文档类型未提供 endpoint 规则
  - StreamTransformFailure: 分页流中单条记录转换失败
  - LoginFailure: 登录握手被拒绝
"""

from typing import Optional


class ScratchError(Exception):
    """所有 Scratch 客户端异常的基类"""

    pass


class FetchFailure(ScratchError):
    """Fetching a document or page did not produce a usable result."""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        self.url = url
        self.status = status
        super().__init__(message)


class TransportFailure(FetchFailure):
    """The request could not complete or returned an undecodable body."""

    pass


class UnresolvedEndpoint(ScratchError, NotImplementedError):
    pass


class StreamTransformFailure(ScratchError):
    """分页流中的记录转换函数抛出异常，流随即终止"""

    def __init__(self, record, cause: Exception):
        self.record = record
        super().__init__(f"Failed to transform stream record {record!r}: {cause}")


class LoginFailure(ScratchError):
    pass
