from enum import Enum


class LookupErrorKind(Enum):
    """
    用途：信誉查询失败的分类枚举。
    """
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"
    NETWORK = "network"
    UNKNOWN = "unknown"


class MassCheckerError(Exception):
    """用途：项目内所有业务异常的基类。"""


class ValidationError(MassCheckerError):
    """
    用途：输入校验失败（空列表、非法或重复的地址、非法上传文件），在发起任何网络请求之前抛出。
    """


class EmptyExportError(MassCheckerError):
    """
    用途：导出时没有任何符合条件的记录。只影响调用方，不改变检测任务状态。
    """


class ReputationLookupError(MassCheckerError):
    """
    用途：单个地址信誉查询失败的基类，记录在对应条目上，不会中断后续检测。
    """
    kind: LookupErrorKind = LookupErrorKind.UNKNOWN

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RateLimited(ReputationLookupError):
    kind = LookupErrorKind.RATE_LIMITED


class Unauthorized(ReputationLookupError):
    kind = LookupErrorKind.UNAUTHORIZED


class InvalidFormat(ReputationLookupError):
    kind = LookupErrorKind.INVALID_INPUT


class NetworkError(ReputationLookupError):
    kind = LookupErrorKind.NETWORK


class UnknownLookupError(ReputationLookupError):
    kind = LookupErrorKind.UNKNOWN
