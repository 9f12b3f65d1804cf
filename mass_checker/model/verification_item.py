from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from mass_checker.checker.errors import LookupErrorKind
from mass_checker.model.ip_report import IpReport, ReputationLevel


class ItemState(Enum):
    """
    用途说明：单个地址的检测状态枚举。
    """
    PENDING = "pending"
    CHECKING = "checking"
    COMPLETED = "completed"
    ERRORED = "error"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemState.COMPLETED, ItemState.ERRORED, ItemState.STOPPED)


@dataclass
class VerificationItem:
    """
    用途说明：检测队列中的单个条目。
    report 仅在 COMPLETED 时存在，error_message / error_kind 仅在 ERRORED 时存在。
    """
    address: str
    state: ItemState = ItemState.PENDING
    report: Optional[IpReport] = None
    error_message: Optional[str] = None
    error_kind: Optional[LookupErrorKind] = None

    @property
    def level(self) -> Optional[ReputationLevel]:
        """未完成的条目没有分级。"""
        if self.state is not ItemState.COMPLETED or self.report is None:
            return None
        return self.report.level

    @property
    def total_reports(self) -> int:
        return self.report.total_reports if self.report else 0

    def to_dict(self) -> Dict[str, Any]:
        """
        用途说明：转换为接口返回用的字典，枚举字段输出其字符串值。
        返回值说明：Dict[str, Any]
        """
        level = self.level
        return {
            "address": self.address,
            "state": self.state.value,
            "level": level.value if level else None,
            "report": asdict(self.report) if self.report else None,
            "error_message": self.error_message,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }
