from dataclasses import dataclass
from typing import Iterable

from mass_checker.model.ip_report import ReputationLevel
from mass_checker.model.verification_item import ItemState, VerificationItem


@dataclass(frozen=True)
class AggregateStats:
    """
    用途说明：检测任务的汇总统计，每次都由条目列表重新计算，不单独保存。
    """
    total: int = 0
    completed: int = 0
    in_progress: int = 0  # PENDING + CHECKING
    errors: int = 0
    stopped: int = 0
    malicious: int = 0
    warning: int = 0
    clean: int = 0

    @classmethod
    def from_items(cls, items: Iterable[VerificationItem]) -> 'AggregateStats':
        """
        用途说明：遍历一次条目列表计算统计值。
        入参说明：items (Iterable[VerificationItem]): 条目快照。
        返回值说明：AggregateStats
        """
        counts = {name: 0 for name in ("total", "completed", "in_progress", "errors",
                                        "stopped", "malicious", "warning", "clean")}
        for item in items:
            counts["total"] += 1
            if item.state is ItemState.COMPLETED:
                counts["completed"] += 1
                level = item.level
                if level is ReputationLevel.MALICIOUS:
                    counts["malicious"] += 1
                elif level is ReputationLevel.WARNING:
                    counts["warning"] += 1
                elif level is ReputationLevel.CLEAN:
                    counts["clean"] += 1
            elif item.state is ItemState.ERRORED:
                counts["errors"] += 1
            elif item.state is ItemState.STOPPED:
                counts["stopped"] += 1
            else:
                counts["in_progress"] += 1
        return cls(**counts)
