import threading
import time
import uuid
from dataclasses import asdict, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from mass_checker.checker.errors import ReputationLookupError
from mass_checker.model.aggregate_stats import AggregateStats
from mass_checker.model.ip_report import IpReport
from mass_checker.model.verification_item import ItemState, VerificationItem


class RunStatus(Enum):
    """
    用途：检测任务整体状态枚举类。
    """
    PROCESSING = "processing"
    COMPLETED = "completed"
    STOPPED = "stopped"


class BatchRun:
    """
    用途：一次批量检测任务的运行状态，提供线程安全的条目状态、停止标志和运行标志管理。
    后台检测线程是唯一的写入方（停止请求只会把未结束的条目置为 STOPPED），接口层通过快照读取。
    """

    def __init__(self, addresses: Sequence[str]) -> None:
        """
        用途：初始化任务，所有条目处于 PENDING 状态。
        入参说明：
            addresses (Sequence[str]) - 已校验、去重的地址列表。
        返回值说明：无
        """
        self.run_id: str = uuid.uuid4().hex
        self.started_at: float = time.time()
        self.finished_at: Optional[float] = None
        self._items: List[VerificationItem] = [VerificationItem(address=a) for a in addresses]
        self._running: bool = True
        self._cancel_event: threading.Event = threading.Event()  # 停止标志，同时用于唤醒间隔等待
        self._finished_event: threading.Event = threading.Event()
        self._lock: threading.Lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    # --- 读取 ---

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def status(self) -> RunStatus:
        with self._lock:
            if self._running:
                return RunStatus.PROCESSING
        return RunStatus.STOPPED if self.cancel_requested else RunStatus.COMPLETED

    @property
    def items(self) -> List[VerificationItem]:
        """
        用途：获取条目快照（浅拷贝，报告对象不可变可直接共享）。
        返回值说明：List[VerificationItem] - 与输入顺序一致的条目列表。
        """
        with self._lock:
            return [replace(item) for item in self._items]

    def addresses(self) -> List[str]:
        return [item.address for item in self._items]

    def stats(self) -> AggregateStats:
        """用途：由当前条目快照重新计算统计值。"""
        return AggregateStats.from_items(self.items)

    def get_status(self) -> Dict[str, Any]:
        """
        用途：获取任务状态、进度和统计的字典形式，供接口返回。
        返回值说明：Dict[str, Any] - 包含 run_id、status、progress、stats 等字段。
        """
        stats = self.stats()
        done = stats.completed + stats.errors + stats.stopped
        status = self.status
        if status is RunStatus.PROCESSING:
            message = f"已完成 {done}/{stats.total}"
        elif status is RunStatus.STOPPED:
            message = f"检测任务已停止，已完成 {stats.completed + stats.errors}/{stats.total}"
        else:
            message = f"检测完成，共 {stats.total} 个地址"
        return {
            "run_id": self.run_id,
            "status": status.value,
            "running": status is RunStatus.PROCESSING,
            "cancel_requested": self.cancel_requested,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "progress": {"total": stats.total, "current": done, "message": message},
            "stats": asdict(stats),
        }

    # --- 停止控制 ---

    def request_cancel(self) -> bool:
        """
        用途：设置停止标志，并立即把所有 PENDING / CHECKING 条目置为 STOPPED。
        已结束的任务不受影响，重复调用无副作用。
        返回值说明：bool - 本次调用是否真正生效。
        """
        with self._lock:
            if not self._running or self._cancel_event.is_set():
                return False
            unfinished = [item for item in self._items if not item.state.is_terminal]
            # 所有条目已结束、只差 finish() 时，任务视为已完成
            if not unfinished:
                return False
            self._cancel_event.set()
            for item in unfinished:
                item.state = ItemState.STOPPED
            return True

    def wait_for_cancel(self, timeout: float) -> bool:
        """
        用途：在检测间隔内等待，收到停止请求时立即返回。
        入参说明：timeout (float) - 最长等待秒数。
        返回值说明：bool - 等待期间是否收到停止请求。
        """
        return self._cancel_event.wait(timeout)

    def wait_finished(self, timeout: Optional[float] = None) -> bool:
        """
        用途：等待后台检测循环结束。
        入参说明：timeout (float, optional) - 最长等待秒数，None 表示一直等待。
        返回值说明：bool - 任务是否已结束。
        """
        return self._finished_event.wait(timeout)

    # --- 状态迁移（仅由检测线程调用） ---

    def mark_checking(self, index: int) -> bool:
        """
        用途：将条目置为 CHECKING。已收到停止请求时拒绝。
        返回值说明：bool - 是否迁移成功。
        """
        with self._lock:
            item = self._items[index]
            if self._cancel_event.is_set() or item.state is not ItemState.PENDING:
                return False
            item.state = ItemState.CHECKING
            return True

    def mark_completed(self, index: int, report: IpReport) -> bool:
        """
        用途：记录查询成功的结果。查询期间收到停止请求时丢弃结果，条目保持 STOPPED。
        返回值说明：bool - 结果是否被记录。
        """
        with self._lock:
            item = self._items[index]
            if self._cancel_event.is_set() or item.state is not ItemState.CHECKING:
                return False
            item.state = ItemState.COMPLETED
            item.report = report
            return True

    def mark_errored(self, index: int, error: ReputationLookupError) -> bool:
        """
        用途：记录查询失败的结果。停止请求优先，规则同 mark_completed。
        返回值说明：bool - 错误是否被记录。
        """
        with self._lock:
            item = self._items[index]
            if self._cancel_event.is_set() or item.state is not ItemState.CHECKING:
                return False
            item.state = ItemState.ERRORED
            item.error_message = error.message
            item.error_kind = error.kind
            return True

    def finish(self) -> None:
        """
        用途：检测循环结束时调用。若曾请求停止，剩余未结束的条目置为 STOPPED；随后清除运行标志。
        """
        with self._lock:
            if self._cancel_event.is_set():
                for item in self._items:
                    if not item.state.is_terminal:
                        item.state = ItemState.STOPPED
            self._running = False
            self.finished_at = time.time()
        self._finished_event.set()
