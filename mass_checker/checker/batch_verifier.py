import logging
import threading
from typing import Iterable, Optional, Protocol

from mass_checker.abuseipdb.abuseipdb_client import AbuseIpDbClient
from mass_checker.checker.address_parser import AddressParser
from mass_checker.checker.batch_run import BatchRun
from mass_checker.checker.errors import ReputationLookupError, UnknownLookupError
from mass_checker.checker.export_service import ExportService
from mass_checker.common.log_utils import LogUtils
from mass_checker.common.thread_pool import ThreadPoolManager
from mass_checker.model.aggregate_stats import AggregateStats
from mass_checker.model.ip_report import IpReport
from mass_checker.setting.setting_service import settingService


class LookupClient(Protocol):
    def lookup(self, address: str) -> IpReport: ...


class BatchVerifier:
    """
    用途说明：批量 IP 信誉检测服务。按输入顺序逐个查询，相邻两次查询之间固定间隔，
    支持中途停止，同一时间只保留一个检测任务。
    """

    # 外部接口有调用频率上限，每两次查询之间固定等待 1.5 秒
    REQUEST_INTERVAL_SECONDS: float = 1.5

    def __init__(self, client: LookupClient, interval_seconds: float = REQUEST_INTERVAL_SECONDS) -> None:
        """
        用途说明：初始化检测服务。
        入参说明：
            client (LookupClient): 信誉查询客户端，需提供 lookup(address) 方法。
            interval_seconds (float): 查询间隔秒数，默认 1.5 秒。
        """
        self._client = client
        self._interval_seconds = interval_seconds
        self._current_run: Optional[BatchRun] = None
        self._start_lock: threading.Lock = threading.Lock()

    @property
    def current_run(self) -> Optional[BatchRun]:
        return self._current_run

    def start(self, addresses: Iterable[str]) -> BatchRun:
        """
        用途说明：启动新的异步检测任务。已有任务时先停止并等待其结束，再丢弃旧结果。
        入参说明：addresses (Iterable[str]): 去重且合法的地址列表。
        返回值说明：BatchRun: 新任务对象，其状态随检测进行原地更新。
        """
        validated = AddressParser.validate_addresses(addresses)

        with self._start_lock:
            self._discard_current_run()

            run = BatchRun(validated)
            self._current_run = run
            LogUtils.task(run.run_id, f"已创建，共 {len(run)} 个地址")
            ThreadPoolManager.submit(self._internal_check, run)
            return run

    def cancel(self, run: Optional[BatchRun] = None) -> bool:
        """
        用途说明：请求停止检测任务。任务已结束时无效果，重复调用无副作用。
        入参说明：run (BatchRun, 可选): 目标任务，默认当前任务。
        返回值说明：bool: 本次请求是否生效。
        """
        run = self._resolve(run)
        if run is None:
            return False
        if run.request_cancel():
            LogUtils.task(run.run_id, "用户请求停止任务，已设置停止标志位")
            return True
        return False

    def reset(self) -> None:
        """
        用途说明：停止并丢弃当前任务，用于重新上传列表前清空结果。
        """
        with self._start_lock:
            self._discard_current_run()
            self._current_run = None

    def stats(self, run: Optional[BatchRun] = None) -> AggregateStats:
        """
        用途说明：重新计算任务统计值，没有任务时返回全零统计。
        入参说明：run (BatchRun, 可选): 目标任务，默认当前任务。
        返回值说明：AggregateStats
        """
        run = self._resolve(run)
        if run is None:
            return AggregateStats()
        return run.stats()

    def export_malicious(self, run: Optional[BatchRun] = None) -> str:
        """用途说明：导出恶意 IP 文本，没有符合条件的记录时抛出 EmptyExportError。"""
        return ExportService.export_malicious(self._resolve(run))

    def export_all(self, run: Optional[BatchRun] = None) -> str:
        """用途说明：导出全部条目的 CSV 文本，没有任务时抛出 EmptyExportError。"""
        return ExportService.export_all(self._resolve(run))

    def _resolve(self, run: Optional[BatchRun]) -> Optional[BatchRun]:
        return run if run is not None else self._current_run

    def _discard_current_run(self) -> None:
        """
        用途说明：停止当前任务并等待后台线程退出。调用方需持有 _start_lock。
        """
        run = self._current_run
        if run is None or not run.running:
            return
        self.cancel(run)
        # 正在进行的查询最多持续一个请求超时时间，间隔等待会被停止标志立即唤醒
        run.wait_finished()
        LogUtils.task(run.run_id, "已被新任务替换")

    def _internal_check(self, run: BatchRun) -> None:
        """
        用途说明：检测内部逻辑，在线程池中运行，严格串行并支持中途停止。
        入参说明：run (BatchRun): 目标任务。
        """
        total = len(run)
        try:
            for index, address in enumerate(run.addresses()):
                # 检查点一：开始下一个查询之前
                if not run.mark_checking(index):
                    LogUtils.task(run.run_id, "已由用户手动停止")
                    break

                try:
                    report = self._client.lookup(address)
                except ReputationLookupError as e:
                    LogUtils.error(f"检测 IP {address} 失败 ({e.kind.value}): {e.message}")
                    run.mark_errored(index, e)
                except Exception as e:
                    LogUtils.error(f"检测 IP {address} 出现未知异常: {e}")
                    run.mark_errored(index, UnknownLookupError(f"未知错误: {e}"))
                else:
                    run.mark_completed(index, report)

                # 检查点二：查询返回之后，停止请求优先于迟到的结果
                if run.cancel_requested:
                    LogUtils.task(run.run_id, "已由用户手动停止")
                    break

                if index < total - 1 and run.wait_for_cancel(self._interval_seconds):
                    LogUtils.task(run.run_id, "在等待间隔内被停止")
                    break
        except Exception as e:
            LogUtils.task(run.run_id, f"异常: {e}", logging.ERROR)
            run.request_cancel()
        finally:
            run.finish()

        stats = run.stats()
        LogUtils.task(
            run.run_id,
            f"结束：完成 {stats.completed}，失败 {stats.errors}，"
            f"停止 {stats.stopped}，恶意 {stats.malicious}"
        )


# 实例化单例
batch_verifier = BatchVerifier(AbuseIpDbClient(settingService.get_config().abuseipdb))
