import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional


class ThreadPoolManager:
    """
    用途：后台任务共享线程池。检测循环在这里运行，接口线程只负责提交和查询状态。
    执行器在第一次提交时创建，shutdown 之后再次提交会重新创建。
    """

    # 替换任务时新旧两个检测循环会短暂共存
    MAX_WORKERS: int = 4
    THREAD_NAME_PREFIX: str = "CheckerPool"

    _executor: Optional[ThreadPoolExecutor] = None
    _lock: threading.Lock = threading.Lock()

    @classmethod
    def _get_executor(cls) -> ThreadPoolExecutor:
        with cls._lock:
            if cls._executor is None:
                cls._executor = ThreadPoolExecutor(
                    max_workers=cls.MAX_WORKERS,
                    thread_name_prefix=cls.THREAD_NAME_PREFIX
                )
            return cls._executor

    @classmethod
    def submit(cls, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """
        用途：提交一个后台任务。
        入参说明：fn 及其位置参数、关键字参数。
        返回值说明：Future - 任务句柄。
        """
        return cls._get_executor().submit(fn, *args, **kwargs)

    @classmethod
    def shutdown(cls, wait: bool = True) -> None:
        """
        用途：关闭线程池，服务停止时调用。
        入参说明：wait (bool) - 是否等待正在运行的任务结束。
        """
        with cls._lock:
            executor, cls._executor = cls._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
