import logging
import os
import sys
import threading
from datetime import datetime
from typing import Optional

from mass_checker.common.utils import Utils

# 接口请求日志等级，介于 INFO(20) 与 WARNING(30) 之间
LOG_LEVEL_API: int = 25
logging.addLevelName(LOG_LEVEL_API, "API")


class LogUtils:
    """
    用途说明：检测服务统一日志入口。同时输出到控制台和 data/log/ 下按天切分的日志文件。
    不提供 WARNING 等级，接口请求使用 API 等级，检测任务的过程日志通过 task() 带上任务编号，便于在多次上传之间区分。
    """
    _logger: Optional[logging.Logger] = None
    _file_handler: Optional[logging.FileHandler] = None
    _log_date: str = ""
    _log_dir: str = ""
    _rotate_lock: threading.Lock = threading.Lock()
    _formatter: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s.%(msecs)03d [%(threadName)s] %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    @staticmethod
    def get_log_dir() -> str:
        """
        用途说明：默认日志目录，即运行时目录下的 data/log。
        返回值说明：str: 目录绝对路径。
        """
        return os.path.join(Utils.get_runtime_path(), "data", "log")

    @classmethod
    def init(cls, level: int = logging.INFO, log_dir: str = "") -> None:
        """
        用途说明：初始化日志器，重复调用只会调整日志级别。
        入参说明：
            level (int): 日志级别。
            log_dir (str): 日志目录，为空时使用 get_log_dir()。
        """
        if cls._logger is not None:
            cls._logger.setLevel(level)
            return

        logger = logging.getLogger("mass_checker")
        logger.setLevel(level)
        logger.propagate = False

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(cls._formatter)
        logger.addHandler(console)

        cls._logger = logger
        cls._log_dir = log_dir or cls.get_log_dir()
        cls._open_file_for_today()

    @classmethod
    def _open_file_for_today(cls) -> None:
        """
        用途说明：切换到当天的日志文件（YYYYMMDD.log），旧文件句柄随即关闭。
        """
        today = datetime.now().strftime('%Y%m%d')
        os.makedirs(cls._log_dir, exist_ok=True)

        if cls._file_handler is not None:
            cls._logger.removeHandler(cls._file_handler)
            cls._file_handler.close()

        handler = logging.FileHandler(os.path.join(cls._log_dir, f"{today}.log"), encoding='utf-8')
        handler.setFormatter(cls._formatter)
        cls._logger.addHandler(handler)
        cls._file_handler = handler
        cls._log_date = today

    @classmethod
    def _emit(cls, level: int, message: str) -> None:
        if cls._logger is None:
            return
        # 跨过零点后第一条日志写入新文件
        if datetime.now().strftime('%Y%m%d') != cls._log_date:
            with cls._rotate_lock:
                if datetime.now().strftime('%Y%m%d') != cls._log_date:
                    cls._open_file_for_today()
        cls._logger.log(level, message)

    @classmethod
    def debug(cls, message: str) -> None:
        cls._emit(logging.DEBUG, message)

    @classmethod
    def info(cls, message: str) -> None:
        cls._emit(logging.INFO, message)

    @classmethod
    def api(cls, message: str) -> None:
        """用途说明：记录一次接口请求。"""
        cls._emit(LOG_LEVEL_API, f"接口请求 - {message}")

    @classmethod
    def error(cls, message: str) -> None:
        cls._emit(logging.ERROR, message)

    @classmethod
    def task(cls, run_id: str, message: str, level: int = logging.INFO) -> None:
        """
        用途说明：记录检测任务日志，消息前缀为任务编号的前 8 位。
        入参说明：
            run_id (str): 任务编号。
            message (str): 日志内容。
            level (int): 日志级别，默认 INFO。
        """
        cls._emit(level, f"[任务 {run_id[:8]}] {message}")
