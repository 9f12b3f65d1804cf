import os


class GlobalConfig:
    """
    用途说明：服务监听相关的静态配置，端口可由环境变量 MASS_CHECKER_PORT 覆盖。
    """
    SYSTEM_HOST: str = "0.0.0.0"
    SYSTEM_PORT: int = int(os.environ.get("MASS_CHECKER_PORT", "5000"))
    # waitress 处理 HTTP 请求的线程数，与检测线程池相互独立
    SERVER_THREADS: int = 8
