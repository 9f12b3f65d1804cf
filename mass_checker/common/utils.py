import os


class Utils:
    """
    用途：后端通用工具类
    """

    # 运行时根目录的环境变量覆盖项
    RUNTIME_PATH_ENV: str = "MASS_CHECKER_HOME"

    @staticmethod
    def get_runtime_path() -> str:
        """
        用途：获取程序运行时的根路径
        入参说明：无
        返回值说明：优先返回 MASS_CHECKER_HOME 指定的目录，否则返回当前工作目录的绝对路径
        """
        override = os.environ.get(Utils.RUNTIME_PATH_ENV)
        if override:
            return os.path.abspath(override)
        return os.getcwd()

    @staticmethod
    def mask_secret(value: str, visible: int = 4) -> str:
        """
        用途：对密钥类字符串做脱敏处理，仅保留末尾若干位
        入参说明：
            value (str) - 原始字符串
            visible (int) - 保留的末尾字符数
        返回值说明：str - 脱敏后的字符串；空字符串原样返回
        """
        if not value:
            return ""
        if len(value) <= visible:
            return "*" * len(value)
        return "*" * (len(value) - visible) + value[-visible:]
