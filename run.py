import os
import sys

# 以脚本方式启动时，保证 mass_checker 与 config 可以被导入
ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from mass_checker.main import start_server


def main() -> int:
    """
    用途说明：IP 批量检测服务启动入口，Ctrl+C 正常退出。
    返回值说明：int: 进程退出码。
    """
    try:
        start_server()
    except KeyboardInterrupt:
        print("\n[mass-checker] 服务已停止")
    return 0


if __name__ == "__main__":
    sys.exit(main())
