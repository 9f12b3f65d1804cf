from dataclasses import dataclass, field
from typing import List


@dataclass
class AbuseIpDbSettings:
    """
    用途：AbuseIPDB 信誉查询接口配置数据类
    """
    api_key: str = ""
    base_url: str = "https://api.abuseipdb.com/api/v2"
    max_age_in_days: int = 90
    request_timeout: float = 10.0  # 单次请求超时（秒）


@dataclass
class UploadSettings:
    """
    用途：IP 列表上传文件的校验配置数据类
    """
    allowed_suffixes: List[str] = field(default_factory=lambda: [".txt"])
    max_file_size: int = 1024 * 1024  # 1MB
    blocked_name_fragments: List[str] = field(default_factory=lambda: [".php", ".exe", ".js"])


@dataclass
class AppConfig:
    """
    用途：系统全局配置汇总数据类
    """
    abuseipdb: AbuseIpDbSettings = field(default_factory=AbuseIpDbSettings)
    upload: UploadSettings = field(default_factory=UploadSettings)
