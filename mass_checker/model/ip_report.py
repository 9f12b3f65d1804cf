from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# 分级阈值（固定值，不可配置）
MALICIOUS_REPORT_THRESHOLD: int = 100


class ReputationLevel(Enum):
    """
    用途说明：IP 信誉分级，仅由举报总数决定。
    """
    CLEAN = "clean"          # 0 次举报
    WARNING = "warning"      # 1 - 100 次举报
    MALICIOUS = "malicious"  # 超过 100 次举报


def classify(total_reports: int) -> ReputationLevel:
    """
    用途说明：根据举报总数计算信誉分级。
    入参说明：total_reports (int): 举报总数。
    返回值说明：ReputationLevel: 分级结果。
    """
    if total_reports > MALICIOUS_REPORT_THRESHOLD:
        return ReputationLevel.MALICIOUS
    if total_reports > 0:
        return ReputationLevel.WARNING
    return ReputationLevel.CLEAN


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _non_negative_int(value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(number, 0)


@dataclass(frozen=True)
class IpReport:
    """
    用途说明：AbuseIPDB /check 接口返回的单个 IP 信誉报告。
    缺失的可选字段统一归一化为 None / 空列表 / False / 0，不会因字段缺失而报错。
    """
    ip_address: str
    total_reports: int = 0
    abuse_confidence_score: int = 0
    country_code: Optional[str] = None
    country_name: Optional[str] = None
    isp: Optional[str] = None
    domain: Optional[str] = None
    usage_type: Optional[str] = None
    is_public: bool = False
    ip_version: int = 4
    is_whitelisted: bool = False
    is_tor: bool = False
    num_distinct_users: int = 0
    hostnames: List[str] = field(default_factory=list)
    last_reported_at: Optional[str] = None  # ISO 8601 时间戳

    @property
    def level(self) -> ReputationLevel:
        return classify(self.total_reports)

    @classmethod
    def from_api(cls, data: Dict[str, Any], address: str = "") -> 'IpReport':
        """
        用途说明：由接口返回的 data 字典构建报告对象。
        入参说明：
            data (Dict[str, Any]): 响应体中的 data 字段。
            address (str): 请求的地址，响应缺少 ipAddress 时使用。
        返回值说明：IpReport: 归一化后的报告。
        """
        score = min(_non_negative_int(data.get("abuseConfidenceScore")), 100)
        hostnames = data.get("hostnames") or []
        return cls(
            ip_address=_optional_str(data.get("ipAddress")) or address,
            total_reports=_non_negative_int(data.get("totalReports")),
            abuse_confidence_score=score,
            country_code=_optional_str(data.get("countryCode")),
            country_name=_optional_str(data.get("countryName")),
            isp=_optional_str(data.get("isp")),
            domain=_optional_str(data.get("domain")),
            usage_type=_optional_str(data.get("usageType")),
            is_public=bool(data.get("isPublic", False)),
            ip_version=_non_negative_int(data.get("ipVersion")) or (6 if ":" in address else 4),
            is_whitelisted=bool(data.get("isWhitelisted") or False),
            is_tor=bool(data.get("isTor") or False),
            num_distinct_users=_non_negative_int(data.get("numDistinctUsers")),
            hostnames=[str(h) for h in hostnames] if isinstance(hostnames, list) else [],
            last_reported_at=_optional_str(data.get("lastReportedAt")),
        )
