from typing import Any, Dict, Optional

import requests

from mass_checker.checker.address_parser import AddressParser
from mass_checker.checker.errors import (
    InvalidFormat,
    NetworkError,
    RateLimited,
    ReputationLookupError,
    Unauthorized,
    UnknownLookupError,
)
from mass_checker.common.log_utils import LogUtils
from mass_checker.model.ip_report import IpReport
from mass_checker.setting.setting_models import AbuseIpDbSettings


class AbuseIpDbClient:
    """
    用途说明：AbuseIPDB v2 信誉查询客户端。
    负责请求发送、密钥请求头注入以及 HTTP 状态码到业务异常的映射，调用方只关心异常的分类。
    """

    CHECK_ENDPOINT: str = "/check"

    def __init__(self, settings: AbuseIpDbSettings, session: Optional[requests.Session] = None) -> None:
        """
        用途说明：初始化客户端。配置对象按引用保存，配置变更后下一次请求即生效。
        入参说明：
            settings (AbuseIpDbSettings): 接口配置。
            session (requests.Session, 可选): 自定义会话，默认新建。
        """
        self._settings = settings
        self._session = session or requests.Session()

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Key": self._settings.api_key,
            "Accept": "application/json"
        }

    def lookup(self, address: str) -> IpReport:
        """
        用途说明：查询单个地址的信誉报告，只请求一次，不做重试。
        入参说明：address (str): IPv4 / IPv6 地址。
        返回值说明：IpReport: 归一化后的报告。失败时抛出 ReputationLookupError 的子类。
        """
        if not AddressParser.is_valid_ip(address):
            raise InvalidFormat(f"非法的 IP 地址格式: {address}")

        url = self._settings.base_url.rstrip("/") + self.CHECK_ENDPOINT
        params = {
            "ipAddress": address,
            "maxAgeInDays": str(self._settings.max_age_in_days)
        }
        try:
            response = self._session.get(
                url,
                headers=self._build_headers(),
                params=params,
                timeout=self._settings.request_timeout
            )
        except requests.RequestException as e:
            LogUtils.error(f"AbuseIPDB 请求异常: {address}, 错误: {e}")
            raise NetworkError("网络错误：无法连接 AbuseIPDB 接口，请检查网络连接") from e

        if not response.ok:
            raise self._map_status_error(response)

        payload = self._decode_payload(response)
        return IpReport.from_api(payload, address=address)

    @staticmethod
    def _map_status_error(response: requests.Response) -> ReputationLookupError:
        """
        用途说明：将非 2xx 响应映射为对应的业务异常。
        入参说明：response (requests.Response): 接口响应。
        返回值说明：ReputationLookupError: 待抛出的异常对象。
        """
        status = response.status_code
        if status == 429:
            return RateLimited("超出接口调用频率限制，请稍后再试", status)
        if status == 401:
            return Unauthorized("API 密钥无效或未授权访问", status)
        if status == 422:
            return InvalidFormat("IP 地址格式不被接口接受", status)
        return UnknownLookupError(f"API 请求失败: {status} - {response.reason}", status)

    @staticmethod
    def _decode_payload(response: requests.Response) -> Dict[str, Any]:
        """
        用途说明：解析响应体中的 data 字段。
        入参说明：response (requests.Response): 2xx 响应。
        返回值说明：Dict[str, Any]: data 字典，格式不符时抛出 UnknownLookupError。
        """
        try:
            body = response.json()
        except ValueError as e:
            raise UnknownLookupError("接口返回内容无法解析为 JSON", response.status_code) from e

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise UnknownLookupError("接口返回内容缺少 data 字段", response.status_code)
        return data
