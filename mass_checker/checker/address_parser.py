import os
import re
from typing import Iterable, List

from mass_checker.checker.errors import ValidationError
from mass_checker.setting.setting_models import UploadSettings


class AddressParser:
    """
    用途说明：IP 地址校验与上传内容解析工具类。
    只接受严格的 IPv4 点分十进制（每段 0-255）以及完整 8 段的 IPv6，另外允许 "::" 和 "::1" 两种简写。
    """

    _IPV4_PATTERN = re.compile(
        r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
        r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
    )
    _IPV6_PATTERN = re.compile(r'^(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}$|^::1$|^::$')

    # 上传内容的分隔符：换行、逗号、分号、竖线及任意空白
    _TOKEN_SEPARATOR = re.compile(r'[\n,;|\s]+')

    @classmethod
    def is_valid_ip(cls, address: str) -> bool:
        """
        用途说明：判断字符串是否为合法的 IPv4 / IPv6 地址。
        入参说明：address (str): 待校验的字符串。
        返回值说明：bool: 是否合法。
        """
        if not isinstance(address, str):
            return False
        return bool(cls._IPV4_PATTERN.fullmatch(address) or cls._IPV6_PATTERN.fullmatch(address))

    @classmethod
    def parse_ip_list(cls, content: str) -> List[str]:
        """
        用途说明：从上传的文本内容中提取地址列表，非法内容静默丢弃，重复地址只保留第一次出现。
        入参说明：content (str): 文本内容。
        返回值说明：List[str]: 去重后的合法地址列表，顺序与原文一致。
        """
        seen = set()
        addresses: List[str] = []
        for token in cls._TOKEN_SEPARATOR.split(content or ""):
            token = token.strip()
            if not token or token in seen or not cls.is_valid_ip(token):
                continue
            seen.add(token)
            addresses.append(token)
        return addresses

    @classmethod
    def validate_addresses(cls, addresses: Iterable[str]) -> List[str]:
        """
        用途说明：检测任务启动前的最终校验，任何非法或重复地址都直接拒绝。
        入参说明：addresses (Iterable[str]): 地址序列。
        返回值说明：List[str]: 校验通过的地址列表。
        """
        result: List[str] = []
        seen = set()
        for address in addresses:
            if not cls.is_valid_ip(address):
                raise ValidationError(f"非法的 IP 地址格式: {address}")
            if address in seen:
                raise ValidationError(f"重复的 IP 地址: {address}")
            seen.add(address)
            result.append(address)
        if not result:
            raise ValidationError("IP 地址列表为空")
        return result

    @staticmethod
    def validate_upload_file(filename: str, size: int, settings: UploadSettings) -> None:
        """
        用途说明：校验上传文件的名称与大小。
        入参说明：
            filename (str): 上传文件名。
            size (int): 文件字节数。
            settings (UploadSettings): 上传校验配置。
        返回值说明：无，校验失败抛出 ValidationError。
        """
        name = os.path.basename(filename or "")
        lower_name = name.lower()
        if not any(lower_name.endswith(suffix.lower()) for suffix in settings.allowed_suffixes):
            raise ValidationError(f"仅允许上传以下类型的文件: {', '.join(settings.allowed_suffixes)}")
        if size > settings.max_file_size:
            raise ValidationError(f"文件大小不能超过 {settings.max_file_size // 1024} KB")
        # 形如 list.php.txt 的文件名同样拒绝
        for fragment in settings.blocked_name_fragments:
            if fragment.lower() in lower_name:
                raise ValidationError("非法的文件类型，仅允许纯文本文件")
