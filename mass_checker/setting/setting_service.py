import json
import os
from dataclasses import asdict
from typing import Any, Dict

from mass_checker.common.log_utils import LogUtils
from mass_checker.common.utils import Utils
from mass_checker.setting.setting_models import AppConfig


class SettingService:
    """
    用途：配置服务类，负责管理系统配置的加载、保存以及敏感信息的脱敏输出。
    """

    # 内部映射：JSON 键名 (大写) -> AppConfig 属性名 (小写)
    _SECTION_MAPPING = {
        "ABUSEIPDB": "abuseipdb",
        "UPLOAD": "upload"
    }

    def __init__(self, config_path: str = "") -> None:
        """
        用途：初始化配置服务，使用 AppConfig 数据类管理配置并尝试从本地加载。
        入参说明：config_path (str) - 配置文件路径，为空时使用运行时目录下的 setting.json
        """
        self._config: AppConfig = AppConfig()
        self.config_path: str = config_path or os.path.join(Utils.get_runtime_path(), 'setting.json')
        self._load_config()

    def get_config(self) -> AppConfig:
        """
        用途：获取当前的配置对象。
        返回值：AppConfig 实例。
        """
        return self._config

    def _load_config(self) -> None:
        """
        用途：从本地 JSON 文件中加载配置信息。文件不存在时写出默认配置并继续运行。
        """
        if not os.path.exists(self.config_path):
            self.save_config()
            LogUtils.info("--------------------------------------------------")
            LogUtils.info(f"未检测到配置文件，已自动生成默认配置：\n{self.config_path}")
            LogUtils.info("请在 setting.json 的 ABUSEIPDB.api_key 中填写 AbuseIPDB 密钥，否则所有检测都会返回未授权。")
            LogUtils.info("--------------------------------------------------")
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded_json = json.load(f)
        except (OSError, ValueError) as e:
            LogUtils.error(f"加载配置文件时发生错误，将使用默认配置: {e}")
            return

        self._parse_and_merge_config(loaded_json)

    def _parse_and_merge_config(self, loaded_json: Dict[str, Any]) -> None:
        """
        用途：将从 JSON 解析出的字典数据合并到 AppConfig 数据类中，未知字段忽略。
        入参：loaded_json: 从文件读取的配置字典。
        """
        if not isinstance(loaded_json, dict):
            return

        for json_key, attr_name in self._SECTION_MAPPING.items():
            section_data = loaded_json.get(json_key)
            if isinstance(section_data, dict):
                target_obj = getattr(self._config, attr_name)
                for key, value in section_data.items():
                    if not hasattr(target_obj, key):
                        continue
                    try:
                        setattr(target_obj, key, self._coerce(getattr(target_obj, key), value))
                    except (TypeError, ValueError):
                        LogUtils.error(f"配置项 {json_key}.{key} 的值非法，已使用默认值: {value!r}")

    @staticmethod
    def _coerce(default: Any, value: Any) -> Any:
        """
        用途：按默认值的类型转换配置值，例如 "30" -> 30。
        入参：default: 字段默认值；value: 文件中读取的值。
        返回值：转换后的值，无法转换时抛出 TypeError / ValueError。
        """
        if isinstance(default, list):
            if not isinstance(value, list):
                raise TypeError("expected a list")
            return [str(v) for v in value]
        if isinstance(default, bool) or value is None:
            raise TypeError("unsupported value")
        return type(default)(value)

    def save_config(self) -> None:
        """
        用途：将当前内存中的配置持久化到磁盘，保持大写键名结构。
        """
        config_to_save = {}
        for json_key, attr_name in self._SECTION_MAPPING.items():
            config_to_save[json_key] = asdict(getattr(self._config, attr_name))

        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(config_to_save, f, indent=4, ensure_ascii=False)
        except OSError as e:
            LogUtils.error(f"保存配置文件时发生错误: {e}")

    def get_masked_config(self) -> Dict[str, Any]:
        """
        用途：获取可对外展示的配置字典，API 密钥做脱敏处理。
        返回值：Dict[str, Any] - 配置字典。
        """
        data = asdict(self._config)
        data["abuseipdb"]["api_key"] = Utils.mask_secret(self._config.abuseipdb.api_key)
        return data


# 实例化单例
settingService = SettingService()
