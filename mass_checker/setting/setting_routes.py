from flask import Blueprint

from mass_checker.common.log_utils import LogUtils
from mass_checker.common.response import success_response
from mass_checker.setting.setting_service import settingService

# 创建设置模块的蓝图
setting_bp = Blueprint('setting', __name__)


@setting_bp.route('/get', methods=['GET'])
def get_setting():
    """
    用途：获取当前的配置信息
    入参说明：无
    返回值说明：包含全局配置信息 (AppConfig) 的 JSON 响应，API 密钥已脱敏
    """
    LogUtils.debug("请求获取系统配置")
    return success_response("获取配置成功", data=settingService.get_masked_config())
