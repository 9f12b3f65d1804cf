from datetime import datetime
from typing import List

from flask import Blueprint, request

from mass_checker.checker.address_parser import AddressParser
from mass_checker.checker.batch_verifier import batch_verifier
from mass_checker.checker.errors import EmptyExportError, ValidationError
from mass_checker.checker.export_service import ExportService
from mass_checker.common.log_utils import LogUtils
from mass_checker.common.response import error_response, file_response, success_response
from mass_checker.setting.setting_service import settingService

# 创建 IP 检测模块的蓝图
checker_bp = Blueprint('checker', __name__)


def _read_upload_addresses() -> List[str]:
    """
    用途说明：从请求中读取待检测地址，支持 multipart 文件、JSON 文本内容或 JSON 地址数组。
    入参说明：无
    返回值说明：List[str]: 去重后的合法地址列表，没有任何合法地址时抛出 ValidationError。
    """
    upload = request.files.get('file')
    if upload is not None:
        raw: bytes = upload.read()
        AddressParser.validate_upload_file(upload.filename, len(raw), settingService.get_config().upload)
        try:
            content = raw.decode('utf-8')
        except UnicodeDecodeError:
            raise ValidationError("文件读取失败，请确认文件为 UTF-8 编码的文本文件")
    else:
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        elif isinstance(data, list):
            # 直接提交地址数组
            data = {'addresses': data}
        elif not isinstance(data, dict):
            raise ValidationError("请求体格式非法，应为 JSON 对象或地址数组")
        addresses = data.get('addresses')
        if isinstance(addresses, list):
            content = "\n".join(str(a) for a in addresses)
        else:
            content = str(data.get('content') or "")

    addresses = AddressParser.parse_ip_list(content)
    if not addresses:
        raise ValidationError("文件中没有找到合法的 IP 地址")
    return addresses


@checker_bp.route('/upload', methods=['POST'])
def upload_ip_list():
    """
    用途说明：上传 IP 列表并启动异步批量检测，已有任务会被停止并丢弃。
    入参说明：multipart 字段 file，或 JSON 包含 content (str) / addresses (list)
    """
    try:
        addresses = _read_upload_addresses()
        run = batch_verifier.start(addresses)
    except ValidationError as e:
        LogUtils.error(f"上传 IP 列表失败: {e}")
        return error_response(str(e), 400)

    LogUtils.info(f"批量检测任务已启动，地址数量: {len(addresses)}")
    return success_response("批量检测任务已启动", data=run.get_status())


@checker_bp.route('/stop', methods=['POST'])
def stop_check():
    """
    用途说明：请求停止当前检测任务。
    """
    run = batch_verifier.current_run
    if run is None:
        return error_response("当前没有检测任务", 404)
    if batch_verifier.cancel(run):
        return success_response("已请求停止检测任务", data=run.get_status())
    return success_response("检测任务已结束，无需停止", data=run.get_status())


@checker_bp.route('/reset', methods=['POST'])
def reset_check():
    """
    用途说明：停止并清空当前检测任务，用于重新上传列表。
    """
    batch_verifier.reset()
    return success_response("任务已清空并重置")


@checker_bp.route('/status', methods=['GET'])
def get_check_status():
    """
    用途说明：获取检测进度和统计信息。
    """
    run = batch_verifier.current_run
    if run is None:
        return success_response("当前没有检测任务", data=None, log=False)
    return success_response("获取状态成功", data=run.get_status(), log=False)


@checker_bp.route('/results', methods=['GET'])
def get_check_results():
    """
    用途说明：获取检测条目列表，支持按分级 (level) 和状态 (state) 过滤。
    入参说明：Query 参数 level (clean/warning/malicious, 可选)，state (pending/checking/completed/error/stopped, 可选)
    """
    run = batch_verifier.current_run
    if run is None:
        return error_response("当前没有检测任务", 404)

    level: str = request.args.get('level', default='').strip().lower()
    state: str = request.args.get('state', default='').strip().lower()

    items = [item.to_dict() for item in run.items]
    if level:
        items = [item for item in items if item["level"] == level]
    if state:
        items = [item for item in items if item["state"] == state]

    data = run.get_status()
    data["items"] = items
    return success_response("获取结果成功", data=data, log=False)


@checker_bp.route('/export/malicious', methods=['GET'])
def export_malicious_ips():
    """
    用途说明：下载恶意 IP 列表文本文件。
    """
    try:
        content = batch_verifier.export_malicious()
    except EmptyExportError as e:
        return error_response(str(e), 404)

    now = datetime.now()
    filename = f"malicious-ips-{now.strftime('%Y-%m-%d')}.txt"
    return file_response(ExportService.malicious_file_header(now) + content, filename)


@checker_bp.route('/export/all', methods=['GET'])
def export_all_results():
    """
    用途说明：下载全部检测结果的 CSV 文件。
    """
    try:
        content = batch_verifier.export_all()
    except EmptyExportError as e:
        return error_response(str(e), 404)

    filename = f"ip-results-{datetime.now().strftime('%Y-%m-%d')}.csv"
    return file_response(content, filename, mimetype="text/csv")
