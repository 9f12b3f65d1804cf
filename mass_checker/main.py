import logging
import traceback
from typing import Any, Tuple

from mass_checker.common.log_utils import LogUtils

# 日志需要先于各业务模块初始化，模块导入时就可能写日志
LogUtils.init(level=logging.DEBUG)
from flask import Flask, request
from flask_cors import CORS
from waitress import serve
from werkzeug.exceptions import HTTPException
from mass_checker.checker.checker_routes import checker_bp
from mass_checker.checker.errors import EmptyExportError, MassCheckerError
from mass_checker.common.response import error_response
from mass_checker.common.thread_pool import ThreadPoolManager
from mass_checker.setting.setting_routes import setting_bp
from mass_checker.setting.setting_service import settingService
from config import GlobalConfig


app = Flask(__name__)
# 超出上传上限的请求由 werkzeug 直接拒绝 (413)，留出 multipart 头部的余量
app.config['MAX_CONTENT_LENGTH'] = settingService.get_config().upload.max_file_size + 64 * 1024

CORS(app, resources={r"/api/*": {"origins": "*"}}, allow_headers=["Content-Type"])


@app.before_request
def log_request_info() -> None:
    """
    用途：记录接口请求。上传文件只记录文件名，状态轮询接口不记录。
    """
    if not request.path.startswith('/api') or request.path.endswith('/status'):
        return
    data: Any = ""
    if request.files:
        data = {name: f.filename for name, f in request.files.items()}
    elif request.is_json:
        data = request.get_json(silent=True)
    elif request.args:
        data = dict(request.args)
    LogUtils.api(f"{request.method} {request.path} 参数: {data}")


# --- 异常处理句柄 ---

@app.errorhandler(MassCheckerError)
def handle_business_error(e: MassCheckerError) -> Tuple[Any, int]:
    """
    用途：路由中未单独处理的业务异常。导出为空返回 404，其余视为请求错误。
    """
    code = 404 if isinstance(e, EmptyExportError) else 400
    LogUtils.error(f"业务异常 -> 路径: {request.path}, {type(e).__name__}: {e}")
    return error_response(str(e), code)

@app.errorhandler(400)
def bad_request(e: Any) -> Tuple[Any, int]:
    return error_response("请求参数错误或格式非法", 400)

@app.errorhandler(404)
def page_not_found(e: Any) -> Any:
    if request.path.startswith('/api'):
        return error_response("请求的接口不存在", 404)
    return "404 Not Found", 404

@app.errorhandler(413)
def payload_too_large(e: Any) -> Tuple[Any, int]:
    return error_response("上传内容过大", 413)

@app.errorhandler(Exception)
def handle_global_exception(e: Exception) -> Tuple[Any, int]:
    """
    用途：兜底异常处理。HTTP 异常按原状态码返回，其他异常记录堆栈后返回 500。
    入参说明：e (Exception): 异常对象
    返回值说明：统一格式的错误响应
    """
    if isinstance(e, HTTPException):
        return error_response(e.description or e.name, e.code or 500)
    LogUtils.error(f"未捕获异常 -> 路径: {request.path}\n{traceback.format_exc()}")
    return error_response(f"服务器内部错误: {str(e)}", 500)


app.register_blueprint(checker_bp, url_prefix='/api/checker')
app.register_blueprint(setting_bp, url_prefix='/api/setting')


def start_server() -> None:
    """
    用途：以 waitress 启动服务，退出时关闭检测线程池。
    """
    LogUtils.info(f"IP 批量检测服务启动: http://localhost:{GlobalConfig.SYSTEM_PORT}")
    try:
        serve(app, host=GlobalConfig.SYSTEM_HOST, port=GlobalConfig.SYSTEM_PORT,
              threads=GlobalConfig.SERVER_THREADS)
    finally:
        ThreadPoolManager.shutdown(wait=False)


if __name__ == '__main__':
    start_server()
