from typing import Any, Tuple

from flask import Response, jsonify

from mass_checker.common.log_utils import LogUtils


def success_response(message: str = "操作成功", data: Any = None, log: bool = True) -> Tuple[Response, int]:
    """
    用途：构建成功的 API 响应
    入参说明：
        - message: 成功提示信息，默认为"操作成功"
        - data: 返回的数据对象，可选
        - log: 是否以 debug 级别记录返回内容，状态轮询类接口可关闭
    返回值说明：JSON 格式的成功响应和 200 状态码
    """
    response = {
        "status": "success",
        "message": message
    }
    if data is not None:
        response["data"] = data

    if log:
        LogUtils.debug(f"Success Response: {response}")

    return jsonify(response), 200


def error_response(message: str, code: int = 400) -> Tuple[Response, int]:
    """
    用途：构建失败的 API 响应
    入参说明：
        - message: 错误提示信息
        - code: HTTP 状态码，默认为 400
    返回值说明：JSON 格式的错误响应和对应的状态码
    """
    return jsonify({
        "status": "error",
        "message": message
    }), code


def file_response(content: str, filename: str, mimetype: str = "text/plain") -> Response:
    """
    用途：构建文本文件下载响应
    入参说明：
        - content: 文件文本内容
        - filename: 下载文件名
        - mimetype: MIME 类型，默认 text/plain
    返回值说明：带 Content-Disposition 头的 Response
    """
    response = Response(content, mimetype=f"{mimetype}; charset=utf-8")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    LogUtils.debug(f"File Response: {filename} ({len(content)} chars)")
    return response
