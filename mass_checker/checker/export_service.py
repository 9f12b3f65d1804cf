import csv
import io
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from mass_checker.checker.errors import EmptyExportError
from mass_checker.model.ip_report import ReputationLevel
from mass_checker.model.verification_item import VerificationItem

if TYPE_CHECKING:
    from mass_checker.checker.batch_run import BatchRun


class ExportService:
    """
    用途说明：检测结果导出服务，负责恶意 IP 文本和全量 CSV 的格式化。只读取任务快照，不改变任务状态。
    """

    CSV_HEADER: List[str] = ["address", "totalReports", "score", "country", "isp", "lastReported"]

    @staticmethod
    def format_malicious_line(item: VerificationItem) -> str:
        """
        用途说明：格式化单条恶意 IP 记录，国家或 ISP 未知时省略对应部分。
        入参说明：item (VerificationItem): 已完成且分级为恶意的条目。
        返回值说明：str: 形如 "1.2.3.4 - 150 reports (China) - ISP" 的文本行。
        """
        report = item.report
        country = f" ({report.country_name})" if report.country_name else ""
        isp = f" - {report.isp}" if report.isp else ""
        return f"{item.address} - {report.total_reports} reports{country}{isp}"

    @classmethod
    def export_malicious(cls, run: Optional['BatchRun']) -> str:
        """
        用途说明：导出所有恶意 IP（已完成且举报数超过 100），顺序与输入一致。
        入参说明：run (BatchRun): 检测任务。
        返回值说明：str: 每行一条记录的文本。没有符合条件的记录时抛出 EmptyExportError。
        """
        items = run.items if run is not None else []
        lines = [cls.format_malicious_line(item) for item in items if item.level is ReputationLevel.MALICIOUS]
        if not lines:
            raise EmptyExportError("没有可导出的恶意 IP")
        return "\n".join(lines)

    @staticmethod
    def malicious_file_header(now: Optional[datetime] = None) -> str:
        """用途说明：恶意 IP 下载文件的注释头。"""
        now = now or datetime.now()
        return (
            f"# IPs Malicious - {now.strftime('%Y-%m-%d %H:%M:%S')}\n"
            "# Format: IP - Reports - Country - ISP\n\n"
        )

    @classmethod
    def export_all(cls, run: Optional['BatchRun']) -> str:
        """
        用途说明：导出任务中全部条目的 CSV 文本，未完成条目的报告字段留空。
        入参说明：run (BatchRun): 检测任务。
        返回值说明：str: CSV 文本。没有任何条目时抛出 EmptyExportError。
        """
        items = run.items if run is not None else []
        if not items:
            raise EmptyExportError("没有可导出的检测结果")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(cls.CSV_HEADER)
        for item in items:
            report = item.report
            if report is None:
                writer.writerow([item.address, "", "", "", "", ""])
                continue
            writer.writerow([
                item.address,
                report.total_reports,
                report.abuse_confidence_score,
                report.country_name or report.country_code or "",
                report.isp or "",
                report.last_reported_at or "",
            ])
        return buffer.getvalue()
