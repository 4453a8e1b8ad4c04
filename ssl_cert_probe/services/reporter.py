"""
检查结论输出服务
"""
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

import humanize

from ..exceptions import CertCheckError
from ..models import LeafCertificateFacts, Verdict, VerdictLevel


class VerdictReporter:
    """检查结论输出器

    标准输出只写插件结果：握手完成时一行协议版本信息，之后恰好一行状态。
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def expiry_verdict(self, hostname: str, level: VerdictLevel, facts: LeafCertificateFacts,
                       days_until_expiry: float, tls_version: Optional[str] = None,
                       now: Optional[datetime] = None) -> Verdict:
        """
        为完成了过期分类的检查生成结论

        Args:
            hostname: 请求的主机名
            level: 结论级别
            facts: 叶子证书信息
            days_until_expiry: 剩余天数
            tls_version: 协商的协议版本
            now: 当前时间

        Returns:
            Verdict: 检查结论
        """
        message = (
            f"valid, expires on {facts.not_after.strftime('%Y-%m-%d')} "
            f"({self.relative_time(facts.not_after, now)}), issuer: {facts.issuer}"
        )
        return Verdict(
            level=level,
            hostname=hostname,
            message=message,
            tls_version=tls_version,
            facts=facts,
            days_until_expiry=days_until_expiry
        )

    def failure_verdict(self, hostname: str, error: CertCheckError,
                        tls_version: Optional[str] = None) -> Verdict:
        """基础设施类失败一律为 CRITICAL"""
        return Verdict(
            level=VerdictLevel.CRITICAL,
            hostname=hostname,
            message=error.message,
            tls_version=tls_version
        )

    @staticmethod
    def relative_time(moment: datetime, now: Optional[datetime] = None) -> str:
        """例如 '29 days from now' 或 '5 days ago'"""
        now = now or datetime.now(timezone.utc)
        # humanize 按 naive 时间比较，统一换算为 UTC
        return humanize.naturaltime(
            moment.astimezone(timezone.utc).replace(tzinfo=None),
            when=now.astimezone(timezone.utc).replace(tzinfo=None)
        )

    def format_lines(self, verdict: Verdict) -> list:
        lines = []
        if verdict.tls_version:
            lines.append(f"SSL_CERT INFO {verdict.hostname}: negotiated TLS version {verdict.tls_version}")
        lines.append(verdict.status_line)
        return lines

    def report(self, verdict: Verdict) -> int:
        """
        输出结论

        Args:
            verdict: 检查结论

        Returns:
            int: 进程退出码
        """
        stream = self.stream or sys.stdout
        for line in self.format_lines(verdict):
            print(line, file=stream)
        stream.flush()
        return verdict.exit_code
