"""
SSL证书检查流程
"""
from datetime import datetime
from typing import Optional

from .exceptions import CertCheckError, TLSError
from .models import CheckRequest, Verdict
from .services.expiry_calculator import ExpiryClassifier
from .services.identity_verifier import IdentityVerifier
from .services.logger import LoggerService
from .services.reporter import VerdictReporter
from .services.resolver import DNSResolverAdapter
from .services.sns_notification import SNSNotificationService
from .services.ssl_checker import TLSConnector


class SSLCertificateProbe:
    """SSL证书检查器主类

    解析 -> 连接 -> 身份校验 -> 过期分类，任何一步失败都直接得出 CRITICAL 结论。
    流程只返回结论，退出码由最外层调用者决定。
    """

    def __init__(self, request: CheckRequest,
                 logger_service: Optional[LoggerService] = None,
                 notification_service: Optional[SNSNotificationService] = None):
        """
        初始化检查器

        Args:
            request: 已通过验证的检查请求
            logger_service: 日志服务
            notification_service: 通知服务，为None时不发送通知
        """
        self.request = request
        self.logger_service = logger_service or LoggerService()
        self.notification_service = notification_service

        self.identity_verifier = IdentityVerifier()
        self.resolver = DNSResolverAdapter(timeout=request.timeout_seconds)
        self.connector = TLSConnector(
            timeout=request.timeout_seconds,
            min_tls_version=request.min_tls_version,
            identity_verifier=self.identity_verifier
        )
        self.classifier = ExpiryClassifier(warn_days=request.warn_days, crit_days=request.crit_days)
        self.reporter = VerdictReporter()

        self._log_configuration()

    def _log_configuration(self):
        """记录检查配置"""
        config = {
            'hostname': self.request.hostname,
            'ip_address': self.request.ip_address or '',
            'port': self.request.port,
            'dns_server': self.request.dns_server or '',
            'timeout': self.request.timeout,
            'warn_days': self.request.warn_days,
            'crit_days': self.request.crit_days,
            'min_tls_version': self.request.min_tls_version or 'none',
            'sns_topic_arn': self.notification_service.topic_arn if self.notification_service else '',
        }

        self.logger_service.log_configuration_info(config)

    def execute(self, now: Optional[datetime] = None) -> Verdict:
        """
        执行一次证书检查

        Args:
            now: 当前时间，默认取当前UTC时间

        Returns:
            Verdict: 检查结论
        """
        request = self.request
        self.logger_service.log_check_start(request)
        tls_version = None

        try:
            target = self.resolver.resolve(request)
            self.logger_service.log_resolution(request.hostname, target)

            with self.connector.open_session(target, request.hostname) as session:
                tls_version = session.protocol_version
                self.identity_verifier.verify(session, request.hostname)
                try:
                    facts = session.leaf_facts()
                except ValueError as e:
                    raise TLSError(target.display, e, f"unreadable certificate from {target.display}: {e}") from e

        except CertCheckError as e:
            self.logger_service.log_error(request.hostname, e)
            verdict = self.reporter.failure_verdict(request.hostname, e, tls_version)

        else:
            level, days = self.classifier.classify_facts(facts, now)
            verdict = self.reporter.expiry_verdict(
                request.hostname, level, facts, days, tls_version=tls_version, now=now
            )

        self.logger_service.log_verdict(verdict)
        self._send_notification(verdict)
        return verdict

    def _send_notification(self, verdict: Verdict) -> bool:
        """
        发送非 OK 结论的通知

        Args:
            verdict: 检查结论

        Returns:
            bool: 通知是否发送成功
        """
        if self.notification_service is None or verdict.is_ok:
            return True

        sent = self.notification_service.send_verdict_notification(verdict)
        self.logger_service.log_notification_sent("SNS", sent)
        return sent


def check_certificate(request: CheckRequest, **kwargs) -> Verdict:
    """对 request 执行一次检查并返回结论"""
    return SSLCertificateProbe(request, **kwargs).execute()
