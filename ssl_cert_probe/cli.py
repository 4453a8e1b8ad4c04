"""
命令行入口（Icinga / Nagios 插件）

退出码: 0 = OK, 1 = WARNING, 2 = CRITICAL；参数无效时退出码为 1。
"""
import argparse
import os
import sys
from typing import List, Optional

from .models import CheckRequest
from .monitor import SSLCertificateProbe
from .services.config_validator import ConfigValidator
from .services.logger import LoggerService
from .services.reporter import VerdictReporter
from .services.sns_notification import SNSNotificationService
from .services.ssl_checker import MIN_VERSION_CHOICES

CONFIG_ERROR_EXIT_CODE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='check_ssl_cert',
        description='Icinga check for HTTPS certificate validity'
    )
    parser.add_argument('-c', dest='crit_days', type=int, default=7,
                        help='critical threshold in days (default: 7)')
    parser.add_argument('-w', dest='warn_days', type=int, default=14,
                        help='warning threshold in days (default: 14)')
    parser.add_argument('-p', dest='port', type=int, default=443,
                        help='port number (default: 443)')
    parser.add_argument('-H', dest='hostname', default='localhost',
                        help='hostname to check (default: localhost)')
    parser.add_argument('-I', dest='ip_address', default=None,
                        help='IP address (optional, defaults to hostname)')
    parser.add_argument('-t', dest='timeout', type=int, default=30,
                        help='TCP connection timeout in seconds (default: 30)')
    parser.add_argument('-d', dest='dns_server', default=None,
                        help='custom DNS server (e.g., 8.8.8.8:53)')
    parser.add_argument('--min-tls-version', dest='min_tls_version', default=None,
                        help=f"lowest protocol version to accept, one of: "
                             f"{', '.join(MIN_VERSION_CHOICES)} (default: no floor)")
    parser.add_argument('--sns-topic-arn', dest='sns_topic_arn',
                        default=os.getenv('SNS_TOPIC_ARN'),
                        help='publish WARNING/CRITICAL results to this SNS topic')
    parser.add_argument('--log-level', dest='log_level',
                        default=os.getenv('LOG_LEVEL', 'WARNING'),
                        help='log level for diagnostics on stderr (default: WARNING)')
    return parser


def request_from_args(args: argparse.Namespace) -> CheckRequest:
    return CheckRequest(
        hostname=args.hostname,
        ip_address=args.ip_address or None,
        port=args.port,
        dns_server=args.dns_server or None,
        timeout=args.timeout,
        warn_days=args.warn_days,
        crit_days=args.crit_days,
        min_tls_version=args.min_tls_version
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    解析参数、执行一次检查并输出结果

    Args:
        argv: 命令行参数，默认取 sys.argv

    Returns:
        int: 进程退出码
    """
    args = build_parser().parse_args(argv)
    request = request_from_args(args)

    validator = ConfigValidator()
    validation = validator.validate_request(request)
    errors = list(validation['errors'])
    if args.sns_topic_arn and not validator.validate_sns_topic_arn(args.sns_topic_arn):
        errors.append(f"invalid SNS topic ARN: {args.sns_topic_arn}")

    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return CONFIG_ERROR_EXIT_CODE

    logger_service = LoggerService(log_level=args.log_level)
    notification_service = None
    if args.sns_topic_arn:
        notification_service = SNSNotificationService(topic_arn=args.sns_topic_arn)

    probe = SSLCertificateProbe(
        request,
        logger_service=logger_service,
        notification_service=notification_service
    )
    verdict = probe.execute()
    return VerdictReporter().report(verdict)


def run():
    sys.exit(main())
