"""
配置验证服务
"""
import ipaddress
import re
from typing import Dict, Any
import logging

from ..models import CheckRequest
from .resolver import split_host_port
from .ssl_checker import MIN_VERSION_CHOICES

SNS_ARN_PATTERN = re.compile(r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$')


class ConfigValidator:
    """配置验证器

    检查请求在进入检查流程之前必须通过验证。
    """

    def __init__(self):
        """初始化配置验证器"""
        self.logger = logging.getLogger(__name__)

        # 主机名格式（允许单标签名称，例如 localhost）
        self.hostname_pattern = re.compile(
            r'^(?:[a-zA-Z0-9_](?:[a-zA-Z0-9_-]{0,61}[a-zA-Z0-9])?\.)*'
            r'[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.?$'
        )

    def validate_request(self, request: CheckRequest) -> Dict[str, Any]:
        """
        验证检查请求

        Args:
            request: 检查请求

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'warnings': []
        }

        if request.warn_days <= request.crit_days:
            result['errors'].append("warning threshold must be greater than critical threshold")

        if request.crit_days < 0:
            result['errors'].append("critical threshold must not be negative")

        if request.timeout <= 0:
            result['errors'].append("timeout must be a positive number of seconds")

        if not 0 < request.port < 65536:
            result['errors'].append(f"invalid port {request.port}, expected 1-65535")

        if not self.validate_hostname(request.hostname):
            result['errors'].append(f"invalid hostname: {request.hostname!r}")

        if request.ip_address and not self._is_ip_address(request.ip_address):
            if self.validate_hostname(request.ip_address):
                # 非IP的覆盖地址也可以拨号，只给出警告
                result['warnings'].append(f"IP address override is not an IP literal: {request.ip_address}")
            else:
                result['errors'].append(f"invalid IP address override: {request.ip_address!r}")

        if request.dns_server:
            try:
                split_host_port(request.dns_server)
            except ValueError:
                result['errors'].append("invalid DNS server format, expected host:port (e.g., 8.8.8.8:53)")

        if request.min_tls_version is not None and request.min_tls_version not in MIN_VERSION_CHOICES:
            result['errors'].append(
                f"unknown minimum TLS version {request.min_tls_version!r}, "
                f"expected one of: {', '.join(MIN_VERSION_CHOICES)}"
            )

        if result['errors']:
            result['is_valid'] = False
            self.logger.debug(f"配置验证失败: {'; '.join(result['errors'])}")

        for warning in result['warnings']:
            self.logger.warning(warning)

        return result

    def validate_sns_topic_arn(self, topic_arn: str) -> bool:
        """
        验证SNS主题ARN格式

        Args:
            topic_arn: SNS主题ARN

        Returns:
            bool: 是否有效
        """
        return bool(SNS_ARN_PATTERN.match(topic_arn or ''))

    def validate_hostname(self, hostname: str) -> bool:
        """
        验证主机名格式

        Args:
            hostname: 主机名

        Returns:
            bool: 是否有效
        """
        if not hostname or len(hostname) > 253:
            return False
        if self._is_ip_address(hostname):
            return True
        return bool(self.hostname_pattern.match(hostname))

    def _is_ip_address(self, value: str) -> bool:
        try:
            ipaddress.ip_address(value)
        except ValueError:
            return False
        return True
