"""
错误处理服务
"""
import socket
import ssl
from typing import Any, Dict
from datetime import datetime, timezone
import logging

from ..exceptions import (
    CertCheckError,
    ConnectError,
    ConnectTimeoutError,
    TLSError,
)
from ..models import ResolvedTarget
from .identity_verifier import IdentityVerifier


class ConnectionErrorHandler:
    """网络错误分类器

    把 socket / ssl 抛出的底层异常归类为检查错误。一次检查只尝试一次，
    这里不做任何重试。
    """

    def __init__(self, timeout: float):
        """
        初始化网络错误处理器

        Args:
            timeout: 连接超时时间（秒），用于超时错误消息
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def classify_connect_error(self, target: ResolvedTarget, error: Exception) -> CertCheckError:
        """
        归类TCP连接阶段的错误

        Args:
            target: 拨号目标
            error: 底层异常

        Returns:
            CertCheckError: ConnectTimeoutError 或 ConnectError
        """
        if isinstance(error, socket.timeout):
            result = ConnectTimeoutError(target.display, self.timeout, error)
        else:
            result = ConnectError(target.display, error)

        self.handle_connection_error(target.display, error)
        return result

    def classify_handshake_error(self, target: ResolvedTarget, hostname: str, error: OSError) -> CertCheckError:
        """
        归类TLS握手阶段的错误

        Args:
            target: 拨号目标
            hostname: 用于SNI和主机名校验的名称
            error: 底层异常

        Returns:
            CertCheckError: 对应的检查错误
        """
        if isinstance(error, socket.timeout):
            result = ConnectTimeoutError(target.display, self.timeout, error)
        elif isinstance(error, ssl.SSLCertVerificationError):
            result = IdentityVerifier.from_verification_error(target, hostname, error)
        elif isinstance(error, ssl.SSLError):
            result = TLSError(target.display, error)
        else:
            # 握手过程中连接被重置等
            result = ConnectError(target.display, error)

        self.handle_connection_error(target.display, error)
        return result

    def handle_connection_error(self, target: str, error: Exception) -> Dict[str, Any]:
        """
        记录连接错误的诊断信息

        Args:
            target: 目标
            error: 异常对象

        Returns:
            Dict[str, Any]: 错误信息
        """
        error_info = {
            'target': target,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(error)
        }

        self.logger.debug(
            f"{target} 连接错误: {error_info['error_type']}: {error_info['error_message']}，"
            f"建议: {error_info['suggested_action']}"
        )

        return error_info

    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象

        Returns:
            str: 建议的处理方案
        """
        error_message = str(error).lower()

        if isinstance(error, socket.timeout):
            return "检查网络连接，考虑增加超时时间"
        elif isinstance(error, socket.gaierror):
            return "检查域名是否正确，DNS服务器是否可用"
        elif isinstance(error, UnicodeError):
            return "主机名无法编码，检查覆盖地址格式"
        elif isinstance(error, ConnectionRefusedError):
            return "检查目标服务器是否运行，端口是否正确"
        elif isinstance(error, ssl.SSLCertVerificationError):
            return "证书验证失败，检查证书是否签发给该主机名以及证书链是否完整"
        elif isinstance(error, ssl.SSLError):
            if 'handshake failure' in error_message or 'protocol' in error_message:
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            else:
                return "SSL连接问题，检查服务器SSL配置"
        elif 'network is unreachable' in error_message:
            return "网络不可达，检查网络连接和路由"
        elif 'no route to host' in error_message:
            return "无法路由到主机，检查防火墙和网络配置"
        else:
            return "检查网络连接和服务器状态"
