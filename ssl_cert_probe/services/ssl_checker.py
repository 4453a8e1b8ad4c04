"""
TLS连接服务
"""
import ssl
import socket
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional
import logging

from ..interfaces import ConnectorInterface
from ..models import LeafCertificateFacts, ResolvedTarget
from .error_handler import ConnectionErrorHandler
from .identity_verifier import IdentityVerifier

# OpenSSL 协议名称 -> 报告中使用的名称
TLS_VERSION_LABELS = {
    'SSLv3': 'SSLv3',
    'TLSv1': 'TLS 1.0',
    'TLSv1.1': 'TLS 1.1',
    'TLSv1.2': 'TLS 1.2',
    'TLSv1.3': 'TLS 1.3',
}

MIN_VERSION_CHOICES = {
    'SSLv3': ssl.TLSVersion.SSLv3,
    'TLS 1.0': ssl.TLSVersion.TLSv1,
    'TLS 1.1': ssl.TLSVersion.TLSv1_1,
    'TLS 1.2': ssl.TLSVersion.TLSv1_2,
    'TLS 1.3': ssl.TLSVersion.TLSv1_3,
}

# 证书 DN 属性的短名称
DN_SHORT_NAMES = {
    'commonName': 'CN',
    'organizationName': 'O',
    'organizationalUnitName': 'OU',
    'countryName': 'C',
    'stateOrProvinceName': 'ST',
    'localityName': 'L',
    'streetAddress': 'STREET',
    'domainComponent': 'DC',
    'serialNumber': 'SERIALNUMBER',
}


def tls_version_label(version: Optional[str]) -> str:
    """把 SSLSocket.version() 的返回值转换为可读名称"""
    if version in TLS_VERSION_LABELS:
        return TLS_VERSION_LABELS[version]
    return f"Unknown ({version})"


class TLSSession:
    """已完成握手的TLS会话

    会话由连接器独占，只读地交给身份校验和过期分类使用。
    """

    def __init__(self, ssock: ssl.SSLSocket, target: ResolvedTarget, server_hostname: str):
        self.ssock = ssock
        self.target = target
        self.server_hostname = server_hostname

    @property
    def protocol_version(self) -> str:
        return tls_version_label(self.ssock.version())

    def peer_certificate(self) -> dict:
        """经过校验的叶子证书（解码后的字典）"""
        return self.ssock.getpeercert() or {}

    def leaf_facts(self) -> LeafCertificateFacts:
        """
        复制叶子证书的颁发者和过期时间

        Returns:
            LeafCertificateFacts: 叶子证书信息
        """
        cert = self.peer_certificate()
        return LeafCertificateFacts(
            issuer=parse_issuer(cert),
            not_after=parse_expiry_date(cert)
        )


def parse_expiry_date(cert: dict) -> datetime:
    """
    解析证书过期时间

    Args:
        cert: SSL证书信息

    Returns:
        datetime: 过期时间（UTC）
    """
    not_after = cert.get('notAfter')
    if not not_after:
        raise ValueError("证书中未找到过期时间信息")

    # 时间格式：'Dec 31 23:59:59 2024 GMT'
    expiry_date = datetime.strptime(not_after, '%b %d %H:%M:%S %Y %Z')
    return expiry_date.replace(tzinfo=timezone.utc)


def parse_issuer(cert: dict) -> str:
    """
    把证书颁发者渲染为 DN 字符串，例如 'CN=R3,O=Let's Encrypt,C=US'

    Args:
        cert: SSL证书信息

    Returns:
        str: 颁发者
    """
    parts = []
    # getpeercert() 按证书中的顺序给出 RDN，DN 字符串从最具体的开始
    for rdn in reversed(cert.get('issuer', ())):
        for name, value in rdn:
            parts.append(f"{DN_SHORT_NAMES.get(name, name)}={value}")

    return ",".join(parts) if parts else "Unknown Issuer"


class TLSConnector(ConnectorInterface):
    """TLS连接器实现"""

    def __init__(self, timeout: float = 30, min_tls_version: Optional[str] = None,
                 identity_verifier: Optional[IdentityVerifier] = None):
        """
        初始化TLS连接器

        Args:
            timeout: 连接超时时间（秒），同时约束TCP连接和握手
            min_tls_version: 最低接受的协议版本，None 表示不设下限
            identity_verifier: 证书身份校验器
        """
        self.timeout = timeout
        self.min_tls_version = min_tls_version
        self.identity_verifier = identity_verifier or IdentityVerifier()
        self.error_handler = ConnectionErrorHandler(timeout)
        self.logger = logging.getLogger(__name__)

    def build_context(self) -> ssl.SSLContext:
        """
        创建握手用的SSL上下文

        Returns:
            ssl.SSLContext: 使用默认信任库并启用主机名校验的上下文
        """
        context = ssl.create_default_context()
        self.identity_verifier.configure(context)

        # 安全级别保持为0，协议下限是唯一的限制
        context.set_ciphers('DEFAULT:@SECLEVEL=0')
        if self.min_tls_version is None:
            context.minimum_version = ssl.TLSVersion.MINIMUM_SUPPORTED
        else:
            context.minimum_version = MIN_VERSION_CHOICES[self.min_tls_version]

        return context

    @contextmanager
    def open_session(self, target: ResolvedTarget, hostname: str) -> Iterator[TLSSession]:
        """
        建立TCP连接并完成TLS握手

        Args:
            target: 拨号目标
            hostname: SNI和证书校验使用的主机名

        Yields:
            TLSSession: 已握手的会话，退出时关闭

        Raises:
            ConnectError: TCP连接失败
            ConnectTimeoutError: 连接或握手超时
            TLSError: 握手失败
            IdentityError: 证书校验失败
        """
        context = self.build_context()

        try:
            sock = socket.create_connection((target.dial_address, target.dial_port), timeout=self.timeout)
        except (OSError, UnicodeError) as e:
            # idna 编码失败时抛出 UnicodeError
            raise self.error_handler.classify_connect_error(target, e) from e

        with sock:
            try:
                ssock = context.wrap_socket(sock, server_hostname=hostname)
            except OSError as e:
                raise self.error_handler.classify_handshake_error(target, hostname, e) from e

            with ssock:
                session = TLSSession(ssock, target, hostname)
                self.logger.debug(f"{target.display} 握手完成，协议版本: {session.protocol_version}")
                yield session
