"""
检查流程中的错误类型

所有错误都是终止性的：一次检查只尝试一次，任何错误都直接得出 CRITICAL 结论。
"""
from typing import Optional


class CertCheckError(Exception):
    """证书检查错误基类"""

    def __init__(self, target: str, cause: Optional[BaseException] = None, message: Optional[str] = None):
        """
        Args:
            target: 出错时的目标（host:port 或主机名）
            cause: 底层异常
            message: 状态行中使用的消息，为None时由子类生成
        """
        self.target = target
        self.cause = cause
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        if self.cause is not None:
            return f"check of {self.target} failed: {self.cause}"
        return f"check of {self.target} failed"


class ResolutionError(CertCheckError):
    """通过指定DNS服务器解析失败或没有返回地址"""

    def __init__(self, hostname: str, dns_server: str, cause: Optional[BaseException] = None):
        self.hostname = hostname
        self.dns_server = dns_server
        super().__init__(hostname, cause)

    def _default_message(self) -> str:
        if self.cause is None:
            return f"no IP addresses resolved for {self.hostname} using DNS server {self.dns_server}"
        return f"failed to resolve {self.hostname} using DNS server {self.dns_server}: {self.cause}"


class ConnectError(CertCheckError):
    """TCP连接失败（拒绝、重置、不可达、解析失败）"""

    def _default_message(self) -> str:
        return f"failed to connect to {self.target}: {self.cause}"


class ConnectTimeoutError(ConnectError):
    """连接或握手超时"""

    def __init__(self, target: str, timeout: float, cause: Optional[BaseException] = None):
        self.timeout = timeout
        super().__init__(target, cause)

    def _default_message(self) -> str:
        return f"TCP connection timeout after {self.timeout:g}s to {self.target}"


class TLSError(CertCheckError):
    """TLS握手失败（协议不匹配、没有共同的加密套件等）"""

    def _default_message(self) -> str:
        return f"TLS handshake with {self.target} failed: {self.cause}"


class IdentityError(CertCheckError):
    """主机名校验或证书链信任校验失败"""

    HOSTNAME_MISMATCH = 'hostname_mismatch'
    UNTRUSTED_CHAIN = 'untrusted_chain'

    def __init__(self, target: str, cause: Optional[BaseException] = None,
                 message: Optional[str] = None, reason: str = UNTRUSTED_CHAIN):
        self.reason = reason
        super().__init__(target, cause, message)

    @classmethod
    def describe(cls, reason: str, target: str, cause) -> str:
        """按失败原因生成状态行消息"""
        check = "hostname" if reason == cls.HOSTNAME_MISMATCH else "certificate"
        return f"{check} verification failed for {target}: {cause}"

    def _default_message(self) -> str:
        return self.describe(self.reason, self.target, self.cause)
