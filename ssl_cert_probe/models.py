"""
数据模型定义
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class VerdictLevel(Enum):
    """检查结论级别（Nagios/Icinga 约定）"""
    OK = 0
    WARNING = 1
    CRITICAL = 2

    @property
    def exit_code(self) -> int:
        return self.value


@dataclass(frozen=True)
class CheckRequest:
    """单次证书检查的配置"""
    hostname: str = "localhost"
    ip_address: Optional[str] = None
    port: int = 443
    dns_server: Optional[str] = None
    timeout: int = 30
    warn_days: int = 14
    crit_days: int = 7
    min_tls_version: Optional[str] = None

    @property
    def timeout_seconds(self) -> float:
        return float(self.timeout)


@dataclass(frozen=True)
class ResolvedTarget:
    """实际拨号的地址和端口"""
    dial_address: str
    dial_port: int

    @property
    def display(self) -> str:
        """host:port 形式，IPv6 地址加方括号"""
        if ':' in self.dial_address:
            return f"[{self.dial_address}]:{self.dial_port}"
        return f"{self.dial_address}:{self.dial_port}"


@dataclass(frozen=True)
class LeafCertificateFacts:
    """叶子证书信息（在会话关闭前复制出来）"""
    issuer: str
    not_after: datetime


@dataclass(frozen=True)
class Verdict:
    """检查结论"""
    level: VerdictLevel
    hostname: str
    message: str
    tls_version: Optional[str] = None
    facts: Optional[LeafCertificateFacts] = None
    days_until_expiry: Optional[float] = None

    @property
    def exit_code(self) -> int:
        return self.level.exit_code

    @property
    def status_line(self) -> str:
        return f"SSL_CERT {self.level.name} {self.hostname}: {self.message}"

    @property
    def is_ok(self) -> bool:
        return self.level is VerdictLevel.OK
