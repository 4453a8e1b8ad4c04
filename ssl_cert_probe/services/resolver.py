"""
DNS解析服务
"""
import ipaddress
import socket
import time
from typing import List, Tuple
import logging

import dns.exception
import dns.resolver

from ..exceptions import ResolutionError
from ..interfaces import ResolverInterface
from ..models import CheckRequest, ResolvedTarget


def split_host_port(value: str) -> Tuple[str, int]:
    """
    拆分 host:port（IPv6 需要方括号，例如 [2001:db8::1]:53）

    Raises:
        ValueError: 格式无效
    """
    if value.startswith('['):
        host, sep, port = value[1:].partition(']:')
        if not sep:
            raise ValueError(f"missing port in address {value!r}")
    else:
        host, sep, port = value.rpartition(':')
        if not sep:
            raise ValueError(f"missing port in address {value!r}")
        if ':' in host:
            raise ValueError(f"too many colons in address {value!r}")

    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"invalid port in address {value!r}")

    return host, int(port)


class DNSResolverAdapter(ResolverInterface):
    """目标地址解析器

    未指定DNS服务器时不做任何解析，交给连接器使用系统解析器；
    指定了DNS服务器时只查询该服务器，绕过系统的解析配置。
    """

    def __init__(self, timeout: float = 30):
        """
        Args:
            timeout: DNS查询超时时间（秒），与连接超时相同
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def resolve(self, request: CheckRequest) -> ResolvedTarget:
        """
        得出要拨号的地址

        Args:
            request: 检查请求

        Returns:
            ResolvedTarget: 拨号目标

        Raises:
            ResolutionError: 通过指定DNS服务器解析失败或没有返回地址
        """
        dial_address = request.ip_address or request.hostname

        if request.dns_server:
            addresses = self.lookup(request.hostname, request.dns_server)
            self.logger.debug(f"{request.hostname} 通过 {request.dns_server} 解析到: {', '.join(addresses)}")

            # 显式指定的IP优先于DNS解析结果
            if not request.ip_address:
                dial_address = addresses[0]

        return ResolvedTarget(dial_address=dial_address, dial_port=request.port)

    def lookup(self, hostname: str, dns_server: str) -> List[str]:
        """
        通过指定的DNS服务器查询 A 和 AAAA 记录

        Args:
            hostname: 要解析的主机名
            dns_server: host:port 形式的DNS服务器

        Returns:
            List[str]: 解析到的地址，至少一个

        Raises:
            ResolutionError: 两种记录都没有返回地址
        """
        deadline = time.monotonic() + self.timeout

        try:
            resolver = self._build_resolver(dns_server)
        except (OSError, ValueError) as e:
            raise ResolutionError(hostname, dns_server, e) from e

        addresses = []
        errors = []
        for record_type in ('A', 'AAAA'):
            # 两次查询共用同一个超时预算
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                errors.append(dns.exception.Timeout(timeout=self.timeout))
                break

            try:
                answer = resolver.resolve(hostname, record_type, search=False, lifetime=remaining)
            except dns.resolver.NoAnswer:
                continue
            except dns.exception.DNSException as e:
                self.logger.debug(f"{hostname} 的 {record_type} 查询失败: {e}")
                errors.append(e)
                continue

            addresses.extend(rdata.to_text() for rdata in answer)

        if not addresses:
            cause = errors[0] if errors else None
            raise ResolutionError(hostname, dns_server, cause) from cause

        return addresses

    def _build_resolver(self, dns_server: str) -> dns.resolver.Resolver:
        """创建只使用指定服务器的解析器"""
        host, port = split_host_port(dns_server)

        try:
            ipaddress.ip_address(host)
            nameserver = host
        except ValueError:
            # 服务器以名称给出时先用系统解析器得到地址
            nameserver = socket.getaddrinfo(host, port, proto=socket.IPPROTO_UDP)[0][4][0]

        resolver = dns.resolver.Resolver(configure=False)
        resolver.nameservers = [nameserver]
        resolver.port = port
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout
        return resolver
