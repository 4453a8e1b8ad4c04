"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import ContextManager
from .models import CheckRequest, ResolvedTarget, Verdict


class ResolverInterface(ABC):
    """目标地址解析接口"""

    @abstractmethod
    def resolve(self, request: CheckRequest) -> ResolvedTarget:
        """得出要拨号的地址"""
        pass


class ConnectorInterface(ABC):
    """TLS连接器接口"""

    @abstractmethod
    def open_session(self, target: ResolvedTarget, hostname: str) -> ContextManager:
        """建立TLS会话，退出时保证关闭"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def send_verdict_notification(self, verdict: Verdict) -> bool:
        """发送检查结论通知"""
        pass

    @abstractmethod
    def format_notification_content(self, verdict: Verdict) -> str:
        """格式化通知内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, request: CheckRequest):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_verdict(self, verdict: Verdict):
        """记录检查结论"""
        pass

    @abstractmethod
    def log_error(self, hostname: str, error: Exception):
        """记录错误信息"""
        pass
