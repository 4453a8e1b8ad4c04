"""
证书过期分类服务
"""
from datetime import datetime, timezone
from typing import Optional, Tuple
from ..models import LeafCertificateFacts, VerdictLevel


class ExpiryClassifier:
    """证书过期分类器"""

    def __init__(self, warn_days: int = 14, crit_days: int = 7):
        """
        初始化过期分类器

        Args:
            warn_days: 警告阈值天数
            crit_days: 严重阈值天数，小于 warn_days
        """
        self.warn_days = warn_days
        self.crit_days = crit_days

    def days_until_expiry(self, expiry_date: datetime, now: Optional[datetime] = None) -> float:
        """
        计算距离过期的天数

        Args:
            expiry_date: 过期时间
            now: 当前时间，默认取当前UTC时间

        Returns:
            float: 剩余天数，保留小数（负数表示已过期）
        """
        now = now or datetime.now(timezone.utc)
        hours = (expiry_date - now).total_seconds() / 3600
        return hours / 24

    def classify(self, days_until_expiry: float) -> VerdictLevel:
        """
        把剩余天数映射为结论级别，阈值包含边界

        Args:
            days_until_expiry: 剩余天数

        Returns:
            VerdictLevel: 结论级别
        """
        if days_until_expiry <= self.crit_days:
            return VerdictLevel.CRITICAL
        if days_until_expiry <= self.warn_days:
            return VerdictLevel.WARNING
        return VerdictLevel.OK

    def classify_facts(self, facts: LeafCertificateFacts,
                       now: Optional[datetime] = None) -> Tuple[VerdictLevel, float]:
        """
        对叶子证书进行分类

        Args:
            facts: 叶子证书信息
            now: 当前时间

        Returns:
            Tuple[VerdictLevel, float]: 结论级别和剩余天数
        """
        days = self.days_until_expiry(facts.not_after, now)
        return self.classify(days), days
