"""
证书过期分类器测试
"""
import pytest
from datetime import datetime, timezone, timedelta

from ssl_cert_probe.services.expiry_calculator import ExpiryClassifier
from ssl_cert_probe.models import LeafCertificateFacts, VerdictLevel


class TestExpiryClassifier:
    """证书过期分类器测试类"""

    def setup_method(self):
        """测试前准备"""
        self.classifier = ExpiryClassifier(warn_days=14, crit_days=7)
        self.now = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

    def test_days_until_expiry_keeps_fraction(self):
        """测试剩余天数保留小数"""
        expiry_date = self.now + timedelta(days=7, hours=12)
        days = self.classifier.days_until_expiry(expiry_date, self.now)
        assert days == pytest.approx(7.5)

    def test_days_until_expiry_past(self):
        """测试已过期证书的剩余天数为负数"""
        expiry_date = self.now - timedelta(days=5)
        days = self.classifier.days_until_expiry(expiry_date, self.now)
        assert days == pytest.approx(-5.0)

    def test_days_until_expiry_defaults_to_current_time(self):
        """测试默认使用当前时间"""
        expiry_date = datetime.now(timezone.utc) + timedelta(days=15)
        days = self.classifier.days_until_expiry(expiry_date)
        assert 14.99 < days <= 15

    @pytest.mark.parametrize("days", [14.01, 30, 365])
    def test_classify_ok(self, days):
        """测试剩余天数大于警告阈值时为 OK"""
        assert self.classifier.classify(days) is VerdictLevel.OK

    @pytest.mark.parametrize("days", [7.01, 10, 14])
    def test_classify_warning(self, days):
        """测试剩余天数在两个阈值之间时为 WARNING"""
        assert self.classifier.classify(days) is VerdictLevel.WARNING

    @pytest.mark.parametrize("days", [7, 3, 0, -5])
    def test_classify_critical(self, days):
        """测试剩余天数不超过严重阈值时为 CRITICAL，包括已过期"""
        assert self.classifier.classify(days) is VerdictLevel.CRITICAL

    def test_boundaries_are_inclusive(self):
        """测试阈值边界包含在内"""
        assert self.classifier.classify(7.0) is VerdictLevel.CRITICAL
        assert self.classifier.classify(14.0) is VerdictLevel.WARNING

    def test_fraction_not_truncated(self):
        """测试比较前不截断为整天"""
        # 7.9 天截断后会是 7 天（CRITICAL），实际应为 WARNING
        assert self.classifier.classify(7.9) is VerdictLevel.WARNING
        assert self.classifier.classify(14.5) is VerdictLevel.OK

    def test_classify_facts(self):
        """测试对叶子证书信息分类"""
        facts = LeafCertificateFacts(issuer="CN=Test CA", not_after=self.now + timedelta(days=10))

        level, days = self.classifier.classify_facts(facts, self.now)

        assert level is VerdictLevel.WARNING
        assert days == pytest.approx(10.0)

    def test_custom_thresholds(self):
        """测试自定义阈值"""
        classifier = ExpiryClassifier(warn_days=30, crit_days=0)

        assert classifier.classify(15) is VerdictLevel.WARNING
        assert classifier.classify(0.5) is VerdictLevel.WARNING
        assert classifier.classify(0) is VerdictLevel.CRITICAL
        assert classifier.classify(-0.1) is VerdictLevel.CRITICAL
