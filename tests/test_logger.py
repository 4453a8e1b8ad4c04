"""
日志服务测试
"""
import pytest
import os
import sys
import logging
from unittest.mock import patch
from datetime import datetime, timezone, timedelta
from io import StringIO

from ssl_cert_probe.services.logger import LoggerService
from ssl_cert_probe.exceptions import ConnectError
from ssl_cert_probe.models import (
    CheckRequest,
    LeafCertificateFacts,
    ResolvedTarget,
    Verdict,
    VerdictLevel,
)


class TestLoggerService:
    """日志服务测试类"""

    def setup_method(self):
        """测试前准备"""
        self.logger_service = LoggerService(logger_name="test_logger")

        # 创建一个字符串流来捕获日志输出
        self.log_stream = StringIO()
        handler = logging.StreamHandler(self.log_stream)
        handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))

        self.logger_service.logger.handlers.clear()
        self.logger_service.logger.addHandler(handler)
        self.logger_service.logger.setLevel(logging.DEBUG)

    def get_log_output(self) -> str:
        """获取日志输出"""
        return self.log_stream.getvalue()

    @patch.dict(os.environ, {}, clear=True)
    def test_init_default_config(self):
        """测试默认配置初始化"""
        service = LoggerService()

        assert service.logger_name == "ssl_cert_probe"
        assert service.log_level == "WARNING"
        assert service.logger.propagate is False

    @patch.dict(os.environ, {'LOG_LEVEL': 'DEBUG'})
    def test_init_with_env_log_level(self):
        """测试从环境变量读取日志级别"""
        service = LoggerService(logger_name="env_logger")

        assert service.log_level == "DEBUG"
        assert service.logger.level == logging.DEBUG

    def test_handler_writes_to_stderr(self):
        """测试日志不写到标准输出"""
        service = LoggerService(logger_name="stderr_logger", log_level="INFO")

        stream_handlers = [h for h in service.logger.handlers if isinstance(h, logging.StreamHandler)]
        assert stream_handlers
        assert all(h.stream is sys.stderr for h in stream_handlers)

    def test_log_check_start(self):
        """测试记录检查开始"""
        self.logger_service.log_check_start(CheckRequest(hostname='example.com'))

        output = self.get_log_output()
        assert "开始SSL证书检查 - 主机: example.com, 端口: 443" in output

    def test_log_resolution(self):
        """测试记录拨号目标"""
        self.logger_service.log_resolution('example.com', ResolvedTarget('192.0.2.1', 443))
        assert "example.com 的拨号目标: 192.0.2.1:443" in self.get_log_output()

    def test_log_verdict_ok(self):
        """测试记录正常结论"""
        facts = LeafCertificateFacts(issuer="CN=Test CA", not_after=datetime.now(timezone.utc) + timedelta(days=60))
        verdict = Verdict(VerdictLevel.OK, 'example.com', 'valid', facts=facts, days_until_expiry=60.0)

        self.logger_service.log_verdict(verdict)

        assert "证书正常 - 主机: example.com, 剩余天数: 60.00 天" in self.get_log_output()

    def test_log_verdict_failure(self):
        """测试记录失败结论"""
        verdict = Verdict(VerdictLevel.CRITICAL, 'example.com', 'failed to connect to example.com:443: refused')

        self.logger_service.log_verdict(verdict)

        assert "证书状态 CRITICAL - 主机: example.com, 原因: failed to connect" in self.get_log_output()

    def test_log_error(self):
        """测试错误只在调试级别记录"""
        error = ConnectError('example.com:443', ConnectionRefusedError("refused"))

        self.logger_service.log_error('example.com', error)

        output = self.get_log_output()
        assert "DEBUG - 主机 example.com 检查失败: ConnectError" in output
        assert "ERROR" not in output

    def test_log_notification_sent(self):
        """测试记录通知发送状态"""
        self.logger_service.log_notification_sent("SNS", True)
        self.logger_service.log_notification_sent("SNS", False)

        output = self.get_log_output()
        assert "INFO - SNS 通知发送成功" in output
        assert "WARNING - SNS 通知发送失败" in output

    def test_sanitize_config(self):
        """测试清理敏感配置"""
        config = {
            'hostname': 'example.com',
            'sns_topic_arn': 'arn:aws:sns:us-east-1:123456789012:ssl-alerts',
            'api_token': 'abcdef123',
        }

        safe_config = self.logger_service._sanitize_config(config)

        assert safe_config['hostname'] == 'example.com'
        assert safe_config['sns_topic_arn'] == 'arn:aws:sns:***:123456789012:ssl-alerts'
        assert safe_config['api_token'] == 'abc***'
