"""
SNS通知服务测试
"""
import pytest
import os
from unittest.mock import patch, MagicMock
from datetime import datetime, timezone, timedelta
from botocore.exceptions import ClientError
from moto import mock_aws

from ssl_cert_probe.services.sns_notification import SNSNotificationService
from ssl_cert_probe.models import LeafCertificateFacts, Verdict, VerdictLevel


def _expiry_verdict(level, days):
    facts = LeafCertificateFacts(
        issuer="CN=Test CA,O=Test Org,C=US",
        not_after=datetime.now(timezone.utc) + timedelta(days=days)
    )
    return Verdict(
        level=level,
        hostname='example.com',
        message=f"valid, expires on {facts.not_after.strftime('%Y-%m-%d')}",
        tls_version='TLS 1.3',
        facts=facts,
        days_until_expiry=float(days)
    )


class TestSNSNotificationService:
    """SNS通知服务测试类"""

    def setup_method(self):
        """测试前准备"""
        self.topic_arn = "arn:aws:sns:eu-west-1:123456789012:ssl-alerts"

    def test_init_region_from_arn(self):
        """测试从ARN中提取区域"""
        service = SNSNotificationService(topic_arn=self.topic_arn)

        assert service.topic_arn == self.topic_arn
        assert service.region_name == 'eu-west-1'
        assert service.enabled is True

    @patch.dict(os.environ, {'SNS_TOPIC_ARN': 'arn:aws:sns:us-east-1:123456789012:env-topic'})
    def test_init_from_env(self):
        """测试从环境变量初始化"""
        service = SNSNotificationService()
        assert service.topic_arn == 'arn:aws:sns:us-east-1:123456789012:env-topic'

    @patch.dict(os.environ, {}, clear=True)
    def test_init_without_topic(self):
        """测试未配置主题"""
        service = SNSNotificationService()

        assert service.enabled is False
        assert service.region_name == 'us-east-1'

    @patch('ssl_cert_probe.services.sns_notification.boto3')
    def test_client_created_lazily(self, mock_boto3):
        """测试首次使用时创建客户端"""
        service = SNSNotificationService(topic_arn=self.topic_arn)
        mock_boto3.client.assert_not_called()

        assert service.sns_client is mock_boto3.client.return_value
        mock_boto3.client.assert_called_once_with('sns', region_name='eu-west-1')

    @patch('ssl_cert_probe.services.sns_notification.boto3')
    def test_ok_verdict_not_sent(self, mock_boto3):
        """测试 OK 结论不发送通知"""
        service = SNSNotificationService(topic_arn=self.topic_arn)

        assert service.send_verdict_notification(_expiry_verdict(VerdictLevel.OK, 60)) is True
        mock_boto3.client.assert_not_called()

    def test_format_notification_content_expiry(self):
        """测试证书即将过期的通知内容"""
        service = SNSNotificationService(topic_arn=self.topic_arn)

        content = service.format_notification_content(_expiry_verdict(VerdictLevel.WARNING, 10))

        assert "SSL证书检查报告" in content
        assert "主机: example.com" in content
        assert "状态: WARNING" in content
        assert "剩余天数: 10.0 天" in content
        assert "颁发者: CN=Test CA,O=Test Org,C=US" in content
        assert "协议版本: TLS 1.3" in content
        assert "SSL_CERT WARNING example.com:" in content

    def test_format_notification_content_expired(self):
        """测试已过期证书的通知内容"""
        service = SNSNotificationService(topic_arn=self.topic_arn)

        content = service.format_notification_content(_expiry_verdict(VerdictLevel.CRITICAL, -5))

        assert "已过期: 5.0 天" in content

    def test_format_notification_content_failure(self):
        """测试检查失败的通知内容"""
        service = SNSNotificationService(topic_arn=self.topic_arn)
        verdict = Verdict(VerdictLevel.CRITICAL, 'example.com', 'failed to connect to example.com:443: refused')

        content = service.format_notification_content(verdict)

        assert "错误: failed to connect to example.com:443: refused" in content
        assert "协议版本" not in content

    def test_format_subject(self):
        """测试主题格式化"""
        service = SNSNotificationService(topic_arn=self.topic_arn)

        assert service._format_subject(_expiry_verdict(VerdictLevel.CRITICAL, 3)) == "🚨 SSL证书CRITICAL: example.com"
        assert service._format_subject(_expiry_verdict(VerdictLevel.WARNING, 10)) == "⚠️ SSL证书WARNING: example.com"

    def test_send_client_error(self):
        """测试发送失败返回 False"""
        service = SNSNotificationService(topic_arn=self.topic_arn)
        mock_client = MagicMock()
        mock_client.publish.side_effect = ClientError(
            {'Error': {'Code': 'NotFound', 'Message': 'Topic does not exist'}}, 'Publish'
        )
        service._sns_client = mock_client

        assert service.send_verdict_notification(_expiry_verdict(VerdictLevel.CRITICAL, 3)) is False
        mock_client.publish.assert_called_once()

    @mock_aws
    def test_send_with_moto(self):
        """测试通过 SNS 发送通知"""
        import boto3

        sns = boto3.client('sns', region_name='us-east-1')
        topic_arn = sns.create_topic(Name='ssl-alerts')['TopicArn']

        service = SNSNotificationService(topic_arn=topic_arn)

        assert service.send_verdict_notification(_expiry_verdict(VerdictLevel.WARNING, 10)) is True
