"""
SNS通知服务
"""
import os
from typing import Optional
import logging
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import NotificationServiceInterface
from ..models import Verdict, VerdictLevel

SUBJECT_PREFIXES = {
    VerdictLevel.OK: "✅",
    VerdictLevel.WARNING: "⚠️",
    VerdictLevel.CRITICAL: "🚨",
}


class SNSNotificationService(NotificationServiceInterface):
    """SNS通知服务实现

    只在配置了主题ARN时启用；发送失败不会影响检查结论和退出码。
    """

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则自动检测
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')

        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.logger = logging.getLogger(__name__)
        self._sns_client = None

    @property
    def enabled(self) -> bool:
        return bool(self.topic_arn)

    @property
    def sns_client(self):
        """首次使用时创建SNS客户端"""
        if self._sns_client is None:
            self._sns_client = boto3.client('sns', region_name=self.region_name)
            self.logger.debug(f"SNS客户端初始化成功，区域: {self.region_name}")
        return self._sns_client

    def send_verdict_notification(self, verdict: Verdict) -> bool:
        """
        发送检查结论通知，OK 结论不发送

        Args:
            verdict: 检查结论

        Returns:
            bool: 发送是否成功
        """
        if verdict.is_ok:
            self.logger.debug("证书状态正常，跳过通知发送")
            return True

        if not self.enabled:
            self.logger.debug("未配置SNS主题，跳过通知发送")
            return True

        subject = self._format_subject(verdict)
        message = self.format_notification_content(verdict)

        try:
            response = self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=subject,
                Message=message
            )
        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
            return False
        except BotoCoreError as e:
            self.logger.error(f"发送SNS通知时发生错误: {str(e)}")
            return False

        self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
        return True

    def format_notification_content(self, verdict: Verdict) -> str:
        """
        格式化通知内容

        Args:
            verdict: 检查结论

        Returns:
            str: 格式化的通知内容
        """
        lines = [
            "SSL证书检查报告",
            "=" * 30,
            f"检查时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC",
            f"主机: {verdict.hostname}",
            f"状态: {verdict.level.name}",
            ""
        ]

        if verdict.facts is not None:
            lines.append(f"过期时间: {verdict.facts.not_after.strftime('%Y-%m-%d %H:%M:%S')}")
            if verdict.days_until_expiry is not None:
                if verdict.days_until_expiry < 0:
                    lines.append(f"已过期: {abs(verdict.days_until_expiry):.1f} 天")
                else:
                    lines.append(f"剩余天数: {verdict.days_until_expiry:.1f} 天")
            lines.append(f"颁发者: {verdict.facts.issuer}")
        else:
            lines.append(f"错误: {verdict.message}")

        if verdict.tls_version:
            lines.append(f"协议版本: {verdict.tls_version}")

        lines.extend([
            "",
            verdict.status_line,
            "",
            "---",
            "此报告由SSL证书检查插件自动生成"
        ])

        return "\n".join(lines)

    def _format_subject(self, verdict: Verdict) -> str:
        """SNS主题最长100个字符"""
        subject = f"{SUBJECT_PREFIXES[verdict.level]} SSL证书{verdict.level.name}: {verdict.hostname}"
        return subject[:100]
