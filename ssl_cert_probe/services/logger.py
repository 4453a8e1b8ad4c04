"""
日志服务
"""
import os
import sys
import logging
import traceback
from typing import Dict, Any, Optional
from ..interfaces import LoggerServiceInterface
from ..models import CheckRequest, ResolvedTarget, Verdict, VerdictLevel


class LoggerService(LoggerServiceInterface):
    """日志服务实现

    日志写到标准错误，标准输出只保留插件的状态行。
    """

    def __init__(self, logger_name: str = "ssl_cert_probe", log_level: Optional[str] = None):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'WARNING')

        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.WARNING)
        self.logger.setLevel(level)

        # 避免重复添加处理器
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(level)

            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)

            self.logger.addHandler(handler)

        # 防止日志传播到根日志器
        self.logger.propagate = False

    def log_check_start(self, request: CheckRequest):
        """
        记录检查开始

        Args:
            request: 检查请求
        """
        self.logger.info(
            f"开始SSL证书检查 - 主机: {request.hostname}, 端口: {request.port}, "
            f"阈值: 警告 {request.warn_days} 天 / 严重 {request.crit_days} 天"
        )

    def log_resolution(self, hostname: str, target: ResolvedTarget):
        """记录拨号目标"""
        self.logger.info(f"{hostname} 的拨号目标: {target.display}")

    def log_verdict(self, verdict: Verdict):
        """
        记录检查结论

        Args:
            verdict: 检查结论
        """
        if verdict.days_until_expiry is not None:
            detail = f"剩余天数: {verdict.days_until_expiry:.2f} 天"
        else:
            detail = f"原因: {verdict.message}"

        if verdict.level is VerdictLevel.OK:
            self.logger.info(f"证书正常 - 主机: {verdict.hostname}, {detail}")
        else:
            self.logger.info(f"证书状态 {verdict.level.name} - 主机: {verdict.hostname}, {detail}")

    def log_error(self, hostname: str, error: Exception):
        """
        记录错误信息

        错误通过状态行报告，这里只在调试级别留下诊断信息。

        Args:
            hostname: 主机名
            error: 异常对象
        """
        self.logger.debug(f"主机 {hostname} 检查失败: {type(error).__name__}: {str(error)}")
        self.logger.debug(
            f"主机 {hostname} 错误堆栈跟踪:\n"
            f"{''.join(traceback.format_exception(type(error), error, error.__traceback__))}"
        )

    def log_notification_sent(self, notification_type: str, success: bool):
        """
        记录通知发送状态

        Args:
            notification_type: 通知类型（如 "SNS"）
            success: 是否发送成功
        """
        if success:
            self.logger.info(f"{notification_type} 通知发送成功")
        else:
            self.logger.warning(f"{notification_type} 通知发送失败")

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息

        Args:
            config: 配置信息字典
        """
        safe_config = self._sanitize_config(config)

        self.logger.debug("检查配置信息:")
        for key, value in safe_config.items():
            self.logger.debug(f"  {key}: {value}")

    def _sanitize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        清理配置信息中的敏感数据

        Args:
            config: 原始配置

        Returns:
            Dict[str, Any]: 清理后的配置
        """
        safe_config = {}
        for key, value in config.items():
            key_lower = key.lower()

            is_sensitive = (
                key_lower in ('password', 'secret', 'token', 'key', 'sns_topic_arn') or
                key_lower.endswith('_key') or
                key_lower.endswith('_secret') or
                key_lower.endswith('_password') or
                key_lower.endswith('_token')
            )

            if is_sensitive and isinstance(value, str) and value:
                if 'arn:' in value:
                    # ARN类型，只显示前缀和后缀
                    parts = value.split(':')
                    if len(parts) >= 6:
                        safe_value = f"{':'.join(parts[:3])}:***:{parts[-2]}:{parts[-1]}"
                    else:
                        safe_value = "***"
                else:
                    safe_value = value[:3] + "***" if len(value) > 3 else "***"
                safe_config[key] = safe_value
            else:
                safe_config[key] = value

        return safe_config
