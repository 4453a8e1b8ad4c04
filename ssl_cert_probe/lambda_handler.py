"""
AWS Lambda函数入口点
"""
from typing import Dict, Any
from datetime import datetime, timezone

from .models import CheckRequest, Verdict
from .monitor import SSLCertificateProbe
from .services.config_validator import ConfigValidator
from .services.logger import LoggerService
from .services.sns_notification import SNSNotificationService

# 事件字段 -> CheckRequest 字段
EVENT_FIELDS = {
    'hostname': str,
    'ip_address': str,
    'port': int,
    'dns_server': str,
    'timeout': int,
    'warn_days': int,
    'crit_days': int,
    'min_tls_version': str,
}


def request_from_event(event: Dict[str, Any]) -> CheckRequest:
    """
    从事件构建检查请求，未给出的字段使用默认值

    Args:
        event: Lambda事件

    Returns:
        CheckRequest: 检查请求

    Raises:
        ValueError: 字段类型无法转换
    """
    values = {}
    for field, convert in EVENT_FIELDS.items():
        value = event.get(field)
        if value is None or value == '':
            continue
        values[field] = convert(value)
    return CheckRequest(**values)


def verdict_to_body(verdict: Verdict) -> Dict[str, Any]:
    body = {
        'hostname': verdict.hostname,
        'level': verdict.level.name,
        'exit_code': verdict.exit_code,
        'message': verdict.message,
        'status_line': verdict.status_line,
        'tls_version': verdict.tls_version,
        'timestamp': datetime.now(timezone.utc).isoformat()
    }
    if verdict.facts is not None:
        body['expiry_date'] = verdict.facts.not_after.isoformat()
        body['issuer'] = verdict.facts.issuer
        body['days_until_expiry'] = round(verdict.days_until_expiry, 2)
    return body


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda函数入口点，每次调用只检查一个目标

    Args:
        event: 触发事件，字段与命令行参数相同
        context: Lambda运行时上下文

    Returns:
        dict: 检查结论
    """
    logger_service = LoggerService()

    try:
        request = request_from_event(event or {})
    except (TypeError, ValueError) as e:
        return {
            'statusCode': 400,
            'body': {
                'message': 'Invalid SSL certificate check configuration',
                'errors': [str(e)],
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }

    validator = ConfigValidator()
    validation = validator.validate_request(request)
    errors = list(validation['errors'])

    notification_service = SNSNotificationService(topic_arn=(event or {}).get('sns_topic_arn'))
    if not notification_service.enabled:
        notification_service = None
    elif not validator.validate_sns_topic_arn(notification_service.topic_arn):
        errors.append(f"invalid SNS topic ARN: {notification_service.topic_arn}")

    if errors:
        return {
            'statusCode': 400,
            'body': {
                'message': 'Invalid SSL certificate check configuration',
                'errors': errors,
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }

    probe = SSLCertificateProbe(
        request,
        logger_service=logger_service,
        notification_service=notification_service
    )
    verdict = probe.execute()

    return {
        'statusCode': 200,
        'body': verdict_to_body(verdict)
    }
