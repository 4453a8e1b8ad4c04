"""
证书身份校验服务
"""
import ssl
import logging

from ..exceptions import IdentityError
from ..models import ResolvedTarget

# OpenSSL X509_V_ERR_HOSTNAME_MISMATCH / X509_V_ERR_IP_ADDRESS_MISMATCH
HOSTNAME_MISMATCH_CODES = {62, 64}


class IdentityVerifier:
    """证书身份校验器

    主机名匹配和证书链信任校验由平台的TLS实现在握手期间完成，
    校验名称始终是请求的主机名，与实际拨号的IP无关。
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def configure(self, context: ssl.SSLContext) -> ssl.SSLContext:
        """
        在握手上下文上启用主机名和证书链校验

        Args:
            context: SSL上下文

        Returns:
            ssl.SSLContext: 同一个上下文
        """
        context.verify_mode = ssl.CERT_REQUIRED
        context.check_hostname = True
        return context

    def verify(self, session, hostname: str):
        """
        确认已完成的握手为 hostname 提供了经过校验的证书

        Args:
            session: 已建立的TLS会话
            hostname: 请求的主机名

        Raises:
            IdentityError: 没有经过校验的对端证书
        """
        if not session.peer_certificate():
            raise IdentityError(
                session.target.display,
                message=IdentityError.describe(
                    IdentityError.UNTRUSTED_CHAIN, session.target.display, "no verified peer certificate"
                )
            )

        self.logger.debug(f"{hostname} 证书身份校验通过")

    @staticmethod
    def from_verification_error(target: ResolvedTarget, hostname: str,
                                error: ssl.SSLCertVerificationError) -> IdentityError:
        """
        把平台的证书校验错误转换为 IdentityError

        Args:
            target: 拨号目标
            hostname: 请求的主机名
            error: 握手期间的证书校验错误

        Returns:
            IdentityError: 标记了失败原因的错误
        """
        code = getattr(error, 'verify_code', None)
        if code in HOSTNAME_MISMATCH_CODES:
            reason = IdentityError.HOSTNAME_MISMATCH
        else:
            reason = IdentityError.UNTRUSTED_CHAIN

        cause = getattr(error, 'verify_message', None) or str(error)
        return IdentityError(
            target.display,
            error,
            message=IdentityError.describe(reason, target.display, cause),
            reason=reason
        )
