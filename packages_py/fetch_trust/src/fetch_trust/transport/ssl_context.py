"""
SSL context selection for a send.
"""
import logging
import ssl
from typing import Optional

import certifi

from ..auth.client_credential import ClientCredential
from ..config import ClientConfig
from ..types import CertificateMode

logger = logging.getLogger("fetch_trust.transport.ssl_context")


def uses_platform_verification(config: ClientConfig) -> bool:
    """True when the default trust store decides, not the challenge hook."""
    return not config.trust_all_tls and config.certificate_mode is CertificateMode.NONE


def build_ssl_context(
    config: ClientConfig,
    credential: Optional[ClientCredential] = None,
) -> ssl.SSLContext:
    """Build the context used for the handshake.

    Trust-all and pinned configurations complete the handshake without
    platform verification; the challenge hook then accepts or aborts the
    connection before the request is written.
    """
    if uses_platform_verification(config):
        context = ssl.create_default_context(cafile=certifi.where())
        logger.debug("build_ssl_context: platform verification with certifi bundle")
    else:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        logger.debug(
            f"build_ssl_context: hook verification, trust_all_tls={config.trust_all_tls}, "
            f"certificate_mode={config.certificate_mode.value}"
        )

    if credential is not None:
        try:
            credential.install(context)
        except ssl.SSLError as e:
            logger.error(f"build_ssl_context: client credential rejected by ssl, continuing without it: {e}")
    return context
