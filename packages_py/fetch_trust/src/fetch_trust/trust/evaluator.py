"""
Certificate pinning evaluation.
"""
import logging
from typing import Optional

from .server_trust import ProtectionSpace, TrustResult, load_certificate

logger = logging.getLogger("fetch_trust.trust.evaluator")


def should_trust_protection_space(
    space: ProtectionSpace,
    pinned_certificate: Optional[bytes],
) -> bool:
    """Trust the server only if its chain anchors to the pinned certificate.

    The pinned certificate replaces every other anchor. A recoverable
    failure is retried exactly once after applying the trust's recorded
    exceptions.
    """
    if pinned_certificate is None:
        return False

    server_trust = space.server_trust
    if server_trust is None:
        return False

    try:
        anchor = load_certificate(pinned_certificate)
    except ValueError as e:
        logger.error(f"should_trust_protection_space: pinned certificate is unreadable: {e}")
        return False

    server_trust.set_anchor_certificates([anchor])
    result = server_trust.evaluate()

    if result is TrustResult.RECOVERABLE_TRUST_FAILURE:
        server_trust.set_exceptions(server_trust.copy_exceptions())
        result = server_trust.evaluate()

    trusted = result in (TrustResult.UNSPECIFIED, TrustResult.PROCEED)
    logger.debug(f"should_trust_protection_space: host={space.host!r}, result={result.value}, trusted={trusted}")
    return trusted
