"""
TLS authentication challenge handling.
"""
import logging
from typing import Optional

from ..auth.client_credential import ClientCredential, ServerTrustCredential
from ..config import ClientConfig
from ..types import CertificateMode, TrustDecision
from . import evaluator
from .server_trust import ProtectionSpace

logger = logging.getLogger("fetch_trust.trust.challenge")


def _trust_credential_or_default(space: ProtectionSpace) -> TrustDecision:
    if space.server_trust is not None:
        return TrustDecision.use_credential(ServerTrustCredential(space.server_trust))
    return TrustDecision.perform_default_handling()


def handle_challenge(
    space: ProtectionSpace,
    config: ClientConfig,
    client_credential: Optional[ClientCredential] = None,
) -> TrustDecision:
    """Decide how to answer a server-trust challenge.

    Precedence: host pinning, trust-all, certificate pinning, default.
    A host mismatch returns immediately.
    """
    if config.host_domain is not None and config.host_domain.lower() != space.host.lower():
        logger.warning(
            f"handle_challenge: host {space.host!r} does not match pinned domain {config.host_domain!r}"
        )
        return TrustDecision.reject_protection_space()

    if config.trust_all_tls:
        logger.debug(f"handle_challenge: trust_all_tls for host={space.host!r}")
        return _trust_credential_or_default(space)

    if config.certificate_mode is CertificateMode.PUBLIC_KEY:
        if not evaluator.should_trust_protection_space(space, config.certificate):
            logger.warning(f"handle_challenge: pinned certificate rejected host={space.host!r}")
            return TrustDecision.cancel_authentication_challenge()
        if config.certificate_password is not None:
            return TrustDecision.use_credential(client_credential)
        return _trust_credential_or_default(space)

    return TrustDecision.perform_default_handling()
