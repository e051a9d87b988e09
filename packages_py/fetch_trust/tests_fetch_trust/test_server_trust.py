"""
Tests for server_trust.py
Logic testing: Decision/Branch, State Transition (evaluate -> exceptions -> evaluate)
"""
from datetime import datetime, timedelta, timezone

import pytest

from fetch_trust.trust.server_trust import (
    ANCHOR,
    HOSTNAME,
    VALIDITY,
    ServerTrust,
    TrustExceptions,
    TrustResult,
    load_certificate,
    matches_host,
)
from cryptography.hazmat.primitives.serialization import Encoding

from conftest import HOST, der, make_cert, make_key


class TestLoadCertificate:
    def test_der(self, self_signed_cert):
        assert load_certificate(der(self_signed_cert)) == self_signed_cert

    def test_pem(self, self_signed_cert):
        assert load_certificate(self_signed_cert.public_bytes(Encoding.PEM)) == self_signed_cert

    def test_garbage(self):
        with pytest.raises(ValueError):
            load_certificate(b"garbage")


class TestMatchesHost:
    def test_exact_dns(self, self_signed_cert):
        assert matches_host(self_signed_cert, HOST)
        assert matches_host(self_signed_cert, HOST.upper())

    def test_other_host(self, self_signed_cert):
        assert not matches_host(self_signed_cert, "other.example.com")

    def test_wildcard_single_label(self):
        cert = make_cert("wild", make_key(), dns_names=["*.example.com"])
        assert matches_host(cert, "api.example.com")
        assert not matches_host(cert, "a.b.example.com")
        assert not matches_host(cert, "example.com")

    def test_ip_address(self):
        cert = make_cert("ip", make_key(), ip_addresses=["127.0.0.1"])
        assert matches_host(cert, "127.0.0.1")
        assert not matches_host(cert, "127.0.0.2")

    # Decision: no SAN falls back to common name
    def test_common_name_fallback(self):
        cert = make_cert(HOST, make_key())
        assert matches_host(cert, HOST)


class TestServerTrustEvaluate:
    def test_empty_chain_invalid(self):
        assert ServerTrust([], HOST).evaluate() is TrustResult.INVALID

    def test_unparsable_chain_fatal(self):
        assert ServerTrust([b"garbage"], HOST).evaluate() is TrustResult.FATAL_TRUST_FAILURE

    # Happy Path: leaf is the anchor
    def test_anchor_equals_leaf(self, self_signed_cert):
        trust = ServerTrust([der(self_signed_cert)], HOST)
        trust.set_anchor_certificates([self_signed_cert])
        assert trust.evaluate() is TrustResult.UNSPECIFIED

    # Happy Path: leaf issued by the anchor
    def test_leaf_issued_by_anchor(self, ca, server_cert):
        _, ca_cert = ca
        trust = ServerTrust([der(server_cert)], HOST)
        trust.set_anchor_certificates([ca_cert])
        assert trust.evaluate() is TrustResult.UNSPECIFIED

    def test_chain_through_intermediate(self, ca):
        ca_key, ca_cert = ca
        inter_key = make_key()
        inter = make_cert("Intermediate", inter_key, issuer_cert=ca_cert, issuer_key=ca_key, is_ca=True)
        leaf = make_cert(HOST, make_key(), issuer_cert=inter, issuer_key=inter_key, dns_names=[HOST])
        trust = ServerTrust([der(leaf), der(inter)], HOST)
        trust.set_anchor_certificates([ca_cert])
        assert trust.evaluate() is TrustResult.UNSPECIFIED

    def test_no_anchors_nothing_trusted(self, self_signed_cert):
        trust = ServerTrust([der(self_signed_cert)], HOST)
        assert trust.evaluate() is TrustResult.RECOVERABLE_TRUST_FAILURE

    # State: anchor failures survive exceptions
    def test_unrelated_anchor_not_exceptable(self, self_signed_cert, unrelated_cert):
        trust = ServerTrust([der(self_signed_cert)], HOST)
        trust.set_anchor_certificates([unrelated_cert])
        assert trust.evaluate() is TrustResult.RECOVERABLE_TRUST_FAILURE

        exceptions = trust.copy_exceptions()
        assert ANCHOR not in exceptions.failures
        trust.set_exceptions(exceptions)
        assert trust.evaluate() is TrustResult.RECOVERABLE_TRUST_FAILURE

    # State: hostname failure healed by exceptions
    def test_hostname_mismatch_healed(self, self_signed_cert):
        trust = ServerTrust([der(self_signed_cert)], "other.example.com")
        trust.set_anchor_certificates([self_signed_cert])
        assert trust.evaluate() is TrustResult.RECOVERABLE_TRUST_FAILURE

        exceptions = trust.copy_exceptions()
        assert exceptions.failures == frozenset({HOSTNAME})
        trust.set_exceptions(exceptions)
        assert trust.evaluate() is TrustResult.PROCEED

    def test_expired_leaf_healed(self, self_signed_cert):
        later = datetime.now(timezone.utc) + timedelta(days=365)
        trust = ServerTrust([der(self_signed_cert)], HOST, clock=lambda: later)
        trust.set_anchor_certificates([self_signed_cert])
        assert trust.evaluate() is TrustResult.RECOVERABLE_TRUST_FAILURE
        assert trust.copy_exceptions().failures == frozenset({VALIDITY})

        trust.set_exceptions(trust.copy_exceptions())
        assert trust.evaluate() is TrustResult.PROCEED

    def test_exceptions_for_other_leaf_ignored(self, self_signed_cert):
        trust = ServerTrust([der(self_signed_cert)], "other.example.com")
        trust.set_anchor_certificates([self_signed_cert])
        trust.set_exceptions(TrustExceptions(leaf_fingerprint="0" * 64, failures=frozenset({HOSTNAME})))
        assert trust.evaluate() is TrustResult.RECOVERABLE_TRUST_FAILURE

    def test_copy_exceptions_before_evaluate(self, self_signed_cert):
        assert ServerTrust([der(self_signed_cert)], HOST).copy_exceptions() is None
