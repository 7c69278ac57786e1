# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Type definitions for pywssl."""

from __future__ import annotations

import ssl
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import IntFlag
from functools import cached_property
from typing import Any, Optional, Union

from cryptography import x509

from .exceptions import CertificateLoadError


class SslProtocols(IntFlag):
    """TLS/SSL protocol versions a client may enable."""

    NONE = 0
    SSL2 = 1 << 0
    SSL3 = 1 << 1
    TLS = 1 << 2
    TLS11 = 1 << 3
    TLS12 = 1 << 4
    TLS13 = 1 << 5
    DEFAULT = TLS12 | TLS13

    def to_tls_versions(self) -> tuple[ssl.TLSVersion, ssl.TLSVersion] | None:
        """
        Return the (minimum, maximum) version range spanned by these flags.

        SSL2 and SSL3 cannot be negotiated by Python's ssl module and are
        ignored. Returns None when no enabled flag is negotiable.
        """
        versions = [v for flag, v in _TLS_VERSIONS if flag in self]
        if not versions:
            return None
        return versions[0], versions[-1]


_TLS_VERSIONS = (
    (SslProtocols.TLS, ssl.TLSVersion.TLSv1),
    (SslProtocols.TLS11, ssl.TLSVersion.TLSv1_1),
    (SslProtocols.TLS12, ssl.TLSVersion.TLSv1_2),
    (SslProtocols.TLS13, ssl.TLSVersion.TLSv1_3),
)


class SslPolicyErrors(IntFlag):
    """Problems found by the baseline checks on a server certificate."""

    NONE = 0
    REMOTE_CERTIFICATE_NOT_AVAILABLE = 1 << 0
    REMOTE_CERTIFICATE_NAME_MISMATCH = 1 << 1
    REMOTE_CERTIFICATE_CHAIN_ERRORS = 1 << 2


@dataclass(frozen=True)
class ClientCertificate:
    """
    A client certificate the client may offer for mutual TLS.

    Examples:
        >>> cert = ClientCertificate("/path/to/client.crt", "/path/to/client.key")
        >>> cert.issuer
        'CN=Example CA'
    """

    cert_file: str
    """Path to the PEM certificate (chain) file."""

    key_file: Optional[str] = None
    """Path to the private key, if not bundled in cert_file."""

    password: Optional[Union[str, bytes]] = field(default=None, repr=False)
    """Password for an encrypted private key."""

    # cached_property writes __dict__ directly, so this class must not use slots=True
    @cached_property
    def certificate(self) -> x509.Certificate:
        """The leaf certificate, loaded on first access."""
        try:
            with open(self.cert_file, "rb") as f:
                return x509.load_pem_x509_certificate(f.read())
        except (OSError, ValueError) as e:
            raise CertificateLoadError(self.cert_file, str(e)) from e

    @property
    def issuer(self) -> str:
        """RFC 4514 issuer name of the leaf certificate."""
        return self.certificate.issuer.rfc4514_string()


@dataclass(frozen=True)
class CertificateSelectionContext:
    """What the TLS engine knows when it asks for a client certificate."""

    sender: Any
    target_host: str | None
    local_certificates: Sequence[ClientCertificate] | None
    remote_certificate: x509.Certificate | None = None
    acceptable_issuers: Sequence[str] = ()


@dataclass(frozen=True)
class CertificateValidationContext:
    """What the TLS engine knows when it asks whether to trust the server."""

    sender: Any
    certificate: x509.Certificate | None
    chain: Sequence[x509.Certificate] = ()
    policy_errors: SslPolicyErrors = SslPolicyErrors.NONE


CertificateSelectionPolicy = Callable[[CertificateSelectionContext], Optional[ClientCertificate]]
"""Chooses the client certificate to present, or None to present none."""

CertificateValidationPolicy = Callable[[CertificateValidationContext], bool]
"""Returns True to accept the server certificate, False to reject it."""
