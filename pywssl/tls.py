# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
TLS configuration for secure WebSocket client connections.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from .types import (
    CertificateSelectionContext,
    CertificateSelectionPolicy,
    CertificateValidationContext,
    CertificateValidationPolicy,
    ClientCertificate,
    SslProtocols,
)


def select_no_certificate(context: CertificateSelectionContext) -> Optional[ClientCertificate]:
    """Default selection policy: never present a client certificate."""
    return None


def accept_all_certificates(context: CertificateValidationContext) -> bool:
    """
    Default validation policy: trust every server certificate.

    Policy errors are ignored, so certificate verification is effectively
    disabled (INSECURE - set server_certificate_validation_callback to verify).
    """
    return True


INSECURE_DEFAULT_ACCEPT_ALL: CertificateValidationPolicy = accept_all_certificates
"""The permissive validation policy in effect until a caller supplies one."""


class ClientSslConfiguration:
    """
    Parameters used to configure a TLS session as a client.

    The object stores what it is given: nothing is coerced or validated,
    and problems surface in the TLS engine during the handshake.

    Security note:
        Out of the box the server certificate validation policy is
        INSECURE_DEFAULT_ACCEPT_ALL, which accepts any certificate. Set
        server_certificate_validation_callback for production use.

    Examples:
        # Defaults: no client certificate, platform protocols, no revocation check
        >>> config = ClientSslConfiguration("example.com")

        # Mutual TLS, only accepting servers without policy errors
        >>> config = ClientSslConfiguration(
        ...     "example.com",
        ...     [ClientCertificate("client.crt", "client.key")],
        ...     SslProtocols.TLS13,
        ...     True,
        ... )
        >>> config.client_certificate_selection_callback = (
        ...     lambda ctx: ctx.local_certificates[0]
        ... )
        >>> config.server_certificate_validation_callback = (
        ...     lambda ctx: ctx.policy_errors == SslPolicyErrors.NONE
        ... )
    """

    def __init__(
        self,
        target_host: str | None,
        client_certificates: Sequence[ClientCertificate] | None = None,
        enabled_ssl_protocols: SslProtocols = SslProtocols.DEFAULT,
        check_certificate_revocation: bool = False,
    ) -> None:
        self._host = target_host
        self._certs = client_certificates
        self._enabled_protocols = enabled_ssl_protocols
        self._check_cert_revocation = check_certificate_revocation
        self._cert_selection_callback: CertificateSelectionPolicy | None = None
        self._server_cert_validation_callback: CertificateValidationPolicy | None = None

    @property
    def target_host(self) -> str | None:
        """Name of the server the certificate must identify."""
        return self._host

    @target_host.setter
    def target_host(self, value: str | None) -> None:
        self._host = value

    @property
    def client_certificates(self) -> Sequence[ClientCertificate] | None:
        """Certificates the client may offer, or None."""
        return self._certs

    @client_certificates.setter
    def client_certificates(self, value: Sequence[ClientCertificate] | None) -> None:
        self._certs = value

    @property
    def enabled_ssl_protocols(self) -> SslProtocols:
        """Protocol versions permitted for the session."""
        return self._enabled_protocols

    @enabled_ssl_protocols.setter
    def enabled_ssl_protocols(self, value: SslProtocols) -> None:
        self._enabled_protocols = value

    @property
    def check_certificate_revocation(self) -> bool:
        """
        Whether the certificate revocation list is checked.

        When set, a server certificate without a current CRL from its issuer
        is reported with REMOTE_CERTIFICATE_CHAIN_ERRORS, the same as a
        revoked one.
        """
        return self._check_cert_revocation

    @check_certificate_revocation.setter
    def check_certificate_revocation(self, value: bool) -> None:
        self._check_cert_revocation = value

    @property
    def client_certificate_selection_callback(self) -> CertificateSelectionPolicy:
        """
        Policy choosing the client certificate to supply to the server.

        If the policy returns None, no client certificate is supplied. The
        default is select_no_certificate, so a configured collection is not
        offered until a policy is set.
        """
        if self._cert_selection_callback is None:
            return select_no_certificate
        return self._cert_selection_callback

    @client_certificate_selection_callback.setter
    def client_certificate_selection_callback(self, value: CertificateSelectionPolicy | None) -> None:
        self._cert_selection_callback = value

    @property
    def server_certificate_validation_callback(self) -> CertificateValidationPolicy:
        """
        Policy deciding whether the server certificate is trusted.

        If the policy returns True, the server certificate is accepted. The
        default is INSECURE_DEFAULT_ACCEPT_ALL.
        """
        if self._server_cert_validation_callback is None:
            return INSECURE_DEFAULT_ACCEPT_ALL
        return self._server_cert_validation_callback

    @server_certificate_validation_callback.setter
    def server_certificate_validation_callback(self, value: CertificateValidationPolicy | None) -> None:
        self._server_cert_validation_callback = value

    @property
    def uses_insecure_default(self) -> bool:
        """True while no validation policy has been supplied."""
        return self._server_cert_validation_callback is None

    def __repr__(self) -> str:
        certs = len(self._certs) if self._certs is not None else None
        return (
            f"{type(self).__name__}(target_host={self._host!r}, client_certificates={certs}, "
            f"enabled_ssl_protocols={self._enabled_protocols!r}, "
            f"check_certificate_revocation={self._check_cert_revocation})"
        )
