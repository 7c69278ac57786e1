# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
pywssl - TLS client configuration for secure WebSocket connections.

Holds what a client needs to negotiate and validate a TLS session before the
WebSocket handshake:
- Target host identity
- Client certificates and a policy choosing which one to present
- Enabled protocol versions
- Certificate revocation checking
- A policy deciding whether to trust the server's certificate

Quick Start:
    >>> from pywssl import ClientSslConfiguration, open_secure_connection
    >>>
    >>> config = ClientSslConfiguration("example.com")
    >>> sock = open_secure_connection("example.com", 443, config)

Verifying the Server (recommended):
    >>> from pywssl import SslPolicyErrors
    >>>
    >>> config.server_certificate_validation_callback = (
    ...     lambda ctx: ctx.policy_errors == SslPolicyErrors.NONE
    ... )

Mutual TLS:
    >>> from pywssl import ClientCertificate
    >>>
    >>> config.client_certificates = [ClientCertificate("client.crt", "client.key")]
    >>> config.client_certificate_selection_callback = (
    ...     lambda ctx: ctx.local_certificates[0] if ctx.local_certificates else None
    ... )

Note: until server_certificate_validation_callback is set, every server
certificate is accepted (INSECURE_DEFAULT_ACCEPT_ALL).
"""

from .connection import open_secure_connection
from .context import (
    apply_validation_policy,
    build_validation_context,
    check_policy_errors,
    create_ssl_context,
    load_crls,
    load_trust_store,
    select_client_certificate,
    validate_server_certificate,
)
from .exceptions import (
    AuthenticationError,
    CertificateLoadError,
    ConnectionError,
    ConnectionTimeoutError,
    HandshakeError,
    PyWsSslError,
    UnsupportedProtocolError,
)
from .models import ConnectionConfig
from .tls import (
    INSECURE_DEFAULT_ACCEPT_ALL,
    ClientSslConfiguration,
    accept_all_certificates,
    select_no_certificate,
)
from .types import (
    CertificateSelectionContext,
    CertificateSelectionPolicy,
    CertificateValidationContext,
    CertificateValidationPolicy,
    ClientCertificate,
    SslPolicyErrors,
    SslProtocols,
)

__version__ = "1.0.0"
__author__ = "Firefly Software Solutions Inc."
__license__ = "Apache-2.0"

__all__ = [
    # Configuration
    "ClientSslConfiguration",
    "ConnectionConfig",
    # Policies
    "INSECURE_DEFAULT_ACCEPT_ALL",
    "accept_all_certificates",
    "select_no_certificate",
    "CertificateSelectionPolicy",
    "CertificateValidationPolicy",
    # Types
    "CertificateSelectionContext",
    "CertificateValidationContext",
    "ClientCertificate",
    "SslPolicyErrors",
    "SslProtocols",
    # TLS engine adapter
    "create_ssl_context",
    "select_client_certificate",
    "load_trust_store",
    "load_crls",
    "check_policy_errors",
    "build_validation_context",
    "apply_validation_policy",
    "validate_server_certificate",
    "open_secure_connection",
    # Exceptions
    "PyWsSslError",
    "ConnectionError",
    "ConnectionTimeoutError",
    "HandshakeError",
    "AuthenticationError",
    "UnsupportedProtocolError",
    "CertificateLoadError",
]
