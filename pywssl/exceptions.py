# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Custom exceptions for pywssl.

The configuration object itself never raises; these errors originate in the
TLS adapter and connection helpers. All of them inherit from PyWsSslError:

    try:
        sock = open_secure_connection("example.com", 443, config)
    except AuthenticationError as e:
        print(f"Server certificate rejected: {e.policy_errors!r}")
    except PyWsSslError as e:
        print(f"TLS error: {e}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import SslPolicyErrors, SslProtocols


class PyWsSslError(Exception):
    """
    Base exception for all pywssl errors.

    An optional hint is appended to the message to suggest a fix.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        self.hint = hint
        if hint:
            message = f"{message}\n\n  Hint: {hint}"
        super().__init__(message)


class ConnectionError(PyWsSslError):
    """
    Raised when the TCP connection to the server fails.

    Common causes:
    - Server is not running
    - Wrong host or port
    - Host name does not resolve
    """

    def __init__(
        self,
        message: str,
        host: str | None = None,
        port: int | None = None,
        *,
        hint: str | None = None,
    ) -> None:
        self.host = host
        self.port = port
        if hint is None and host:
            hint = f"Check that a TLS server is listening on {host}:{port}"
        super().__init__(message, hint=hint)


class ConnectionTimeoutError(ConnectionError):
    """Raised when connecting or handshaking times out."""

    def __init__(self, message: str, host: str | None = None, port: int | None = None) -> None:
        super().__init__(
            message,
            host,
            port,
            hint="Try increasing connect_timeout_ms or check network connectivity",
        )


class HandshakeError(ConnectionError):
    """
    Raised when the TLS engine fails the handshake.

    This typically happens when:
    - Client and server share no protocol version or cipher
    - The server requires a client certificate and none was presented
    """


class AuthenticationError(PyWsSslError):
    """
    Raised when the server certificate validation policy rejects the server.

    The policy errors found by the baseline checks are kept on the exception.
    """

    def __init__(self, host: str | None, policy_errors: SslPolicyErrors) -> None:
        self.host = host
        self.policy_errors = policy_errors
        super().__init__(
            f"Server certificate for {host} was rejected ({policy_errors!r})",
            hint="Check server_certificate_validation_callback and the server's certificate",
        )


class UnsupportedProtocolError(PyWsSslError):
    """Raised when none of the enabled protocols can be negotiated."""

    def __init__(self, protocols: SslProtocols) -> None:
        self.protocols = protocols
        super().__init__(
            f"No negotiable protocol in {protocols!r}",
            hint="Enable at least one of TLS, TLS11, TLS12 or TLS13",
        )


class CertificateLoadError(PyWsSslError):
    """Raised when a client certificate or key cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(
            f"Failed to load certificate from {path}: {reason}",
            hint="Certificates must be PEM encoded",
        )
