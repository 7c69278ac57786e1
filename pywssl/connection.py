# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Open TLS-protected TCP connections driven by a ClientSslConfiguration.

The returned socket is ready for the WebSocket opening handshake.
"""

from __future__ import annotations

import logging
import socket
import ssl

from .context import (
    apply_validation_policy,
    build_validation_context,
    create_ssl_context,
    load_crls,
    load_trust_store,
    select_client_certificate,
)
from .exceptions import (
    AuthenticationError,
    ConnectionError,
    ConnectionTimeoutError,
    HandshakeError,
)
from .models import ConnectionConfig
from .tls import ClientSslConfiguration

logger = logging.getLogger(__name__)


def open_secure_connection(
    host: str,
    port: int,
    config: ClientSslConfiguration,
    *,
    connection: ConnectionConfig | None = None,
) -> ssl.SSLSocket:
    """
    Connect to host:port and complete a TLS handshake.

    Every resolved address is tried in turn. The server name sent for SNI is
    config.target_host, falling back to host.

    Args:
        host: Host to connect to.
        port: Port to connect to.
        config: TLS configuration for this connection attempt.
        connection: Optional connection tunables.

    Returns:
        The connected SSL socket in blocking mode. The caller owns it.

    Raises:
        ConnectionError: The host cannot be resolved or reached.
        ConnectionTimeoutError: Connecting or handshaking timed out.
        HandshakeError: The TLS engine failed the handshake.
        AuthenticationError: The validation policy rejected the server.

    Example:
        >>> config = ClientSslConfiguration("example.com")
        >>> config.server_certificate_validation_callback = (
        ...     lambda ctx: ctx.policy_errors == SslPolicyErrors.NONE
        ... )
        >>> sock = open_secure_connection("example.com", 443, config)
    """
    connection = connection or ConnectionConfig()
    context = create_ssl_context(config, select_client_certificate(config))
    trust_store = load_trust_store(connection.ca_file)
    crls = load_crls(connection.crl_files) if config.check_certificate_revocation else []
    server_hostname = config.target_host or host

    try:
        addrs = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ConnectionError(f"Failed to resolve {host}: {e}", host, port) from e

    # IPv6 families sort above AF_INET on every platform
    addrs.sort(key=lambda x: x[0], reverse=connection.prefer_ipv6)

    last_error: Exception | None = None
    for family, socktype, proto, _canonname, sockaddr in addrs:
        sock = None
        try:
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(connection.connect_timeout)
            sock.connect(sockaddr)
            sock = context.wrap_socket(sock, server_hostname=server_hostname)
        except socket.timeout:
            last_error = ConnectionTimeoutError(f"Connection to {host}:{port} timed out", host, port)
            if sock:
                sock.close()
            continue
        except ssl.SSLError as e:
            # The engine refused the peer; another address will not help
            if sock:
                sock.close()
            raise HandshakeError(f"TLS handshake with {host}:{port} failed: {e}", host, port) from e
        except OSError as e:
            last_error = ConnectionError(f"Failed to connect to {host}:{port}: {e}", host, port)
            if sock:
                sock.close()
            continue

        logger.debug("TLS session with %s established (%s)", sockaddr, sock.version())
        try:
            validation = build_validation_context(config, sock, trust_store=trust_store, crls=crls)
            accepted = apply_validation_policy(config, validation)
        except BaseException:
            sock.close()
            raise
        if not accepted:
            sock.close()
            raise AuthenticationError(server_hostname, validation.policy_errors)

        # The connect timeout does not carry over to the session
        sock.settimeout(None)
        return sock

    if last_error:
        raise last_error
    raise ConnectionError(f"No addresses found for {host}", host, port)
