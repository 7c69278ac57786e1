#!/usr/bin/env python3
"""
01_tls_policies.py - Client TLS Configuration and Certificate Policies

This example demonstrates:
- The insecure default (every server certificate accepted)
- A strict server certificate validation policy
- Mutual TLS with a client certificate selection policy
- Pinning a server certificate by fingerprint

Prerequisites:
    - A TLS server (for example a wss:// endpoint) on WSS_HOST:WSS_PORT
    - WSS_CA_FILE pointing at its CA bundle if it is not publicly trusted
    - pywssl installed

Run with:
    WSS_HOST=example.com WSS_PORT=443 python 01_tls_policies.py
"""

import logging
import os

from cryptography.hazmat.primitives import hashes

from pywssl import (
    ClientCertificate,
    ClientSslConfiguration,
    ConnectionConfig,
    PyWsSslError,
    SslPolicyErrors,
    SslProtocols,
    open_secure_connection,
)

HOST = os.getenv("WSS_HOST", "localhost")
PORT = int(os.getenv("WSS_PORT", "443"))
CA_FILE = os.getenv("WSS_CA_FILE")


def try_connect(config):
    connection = ConnectionConfig(ca_file=CA_FILE)
    try:
        with open_secure_connection(HOST, PORT, config, connection=connection) as sock:
            print(f"✓ Connected to {HOST}:{PORT} using {sock.version()}")
    except PyWsSslError as e:
        print(f"Note: {type(e).__name__}: {e}")


def default_example():
    """Out-of-the-box configuration"""
    print("Default Configuration (INSECURE)")
    print("-" * 50)
    print("""
    config = ClientSslConfiguration("example.com")

Key points:
    - No client certificate is presented, even if one is configured
    - Every server certificate is accepted (INSECURE_DEFAULT_ACCEPT_ALL)
    - A warning is logged for each connection using the default
    """)
    try_connect(ClientSslConfiguration(HOST))


def strict_example():
    """Only accept certificates that pass the baseline checks"""
    print("\nStrict Validation Policy")
    print("-" * 50)

    config = ClientSslConfiguration(HOST, enabled_ssl_protocols=SslProtocols.TLS13)
    config.server_certificate_validation_callback = (
        lambda ctx: ctx.policy_errors == SslPolicyErrors.NONE
    )
    try_connect(config)


def mutual_tls_example():
    """Present a client certificate issued by an issuer the server accepts"""
    print("\nMutual TLS (mTLS)")
    print("-" * 50)

    cert_file = os.getenv("WSS_CLIENT_CERT")
    key_file = os.getenv("WSS_CLIENT_KEY")
    if not cert_file:
        print("Set WSS_CLIENT_CERT and WSS_CLIENT_KEY to run this example")
        return

    config = ClientSslConfiguration(HOST, [ClientCertificate(cert_file, key_file)])

    def select_by_issuer(ctx):
        for cert in ctx.local_certificates or []:
            if not ctx.acceptable_issuers or cert.issuer in ctx.acceptable_issuers:
                return cert
        return None

    config.client_certificate_selection_callback = select_by_issuer
    try_connect(config)


def pinning_example():
    """Accept exactly one server certificate"""
    print("\nCertificate Pinning")
    print("-" * 50)

    pinned = os.getenv("WSS_PINNED_SHA256")
    if not pinned:
        print("Set WSS_PINNED_SHA256 to the server certificate's SHA-256 fingerprint")
        return

    config = ClientSslConfiguration(HOST)
    config.server_certificate_validation_callback = lambda ctx: (
        ctx.certificate is not None
        and ctx.certificate.fingerprint(hashes.SHA256()).hex() == pinned.lower()
    )
    try_connect(config)


def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 50)
    print("pywssl TLS Policy Example")
    print("=" * 50)

    default_example()
    strict_example()
    mutual_tls_example()
    pinning_example()

    print("\n" + "=" * 50)
    print("✓ TLS policy examples completed!")


if __name__ == "__main__":
    main()
