# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Adapter between ClientSslConfiguration and Python's ssl module.

Python's TLS engine does the handshake; this module feeds it the configured
protocol range and client certificate, and applies the validation policy to
the certificate the server presented. The baseline checks behind the policy
errors (name, validity, trust, revocation) run here with cryptography, since
the engine is told not to verify anything itself.
"""

from __future__ import annotations

import functools
import ipaddress
import logging
import os
import ssl
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from .exceptions import CertificateLoadError, UnsupportedProtocolError
from .types import (
    CertificateSelectionContext,
    CertificateValidationContext,
    ClientCertificate,
    SslPolicyErrors,
)

if TYPE_CHECKING:
    from .tls import ClientSslConfiguration

logger = logging.getLogger(__name__)


def create_ssl_context(
    config: ClientSslConfiguration,
    certificate: ClientCertificate | None = None,
) -> ssl.SSLContext:
    """
    Build a client SSLContext from a configuration.

    Trust is decided by the validation policy after the handshake, so the
    context itself neither verifies the chain nor checks the host name.
    For the same reason revocation is not configured on the context:
    check_certificate_revocation is honoured by check_policy_errors.

    Args:
        config: The client TLS configuration.
        certificate: Client certificate to present, normally the result of
            select_client_certificate().

    Raises:
        UnsupportedProtocolError: No enabled protocol can be negotiated.
        CertificateLoadError: The client certificate or key cannot be loaded.
    """
    versions = config.enabled_ssl_protocols.to_tls_versions()
    if versions is None:
        raise UnsupportedProtocolError(config.enabled_ssl_protocols)

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.minimum_version, context.maximum_version = versions
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE

    if certificate is not None:
        try:
            context.load_cert_chain(certificate.cert_file, certificate.key_file, certificate.password)
        except (OSError, ssl.SSLError) as e:
            raise CertificateLoadError(certificate.cert_file, str(e)) from e

    logger.debug(
        "Created SSL context for %s (versions %s-%s, client_cert=%s)",
        config.target_host,
        versions[0].name,
        versions[1].name,
        certificate.cert_file if certificate else None,
    )
    return context


def select_client_certificate(
    config: ClientSslConfiguration,
    remote_certificate: x509.Certificate | None = None,
    acceptable_issuers: Sequence[str] = (),
) -> ClientCertificate | None:
    """
    Ask the selection policy which client certificate to present.

    Python's engine fixes the client certificate before the handshake, so
    the server certificate is normally not known yet.
    """
    policy = config.client_certificate_selection_callback
    selected = policy(
        CertificateSelectionContext(
            sender=config,
            target_host=config.target_host,
            local_certificates=config.client_certificates,
            remote_certificate=remote_certificate,
            acceptable_issuers=tuple(acceptable_issuers),
        )
    )
    logger.debug(
        "Selected client certificate for %s: %s",
        config.target_host,
        selected.cert_file if selected else None,
    )
    return selected


def load_trust_store(ca_file: str | None = None) -> list[x509.Certificate]:
    """
    Load trusted root certificates.

    With ca_file, the roots are read from that PEM bundle. Without it, the
    platform's default verify locations are used.

    Raises:
        CertificateLoadError: ca_file cannot be read or holds no certificate.
    """
    if ca_file is not None:
        try:
            with open(ca_file, "rb") as f:
                return x509.load_pem_x509_certificates(f.read())
        except (OSError, ValueError) as e:
            raise CertificateLoadError(ca_file, str(e)) from e
    return list(_system_trust_store())


@functools.lru_cache(maxsize=1)
def _system_trust_store() -> tuple[x509.Certificate, ...]:
    paths = ssl.get_default_verify_paths()
    files = [p for p in (paths.cafile, paths.openssl_cafile) if p and os.path.isfile(p)]
    for capath in (paths.capath, paths.openssl_capath):
        if capath and os.path.isdir(capath):
            files.extend(
                os.path.join(capath, name)
                for name in sorted(os.listdir(capath))
                if os.path.isfile(os.path.join(capath, name))
            )

    roots: dict[bytes, x509.Certificate] = {}
    for path in files:
        try:
            with open(path, "rb") as f:
                certs = x509.load_pem_x509_certificates(f.read())
        except (OSError, ValueError):
            # Hash links and non-PEM files share the directory
            continue
        for cert in certs:
            roots.setdefault(cert.fingerprint(hashes.SHA256()), cert)

    logger.debug("Loaded %d trusted roots from the system store", len(roots))
    return tuple(roots.values())


def load_crls(crl_files: Sequence[str]) -> list[x509.CertificateRevocationList]:
    """
    Load certificate revocation lists, PEM or DER encoded.

    Raises:
        CertificateLoadError: A file cannot be read or parsed.
    """
    crls = []
    for path in crl_files:
        try:
            with open(path, "rb") as f:
                data = f.read()
            if data.lstrip().startswith(b"-----BEGIN"):
                crls.append(x509.load_pem_x509_crl(data))
            else:
                crls.append(x509.load_der_x509_crl(data))
        except (OSError, ValueError) as e:
            raise CertificateLoadError(path, str(e)) from e
    return crls


def check_policy_errors(
    target_host: str | None,
    certificate: x509.Certificate | None,
    now: datetime | None = None,
    *,
    trust_store: Sequence[x509.Certificate] | None = None,
    intermediates: Sequence[x509.Certificate] = (),
    check_revocation: bool = False,
    crls: Sequence[x509.CertificateRevocationList] = (),
) -> SslPolicyErrors:
    """
    Run the baseline checks on a server certificate.

    REMOTE_CERTIFICATE_CHAIN_ERRORS covers a certificate that is expired or
    not yet valid, self-signed, not chained to a root in trust_store, or,
    when check_revocation is set, revoked or without a usable CRL from its
    issuer. A leaf listed in trust_store itself is trusted as is. A missing
    target host is not checked for a name mismatch.

    Args:
        target_host: Name the certificate must identify.
        certificate: The server's leaf certificate.
        now: Validation time, the current time when None.
        trust_store: Trusted roots, the system store when None.
        intermediates: Extra certificates the server sent with the leaf.
        check_revocation: Whether revocation status must be checked.
        crls: Revocation lists available for that check.
    """
    if certificate is None:
        return SslPolicyErrors.REMOTE_CERTIFICATE_NOT_AVAILABLE

    errors = SslPolicyErrors.NONE
    name_matches = not target_host or _matches_host(certificate, target_host)
    if not name_matches:
        errors |= SslPolicyErrors.REMOTE_CERTIFICATE_NAME_MISMATCH

    now = now or datetime.now(timezone.utc)
    roots = load_trust_store() if trust_store is None else list(trust_store)

    if not certificate.not_valid_before_utc <= now <= certificate.not_valid_after_utc:
        errors |= SslPolicyErrors.REMOTE_CERTIFICATE_CHAIN_ERRORS
    elif certificate in roots:
        pass
    elif certificate.issuer == certificate.subject:
        errors |= SslPolicyErrors.REMOTE_CERTIFICATE_CHAIN_ERRORS
    elif not _chains_to_root(
        certificate,
        intermediates,
        roots,
        target_host if target_host and name_matches else None,
        now,
    ):
        errors |= SslPolicyErrors.REMOTE_CERTIFICATE_CHAIN_ERRORS

    if check_revocation and not _is_known_unrevoked(
        certificate, [*intermediates, *roots], crls, now
    ):
        errors |= SslPolicyErrors.REMOTE_CERTIFICATE_CHAIN_ERRORS

    return errors


def build_validation_context(
    config: ClientSslConfiguration,
    ssl_sock: ssl.SSLSocket,
    *,
    trust_store: Sequence[x509.Certificate] | None = None,
    crls: Sequence[x509.CertificateRevocationList] = (),
) -> CertificateValidationContext:
    """
    Collect the server certificate chain and its policy errors from a connected socket.

    The chain holds everything the server sent (Python 3.13+), or just the
    leaf on interpreters without SSLSocket.get_unverified_chain().
    """
    chain = _peer_chain(ssl_sock)
    certificate = chain[0] if chain else None
    return CertificateValidationContext(
        sender=config,
        certificate=certificate,
        chain=chain,
        policy_errors=check_policy_errors(
            config.target_host,
            certificate,
            trust_store=trust_store,
            intermediates=chain[1:],
            check_revocation=config.check_certificate_revocation,
            crls=crls,
        ),
    )


def apply_validation_policy(
    config: ClientSslConfiguration,
    context: CertificateValidationContext,
) -> bool:
    """Return the validation policy's decision for context."""
    if config.uses_insecure_default:
        logger.warning(
            "No server certificate validation policy set for %s; accepting any certificate",
            config.target_host,
        )

    accepted = bool(config.server_certificate_validation_callback(context))
    logger.debug(
        "Server certificate for %s %s (policy errors: %r)",
        config.target_host,
        "accepted" if accepted else "rejected",
        context.policy_errors,
    )
    return accepted


def validate_server_certificate(
    config: ClientSslConfiguration,
    ssl_sock: ssl.SSLSocket,
    *,
    trust_store: Sequence[x509.Certificate] | None = None,
    crls: Sequence[x509.CertificateRevocationList] = (),
) -> bool:
    """
    Apply the validation policy to the certificate of a connected socket.

    Returns the policy's decision; the caller fails the connection on False.
    """
    context = build_validation_context(config, ssl_sock, trust_store=trust_store, crls=crls)
    return apply_validation_policy(config, context)


def _peer_chain(ssl_sock: ssl.SSLSocket) -> tuple[x509.Certificate, ...]:
    get_chain = getattr(ssl_sock, "get_unverified_chain", None)
    ders = get_chain() if get_chain is not None else None
    if not ders:
        der = ssl_sock.getpeercert(binary_form=True)
        ders = [der] if der else []
    return tuple(x509.load_der_x509_certificate(der) for der in ders)


def _chains_to_root(
    certificate: x509.Certificate,
    intermediates: Sequence[x509.Certificate],
    roots: Sequence[x509.Certificate],
    host: str | None,
    now: datetime,
) -> bool:
    """Build and verify a path from certificate to one of roots."""
    if not roots:
        return False
    # A name the certificate carries is used when host does not match, so
    # a mismatch is only reported once.
    try:
        subject = _verification_subject(certificate, host)
        if subject is None:
            return False
        verifier = (
            PolicyBuilder()
            .store(Store(list(roots)))
            .time(now.astimezone(timezone.utc).replace(tzinfo=None))
            .build_server_verifier(subject)
        )
    except ValueError as e:
        logger.debug("Cannot verify %s: %s", certificate.subject.rfc4514_string(), e)
        return False

    try:
        verifier.verify(certificate, list(intermediates))
    except VerificationError as e:
        logger.debug("Chain verification failed for %s: %s", certificate.subject.rfc4514_string(), e)
        return False
    return True


def _verification_subject(
    certificate: x509.Certificate,
    host: str | None,
) -> x509.DNSName | x509.IPAddress | None:
    if host:
        try:
            return x509.IPAddress(ipaddress.ip_address(host))
        except ValueError:
            return x509.DNSName(host.lower().rstrip("."))

    try:
        san = certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return None
    addresses = san.get_values_for_type(x509.IPAddress)
    if addresses:
        return x509.IPAddress(addresses[0])
    names = san.get_values_for_type(x509.DNSName)
    if names:
        name = names[0]
        return x509.DNSName("wildcard" + name[1:] if name.startswith("*.") else name)
    return None


def _is_known_unrevoked(
    certificate: x509.Certificate,
    issuers: Sequence[x509.Certificate],
    crls: Sequence[x509.CertificateRevocationList],
    now: datetime,
) -> bool:
    """True only if a current, correctly signed CRL from the issuer does not list certificate."""
    checked = False
    for crl in crls:
        if crl.issuer != certificate.issuer:
            continue
        if crl.next_update_utc is not None and crl.next_update_utc < now:
            continue
        issuer = next((c for c in issuers if c.subject == crl.issuer), None)
        if issuer is None or not crl.is_signature_valid(issuer.public_key()):
            continue
        if crl.get_revoked_certificate_by_serial_number(certificate.serial_number) is not None:
            logger.debug("Certificate serial %x is revoked", certificate.serial_number)
            return False
        checked = True
    if not checked:
        logger.debug("No usable CRL for issuer %s", certificate.issuer.rfc4514_string())
    return checked


def _matches_host(certificate: x509.Certificate, host: str) -> bool:
    """Match host against subjectAltName entries, else the subject CN."""
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        ip = None

    try:
        san = certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        san = None

    if san is not None:
        if ip is not None:
            return ip in san.get_values_for_type(x509.IPAddress)
        return any(_match_dns_name(name, host) for name in san.get_values_for_type(x509.DNSName))

    if ip is not None:
        return False
    common_names = certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    return any(_match_dns_name(str(cn.value), host) for cn in common_names)


def _match_dns_name(pattern: str, host: str) -> bool:
    # A wildcard only stands for the whole left-most label.
    pattern = pattern.lower().rstrip(".")
    host = host.lower().rstrip(".")
    if pattern.startswith("*."):
        parts = host.split(".", 1)
        return len(parts) == 2 and parts[0] != "" and parts[1] == pattern[2:]
    return pattern == host
