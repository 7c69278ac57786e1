# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Shared fixtures: throwaway certificates generated with cryptography."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


@dataclass
class IssuedCertificate:
    certificate: x509.Certificate
    key: ec.EllipticCurvePrivateKey
    cert_file: str
    key_file: str


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _write(directory: Path, stem: str, cert: x509.Certificate, key: ec.EllipticCurvePrivateKey) -> tuple[str, str]:
    cert_path = directory / f"{stem}.crt"
    key_path = directory / f"{stem}.key"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return str(cert_path), str(key_path)


def _key_usage(ca: bool) -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=True,
        content_commitment=False,
        key_encipherment=False,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=ca,
        crl_sign=ca,
        encipher_only=False,
        decipher_only=False,
    )


@pytest.fixture
def issue_certificate(tmp_path: Path):
    """
    Factory issuing a certificate.

    Without an issuer the certificate is self-signed; with one it is signed
    by that issuer's key. Extensions follow the web PKI profile that
    cryptography's path validation enforces.
    """
    counter = iter(range(1000))

    def issue(
        common_name: str = "example.com",
        dns_names: list[str] | None = None,
        ip_addresses: list[str] | None = None,
        issuer: IssuedCertificate | None = None,
        not_before: datetime | None = None,
        not_after: datetime | None = None,
        ca: bool = False,
    ) -> IssuedCertificate:
        now = datetime.now(timezone.utc)
        key = ec.generate_private_key(ec.SECP256R1())
        builder = (
            x509.CertificateBuilder()
            .subject_name(_name(common_name))
            .issuer_name(issuer.certificate.subject if issuer else _name(common_name))
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before or now - timedelta(days=1))
            .not_valid_after(not_after or now + timedelta(days=30))
            .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
            .add_extension(_key_usage(ca), critical=True)
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        )
        if issuer:
            builder = builder.add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer.key.public_key()),
                critical=False,
            )
        alt_names: list[x509.GeneralName] = [x509.DNSName(n) for n in dns_names or []]
        alt_names += [x509.IPAddress(ipaddress.ip_address(a)) for a in ip_addresses or []]
        if alt_names:
            builder = builder.add_extension(x509.SubjectAlternativeName(alt_names), critical=False)
        cert = builder.sign(issuer.key if issuer else key, hashes.SHA256())
        cert_file, key_file = _write(tmp_path, f"cert{next(counter)}", cert, key)
        return IssuedCertificate(cert, key, cert_file, key_file)

    return issue


@pytest.fixture
def issue_crl(tmp_path: Path):
    """Factory writing a PEM CRL signed by issuer that lists revoked."""
    counter = iter(range(1000))

    def issue(
        issuer: IssuedCertificate,
        revoked: tuple[IssuedCertificate, ...] | list[IssuedCertificate] = (),
        next_update: datetime | None = None,
        signer: IssuedCertificate | None = None,
    ) -> tuple[x509.CertificateRevocationList, str]:
        now = datetime.now(timezone.utc)
        builder = (
            x509.CertificateRevocationListBuilder()
            .issuer_name(issuer.certificate.subject)
            .last_update(now - timedelta(days=2))
            .next_update(next_update or now + timedelta(days=7))
        )
        for cert in revoked:
            builder = builder.add_revoked_certificate(
                x509.RevokedCertificateBuilder()
                .serial_number(cert.certificate.serial_number)
                .revocation_date(now - timedelta(minutes=5))
                .build()
            )
        crl = builder.sign((signer or issuer).key, hashes.SHA256())
        path = tmp_path / f"crl{next(counter)}.pem"
        path.write_bytes(crl.public_bytes(serialization.Encoding.PEM))
        return crl, str(path)

    return issue


@pytest.fixture
def ca_certificate(issue_certificate) -> IssuedCertificate:
    return issue_certificate("Test Root CA", ca=True)


@pytest.fixture
def server_certificate(issue_certificate, ca_certificate) -> IssuedCertificate:
    """A valid CA-issued certificate for localhost and 127.0.0.1."""
    return issue_certificate(
        "localhost",
        dns_names=["localhost"],
        ip_addresses=["127.0.0.1"],
        issuer=ca_certificate,
    )


@pytest.fixture
def intermediate_chain(issue_certificate, ca_certificate, tmp_path: Path):
    """
    A leaf for localhost issued by an intermediate CA under ca_certificate.

    Returns (leaf, intermediate, chain_file) where chain_file holds the leaf
    followed by the intermediate, as a server would send them.
    """
    intermediate = issue_certificate("Test Intermediate CA", issuer=ca_certificate, ca=True)
    leaf = issue_certificate(
        "localhost",
        dns_names=["localhost"],
        ip_addresses=["127.0.0.1"],
        issuer=intermediate,
    )
    chain_file = tmp_path / "chain.crt"
    chain_file.write_bytes(
        leaf.certificate.public_bytes(serialization.Encoding.PEM)
        + intermediate.certificate.public_bytes(serialization.Encoding.PEM)
    )
    return leaf, intermediate, str(chain_file)
