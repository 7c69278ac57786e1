# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models for pywssl.

Provides validated connection tunables. The TLS configuration itself is
deliberately unvalidated; see ClientSslConfiguration.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ConnectionConfig(BaseModel):
    """Configuration for opening a secure client connection."""

    model_config = ConfigDict(validate_assignment=True)

    connect_timeout_ms: int = Field(
        default=10000,
        ge=100,
        le=300000,
        description="Timeout for TCP connect and TLS handshake",
    )
    prefer_ipv6: bool = Field(
        default=True,
        description="Try IPv6 addresses before IPv4 ones",
    )

    # Trust material for the baseline checks
    ca_file: str | None = Field(
        default=None,
        description="PEM bundle of trusted roots; the system store when unset",
    )
    crl_files: list[str] = Field(
        default_factory=list,
        description="PEM or DER CRLs consulted when revocation checking is enabled",
    )

    @property
    def connect_timeout(self) -> float:
        """Connect timeout in seconds."""
        return self.connect_timeout_ms / 1000.0
