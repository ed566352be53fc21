"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3

from speechcoach.config.settings import settings


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
) -> boto3.client:
    """Instantiate a boto3 client using configured credentials if available.

    Without explicit keys boto3 falls back to its default credential chain.
    """

    region = region_name or settings.polly.region
    client_kwargs: dict[str, Any] = {"region_name": region}
    configured_secret = settings.polly.secret_access_key
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
    elif settings.polly.access_key_id and configured_secret:
        client_kwargs["aws_access_key_id"] = settings.polly.access_key_id
        client_kwargs["aws_secret_access_key"] = configured_secret.get_secret_value()
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client"]
