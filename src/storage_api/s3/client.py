"""S3 client construction."""
import logging
from typing import TYPE_CHECKING, Any, Dict

import boto3

from storage_api.settings import Settings

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def create_s3_client(settings: Settings) -> "S3Client":
    """
    Create an S3 client from settings.

    Credentials fall back to boto3's own resolution chain (env, shared config,
    instance role) when they are not set explicitly.
    """
    client_kwargs: Dict[str, Any] = {
        'region_name': settings.aws_region
    }

    if settings.aws_access_key_id:
        client_kwargs['aws_access_key_id'] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        client_kwargs['aws_secret_access_key'] = settings.aws_secret_access_key

    # S3-compatible providers
    if settings.aws_endpoint_url:
        client_kwargs['endpoint_url'] = settings.aws_endpoint_url

    logger.info("Creating S3 client")
    logger.info(f"  Region: {settings.aws_region}")
    logger.info(f"  Endpoint: {settings.aws_endpoint_url or 'default'}")
    logger.info(f"  Mode: {settings.storage_mode}")

    try:
        return boto3.client('s3', **client_kwargs)
    except Exception as e:
        logger.error(f"Error creating s3 client: {str(e)}")
        raise
