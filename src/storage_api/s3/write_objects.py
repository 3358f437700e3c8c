"""Functions for writing objects and buckets to S3--the "C" and "U" in CRUD."""

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

# Buckets in this region must be created without a LocationConstraint
DEFAULT_REGION = "us-east-1"


def upload_s3_object(
    bucket_name: str,
    object_key: str,
    file_content: bytes,
    s3_client: "S3Client",
    content_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Upload a file to an S3 bucket.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param file_content: The content of the file to upload.
    :param s3_client: The boto3 S3 client.
    :param content_type: The MIME type of the file, e.g. "text/plain" for a text file.
    :return: The `put_object` response.
    """
    content_type = content_type or "application/octet-stream"
    return s3_client.put_object(
        Bucket=bucket_name,
        Key=object_key,
        Body=file_content,
        ContentType=content_type,
    )


def create_s3_bucket(bucket_name: str, s3_client: "S3Client", region: Optional[str] = None) -> None:
    """Create a bucket in `region` (defaults to the client's region)."""
    region = region or s3_client.meta.region_name or DEFAULT_REGION
    if region == DEFAULT_REGION:
        s3_client.create_bucket(Bucket=bucket_name)
    else:
        s3_client.create_bucket(
            Bucket=bucket_name,
            CreateBucketConfiguration={"LocationConstraint": region},
        )
