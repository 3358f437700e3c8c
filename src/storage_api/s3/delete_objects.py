"""Functions for deleting objects and buckets from S3--the "D" in CRUD."""

from typing import TYPE_CHECKING, Iterable, List

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

# DeleteObjects accepts at most this many keys per request
MAX_DELETE_BATCH_SIZE = 1000


def delete_s3_object(bucket_name: str, object_key: str, s3_client: "S3Client") -> None:
    """
    Delete a file from an S3 bucket.

    S3 does not report an error for keys that do not exist.
    """
    s3_client.delete_object(Bucket=bucket_name, Key=object_key)


def delete_s3_objects(bucket_name: str, object_keys: Iterable[str], s3_client: "S3Client") -> int:
    """
    Delete many keys with quiet batch deletes.

    :return: The number of keys sent for deletion.
    """
    deleted = 0
    batch: List[str] = []
    for key in object_keys:
        batch.append(key)
        if len(batch) == MAX_DELETE_BATCH_SIZE:
            _delete_batch(bucket_name, batch, s3_client)
            deleted += len(batch)
            batch = []
    if batch:
        _delete_batch(bucket_name, batch, s3_client)
        deleted += len(batch)
    return deleted


def _delete_batch(bucket_name: str, object_keys: List[str], s3_client: "S3Client") -> None:
    response = s3_client.delete_objects(
        Bucket=bucket_name,
        Delete={
            "Objects": [{"Key": key} for key in object_keys],
            "Quiet": True,
        },
    )
    # quiet mode only reports failures
    errors = response.get("Errors", [])
    if errors:
        first = errors[0]
        raise RuntimeError(
            f"Failed to delete {len(errors)} object(s) from {bucket_name}, "
            f"first: {first.get('Key')} ({first.get('Code')}: {first.get('Message')})"
        )


def delete_s3_bucket(bucket_name: str, s3_client: "S3Client") -> None:
    """Delete a bucket. S3 rejects buckets that still hold objects."""
    s3_client.delete_bucket(Bucket=bucket_name)
