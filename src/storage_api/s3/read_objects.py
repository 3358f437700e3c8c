"""Functions for reading objects and buckets from S3--the "R" in CRUD."""

from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

from storage_api.settings import MAX_LIST_PAGE_SIZE

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import GetObjectOutputTypeDef, HeadObjectOutputTypeDef, ObjectTypeDef


def list_buckets(s3_client: "S3Client") -> List[str]:
    """Names of all buckets owned by the client's credentials."""
    response = s3_client.list_buckets()
    return [bucket["Name"] for bucket in response.get("Buckets", [])]


def get_bucket_location(bucket_name: str, s3_client: "S3Client") -> Optional[str]:
    """
    Return the bucket's region.

    Buckets in us-east-1 report no location constraint, hence `None`.
    """
    response = s3_client.get_bucket_location(Bucket=bucket_name)
    return response.get("LocationConstraint")


def _list_kwargs(bucket_name: str, prefix: str, delimiter: Optional[str]) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"Bucket": bucket_name}
    if prefix:
        kwargs["Prefix"] = prefix
    if delimiter:
        kwargs["Delimiter"] = delimiter
    return kwargs


def iter_s3_list_pages(
    bucket_name: str,
    s3_client: "S3Client",
    prefix: str = "",
    delimiter: Optional[str] = None,
    page_size: int = MAX_LIST_PAGE_SIZE,
) -> Iterator[Dict[str, Any]]:
    """Yield every `list_objects_v2` page, following continuation tokens."""
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(
        **_list_kwargs(bucket_name, prefix, delimiter),
        PaginationConfig={"PageSize": page_size},
    )
    for page in pages:
        yield page


def iter_s3_objects(
    bucket_name: str,
    s3_client: "S3Client",
    prefix: str = "",
    delimiter: Optional[str] = None,
    page_size: int = MAX_LIST_PAGE_SIZE,
) -> Iterator["ObjectTypeDef"]:
    """Yield the metadata of every object under `prefix`, across all pages."""
    for page in iter_s3_list_pages(bucket_name, s3_client, prefix, delimiter, page_size):
        yield from page.get("Contents", [])


def fetch_common_prefixes(
    bucket_name: str,
    s3_client: "S3Client",
    prefix: str = "",
    delimiter: str = "/",
    page_size: int = MAX_LIST_PAGE_SIZE,
) -> List[str]:
    """Return every common prefix ("folder") directly under `prefix`."""
    prefixes: List[str] = []
    for page in iter_s3_list_pages(bucket_name, s3_client, prefix, delimiter, page_size):
        prefixes.extend(item["Prefix"] for item in page.get("CommonPrefixes", []))
    return prefixes


def fetch_s3_objects_metadata(
    bucket_name: str,
    s3_client: "S3Client",
    prefix: str = "",
    delimiter: Optional[str] = None,
    max_keys: int = MAX_LIST_PAGE_SIZE,
) -> Tuple[List["ObjectTypeDef"], Optional[str]]:
    """
    Fetch a single page of object metadata.

    :param bucket_name: The name of the S3 bucket.
    :param s3_client: The boto3 S3 client.
    :param prefix: Only return keys starting with this prefix.
    :param delimiter: Group keys sharing a prefix up to the delimiter into common prefixes.
    :param max_keys: The maximum number of keys in the page.
    :return: The objects of the page, and the token for the next page (None on the last page).
    """
    response = s3_client.list_objects_v2(
        **_list_kwargs(bucket_name, prefix, delimiter),
        MaxKeys=max_keys,
    )
    return response.get("Contents", []), response.get("NextContinuationToken")


def fetch_s3_objects_using_page_token(
    bucket_name: str,
    continuation_token: str,
    s3_client: "S3Client",
    prefix: str = "",
    delimiter: Optional[str] = None,
    max_keys: int = MAX_LIST_PAGE_SIZE,
) -> Tuple[List["ObjectTypeDef"], Optional[str]]:
    """
    Fetch the page of object metadata that `continuation_token` points to.

    :return: The objects of the page, and the token for the next page (None on the last page).
    """
    response = s3_client.list_objects_v2(
        **_list_kwargs(bucket_name, prefix, delimiter),
        ContinuationToken=continuation_token,
        MaxKeys=max_keys,
    )
    return response.get("Contents", []), response.get("NextContinuationToken")


def fetch_s3_object_metadata(bucket_name: str, object_key: str, s3_client: "S3Client") -> "HeadObjectOutputTypeDef":
    """`head_object` on a single key; raises `ClientError` (404) when it is absent."""
    return s3_client.head_object(Bucket=bucket_name, Key=object_key)


def fetch_s3_object(bucket_name: str, object_key: str, s3_client: "S3Client") -> "GetObjectOutputTypeDef":
    """
    Fetch an object.

    The returned `Body` is a botocore `StreamingBody`; nothing is read from the
    network until the caller consumes it.
    """
    return s3_client.get_object(Bucket=bucket_name, Key=object_key)
