from storage_api.s3.read_objects import (
    fetch_common_prefixes,
    fetch_s3_objects_metadata,
    fetch_s3_objects_using_page_token,
    iter_s3_objects,
)
from storage_api.s3.write_objects import upload_s3_object
from tests.consts import TEST_BUCKET_NAME


def put(s3_client, key: str, body: bytes = b"content") -> None:
    upload_s3_object(TEST_BUCKET_NAME, key, body, s3_client, content_type="text/plain")


def test__iter_s3_objects__follows_continuation_tokens(s3_client):
    keys = [f"docs/file{i:02d}.txt" for i in range(7)]
    for key in keys:
        put(s3_client, key)

    listed = [obj["Key"] for obj in iter_s3_objects(TEST_BUCKET_NAME, s3_client, prefix="docs/", page_size=3)]

    assert listed == keys


def test__iter_s3_objects__delimiter_skips_nested_keys(s3_client):
    put(s3_client, "docs/a.txt")
    put(s3_client, "docs/nested/b.txt")

    listed = [obj["Key"] for obj in iter_s3_objects(TEST_BUCKET_NAME, s3_client, prefix="docs/", delimiter="/")]

    assert listed == ["docs/a.txt"]


def test__fetch_common_prefixes(s3_client):
    for folder in ["a", "b", "c", "d"]:
        put(s3_client, f"{folder}/", b"")
    put(s3_client, "a/file.txt")
    put(s3_client, "top-level.txt")

    prefixes = fetch_common_prefixes(TEST_BUCKET_NAME, s3_client, page_size=2)

    assert prefixes == ["a/", "b/", "c/", "d/"]


def test__single_pages(s3_client):
    keys = [f"file{i}.txt" for i in range(5)]
    for key in keys:
        put(s3_client, key)

    first_page, token = fetch_s3_objects_metadata(TEST_BUCKET_NAME, s3_client, max_keys=3)
    assert [obj["Key"] for obj in first_page] == keys[:3]
    assert token

    second_page, token = fetch_s3_objects_using_page_token(TEST_BUCKET_NAME, token, s3_client, max_keys=3)
    assert [obj["Key"] for obj in second_page] == keys[3:]
    assert token is None
