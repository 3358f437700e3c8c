from fastapi import status
from fastapi.testclient import TestClient

from tests.consts import TEST_BUCKET_NAME

# Constants for testing
TEST_CONTAINER = "docs"
TEST_FILE_NAME = "readme.txt"
TEST_FILE_CONTENT = b"Hello, world!"
TEST_FILE_CONTENT_TYPE = "text/plain"
TEST_PDF_NAME = "test.pdf"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"


def create_container(client: TestClient, name: str = TEST_CONTAINER) -> None:
    response = client.post("/v1/containers/", json={"name": name})
    assert response.status_code == status.HTTP_200_OK


def upload_file(client: TestClient, container: str, name: str, content: bytes, content_type: str):
    return client.post(
        f"/v1/containers/{container}/upload",
        files={"file": (name, content, content_type)},
    )


def test__health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "storage_mode": "prefix", "bucket": TEST_BUCKET_NAME}


def test__create_container__happy_path(client: TestClient):
    response = client.post("/v1/containers/", json={"name": TEST_CONTAINER})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"name": TEST_CONTAINER}

    response = client.get(f"/v1/containers/{TEST_CONTAINER}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"name": TEST_CONTAINER}


def test__list_containers(client: TestClient):
    create_container(client, "alpha")
    create_container(client, "beta")

    response = client.get("/v1/containers/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [{"name": "alpha"}, {"name": "beta"}]


def test__upload_file__happy_path(client: TestClient):
    create_container(client)

    response = upload_file(client, TEST_CONTAINER, TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["container"] == TEST_CONTAINER
    assert body["name"] == TEST_FILE_NAME
    assert body["bucket"] == TEST_BUCKET_NAME
    assert body["key"] == f"{TEST_CONTAINER}/{TEST_FILE_NAME}"
    assert body["size"] == len(TEST_FILE_CONTENT)
    assert body["etag"] and '"' not in body["etag"]


def test__get_file_metadata(client: TestClient):
    create_container(client)
    upload_file(client, TEST_CONTAINER, TEST_PDF_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE)

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/files/{TEST_PDF_NAME}")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["name"] == TEST_PDF_NAME
    assert body["size"] == len(TEST_PDF_CONTENT)
    assert body["etag"]
    assert body["contentType"] == TEST_PDF_CONTENT_TYPE
    assert "lastModified" in body


def test__list_files(client: TestClient):
    create_container(client)
    upload_file(client, TEST_CONTAINER, TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)
    upload_file(client, TEST_CONTAINER, TEST_PDF_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE)

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/files")

    assert response.status_code == status.HTTP_200_OK
    files = response.json()
    assert sorted(f["name"] for f in files) == [TEST_FILE_NAME, TEST_PDF_NAME]
    sizes = {f["name"]: f["size"] for f in files}
    assert sizes[TEST_FILE_NAME] == len(TEST_FILE_CONTENT)
    assert all(set(f) == {"name", "lastModified", "etag", "size"} for f in files)


def test_list_files_with_pagination(client: TestClient):
    create_container(client)
    names = [f"file{i}.txt" for i in range(7)]
    for name in names:
        upload_file(client, TEST_CONTAINER, name, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)

    seen = []
    response = client.get(f"/v1/containers/{TEST_CONTAINER}/files", params={"page_size": 3})
    assert response.status_code == status.HTTP_200_OK
    seen.extend(f["name"] for f in response.json())
    while "x-next-page-token" in response.headers:
        response = client.get(
            f"/v1/containers/{TEST_CONTAINER}/files",
            params={"page_size": 3, "page_token": response.headers["x-next-page-token"]},
        )
        assert response.status_code == status.HTTP_200_OK
        seen.extend(f["name"] for f in response.json())

    assert sorted(seen) == names


def test__download_file(client: TestClient):
    create_container(client)
    upload_file(client, TEST_CONTAINER, TEST_PDF_NAME, TEST_PDF_CONTENT, TEST_PDF_CONTENT_TYPE)

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/download/{TEST_PDF_NAME}")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_PDF_CONTENT
    assert response.headers["content-type"] == TEST_PDF_CONTENT_TYPE
    assert response.headers["content-disposition"] == f'attachment; filename="{TEST_PDF_NAME}"'


def test__download_file__defaults_to_octet_stream(client: TestClient):
    create_container(client)
    client.post(
        f"/v1/containers/{TEST_CONTAINER}/upload",
        files={"file": ("blob", b"\x00\x01\x02")},
    )

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/download/blob")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == b"\x00\x01\x02"
    assert response.headers["content-type"] == "application/octet-stream"


def test__upload_then_download_large_file(client: TestClient):
    create_container(client)
    part_size = client.app.state.settings.upload_part_size
    content = bytes(range(256)) * ((part_size + part_size // 2) // 256)

    response = upload_file(client, TEST_CONTAINER, "large.bin", content, "application/octet-stream")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["size"] == len(content)

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/download/large.bin")
    assert response.status_code == status.HTTP_200_OK
    assert response.content == content


def test__delete_file(client: TestClient):
    create_container(client)
    upload_file(client, TEST_CONTAINER, TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)

    response = client.delete(f"/v1/containers/{TEST_CONTAINER}/files/{TEST_FILE_NAME}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/files/{TEST_FILE_NAME}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test__destroy_container(client: TestClient):
    create_container(client)
    for i in range(3):
        upload_file(client, TEST_CONTAINER, f"file{i}.txt", TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)

    response = client.delete(f"/v1/containers/{TEST_CONTAINER}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.get(f"/v1/containers/{TEST_CONTAINER}/files")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []

    response = client.get(f"/v1/containers/{TEST_CONTAINER}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test__bucket_mode__end_to_end(bucket_client: TestClient):
    response = bucket_client.post("/v1/containers/", json={"name": "bucket-per-container"})
    assert response.status_code == status.HTTP_200_OK

    response = upload_file(bucket_client, "bucket-per-container", TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bucket"] == "bucket-per-container"
    assert response.json()["key"] == TEST_FILE_NAME

    response = bucket_client.get("/v1/containers/bucket-per-container/files")
    assert [f["name"] for f in response.json()] == [TEST_FILE_NAME]

    response = bucket_client.get(f"/v1/containers/bucket-per-container/download/{TEST_FILE_NAME}")
    assert response.content == TEST_FILE_CONTENT

    response = bucket_client.get("/health")
    assert response.json()["storage_mode"] == "bucket"
