"""
NoteNest Backend - Image Endpoint Tests
=========================================

What we test:
    ✅ Upload → 201 with path and absolute URL; note lists the image
    ✅ Non-image, oversized, and missing uploads leave no file and no row
    ✅ Uploading to another user's note is 404 and leaves no file
    ✅ Ids beyond the column range are 404
    ✅ Image delete is owner-scoped; note delete removes every file
    ✅ Stored files are served back under /uploads
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notenest.config import settings
from notenest.services.storage import LocalFileStorage

NOTES = "/api/notes"


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def image_file(content: bytes, name: str = "photo.png", mimetype: str = "image/png") -> dict:
    return {"image": (name, content, mimetype)}


async def _create_note(client, token: str, title: str = "With pictures") -> dict:
    response = await client.post(NOTES, json={"title": title, "content": ""}, headers=bearer(token))
    assert response.status_code == 201
    return response.json()


class TestImageUploadEndpoint:
    @pytest.mark.asyncio
    async def test_upload_then_fetch_note(
        self, test_client, make_user, memory_storage, sample_image_bytes
    ):
        _, token = await make_user("alice")
        note = await _create_note(test_client, token)

        response = await test_client.post(
            f"{NOTES}/{note['id']}/images",
            files=image_file(sample_image_bytes),
            headers=bearer(token),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Image uploaded successfully"
        image = body["image"]
        assert image["path"] == f"uploads/{image['filename']}"
        assert image["url"] == f"http://test/uploads/{image['filename']}"
        assert image["mimetype"] == "image/png"
        assert image["size"] == len(sample_image_bytes)
        assert image["filename"].endswith(".png")
        assert memory_storage.files[image["filename"]] == sample_image_bytes

        fetched = (await test_client.get(f"{NOTES}/{note['id']}", headers=bearer(token))).json()
        assert [i["id"] for i in fetched["images"]] == [image["id"]]
        assert fetched["images"][0]["url"] == image["url"]

    @pytest.mark.asyncio
    async def test_non_image_rejected_without_side_effects(
        self, test_client, make_user, memory_storage
    ):
        _, token = await make_user("alice")
        note = await _create_note(test_client, token)

        response = await test_client.post(
            f"{NOTES}/{note['id']}/images",
            files=image_file(b"plain text", name="notes.txt", mimetype="text/plain"),
            headers=bearer(token),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Not an image! Please upload only images."
        assert memory_storage.files == {}
        fetched = (await test_client.get(f"{NOTES}/{note['id']}", headers=bearer(token))).json()
        assert fetched["images"] == []

    @pytest.mark.asyncio
    async def test_oversized_rejected_with_413(
        self, test_client, make_user, memory_storage, monkeypatch
    ):
        monkeypatch.setattr(settings, "max_upload_size", 16)
        _, token = await make_user("alice")
        note = await _create_note(test_client, token)

        response = await test_client.post(
            f"{NOTES}/{note['id']}/images",
            files=image_file(b"x" * 17),
            headers=bearer(token),
        )

        assert response.status_code == 413
        assert memory_storage.files == {}

    @pytest.mark.asyncio
    async def test_missing_file_is_400(self, test_client, make_user, memory_storage):
        _, token = await make_user("alice")
        note = await _create_note(test_client, token)

        response = await test_client.post(
            f"{NOTES}/{note['id']}/images",
            files={"attachment": ("photo.png", b"data", "image/png")},
            headers=bearer(token),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No image uploaded"
        assert memory_storage.files == {}

    @pytest.mark.asyncio
    async def test_foreign_note_upload_is_404_and_leaves_no_file(
        self, test_client, make_user, memory_storage, sample_image_bytes
    ):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        note = await _create_note(test_client, alice)

        response = await test_client.post(
            f"{NOTES}/{note['id']}/images",
            files=image_file(sample_image_bytes),
            headers=bearer(bob),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Note not found"
        assert memory_storage.files == {}

    @pytest.mark.asyncio
    async def test_out_of_range_note_id_is_404_and_leaves_no_file(
        self, test_client, make_user, memory_storage, sample_image_bytes
    ):
        _, token = await make_user("alice")

        response = await test_client.post(
            f"{NOTES}/99999999999999999999/images",
            files=image_file(sample_image_bytes),
            headers=bearer(token),
        )

        assert response.status_code == 404
        assert memory_storage.files == {}


class TestImageDeleteEndpoint:
    @pytest.mark.asyncio
    async def test_delete_image(self, test_client, make_user, memory_storage, sample_image_bytes):
        _, token = await make_user("alice")
        note = await _create_note(test_client, token)
        image = (
            await test_client.post(
                f"{NOTES}/{note['id']}/images",
                files=image_file(sample_image_bytes),
                headers=bearer(token),
            )
        ).json()["image"]

        response = await test_client.delete(f"/api/images/{image['id']}", headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["message"] == "Image deleted successfully"
        assert memory_storage.files == {}

        again = await test_client.delete(f"/api/images/{image['id']}", headers=bearer(token))
        assert again.status_code == 404
        assert again.json()["message"] == "Image not found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("id_", ["2147483648", "99999999999999999999"])
    async def test_delete_out_of_range_image_id_is_404(self, test_client, make_user, id_):
        _, token = await make_user("alice")

        response = await test_client.delete(f"/api/images/{id_}", headers=bearer(token))

        assert response.status_code == 404
        assert response.json()["message"] == "Image not found"

    @pytest.mark.asyncio
    async def test_delete_foreign_image_is_404(
        self, test_client, make_user, memory_storage, sample_image_bytes
    ):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        note = await _create_note(test_client, alice)
        image = (
            await test_client.post(
                f"{NOTES}/{note['id']}/images",
                files=image_file(sample_image_bytes),
                headers=bearer(alice),
            )
        ).json()["image"]

        response = await test_client.delete(f"/api/images/{image['id']}", headers=bearer(bob))

        assert response.status_code == 404
        assert image["filename"] in memory_storage.files

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_count", [0, 1, 3])
    async def test_note_delete_removes_all_files(
        self, test_client, make_user, memory_storage, sample_image_bytes, image_count
    ):
        _, token = await make_user("alice")
        note = await _create_note(test_client, token)
        for _ in range(image_count):
            response = await test_client.post(
                f"{NOTES}/{note['id']}/images",
                files=image_file(sample_image_bytes),
                headers=bearer(token),
            )
            assert response.status_code == 201
        assert len(memory_storage.files) == image_count

        response = await test_client.delete(f"{NOTES}/{note['id']}", headers=bearer(token))

        assert response.status_code == 200
        assert memory_storage.files == {}


@pytest_asyncio.fixture
async def disk_client(database):
    """Client whose uploads land in UPLOAD_DIR, the directory mounted at /uploads."""
    from notenest.main import create_app
    from notenest.routes.dependencies import get_file_storage

    storage = LocalFileStorage(root=settings.upload_dir)
    app = create_app()
    app.dependency_overrides[get_file_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestUploadsMount:
    @pytest.mark.asyncio
    async def test_uploaded_file_served_at_its_path(self, disk_client, make_user, sample_image_bytes):
        _, token = await make_user("alice")
        note = await _create_note(disk_client, token)
        image = (
            await disk_client.post(
                f"{NOTES}/{note['id']}/images",
                files=image_file(sample_image_bytes),
                headers=bearer(token),
            )
        ).json()["image"]

        served = await disk_client.get(f"/{image['path']}")
        assert served.status_code == 200
        assert served.content == sample_image_bytes

        await disk_client.delete(f"/api/images/{image['id']}", headers=bearer(token))
        assert (await disk_client.get(f"/{image['path']}")).status_code == 404
