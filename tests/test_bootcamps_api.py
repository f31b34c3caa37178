"""
DevCamper API — Bootcamp Endpoint Tests
========================================

End-to-end through the ASGI app: CRUD, the access policy as seen over
HTTP, radius search and photo upload.
"""

import uuid

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

API = "/api/v1"


async def create_bootcamp(client, user, payload, **overrides):
    body = {**payload, **overrides}
    response = await client.post(f"{API}/bootcamps", json=body, headers=user.headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateBootcamp:
    @pytest.mark.asyncio
    async def test_publisher_creates_bootcamp(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload, headers=publisher.headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["user_id"] == publisher.id
        assert data["slug"] == "devworks-bootcamp"
        assert data["photo"] == "no-photo.jpg"
        assert data["average_cost"] is None
        assert data["location"]["type"] == "Point"
        assert data["location"]["coordinates"] == [-71.1054, 42.3505]
        assert data["location"]["zipcode"] == "02215"

    @pytest.mark.asyncio
    async def test_second_bootcamp_rejected(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.post(
            f"{API}/bootcamps",
            json={**bootcamp_payload, "name": "Another Bootcamp"},
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": f"The user with ID {publisher.id} has already published a bootcamp",
        }

    @pytest.mark.asyncio
    async def test_admin_may_create_several(self, client, make_user, bootcamp_payload):
        admin = await make_user("admin")
        await create_bootcamp(client, admin, bootcamp_payload)
        await create_bootcamp(client, admin, bootcamp_payload, name="Second Camp")

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected(self, client, make_user, bootcamp_payload):
        first = await make_user("publisher")
        second = await make_user("publisher")
        await create_bootcamp(client, first, bootcamp_payload)

        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload, headers=second.headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Duplicate field value entered"

    @pytest.mark.asyncio
    async def test_user_role_forbidden(self, client, make_user, bootcamp_payload):
        user = await make_user("user")
        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload, headers=user.headers)

        assert response.status_code == 403
        assert response.json()["error"] == "User role user is not authorized to access this route"

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self, client, bootcamp_payload):
        response = await client.post(f"{API}/bootcamps", json=bootcamp_payload)

        assert response.status_code == 401
        assert response.json()["error"] == "Not authorized to access this route"

    @pytest.mark.asyncio
    async def test_ungeocodable_address_rejected(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        response = await client.post(
            f"{API}/bootcamps",
            json={**bootcamp_payload, "address": "Nowhere at all"},
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Could not geocode Nowhere at all"

    @pytest.mark.asyncio
    async def test_validation_failure_is_400(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        response = await client.post(
            f"{API}/bootcamps",
            json={**bootcamp_payload, "website": "not a url"},
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert "Please use a valid URL with HTTP or HTTPS" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_markup_is_escaped(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        data = await create_bootcamp(
            client, publisher, bootcamp_payload, description="<script>alert(1)</script>"
        )
        assert data["description"] == "&lt;script&gt;alert(1)&lt;/script&gt;"


class TestReadBootcamps:
    @pytest.mark.asyncio
    async def test_get_by_id(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        created = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.get(f"{API}/bootcamps/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Devworks Bootcamp"

    @pytest.mark.asyncio
    async def test_missing_id_is_404(self, client):
        missing = uuid.uuid4()
        response = await client.get(f"{API}/bootcamps/{missing}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": f"Bootcamp not found with id of {missing}"}

    @pytest.mark.asyncio
    async def test_malformed_id_is_404(self, client):
        response = await client.get(f"{API}/bootcamps/not-an-id")

        assert response.status_code == 404
        assert response.json()["error"] == "Resource not found"

    @pytest.mark.asyncio
    async def test_list_pagination_and_total(self, client, make_user, bootcamp_payload):
        admin = await make_user("admin")
        for i in range(3):
            await create_bootcamp(client, admin, bootcamp_payload, name=f"Camp {i}")

        response = await client.get(f"{API}/bootcamps", params={"limit": 2, "sort": "name"})

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "3"
        body = response.json()
        assert body["count"] == 2
        assert [b["name"] for b in body["data"]] == ["Camp 0", "Camp 1"]
        assert body["pagination"]["next"] == {"page": 2, "limit": 2}
        assert "prev" not in body["pagination"]

    @pytest.mark.asyncio
    async def test_list_select_and_filter(self, client, make_user, bootcamp_payload):
        admin = await make_user("admin")
        await create_bootcamp(client, admin, bootcamp_payload, name="With Housing", housing=True)
        await create_bootcamp(client, admin, bootcamp_payload, name="No Housing", housing=False)

        response = await client.get(
            f"{API}/bootcamps", params={"housing": "true", "select": "name,housing"}
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["name"] == "With Housing"
        assert set(data[0]) == {"id", "name", "housing"}

    @pytest.mark.asyncio
    async def test_list_embeds_courses(self, client, make_user, bootcamp_payload, course_payload):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)
        await client.post(
            f"{API}/bootcamps/{camp['id']}/courses", json=course_payload, headers=publisher.headers
        )

        response = await client.get(f"{API}/bootcamps")

        courses = response.json()["data"][0]["courses"]
        assert [c["title"] for c in courses] == ["Front End Web Development"]


class TestUpdateDeleteBootcamp:
    @pytest.mark.asyncio
    async def test_owner_updates_and_name_reslugs(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}",
            json={"name": "ModernTech Bootcamp", "housing": False},
            headers=publisher.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["slug"] == "moderntech-bootcamp"
        assert data["housing"] is False

    @pytest.mark.asyncio
    async def test_address_change_is_geocoded(self, client, make_user, bootcamp_payload, fake_geocoder):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}",
            json={"address": "1 University Ave Lowell MA 01854"},
            headers=publisher.headers,
        )

        assert response.json()["data"]["location"]["city"] == "Lowell"
        assert fake_geocoder.queries[-1] == "1 University Ave Lowell MA 01854"

    @pytest.mark.asyncio
    async def test_non_owner_update_is_401_and_unchanged(self, client, make_user, bootcamp_payload):
        owner = await make_user("publisher")
        other = await make_user("publisher")
        camp = await create_bootcamp(client, owner, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}", json={"name": "Hijacked"}, headers=other.headers
        )

        assert response.status_code == 401
        assert response.json()["error"] == f"User {other.id} is not authorized to update this bootcamp"
        unchanged = await client.get(f"{API}/bootcamps/{camp['id']}")
        assert unchanged.json()["data"]["name"] == "Devworks Bootcamp"

    @pytest.mark.asyncio
    async def test_admin_updates_foreign_bootcamp(self, client, make_user, bootcamp_payload):
        owner = await make_user("publisher")
        admin = await make_user("admin")
        camp = await create_bootcamp(client, owner, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}", json={"phone": "555-0100"}, headers=admin.headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["phone"] == "555-0100"

    @pytest.mark.asyncio
    async def test_update_answers_after_commit(self, client, make_user, bootcamp_payload, monkeypatch):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        async def failing_commit(session):
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)
        response = await client.put(
            f"{API}/bootcamps/{camp['id']}", json={"housing": False}, headers=publisher.headers
        )
        monkeypatch.undo()

        assert response.status_code == 500
        fetched = await client.get(f"{API}/bootcamps/{camp['id']}")
        assert fetched.json()["data"]["housing"] is True

    @pytest.mark.asyncio
    async def test_not_found_reported_before_policy(self, client, make_user):
        stranger = await make_user("publisher")
        missing = uuid.uuid4()

        response = await client.put(
            f"{API}/bootcamps/{missing}", json={"name": "x"}, headers=stranger.headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_cascades(self, client, make_user, bootcamp_payload, course_payload):
        publisher = await make_user("publisher")
        reviewer = await make_user("user")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)
        course = (await client.post(
            f"{API}/bootcamps/{camp['id']}/courses", json=course_payload, headers=publisher.headers
        )).json()["data"]
        review = (await client.post(
            f"{API}/bootcamps/{camp['id']}/reviews",
            json={"title": "Great", "text": "Learned a lot", "rating": 9},
            headers=reviewer.headers,
        )).json()["data"]

        response = await client.delete(f"{API}/bootcamps/{camp['id']}", headers=publisher.headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}
        assert (await client.get(f"{API}/bootcamps/{camp['id']}")).status_code == 404
        assert (await client.get(f"{API}/courses/{course['id']}")).status_code == 404
        assert (await client.get(f"{API}/reviews/{review['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_delete_is_401(self, client, make_user, bootcamp_payload):
        owner = await make_user("publisher")
        other = await make_user("publisher")
        camp = await create_bootcamp(client, owner, bootcamp_payload)

        response = await client.delete(f"{API}/bootcamps/{camp['id']}", headers=other.headers)

        assert response.status_code == 401
        assert (await client.get(f"{API}/bootcamps/{camp['id']}")).status_code == 200


class TestRadiusSearch:
    @pytest.mark.asyncio
    async def test_only_bootcamps_inside_the_cap(self, client, make_user, bootcamp_payload):
        admin = await make_user("admin")
        await create_bootcamp(client, admin, bootcamp_payload, name="Boston Camp")
        await create_bootcamp(
            client, admin, bootcamp_payload, name="Lowell Camp", address="1 University Ave Lowell MA 01854"
        )
        await create_bootcamp(
            client, admin, bootcamp_payload, name="LA Camp", address="100 Main St Los Angeles CA 90012"
        )

        wide = await client.get(f"{API}/bootcamps/radius/02215/30")
        narrow = await client.get(f"{API}/bootcamps/radius/02215/10")

        assert wide.status_code == 200
        assert wide.json()["count"] == 2
        assert {b["name"] for b in wide.json()["data"]} == {"Boston Camp", "Lowell Camp"}
        assert [b["name"] for b in narrow.json()["data"]] == ["Boston Camp"]

    @pytest.mark.asyncio
    async def test_continental_radius_includes_everything(self, client, make_user, bootcamp_payload):
        admin = await make_user("admin")
        await create_bootcamp(client, admin, bootcamp_payload, name="Boston Camp")
        await create_bootcamp(
            client, admin, bootcamp_payload, name="LA Camp", address="100 Main St Los Angeles CA 90012"
        )

        response = await client.get(f"{API}/bootcamps/radius/02215/3000")

        assert response.json()["count"] == 2

    @pytest.mark.asyncio
    async def test_unknown_zipcode_is_400(self, client):
        response = await client.get(f"{API}/bootcamps/radius/00000/10")

        assert response.status_code == 400
        assert response.json()["error"] == "Could not geocode 00000"

    @pytest.mark.asyncio
    async def test_non_positive_distance_is_400(self, client):
        response = await client.get(f"{API}/bootcamps/radius/02215/0")
        assert response.status_code == 400


class TestPhotoUpload:
    @pytest.mark.asyncio
    async def test_upload_updates_bootcamp(self, client, make_user, bootcamp_payload, sample_image_bytes, settings):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}/photo",
            files={"file": ("campus.jpg", sample_image_bytes, "image/jpeg")},
            headers=publisher.headers,
        )

        assert response.status_code == 200
        name = f"photo_{camp['id']}.jpg"
        assert response.json() == {"success": True, "data": name}
        # The row is updated before the response is sent
        fetched = await client.get(f"{API}/bootcamps/{camp['id']}")
        assert fetched.json()["data"]["photo"] == name
        served = await client.get(f"/uploads/{name}")
        assert served.status_code == 200
        assert served.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_failed_commit_is_reported(
        self, client, make_user, bootcamp_payload, sample_image_bytes, monkeypatch
    ):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        async def failing_commit(session):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)
        response = await client.put(
            f"{API}/bootcamps/{camp['id']}/photo",
            files={"file": ("campus.jpg", sample_image_bytes, "image/jpeg")},
            headers=publisher.headers,
        )
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Server Error"}
        fetched = await client.get(f"{API}/bootcamps/{camp['id']}")
        assert fetched.json()["data"]["photo"] == "no-photo.jpg"

    @pytest.mark.asyncio
    async def test_missing_file(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.put(f"{API}/bootcamps/{camp['id']}/photo", headers=publisher.headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Please upload a file"

    @pytest.mark.asyncio
    async def test_non_image_leaves_bootcamp_untouched(self, client, make_user, bootcamp_payload, app_context):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}/photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Please upload an image file"
        fetched = await client.get(f"{API}/bootcamps/{camp['id']}")
        assert fetched.json()["data"]["photo"] == "no-photo.jpg"
        assert list(app_context.photos.upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_oversized_image_rejected(self, client, make_user, bootcamp_payload):
        publisher = await make_user("publisher")
        camp = await create_bootcamp(client, publisher, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}/photo",
            files={"file": ("big.jpg", b"x" * 1001, "image/jpeg")},
            headers=publisher.headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Please upload an image less than 1000"
        fetched = await client.get(f"{API}/bootcamps/{camp['id']}")
        assert fetched.json()["data"]["photo"] == "no-photo.jpg"

    @pytest.mark.asyncio
    async def test_non_owner_upload_rejected(self, client, make_user, bootcamp_payload, sample_image_bytes, app_context):
        owner = await make_user("publisher")
        other = await make_user("publisher")
        camp = await create_bootcamp(client, owner, bootcamp_payload)

        response = await client.put(
            f"{API}/bootcamps/{camp['id']}/photo",
            files={"file": ("campus.jpg", sample_image_bytes, "image/jpeg")},
            headers=other.headers,
        )

        assert response.status_code == 401
        assert list(app_context.photos.upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_missing_bootcamp_is_404(self, client, make_user, sample_image_bytes):
        publisher = await make_user("publisher")
        response = await client.put(
            f"{API}/bootcamps/{uuid.uuid4()}/photo",
            files={"file": ("campus.jpg", sample_image_bytes, "image/jpeg")},
            headers=publisher.headers,
        )
        assert response.status_code == 404
