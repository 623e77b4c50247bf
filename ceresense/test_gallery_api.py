import os
import unittest
from unittest import mock

from sqlalchemy.exc import OperationalError

from ceresense.models.user import UserRole
from ceresense.services.gallery_service import gallery_service
from ceresense.testing import ApiHarness

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class GalleryApiTestCase(unittest.TestCase):
    def setUp(self):
        self.api = ApiHarness()
        self.client = self.api.client
        self.editor = self.api.register_with_role("eddie", UserRole.EDITOR)
        self.admin = self.api.register_with_role("root", UserRole.ADMIN)

    def tearDown(self):
        self.api.close()

    def upload(self, session=None, filename="photo.png", content_type="image/png", **fields):
        form = {"title": "Robotics day", "date": "2024-05-01", "category": "events"}
        form.update(fields)
        return self.client.post(
            "/gallery",
            data=form,
            files={"image": (filename, PNG_BYTES, content_type)},
            headers=self.api.auth_header(session or self.editor),
        )

    def create_item(self, **fields) -> dict:
        resp = self.upload(**fields)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["data"]

    def stored_path(self, item: dict) -> str:
        return os.path.join(self.api.upload_dir.name, item["imageUrl"].removeprefix("/uploads/"))


class TestUpload(GalleryApiTestCase):
    def test_upload_stores_file_and_item(self):
        item = self.create_item(tags="robots, kids", featured="true")
        self.assertTrue(item["imageUrl"].startswith("/uploads/gallery/gallery-"))
        self.assertTrue(item["imageUrl"].endswith(".png"))
        self.assertTrue(os.path.isfile(self.stored_path(item)))
        self.assertEqual(item["tags"], ["robots", "kids"])
        self.assertTrue(item["featured"])
        self.assertEqual(item["status"], "pending")
        self.assertEqual(item["uploadedBy"]["id"], self.editor["user"]["id"])

    def test_html_declared_as_png_is_stored_as_png(self):
        item = self.create_item(filename="evil.html")
        self.assertTrue(item["imageUrl"].endswith(".png"))
        self.assertTrue(os.path.isfile(self.stored_path(item)))

    def test_failed_insert_removes_stored_file(self):
        failure = OperationalError("INSERT INTO gallery", {}, Exception("database is locked"))
        with mock.patch.object(gallery_service, "create_item", side_effect=failure):
            resp = self.upload()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(os.listdir(os.path.join(self.api.upload_dir.name, "gallery")), [])

    def test_uploads_mount_answers_before_first_upload(self):
        self.assertEqual(self.client.get("/uploads/gallery/missing.png").status_code, 404)

    def test_tags_accept_json_array(self):
        item = self.create_item(tags='["a", "b"]')
        self.assertEqual(item["tags"], ["a", "b"])

    def test_missing_image(self):
        resp = self.client.post("/gallery", data={"title": "x", "date": "2024-01-01"},
                                headers=self.api.auth_header(self.editor))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["code"], "INVALID_FILE")

    def test_rejects_non_image(self):
        resp = self.upload(filename="notes.txt", content_type="text/plain")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["code"], "INVALID_FILE")

    def test_missing_title_is_validation_error(self):
        resp = self.upload(title="  ")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["error"]["details"][0]["field"], "title")

    def test_plain_user_cannot_upload(self):
        reader = self.api.register("rita")
        self.assertEqual(self.upload(session=reader).status_code, 403)


class TestQueries(GalleryApiTestCase):
    def setUp(self):
        super().setUp()
        self.robots = self.create_item(title="Robots", tags="robots", status="active", featured="1")
        self.grads = self.create_item(title="Graduation", category="graduation", tags="ceremony",
                                      status="active")
        self.draft = self.create_item(title="Draft robots", tags="robots")

    def titles(self, resp) -> set:
        return {i["title"] for i in resp.json()["data"]}

    def test_list_filters(self):
        self.assertEqual(self.client.get("/gallery").json()["meta"]["total"], 3)
        self.assertEqual(self.titles(self.client.get("/gallery", params={"tags": "robots"})),
                         {"Robots", "Draft robots"})
        self.assertEqual(self.titles(self.client.get("/gallery", params={"status": "pending"})),
                         {"Draft robots"})
        self.assertEqual(self.titles(self.client.get("/gallery", params={"category": "graduation"})),
                         {"Graduation"})
        self.assertEqual(self.titles(self.client.get("/gallery", params={"search": "robots"})),
                         {"Robots", "Draft robots"})

    def test_page_meta(self):
        body = self.client.get("/gallery", params={"limit": 2, "page": 1}).json()
        self.assertEqual(len(body["data"]), 2)
        self.assertEqual(body["meta"], {
            "page": 1, "limit": 2, "total": 3, "totalPages": 2, "hasNext": True, "hasPrev": False,
        })
        last = self.client.get("/gallery", params={"limit": 2, "page": 2}).json()
        self.assertEqual(len(last["data"]), 1)
        self.assertFalse(last["meta"]["hasNext"])
        self.assertTrue(last["meta"]["hasPrev"])

    def test_featured_and_category_only_show_active(self):
        self.assertEqual(self.titles(self.client.get("/gallery/featured")), {"Robots"})
        self.assertEqual(self.titles(self.client.get("/gallery/category/events")), {"Robots"})

    def test_counters(self):
        self.client.put(f"/gallery/{self.robots['id']}/views")
        resp = self.client.put(f"/gallery/{self.robots['id']}/downloads")
        data = resp.json()["data"]
        self.assertEqual((data["views"], data["downloads"]), (1, 1))

    def test_status_and_featured_toggle(self):
        headers = self.api.auth_header(self.editor)
        resp = self.client.put(f"/gallery/{self.draft['id']}/status", json={"status": "archived"},
                               headers=headers)
        self.assertEqual(resp.json()["data"]["status"], "archived")

        resp = self.client.put(f"/gallery/{self.robots['id']}/featured", headers=headers)
        self.assertFalse(resp.json()["data"]["featured"])

    def test_update(self):
        resp = self.client.put(f"/gallery/{self.grads['id']}", json={"title": "Class of 2024"},
                               headers=self.api.auth_header(self.editor))
        self.assertEqual(resp.json()["data"]["title"], "Class of 2024")
        self.assertEqual(resp.json()["data"]["category"], "graduation")

    def test_stats(self):
        stats = self.client.get("/gallery/stats").json()["data"]
        self.assertEqual(stats["total"], 3)
        self.assertEqual(stats["active"], 2)
        self.assertEqual(stats["pending"], 1)
        self.assertEqual(stats["featured"], 1)

        categories = {c["category"]: c["count"]
                      for c in self.client.get("/gallery/categories/stats").json()["data"]}
        self.assertEqual(categories, {
            "learning": 0, "projects": 0, "events": 2, "workshops": 0, "graduation": 1,
        })

    def test_unknown_item(self):
        self.assertEqual(self.client.get("/gallery/nope").status_code, 404)


class TestDelete(GalleryApiTestCase):
    def test_editor_cannot_delete(self):
        item = self.create_item()
        resp = self.client.delete(f"/gallery/{item['id']}", headers=self.api.auth_header(self.editor))
        self.assertEqual(resp.status_code, 403)

    def test_admin_delete_removes_file(self):
        item = self.create_item()
        path = self.stored_path(item)
        resp = self.client.delete(f"/gallery/{item['id']}", headers=self.api.auth_header(self.admin))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(os.path.exists(path))
        self.assertEqual(self.client.get(f"/gallery/{item['id']}").status_code, 404)


if __name__ == "__main__":
    unittest.main()
