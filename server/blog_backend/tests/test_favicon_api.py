import io
import unittest

from PIL import Image

from blog_backend.config import Settings
from blog_backend.favicon import (
    FAVICON_ALLOWED_TYPES,
    FAVICON_CACHE_CONTROL,
    FAVICON_DIMENSION,
    FAVICON_MAX_SIZE,
    get_favicon_key,
    get_original_favicon_key,
)
from blog_backend.tests.fixtures import ADMIN_ID, USER_ID, ApiTestCase, auth


def make_png(size=(512, 512), color=(255, 0, 0)):
    output = io.BytesIO()
    Image.new("RGB", size, color).save(output, format="PNG")
    return output.getvalue()


class FaviconUploadTests(ApiTestCase):
    def upload(self, data, content_type="image/png", headers=None):
        return self.client.post(
            "/favicon",
            files={"file": ("favicon.png", data, content_type)},
            headers=headers if headers is not None else auth(ADMIN_ID),
        )

    def test_requires_authentication(self):
        response = self.upload(make_png(), headers={})
        self.assertEqual(response.status_code, 401)

    def test_requires_admin(self):
        response = self.upload(make_png(), headers=auth(USER_ID))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.storage.stored_objects, {})

    def test_admin_upload_stores_original_and_webp(self):
        original = make_png()
        response = self.upload(original)
        self.assertEqual(response.status_code, 200)

        webp = self.storage.stored_objects["images/favicon.webp"]
        self.assertEqual(self.storage.content_types["images/favicon.webp"], "image/webp")
        self.assertEqual(self.storage.stored_objects["images/favicon_original"], original)
        with Image.open(io.BytesIO(webp)) as img:
            self.assertEqual(img.format, "WEBP")
            self.assertLessEqual(max(img.size), FAVICON_DIMENSION)

    def test_rejects_oversized_file(self):
        response = self.upload(b"\0" * (FAVICON_MAX_SIZE + 1))
        self.assertEqual(response.status_code, 400)

    def test_rejects_disallowed_type(self):
        response = self.upload(b"hello", content_type="text/plain")
        self.assertEqual(response.status_code, 400)

    def test_rejects_unreadable_image(self):
        response = self.upload(b"not really a png")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.storage.stored_objects, {})


class FaviconReadTests(ApiTestCase):
    def test_missing_favicon(self):
        self.assertEqual(self.client.get("/favicon").status_code, 404)
        self.assertEqual(self.client.get("/favicon/original").status_code, 404)

    def test_serves_webp_with_cache_headers(self):
        self.storage.put_object("images/favicon.webp", b"webp-bytes", "image/webp")

        response = self.client.get("/favicon")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"webp-bytes")
        self.assertEqual(response.headers["content-type"], "image/webp")
        self.assertEqual(response.headers["cache-control"], FAVICON_CACHE_CONTROL)

    def test_serves_original_with_detected_type(self):
        original = make_png(size=(16, 16))
        self.storage.put_object("images/favicon_original", original, "image/png")

        response = self.client.get("/favicon/original")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, original)
        self.assertEqual(response.headers["content-type"], "image/png")

    def test_upload_then_read(self):
        self.client.post(
            "/favicon",
            files={"file": ("favicon.png", make_png(), "image/png")},
            headers=auth(ADMIN_ID),
        )
        response = self.client.get("/favicon")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "image/webp")


class FaviconKeyTests(unittest.TestCase):
    def test_allowed_types(self):
        self.assertEqual(
            sorted(FAVICON_ALLOWED_TYPES),
            ["image/gif", "image/jpeg", "image/png", "image/webp"],
        )

    def test_keys_with_folder(self):
        settings = Settings(s3_folder="images/")
        self.assertEqual(get_favicon_key(settings), "images/favicon.webp")
        self.assertEqual(get_original_favicon_key(settings), "images/favicon_original")

    def test_keys_without_folder(self):
        settings = Settings(s3_folder="")
        self.assertEqual(get_favicon_key(settings), "favicon.webp")
        self.assertEqual(get_original_favicon_key(settings), "favicon_original")


if __name__ == "__main__":
    unittest.main()
