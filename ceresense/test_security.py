import io
import os
import tempfile
import unittest
from datetime import timedelta

from fastapi import UploadFile
from starlette.datastructures import Headers

from ceresense.schemas.auth import (
    RegisterRequest, ResetPasswordRequest, validate_register, validate_reset_password,
)
from ceresense.schemas.gallery import parse_bool, parse_tags
from ceresense.testing import fast_hasher
from ceresense.utils.exceptions import (
    InvalidFileException, TokenExpiredException, UnauthorizedException,
)
from ceresense.utils.security import OtpGenerator, TokenIssuer, utcnow
from ceresense.utils.storage import FileStorage


class TestPasswordHasher(unittest.TestCase):
    def test_hash_and_verify(self):
        digest = fast_hasher.hash("Passw0rd!")
        self.assertNotEqual(digest, "Passw0rd!")
        self.assertTrue(fast_hasher.verify("Passw0rd!", digest))
        self.assertFalse(fast_hasher.verify("passw0rd!", digest))

    def test_salted(self):
        self.assertNotEqual(fast_hasher.hash("Passw0rd!"), fast_hasher.hash("Passw0rd!"))

    def test_garbage_digest_does_not_verify(self):
        self.assertFalse(fast_hasher.verify("Passw0rd!", "not-a-bcrypt-hash"))


class TestTokenIssuer(unittest.TestCase):
    def setUp(self):
        self.issuer = TokenIssuer(secret_key="unit-secret", expire_minutes=5)

    def test_round_trip_claims(self):
        token = self.issuer.sign({"sub": 42, "username": "alice", "role": "admin"})
        claims = self.issuer.verify(token)
        self.assertEqual(claims["sub"], "42")
        self.assertEqual(claims["username"], "alice")
        self.assertEqual(claims["role"], "admin")
        self.assertEqual(claims["type"], "access")

    def test_expired(self):
        token = TokenIssuer(secret_key="unit-secret", expire_minutes=-1).sign({"sub": "1"})
        with self.assertRaises(TokenExpiredException):
            self.issuer.verify(token)

    def test_wrong_secret(self):
        token = TokenIssuer(secret_key="other-secret").sign({"sub": "1"})
        with self.assertRaises(UnauthorizedException):
            self.issuer.verify(token)

    def test_garbage(self):
        with self.assertRaises(UnauthorizedException):
            self.issuer.verify("not.a.token")


class TestOtpGenerator(unittest.TestCase):
    def test_codes_are_six_digits(self):
        otps = OtpGenerator(length=6, expire_minutes=10)
        for _ in range(200):
            code = otps.generate()
            self.assertRegex(code, r"^[0-9]{6}$")
            self.assertTrue(100000 <= int(code) <= 999999)

    def test_expiry(self):
        now = utcnow()
        self.assertEqual(OtpGenerator(expire_minutes=10).expiry(now), now + timedelta(minutes=10))


class TestValidators(unittest.TestCase):
    def test_valid_registration(self):
        data = RegisterRequest(fullName="Alice", username="alice", email="alice@x.com",
                               password="Passw0rd!", confirmPassword="Passw0rd!")
        self.assertEqual(validate_register(data), [])

    def test_empty_registration_reports_every_field(self):
        fields = [e["field"] for e in validate_register(RegisterRequest())]
        self.assertEqual(fields, ["fullName", "username", "email", "password", "confirmPassword"])

    def test_short_password(self):
        errors = validate_register(RegisterRequest(
            fullName="Alice", username="alice", email="alice@x.com",
            password="Ab1!", confirmPassword="Ab1!",
        ))
        self.assertEqual([e["field"] for e in errors], ["password"])
        self.assertIn("at least 8", errors[0]["message"])

    def test_reset_requires_otp_and_strong_password(self):
        errors = validate_reset_password(ResetPasswordRequest(email="alice@x.com", newPassword="weakweak"))
        self.assertEqual({e["field"] for e in errors}, {"otp", "newPassword"})


class TestFormCoercion(unittest.TestCase):
    def test_parse_tags(self):
        self.assertEqual(parse_tags(None), [])
        self.assertEqual(parse_tags(["a", " b ", ""]), ["a", "b"])
        self.assertEqual(parse_tags('["x", "y"]'), ["x", "y"])
        self.assertEqual(parse_tags("x, y,,z"), ["x", "y", "z"])

    def test_parse_bool(self):
        for truthy in (True, "true", "1", "Yes", "on"):
            self.assertTrue(parse_bool(truthy))
        for falsy in (False, None, "", "false", "0", "no"):
            self.assertFalse(parse_bool(falsy))


def make_upload(filename: str, content: bytes, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestFileStorage(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.storage = FileStorage(base_dir=self.tmp.name, max_size=16)

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_and_delete(self):
        url = self.storage.save(make_upload("pic.PNG", b"img", "image/png"), "blog")
        self.assertTrue(url.startswith("/uploads/blog/blog-"))
        self.assertTrue(url.endswith(".png"))
        path = os.path.join(self.tmp.name, url.removeprefix("/uploads/"))
        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"img")

        self.assertTrue(self.storage.delete(url))
        self.assertFalse(os.path.exists(path))
        self.assertFalse(self.storage.delete(url))

    def test_extension_follows_content_type(self):
        url = self.storage.save(make_upload("evil.html", b"<script>", "image/png"))
        self.assertTrue(url.endswith(".png"))
        self.assertFalse(any(p.suffix == ".html" for p in self.storage.base_dir.rglob("*")))

    def test_rejects_wrong_type(self):
        with self.assertRaises(InvalidFileException):
            self.storage.save(make_upload("doc.pdf", b"%PDF", "application/pdf"))

    def test_rejects_oversized(self):
        with self.assertRaises(InvalidFileException):
            self.storage.save(make_upload("big.jpg", b"x" * 17, "image/jpeg"))

    def test_delete_outside_upload_dir_is_refused(self):
        self.assertFalse(self.storage.delete("/uploads/../../etc/passwd"))


if __name__ == "__main__":
    unittest.main()
