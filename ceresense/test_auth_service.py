import unittest

from ceresense.models.user import User
from ceresense.repositories.user_repository import UserRepository
from ceresense.schemas.auth import (
    RegisterRequest, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from ceresense.services.auth_service import (
    AuthService, FORGOT_PASSWORD_MESSAGE, RESET_PASSWORD_MESSAGE,
)
from ceresense.testing import (
    Clock, FixedOtpGenerator, RecordingNotifier, fast_hasher, make_session_factory,
)
from ceresense.utils.exceptions import (
    DuplicateEmailException, DuplicateUsernameException, InvalidCredentialsException,
    InvalidOTPException, NotificationException, ValidationException,
)
from ceresense.utils.security import TokenIssuer


def register_request(username="alice", email="alice@x.com", password="Passw0rd!", **overrides):
    fields = {
        "fullName": "Alice Liddell",
        "username": username,
        "email": email,
        "password": password,
        "confirmPassword": password,
    }
    fields.update(overrides)
    return RegisterRequest(**fields)


class AuthServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.db = make_session_factory()()
        self.users = UserRepository(self.db)
        self.tokens = TokenIssuer(secret_key="test-secret")
        self.otps = FixedOtpGenerator("123456")
        self.notifier = RecordingNotifier()
        self.clock = Clock()
        self.auth = AuthService(
            self.users, fast_hasher, self.tokens, self.otps, self.notifier, clock=self.clock,
        )

    def tearDown(self):
        self.db.close()

    def stored(self, email="alice@x.com") -> User:
        user = self.users.find_by_email(email)
        self.db.refresh(user)
        return user


class TestRegister(AuthServiceTestCase):
    def test_register_returns_token_and_sanitized_user(self):
        result = self.auth.register(register_request())

        user = result["user"]
        self.assertEqual(user["username"], "alice")
        self.assertEqual(user["role"], "user")
        for hidden in ("password", "otpCode", "otpExpires", "resetPasswordToken"):
            self.assertNotIn(hidden, user)

        claims = self.tokens.verify(result["accessToken"])
        self.assertEqual(claims["sub"], user["id"])
        self.assertEqual(claims["username"], "alice")
        self.assertEqual(claims["role"], "user")

    def test_password_is_stored_hashed(self):
        self.auth.register(register_request())
        stored = self.stored()
        self.assertNotEqual(stored.password, "Passw0rd!")
        self.assertTrue(fast_hasher.verify("Passw0rd!", stored.password))

    def test_duplicate_email_rejected_regardless_of_username(self):
        self.auth.register(register_request())
        with self.assertRaises(DuplicateEmailException):
            self.auth.register(register_request(username="someone_else"))

    def test_email_checked_before_username(self):
        self.auth.register(register_request())
        with self.assertRaises(DuplicateEmailException):
            self.auth.register(register_request())

    def test_duplicate_username_rejected(self):
        self.auth.register(register_request())
        with self.assertRaises(DuplicateUsernameException):
            self.auth.register(register_request(email="other@x.com"))
        self.assertIsNone(self.users.find_by_email("other@x.com"))

    def test_store_constraint_catches_duplicates_missed_by_prechecks(self):
        self.users.create("Alice", "alice", "alice@x.com", "hash")
        with self.assertRaises(DuplicateEmailException):
            self.users.create("Alice Again", "alice2", "alice@x.com", "hash")
        with self.assertRaises(DuplicateUsernameException):
            self.users.create("Alice Again", "alice", "alice2@x.com", "hash")
        self.assertEqual(self.db.query(User).count(), 1)

    def test_validation_errors_are_collected(self):
        bad = register_request(username="al", email="not-an-email", password="short",
                               confirmPassword="different")
        with self.assertRaises(ValidationException) as ctx:
            self.auth.register(bad)
        fields = {d["field"] for d in ctx.exception.details}
        self.assertEqual(fields, {"username", "email", "password", "confirmPassword"})
        self.assertEqual(self.db.query(User).count(), 0)

    def test_password_strength_rules(self):
        for weak in ("alllowercase1", "ALLUPPERCASE1", "NoDigitsOrSymbols"):
            with self.assertRaises(ValidationException):
                self.auth.register(register_request(password=weak))
        self.auth.register(register_request(password="NoDigits!"))


class TestLogin(AuthServiceTestCase):
    def setUp(self):
        super().setUp()
        self.auth.register(register_request())

    def test_login_by_username_or_email(self):
        by_name = self.auth.login(LoginRequest(username="alice", password="Passw0rd!"))
        by_mail = self.auth.login(LoginRequest(username="alice@x.com", password="Passw0rd!"))
        self.assertEqual(by_name["user"]["id"], by_mail["user"]["id"])
        self.assertNotIn("password", by_name["user"])

    def test_wrong_password_and_unknown_user_are_indistinguishable(self):
        with self.assertRaises(InvalidCredentialsException) as wrong:
            self.auth.login(LoginRequest(username="alice", password="Wrong123!"))
        with self.assertRaises(InvalidCredentialsException) as missing:
            self.auth.login(LoginRequest(username="nobody", password="Passw0rd!"))
        self.assertEqual(wrong.exception.detail, missing.exception.detail)
        self.assertEqual(wrong.exception.status_code, missing.exception.status_code)


class TestPasswordRecovery(AuthServiceTestCase):
    def setUp(self):
        super().setUp()
        self.auth.register(register_request())

    def test_same_message_for_known_and_unknown_email(self):
        known = self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        unknown = self.auth.forgot_password(ForgotPasswordRequest(email="ghost@x.com"))
        self.assertEqual(known, unknown)
        self.assertEqual(known["message"], FORGOT_PASSWORD_MESSAGE)
        self.assertEqual(len(self.notifier.sent), 1)

    def test_otp_is_six_digits_with_ten_minute_expiry(self):
        self.otps.codes.clear()
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        stored = self.stored()
        self.assertRegex(stored.otpCode, r"^[0-9]{6}$")
        self.assertTrue(100000 <= int(stored.otpCode) <= 999999)
        self.assertIn(stored.otpCode, self.notifier.sent[0]["html"])
        self.assertEqual(stored.otpCode, self.otps.issued[0])

    def test_full_reset_scenario(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        result = self.auth.reset_password(
            ResetPasswordRequest(email="alice@x.com", otp="123456", newPassword="NewPass1!"))
        self.assertEqual(result["message"], RESET_PASSWORD_MESSAGE)

        stored = self.stored()
        self.assertIsNone(stored.otpCode)
        self.assertIsNone(stored.otpExpires)

        with self.assertRaises(InvalidCredentialsException):
            self.auth.login(LoginRequest(username="alice", password="Passw0rd!"))
        self.auth.login(LoginRequest(username="alice", password="NewPass1!"))

    def test_otp_can_only_be_used_once(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        request = ResetPasswordRequest(email="alice@x.com", otp="123456", newPassword="NewPass1!")
        self.auth.reset_password(request)
        with self.assertRaises(InvalidOTPException):
            self.auth.reset_password(request)

    def test_expired_otp_is_rejected(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        self.clock.advance(minutes=10, seconds=1)
        with self.assertRaises(InvalidOTPException):
            self.auth.reset_password(
                ResetPasswordRequest(email="alice@x.com", otp="123456", newPassword="NewPass1!"))

    def test_otp_valid_just_before_expiry(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        self.clock.advance(minutes=9, seconds=59)
        self.auth.reset_password(
            ResetPasswordRequest(email="alice@x.com", otp="123456", newPassword="NewPass1!"))

    def test_new_request_invalidates_previous_code(self):
        self.otps.codes = ["111111", "222222"]
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        with self.assertRaises(InvalidOTPException):
            self.auth.reset_password(
                ResetPasswordRequest(email="alice@x.com", otp="111111", newPassword="NewPass1!"))
        self.auth.reset_password(
            ResetPasswordRequest(email="alice@x.com", otp="222222", newPassword="NewPass1!"))

    def test_wrong_code_and_unknown_email_fail_the_same_way(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        with self.assertRaises(InvalidOTPException) as wrong_code:
            self.auth.reset_password(
                ResetPasswordRequest(email="alice@x.com", otp="654321", newPassword="NewPass1!"))
        with self.assertRaises(InvalidOTPException) as unknown:
            self.auth.reset_password(
                ResetPasswordRequest(email="ghost@x.com", otp="123456", newPassword="NewPass1!"))
        self.assertEqual(wrong_code.exception.detail, unknown.exception.detail)

    def test_failed_otp_mail_is_an_error_but_code_stays_stored(self):
        self.notifier.fail = True
        with self.assertRaises(NotificationException):
            self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        self.assertEqual(self.stored().otpCode, "123456")

    def test_failed_confirmation_mail_does_not_fail_reset(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        self.notifier.fail = True
        result = self.auth.reset_password(
            ResetPasswordRequest(email="alice@x.com", otp="123456", newPassword="NewPass1!"))
        self.assertEqual(result["message"], RESET_PASSWORD_MESSAGE)
        self.assertEqual(self.notifier.sent[-1]["subject"], "Password Reset Successful")
        self.auth.login(LoginRequest(username="alice", password="NewPass1!"))

    def test_weak_new_password_rejected_before_otp_is_consumed(self):
        self.auth.forgot_password(ForgotPasswordRequest(email="alice@x.com"))
        with self.assertRaises(ValidationException):
            self.auth.reset_password(
                ResetPasswordRequest(email="alice@x.com", otp="123456", newPassword="weak"))
        self.assertEqual(self.stored().otpCode, "123456")


class TestValidateUser(AuthServiceTestCase):
    def test_resolves_known_id_without_password(self):
        user_id = self.auth.register(register_request())["user"]["id"]
        projection = self.auth.validate_user(user_id)
        self.assertEqual(projection["id"], user_id)
        self.assertNotIn("password", projection)

    def test_unknown_id_is_none(self):
        self.assertIsNone(self.auth.validate_user("00000000-0000-0000-0000-000000000000"))


if __name__ == "__main__":
    unittest.main()
