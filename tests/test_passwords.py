import pytest

from restaurant_api.core.exceptions import MalformedHashError
from restaurant_api.services.auth import PasswordHasher


class TestPasswordHasher:
    def test_hash_then_verify_round_trips(self, hasher):
        digest = hasher.hash("correct horse battery staple")
        assert hasher.verify("correct horse battery staple", digest) is True

    def test_wrong_password_is_false_not_error(self, hasher):
        digest = hasher.hash("pw1")
        for attempt in ["pw2", "PW1", "pw1 ", "p"]:
            assert hasher.verify(attempt, digest) is False

    def test_fresh_salt_per_hash(self, hasher):
        first = hasher.hash("same-password")
        second = hasher.hash("same-password")
        assert first != second
        assert hasher.verify("same-password", first)
        assert hasher.verify("same-password", second)

    def test_digest_embeds_work_factor(self):
        digest = PasswordHasher(rounds=5).hash("pw")
        assert digest.startswith("$2b$05$")

    def test_default_work_factor_is_at_least_14(self):
        assert PasswordHasher().rounds >= 14

    def test_non_ascii_password(self, hasher):
        digest = hasher.hash("pässwörd-密码")
        assert hasher.verify("pässwörd-密码", digest)
        assert not hasher.verify("passwort-密码", digest)

    @pytest.mark.parametrize("password", ["", "x" * 73])
    def test_hash_rejects_unusable_passwords(self, hasher, password):
        with pytest.raises(ValueError):
            hasher.hash(password)

    def test_verify_unusable_password_is_false(self, hasher):
        digest = hasher.hash("pw")
        assert hasher.verify("", digest) is False
        assert hasher.verify("x" * 73, digest) is False

    @pytest.mark.parametrize("digest", ["not-a-bcrypt-hash", "", "$2b$04$short"])
    def test_malformed_digest_is_an_error(self, hasher, digest):
        with pytest.raises(MalformedHashError):
            hasher.verify("pw", digest)

    def test_non_ascii_digest_is_an_error(self, hasher):
        with pytest.raises(MalformedHashError):
            hasher.verify("pw", "$2b$04$ñññññññññññññññññññ")
