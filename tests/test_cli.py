"""Tests for the operator CLI."""

from urllib.parse import parse_qs, urlparse

import pytest

from concierge_intake.cli import main
from concierge_intake.config import Settings
from concierge_intake.services.admin_auth import hash_password
from concierge_intake.services.token_codec import verify_invite_token


@pytest.fixture
def cli_settings():
    return Settings(
        _env_file=None,
        invite_signing_secret="cli-secret",
        invite_base_url="https://rsvp.example.com/",
        invite_expiry_days=14,
    )


class TestMakeInvite:
    def test_prints_signed_url(self, cli_settings, capsys):
        code = main(
            ["make-invite", "--email", "ava@example.com", "--name", "Ava Stone", "--code", "VIP456"],
            settings=cli_settings,
        )

        assert code == 0
        out = capsys.readouterr().out
        url = next(line for line in out.splitlines() if line.startswith("https://"))
        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.path == "/invite"
        assert query["c"] == ["VIP456"]
        assert query["name"] == ["Ava Stone"]
        payload = verify_invite_token(query["t"][0], "cli-secret")
        assert payload.email == "ava@example.com"
        assert "Subject: Private access - RSVP" in out
        assert "Hi Ava Stone," in out

    def test_requires_secret(self, capsys):
        code = main(["make-invite", "--email", "ava@example.com"], settings=Settings(_env_file=None))

        assert code == 1
        assert "SIGNING_SECRET" in capsys.readouterr().err

    def test_rejects_non_positive_days(self, cli_settings):
        assert main(["make-invite", "--email", "a@b.co", "--days", "0"], settings=cli_settings) == 1


class TestPasswords:
    def test_hash_password(self, capsys):
        assert main(["hash-password", "s3cret"], settings=Settings(_env_file=None)) == 0

        hashed = capsys.readouterr().out.strip()
        assert hashed.startswith("$pbkdf2-sha256$")

    def test_verify_password(self, capsys):
        hashed = hash_password("s3cret")

        assert main(["verify-password", "s3cret", hashed], settings=Settings(_env_file=None)) == 0
        assert "True" in capsys.readouterr().out
        assert main(["verify-password", "wrong", hashed], settings=Settings(_env_file=None)) == 1

    def test_verify_against_garbage_hash(self):
        assert main(["verify-password", "s3cret", "not-a-hash"], settings=Settings(_env_file=None)) == 1
