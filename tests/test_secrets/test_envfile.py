"""Tests for dotenv export of stored credentials."""

import sys

import pytest

from infraagent.exceptions import ValidationError
from infraagent.secrets.envfile import ENV_FILENAMES, env_variables, render_env, write_env_files

GITHUB_TOKEN = "ghp_" + "a" * 36
STRIPE_SECRET = "sk_live_" + "b" * 24
STRIPE_PUBLISHABLE = "pk_live_" + "c" * 24


class TestEnvVariables:
    """Test the service to variable-name mapping."""

    def test_plain_token(self):
        assert env_variables("github", GITHUB_TOKEN) == [("GITHUB_TOKEN", GITHUB_TOKEN)]

    def test_structured_fields(self):
        token = {"secretKey": STRIPE_SECRET, "publishableKey": STRIPE_PUBLISHABLE}

        assert env_variables("stripe", token) == [
            ("STRIPE_SECRET_KEY", STRIPE_SECRET),
            ("STRIPE_PUBLISHABLE_KEY", STRIPE_PUBLISHABLE),
        ]

    def test_unknown_field_named_from_service(self):
        assert env_variables("supabase", {"projectRef": "abcd"}) == [("SUPABASE_PROJECT_REF", "abcd")]

    def test_plain_token_for_structured_service(self):
        assert env_variables("supabase", "sbp_x") == [("SUPABASE_ACCESS_TOKEN", "sbp_x")]

    def test_unknown_service(self):
        assert env_variables("netlify", "tok") == [("NETLIFY_TOKEN", "tok")]


class TestRenderEnv:
    def test_header_and_groups(self, fixed_clock):
        record = {"stripe": {"secretKey": STRIPE_SECRET}, "github": GITHUB_TOKEN}

        text = render_env(record, clock=fixed_clock)

        lines = text.splitlines()
        assert lines[0] == "# Generated by infraagent"
        assert lines[1] == "# Last updated: 2026-01-15T12:00:00+00:00"
        assert lines.index("# github") < lines.index("# stripe")
        assert f"GITHUB_TOKEN={GITHUB_TOKEN}" in lines
        assert f"STRIPE_SECRET_KEY={STRIPE_SECRET}" in lines

    def test_service_filter(self, fixed_clock):
        record = {"stripe": {"secretKey": STRIPE_SECRET}, "github": GITHUB_TOKEN}

        text = render_env(record, services=["stripe"], clock=fixed_clock)

        assert "STRIPE_SECRET_KEY" in text
        assert GITHUB_TOKEN not in text

    def test_missing_service_raises(self):
        with pytest.raises(ValidationError, match="No credentials stored for vercel"):
            render_env({"github": GITHUB_TOKEN}, services=["vercel"])

    def test_values_with_special_characters_quoted(self, fixed_clock):
        text = render_env({"supabase": {"dbPassword": 'p@ss word#1"\\'}}, clock=fixed_clock)

        assert 'SUPABASE_DB_PASSWORD="p@ss word#1\\"\\\\"' in text.splitlines()

    def test_newline_rejected(self):
        with pytest.raises(ValidationError, match="newlines"):
            render_env({"netlify": "line1\nline2"})


class TestWriteEnvFiles:
    def test_writes_both_files(self, tmp_path, fixed_clock):
        written = write_env_files(tmp_path, {"github": GITHUB_TOKEN}, clock=fixed_clock)

        assert written == [tmp_path / name for name in ENV_FILENAMES]
        for path in written:
            assert f"GITHUB_TOKEN={GITHUB_TOKEN}" in path.read_text()

    def test_files_are_owner_only(self, tmp_path):
        if sys.platform == "win32":
            pytest.skip("Permission test only for Unix")

        for path in write_env_files(tmp_path, {"github": GITHUB_TOKEN}):
            assert path.stat().st_mode & 0o777 == 0o600

    def test_existing_file_blocks_all_writes(self, tmp_path):
        (tmp_path / ".env.local").write_text("KEEP=1\n")

        with pytest.raises(ValidationError, match=r"\.env\.local already exists") as exc_info:
            write_env_files(tmp_path, {"github": GITHUB_TOKEN})

        assert "--force" in exc_info.value.suggestion
        assert not (tmp_path / ".env").exists()
        assert (tmp_path / ".env.local").read_text() == "KEEP=1\n"

    def test_force_overwrites(self, tmp_path):
        (tmp_path / ".env").write_text("OLD=1\n")

        write_env_files(tmp_path, {"github": GITHUB_TOKEN}, force=True)

        assert "OLD=1" not in (tmp_path / ".env").read_text()

    def test_missing_service_writes_nothing(self, tmp_path):
        with pytest.raises(ValidationError):
            write_env_files(tmp_path, {"github": GITHUB_TOKEN}, services=["stripe"])

        assert list(tmp_path.iterdir()) == []

    def test_creates_directory(self, tmp_path):
        target = tmp_path / "app"

        write_env_files(target, {"github": GITHUB_TOKEN}, filenames=(".env",))

        assert (target / ".env").exists()
