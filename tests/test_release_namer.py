"""Tests for release version naming"""

from datetime import datetime, timedelta, timezone

import pytest

from site_deploy.api.exceptions import ConfigurationMissingError, ValidationError
from site_deploy.core import release_namer
from site_deploy.core.release_namer import ReleaseNamer, validate_version


def fixed_clock():
    return datetime(2025, 11, 8, 14, 30, 22, tzinfo=timezone.utc)


@pytest.fixture
def git(monkeypatch):
    """Patch git lookups; tests set ``tag`` and ``revision``"""
    state = {"tag": "v1.2.0", "revision": "abc1234"}
    monkeypatch.setattr(release_namer, "get_latest_tag", lambda path: state["tag"])
    monkeypatch.setattr(release_namer, "get_short_revision", lambda path: state["revision"])
    return state


class TestExplicitVersion:

    def test_literal_version_is_used_verbatim(self, git, tmp_path):
        assert ReleaseNamer(tmp_path).resolve("v1.0.0") == "v1.0.0"

    def test_surrounding_whitespace_is_ignored(self, git, tmp_path):
        assert ReleaseNamer(tmp_path).resolve("  v2.0.0 ") == "v2.0.0"

    @pytest.mark.parametrize("version", [None, "", "   "])
    def test_missing_version_is_a_configuration_error(self, git, tmp_path, version):
        with pytest.raises(ConfigurationMissingError) as exc_info:
            ReleaseNamer(tmp_path).resolve(version)

        assert exc_info.value.key == "version"
        assert len(exc_info.value.remediation) == 3

    @pytest.mark.parametrize("version", ["../escape", "a/b", "-leading", "with space"])
    def test_unsafe_version_is_rejected(self, version):
        with pytest.raises(ValidationError):
            validate_version(version)


class TestAutoVersion:

    def test_combines_latest_tag_and_revision(self, git, tmp_path):
        assert ReleaseNamer(tmp_path).resolve("auto") == "v1.2.0-abc1234"

    def test_fails_without_tags(self, git, tmp_path):
        git["tag"] = None

        with pytest.raises(ConfigurationMissingError, match="No git tags"):
            ReleaseNamer(tmp_path).resolve("auto")

    def test_uses_local_when_revision_is_unavailable(self, git, tmp_path):
        git["revision"] = None

        assert ReleaseNamer(tmp_path).resolve("auto") == "v1.2.0-local"


class TestTimestampVersion:

    def test_formats_utc_time_and_revision(self, git, tmp_path):
        namer = ReleaseNamer(tmp_path, clock=fixed_clock)

        assert namer.resolve("timestamp") == "20251108-143022-abc1234"

    def test_converts_local_time_to_utc(self, git, tmp_path):
        offset = timezone(timedelta(hours=2))
        namer = ReleaseNamer(tmp_path, clock=lambda: datetime(2025, 11, 8, 16, 30, 22, tzinfo=offset))

        assert namer.resolve("timestamp") == "20251108-143022-abc1234"

    def test_outside_a_repository(self, git, tmp_path):
        git["revision"] = None
        namer = ReleaseNamer(tmp_path, clock=fixed_clock)

        assert namer.resolve("timestamp") == "20251108-143022-local"
