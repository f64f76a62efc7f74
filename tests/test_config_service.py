"""Tests for configuration resolution"""

from pathlib import Path

import pytest

from site_deploy.api.exceptions import ConfigurationMissingError, ValidationError
from site_deploy.services.config_service import ConfigService, NonInteractiveProvider

from conftest import ScriptedProvider

CREDENTIAL_VARS = ("BOS_AK", "BOS_SK", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY")


@pytest.fixture(autouse=True)
def _clear_credentials(monkeypatch):
    for var in CREDENTIAL_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


def write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestEnvFiles:

    def test_environment_file_wins_over_dotenv(self, project):
        write(project / ".env", "DEPLOY_BUCKET_NAME=from-dotenv\n")
        write(project / ".env.staging", "DEPLOY_BUCKET_NAME=from-staging\n")

        service = ConfigService(project, "staging")

        assert service.find_env_file() == project / ".env.staging"
        assert service.resolve({"project_id": "p"}).bucket == "from-staging"

    def test_falls_back_to_dotenv(self, project):
        write(project / ".env", "DEPLOY_BUCKET_NAME=from-dotenv\nDEPLOY_PROJECT_ID=demo\n")

        config = ConfigService(project, "production").resolve()

        assert config.bucket == "from-dotenv"
        assert config.env_file == project / ".env"

    def test_reads_every_deploy_key(self, project):
        write(project / ".env", "\n".join([
            "DEPLOY_PROJECT_ID=demo",
            "DEPLOY_BUCKET_NAME=site",
            "DEPLOY_REGION=europe-west1",
            "DEPLOY_BUCKET_LOCATION=EU",
            "DEPLOY_BUILD_DIR=build",
            "DEPLOY_VERSION=auto",
            "DEPLOY_RELEASE_PATH=releases/{version}/",
            "DEPLOY_BACKEND_BUCKET_NAME=site-backend",
            "DEPLOY_CACHE_MAX_AGE=600",
            "DEPLOY_HTML_CACHE_MAX_AGE=60",
            "DEPLOY_GZIP_EXTENSIONS=js, .CSS,js",
            "DEPLOY_URL_MAP_NAME=web-map",
            "DEPLOY_PATH_MATCHER_NAME=matcher-a",
            "DEPLOY_DELETE_EXTRANEOUS=true",
            "DEPLOY_WEBSITE_HOSTING=yes",
            "DEPLOY_PUBLIC_READ=on",
            "",
        ]))

        config = ConfigService(project).resolve()

        assert config.region == "europe-west1"
        assert config.bucket_location == "EU"
        assert config.build_dir == project / "build"
        assert config.version == "auto"
        assert config.release_prefix("v1") == "releases/v1/"
        assert config.backend == "site-backend"
        assert (config.cache.max_age, config.cache.html_max_age) == (600, 60)
        assert config.gzip_extensions == ["js", "css"]
        assert config.url_map == "web-map"
        assert config.path_matcher == "matcher-a"
        assert config.delete_extraneous is True
        assert config.website_hosting is True
        assert config.public_read is True

    def test_defaults(self, project):
        config = ConfigService(project).resolve({"project_id": "demo", "bucket": "site"})

        assert config.environment == "production"
        assert config.is_production
        assert config.region == "us-central1"
        assert config.build_dir == project / "dist"
        assert config.release_prefix("v1") == ""
        assert config.releases_prefix == "releases/"
        assert config.gzip_extensions == ["js", "css", "html", "json", "svg", "txt", "xml"]
        assert config.cache.max_age == 31536000
        assert config.cache.html_max_age == 3600
        assert config.path_matcher == "path-matcher-1"
        assert config.delete_extraneous is False
        assert config.website_hosting is False
        assert config.public_read is False
        assert config.storage_type == "filesystem"
        assert config.retry.max_attempts == 3
        assert config.retry.delay == 5


class TestPrecedence:

    def test_overrides_beat_env_file_and_env_file_beats_yaml(self, project):
        write(project / ".site-deploy.yaml", "bucket: from-yaml\nregion: asia-east1\nproject_id: yaml-project\n")
        write(project / ".env", "DEPLOY_BUCKET_NAME=from-env\nDEPLOY_PROJECT_ID=env-project\n")

        config = ConfigService(project).resolve({"bucket": "from-flag", "region": None})

        assert config.bucket == "from-flag"
        assert config.project_id == "env-project"
        assert config.region == "asia-east1"

    def test_empty_env_values_do_not_override_yaml(self, project):
        write(project / ".site-deploy.yaml", "bucket: from-yaml\nproject_id: demo\n")
        write(project / ".env", "DEPLOY_BUCKET_NAME=\n")

        assert ConfigService(project).resolve().bucket == "from-yaml"


class TestProjectFile:

    def test_content_types_extend_the_table(self, project):
        write(project / ".site-deploy.yaml", "\n".join([
            "project_id: demo",
            "bucket: site",
            "content_types:",
            "  .wasm: application/wasm",
            "  js: text/javascript",
            "",
        ]))

        config = ConfigService(project).resolve()

        assert config.content_types["wasm"] == "application/wasm"
        assert config.content_types["js"] == "text/javascript"
        assert config.content_types["css"] == "text/css"

    def test_storage_and_retry_sections(self, project):
        write(project / ".site-deploy.yaml", "\n".join([
            "project_id: demo",
            "bucket: site",
            "storage:",
            "  type: filesystem",
            "  path: local-buckets",
            "retry:",
            "  max_attempts: 5",
            "  delay: 1",
            "",
        ]))

        config = ConfigService(project).resolve()

        assert config.storage_options["path"] == str(project / "local-buckets")
        assert config.retry.max_attempts == 5
        assert config.retry.delay == 1

    def test_environment_variables_are_expanded(self, project, monkeypatch):
        monkeypatch.setenv("SITE_BUCKET", "expanded-bucket")
        write(project / ".site-deploy.yaml", "project_id: demo\nbucket: ${SITE_BUCKET}\n")

        assert ConfigService(project).resolve().bucket == "expanded-bucket"

    def test_invalid_yaml(self, project):
        write(project / ".site-deploy.yaml", "bucket: [unclosed\n")

        with pytest.raises(ValidationError):
            ConfigService(project).resolve()


class TestMissingValues:

    def test_non_interactive_provider_raises_with_remediation(self, project):
        with pytest.raises(ConfigurationMissingError) as exc_info:
            ConfigService(project, provider=NonInteractiveProvider()).resolve({"project_id": "demo"})

        error = exc_info.value
        assert error.key == "bucket"
        assert any("DEPLOY_BUCKET_NAME" in hint for hint in error.remediation)
        assert error.error_code == "SD001"

    def test_interactive_provider_is_asked(self, project):
        provider = ScriptedProvider(answers={"project_id": "asked-project", "bucket": "asked-bucket"})

        config = ConfigService(project, provider=provider).resolve()

        assert (config.project_id, config.bucket) == ("asked-project", "asked-bucket")
        assert provider.questions == ["Project ID", "Bucket name"]

    def test_nothing_required(self, project):
        config = ConfigService(project).resolve(required=())

        assert config.bucket is None


class TestValidation:

    def test_unknown_storage_type(self, project):
        with pytest.raises(ValidationError, match="Unsupported storage type"):
            ConfigService(project).resolve({"project_id": "p", "bucket": "b", "storage_type": "ftp"})

    def test_bad_integer(self, project):
        write(project / ".env", "DEPLOY_CACHE_MAX_AGE=forever\n")

        with pytest.raises(ValidationError):
            ConfigService(project).resolve({"project_id": "p", "bucket": "b"})

    def test_bad_boolean(self, project):
        with pytest.raises(ValidationError):
            ConfigService(project).resolve({"project_id": "p", "bucket": "b", "delete_extraneous": "maybe"})


class TestCredentials:

    def test_bos_credentials_from_env_file(self, project):
        write(project / ".env", "BOS_AK=ak-from-file\nBOS_SK=sk-from-file\n")

        config = ConfigService(project).resolve({"project_id": "p", "bucket": "b", "storage_type": "bos"})

        assert config.storage_options["access_key"] == "ak-from-file"
        assert config.storage_options["secret_key"] == "sk-from-file"

    def test_s3_credentials_from_process_environment(self, project, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIA123")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")

        config = ConfigService(project).resolve({"project_id": "p", "bucket": "b", "storage_type": "s3"})

        assert config.storage_options["access_key"] == "AKIA123"
        assert "path" not in config.storage_options
