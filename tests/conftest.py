"""Shared fixtures for the site-deploy test suite"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from site_deploy.models import DeployConfig, RetryPolicy
from site_deploy.services.config_service import ConfigProvider
from site_deploy.storage import FilesystemStorage
from site_deploy.utils import run_async

INDEX_HTML = b"<!doctype html><html><body><script src=\"/app.js\"></script></body></html>\n"
APP_JS = b"console.log('hello');\n" * 50


class ScriptedProvider(ConfigProvider):
    """Provider with canned answers that records every question"""

    interactive = True

    def __init__(self,
                 answers: Optional[Dict[str, str]] = None,
                 confirm: bool = True,
                 typed: Optional[Dict[str, bool]] = None,
                 release: Optional[str] = None,
                 build_dir: Optional[Path] = None):
        self.answers = answers or {}
        self.confirm_answer = confirm
        self.typed = typed or {}
        self.release = release
        self.build_dir = build_dir
        self.questions: List[str] = []

    def ask(self, key, prompt, default=None, remediation=None):
        self.questions.append(prompt)
        return self.answers[key]

    def confirm(self, message, default=False):
        self.questions.append(message)
        return self.confirm_answer

    def confirm_typed(self, message, expected):
        self.questions.append(message)
        return self.typed.get(expected, True)

    def choose_release(self, releases):
        self.questions.append("choose release")
        return self.release

    def corrected_build_dir(self, missing):
        self.questions.append(f"build dir {missing}")
        return self.build_dir


def write_files(root: Path, files: Dict[str, bytes]) -> Path:
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


@pytest.fixture
def fast_retry():
    return RetryPolicy(max_attempts=3, delay=0)


@pytest.fixture
def build_dir(tmp_path):
    """Small build tree: one page and one script"""
    return write_files(tmp_path / "dist", {"index.html": INDEX_HTML, "app.js": APP_JS})


@pytest.fixture
def storage_root(tmp_path):
    return tmp_path / "buckets"


@pytest.fixture
def storage(storage_root):
    """Filesystem backend with an existing, empty bucket"""
    backend = FilesystemStorage({"path": str(storage_root), "bucket": "site"})
    run_async(backend.create_bucket())
    return backend


@pytest.fixture
def make_config(tmp_path, build_dir, storage_root, fast_retry):
    """Factory for deploy configurations pointing at the filesystem backend"""

    def _make(**kwargs) -> DeployConfig:
        values = {
            "project_id": "demo-project",
            "bucket": "site",
            "build_dir": build_dir,
            "version": "v1.0.0",
            "release_path": "releases/{version}/",
            "gzip_extensions": ["js", "html"],
            "retry": fast_retry,
            "storage_type": "filesystem",
            "storage_options": {"path": str(storage_root)},
            "sync_log": tmp_path / "sync.log",
            "project_root": tmp_path,
        }
        values.update(kwargs)
        return DeployConfig(**values)

    return _make
