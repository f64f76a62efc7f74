"""Tests for gzip pre-compression"""

import gzip

from site_deploy.api.exceptions import CompressionError
from site_deploy.core.compressor import Compressor
from site_deploy.models import OperationStatus
from site_deploy.utils import TempFileTracker

from conftest import APP_JS, INDEX_HTML, write_files


class TestCompressor:

    def test_writes_gz_siblings_and_keeps_originals(self, build_dir):
        result = Compressor(["js", "html"]).compress(build_dir)

        assert result.status == OperationStatus.SUCCESS
        assert sorted(p.name for p in result.compressed) == ["app.js.gz", "index.html.gz"]
        assert (build_dir / "app.js").read_bytes() == APP_JS
        assert gzip.decompress((build_dir / "app.js.gz").read_bytes()) == APP_JS
        assert gzip.decompress((build_dir / "index.html.gz").read_bytes()) == INDEX_HTML
        assert result.original_bytes == len(APP_JS) + len(INDEX_HTML)
        assert result.ratio < 1

    def test_only_configured_extensions(self, build_dir):
        write_files(build_dir, {"logo.png": b"\x89PNG", "assets/site.css": b"body{}"})

        result = Compressor(["css"]).compress(build_dir)

        assert [p.name for p in result.compressed] == ["site.css.gz"]
        assert not (build_dir / "logo.png.gz").exists()
        assert not (build_dir / "app.js.gz").exists()

    def test_no_extensions_is_a_no_op(self, build_dir):
        result = Compressor([]).compress(build_dir)

        assert result.is_success
        assert result.compressed == []

    def test_shipped_sibling_is_reused_not_tracked(self, build_dir):
        shipped = build_dir / "app.js.gz"
        payload = gzip.compress(APP_JS)
        shipped.write_bytes(payload)

        with TempFileTracker() as tracker:
            result = Compressor(["js"]).compress(build_dir, tracker)
            assert tracker.paths == []

        assert result.reused == [shipped]
        assert result.compressed == []
        assert shipped.read_bytes() == payload

    def test_tracker_removes_intermediates(self, build_dir):
        with TempFileTracker() as tracker:
            result = Compressor(["js", "html"]).compress(build_dir, tracker)
            assert set(tracker.paths) == set(result.compressed)

        assert not list(build_dir.rglob("*.gz"))
        assert (build_dir / "index.html").exists()

    def test_failure_is_recorded_per_file(self, build_dir, monkeypatch):
        original = Compressor._compress_file

        def flaky(self, source, target):
            if source.name == "app.js":
                raise CompressionError(str(source), "disk full")
            return original(self, source, target)

        monkeypatch.setattr(Compressor, "_compress_file", flaky)

        result = Compressor(["js", "html"]).compress(build_dir)

        assert result.status == OperationStatus.PARTIAL
        assert [p.name for p in result.failed] == ["app.js"]
        assert [p.name for p in result.compressed] == ["index.html.gz"]
        assert result.errors[0].code == "SD005"
