"""BOS backend tests against a mocked BosClient"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from baidubce.exception import BceHttpClientError, BceServerError
from baidubce.http import http_headers

from site_deploy.api.exceptions import StorageError
from site_deploy.storage import BOSStorage
from site_deploy.utils import run_async


@pytest.fixture
def bos():
    backend = BOSStorage({"bucket": "site", "access_key": "AK", "secret_key": "SK"})
    backend.client = MagicMock()
    backend._initialized = True
    return backend


def object_meta(**headers):
    values = {
        "content_length": "42",
        "etag": '"abc"',
        "content_type": "application/javascript",
        "content_encoding": "gzip",
        "cache_control": "public, max-age=3600",
        "bce_meta_md5": "0123abcd",
    }
    values.update(headers)
    return SimpleNamespace(metadata=SimpleNamespace(**values))


def listing(keys, next_marker=None):
    return SimpleNamespace(
        contents=[SimpleNamespace(key=key) for key in keys],
        is_truncated=next_marker is not None,
        next_marker=next_marker
    )


class TestBOSStorage:

    def test_default_endpoint(self, bos):
        assert bos.endpoint == "https://bj.bcebos.com"
        assert bos.location == "bos://site"

    def test_get_metadata_parses_headers_and_user_meta(self, bos):
        bos.client.get_object_meta_data.return_value = object_meta()

        meta = run_async(bos.get_metadata("releases/v1/app.js"))

        bos.client.get_object_meta_data.assert_called_once_with("site", "releases/v1/app.js")
        assert meta == {
            "size": 42,
            "etag": "abc",
            "content_type": "application/javascript",
            "content_encoding": "gzip",
            "cache_control": "public, max-age=3600",
            "metadata": {"md5": "0123abcd"},
        }

    def test_missing_object(self, bos):
        bos.client.get_object_meta_data.side_effect = BceHttpClientError(
            "request failed", BceServerError("Not Found", status_code=404)
        )

        assert run_async(bos.get_metadata("nope.js")) is None
        assert run_async(bos.exists("nope.js")) is False

    def test_other_errors_propagate(self, bos):
        bos.client.get_object_meta_data.side_effect = BceHttpClientError(
            "request failed", BceServerError("Forbidden", status_code=403)
        )

        with pytest.raises(BceHttpClientError):
            run_async(bos.get_metadata("app.js"))

    def test_set_metadata_replaces_headers_and_keeps_user_meta(self, bos):
        bos.client.get_object_meta_data.return_value = object_meta()

        run_async(bos.set_metadata("releases/v1/app.js", cache_control="public, max-age=31536000"))

        bos.client.copy_object.assert_called_once_with(
            "site", "releases/v1/app.js", "site", "releases/v1/app.js",
            user_metadata={"md5": "0123abcd"},
            content_type="application/javascript",
            user_headers={
                http_headers.CONTENT_ENCODING: "gzip",
                http_headers.CACHE_CONTROL: "public, max-age=31536000",
            }
        )

    def test_set_metadata_missing_object(self, bos):
        bos.client.get_object_meta_data.side_effect = BceHttpClientError(
            "request failed", BceServerError("Not Found", status_code=404)
        )

        with pytest.raises(StorageError, match="missing.js"):
            run_async(bos.set_metadata("missing.js", cache_control="no-cache"))
        bos.client.copy_object.assert_not_called()

    def test_upload_headers(self, bos, tmp_path):
        path = tmp_path / "index.html"
        path.write_bytes(b"<html></html>")

        run_async(bos.upload(path, "index.html", content_type="text/html", cache_control="no-cache",
                             metadata={"md5": "ff"}))

        bos.client.put_object_from_file.assert_called_once_with(
            "site", "index.html", str(path),
            content_type="text/html",
            user_metadata={"md5": "ff"},
            user_headers={http_headers.CACHE_CONTROL: "no-cache"}
        )

    def test_list_follows_markers(self, bos):
        bos.client.list_objects.side_effect = [
            listing(["a.js", "b.js"], next_marker="b.js"),
            listing(["c.js"]),
        ]

        assert run_async(bos.list("releases/")) == ["a.js", "b.js", "c.js"]
        assert bos.client.list_objects.call_args.kwargs["marker"] == "b.js"

    def test_list_prefixes(self, bos):
        response = listing([])
        response.common_prefixes = [SimpleNamespace(prefix="releases/v1/"), SimpleNamespace(prefix="releases/v2/")]
        bos.client.list_objects.return_value = response

        assert run_async(bos.list_prefixes("releases/")) == ["releases/v1/", "releases/v2/"]
        assert bos.client.list_objects.call_args.kwargs["delimiter"] == "/"

    def test_static_website_with_public_read(self, bos):
        run_async(bos.configure_website("index.html", "index.html", public_read=True))

        bos.client.put_bucket_static_website.assert_called_once_with(
            "site", index="index.html", not_found="index.html"
        )
        bos.client.set_bucket_canned_acl.assert_called_once_with("site", "public-read")

    def test_static_website_stays_private_by_default(self, bos):
        run_async(bos.configure_website("index.html", "index.html"))

        bos.client.put_bucket_static_website.assert_called_once()
        bos.client.set_bucket_canned_acl.assert_not_called()
