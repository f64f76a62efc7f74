"""S3 backend tests against a mocked boto3 client"""

import json
from unittest.mock import MagicMock

import pytest

from site_deploy.api.exceptions import StorageError
from site_deploy.storage import S3Storage
from site_deploy.utils import run_async


class ClientError(Exception):
    def __init__(self, code):
        super().__init__(code)
        self.response = {"Error": {"Code": code}}


@pytest.fixture
def s3():
    backend = S3Storage({"bucket": "site", "region": "eu-west-1"})
    backend.client = MagicMock()
    backend._initialized = True
    return backend


class TestS3Storage:

    def test_client_config(self):
        backend = S3Storage({
            "bucket": "site",
            "region": "eu-west-1",
            "endpoint": "http://localhost:9000",
            "access_key": "AK",
            "secret_key": "SK",
        })
        assert backend._get_client_config() == {
            "region_name": "eu-west-1",
            "endpoint_url": "http://localhost:9000",
            "aws_access_key_id": "AK",
            "aws_secret_access_key": "SK",
        }
        assert backend.location == "s3://site"

    def test_upload_headers(self, s3, tmp_path):
        path = tmp_path / "app.js"
        path.write_bytes(b"x")

        run_async(s3.upload(path, "releases/v1/app.js", content_type="application/javascript",
                            content_encoding="gzip", cache_control="public, max-age=3600"))

        s3.client.upload_file.assert_called_once_with(
            str(path), "site", "releases/v1/app.js",
            ExtraArgs={
                "ContentType": "application/javascript",
                "ContentEncoding": "gzip",
                "CacheControl": "public, max-age=3600",
            }
        )

    def test_bucket_missing(self, s3):
        s3.client.head_bucket.side_effect = ClientError("404")
        assert run_async(s3.bucket_exists()) is False

    def test_bucket_check_other_errors_propagate(self, s3):
        s3.client.head_bucket.side_effect = ClientError("403")
        with pytest.raises(ClientError):
            run_async(s3.bucket_exists())

    def test_create_bucket_outside_us_east_1(self, s3):
        run_async(s3.create_bucket())
        s3.client.create_bucket.assert_called_once_with(
            Bucket="site",
            CreateBucketConfiguration={"LocationConstraint": "eu-west-1"}
        )

    def test_website_hosting_stays_private_by_default(self, s3):
        run_async(s3.configure_website("index.html", "index.html"))

        s3.client.put_bucket_website.assert_called_once_with(
            Bucket="site",
            WebsiteConfiguration={
                "IndexDocument": {"Suffix": "index.html"},
                "ErrorDocument": {"Key": "index.html"},
            }
        )
        s3.client.put_public_access_block.assert_not_called()
        s3.client.put_bucket_policy.assert_not_called()

    def test_website_hosting_with_public_read(self, s3):
        run_async(s3.configure_website("index.html", "index.html", public_read=True))

        s3.client.put_bucket_website.assert_called_once()
        block = s3.client.put_public_access_block.call_args.kwargs["PublicAccessBlockConfiguration"]
        assert not any(block.values())
        policy = json.loads(s3.client.put_bucket_policy.call_args.kwargs["Policy"])
        statement = policy["Statement"][0]
        assert statement["Action"] == "s3:GetObject"
        assert statement["Principal"] == "*"
        assert statement["Resource"] == "arn:aws:s3:::site/*"

    def test_missing_object_metadata(self, s3):
        s3.client.head_object.side_effect = ClientError("NoSuchKey")
        assert run_async(s3.get_metadata("nope")) is None
        assert run_async(s3.exists("nope")) is False

    def test_list_prefixes(self, s3):
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"CommonPrefixes": [{"Prefix": "releases/v1/"}]},
            {"CommonPrefixes": [{"Prefix": "releases/v2/"}]},
        ]
        s3.client.get_paginator.return_value = paginator

        assert run_async(s3.list_prefixes("releases/")) == ["releases/v1/", "releases/v2/"]
        paginator.paginate.assert_called_once_with(Bucket="site", Prefix="releases/", Delimiter="/")

    def test_list_respects_limit(self, s3):
        paginator = MagicMock()
        paginator.paginate.return_value = [{"Contents": [{"Key": "a"}, {"Key": "b"}, {"Key": "c"}]}]
        s3.client.get_paginator.return_value = paginator

        assert run_async(s3.list("", limit=2)) == ["a", "b"]

    def test_set_metadata_keeps_encoding(self, s3):
        s3.client.head_object.return_value = {
            "ContentLength": 10,
            "ETag": '"abc"',
            "ContentType": "text/html",
            "ContentEncoding": "gzip",
            "Metadata": {"source": "index.html"},
        }

        run_async(s3.set_metadata("index.html", cache_control="no-cache"))

        s3.client.copy_object.assert_called_once_with(
            Bucket="site",
            Key="index.html",
            CopySource={"Bucket": "site", "Key": "index.html"},
            Metadata={"source": "index.html"},
            MetadataDirective="REPLACE",
            ContentType="text/html",
            ContentEncoding="gzip",
            CacheControl="no-cache"
        )

    def test_set_metadata_missing_object(self, s3):
        s3.client.head_object.side_effect = ClientError("404")
        with pytest.raises(StorageError):
            run_async(s3.set_metadata("gone.html", cache_control="no-cache"))
