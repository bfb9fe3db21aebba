"""Tests for the R2 storage client.

All boto3 calls are mocked since R2 is an external service.
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from renova.config import settings
from renova.utils import r2
from renova.utils.image import to_data_url


@pytest.fixture(autouse=True)
def _reset_r2_client():
    r2.reset_client()
    yield
    r2.reset_client()


@pytest.fixture()
def mock_s3():
    with patch.object(r2, "_build_client") as mock_build:
        mock_client = MagicMock()
        mock_build.return_value = mock_client
        yield mock_client


class TestConfigured:
    def test_unconfigured_by_default(self):
        assert r2.r2_configured() is False

    def test_configured_when_all_set(self, monkeypatch):
        monkeypatch.setattr(settings, "r2_account_id", "acct")
        monkeypatch.setattr(settings, "r2_access_key_id", "key")
        monkeypatch.setattr(settings, "r2_secret_access_key", "secret")
        assert r2.r2_configured() is True


class TestUploadObject:
    def test_upload_calls_put_object(self, mock_s3):
        key = "projects/abc/original.jpg"

        result = r2.upload_object(key, b"bytes", content_type="image/jpeg")

        mock_s3.put_object.assert_called_once_with(
            Bucket=settings.r2_bucket_name,
            Key=key,
            Body=b"bytes",
            ContentType="image/jpeg",
        )
        assert result == key

    def test_default_content_type_is_png(self, mock_s3):
        r2.upload_object("test/key.png", b"data")
        assert mock_s3.put_object.call_args[1]["ContentType"] == "image/png"


class TestStoreImage:
    def test_data_url_uploaded_with_extension(self, mock_s3):
        ref = to_data_url(b"jpeg-bytes", "image/jpeg")

        key = r2.store_image("projects/abc/original", ref)

        assert key == "projects/abc/original.jpg"
        kwargs = mock_s3.put_object.call_args[1]
        assert kwargs["Body"] == b"jpeg-bytes"
        assert kwargs["ContentType"] == "image/jpeg"

    @pytest.mark.parametrize(
        "ref", ["projects/abc/original.png", "https://cdn.example.com/a.png"]
    )
    def test_non_data_url_passes_through(self, mock_s3, ref):
        assert r2.store_image("projects/abc/original", ref) == ref
        mock_s3.put_object.assert_not_called()


class TestGeneratePresignedUrl:
    def test_generates_url(self, mock_s3):
        mock_s3.generate_presigned_url.return_value = "https://r2.example.com/signed"

        url = r2.generate_presigned_url("projects/abc/original.png")

        assert url == "https://r2.example.com/signed"
        mock_s3.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "renova-images", "Key": "projects/abc/original.png"},
            ExpiresIn=3600,
        )

    def test_logs_client_error(self, mock_s3):
        mock_s3.generate_presigned_url.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
            "GetObject",
        )

        with patch.object(r2, "logger") as mock_logger, pytest.raises(ClientError):
            r2.generate_presigned_url("projects/abc/missing.png")

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args[0][0] == "r2_presign_failed"


class TestResolveUrl:
    def test_storage_key_is_resolved(self, mock_s3):
        mock_s3.generate_presigned_url.return_value = "https://r2.example.com/signed"
        assert r2.resolve_url("projects/abc/original.png") == "https://r2.example.com/signed"

    @pytest.mark.parametrize(
        "ref",
        [
            "https://example.com/image.jpg",
            "http://localhost:8000/image.jpg",
            "data:image/png;base64,AA==",
        ],
    )
    def test_urls_pass_through(self, mock_s3, ref):
        assert r2.resolve_url(ref) == ref
        mock_s3.generate_presigned_url.assert_not_called()


class TestDelete:
    def test_deletes_object(self, mock_s3):
        r2.delete_object("projects/abc/generations/g1.png")
        mock_s3.delete_object.assert_called_once_with(
            Bucket=settings.r2_bucket_name,
            Key="projects/abc/generations/g1.png",
        )

    def test_delete_prefix_across_pages(self, mock_s3):
        paginator = MagicMock()
        mock_s3.get_paginator.return_value = paginator
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "projects/abc/original.png"}]},
            {"Contents": [{"Key": "projects/abc/generations/g1.png"}]},
            {"Contents": []},
        ]
        mock_s3.delete_objects.return_value = {}

        r2.delete_prefix("projects/abc/")

        mock_s3.get_paginator.assert_called_once_with("list_objects_v2")
        assert mock_s3.delete_objects.call_count == 2

    def test_partial_failure_logs_warning(self, mock_s3):
        paginator = MagicMock()
        mock_s3.get_paginator.return_value = paginator
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "a.png"}, {"Key": "b.png"}]},
        ]
        mock_s3.delete_objects.return_value = {
            "Errors": [{"Key": "b.png", "Code": "AccessDenied"}],
        }

        with patch.object(r2, "logger") as mock_logger:
            r2.delete_prefix("projects/abc/")

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[0][0] == "r2_delete_partial_failure"


class TestClientSingleton:
    def test_reset_forces_rebuild(self):
        with patch.object(r2, "_build_client") as mock_build:
            mock_build.return_value = MagicMock()
            r2.upload_object("key1", b"data1")
            r2.upload_object("key2", b"data2")
            assert mock_build.call_count == 1
            r2.reset_client()
            r2.upload_object("key3", b"data3")
            assert mock_build.call_count == 2
