"""Unit tests for S3FileStore using moto."""

from __future__ import annotations

import boto3
import pytest
from moto import mock_aws

from comphygiene.core.exceptions import ArtifactStoreError
from comphygiene.persistence.s3_backend import S3FileStore

BUCKET = "test-import-files"


@pytest.fixture
def s3_backend():
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield S3FileStore(bucket=BUCKET, region="us-east-1")


class TestWrite:
    def test_write_returns_path(self, s3_backend):
        result = s3_backend.write("imports/t1/j1/raw", b"a,b,c")
        assert result == "imports/t1/j1/raw"

    def test_write_stores_bytes(self, s3_backend):
        s3_backend.write("test/data.bin", b"\xef\xbb\xbfid\n")
        assert s3_backend.read("test/data.bin") == b"\xef\xbb\xbfid\n"

    def test_write_sets_content_type(self, s3_backend):
        s3_backend.write("imports/t1/j1/cleaned.csv", b"id\n1\n", content_type="text/csv")
        client = boto3.client("s3", region_name="us-east-1")
        head = client.head_object(Bucket=BUCKET, Key="imports/t1/j1/cleaned.csv")
        assert head["ContentType"] == "text/csv"


class TestRead:
    def test_read_returns_bytes(self, s3_backend):
        s3_backend.write("docs/hello.txt", b"Hello")
        assert s3_backend.read("docs/hello.txt") == b"Hello"

    def test_read_missing_key_raises(self, s3_backend):
        with pytest.raises(ArtifactStoreError):
            s3_backend.read("does/not/exist.txt")


class TestExists:
    def test_true_for_written_key(self, s3_backend):
        s3_backend.write("imports/t1/j1/raw", b"data")
        assert s3_backend.exists("imports/t1/j1/raw") is True

    def test_false_for_missing_key(self, s3_backend):
        assert s3_backend.exists("imports/t1/missing/raw") is False


class TestListFiles:
    def test_list_returns_matching_keys(self, s3_backend):
        s3_backend.write("prefix/a.csv", b"1")
        s3_backend.write("prefix/b.csv", b"2")
        s3_backend.write("other/c.csv", b"3")
        result = s3_backend.list_files("prefix/")
        assert sorted(result) == ["prefix/a.csv", "prefix/b.csv"]

    def test_list_empty_prefix_returns_nothing(self, s3_backend):
        result = s3_backend.list_files("nonexistent/")
        assert result == []

    def test_list_handles_pagination(self, s3_backend):
        for i in range(1050):
            s3_backend.write(f"bulk/{i:04d}.txt", b"x")
        result = s3_backend.list_files("bulk/")
        assert len(result) == 1050

    def test_missing_bucket_raises(self, s3_backend):
        store = S3FileStore(bucket="no-such-bucket", region="us-east-1")
        with pytest.raises(ArtifactStoreError):
            store.list_files("anything/")
