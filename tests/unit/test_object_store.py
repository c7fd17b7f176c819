"""ObjectStoreAdapter against a stubbed boto3 S3 client."""

from pathlib import Path
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from botocore.stub import Stubber

from adapter_deploy.errors import ObjectStoreError, VersionExistsError
from adapter_deploy.integrations.object_store import ObjectStoreAdapter, create_object_store

BUCKET = "adapters"


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        endpoint_url="https://acct123.r2.cloudflarestorage.com",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="secret",
    )


@pytest.fixture
def stubber(s3_client):
    with Stubber(s3_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def store(s3_client):
    return ObjectStoreAdapter(s3_client, BUCKET)


@pytest.fixture
def artifact(tmp_path: Path) -> Path:
    path = tmp_path / "index.js"
    path.write_bytes(b"export default {};\n")
    return path


def test_exists_true(store, stubber):
    stubber.add_response("head_object", {"ContentLength": 10})
    assert store.exists("foo/1.0.0/index.js") is True


@pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
def test_exists_false_on_not_found(store, stubber, code):
    stubber.add_client_error(
        "head_object",
        service_error_code=code,
        http_status_code=404,
    )
    assert store.exists("foo/1.0.0/index.js") is False


def test_exists_raises_on_other_errors(store, stubber):
    stubber.add_client_error("head_object", service_error_code="403", http_status_code=403)
    with pytest.raises(ObjectStoreError, match="foo/1.0.0/index.js"):
        store.exists("foo/1.0.0/index.js")


def test_exists_wraps_transport_errors(artifact):
    class Client:
        def head_object(self, **kwargs):
            raise EndpointConnectionError(endpoint_url="https://example.invalid")

    with pytest.raises(ObjectStoreError):
        ObjectStoreAdapter(Client(), BUCKET).exists("k")


def test_upload_sets_content_type(artifact):
    client = MagicMock()

    ObjectStoreAdapter(client, BUCKET).upload_file(
        "foo/index.js", artifact, "application/javascript"
    )

    client.put_object.assert_called_once_with(
        Bucket=BUCKET,
        Key="foo/index.js",
        Body=b"export default {};\n",
        ContentType="application/javascript",
    )


def test_conditional_upload_sends_if_none_match(artifact):
    client = MagicMock()

    ObjectStoreAdapter(client, BUCKET).upload_file(
        "foo/1.0.0/index.js", artifact, "application/javascript", if_not_exists=True
    )

    assert client.put_object.call_args.kwargs["IfNoneMatch"] == "*"


def test_conditional_upload_precondition_failure(store, stubber, artifact):
    stubber.add_client_error(
        "put_object", service_error_code="PreconditionFailed", http_status_code=412
    )
    with pytest.raises(VersionExistsError):
        store.upload_file(
            "foo/1.0.0/index.js", artifact, "application/javascript", if_not_exists=True
        )


def test_upload_failure(store, stubber, artifact):
    stubber.add_client_error(
        "put_object", service_error_code="AccessDenied", http_status_code=403
    )
    with pytest.raises(ObjectStoreError, match="AccessDenied"):
        store.upload_file("foo/index.js", artifact, "application/javascript")


def test_create_object_store_builds_r2_client(deploy_config, mocker):
    client_factory = mocker.patch("adapter_deploy.integrations.object_store.boto3.client")

    store = create_object_store(deploy_config)

    client_factory.assert_called_once_with(
        "s3",
        endpoint_url="https://acct123.r2.cloudflarestorage.com",
        region_name="auto",
        aws_access_key_id="AKIDEXAMPLE",
        aws_secret_access_key="secret",
    )
    assert store.bucket == "test-bucket"


def test_installed_client_supports_conditional_put(s3_client):
    members = s3_client.meta.service_model.operation_model("PutObject").input_shape.members
    assert "IfNoneMatch" in members
