"""Shared fixtures: a throwaway service-account key and an in-memory bucket."""

import json
import logging

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from utils.logger_config import stop_logging


TEST_CLIENT_EMAIL = "uploader@test-project.iam.gserviceaccount.com"
TEST_PROJECT_ID = "test-project"
TEST_BUCKET = "test-bucket"


@pytest.fixture(scope="session")
def private_key_pem() -> str:
    """PEM-encoded RSA key generated once per test session."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def service_account_info(private_key_pem):
    """A service-account document shaped like the console download."""
    return {
        "type": "service_account",
        "project_id": TEST_PROJECT_ID,
        "private_key_id": "0123456789abcdef",
        "private_key": private_key_pem,
        "client_email": TEST_CLIENT_EMAIL,
        "client_id": "123456789012345678901",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@pytest.fixture
def credentials_file(tmp_path, service_account_info):
    path = tmp_path / "service-account.json"
    path.write_text(json.dumps(service_account_info), encoding="utf-8")
    return path


@pytest.fixture
def upload_file(tmp_path):
    path = tmp_path / "upload.jpeg"
    path.write_bytes(b"\xff\xd8\xff\xe0" + bytes(range(256)) * 64)
    return path


class InMemoryBucket:
    """Stands in for the storage backend behind signed URLs."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path
        if request.method == "PUT":
            self.objects[key] = request.read()
            return httpx.Response(200)
        if request.method == "GET":
            if key not in self.objects:
                return httpx.Response(404, text="NoSuchKey")
            return httpx.Response(200, content=self.objects[key])
        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def bucket():
    return InMemoryBucket()


class FakeSigner:
    """URL signer that records each request and returns a predictable URL."""

    def __init__(self):
        self.calls = []
        self.closed = False

    def generate_signed_url(self, bucket_name, object_name, method, expiration_seconds, signing_identity=None):
        self.calls.append((bucket_name, object_name, method, expiration_seconds, signing_identity))
        return f"https://storage.example/{bucket_name}/{object_name}?X-Goog-Signature={method.lower()}sig"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True


@pytest.fixture
def fake_signer():
    return FakeSigner()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest left it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    stop_logging()
    root.handlers[:] = handlers
    root.setLevel(level)
