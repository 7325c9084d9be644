# tests/conftest.py
import base64
import os
# Make sure boto3 sees a region *before* test modules import handlers
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

import pytest

from tests.fakes import CIPHERTEXT, QUEUE_URL, FakeSQS


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    # App-specific vars for all tests
    monkeypatch.setenv("QUEUE_URL", QUEUE_URL)
    monkeypatch.setenv("GITHUB_SECRET", base64.b64encode(CIPHERTEXT).decode("ascii"))
    monkeypatch.delenv("AWS_LAMBDA_RUNTIME_API", raising=False)


@pytest.fixture
def fake_sqs():
    return FakeSQS()
