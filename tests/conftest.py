import json
import os
from typing import AsyncGenerator

os.environ["ENV_STATE"] = "test"

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from intakeapi.database import database  # noqa: E402
from intakeapi.main import app  # noqa: E402
from intakeapi.notifications import get_mail_client  # noqa: E402
from intakeapi import storage  # noqa: E402


class FakeMinio:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.buckets = set()
        self.policies = {}
        self.objects = {}

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def set_bucket_policy(self, bucket, policy):
        self.policies[bucket] = json.loads(policy)

    def put_object(self, bucket_name, object_name, data, length, content_type):
        if self.fail:
            raise ConnectionError("storage unavailable")
        self.objects[(bucket_name, object_name)] = (data.read(), content_type)


class FakeMailApi:
    def __init__(self):
        self.requests = []
        self.status_code = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"message": "Rejected"})
        return httpx.Response(self.status_code, json={"id": f"msg_{len(self.requests)}"})


@pytest.fixture()
def minio_client() -> FakeMinio:
    return FakeMinio()


@pytest.fixture()
def mail_api() -> FakeMailApi:
    return FakeMailApi()


@pytest.fixture()
async def mail_client(mail_api) -> AsyncGenerator:
    async with httpx.AsyncClient(transport=httpx.MockTransport(mail_api)) as client:
        yield client


@pytest.fixture()
async def db() -> AsyncGenerator:
    await database.connect()
    yield database
    await database.disconnect()


@pytest.fixture()
async def async_client(db, minio_client, mail_api, monkeypatch) -> AsyncGenerator:
    async def override_mail_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(mail_api)) as client:
            yield client

    monkeypatch.setattr(storage, "get_minio_client", lambda: minio_client)
    app.dependency_overrides[get_mail_client] = override_mail_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
