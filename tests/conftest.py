import os

import pytest


@pytest.fixture(autouse=True)
def clear_kafka_envs(monkeypatch):  # noqa: PT004
    for key in list(os.environ):
        if key.startswith("KAFKA_"):
            monkeypatch.delenv(key)


@pytest.fixture()
def patch_sasl_envs(monkeypatch):  # noqa: PT004
    monkeypatch.setenv("KAFKA_SASL_MECHANISM", "PLAIN")
    monkeypatch.setenv("KAFKA_SASL_JAAS_USERNAME", "alice")
    monkeypatch.setenv("KAFKA_SASL_JAAS_PASSWORD", "s3cret")  # pragma: allowlist secret
