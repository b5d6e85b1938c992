import json

from typer.testing import CliRunner

# binds the package log handler to the real stderr before CliRunner swaps it
import kafka_gitops.config  # noqa: F401
from kafka_gitops.cli import app

runner = CliRunner()


def test_show_config(patch_sasl_envs):
    result = runner.invoke(app, ["show-config"])
    assert result.exit_code == 0, result.output

    actual = json.loads(result.stdout)
    expected = {
        "bootstrap.servers": "localhost:9092",
        "client.id": "kafka-gitops",
        "sasl.mechanism": "PLAIN",
        "sasl.jaas.config": 'org.apache.kafka.common.security.plain.PlainLoginModule required username="alice" password="[hidden]";',
    }
    assert actual == expected, actual


def test_show_config_no_redact(patch_sasl_envs):
    result = runner.invoke(app, ["show-config", "--no-redact"])
    assert result.exit_code == 0, result.output

    actual = json.loads(result.stdout)
    assert 'password="s3cret"' in actual["sasl.jaas.config"], actual


def test_show_config_missing_configuration(monkeypatch):
    monkeypatch.setenv("KAFKA_SASL_JAAS_USERNAME", "alice")

    result = runner.invoke(app, ["show-config"])
    assert result.exit_code == 1
    assert "Missing required configuration: KAFKA_SASL_JAAS_PASSWORD" in result.output
