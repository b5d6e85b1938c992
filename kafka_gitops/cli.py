__all__ = ["app"]

import json

import typer

app = typer.Typer()


@app.callback()
def main() -> None:
    """Kafka client configuration assembled from KAFKA_* environment variables."""


@app.command()
def show_config(
    redact: bool = typer.Option(  # noqa
        True, help="Hide the SASL password in the printed configuration"
    ),
) -> None:
    """Print the Kafka client configuration as JSON."""
    from kafka_gitops.config import get_kafka_config, redact_config
    from kafka_gitops.exceptions import MissingConfigurationError

    try:
        config = get_kafka_config()
    except MissingConfigurationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e

    if redact:
        config = redact_config(config)

    typer.echo(json.dumps(config, indent=2, sort_keys=True))
