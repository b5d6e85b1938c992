import re
from os import environ as os_environ
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from kafka_gitops.exceptions import MissingConfigurationError
from kafka_gitops.logger import get_logger

__all__ = [
    "Credentials",
    "KafkaGitopsConfig",
    "build_jaas_config",
    "get_kafka_config",
    "handle_authentication",
    "handle_default_config",
    "load",
    "redact_config",
    "scan_environment",
]

logger = get_logger(__name__)

ENV_PREFIX = "KAFKA_"
USERNAME_ENV = "KAFKA_SASL_JAAS_USERNAME"
PASSWORD_ENV = "KAFKA_SASL_JAAS_PASSWORD"
MECHANISM_ENV = "KAFKA_SASL_MECHANISM"

BOOTSTRAP_SERVERS_CONFIG = "bootstrap.servers"
CLIENT_ID_CONFIG = "client.id"
SASL_MECHANISM_CONFIG = "sasl.mechanism"
SASL_JAAS_CONFIG = "sasl.jaas.config"

DEFAULT_CONFIG: Dict[str, str] = {
    BOOTSTRAP_SERVERS_CONFIG: "localhost:9092",
    CLIENT_ID_CONFIG: "kafka-gitops",
}

PLAIN_LOGIN_MODULE = "org.apache.kafka.common.security.plain.PlainLoginModule"
SCRAM_LOGIN_MODULE = "org.apache.kafka.common.security.scram.ScramLoginModule"

LOGIN_MODULES: Dict[str, str] = {
    "PLAIN": PLAIN_LOGIN_MODULE,
    "SCRAM-SHA-256": SCRAM_LOGIN_MODULE,
    "SCRAM-SHA-512": SCRAM_LOGIN_MODULE,
}

_jaas_password_pattern = re.compile(r'password="[^"]*"')


class Credentials(BaseModel):
    """SASL credentials captured from the environment."""

    username: Optional[str] = Field(
        default=None,
        json_schema_extra={"example": "alice", "description": "SASL username"},
    )
    password: Optional[str] = Field(
        default=None,
        json_schema_extra={"example": "s3cret", "description": "SASL password"},
    )


class KafkaGitopsConfig(BaseModel):
    """Kafka client configuration handed over to the admin client."""

    config: Dict[str, Any] = Field(
        default_factory=dict,
        json_schema_extra={
            "example": {"bootstrap.servers": "localhost:9092"},
            "description": "Kafka client properties with dotted keys",
        },
    )

    def put_all_config(self, config: Mapping[str, Any]) -> "KafkaGitopsConfig":
        self.config.update(config)
        return self


def scan_environment(
    environ: Mapping[str, str],
) -> Tuple[Dict[str, str], Credentials]:
    """Split environment variables into Kafka properties and SASL credentials.

    Every `KAFKA_` prefixed variable except the two credential variables is
    turned into a property by stripping the prefix, replacing underscores with
    dots and lowercasing, e.g. `KAFKA_BOOTSTRAP_SERVERS` becomes
    `bootstrap.servers`. Other variables are ignored.

    Args:
        environ: snapshot of the environment

    Returns:
        A tuple of the properties found and the captured credentials
    """
    config: Dict[str, str] = {}
    username: Optional[str] = None
    password: Optional[str] = None

    for key, value in environ.items():
        if key == USERNAME_ENV:
            username = value
        elif key == PASSWORD_ENV:
            password = value
        elif key.startswith(ENV_PREFIX):
            new_key = key[len(ENV_PREFIX) :].replace("_", ".").lower()
            config[new_key] = value

    return config, Credentials(username=username, password=password)


def handle_default_config(config: Dict[str, str]) -> None:
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value


def build_jaas_config(mechanism: Optional[str], username: str, password: str) -> str:
    """Build a JAAS login string for the given SASL mechanism.

    Username and password are inserted as they are, without escaping.

    Args:
        mechanism: one of PLAIN, SCRAM-SHA-256 or SCRAM-SHA-512
        username: SASL username
        password: SASL password

    Returns:
        The JAAS configuration string

    Raises:
        MissingConfigurationError: if the mechanism is missing or unsupported
    """
    if mechanism not in LOGIN_MODULES:
        raise MissingConfigurationError(MECHANISM_ENV)

    login_module = LOGIN_MODULES[mechanism]
    return f'{login_module} required username="{username}" password="{password}";'


def handle_authentication(credentials: Credentials, config: Dict[str, str]) -> None:
    username, password = credentials.username, credentials.password

    if username is not None and password is not None:
        config[SASL_JAAS_CONFIG] = build_jaas_config(
            config.get(SASL_MECHANISM_CONFIG), username, password
        )
    elif username is not None:
        raise MissingConfigurationError(PASSWORD_ENV)
    elif password is not None:
        raise MissingConfigurationError(USERNAME_ENV)


def get_kafka_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Assemble the Kafka client configuration from environment variables.

    Args:
        environ: environment to read from, defaults to the process environment

    Returns:
        Kafka client properties with dotted keys

    Raises:
        MissingConfigurationError: if SASL credentials are incomplete or the
            SASL mechanism is missing or unsupported
    """
    if environ is None:
        environ = dict(os_environ)

    config, credentials = scan_environment(environ)
    handle_default_config(config)
    handle_authentication(credentials, config)

    logger.info(f"Kafka Config: {config}")

    return config


def load(environ: Optional[Mapping[str, str]] = None) -> KafkaGitopsConfig:
    return KafkaGitopsConfig().put_all_config(get_kafka_config(environ))


def redact_config(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of the config with the JAAS password hidden."""
    redacted = dict(config)
    if SASL_JAAS_CONFIG in redacted:
        redacted[SASL_JAAS_CONFIG] = _jaas_password_pattern.sub(
            'password="[hidden]"', redacted[SASL_JAAS_CONFIG]
        )
    return redacted
