import re
import ssl
from typing import Any, Dict, Mapping, Optional

from aiokafka.helpers import create_ssl_context
from faststream.kafka import KafkaBroker
from faststream.security import (
    BaseSecurity,
    SASLPlaintext,
    SASLScram256,
    SASLScram512,
)

from kafka_gitops.config import (
    BOOTSTRAP_SERVERS_CONFIG,
    CLIENT_ID_CONFIG,
    ENV_PREFIX,
    MECHANISM_ENV,
    SASL_JAAS_CONFIG,
    SASL_MECHANISM_CONFIG,
    Credentials,
)
from kafka_gitops.exceptions import MissingConfigurationError
from kafka_gitops.logger import get_logger

logger = get_logger(__name__)

SECURITY_PROTOCOL_CONFIG = "security.protocol"
SSL_CA_LOCATION_CONFIG = "ssl.ca.location"

_aio_kafka_str_keys = {
    BOOTSTRAP_SERVERS_CONFIG: "bootstrap_servers",
    CLIENT_ID_CONFIG: "client_id",
    SASL_MECHANISM_CONFIG: "sasl_mechanism",
}

_aio_kafka_int_keys = {
    "request.timeout.ms": "request_timeout_ms",
    "connections.max.idle.ms": "connections_max_idle_ms",
    "metadata.max.age.ms": "metadata_max_age_ms",
    "retry.backoff.ms": "retry_backoff_ms",
}

_ssl_protocols = {"SSL", "SASL_SSL"}

_sasl_securities = {
    "PLAIN": SASLPlaintext,
    "SCRAM-SHA-256": SASLScram256,
    "SCRAM-SHA-512": SASLScram512,
}

_jaas_option_pattern = re.compile(r'(username|password)="([^"]*)"')


def parse_jaas_credentials(jaas_config: str) -> Credentials:
    """Read username and password options back from a JAAS login string.

    Args:
        jaas_config: JAAS string as found under `sasl.jaas.config`

    Returns:
        The credentials, with None for options not present
    """
    options = dict(_jaas_option_pattern.findall(jaas_config))
    return Credentials(
        username=options.get("username"), password=options.get("password")
    )


def _get_security_protocol(config: Mapping[str, Any]) -> Optional[str]:
    if SECURITY_PROTOCOL_CONFIG not in config:
        return None
    return str(config[SECURITY_PROTOCOL_CONFIG]).upper()


def _get_env_name(key: str) -> str:
    return ENV_PREFIX + key.replace(".", "_").upper()


def _get_int(config: Mapping[str, Any], key: str) -> int:
    try:
        return int(config[key])
    except ValueError as e:
        raise MissingConfigurationError(_get_env_name(key)) from e


def _get_ssl_context(config: Mapping[str, Any]) -> Optional[ssl.SSLContext]:
    if _get_security_protocol(config) not in _ssl_protocols:
        return None
    return create_ssl_context(cafile=config.get(SSL_CA_LOCATION_CONFIG))


def get_aio_kafka_config(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate dotted Kafka properties into aiokafka client arguments.

    Properties without an aiokafka counterpart are not forwarded. The security
    protocol is uppercased, as aiokafka only accepts uppercase names.

    Args:
        config: Kafka client properties, as returned by `get_kafka_config`

    Returns:
        Keyword arguments for `AIOKafkaProducer`, `AIOKafkaConsumer` or
        `AIOKafkaAdminClient`

    Raises:
        MissingConfigurationError: if a millisecond setting is not an integer
    """
    aio_kafka_config: Dict[str, Any] = {
        aio_key: config[key]
        for key, aio_key in _aio_kafka_str_keys.items()
        if key in config
    }
    if SECURITY_PROTOCOL_CONFIG in config:
        aio_kafka_config["security_protocol"] = _get_security_protocol(config)
    aio_kafka_config.update(
        {
            aio_key: _get_int(config, key)
            for key, aio_key in _aio_kafka_int_keys.items()
            if key in config
        }
    )

    if SASL_JAAS_CONFIG in config:
        credentials = parse_jaas_credentials(config[SASL_JAAS_CONFIG])
        aio_kafka_config["sasl_plain_username"] = credentials.username
        aio_kafka_config["sasl_plain_password"] = credentials.password

    ssl_context = _get_ssl_context(config)
    if ssl_context is not None:
        aio_kafka_config["ssl_context"] = ssl_context

    return aio_kafka_config


def get_broker_security(config: Mapping[str, Any]) -> Optional[BaseSecurity]:
    """Build a faststream security object from dotted Kafka properties.

    Args:
        config: Kafka client properties, as returned by `get_kafka_config`

    Returns:
        SASL security when JAAS credentials are configured, plain SSL security
        for the SSL protocol, None otherwise

    Raises:
        MissingConfigurationError: if credentials are configured with an
            unsupported SASL mechanism
    """
    ssl_context = _get_ssl_context(config)

    if SASL_JAAS_CONFIG in config:
        mechanism = config.get(SASL_MECHANISM_CONFIG)
        if mechanism not in _sasl_securities:
            raise MissingConfigurationError(MECHANISM_ENV)
        credentials = parse_jaas_credentials(config[SASL_JAAS_CONFIG])
        return _sasl_securities[mechanism](
            username=credentials.username,
            password=credentials.password,
            ssl_context=ssl_context,
        )

    if ssl_context is not None:
        return BaseSecurity(ssl_context=ssl_context)

    return None


def get_kafka_broker(config: Mapping[str, Any]) -> KafkaBroker:
    """Create a faststream Kafka broker from dotted Kafka properties."""
    bootstrap_servers = [
        x.strip() for x in config[BOOTSTRAP_SERVERS_CONFIG].split(",") if x.strip()
    ]
    security = get_broker_security(config)

    logger.info(
        f"Creating broker for {bootstrap_servers=} with {type(security).__name__}"
    )
    return KafkaBroker(
        bootstrap_servers=bootstrap_servers,
        client_id=config[CLIENT_ID_CONFIG],
        security=security,
    )
