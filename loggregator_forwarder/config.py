"""Configuration module: frozen dataclass loaded from YAML, env vars and CLI args."""

import argparse
import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


def _parse_bool(value) -> bool:
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    loggregator_target: str = "localhost:3458"
    loggregator_ca_file: str = "/etc/loggregator/ca.crt"
    loggregator_cert_file: str = "/etc/loggregator/tls.crt"
    loggregator_key_file: str = "/etc/loggregator/tls.key"
    eirini_namespace: str = "eirini"
    kube_host: str = "kubernetes.default.svc.cluster.local"
    kube_port: int = 443
    kube_token_file: str = f"{SERVICE_ACCOUNT_DIR}/token"
    kube_ca_file: str = f"{SERVICE_ACCOUNT_DIR}/ca.crt"
    send_attempts: int = 3
    retry_delay: float = 2.0
    send_timeout: float = 0.0      # seconds, 0 = no deadline
    owner_cache_size: int = 0      # 0 = unbounded
    log_file: str = "/var/log/containers/forwarder.ndjson"
    follow: bool = False
    poll_interval: float = 0.5
    metrics_interval: int = 0


# (field, env var, converter) in the order they are listed in --help
_SETTINGS = [
    ("loggregator_target", "LOGGREGATOR_TARGET", str),
    ("loggregator_ca_file", "LOGGREGATOR_CA_FILE", str),
    ("loggregator_cert_file", "LOGGREGATOR_CERT_FILE", str),
    ("loggregator_key_file", "LOGGREGATOR_KEY_FILE", str),
    ("eirini_namespace", "EIRINI_NAMESPACE", str),
    ("kube_host", "KUBERNETES_SERVICE_HOST", str),
    ("kube_port", "KUBERNETES_SERVICE_PORT_HTTPS", int),
    ("kube_token_file", "KUBE_TOKEN_FILE", str),
    ("kube_ca_file", "KUBE_CA_FILE", str),
    ("send_attempts", "SEND_ATTEMPTS", int),
    ("retry_delay", "RETRY_DELAY", float),
    ("send_timeout", "SEND_TIMEOUT", float),
    ("owner_cache_size", "OWNER_CACHE_SIZE", int),
    ("log_file", "LOG_FILE", str),
    ("follow", "FOLLOW", _parse_bool),
    ("poll_interval", "POLL_INTERVAL", float),
    ("metrics_interval", "METRICS_INTERVAL", int),
]


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML in %s, using defaults: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    logger.info("Loaded YAML config from %s", path)
    return data


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Forward Kubernetes container logs to Loggregator")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    for name, env_var, _ in _SETTINGS:
        flag = "--" + name.replace("_", "-")
        if name == "follow":
            parser.add_argument(
                flag, action="store_const", const="true", default=None,
                help="Tail the log file instead of reading it once",
            )
        else:
            parser.add_argument(flag, dest=name, default=None, help=f"(env: {env_var})")
    return parser


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args (highest priority)."""
    args = build_cli_parser().parse_args(argv)
    yaml_data = load_yaml_config(args.config)

    kwargs: dict = {}
    for name, env_var, convert in _SETTINGS:
        if yaml_data.get(name) is not None:
            kwargs[name] = convert(yaml_data[name])
        if env_var in os.environ:
            kwargs[name] = convert(os.environ[env_var])
        cli_value = getattr(args, name)
        if cli_value is not None:
            kwargs[name] = convert(cli_value)

    return Config(**kwargs)
