# Service configuration
# secret + deploy command + listener settings, from YAML and/or env

import os
import shlex
import yaml

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001
DEFAULT_TIMEOUT = 300.0
DEFAULT_MAX_BODY = 25 * 1024 * 1024  # GitHub caps payloads at 25 MB

ENV_PREFIX = "DEPLOYHOOK_"
FIELDS = ("secret", "command", "host", "port", "timeout", "busy_wait", "max_body")


class ConfigError(Exception):
    pass


def _as_command(value):
    if not value:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    return [str(part) for part in value]


class DeployConfig:
    def __init__(self, secret="", command=None, host=DEFAULT_HOST, port=DEFAULT_PORT,
                 timeout=DEFAULT_TIMEOUT, busy_wait=0.0, max_body=DEFAULT_MAX_BODY):
        self.secret = "" if secret is None else str(secret)
        self.command = _as_command(command)
        self.host = host
        self.port = int(port)
        self.timeout = float(timeout)
        self.busy_wait = float(busy_wait)
        self.max_body = int(max_body)

    def __repr__(self):
        # never print the secret itself
        return (f"DeployConfig(secret={'***' if self.secret else ''!r}, command={self.command!r}, "
                f"host={self.host!r}, port={self.port}, timeout={self.timeout}, "
                f"busy_wait={self.busy_wait}, max_body={self.max_body})")

    def validate(self):
        if not self.secret:
            raise ConfigError("secret is empty (set DEPLOYHOOK_SECRET)")
        if not self.command:
            raise ConfigError("deploy command is empty (set DEPLOYHOOK_COMMAND)")
        if not 0 < self.port < 65536:
            raise ConfigError(f"port out of range: {self.port}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.busy_wait < 0:
            raise ConfigError(f"busy_wait must not be negative, got {self.busy_wait}")
        if self.max_body <= 0:
            raise ConfigError(f"max_body must be positive, got {self.max_body}")
        return self


def load_yaml(path):
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")
    return data


def load_config(path=None, environ=None) -> DeployConfig:
    """
    Build a DeployConfig from an optional YAML file, then env overrides.

    YAML keys match the DeployConfig fields (secret, command, host, port,
    timeout, busy_wait, max_body). Env vars are the same names upper-cased
    with a DEPLOYHOOK_ prefix; DEPLOYHOOK_CONFIG points at the YAML file.
    """
    env = os.environ if environ is None else environ
    path = path or env.get(ENV_PREFIX + "CONFIG")

    values = load_yaml(path) if path else {}

    for key in FIELDS:
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None and raw != "":
            values[key] = raw

    unknown = set(values) - set(FIELDS)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

    try:
        return DeployConfig(**values)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"bad config value: {e}") from e
