"""Connection settings validation utilities."""

from pathlib import Path

from remotefs.utils.errors import ConfigError


AUTH_METHODS = ("key", "password", "keyboard")


def validate_host(host: str | None) -> str:
    """Validate host is given; there is no implicit loopback default."""
    if host is None or not host.strip():
        raise ConfigError("Host must not be empty")
    return host.strip()


def validate_port(port: int | str | None, default: int) -> int:
    """Validate port is in range, using default when it is unset."""
    if port is None or port == "":
        return default

    try:
        value = int(port)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid port: {port!r}") from exc

    if not 1 <= value <= 65535:
        raise ConfigError(f"Port out of range (1-65535): {value}")

    return value


def validate_timeout(timeout: float) -> float:
    """Validate timeout is a positive number of seconds."""
    if timeout is None or timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {timeout!r}")
    return float(timeout)


def validate_auth(auth_method: str, private_key: str | None) -> None:
    """Validate SSH authentication settings."""
    if auth_method not in AUTH_METHODS:
        raise ConfigError(f"[{auth_method}] unsupported authentication method")

    if auth_method == "key":
        if not private_key:
            raise ConfigError("Key authentication requires a private key file")
        if not Path(private_key).expanduser().is_file():
            raise ConfigError(f"Private key file not found: {private_key}")
