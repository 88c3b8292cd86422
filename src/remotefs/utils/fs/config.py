"""Connection settings for the remote backends."""

from dataclasses import dataclass

from remotefs.utils.validation import validate_auth
from remotefs.utils.validation import validate_host
from remotefs.utils.validation import validate_port
from remotefs.utils.validation import validate_timeout


@dataclass
class FTPConfig:
    """FTP connection settings. The default FTP port is 21."""

    host: str
    port: int = 21
    user: str = "anonymous"
    password: str = "anonymous@"
    timeout: float = 30.0
    encoding: str = "utf-8"

    def __post_init__(self):
        self.host = validate_host(self.host)
        self.port = validate_port(self.port, default=21)
        self.timeout = validate_timeout(self.timeout)
        self.user = self.user or "anonymous"
        self.password = self.password or "anonymous@"


@dataclass
class SFTPConfig:
    """SFTP connection settings.

    auth_method is one of "key", "password" or "keyboard". The default SSH
    port is 22.
    """

    host: str
    user: str
    port: int = 22
    auth_method: str = "password"
    password: str = ""
    private_key: str | None = None
    timeout: float = 30.0
    strict_host_key: bool = False

    def __post_init__(self):
        self.host = validate_host(self.host)
        self.port = validate_port(self.port, default=22)
        self.timeout = validate_timeout(self.timeout)
        validate_auth(self.auth_method, self.private_key)
