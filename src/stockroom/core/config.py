import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

# In a real deployment, load these from the environment or a secrets store
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "stockroom-dev-secret-!ChangeMe!"
)  # TODO: refuse to start with the default key outside development
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./stockroom.sqlite3")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Applied to store reads and mail transport calls made on behalf of one request
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))


@dataclass(frozen=True)
class MailSettings:
    host: str
    port: int
    username: str
    password: str
    sender: str
    use_tls: bool = True


def load_mail_settings(environ: Optional[dict] = None) -> MailSettings:
    """Reads the outbound mail transport settings.

    Called once during application startup. A missing value is a fatal
    configuration problem rather than something a request can recover from.

    Raises:
        ConfigurationError: if host, port, username or password is missing,
            or if the port is not an integer.
    """
    env = os.environ if environ is None else environ
    required = ("MAIL_HOST", "MAIL_PORT", "MAIL_USERNAME", "MAIL_PASSWORD")
    missing = [name for name in required if not env.get(name)]
    if missing:
        raise ConfigurationError(
            f"Missing mail configuration: {', '.join(missing)} must be set."
        )
    try:
        port = int(env["MAIL_PORT"])
    except ValueError:
        raise ConfigurationError(f"MAIL_PORT must be an integer, got {env['MAIL_PORT']!r}.")

    return MailSettings(
        host=env["MAIL_HOST"],
        port=port,
        username=env["MAIL_USERNAME"],
        password=env["MAIL_PASSWORD"],
        sender=env.get("MAIL_FROM") or env["MAIL_USERNAME"],
        use_tls=env.get("MAIL_USE_TLS", "true").lower() in ("true", "1", "t", "yes"),
    )
