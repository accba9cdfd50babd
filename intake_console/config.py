"""
Client configuration.

Values come from environment variables; a local .env file is loaded first
if present. Defaults match the public GigaChat endpoints.

Variables:
- GIGACHAT_CLIENT_ID / GIGACHAT_CLIENT_SECRET: OAuth client credentials (required)
- GIGACHAT_AUTH_URL: token endpoint
- GIGACHAT_API_URL: chat-completions endpoint
- GIGACHAT_SCOPE: OAuth scope
- GIGACHAT_MODEL: model name sent with every request
- GIGACHAT_MAX_TOKENS: generation limit per reply
- GIGACHAT_TIMEOUT: HTTP timeout in seconds
- GIGACHAT_VERIFY_SSL: true / false / path to a CA bundle
- INTAKE_MODE: starting mode (plain, structured-json, guided-intake)
"""

import os
from dataclasses import dataclass
from typing import Union

from dotenv import load_dotenv

from intake_console.utils.conversation_modes import Mode, to_mode

DEFAULT_AUTH_URL = "https://ngw.devices.sberbank.ru:9443/api/v2/oauth"
DEFAULT_API_URL = "https://gigachat.devices.sberbank.ru/api/v1/chat/completions"
DEFAULT_SCOPE = "GIGACHAT_API_PERS"
DEFAULT_MODEL = "GigaChat"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT = 60.0


def _parse_verify(value: str) -> Union[bool, str]:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", ""):
        return True
    if lowered in ("false", "0", "no"):
        return False
    return value.strip()


@dataclass
class ClientConfig:
    """Configuration for the GigaChat client and the console session."""

    client_id: str = ""
    client_secret: str = ""
    auth_url: str = DEFAULT_AUTH_URL
    api_url: str = DEFAULT_API_URL
    scope: str = DEFAULT_SCOPE
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: Union[bool, str] = True
    mode: Mode = Mode.PLAIN

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "ClientConfig":
        """Load configuration from environment variables (and .env)."""
        if load_env_file:
            load_dotenv()
        return cls(
            client_id=os.getenv("GIGACHAT_CLIENT_ID", ""),
            client_secret=os.getenv("GIGACHAT_CLIENT_SECRET", ""),
            auth_url=os.getenv("GIGACHAT_AUTH_URL", DEFAULT_AUTH_URL),
            api_url=os.getenv("GIGACHAT_API_URL", DEFAULT_API_URL),
            scope=os.getenv("GIGACHAT_SCOPE", DEFAULT_SCOPE),
            model=os.getenv("GIGACHAT_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("GIGACHAT_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
            timeout=float(os.getenv("GIGACHAT_TIMEOUT", str(DEFAULT_TIMEOUT))),
            verify_ssl=_parse_verify(os.getenv("GIGACHAT_VERIFY_SSL", "true")),
            mode=to_mode(os.getenv("INTAKE_MODE", Mode.PLAIN.value)),
        )

    def validate(self) -> None:
        """
        Raises:
            ValueError: If client credentials are missing
        """
        missing = [
            name for name, value in (
                ("GIGACHAT_CLIENT_ID", self.client_id),
                ("GIGACHAT_CLIENT_SECRET", self.client_secret),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing credentials: {', '.join(missing)}")
