"""
GigaChat Client - Authentication and chat-completion wrapper

Responsibilities:
- Exchange client credentials for a bearer token (once, at startup)
- Send the full transcript to the chat-completions endpoint
- Return the first choice's content, or a fixed fallback string
- Greeting bypass: return a supplied initial prompt without any request

Design principles:
- Dependency injection (http client can be supplied, no singleton)
- Fail fast on authentication errors (fatal to startup)
- Gateway errors are raised as GatewayError; the caller decides recovery
- No retries, no token refresh
"""

import base64
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from intake_console.config import ClientConfig

logger = logging.getLogger(__name__)

NO_ANSWER_FALLBACK = "No answer available"


class GigaChatError(RuntimeError):
    """Base class for client errors"""


class AuthenticationError(GigaChatError):
    """Token could not be obtained. Fatal at startup."""


class GatewayError(GigaChatError):
    """Completion call failed. Recoverable per turn."""


@dataclass(frozen=True)
class AccessToken:
    """
    Bearer credential returned by the token endpoint.

    Attributes:
        value: access_token
        expires_at: expiry as reported by the server (unix time)
    """
    value: str
    expires_at: int

    def __repr__(self) -> str:
        return f"AccessToken(value=<hidden>, expires_at={self.expires_at})"


class GigaChatClient:
    """Wrapper for the GigaChat OAuth + chat-completions API"""

    def __init__(self, config: ClientConfig, http_client: Optional[httpx.Client] = None) -> None:
        """
        Args:
            config: Endpoint, credential and generation settings
            http_client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self.config = config
        self._client = http_client or httpx.Client(
            timeout=config.timeout,
            verify=config.verify_ssl,
        )
        self._token: Optional[AccessToken] = None

        if config.verify_ssl is False:
            logger.warning("TLS certificate verification is disabled")

        logger.info(f"GigaChat client initialized: model={config.model}, api={config.api_url}")

    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    def _basic_credentials(self) -> str:
        raw = f"{self.config.client_id}:{self.config.client_secret}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")

    def authenticate(self) -> AccessToken:
        """
        Obtain a bearer token from the OAuth endpoint.

        Returns:
            AccessToken: Stored on the client for later calls

        Raises:
            AuthenticationError: On transport failure, non-success status,
                non-JSON body or a missing access_token
        """
        headers = {
            "Authorization": f"Basic {self._basic_credentials()}",
            "RqUID": str(uuid.uuid4()),
            "Accept": "application/json",
        }

        logger.info(f"Authenticating against {self.config.auth_url}")
        try:
            response = self._client.post(
                self.config.auth_url,
                headers=headers,
                data={"scope": self.config.scope},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Authentication rejected: HTTP {e.response.status_code}")
            raise AuthenticationError(f"Authentication failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Authentication request failed: {e}")
            raise AuthenticationError(f"Authentication request failed: {e}") from e
        except ValueError as e:
            logger.error("Authentication response is not valid JSON")
            raise AuthenticationError("Authentication response is not valid JSON") from e

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise AuthenticationError("Failed to obtain access token")

        try:
            expires_at = int(payload.get("expires_at") or 0)
        except (TypeError, ValueError) as e:
            raise AuthenticationError(f"Malformed expires_at: {payload.get('expires_at')!r}") from e

        self._token = AccessToken(value=access_token, expires_at=expires_at)
        logger.info(f"Authentication successful (expires_at={self._token.expires_at})")
        return self._token

    def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        initial_prompt: Optional[str] = None
    ) -> str:
        """
        Generate the next assistant reply for a transcript.

        Args:
            messages: Full transcript as [{'role', 'content'}, ...]
            temperature: Sampling temperature
            max_tokens: Generation limit (defaults to config.max_tokens)
            initial_prompt: If given, returned verbatim and no request is made

        Returns:
            str: Reply text, or NO_ANSWER_FALLBACK if the response has no choices

        Raises:
            GatewayError: Not authenticated, transport failure, non-success
                status or non-JSON body
        """
        if initial_prompt is not None:
            logger.debug("Greeting bypass: returning initial prompt without a request")
            return initial_prompt

        if self._token is None:
            raise GatewayError("Client is not authenticated")

        payload = {
            "model": self.config.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.config.max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self._token.value}",
            "Accept": "application/json",
        }

        logger.debug(f"Completion request: {len(messages)} messages, temperature={temperature}")
        try:
            response = self._client.post(self.config.api_url, headers=headers, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Completion rejected: HTTP {e.response.status_code}")
            raise GatewayError(f"Completion failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Completion request failed: {e}")
            raise GatewayError(f"Completion request failed: {e}") from e
        except ValueError as e:
            logger.error("Completion response is not valid JSON")
            raise GatewayError("Completion response is not valid JSON") from e

        return self._extract_content(body)

    def _extract_content(self, body: Any) -> str:
        """choices[0].message.content, degrading to NO_ANSWER_FALLBACK"""
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if not isinstance(content, str) or not content:
            logger.warning("Completion response has no text content; using fallback")
            return NO_ANSWER_FALLBACK
        return content

    def close(self) -> None:
        self._client.close()
