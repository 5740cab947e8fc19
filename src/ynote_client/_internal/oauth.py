"""OAuth 1.0a request signing on top of oauthlib."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode

from oauthlib.oauth1 import (
    SIGNATURE_HMAC_SHA1,
    SIGNATURE_TYPE_AUTH_HEADER,
    SIGNATURE_TYPE_QUERY,
    Client,
)

from ynote_client.models import Credentials

CONTENT_TYPE_FORM_URLENCODED = "application/x-www-form-urlencoded"


def encode_form(form: Mapping[str, str] | None) -> str | None:
    """Encode form params the same way for signing and for the request body."""
    if not form:
        return None
    return urlencode(list(form.items()))


class OAuthSigner:
    """Signs requests with the application credentials (HMAC-SHA1).

    Only form-encoded bodies take part in the signature. Multipart and
    empty bodies are signed over the method, URL and OAuth params alone.
    """

    def __init__(self, consumer: Credentials) -> None:
        self.consumer = consumer

    def _client(
        self,
        token: Credentials | None,
        *,
        signature_type: str = SIGNATURE_TYPE_AUTH_HEADER,
        verifier: str | None = None,
        callback_uri: str | None = None,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> Client:
        return Client(
            self.consumer.token,
            client_secret=self.consumer.secret,
            resource_owner_key=token.token if token else None,
            resource_owner_secret=token.secret if token else None,
            callback_uri=callback_uri,
            signature_method=SIGNATURE_HMAC_SHA1,
            signature_type=signature_type,
            verifier=verifier,
            nonce=nonce,
            timestamp=timestamp,
        )

    def authorization_header(
        self,
        method: str,
        url: str,
        token: Credentials | None = None,
        body: str | None = None,
        *,
        verifier: str | None = None,
        callback_uri: str | None = None,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> str:
        """Compute the Authorization header for a request.

        Args:
            method: HTTP method
            url: Absolute request URL
            token: Temporary or access credentials, if any
            body: Form-encoded body (see encode_form); None for requests
                without params and for multipart requests
            verifier: OAuth verifier, for the access-token exchange
            callback_uri: oauth_callback, for the temporary-credential request
            nonce: Fixed nonce (tests only)
            timestamp: Fixed timestamp (tests only)

        Returns:
            The value of the Authorization header
        """
        client = self._client(
            token,
            verifier=verifier,
            callback_uri=callback_uri,
            nonce=nonce,
            timestamp=timestamp,
        )
        headers = {"Content-Type": CONTENT_TYPE_FORM_URLENCODED} if body else None
        _, signed_headers, _ = client.sign(url, http_method=method, body=body, headers=headers)
        return str(signed_headers["Authorization"])

    def sign_url(
        self,
        url: str,
        token: Credentials,
        method: str = "GET",
        *,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> str:
        """Return url with signed OAuth params appended to its query string."""
        client = self._client(
            token,
            signature_type=SIGNATURE_TYPE_QUERY,
            nonce=nonce,
            timestamp=timestamp,
        )
        signed_url, _, _ = client.sign(url, http_method=method)
        return str(signed_url)
