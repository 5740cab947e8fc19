"""Main YnoteClient class for the Youdao Note open API."""

from __future__ import annotations

import json
import logging
import mimetypes
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import parse_qsl, urlencode

import httpx

from ynote_client._internal.oauth import (
    CONTENT_TYPE_FORM_URLENCODED,
    OAuthSigner,
    encode_form,
)
from ynote_client.exceptions import (
    AuthorizationError,
    MalformedResponseError,
    ServerError,
    SessionError,
)
from ynote_client.models import AttachmentInfo, Credentials, NoteInfo, NotebookInfo, UserInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://note.youdao.com"

REQUEST_TOKEN_PATH = "/oauth/request_token"
AUTHORIZE_PATH = "/oauth/authorize"
ACCESS_TOKEN_PATH = "/oauth/access_token"


class YnoteClient:
    """Client for the Youdao Note open API.

    Supports both context manager and manual session patterns.

    Example (first run, no access token yet):
        with YnoteClient(Credentials("key", "secret")) as client:
            tmp = client.request_temporary_credentials()
            print(client.authorization_url(tmp))
            client.request_token(tmp, input("verifier: "))
            print(client.user_info().user)

    Example (saved access token):
        client = YnoteClient(Credentials("key", "secret"), access_token=token)
        for notebook in client.list_notebooks():
            print(notebook.name)
        client.close()
    """

    def __init__(
        self,
        consumer: Credentials,
        base_url: str = DEFAULT_BASE_URL,
        *,
        access_token: Credentials | None = None,
        http_client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            consumer: Application key/secret
            base_url: Service URL base, without trailing slash
            access_token: Previously obtained access token, if any
            http_client: Optional httpx.Client to send requests with; it is
                not closed by close()
            timeout: Request timeout in seconds for the internal http client;
                configure an injected http_client directly instead

        Raises:
            ValueError: If both http_client and timeout are given
        """
        if http_client is not None and timeout is not None:
            raise ValueError("Pass timeout or http_client, not both")
        self.base_url = base_url.rstrip("/")
        self.consumer = consumer
        self.access_token = access_token
        self._signer = OAuthSigner(consumer)
        self._owns_http = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=timeout) if timeout is not None else httpx.Client()
        self._http: httpx.Client | None = http_client

    def __enter__(self) -> YnoteClient:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit context manager."""
        self.close()

    @property
    def is_authorized(self) -> bool:
        """Check if the client holds an access token."""
        return self.access_token is not None

    def _ensure_authorized(self) -> Credentials:
        if self.access_token is None:
            raise SessionError("Not authorized. Call request_token() or set access_token first.")
        return self.access_token

    def _get_http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client()
            self._owns_http = True
        return self._http

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    # Authorization flow

    def request_temporary_credentials(self, callback_uri: str | None = None) -> Credentials:
        """Request short-lived temporary credentials.

        Args:
            callback_uri: Optional oauth_callback sent with the request

        Returns:
            Temporary credentials to pass to authorization_url()

        Raises:
            AuthorizationError: If the provider rejects the request
        """
        url = self._url(REQUEST_TOKEN_PATH)
        auth = self._signer.authorization_header("POST", url, callback_uri=callback_uri)
        response = self._get_http().post(url, headers={"Authorization": auth})
        temp_cred = self._parse_credentials(response, "Request temporary credentials")
        logger.info("Obtained temporary credentials")
        return temp_cred

    def authorization_url(self, temp_cred: Credentials) -> str:
        """Build the URL where the user grants access and gets a verifier."""
        return f"{self._url(AUTHORIZE_PATH)}?{urlencode({'oauth_token': temp_cred.token})}"

    def request_token(self, temp_cred: Credentials, verifier: str) -> Credentials:
        """Exchange temporary credentials and a verifier for an access token.

        On success the access token is stored on the client.

        Args:
            temp_cred: Credentials from request_temporary_credentials()
            verifier: The verifier the user got after authorizing

        Returns:
            The access token

        Raises:
            AuthorizationError: If the provider rejects the exchange
        """
        url = self._url(ACCESS_TOKEN_PATH)
        auth = self._signer.authorization_header("POST", url, temp_cred, verifier=verifier)
        response = self._get_http().post(url, headers={"Authorization": auth})
        self.access_token = self._parse_credentials(response, "Request access token")
        logger.info("Obtained access token")
        return self.access_token

    def _parse_credentials(self, response: httpx.Response, action: str) -> Credentials:
        body = response.text
        if response.status_code != 200:
            raise AuthorizationError(
                f"{action} failed with status {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )
        params = dict(parse_qsl(body))
        token = params.get("oauth_token")
        secret = params.get("oauth_token_secret")
        if not token or not secret:
            raise AuthorizationError(
                f"{action} returned no token: {body}",
                status_code=response.status_code,
                body=body,
            )
        return Credentials(token=token, secret=secret)

    # Request plumbing

    def _get(self, endpoint: str) -> httpx.Response:
        token = self._ensure_authorized()
        url = self._url(endpoint)
        logger.debug(f"GET {url}")
        auth = self._signer.authorization_header("GET", url, token)
        return self._get_http().get(url, headers={"Authorization": auth})

    def _post_form(self, endpoint: str, form: dict[str, str] | None = None) -> httpx.Response:
        token = self._ensure_authorized()
        url = self._url(endpoint)
        logger.debug(f"POST {url}")
        body = encode_form(form)
        headers = {"Authorization": self._signer.authorization_header("POST", url, token, body)}
        if body:
            headers["Content-Type"] = CONTENT_TYPE_FORM_URLENCODED
        return self._get_http().post(url, content=body, headers=headers)

    def _post_multipart(
        self,
        endpoint: str,
        fields: dict[str, str],
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        token = self._ensure_authorized()
        url = self._url(endpoint)
        logger.debug(f"POST multipart {url}")
        # The multipart payload is not part of the signature
        auth = self._signer.authorization_header("POST", url, token)
        parts: dict[str, Any] = {name: (None, value) for name, value in fields.items()}
        parts.update(files or {})
        return self._get_http().post(url, files=parts, headers={"Authorization": auth})

    def _check(self, response: httpx.Response) -> str:
        """Return the body of a successful response.

        HTTP 500 carries the server's failure info and raises ServerError.
        Any other non-2xx status raises MalformedResponseError.
        """
        body = response.text
        if response.status_code == 500:
            raise _parse_server_error(body)
        if not response.is_success:
            raise MalformedResponseError(
                f"Unexpected status {response.status_code}", body, response.status_code
            )
        return body

    def _parse_json(self, response: httpx.Response, expected: type) -> Any:
        body = self._check(response)
        try:
            data = json.loads(body)
        except ValueError as e:
            logger.warning(f"Response is not a JSON: {body!r}")
            raise MalformedResponseError(
                f"Response is not a JSON: {e}", body, response.status_code
            ) from e
        if not isinstance(data, expected):
            raise MalformedResponseError(
                f"Expected a JSON {expected.__name__}, got {type(data).__name__}",
                body,
                response.status_code,
            )
        return data

    def _decode(
        self, response: httpx.Response, expected: type, build: Callable[[Any], T]
    ) -> T:
        """Parse the JSON body and map it with build.

        Wire values of the wrong type raise MalformedResponseError.
        """
        data = self._parse_json(response, expected)
        try:
            return build(data)
        except (AttributeError, KeyError, TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Unexpected response shape: {e}")
            raise MalformedResponseError(
                f"Unexpected response shape: {e}", response.text, response.status_code
            ) from e

    # User

    def user_info(self) -> UserInfo:
        """Fetch the information of the authorized user.

        Raises:
            SessionError: If no access token is set
            ServerError: If the server reports a failure
            MalformedResponseError: If the response is not the expected JSON
        """
        return self._decode(self._get("/yws/open/user/get.json"), dict, UserInfo.from_wire)

    # Notebooks

    def create_notebook(self, name: str, group: str | None = None) -> NotebookInfo:
        """Create a notebook with the given name.

        Args:
            name: Notebook name
            group: Optional notebook group

        Returns:
            NotebookInfo for the created notebook
        """
        form = {"name": name}
        if group:
            form["group"] = group
        response = self._post_form("/yws/open/notebook/create.json", form)
        notebook = self._decode(response, dict, NotebookInfo.from_wire)
        logger.info(f"Created notebook: {name}")
        return notebook

    def list_notebooks(self) -> list[NotebookInfo]:
        """Return all notebooks in server order."""
        response = self._post_form("/yws/open/notebook/all.json")
        return self._decode(
            response, list, lambda data: [NotebookInfo.from_wire(item) for item in data]
        )

    def find_notebook(self, name: str) -> NotebookInfo | None:
        """Return the notebook with exactly this name, or None if not found.

        There is no lookup endpoint; this scans list_notebooks().
        """
        for notebook in self.list_notebooks():
            if notebook.name == name:
                return notebook
        return None

    def delete_notebook(self, notebook_path: str) -> None:
        """Delete a notebook and the notes in it."""
        self._check(self._post_form("/yws/open/notebook/delete.json", {"notebook": notebook_path}))
        logger.info(f"Deleted notebook: {notebook_path}")

    # Notes

    def list_notes(self, notebook_path: str) -> list[str]:
        """Return the paths of the notes in a notebook."""
        response = self._post_form("/yws/open/notebook/list.json", {"notebook": notebook_path})
        return self._decode(response, list, _note_paths)

    def create_note(
        self,
        notebook_path: str,
        title: str,
        author: str,
        source: str,
        content: str,
    ) -> str:
        """Create a note in a notebook.

        Args:
            notebook_path: Path of the notebook
            title: Note title
            author: Note author
            source: Source URL of the note
            content: HTML content

        Returns:
            Path of the new note
        """
        response = self._post_multipart(
            "/yws/open/note/create.json",
            {
                "notebook": notebook_path,
                "title": title,
                "author": author,
                "source": source,
                "content": content,
            },
        )
        data = self._parse_json(response, dict)
        path = data.get("path")
        if not path or not isinstance(path, str):
            raise MalformedResponseError(
                "Create note response has no path", response.text, response.status_code
            )
        logger.info(f"Created note: {path}")
        return path

    def note_info(self, note_path: str) -> NoteInfo:
        """Fetch a note including its content."""
        response = self._post_form("/yws/open/note/get.json", {"path": note_path})
        return self._decode(response, dict, lambda data: NoteInfo.from_wire(data, path=note_path))

    def update_note(
        self,
        note_path: str,
        title: str,
        author: str,
        source: str,
        content: str,
    ) -> None:
        """Replace title, author, source and content of a note."""
        response = self._post_multipart(
            "/yws/open/note/update.json",
            {
                "path": note_path,
                "title": title,
                "author": author,
                "source": source,
                "content": content,
            },
        )
        self._check(response)
        logger.info(f"Updated note: {note_path}")

    def delete_note(self, note_path: str) -> None:
        """Delete a note."""
        self._check(self._post_form("/yws/open/note/delete.json", {"path": note_path}))
        logger.info(f"Deleted note: {note_path}")

    def move_note(self, note_path: str, notebook_path: str) -> None:
        """Move a note to another notebook."""
        response = self._post_form(
            "/yws/open/note/move.json", {"path": note_path, "notebook": notebook_path}
        )
        self._check(response)
        logger.info(f"Moved note {note_path} to {notebook_path}")

    # Attachments

    def upload_attachment(self, file_path: str | Path) -> AttachmentInfo:
        """Upload a local file as an attachment.

        Args:
            file_path: Path to the file

        Returns:
            AttachmentInfo with the attachment URL (and a source URL for
            non-image files)

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self._ensure_authorized()
        file_path = Path(file_path)
        if not file_path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")

        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        with file_path.open("rb") as fh:
            response = self._post_multipart(
                "/yws/open/resource/upload.json",
                {},
                files={"file": (file_path.name, fh, content_type)},
            )
        attachment = self._decode(response, dict, AttachmentInfo.from_wire)
        logger.info(f"Uploaded attachment {file_path.name}")
        return attachment

    def authorize_download_link(self, url: str) -> str:
        """Sign a resource URL so it can be downloaded without headers."""
        token = self._ensure_authorized()
        return self._signer.sign_url(url, token)

    def close(self) -> None:
        """Close the client and clean up resources."""
        if self._http is not None and self._owns_http:
            self._http.close()
        self._http = None


def _parse_server_error(body: str) -> ServerError:
    try:
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("not an object")
    except ValueError:
        return ServerError("Unknown", f"Parse failure info failed: {body}")
    return ServerError(str(data.get("error") or ""), str(data.get("message") or ""))


def _note_paths(data: list[Any]) -> list[str]:
    for path in data:
        if not isinstance(path, str):
            raise TypeError(f"Note path must be a string, got {type(path).__name__}")
    return data
