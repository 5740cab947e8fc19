"""ynote_client - A Python client for the Youdao Note open API.

Example usage:
    from ynote_client import Credentials, YnoteClient

    # Using context manager (recommended)
    with YnoteClient(Credentials("key", "secret"), access_token=token) as client:
        notebook = client.find_notebook("Inbox")
        path = client.create_note(notebook.path, "Hello", "me", "", "<p>Hi</p>")
        print(client.note_info(path).title)

    # Getting an access token
    client = YnoteClient(Credentials("key", "secret"))
    tmp = client.request_temporary_credentials()
    print(client.authorization_url(tmp))
    token = client.request_token(tmp, input("verifier: "))
    client.close()
"""

from ynote_client.client import DEFAULT_BASE_URL, YnoteClient
from ynote_client.exceptions import (
    TOKEN_INVALID_CODE,
    AuthorizationError,
    MalformedResponseError,
    ServerError,
    SessionError,
    YnoteError,
)
from ynote_client.models import (
    AttachmentInfo,
    Credentials,
    NoteInfo,
    NotebookInfo,
    UserInfo,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "YnoteClient",
    "DEFAULT_BASE_URL",
    # Models
    "Credentials",
    "UserInfo",
    "NotebookInfo",
    "NoteInfo",
    "AttachmentInfo",
    # Exceptions
    "YnoteError",
    "AuthorizationError",
    "SessionError",
    "ServerError",
    "MalformedResponseError",
    "TOKEN_INVALID_CODE",
]
