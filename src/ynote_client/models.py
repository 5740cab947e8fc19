"""Data models for the ynote_client library."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def from_epoch_ms(ms: int) -> datetime:
    """Convert server epoch milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=int(ms))


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime back to epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def _text(data: dict[str, Any], key: str) -> str:
    """A string field; null or missing is ""."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _number(data: dict[str, Any], key: str) -> int:
    """An integer field; missing is 0."""
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    return int(value)


@dataclass(frozen=True)
class Credentials:
    """An OAuth token/secret pair."""

    token: str
    secret: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Credentials:
        return cls(token=str(data["token"]), secret=str(data["secret"]))

    def to_dict(self) -> dict[str, str]:
        return {"token": self.token, "secret": self.secret}


@dataclass(frozen=True)
class UserInfo:
    """Information about the authorized user."""

    id: str
    user: str
    register_time: datetime
    last_login_time: datetime
    last_modify_time: datetime
    total_size: int
    used_size: int
    default_notebook: str

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> UserInfo:
        return cls(
            id=_text(data, "id"),
            user=_text(data, "user"),
            register_time=from_epoch_ms(_number(data, "register_time")),
            last_login_time=from_epoch_ms(_number(data, "last_login_time")),
            last_modify_time=from_epoch_ms(_number(data, "last_modify_time")),
            total_size=_number(data, "total_size"),
            used_size=_number(data, "used_size"),
            default_notebook=_text(data, "default_notebook"),
        )


@dataclass(frozen=True)
class NotebookInfo:
    """Information about a notebook."""

    name: str
    path: str
    notes_num: int
    create_time: datetime
    modify_time: datetime
    group: str = ""

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> NotebookInfo:
        return cls(
            name=_text(data, "name"),
            path=_text(data, "path"),
            notes_num=_number(data, "notes_num"),
            create_time=from_epoch_ms(_number(data, "create_time")),
            modify_time=from_epoch_ms(_number(data, "modify_time")),
            group=_text(data, "group"),
        )

    def to_wire(self) -> dict[str, Any]:
        """Format back into the server's JSON shape."""
        return {
            "name": self.name,
            "path": self.path,
            "notes_num": self.notes_num,
            "create_time": to_epoch_ms(self.create_time),
            "modify_time": to_epoch_ms(self.modify_time),
            "group": self.group,
        }


@dataclass(frozen=True)
class NoteInfo:
    """A note with its metadata and HTML content."""

    path: str
    title: str
    author: str
    source: str
    size: int
    create_time: datetime
    modify_time: datetime
    content: str

    @classmethod
    def from_wire(cls, data: dict[str, Any], path: str = "") -> NoteInfo:
        return cls(
            path=_text(data, "path") or path,
            title=_text(data, "title"),
            author=_text(data, "author"),
            source=_text(data, "source"),
            size=_number(data, "size"),
            create_time=from_epoch_ms(_number(data, "create_time")),
            modify_time=from_epoch_ms(_number(data, "modify_time")),
            content=_text(data, "content"),
        )


@dataclass(frozen=True)
class AttachmentInfo:
    """Result of an attachment upload.

    src is None for images; other attachment types also get a source URL.
    """

    url: str
    src: str | None = None

    @property
    def is_image(self) -> bool:
        return not self.src

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> AttachmentInfo:
        return cls(url=_text(data, "url"), src=_text(data, "src") or None)
