"""Shared test helpers for ynote_client tests."""

from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import parse_qsl

import httpx

BASE_URL = "https://note.example.com"
CREATE_TIME = 1356969600123
MODIFY_TIME = 1357056000456

TEMP_TOKEN = "tmp-token"
TEMP_SECRET = "tmp-secret"
ACCESS_TOKEN = "acc-token"
ACCESS_SECRET = "acc-secret"


def parse_form(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body."""
    return dict(parse_qsl(request.content.decode("utf-8")))


def parse_multipart(request: httpx.Request) -> dict[str, Any]:
    """Split a multipart request into {name: str} (files: {name: (filename, bytes)})."""
    boundary = request.headers["Content-Type"].split("boundary=")[1].encode()
    fields: dict[str, Any] = {}
    for chunk in request.content.split(b"--" + boundary):
        head, sep, value = chunk.partition(b"\r\n\r\n")
        name = re.search(rb'name="([^"]*)"', head)
        if not sep or not name:
            continue
        value = value[: -len(b"\r\n")]
        filename = re.search(rb'filename="([^"]*)"', head)
        if filename:
            fields[name.group(1).decode()] = (filename.group(1).decode(), value)
        else:
            fields[name.group(1).decode()] = value.decode("utf-8")
    return fields


def json_response(status_code: int, data: Any) -> httpx.Response:
    return httpx.Response(status_code, text=json.dumps(data))


def fail_info(code: str, message: str) -> httpx.Response:
    return json_response(500, {"message": message, "error": code})


class FakeYnoteServer:
    """In-memory stand-in for the note service, used as an httpx.MockTransport handler."""

    def __init__(self) -> None:
        self.notebooks: dict[str, dict[str, Any]] = {}
        self.notes: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.valid_tokens = {ACCESS_TOKEN}
        self.overrides: dict[str, tuple[int, str]] = {}
        self._next_id = 1

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def add_notebook(self, name: str, group: str = "") -> str:
        path = f"/nb{self._new_id()}"
        self.notebooks[path] = {
            "name": name,
            "path": path,
            "notes_num": 0,
            "create_time": CREATE_TIME,
            "modify_time": MODIFY_TIME,
            "group": group,
        }
        return path

    def add_note(
        self,
        notebook_path: str,
        title: str,
        author: str = "author",
        source: str = "",
        content: str = "<p>content</p>",
    ) -> str:
        path = f"{notebook_path}/note{self._new_id()}"
        self.notes[path] = {
            "notebook": notebook_path,
            "title": title,
            "author": author,
            "source": source,
            "size": len(content),
            "create_time": CREATE_TIME,
            "modify_time": MODIFY_TIME,
            "content": content,
        }
        self.notebooks[notebook_path]["notes_num"] += 1
        return path

    def override(self, endpoint: str, status_code: int, text: str) -> None:
        """Answer every request to endpoint with a fixed response."""
        self.overrides[endpoint] = (status_code, text)

    def last_request(self, endpoint: str) -> httpx.Request:
        return [r for r in self.requests if r.url.path == endpoint][-1]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path
        if endpoint in self.overrides:
            status_code, text = self.overrides[endpoint]
            return httpx.Response(status_code, text=text)

        auth = request.headers.get("Authorization", "")
        if endpoint == "/oauth/request_token":
            return httpx.Response(
                200, text=f"oauth_token={TEMP_TOKEN}&oauth_token_secret={TEMP_SECRET}"
            )
        if endpoint == "/oauth/access_token":
            if f'oauth_token="{TEMP_TOKEN}"' not in auth or "oauth_verifier=" not in auth:
                return httpx.Response(401, text="oauth_problem=permission_denied")
            return httpx.Response(
                200,
                text=f"oauth_token={ACCESS_TOKEN}&oauth_token_secret={ACCESS_SECRET}",
            )

        if not any(f'oauth_token="{token}"' in auth for token in self.valid_tokens):
            return fail_info("1007", "invalid token")

        route = getattr(self, "_" + endpoint.removeprefix("/yws/open/").replace("/", "_")[:-5])
        return route(request)

    def _user_get(self, request: httpx.Request) -> httpx.Response:
        return json_response(
            200,
            {
                "id": "u1",
                "user": "alice",
                "register_time": CREATE_TIME,
                "last_login_time": MODIFY_TIME,
                "last_modify_time": MODIFY_TIME,
                "total_size": 1073741824,
                "used_size": 2048,
                "default_notebook": "/nb0",
            },
        )

    def _notebook_all(self, request: httpx.Request) -> httpx.Response:
        return json_response(200, list(self.notebooks.values()))

    def _notebook_create(self, request: httpx.Request) -> httpx.Response:
        form = parse_form(request)
        path = self.add_notebook(form["name"], form.get("group", ""))
        return json_response(200, self.notebooks[path])

    def _notebook_delete(self, request: httpx.Request) -> httpx.Response:
        path = parse_form(request)["notebook"]
        if self.notebooks.pop(path, None) is None:
            return fail_info("2001", "notebook not found")
        return httpx.Response(200)

    def _notebook_list(self, request: httpx.Request) -> httpx.Response:
        notebook = parse_form(request)["notebook"]
        if notebook not in self.notebooks:
            return fail_info("2001", "notebook not found")
        return json_response(
            200, [path for path, note in self.notes.items() if note["notebook"] == notebook]
        )

    def _note_create(self, request: httpx.Request) -> httpx.Response:
        fields = parse_multipart(request)
        path = self.add_note(
            fields["notebook"],
            fields["title"],
            fields["author"],
            fields["source"],
            fields["content"],
        )
        return json_response(200, {"path": path})

    def _note_get(self, request: httpx.Request) -> httpx.Response:
        path = parse_form(request)["path"]
        note = self.notes.get(path)
        if note is None:
            return fail_info("3001", "note not found")
        return json_response(200, {k: v for k, v in note.items() if k != "notebook"})

    def _note_update(self, request: httpx.Request) -> httpx.Response:
        fields = parse_multipart(request)
        note = self.notes.get(fields["path"])
        if note is None:
            return fail_info("3001", "note not found")
        for key in ("title", "author", "source", "content"):
            note[key] = fields[key]
        note["size"] = len(note["content"])
        return httpx.Response(200)

    def _note_delete(self, request: httpx.Request) -> httpx.Response:
        if self.notes.pop(parse_form(request)["path"], None) is None:
            return fail_info("3001", "note not found")
        return httpx.Response(200)

    def _note_move(self, request: httpx.Request) -> httpx.Response:
        form = parse_form(request)
        note = self.notes.get(form["path"])
        if note is None or form["notebook"] not in self.notebooks:
            return fail_info("3001", "note not found")
        note["notebook"] = form["notebook"]
        return httpx.Response(200)

    def _resource_upload(self, request: httpx.Request) -> httpx.Response:
        filename, _ = parse_multipart(request)["file"]
        url = f"{BASE_URL}/yws/open/resource/download/1/{filename}"
        if filename.endswith((".png", ".jpg", ".gif")):
            return json_response(200, {"url": url})
        return json_response(200, {"url": url, "src": f"{BASE_URL}/icons/file.png"})
