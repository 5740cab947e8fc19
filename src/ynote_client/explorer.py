"""Interactive, line-driven explorer: All notebooks -> Notebook -> Note."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable

import click
import httpx

from ynote_client.client import YnoteClient
from ynote_client.exceptions import YnoteError
from ynote_client.models import AttachmentInfo, NoteInfo, NotebookInfo

# Only the first notes of a notebook are listed (each needs a note_info call)
MAX_LISTED_NOTES = 50
EXPLORER_AUTHOR = "ynote"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

OPERATION_ERRORS = (YnoteError, httpx.HTTPError)


class State(enum.Enum):
    ALL = "all"
    NOTEBOOK = "notebook"
    NOTE = "note"


def sort_notebooks(notebooks: Iterable[NotebookInfo]) -> list[NotebookInfo]:
    """Order notebooks: ungrouped first, then by group, then by name."""
    return sorted(notebooks, key=lambda nb: (nb.group != "", nb.group, nb.name))


def render_notebooks(notebooks: list[NotebookInfo]) -> list[str]:
    """Render sorted notebooks as numbered lines with group headers."""
    lines: list[str] = []
    for i, nb in enumerate(notebooks):
        if nb.group and (i == 0 or nb.group != notebooks[i - 1].group):
            lines.append(f"    + {nb.group}")
        indent = "    " if nb.group else ""
        lines.append(f"{i + 1:2d}: {indent}{nb.name}({nb.notes_num})")
    return lines


def attachment_content(attachment: AttachmentInfo) -> str:
    """HTML that embeds an uploaded attachment in a note."""
    if attachment.is_image:
        return f'<img src="{attachment.url}">'
    return f'<img path="{attachment.url}" src="{attachment.src}">'


def _parse_index(cmd: str, count: int) -> int | None:
    try:
        idx = int(cmd)
    except ValueError:
        return None
    if 1 <= idx <= count:
        return idx - 1
    return None


def _read_stdin_line() -> str:
    return click.get_text_stream("stdin").readline()


class Explorer:
    """Explore notebooks and notes of the authorized user.

    Operation failures are reported and keep the current menu, except that a
    failed notebook listing ends the session, a failed note listing goes back
    to all notebooks and a failed note read goes back to the notebook.
    End of input ends the session.
    """

    def __init__(
        self,
        client: YnoteClient,
        *,
        read_line: Callable[[], str] = _read_stdin_line,
    ) -> None:
        self.client = client
        self._read_line = read_line
        self.state = State.ALL
        self.notebook: NotebookInfo | None = None
        self.note_path: str | None = None

    def run(self) -> None:
        """Run until the user quits or input ends."""
        handlers = {
            State.ALL: self._all_notebooks,
            State.NOTEBOOK: self._notebook,
            State.NOTE: self._note,
        }
        while handlers[self.state]():
            pass

    def _read_command(self) -> str | None:
        try:
            line = self._read_line()
        except OSError as e:
            click.echo(f"Read console failed: {e}")
            return None
        if not line:
            return None
        return line.strip()

    def _all_notebooks(self) -> bool:
        try:
            notebooks = sort_notebooks(self.client.list_notebooks())
        except OPERATION_ERRORS as e:
            click.echo(f"ListNotebooks failed: {e}")
            return False

        click.echo("All notebooks:")
        for line in render_notebooks(notebooks):
            click.echo(line)
        prefix = f"1-{len(notebooks)}: View notebook, " if notebooks else ""
        click.echo(f"{prefix}q: quit")

        cmd = self._read_command()
        if cmd is None or cmd == "q":
            return False
        idx = _parse_index(cmd, len(notebooks))
        if idx is not None:
            self.notebook = notebooks[idx]
            self.state = State.NOTEBOOK
        return True

    def _notebook(self) -> bool:
        assert self.notebook is not None
        notebook = self.notebook
        click.echo(f"Notebook: {notebook.name}")
        try:
            notes = self.client.list_notes(notebook.path)
        except OPERATION_ERRORS as e:
            click.echo(f"ListNotes failed: {e}")
            self.state = State.ALL
            return True

        for i, path in enumerate(notes[:MAX_LISTED_NOTES]):
            try:
                title = self.client.note_info(path).title
                click.echo(f"{i + 1:2d}: {title}")
            except OPERATION_ERRORS:
                click.echo(f"{i + 1:2d}: (path){path}")

        prefix = f"1-{len(notes)}: View note, " if notes else ""
        click.echo(
            f"{prefix}a: all notebooks, q: quit, delete: delete the notebook, "
            "put <filename>: add a note with a file as its attachment."
        )

        cmd = self._read_command()
        if cmd is None or cmd == "q":
            return False
        if cmd == "a":
            self.state = State.ALL
        elif cmd == "delete":
            try:
                self.client.delete_notebook(notebook.path)
            except OPERATION_ERRORS as e:
                click.echo(f"DeleteNotebook failed: {e}")
                return True
            click.echo("DeleteNotebook succeeded")
            self.state = State.ALL
        elif cmd.startswith("put "):
            file_name = cmd[len("put "):].strip()
            if file_name:
                self._put(notebook, file_name)
        else:
            idx = _parse_index(cmd, len(notes))
            if idx is not None:
                self.note_path = notes[idx]
                self.state = State.NOTE
        return True

    def _put(self, notebook: NotebookInfo, file_name: str) -> None:
        try:
            attachment = self.client.upload_attachment(file_name)
        except (*OPERATION_ERRORS, OSError) as e:
            click.echo(f"UploadAttachment failed: {e}")
            return
        try:
            path = self.client.create_note(
                notebook.path, file_name, EXPLORER_AUTHOR, "", attachment_content(attachment)
            )
        except OPERATION_ERRORS as e:
            click.echo(f"CreateNote failed: {e}")
            return
        click.echo(f"CreateNote: {path}")

    def _note(self) -> bool:
        assert self.note_path is not None
        note_path = self.note_path
        click.echo(f"Note: {note_path}")
        try:
            note = self.client.note_info(note_path)
        except OPERATION_ERRORS as e:
            click.echo(f"NoteInfo failed: {e}")
            self.state = State.NOTEBOOK
            return True

        click.echo(f"Title     : {note.title}")
        click.echo(f"Author    : {note.author}")
        click.echo(f"Source    : {note.source}")
        click.echo(f"Size      : {note.size} bytes")
        click.echo(f"CreateTime: {note.create_time.astimezone().strftime(TIME_FORMAT)}")
        click.echo(f"ModifyTime: {note.modify_time.astimezone().strftime(TIME_FORMAT)}")
        click.echo(f"Content   : {len(note.content)} bytes")
        click.echo(
            "a: all notebooks, n: notebook, q: quit, delete: delete current note, "
            "title/author/source <content>: change title/author/source, "
            "content: show content, adl <link>: authorize download link"
        )

        cmd = self._read_command()
        if cmd is None or cmd == "q":
            return False
        if cmd == "a":
            self.state = State.ALL
        elif cmd == "n":
            self.state = State.NOTEBOOK
        elif cmd == "content":
            click.echo(note.content)
        elif cmd == "delete":
            click.echo("Deleting note.")
            try:
                self.client.delete_note(note_path)
            except OPERATION_ERRORS as e:
                click.echo(f"DeleteNote failed: {e}")
            self.state = State.NOTEBOOK
        else:
            self._note_edit(note, cmd)
        return True

    def _note_edit(self, note: NoteInfo, cmd: str) -> None:
        field, _, value = cmd.partition(" ")
        value = value.strip()
        if not value:
            return
        if field == "adl":
            try:
                click.echo(self.client.authorize_download_link(value))
            except OPERATION_ERRORS as e:
                click.echo(f"AuthorizeDownloadLink failed: {e}")
            return
        if field not in ("title", "author", "source"):
            return

        changes = {"title": note.title, "author": note.author, "source": note.source}
        changes[field] = value
        click.echo(f"Change {field} to {value}")
        try:
            self.client.update_note(
                note.path,
                changes["title"],
                changes["author"],
                changes["source"],
                note.content,
            )
        except OPERATION_ERRORS as e:
            click.echo(f"UpdateNote failed: {e}")
