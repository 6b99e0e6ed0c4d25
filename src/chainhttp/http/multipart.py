# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory multipart/form-data writer."""

from __future__ import annotations

import io
import secrets

from ..errors import MultipartError


def _escape_quotes(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class _PartWriter:
    """Writable handle for the body of the most recently created part."""

    def __init__(self, writer: MultipartWriter):
        self._writer = writer

    def write(self, data: bytes) -> int:
        if self._writer._current is not self or self._writer.closed:
            raise MultipartError("write to a multipart part that is no longer open")
        return self._writer._buffer.write(data)

    def writable(self) -> bool:
        return True


class MultipartWriter:
    """
    Frames form fields and files into a multipart body held in memory.

    Parts are written in order; creating a new part ends the previous one.
    close() writes the closing boundary and may be called exactly once.
    """

    def __init__(self, buffer: io.BytesIO | None = None, boundary: str | None = None):
        self._buffer = buffer if buffer is not None else io.BytesIO()
        self._boundary = boundary or secrets.token_hex(30)
        self._current: _PartWriter | None = None
        self._parts = 0
        self._closed = False

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def closed(self) -> bool:
        return self._closed

    def form_data_content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"

    def create_part(self, headers: list[tuple[str, str]]) -> _PartWriter:
        if self._closed:
            raise MultipartError("multipart writer is closed")
        prefix = "\r\n" if self._parts else ""
        lines = [f"{prefix}--{self._boundary}\r\n"]
        lines.extend(f"{key}: {value}\r\n" for key, value in headers)
        lines.append("\r\n")
        self._buffer.write("".join(lines).encode("utf-8"))
        self._parts += 1
        self._current = _PartWriter(self)
        return self._current

    def create_form_field(self, name: str) -> _PartWriter:
        return self.create_part([("Content-Disposition", f'form-data; name="{_escape_quotes(name)}"')])

    def create_form_file(self, field_name: str, file_name: str) -> _PartWriter:
        disposition = f'form-data; name="{_escape_quotes(field_name)}"; filename="{_escape_quotes(file_name)}"'
        return self.create_part(
            [
                ("Content-Disposition", disposition),
                ("Content-Type", "application/octet-stream"),
            ]
        )

    def write_field(self, name: str, value: str) -> None:
        self.create_form_field(name).write(value.encode("utf-8"))

    def close(self) -> None:
        if self._closed:
            raise MultipartError("multipart writer already closed")
        prefix = "\r\n" if self._parts else ""
        self._buffer.write(f"{prefix}--{self._boundary}--\r\n".encode("utf-8"))
        self._current = None
        self._closed = True

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


__all__ = ["MultipartWriter"]
