# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import httpx
import pytest

from chainhttp.config import ClientSettings
from chainhttp.errors import AttachmentError, MultipartError, RequestBuildError
from chainhttp.http.client import CONTENT_TYPE, JSON_CONTENT_TYPE, new_client, new_default_client
from chainhttp.http.headers import HeaderMultimap, canonical_header_key
from chainhttp.http.multipart import MultipartWriter


class CapturingTransport(httpx.BaseTransport):
    def __init__(self, status_code: int = 200, content: bytes = b""):
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.content = content

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content)


def test_add_query_ignores_empty_key_or_value():
    client = new_client().get("http://example/items")
    client.add_query("", "v").add_query("k", "")
    assert client.request.url == "http://example/items"


def test_add_query_joins_pairs_in_order():
    client = new_client().get("http://example/items").add_query("k1", "v1").add_query("k2", "v2")
    assert client.request.url == "http://example/items?k1=v1&k2=v2"

    client = new_client().get("http://example/items?page=1").add_query("k", "v")
    assert client.request.url == "http://example/items?page=1&k=v"


def test_set_query_stringifies_values():
    client = new_client().get("http://example").set_query({"a": 1, "flag": True, "skip": None, "off": False})
    assert client.request.url == "http://example?a=1&flag=true&off=false"
    assert new_client().get("http://x").set_query({}).request.url == "http://x"


@pytest.mark.parametrize(
    ("method_name", "verb"),
    [
        ("get", "GET"),
        ("post", "POST"),
        ("put", "PUT"),
        ("patch", "PATCH"),
        ("delete", "DELETE"),
        ("options", "OPTIONS"),
        ("header", "HEADER"),
        ("update", "UPDATE"),
    ],
)
def test_method_selectors_send_their_verb(method_name, verb):
    transport = CapturingTransport()
    client = getattr(new_client(transport=transport), method_name)("http://example/r").do()
    assert client.err is None
    assert transport.requests[0].method == verb
    assert str(transport.requests[0].url) == "http://example/r"


def test_default_client_presets_json_and_timeout():
    client = new_default_client(settings=ClientSettings())
    assert client.request.headers.get_all(CONTENT_TYPE) == [JSON_CONTENT_TYPE]
    assert client.option.timeout == 10.0

    bare = new_client(settings=ClientSettings())
    assert len(bare.request.headers) == 0
    assert bare.option.timeout is None


def test_default_clients_do_not_share_headers():
    first = new_default_client()
    second = new_default_client()
    first.set_header("X-Trace", "1")
    assert "X-Trace" not in second.request.headers


def test_headers_add_and_set():
    transport = CapturingTransport()
    client = (
        new_client(transport=transport)
        .get("http://example")
        .add_header({"x-multi": ["a", "b"], "X-Single": "1"})
        .set_header("x-single", "2")
        .do()
    )
    assert client.err is None
    sent = transport.requests[0].headers
    assert sent.get_list("X-Multi") == ["a", "b"]
    assert sent.get_list("X-Single") == ["2"]


def test_timeout_is_applied_to_every_send():
    transport = CapturingTransport()
    new_client(transport=transport).set_timeout(2.5).get("http://example").do()
    timeout = transport.requests[0].extensions["timeout"]
    assert set(timeout) == {"connect", "read", "write", "pool"}
    assert len(set(timeout.values())) == 1
    assert 0 < timeout["read"] <= 2.5

    transport = CapturingTransport()
    new_client(transport=transport).get("http://example").do()
    assert transport.requests[0].extensions["timeout"]["read"] is None


def test_raw_body_bytes_and_stream():
    transport = CapturingTransport()
    new_client(transport=transport).post("http://example").set_body(b"payload").do()
    assert transport.requests[0].content == b"payload"

    transport = CapturingTransport()
    new_client(transport=transport).post("http://example").set_body(io.BytesIO(b"streamed")).do()
    assert transport.requests[0].content == b"streamed"


def test_multipart_form_is_finalized_at_send(tmp_path):
    upload = tmp_path / "report.txt"
    upload.write_bytes(b"file contents")
    transport = CapturingTransport()

    client = (
        new_default_client(transport=transport)
        .post("http://example/upload")
        .set_form_field("title", "Q3")
        .set_form_file("doc", upload)
        .do()
    )

    assert client.err is None
    assert client.request.writer.closed
    sent = transport.requests[0]
    content_type = sent.headers["Content-Type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    assert sent.headers.get_list("Content-Type") == [content_type]
    boundary = content_type.split("boundary=", 1)[1]
    body = sent.content
    assert body.startswith(f"--{boundary}\r\n".encode())
    assert b'Content-Disposition: form-data; name="title"\r\n\r\nQ3' in body
    assert b'name="doc"; filename="report.txt"' in body
    assert b"file contents" in body
    assert body.endswith(f"\r\n--{boundary}--\r\n".encode())


def test_missing_attachment_latches_error_and_skips_send(tmp_path):
    transport = CapturingTransport()
    client = (
        new_client(transport=transport)
        .post("http://example/upload")
        .set_form_file("doc", tmp_path / "missing.bin")
    )
    error = client.err
    assert isinstance(error, AttachmentError)
    assert isinstance(error.__cause__, FileNotFoundError)

    client.set_form_field("after", "ignored").do()
    assert client.err is error
    assert transport.requests == []
    with pytest.raises(AttachmentError):
        client.into({})


def test_last_body_writer_wins():
    client = new_client().post("http://example").set_body(b"raw").set_form_field("k", "v")
    assert client.request.body is None
    assert client.request.writer is not None

    client.set_body(b"raw again")
    assert client.request.writer is None
    assert client.request.body == b"raw again"


@pytest.mark.parametrize("url", ["", "ftp://example/file", "http://", "not a url"])
def test_unusable_url_is_a_build_error(url):
    transport = CapturingTransport()
    client = new_client(transport=transport).get(url).do()
    assert isinstance(client.err, RequestBuildError)
    assert transport.requests == []


def test_invalid_method_is_a_build_error():
    client = new_client(transport=CapturingTransport()).set_url("http://example")
    client.request.method = "BAD VERB"
    client.do()
    assert isinstance(client.err, RequestBuildError)


def test_header_multimap_is_case_insensitive():
    headers = HeaderMultimap({"content-type": "text/plain"})
    headers.add("CONTENT-TYPE", "text/html")
    assert headers.get_all("Content-Type") == ["text/plain", "text/html"]
    assert list(headers) == ["Content-Type"]
    assert "content-TYPE" in headers
    headers.set("Content-Type")
    assert "Content-Type" not in headers
    assert canonical_header_key("x-request-id") == "X-Request-Id"
    assert canonical_header_key("bad key") == "bad key"


def test_multipart_writer_closes_exactly_once():
    writer = MultipartWriter(boundary="b")
    part = writer.create_form_file("f", 'we"ird.txt')
    part.write(b"data")
    writer.write_field("k", "v")
    with pytest.raises(MultipartError):
        part.write(b"late")
    writer.close()
    with pytest.raises(MultipartError):
        writer.close()
    with pytest.raises(MultipartError):
        writer.write_field("x", "y")
    assert writer.getvalue() == (
        b"--b\r\n"
        b'Content-Disposition: form-data; name="f"; filename="we\\"ird.txt"\r\n'
        b"Content-Type: application/octet-stream\r\n\r\n"
        b"data"
        b"\r\n--b\r\n"
        b'Content-Disposition: form-data; name="k"\r\n\r\n'
        b"v"
        b"\r\n--b--\r\n"
    )


def test_unencodable_header_is_a_build_error():
    transport = CapturingTransport()
    client = new_client(transport=transport).get("http://example").set_header("X-Name", "café").do()
    assert isinstance(client.err, RequestBuildError)
    assert isinstance(client.err.__cause__, UnicodeEncodeError)
    assert transport.requests == []


def test_unsupported_body_type_is_a_build_error():
    transport = CapturingTransport()
    client = new_client(transport=transport).post("http://example").set_body({"a": 1}).do()
    assert isinstance(client.err, RequestBuildError)
    assert isinstance(client.err.__cause__, TypeError)
    assert transport.requests == []
    with pytest.raises(RequestBuildError):
        client.into({})
