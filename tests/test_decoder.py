"""Tests for response decoding."""

import pytest
import requests

from LabRepo.decoder import ArchiveStream, decode_entity, decode_list, decode_stream, decode_text
from LabRepo.errors import (
    DecodeError,
    GitLabApiError,
    MissingFilenameHeader,
    StreamConsumedError,
    TransportError,
)
from LabRepo.models import Branch, Tag, TreeItem, TreeItemType

from conftest import interrupted_response, make_response


class TestDecodeEntity:
    def test_branch(self):
        resp = make_response(
            json_body={
                "name": "main",
                "protected": True,
                "commit": {"id": "abc123", "message": "Initial", "parent_ids": []},
            }
        )
        branch = decode_entity(resp, Branch)
        assert branch.name == "main"
        assert branch.protected is True
        assert branch.commit.id == "abc123"

    def test_tag_with_release(self):
        resp = make_response(
            json_body={
                "name": "v1.0",
                "message": "First",
                "commit": {"id": "abc"},
                "release": {"tag_name": "v1.0", "description": "notes"},
            }
        )
        tag = decode_entity(resp, Tag)
        assert tag.release.description == "notes"
        assert tag.commit.id == "abc"

    def test_invalid_json_keeps_body(self):
        resp = make_response(body="<html>oops</html>")
        with pytest.raises(DecodeError) as exc_info:
            decode_entity(resp, Branch)
        assert exc_info.value.body == "<html>oops</html>"

    def test_array_instead_of_object(self):
        resp = make_response(json_body=[{"name": "main"}])
        with pytest.raises(DecodeError, match="JSON object"):
            decode_entity(resp, Branch)

    def test_missing_field_keeps_body(self):
        resp = make_response(json_body={"protected": True})
        with pytest.raises(DecodeError, match="name") as exc_info:
            decode_entity(resp, Branch)
        assert '"protected": true' in exc_info.value.body


class TestDecodeList:
    def test_preserves_server_order(self):
        resp = make_response(
            json_body=[{"name": "v2.0"}, {"name": "v10.0"}, {"name": "v1.0"}]
        )
        tags = decode_list(resp, Tag)
        assert [t.name for t in tags] == ["v2.0", "v10.0", "v1.0"]

    def test_tree_items(self):
        resp = make_response(
            json_body=[
                {"id": "a1", "name": "src", "type": "tree", "path": "src", "mode": "040000"},
                {"id": "b2", "name": "README.md", "type": "blob", "path": "README.md", "mode": "100644"},
            ]
        )
        items = decode_list(resp, TreeItem)
        assert items[0].type == TreeItemType.TREE
        assert items[0].is_dir
        assert items[1].type == TreeItemType.BLOB

    def test_unknown_tree_type(self):
        resp = make_response(json_body=[{"id": "a", "name": "x", "type": "symlink"}])
        with pytest.raises(DecodeError, match="symlink"):
            decode_list(resp, TreeItem)

    def test_object_instead_of_array(self):
        resp = make_response(json_body={"message": "404 Not Found"})
        with pytest.raises(DecodeError, match="JSON array") as exc_info:
            decode_list(resp, Branch)
        assert "404 Not Found" in exc_info.value.body

    def test_empty(self):
        assert decode_list(make_response(json_body=[]), Branch) == []


class TestDecodeText:
    def test_json_looking_text_is_not_parsed(self):
        resp = make_response(body='{"name": "x"}', headers={"Content-Type": "application/json"})
        assert decode_text(resp) == '{"name": "x"}'


class TestArchiveStream:
    def test_iterates_chunks(self):
        resp = make_response(stream_data=b"0123456789")
        stream = decode_stream(resp, chunk_size=4)
        assert list(stream) == [b"0123", b"4567", b"89"]

    def test_read(self):
        with decode_stream(make_response(stream_data=b"archive-bytes")) as stream:
            assert stream.read() == b"archive-bytes"
        assert stream.closed

    def test_consumed_once(self):
        stream = decode_stream(make_response(stream_data=b"data"))
        stream.read()
        with pytest.raises(StreamConsumedError):
            stream.read()

    def test_closed_stream_cannot_be_read(self):
        stream = ArchiveStream(make_response(stream_data=b"data"))
        stream.close()
        with pytest.raises(StreamConsumedError, match="closed"):
            list(stream)

    def test_filename_from_headers(self):
        resp = make_response(
            stream_data=b"",
            headers={"Content-Disposition": 'attachment; filename="p-main.tar.gz"'},
        )
        assert decode_stream(resp).filename == "p-main.tar.gz"

    def test_filename_missing(self):
        with pytest.raises(MissingFilenameHeader):
            decode_stream(make_response(stream_data=b"")).filename


class TestDecodeTextEncoding:
    def test_plain_without_charset_is_utf8(self):
        resp = make_response(body="héllo ✓".encode("utf-8"), headers={"Content-Type": "text/plain"})
        resp.encoding = None
        assert decode_text(resp) == "héllo ✓"

    def test_declared_charset_respected(self):
        resp = make_response(
            body="héllo".encode("latin-1"),
            headers={"Content-Type": "text/plain; charset=ISO-8859-1"},
        )
        resp.encoding = "ISO-8859-1"
        assert decode_text(resp) == "héllo"

    def test_invalid_utf8_uses_response_encoding(self):
        resp = make_response(body=b"caf\xe9", headers={"Content-Type": "text/plain"})
        resp.encoding = "ISO-8859-1"
        assert decode_text(resp) == "café"


class TestInterruptedStream:
    def test_read_raises_transport_error(self):
        stream = decode_stream(interrupted_response())
        with pytest.raises(TransportError, match="interrupted") as exc_info:
            stream.read()
        assert isinstance(exc_info.value, GitLabApiError)
        assert isinstance(exc_info.value.cause, requests.exceptions.ChunkedEncodingError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_chunks_before_failure_are_delivered(self):
        chunks = []
        with pytest.raises(TransportError):
            for chunk in decode_stream(interrupted_response(b"first")):
                chunks.append(chunk)
        assert chunks == [b"first"]
