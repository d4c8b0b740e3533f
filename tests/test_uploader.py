import pytest
import requests

import uploader


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"", text=""):
        self.status_code = status_code
        self._payload = payload
        self._content = content
        self.text = text
        self.reason = "Error"

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._content), chunk_size):
            yield self._content[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_upload_posts_pdf_multipart(tmp_path, monkeypatch):
    source = tmp_path / "My Report (v2).pdf"
    source.write_bytes(b"%PDF-1.4")
    calls = {}

    def fake_post(url, files, timeout):
        name, handle, media_type = files["file"]
        calls.update(url=url, name=name, media_type=media_type, body=handle.read(), timeout=timeout)
        return FakeResponse(payload={
            "success": True,
            "filename": "1_My_Report__v2_.pdf",
            "originalName": name,
            "size": 8,
        })

    monkeypatch.setattr(requests, "post", fake_post)

    payload = uploader.upload_file(source, api_base="http://svc/", timeout=5)

    assert calls == {
        "url": "http://svc/api/upload",
        "name": "My Report (v2).pdf",
        "media_type": "application/pdf",
        "body": b"%PDF-1.4",
        "timeout": 5,
    }
    assert payload["filename"] == "1_My_Report__v2_.pdf"


def test_rejection_surfaces_server_detail(tmp_path, monkeypatch):
    source = tmp_path / "notes.pdf"
    source.write_bytes(b"data")
    monkeypatch.setattr(
        requests,
        "post",
        lambda url, files, timeout: FakeResponse(400, payload={"detail": "Only PDF files are allowed"}),
    )

    with pytest.raises(uploader.ClientError, match="400: Only PDF files are allowed"):
        uploader.upload_file(source, api_base="http://svc")


def test_list_files_returns_entries(monkeypatch):
    entries = [{"filename": "2_b.pdf", "size": 10, "uploadedAt": "2024-01-02T00:00:00"}]
    monkeypatch.setattr(requests, "get", lambda url, timeout: FakeResponse(payload={"files": entries}))

    assert uploader.list_files(api_base="http://svc") == entries


def test_download_writes_file_and_quotes_name(tmp_path, monkeypatch):
    seen = {}

    def fake_get(url, stream, timeout):
        seen["url"] = url
        return FakeResponse(content=b"%PDF-bytes" * 10000)

    monkeypatch.setattr(requests, "get", fake_get)
    dest = tmp_path / "out.pdf"

    uploader.download_file("1 a.pdf", dest, api_base="http://svc")

    assert seen["url"] == "http://svc/api/uploaded-pdfs/1%20a.pdf"
    assert dest.read_bytes() == b"%PDF-bytes" * 10000


def test_download_error_does_not_create_file(tmp_path, monkeypatch):
    monkeypatch.setattr(
        requests, "get", lambda url, stream, timeout: FakeResponse(404, payload={"detail": "File not found"})
    )
    dest = tmp_path / "missing.pdf"

    with pytest.raises(uploader.ClientError, match="File not found"):
        uploader.download_file("missing.pdf", dest, api_base="http://svc")
    assert not dest.exists()


def test_main_list_prints_entries(monkeypatch, capsys):
    entries = [{"filename": "2_b.pdf", "size": 2048, "uploadedAt": "2024-01-02T00:00:00"}]
    monkeypatch.setattr(uploader, "list_files", lambda api_base, timeout: entries)

    assert uploader.main(["--api-base", "http://svc", "list"]) == 0
    out = capsys.readouterr().out
    assert "2_b.pdf" in out
    assert "2.0 KiB" in out


def test_main_reports_request_failures(monkeypatch, capsys):
    def unreachable(api_base, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(uploader, "list_files", unreachable)

    assert uploader.main(["list"]) == 1
    assert "connection refused" in capsys.readouterr().err


def test_main_upload_requires_existing_file(tmp_path, capsys):
    assert uploader.main(["upload", str(tmp_path / "nope.pdf")]) == 2
    assert "No such file" in capsys.readouterr().err
