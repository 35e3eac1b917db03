"""Tests for page-record persistence."""

from __future__ import annotations

import json

import pytest

from linkcrawl.crawler import (
    Cookie,
    Form,
    FormInput,
    Page,
    PageResponse,
    Resource,
    ResponseInfo,
    Storage,
    StorageError,
)


def _page(**overrides) -> Page:
    values = dict(
        url="http://ex.com/a",
        crawl_time=1700000000,
        resp_duration=12,
        uid="abc",
        response=PageResponse(
            headers={"Content-Type": "text/html"},
            proto="HTTP/1.1",
            status_code=200,
            content_length=5,
            content_mime="text/html",
            cookies=[Cookie(name="sid", value="1", domain="ex.com", httponly=True)],
        ),
        resp_info=ResponseInfo(
            hrefs=["http://ex.com/b"],
            forms=[Form(url="http://ex.com/f", method="post", inputs=[FormInput(name="q")])],
            resources=[Resource(url="http://ex.com/s.css", rel="stylesheet", tag="link")],
        ),
        response_body=b"hello",
    )
    values.update(overrides)
    return Page(**values)


def test_save_writes_record_and_body(storage_dir):
    storage = Storage(storage_dir)
    info_path = storage.save_page(_page())

    assert info_path == storage_dir / "1700000000.httpi"
    assert (storage_dir / "1700000000.respbin").read_bytes() == b"hello"

    text = info_path.read_text(encoding="utf-8")
    payload = json.loads(text)
    assert text.startswith("{\n  ")
    assert payload["url"] == "http://ex.com/a"
    assert "response_body" not in payload
    assert "request_body" not in payload


def test_load_page_round_trip(storage_dir):
    storage = Storage(storage_dir)
    original = _page()
    info_path = storage.save_page(original)

    loaded = storage.load_page(info_path)
    assert loaded.response_body == b""
    loaded.response_body = original.response_body
    assert loaded == original

    with_body = storage.load_page(info_path, with_content=True)
    assert with_body.response_body == b"hello"


def test_load_page_without_body_file(storage_dir):
    storage = Storage(storage_dir)
    info_path = storage.save_page(_page())
    (storage_dir / "1700000000.respbin").unlink()

    assert storage.load_page(info_path, with_content=True).response_body == b""


def test_same_second_pages_do_not_overwrite(storage_dir):
    storage = Storage(storage_dir)
    first = storage.save_page(_page(url="http://ex.com/1"))
    second = storage.save_page(_page(url="http://ex.com/2"))

    assert first.name == "1700000000.httpi"
    assert second.name == "1700000000_1.httpi"
    assert (storage_dir / "1700000000_1.respbin").exists()
    assert {storage.load_page(path).url for path in storage.page_info_files()} == {
        "http://ex.com/1",
        "http://ex.com/2",
    }


def test_disabled_storage_is_noop(tmp_path):
    storage = Storage("")
    assert not storage.enabled
    assert storage.save_page(_page()) is None
    assert storage.page_info_files() == []
    assert list(tmp_path.iterdir()) == []


def test_page_info_files_only_lists_records(storage_dir):
    storage = Storage(storage_dir)
    storage.save_page(_page(crawl_time=2))
    storage.save_page(_page(crawl_time=1))
    (storage_dir / "crawl.log").write_text("log", encoding="utf-8")

    assert [path.name for path in storage.page_info_files()] == ["1.httpi", "2.httpi"]


def test_unwritable_folder_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder", encoding="utf-8")

    with pytest.raises(StorageError):
        Storage(blocker / "pages").save_page(_page())


def test_missing_folder_listing_raises(tmp_path):
    with pytest.raises(StorageError):
        Storage(tmp_path / "absent").page_info_files()


def test_corrupt_record_raises(storage_dir):
    storage_dir.mkdir()
    broken = storage_dir / "1.httpi"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        Storage.load_page(broken)
