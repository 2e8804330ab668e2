"""Tests for the import run."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pytest_httpx import HTTPXMock

from ctc_import.config import Config, load_config, save_config
from ctc_import.importer import (
    ensure_device_token,
    import_puzzle,
    select_parent_directory,
)
from ctc_import.remarkable import CloudClient, Directory, RequestError
from ctc_import.remarkable.auth import DEVICE_TOKEN_URL, USER_TOKEN_URL
from ctc_import.remarkable.cloud import (
    LIST_DOCS_ENDPOINT,
    SERVICE_DISCOVERY_URL,
    UPDATE_STATUS_ENDPOINT,
    UPLOAD_REQUEST_ENDPOINT,
)
from ctc_import.render import RenderedPuzzle, RenderError

STORAGE_HOST = "storage.example.com"
BLOB_URL = "https://blob.example.com/upload/abc123"
PUZZLE_URL = "https://app.crackingthecryptic.com/sudoku/abc"
PUZZLES_DIR = Directory(id="folder-id", path="/Puzzles/")


class FakeRenderer:
    def __init__(self, error: Exception | None = None) -> None:
        self.urls: list[str] = []
        self.error = error

    def render(self, url: str) -> RenderedPuzzle:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return RenderedPuzzle(title="Miracle Sudoku", pdf=b"%PDF-1.4 puzzle")


class FakePrompter:
    """Scripted answers; ``None`` for the code means asking is a failure."""

    def __init__(
        self,
        code: str | None = "abcdefgh",
        reselect: bool = False,
        choice: str = "/Puzzles/",
    ) -> None:
        self.code = code
        self.reselect = reselect
        self.choice = choice
        self.calls: list[str] = []
        self.offered: list[Directory] = []

    def one_time_code(self) -> str:
        self.calls.append("one_time_code")
        if self.code is None:
            raise AssertionError("one-time code should not be requested")
        return self.code

    def should_reselect(self, current: Directory) -> bool:
        self.calls.append("should_reselect")
        return self.reselect

    def choose_directory(self, directories: list[Directory]) -> Directory:
        self.calls.append("choose_directory")
        self.offered = directories
        return next(d for d in directories if d.path == self.choice)


def add_session_responses(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(url=USER_TOKEN_URL, method="POST", text="auth_token")
    httpx_mock.add_response(
        url=SERVICE_DISCOVERY_URL,
        method="GET",
        json={"Status": "OK", "Host": STORAGE_HOST},
    )


def add_listing_response(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=f"https://{STORAGE_HOST}{LIST_DOCS_ENDPOINT}",
        method="GET",
        json=[
            {"ID": "folder-id", "Type": "CollectionType", "VissibleName": "Puzzles", "Parent": ""},
            {"ID": "doc-id", "Type": "DocumentType", "VissibleName": "Old", "Parent": "folder-id"},
        ],
    )


def add_upload_responses(httpx_mock: HTTPXMock) -> None:
    httpx_mock.add_response(
        url=f"https://{STORAGE_HOST}{UPLOAD_REQUEST_ENDPOINT}",
        method="PUT",
        json=[{"ID": "x", "Version": 1, "Success": True, "BlobURLPut": BLOB_URL}],
    )
    httpx_mock.add_response(url=BLOB_URL, method="PUT")
    httpx_mock.add_response(
        url=f"https://{STORAGE_HOST}{UPDATE_STATUS_ENDPOINT}",
        method="PUT",
        json=[{"ID": "x", "Version": 1, "Success": True}],
    )


class TestEnsureDeviceToken:
    """Tests for device registration in the run."""

    def test_existing_token_is_kept(self) -> None:
        config = Config(device_token="stored")
        prompter = FakePrompter(code=None)

        updated, device_token = ensure_device_token(config, prompter)

        assert updated is config
        assert device_token == "stored"
        assert prompter.calls == []

    def test_registers_when_missing(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="new_token")
        config = Config(parent=PUZZLES_DIR)

        updated, device_token = ensure_device_token(config, FakePrompter())

        assert device_token == "new_token"
        assert updated.device_token == "new_token"
        assert updated.parent == PUZZLES_DIR
        assert config.device_token is None


class TestSelectParentDirectory:
    """Tests for parent folder selection."""

    def test_keeps_stored_parent(self) -> None:
        """Test that declining reselection makes no remote call."""
        config = Config(device_token="t", parent=PUZZLES_DIR)
        prompter = FakePrompter(reselect=False)
        cloud = CloudClient("auth_token", STORAGE_HOST)

        updated, parent = select_parent_directory(config, cloud, prompter)

        assert updated is config
        assert parent == PUZZLES_DIR
        assert prompter.calls == ["should_reselect"]

    def test_selects_when_missing(self, httpx_mock: HTTPXMock) -> None:
        add_listing_response(httpx_mock)
        prompter = FakePrompter(choice="/Puzzles/")
        cloud = CloudClient("auth_token", STORAGE_HOST)

        updated, parent = select_parent_directory(
            Config(device_token="t"), cloud, prompter
        )

        assert parent == PUZZLES_DIR
        assert updated.parent == PUZZLES_DIR
        assert prompter.calls == ["choose_directory"]
        assert [d.path for d in prompter.offered] == ["/", "/Puzzles/"]

    def test_reselects_when_asked(self, httpx_mock: HTTPXMock) -> None:
        add_listing_response(httpx_mock)
        prompter = FakePrompter(reselect=True, choice="/")
        cloud = CloudClient("auth_token", STORAGE_HOST)
        config = Config(device_token="t", parent=PUZZLES_DIR)

        updated, parent = select_parent_directory(config, cloud, prompter)

        assert parent.is_root
        assert updated.parent == Directory(id=None, path="/")
        assert prompter.calls == ["should_reselect", "choose_directory"]


class TestImportPuzzle:
    """Tests for the full run."""

    def test_first_run(self, tmp_path: Path, httpx_mock: HTTPXMock) -> None:
        """Test registration, folder selection and upload from an empty config."""
        config_path = tmp_path / "config.yaml"
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="new_token")
        add_session_responses(httpx_mock)
        add_listing_response(httpx_mock)
        add_upload_responses(httpx_mock)
        renderer = FakeRenderer()
        prompter = FakePrompter()

        document = import_puzzle(
            PUZZLE_URL,
            config_path=config_path,
            renderer=renderer,
            prompter=prompter,
        )

        assert renderer.urls == [PUZZLE_URL]
        assert document.visible_name == "Miracle Sudoku"
        assert document.parent == "folder-id"
        assert load_config(config_path) == Config(
            device_token="new_token", parent=PUZZLES_DIR
        )

        token_request = httpx_mock.get_request(url=USER_TOKEN_URL)
        assert token_request is not None
        assert token_request.headers["Authorization"] == "Bearer new_token"

    def test_stored_token_is_not_requested_again(
        self, tmp_path: Path, httpx_mock: HTTPXMock
    ) -> None:
        """Test that a second run with the same config skips registration."""
        config_path = tmp_path / "config.yaml"
        httpx_mock.add_response(url=DEVICE_TOKEN_URL, method="POST", text="new_token")
        for _ in range(2):
            add_session_responses(httpx_mock)
            add_upload_responses(httpx_mock)
        add_listing_response(httpx_mock)

        import_puzzle(
            PUZZLE_URL,
            config_path=config_path,
            renderer=FakeRenderer(),
            prompter=FakePrompter(),
        )
        second = FakePrompter(code=None, reselect=False)
        import_puzzle(
            PUZZLE_URL,
            config_path=config_path,
            renderer=FakeRenderer(),
            prompter=second,
        )

        assert second.calls == ["should_reselect"]
        assert len(httpx_mock.get_requests(url=DEVICE_TOKEN_URL)) == 1

    def test_render_failure_uploads_nothing(
        self, tmp_path: Path, httpx_mock: HTTPXMock
    ) -> None:
        config_path = tmp_path / "config.yaml"
        save_config(Config(device_token="stored", parent=PUZZLES_DIR), config_path)
        add_session_responses(httpx_mock)

        with pytest.raises(RenderError):
            import_puzzle(
                PUZZLE_URL,
                config_path=config_path,
                renderer=FakeRenderer(error=RenderError("timeout")),
                prompter=FakePrompter(code=None),
            )

        requests = httpx_mock.get_requests()
        assert len(requests) == 2
        assert all(r.url.host != STORAGE_HOST for r in requests)

    def test_rejected_code_saves_nothing(
        self, tmp_path: Path, httpx_mock: HTTPXMock
    ) -> None:
        config_path = tmp_path / "config.yaml"
        httpx_mock.add_response(
            url=DEVICE_TOKEN_URL, method="POST", status_code=400, text="Invalid code"
        )

        with pytest.raises(RequestError):
            import_puzzle(
                PUZZLE_URL,
                config_path=config_path,
                renderer=FakeRenderer(),
                prompter=FakePrompter(),
            )

        assert not config_path.exists()

    def test_upload_payload(self, tmp_path: Path, httpx_mock: HTTPXMock) -> None:
        config_path = tmp_path / "config.yaml"
        save_config(Config(device_token="stored", parent=PUZZLES_DIR), config_path)
        add_session_responses(httpx_mock)
        add_upload_responses(httpx_mock)

        import_puzzle(
            PUZZLE_URL,
            config_path=config_path,
            renderer=FakeRenderer(),
            prompter=FakePrompter(code=None),
        )

        commit = httpx_mock.get_request(
            url=f"https://{STORAGE_HOST}{UPDATE_STATUS_ENDPOINT}"
        )
        assert commit is not None
        body = json.loads(commit.content)
        assert body[0]["VissibleName"] == "Miracle Sudoku"
        assert body[0]["parent"] == "folder-id"
