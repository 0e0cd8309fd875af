"""共通フィクスチャ"""

from pathlib import Path

import pytest
from dat_builders import (
    NON_TEXT_FILE_ID,
    OTHER_TEXT_FILE_ID,
    TEXT_FILE_ID,
    FakeDatArchive,
    fragment_bytes,
    non_text_subfile_bytes,
    subfile_bytes,
)


@pytest.fixture
def fake_archive() -> FakeDatArchive:
    """テキストサブファイル2つと非テキストサブファイル1つを持つアーカイブ"""
    archive = FakeDatArchive()
    archive.add_subfile(
        TEXT_FILE_ID,
        subfile_bytes(
            TEXT_FILE_ID,
            [
                fragment_bytes(1, ["Hello"]),
                fragment_bytes(2, ["You have ", " gold"], arg_refs=[b"\x01\x00\x00\x00"]),
                fragment_bytes(3, ["Line one\nLine two"]),
            ],
        ),
    )
    archive.add_subfile(
        OTHER_TEXT_FILE_ID,
        subfile_bytes(OTHER_TEXT_FILE_ID, [fragment_bytes(10, ["Farewell"])]),
        iteration=11,
        version=5,
    )
    archive.add_subfile(NON_TEXT_FILE_ID, non_text_subfile_bytes())
    return archive


@pytest.fixture
def dat_path(tmp_path: Path) -> Path:
    """存在するダミーのDATファイル"""
    path = tmp_path / "client_local_English.dat"
    path.write_bytes(b"\x00")
    return path
