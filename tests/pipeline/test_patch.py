"""パッチパイプラインのテスト"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from dat_builders import (
    NON_TEXT_FILE_ID,
    OTHER_TEXT_FILE_ID,
    TEXT_FILE_ID,
    FakeDatArchive,
)

from datglot.dat.archive import ArchiveSession
from datglot.dat.subfile import SubFile
from datglot.errors import ErrorKind, dat_file_cannot_open
from datglot.pipeline.patch import PatchPipeline, PatchSummary
from datglot.pipeline.progress import Operation
from datglot.translation.model import Translation


def _apply(
    archive: FakeDatArchive, dat_path: Path, translations: list[Translation]
) -> PatchSummary:
    with ArchiveSession.open(archive, dat_path, flush_on_close=True).unwrap() as session:
        return PatchPipeline(archive).apply(session, translations)


def _pieces(archive: FakeDatArchive, file_id: int) -> dict[int, list[str]]:
    subfile = SubFile.parse(archive.data[file_id])
    return {fragment_id: f.pieces for fragment_id, f in subfile.fragments.items()}


def _write_translations(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestPatchApply:
    """PatchPipeline.applyのテスト"""

    def test_apply_replaces_pieces(self, fake_archive: FakeDatArchive, dat_path: Path) -> None:
        """対象フラグメントのピースを翻訳で置き換える"""
        summary = _apply(
            fake_archive,
            dat_path,
            [Translation(TEXT_FILE_ID, 2, "Masz <--DO_NOT_TOUCH!--> złota")],
        )

        assert (summary.total, summary.applied, summary.skipped) == (1, 1, 0)
        assert summary.warnings == []
        assert _pieces(fake_archive, TEXT_FILE_ID) == {
            1: ["Hello"],
            2: ["Masz ", " złota"],
            3: ["Line one\nLine two"],
        }

    def test_one_read_and_write_per_subfile(
        self, fake_archive: FakeDatArchive, dat_path: Path
    ) -> None:
        """同じサブファイルへの複数の翻訳でも読み書きは1回ずつ"""
        translations = [
            Translation(TEXT_FILE_ID, 1, "Cześć"),
            Translation(TEXT_FILE_ID, 2, "a<--DO_NOT_TOUCH!-->b"),
            Translation(TEXT_FILE_ID, 3, "c"),
            Translation(OTHER_TEXT_FILE_ID, 10, "Żegnaj"),
        ]

        summary = _apply(fake_archive, dat_path, translations)

        assert summary.applied == 4
        assert fake_archive.read_count(TEXT_FILE_ID) == 1
        assert fake_archive.write_count(TEXT_FILE_ID) == 1
        assert fake_archive.read_count(OTHER_TEXT_FILE_ID) == 1
        assert fake_archive.write_count(OTHER_TEXT_FILE_ID) == 1

    def test_write_echoes_iteration_and_version(
        self, fake_archive: FakeDatArchive, dat_path: Path
    ) -> None:
        """書き込み時は元のイテレーションとサブファイルのバージョンを使う"""
        _apply(fake_archive, dat_path, [Translation(OTHER_TEXT_FILE_ID, 10, "x")])

        file_id, _, version, iteration = fake_archive.writes[0]
        assert (file_id, version, iteration) == (OTHER_TEXT_FILE_ID, 5, 11)

    @pytest.mark.parametrize(
        "translation, expected_warning",
        [
            pytest.param(
                Translation(0x25FFFFFF, 1, "x"),
                f"File {0x25FFFFFF} not found in DAT archive",
                id="異常系: 存在しないサブファイル",
            ),
            pytest.param(
                Translation(TEXT_FILE_ID, 999, "x"),
                f"Fragment 999 not found in file {TEXT_FILE_ID}",
                id="異常系: 存在しないフラグメント",
            ),
        ],
    )
    def test_unknown_targets_are_skipped(
        self,
        fake_archive: FakeDatArchive,
        dat_path: Path,
        translation: Translation,
        expected_warning: str,
    ) -> None:
        """存在しない対象はスキップし、not foundの警告を残す"""
        summary = _apply(fake_archive, dat_path, [translation])

        assert (summary.applied, summary.skipped) == (0, 1)
        assert summary.warnings == [expected_warning]
        assert "not found" in summary.warnings[0]

    def test_missing_subfile_does_no_io(self, fake_archive: FakeDatArchive, dat_path: Path) -> None:
        """存在しないサブファイルには読み書きしない"""
        _apply(fake_archive, dat_path, [Translation(0x25FFFFFF, 1, "x")])

        assert fake_archive.reads == []
        assert fake_archive.writes == []

    def test_non_text_subfile_is_skipped(
        self, fake_archive: FakeDatArchive, dat_path: Path
    ) -> None:
        """非テキストサブファイルは読み書きせずスキップする"""
        summary = _apply(fake_archive, dat_path, [Translation(NON_TEXT_FILE_ID, 1, "x")])

        assert summary.skipped == 1
        assert summary.warnings == [f"File {NON_TEXT_FILE_ID} is not a text file"]
        assert fake_archive.reads == []
        assert fake_archive.writes == []

    def test_load_failure_is_not_sticky(
        self, fake_archive: FakeDatArchive, dat_path: Path
    ) -> None:
        """読み込み失敗後、同じサブファイルへの次の翻訳で再読み込みする"""
        fake_archive.read_failures[TEXT_FILE_ID] = 1

        summary = _apply(
            fake_archive,
            dat_path,
            [Translation(TEXT_FILE_ID, 1, "first"), Translation(TEXT_FILE_ID, 2, "second")],
        )

        assert (summary.applied, summary.skipped) == (1, 1)
        assert len(summary.warnings) == 1
        assert fake_archive.read_count(TEXT_FILE_ID) == 2
        assert fake_archive.write_count(TEXT_FILE_ID) == 1
        assert _pieces(fake_archive, TEXT_FILE_ID)[1] == ["Hello"]
        assert _pieces(fake_archive, TEXT_FILE_ID)[2] == ["second"]

    def test_write_failure_becomes_warning(
        self, fake_archive: FakeDatArchive, dat_path: Path
    ) -> None:
        """書き込み失敗は警告として記録し、残りの処理を続ける"""
        fake_archive.write_failures[TEXT_FILE_ID] = 1

        summary = _apply(
            fake_archive,
            dat_path,
            [Translation(TEXT_FILE_ID, 1, "a"), Translation(OTHER_TEXT_FILE_ID, 10, "b")],
        )

        assert summary.applied == 2
        assert len(summary.warnings) == 1
        assert "Error writing file" in summary.warnings[0]
        assert _pieces(fake_archive, OTHER_TEXT_FILE_ID) == {10: ["b"]}

    @pytest.mark.parametrize(
        "length",
        [
            pytest.param(32768, id="境界値: 上限を1超過"),
            pytest.param(40000, id="異常系: 大幅な超過"),
        ],
    )
    def test_overlong_piece_is_skipped(
        self, fake_archive: FakeDatArchive, dat_path: Path, length: int
    ) -> None:
        """長すぎるピースを持つ翻訳だけをスキップし、同じサブファイルの他の翻訳は書き込む"""
        summary = _apply(
            fake_archive,
            dat_path,
            [Translation(TEXT_FILE_ID, 1, "Witaj"), Translation(TEXT_FILE_ID, 3, "x" * length)],
        )

        assert (summary.applied, summary.skipped) == (1, 1)
        assert summary.warnings == [
            f"Fragment 3 in file {TEXT_FILE_ID} has a piece of {length} characters (max 32767)"
        ]
        assert _pieces(fake_archive, TEXT_FILE_ID) == {
            1: ["Witaj"],
            2: ["You have ", " gold"],
            3: ["Line one\nLine two"],
        }

    def test_piece_at_limit_is_applied(
        self, fake_archive: FakeDatArchive, dat_path: Path
    ) -> None:
        """上限ちょうどの長さのピースは書き込める"""
        summary = _apply(fake_archive, dat_path, [Translation(TEXT_FILE_ID, 3, "x" * 32767)])

        assert (summary.applied, summary.skipped) == (1, 0)
        assert summary.warnings == []
        assert _pieces(fake_archive, TEXT_FILE_ID)[3] == ["x" * 32767]

    def test_apply_reports_progress(self, fake_archive: FakeDatArchive, dat_path: Path) -> None:
        """適用件数が間隔に達するごとに進捗を通知する"""
        callback = MagicMock()
        translations = [Translation(TEXT_FILE_ID, i, "x") for i in (1, 2, 3)]

        with ArchiveSession.open(fake_archive, dat_path).unwrap() as session:
            PatchPipeline(fake_archive, progress_interval=2).apply(session, translations, callback)

        callback.assert_called_once()
        progress = callback.call_args.args[0]
        assert (progress.operation, progress.current, progress.total) == (Operation.PATCH, 2, 3)

    def test_apply_empty(self, fake_archive: FakeDatArchive, dat_path: Path) -> None:
        """翻訳がない場合は何もしない"""
        summary = _apply(fake_archive, dat_path, [])

        assert (summary.total, summary.applied, summary.skipped) == (0, 0, 0)
        assert fake_archive.writes == []


class TestPatchRun:
    """PatchPipeline.runのテスト"""

    def test_run_applies_translation_file(
        self, fake_archive: FakeDatArchive, dat_path: Path, tmp_path: Path
    ) -> None:
        """翻訳ファイルを解析して適用し、ハンドルをフラッシュして閉じる"""
        path = _write_translations(
            tmp_path / "polish.txt",
            [
                "# comment",
                f"{OTHER_TEXT_FILE_ID}||10||Żegnaj||NULL||NULL||1",
                f"{TEXT_FILE_ID}||1||Cześć||NULL||NULL||1",
                "malformed",
            ],
        )

        summary = PatchPipeline(fake_archive).run(path, dat_path).unwrap()

        assert (summary.total, summary.applied, summary.skipped) == (2, 2, 0)
        assert len(summary.warnings) == 1
        assert fake_archive.reads == [TEXT_FILE_ID, OTHER_TEXT_FILE_ID]
        assert fake_archive.flush_count == 1
        assert fake_archive.close_count == 1

    def test_run_missing_translation_file(
        self, fake_archive: FakeDatArchive, dat_path: Path, tmp_path: Path
    ) -> None:
        """翻訳ファイルがない場合はアーカイブを開かずNotFound"""
        result = PatchPipeline(fake_archive).run(tmp_path / "missing.txt", dat_path)

        assert result.error.kind == ErrorKind.NOT_FOUND  # type: ignore[union-attr]
        assert fake_archive.opened_paths == []

    def test_run_no_translations(
        self, fake_archive: FakeDatArchive, dat_path: Path, tmp_path: Path
    ) -> None:
        """解析できる行がない場合はアーカイブを開かずNoTranslations"""
        path = _write_translations(tmp_path / "empty.txt", ["# nothing here", "bad line"])

        result = PatchPipeline(fake_archive).run(path, dat_path)

        assert result.error.code == "Translation.NoTranslations"  # type: ignore[union-attr]
        assert result.error.message == "No translations to apply."  # type: ignore[union-attr]
        assert fake_archive.opened_paths == []

    def test_run_open_failure(
        self, fake_archive: FakeDatArchive, dat_path: Path, tmp_path: Path
    ) -> None:
        """アーカイブを開けない場合はエラー"""
        fake_archive.open_error = dat_file_cannot_open(str(dat_path))
        path = _write_translations(
            tmp_path / "polish.txt", [f"{TEXT_FILE_ID}||1||x||NULL||NULL||1"]
        )

        result = PatchPipeline(fake_archive).run(path, dat_path)

        assert result.error.kind == ErrorKind.IO_ERROR  # type: ignore[union-attr]
        assert fake_archive.writes == []
