"""エクスポートパイプライン

アーカイブ内の全テキストサブファイルからフラグメントを読み出し、
翻訳ファイル形式の行として書き出す。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from datglot.dat.archive import ArchiveSession, DatArchive
from datglot.dat.fragment import Fragment
from datglot.dat.subfile import is_text_file
from datglot.errors import export_cannot_create_output
from datglot.pipeline.progress import Operation, OperationProgress, ProgressCallback
from datglot.translation.model import PIECE_SEPARATOR
from datglot.translation.parser import FIELD_SEPARATOR, NULL_MARKER, escape_content
from datglot.types import Result

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 500

# エクスポートファイルはBOM付きUTF-8で書き出す
OUTPUT_ENCODING = "utf-8-sig"
# 孤立サロゲートを含むピースもそのまま書き出し、パッチ時に復元する
OUTPUT_ERRORS = "surrogatepass"

HEADER_LINES = (
    "# DAT Text Export - Ready for Translation",
    "# Format: file_id||gossip_id||text||args_order||args_id||approved",
    "#",
    "# Translation instructions:",
    "#   1. Replace the original text with your translation",
    f"#   2. DO NOT modify {PIECE_SEPARATOR} markers - they are variable placeholders",
    "#   3. args_order/args_id - leave as exported unless changing argument order",
    "#   4. Remove lines you don't translate (or leave them - identical lines are ignored)",
    "#",
)


@dataclass
class ExportSummary:
    """エクスポート結果のサマリー

    Attributes:
        total_text_files: 処理したテキストサブファイル数（スキップ分を含む）
        total_fragments: 書き出したフラグメント数
        output_path: 出力ファイルのパス
        skipped_files: 読み込みに失敗してスキップしたサブファイルID
        warnings: 警告メッセージ
    """

    output_path: Path
    total_text_files: int = 0
    total_fragments: int = 0
    skipped_files: list[int] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """一部のサブファイルをスキップしたかどうか"""
        return bool(self.skipped_files)


def format_fragment_line(file_id: int, fragment: Fragment) -> str:
    """フラグメントを翻訳ファイルの1行に整形する

    引数参照を持つフラグメントには、並び順・IDとも恒等列 ``1-2-...-n`` を出力する。
    """
    text = escape_content(PIECE_SEPARATOR.join(fragment.pieces))

    args_order = NULL_MARKER
    args_id = NULL_MARKER
    if fragment.has_arguments:
        args_order = "-".join(str(i) for i in range(1, len(fragment.arg_refs) + 1))
        args_id = args_order

    return FIELD_SEPARATOR.join(
        (str(file_id), str(fragment.fragment_id), text, args_order, args_id, "1")
    )


class ExportPipeline:
    """エクスポートパイプライン

    サブファイルは1つずつ読み込んで書き出すため、メモリ上に保持するのは
    常に1サブファイル分のフラグメントのみ。

    使用例:
        >>> pipeline = ExportPipeline(NativeDatArchive())
        >>> result = pipeline.run(Path("client_local_English.dat"), Path("data/exported.txt"))
    """

    def __init__(
        self, archive: DatArchive, progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    ) -> None:
        """初期化

        Args:
            archive: アーカイブ実装
            progress_interval: 進捗を通知するサブファイル数の間隔
        """
        self._archive = archive
        self._progress_interval = max(1, progress_interval)

    def run(
        self,
        dat_path: Path,
        output_path: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> Result[ExportSummary]:
        """全テキストをエクスポートする

        Args:
            dat_path: DATファイルのパス
            output_path: 出力ファイルのパス
            progress_callback: 進捗通知用コールバック（オプション）

        Returns:
            エクスポートのサマリー。アーカイブを開けない、または出力ファイルを
            作成できない場合はエラー
        """
        opened = ArchiveSession.open(self._archive, dat_path)
        if not opened.success:
            return Result.fail(opened.error)  # type: ignore[arg-type]

        with opened.unwrap() as session:
            return self._export(session, output_path, progress_callback)

    def _export(
        self,
        session: ArchiveSession,
        output_path: Path,
        progress_callback: ProgressCallback | None,
    ) -> Result[ExportSummary]:
        subfiles = session.list_subfiles()
        text_file_ids = [file_id for file_id in subfiles if is_text_file(file_id)]
        total = len(text_file_ids)
        summary = ExportSummary(output_path=output_path)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", encoding=OUTPUT_ENCODING, errors=OUTPUT_ERRORS) as writer:
                for header_line in HEADER_LINES:
                    writer.write(header_line + "\n")

                for file_id in text_file_ids:
                    loaded = session.load_subfile(file_id, subfiles[file_id].size)
                    if loaded.success:
                        for fragment in loaded.unwrap().fragments.values():
                            writer.write(format_fragment_line(file_id, fragment) + "\n")
                            summary.total_fragments += 1
                    else:
                        message = loaded.error.message  # type: ignore[union-attr]
                        logger.warning("サブファイル %d をスキップしました: %s", file_id, message)
                        summary.skipped_files.append(file_id)
                        summary.warnings.append(message)

                    summary.total_text_files += 1
                    if progress_callback is not None and summary.total_text_files % self._progress_interval == 0:
                        progress_callback(
                            OperationProgress(
                                operation=Operation.EXPORT,
                                current=summary.total_text_files,
                                total=total,
                            )
                        )
        except OSError as e:
            return Result.fail(export_cannot_create_output(str(output_path), str(e)))

        return Result.ok(summary)
