"""パッチパイプライン

ソート済みの翻訳を1パスで適用する。同じサブファイルを対象とする翻訳は
連続して並んでいるため、サブファイルの読み込みと書き戻しはそれぞれ1回で済む。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from datglot.dat.archive import ArchiveSession, DatArchive, SubfileInfo
from datglot.dat.fragment import utf16_length
from datglot.dat.subfile import SubFile, is_text_file
from datglot.dat.varlen import VarLenEncoder
from datglot.errors import (
    NO_TRANSLATIONS,
    fragment_not_found,
    piece_too_long,
    subfile_not_found,
    subfile_not_text,
)
from datglot.pipeline.progress import Operation, OperationProgress, ProgressCallback
from datglot.translation.model import Translation
from datglot.translation.parser import TranslationFileParser
from datglot.types import Result

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 100


@dataclass
class PatchSummary:
    """パッチ結果のサマリー

    Attributes:
        total: 翻訳の総数
        applied: 適用した翻訳数
        skipped: スキップした翻訳数
        warnings: 警告メッセージ（翻訳ファイルの解析警告を含む）
    """

    total: int = 0
    applied: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass
class _ResidentSubfile:
    file_id: int
    subfile: SubFile
    info: SubfileInfo


class PatchPipeline:
    """パッチパイプライン

    使用例:
        >>> pipeline = PatchPipeline(NativeDatArchive())
        >>> result = pipeline.run(Path("translations/polish.txt"), Path("client_local_English.dat"))
        >>> if result.success:
        ...     print(result.unwrap().applied)
    """

    def __init__(
        self,
        archive: DatArchive,
        parser: TranslationFileParser | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        """初期化

        Args:
            archive: アーカイブ実装
            parser: 翻訳ファイルパーサー（省略時はデフォルト）
            progress_interval: 進捗を通知する適用件数の間隔
        """
        self._archive = archive
        self._parser = parser or TranslationFileParser()
        self._progress_interval = max(1, progress_interval)

    def run(
        self,
        translations_path: Path,
        dat_path: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> Result[PatchSummary]:
        """翻訳ファイルを解析し、アーカイブに適用する

        翻訳ファイルの解析はアーカイブを開く前に行う。

        Args:
            translations_path: 翻訳ファイルのパス
            dat_path: DATファイルのパス
            progress_callback: 進捗通知用コールバック（オプション）

        Returns:
            パッチのサマリー。翻訳ファイルがない、適用できる翻訳が1件もない、
            アーカイブを開けない場合はエラー
        """
        parsed = self._parser.parse_file(translations_path)
        if not parsed.success:
            return Result.fail(parsed.error)  # type: ignore[arg-type]

        translations = parsed.unwrap()
        if translations.is_empty:
            return Result.fail(NO_TRANSLATIONS)

        opened = ArchiveSession.open(self._archive, dat_path, flush_on_close=True)
        if not opened.success:
            return Result.fail(opened.error)  # type: ignore[arg-type]

        with opened.unwrap() as session:
            summary = self.apply(session, translations.translations, progress_callback)

        summary.warnings[:0] = translations.warnings
        return Result.ok(summary)

    def apply(
        self,
        session: ArchiveSession,
        translations: list[Translation],
        progress_callback: ProgressCallback | None = None,
    ) -> PatchSummary:
        """開いているアーカイブに翻訳を適用する

        個々の翻訳の失敗は警告として記録し、処理は最後まで続ける。

        Args:
            session: 書き込み可能なアーカイブセッション
            translations: (file_id, gossip_id) 順にソート済みの翻訳
            progress_callback: 進捗通知用コールバック（オプション）

        Returns:
            パッチのサマリー
        """
        summary = PatchSummary(total=len(translations))
        subfiles = session.list_subfiles()
        resident: _ResidentSubfile | None = None

        def skip(message: str) -> None:
            logger.warning(message)
            summary.warnings.append(message)
            summary.skipped += 1

        for translation in translations:
            file_id = translation.file_id

            info = subfiles.get(file_id)
            if info is None:
                skip(subfile_not_found(file_id).message)
                continue
            if not is_text_file(file_id):
                skip(subfile_not_text(file_id).message)
                continue

            if resident is None or resident.file_id != file_id:
                if resident is not None:
                    self._save(session, resident, summary)
                    resident = None

                loaded = session.load_subfile(file_id, info.size, load_version=True)
                if not loaded.success:
                    skip(loaded.error.message)  # type: ignore[union-attr]
                    continue
                resident = _ResidentSubfile(file_id, loaded.unwrap(), info)

            fragment = resident.subfile.get_fragment(translation.fragment_id)
            if fragment is None:
                skip(fragment_not_found(file_id, translation.fragment_id).message)
                continue

            pieces = translation.pieces()
            longest = max((utf16_length(piece) for piece in pieces), default=0)
            if longest > VarLenEncoder.MAX_VALUE:
                error = piece_too_long(
                    file_id, translation.fragment_id, longest, VarLenEncoder.MAX_VALUE
                )
                skip(error.message)
                continue

            fragment.pieces = pieces
            summary.applied += 1

            if progress_callback is not None and summary.applied % self._progress_interval == 0:
                progress_callback(
                    OperationProgress(
                        operation=Operation.PATCH,
                        current=summary.applied,
                        total=summary.total,
                    )
                )

        if resident is not None:
            self._save(session, resident, summary)

        return summary

    @staticmethod
    def _save(session: ArchiveSession, resident: _ResidentSubfile, summary: PatchSummary) -> None:
        saved = session.save_subfile(resident.file_id, resident.subfile, resident.info.iteration)
        if not saved.success:
            message = saved.error.message  # type: ignore[union-attr]
            logger.warning(message)
            summary.warnings.append(message)
