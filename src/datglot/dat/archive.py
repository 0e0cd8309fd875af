"""DATアーカイブへのアクセスインターフェース

アーカイブ本体（サブファイルの列挙・読み書き）は外部ライブラリが担う。
このモジュールはその能力をProtocolとして定義し、ハンドルの取得から解放までを
ArchiveSessionとしてスコープ管理する。
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from datglot.dat.subfile import SubFile
from datglot.errors import dat_file_write_error, subfile_parse_error
from datglot.types import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubfileInfo:
    """サブファイルのメタデータ

    Attributes:
        size: サブファイルのバイトサイズ
        iteration: 書き込み時にそのまま返す必要があるイテレーション値
    """

    size: int
    iteration: int


class DatArchive(Protocol):
    """DATアーカイブ操作インターフェース"""

    def open(self, path: Path) -> Result[int]:
        """アーカイブを開いてハンドルを返す"""
        ...

    def list_subfiles(self, handle: int) -> dict[int, SubfileInfo]:
        """全サブファイルのIDとメタデータを返す"""
        ...

    def read_subfile(self, handle: int, file_id: int, size: int) -> Result[bytes]:
        """サブファイルの生データを読み取る"""
        ...

    def subfile_version(self, handle: int, file_id: int) -> int:
        """サブファイルのバージョンを返す"""
        ...

    def write_subfile(
        self, handle: int, file_id: int, data: bytes, version: int, iteration: int
    ) -> Result[None]:
        """サブファイルの生データを書き込む"""
        ...

    def flush(self, handle: int) -> None:
        """未書き込みの変更をディスクへ反映する"""
        ...

    def close(self, handle: int) -> None:
        """アーカイブを閉じる"""
        ...


class ArchiveSession:
    """開いているアーカイブハンドルのスコープ

    パイプライン1回の実行がハンドルを専有する。コンテキストマネージャとして使い、
    どの経路で抜けても（必要ならフラッシュしてから）ハンドルを閉じる。

    使用例:
        >>> result = ArchiveSession.open(archive, Path("client_local_English.dat"))
        >>> with result.unwrap() as session:
        ...     subfiles = session.list_subfiles()
    """

    def __init__(
        self, archive: DatArchive, handle: int, path: Path, flush_on_close: bool = False
    ) -> None:
        self._archive = archive
        self._handle = handle
        self._path = path
        self._flush_on_close = flush_on_close
        self._closed = False

    @classmethod
    def open(
        cls, archive: DatArchive, path: Path, flush_on_close: bool = False
    ) -> Result[ArchiveSession]:
        """アーカイブを開いてセッションを作成する

        Args:
            archive: アーカイブ実装
            path: DATファイルのパス
            flush_on_close: 閉じる前にフラッシュするか（書き込みを行う場合True）

        Returns:
            セッション、または開けなかった場合のエラー
        """
        opened = archive.open(path)
        if not opened.success:
            return Result.fail(opened.error)  # type: ignore[arg-type]
        logger.debug("アーカイブを開きました: %s (handle=%s)", path, opened.value)
        return Result.ok(cls(archive, opened.unwrap(), path, flush_on_close))

    def __enter__(self) -> ArchiveSession:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def list_subfiles(self) -> dict[int, SubfileInfo]:
        """全サブファイルのIDとメタデータを返す"""
        return self._archive.list_subfiles(self._handle)

    def load_subfile(self, file_id: int, size: int, load_version: bool = False) -> Result[SubFile]:
        """サブファイルを読み込んで解析する

        Args:
            file_id: サブファイルID
            size: 読み取るバイト数
            load_version: アーカイブからバージョンも取得するか（書き戻す場合True）

        Returns:
            解析済みサブファイル、または読み取り・解析エラー
        """
        data = self._archive.read_subfile(self._handle, file_id, size)
        if not data.success:
            return Result.fail(data.error)  # type: ignore[arg-type]

        version = self._archive.subfile_version(self._handle, file_id) if load_version else 0

        try:
            subfile = SubFile.parse(data.unwrap(), version=version)
        except (ValueError, struct.error) as e:
            return Result.fail(subfile_parse_error(file_id, str(e)))

        logger.debug("サブファイル %d を読み込みました (%d fragments)", file_id, subfile.fragment_count)
        return Result.ok(subfile)

    def save_subfile(self, file_id: int, subfile: SubFile, iteration: int) -> Result[None]:
        """サブファイルをシリアライズして書き戻す

        Args:
            file_id: 書き込み先のサブファイルID
            subfile: 書き戻すサブファイル（現在のバージョンを使用）
            iteration: 読み込み時に取得したイテレーション値

        Returns:
            書き込み結果
        """
        try:
            data = subfile.serialize()
        except (ValueError, struct.error) as e:
            return Result.fail(dat_file_write_error(file_id, str(e)))

        result = self._archive.write_subfile(self._handle, file_id, data, subfile.version, iteration)
        if result.success:
            logger.debug("サブファイル %d を書き込みました (%d bytes)", file_id, len(data))
        return result

    def flush(self) -> None:
        """未書き込みの変更をディスクへ反映する"""
        self._archive.flush(self._handle)

    def close(self) -> None:
        """ハンドルを閉じる（2回目以降は何もしない）"""
        if self._closed:
            return
        self._closed = True
        try:
            if self._flush_on_close:
                self.flush()
        finally:
            self._archive.close(self._handle)
            logger.debug("アーカイブを閉じました: %s", self._path)
