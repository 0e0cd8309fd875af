"""進捗表示およびログ出力のインターフェース定義

このモジュールは、Datglotのエクスポート・パッチ進捗表示とユーザー向けログ出力を定義する。
VerboseLevel (詳細ログレベル)に応じた出力制御を行い、
CLIでの処理結果をユーザーにわかりやすく表示するために使用される。
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO

from datglot.pipeline.progress import Operation, OperationProgress

if TYPE_CHECKING:
    from datglot.pipeline.export import ExportSummary
    from datglot.pipeline.patch import PatchSummary


class VerboseLevel(IntEnum):
    """詳細ログレベル

    ログ出力の詳細度を制御するための列挙型。
    QUIET: エラーのみ出力
    NORMAL: 進捗バーとサマリ出力
    VERBOSE: 処理中のファイル情報も出力（-vオプション）
    DEBUG: サブファイル単位の読み書きログも出力（-vvオプション）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


class ProgressDisplay(Protocol):
    """進捗表示のプロトコル

    エクスポート・パッチ処理の進捗を表示するためのインターフェース。
    パイプラインの進捗コールバックとしてそのまま渡せる。
    """

    def start(self, operation: Operation, total: int) -> None:
        """処理開始を表示する

        Args:
            operation: 開始する処理
            total: 処理対象の総数
        """
        ...

    def __call__(self, progress: OperationProgress) -> None:
        """進捗を更新する

        Args:
            progress: 現在の進捗情報
        """
        ...

    def finish(self, success: bool, message: str = "") -> None:
        """処理終了を表示する

        Args:
            success: 処理が成功したか
            message: 終了メッセージ（オプション）
        """
        ...


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: ログの詳細度レベル
        log_file: ログ出力先ファイルパス（Noneの場合はファイル出力なし）
        use_color: カラー出力を使用するか
        max_displayed_warnings: 画面に表示する警告の最大件数
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None
    use_color: bool = True
    max_displayed_warnings: int = 10


class DatglotLogger:
    """ユーザー向けログ出力クラス

    VerboseLevelに応じてメッセージのフィルタリングを行い、
    処理結果のサマリー出力と進捗表示インスタンスの作成も担当する。

    使用例:
        >>> config = LogConfig(verbose_level=VerboseLevel.VERBOSE)
        >>> with DatglotLogger(config) as logger:
        ...     logger.info("エクスポートを開始します")
        ...     logger.verbose("client_local_English.dat を開いています")
    """

    _ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        """ロガーを初期化する

        Args:
            config: ログ設定
        """
        self._config = config
        self._log_file: TextIO | None = None
        if config.log_file:
            # クラス自体がコンテキストマネージャとして動作し、__exit__でファイルを閉じる
            self._log_file = open(config.log_file, "w", encoding="utf-8")  # noqa: SIM115

    def __enter__(self) -> DatglotLogger:
        return self

    def __exit__(self, *args: object) -> None:
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    @property
    def config(self) -> LogConfig:
        """ログ設定を取得する"""
        return self._config

    def _print(self, message: str, file: TextIO | None = None) -> None:
        if file is None:
            file = sys.stdout
        print(message, file=file)

    def _log_to_file(self, level: str, message: str) -> None:
        if self._log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            clean_message = self._strip_ansi(message)
            self._log_file.write(f"[{timestamp}] {level}: {clean_message}\n")
            self._log_file.flush()

    def _strip_ansi(self, text: str) -> str:
        """ANSIエスケープシーケンスを除去する"""
        return self._ANSI_ESCAPE_PATTERN.sub("", text)

    def info(self, message: str) -> None:
        """情報メッセージを出力する（NORMAL以上）

        Args:
            message: 出力するメッセージ
        """
        if self._config.verbose_level >= VerboseLevel.NORMAL:
            self._print(message)
        self._log_to_file("INFO", message)

    def verbose(self, message: str) -> None:
        """詳細メッセージを出力する（VERBOSE以上）

        Args:
            message: 出力するメッセージ
        """
        if self._config.verbose_level >= VerboseLevel.VERBOSE:
            self._print(message)
        self._log_to_file("VERBOSE", message)

    def debug(self, message: str) -> None:
        """デバッグメッセージを出力する（DEBUG以上）

        Args:
            message: 出力するメッセージ
        """
        if self._config.verbose_level >= VerboseLevel.DEBUG:
            self._print(message)
        self._log_to_file("DEBUG", message)

    def error(self, message: str) -> None:
        """エラーメッセージを出力する（常に出力）

        Args:
            message: 出力するメッセージ
        """
        self._print(f"ERROR: {message}", file=sys.stderr)
        self._log_to_file("ERROR", message)

    def warning(self, message: str) -> None:
        """警告メッセージを出力する（QUIET以上）

        Args:
            message: 出力するメッセージ
        """
        if self._config.verbose_level > VerboseLevel.QUIET:
            self._print(f"WARNING: {message}")
        self._log_to_file("WARNING", message)

    def log_warnings(self, warnings: list[str]) -> None:
        """警告の一覧を出力する

        画面には先頭から max_displayed_warnings 件までを表示し、残りは件数のみ示す。
        ログファイルにはすべての警告を書き出す。

        Args:
            warnings: 警告メッセージのリスト
        """
        if not warnings:
            return

        limit = self._config.max_displayed_warnings
        self.info(f"Warnings ({len(warnings)}):")
        for index, message in enumerate(warnings):
            if index < limit:
                self.warning(message)
            else:
                self._log_to_file("WARNING", message)

        remaining = len(warnings) - limit
        if remaining > 0:
            self.info(f"  ... and {remaining} more warnings")

    def create_progress(self) -> ProgressDisplay:
        """進捗表示インスタンスを作成する"""
        return ConsoleProgressDisplay(
            use_color=self._config.use_color,
            enabled=self._config.verbose_level >= VerboseLevel.NORMAL,
        )

    def log_export_summary(self, summary: ExportSummary) -> None:
        """エクスポート結果のサマリを出力する（NORMAL以上）

        Args:
            summary: エクスポートのサマリー
        """
        self.log_warnings(summary.warnings)
        self.info("=== EXPORT COMPLETE ===")
        self.info(f"Processed text files: {summary.total_text_files:,}")
        self.info(f"Exported fragments: {summary.total_fragments:,}")
        if summary.skipped_files:
            self.info(f"Skipped files: {len(summary.skipped_files):,}")
            for file_id in summary.skipped_files:
                self.verbose(f"  skipped: {file_id}")
        self.info(f"Output: {summary.output_path}")

    def log_patch_summary(self, summary: PatchSummary) -> None:
        """パッチ結果のサマリを出力する（NORMAL以上）

        Args:
            summary: パッチのサマリー
        """
        self.log_warnings(summary.warnings)
        self.info("=== PATCH COMPLETE ===")
        self.info(f"Applied: {summary.applied:,} / {summary.total:,}")
        self.info(f"Skipped: {summary.skipped:,}")


class ConsoleProgressDisplay:
    """コンソール進捗表示

    エクスポート・パッチの進捗を進捗バーでコンソールに表示するクラス。
    """

    OPERATION_NAME: dict[Operation, str] = {
        Operation.EXPORT: "Exporting text fragments",
        Operation.PATCH: "Applying translations",
    }

    BAR_WIDTH = 40

    def __init__(self, use_color: bool = True, enabled: bool = True) -> None:
        """進捗表示を初期化する

        Args:
            use_color: カラー出力を使用するか
            enabled: Falseの場合は何も表示しない
        """
        self._use_color = use_color
        self._enabled = enabled
        self._operation: Operation | None = None
        self._total = 0
        self._current = 0

    @property
    def current(self) -> int:
        """最後に表示した処理済み件数"""
        return self._current

    def start(self, operation: Operation, total: int = 0) -> None:
        """処理開始を表示する

        Args:
            operation: 開始する処理
            total: 処理対象の総数（不明な場合は0）
        """
        self._operation = operation
        self._total = total
        self._current = 0
        if self._enabled:
            print(f"{self.OPERATION_NAME.get(operation, operation.value)}...")

    def __call__(self, progress: OperationProgress) -> None:
        """進捗を更新する

        Args:
            progress: 現在の進捗情報
        """
        self._current = progress.current
        if progress.total > 0:
            self._total = progress.total
        if not self._enabled or self._total <= 0:
            return

        filled = int(self.BAR_WIDTH * min(progress.current, self._total) / self._total)
        bar = "█" * filled + "░" * (self.BAR_WIDTH - filled)
        msg_part = f" {progress.message}" if progress.message else ""
        print(
            f"\r   [{bar}] {int(progress.percentage)}% "
            f"({progress.current:,}/{self._total:,}){msg_part}",
            end="",
            flush=True,
        )

    def finish(self, success: bool, message: str = "") -> None:
        """処理終了を表示する

        Args:
            success: 処理が成功したか
            message: 終了メッセージ（オプション）
        """
        if not self._enabled:
            return
        full_bar = "█" * self.BAR_WIDTH
        if success:
            print(f"\r   [{full_bar}] 100% done")
        else:
            msg_part = f": {message}" if message else ""
            print(f"\r   [{full_bar}] failed{msg_part}")
