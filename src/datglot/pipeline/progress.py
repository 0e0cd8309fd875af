"""進捗通知の型定義

エクスポート・パッチ処理は一定件数ごとに進捗をコールバックで通知する。
表示方法は呼び出し側（CLIなど）が決める。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Operation(Enum):
    """進捗を通知する処理の種類"""

    EXPORT = "export"
    PATCH = "patch"


@dataclass(frozen=True)
class OperationProgress:
    """処理の進捗情報

    Attributes:
        operation: 実行中の処理
        current: 処理済み件数
        total: 総件数
        message: 追加メッセージ（オプション）
    """

    operation: Operation
    current: int
    total: int
    message: str = ""

    @property
    def percentage(self) -> float:
        """完了率（0.0〜100.0）。totalが0の場合は0.0"""
        if self.total <= 0:
            return 0.0
        return self.current / self.total * 100


class ProgressCallback(Protocol):
    """進捗コールバックのプロトコル"""

    def __call__(self, progress: OperationProgress) -> None:
        """進捗情報を受け取る

        Args:
            progress: 現在の進捗情報
        """
        ...
