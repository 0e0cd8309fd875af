"""共通型定義"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, TypeVar

from datglot.errors import DatError, ErrorKind

T = TypeVar("T")


class ExitCode(IntEnum):
    """CLIの終了コード"""

    SUCCESS = 0
    INVALID_ARGUMENTS = 1
    FILE_NOT_FOUND = 2
    OPERATION_FAILED = 3
    IO_ERROR = 4


_EXIT_CODES: dict[ErrorKind, ExitCode] = {
    ErrorKind.NOT_FOUND: ExitCode.FILE_NOT_FOUND,
    ErrorKind.VALIDATION: ExitCode.OPERATION_FAILED,
    ErrorKind.FAILURE: ExitCode.OPERATION_FAILED,
    ErrorKind.IO_ERROR: ExitCode.IO_ERROR,
}


@dataclass(frozen=True)
class Result(Generic[T]):
    """操作結果を表す不変オブジェクト

    成功時は値を、失敗時はエラーを保持する。両方を同時に持つことはない。

    使用例:
        >>> result = Result.ok(42)
        >>> result.success
        True
        >>> Result.fail(dat_file_not_found("client.dat")).exit_code
        <ExitCode.FILE_NOT_FOUND: 2>
    """

    value: T | None = None
    error: DatError | None = None

    def __post_init__(self) -> None:
        if self.value is not None and self.error is not None:
            raise ValueError("成功値とエラーを同時に持つことはできません")

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        """成功結果を生成する"""
        return cls(value=value)

    @classmethod
    def fail(cls, error: DatError) -> Result[T]:
        """失敗結果を生成する"""
        return cls(error=error)

    @property
    def success(self) -> bool:
        """成功したかどうか"""
        return self.error is None

    @property
    def exit_code(self) -> ExitCode:
        """エラー種別に対応する終了コード"""
        if self.error is None:
            return ExitCode.SUCCESS
        return _EXIT_CODES[self.error.kind]

    def unwrap(self) -> T:
        """成功値を取り出す

        Raises:
            ValueError: 失敗結果から値を取り出そうとした場合
        """
        if self.error is not None:
            raise ValueError(f"失敗結果から値は取り出せません: {self.error}")
        return self.value  # type: ignore[return-value]
