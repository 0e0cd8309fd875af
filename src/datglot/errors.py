"""ドメインエラー定義

DATアーカイブ操作、翻訳ファイル解析、エクスポートで発生するエラーを
コード・メッセージ・種別を持つ値オブジェクトとして定義する。
個々のエラーは例外として送出せず、Resultの失敗値として返す。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """エラー種別

    NOT_FOUND: ファイル・サブファイル・フラグメントが存在しない
    VALIDATION: 行やフィールドの形式が不正
    IO_ERROR: アーカイブや出力ファイルの入出力に失敗
    FAILURE: 構造破損などによる汎用的な処理失敗
    """

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    IO_ERROR = "io_error"
    FAILURE = "failure"


@dataclass(frozen=True)
class DatError:
    """エラー値オブジェクト

    Attributes:
        code: 機械可読なエラーコード（例: "DatFile.NotFound"）
        message: 人が読むためのメッセージ
        kind: エラー種別
    """

    code: str
    message: str
    kind: ErrorKind = ErrorKind.FAILURE

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.code}: {self.message}"


# DATファイル


def dat_file_not_found(path: str) -> DatError:
    return DatError("DatFile.NotFound", f"DAT file not found: {path}", ErrorKind.NOT_FOUND)


def dat_file_cannot_open(path: str) -> DatError:
    return DatError("DatFile.CannotOpen", f"Cannot open DAT file: {path}", ErrorKind.IO_ERROR)


def dat_file_read_error(file_id: int, message: str) -> DatError:
    return DatError(
        "DatFile.ReadError", f"Error reading file {file_id}: {message}", ErrorKind.IO_ERROR
    )


def dat_file_write_error(file_id: int, message: str) -> DatError:
    return DatError(
        "DatFile.WriteError", f"Error writing file {file_id}: {message}", ErrorKind.IO_ERROR
    )


# サブファイル・フラグメント


def subfile_not_found(file_id: int) -> DatError:
    return DatError(
        "SubFile.NotFound", f"File {file_id} not found in DAT archive", ErrorKind.NOT_FOUND
    )


def subfile_not_text(file_id: int) -> DatError:
    return DatError(
        "SubFile.NotTextFile", f"File {file_id} is not a text file", ErrorKind.VALIDATION
    )


def subfile_parse_error(file_id: int, message: str) -> DatError:
    return DatError(
        "SubFile.ParseError", f"Error parsing subfile {file_id}: {message}", ErrorKind.FAILURE
    )


def fragment_not_found(file_id: int, fragment_id: int) -> DatError:
    return DatError(
        "Fragment.NotFound",
        f"Fragment {fragment_id} not found in file {file_id}",
        ErrorKind.NOT_FOUND,
    )


def piece_too_long(file_id: int, fragment_id: int, length: int, limit: int) -> DatError:
    return DatError(
        "Fragment.PieceTooLong",
        f"Fragment {fragment_id} in file {file_id} has a piece of {length} characters "
        f"(max {limit})",
        ErrorKind.VALIDATION,
    )


# 翻訳ファイル


def translation_file_not_found(path: str) -> DatError:
    return DatError(
        "Translation.FileNotFound", f"Translation file not found: {path}", ErrorKind.NOT_FOUND
    )


def translation_file_read_error(path: str, message: str) -> DatError:
    return DatError(
        "Translation.ReadError",
        f"Cannot read translation file '{path}': {message}",
        ErrorKind.IO_ERROR,
    )


def translation_invalid_encoding(line_number: int) -> DatError:
    return DatError(
        "Translation.InvalidEncoding",
        f"Line {line_number} is not valid UTF-8; invalid bytes were replaced",
        ErrorKind.VALIDATION,
    )


def translation_invalid_format(details: str) -> DatError:
    return DatError(
        "Translation.InvalidFormat", f"Invalid translation format: {details}", ErrorKind.VALIDATION
    )


def translation_parse_error(line: str, message: str) -> DatError:
    return DatError(
        "Translation.ParseError", f"Error parsing line '{line}': {message}", ErrorKind.VALIDATION
    )


NO_TRANSLATIONS = DatError(
    "Translation.NoTranslations", "No translations to apply.", ErrorKind.VALIDATION
)


# エクスポート


def export_cannot_create_output(path: str, message: str) -> DatError:
    return DatError(
        "Export.CannotCreateOutput",
        f"Cannot create output file '{path}': {message}",
        ErrorKind.IO_ERROR,
    )
