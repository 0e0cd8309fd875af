"""翻訳ファイルパーサー

翻訳ファイルの形式:
    # コメント
    file_id||gossip_id||content||args_order||args_id||approved

空行と ``#`` で始まる行は読み飛ばす。不正な行は警告として収集し、
ファイル全体の解析は継続する。
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from pathlib import Path

from datglot.errors import (
    translation_file_not_found,
    translation_file_read_error,
    translation_invalid_encoding,
    translation_invalid_format,
    translation_parse_error,
)
from datglot.translation.model import Translation
from datglot.types import Result

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "||"
MINIMUM_FIELD_COUNT = 5
NULL_MARKER = "NULL"
INPUT_ENCODING = "utf-8"
# エクスポート時に書き出した孤立サロゲートを復元する
INPUT_ERRORS = "surrogatepass"


@dataclass(frozen=True)
class ParsedTranslations:
    """翻訳ファイルの解析結果

    Attributes:
        translations: (file_id, gossip_id) 昇順に安定ソートされた翻訳のリスト
        warnings: 解析できなかった行の警告メッセージ
    """

    translations: list[Translation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.translations


def escape_content(text: str) -> str:
    """改行を1行に収めるためにエスケープする

    バックスラッシュ自体はエスケープしないため、元のテキストに含まれる
    リテラルの ``\\n`` はパッチ時に改行として復元される。
    """
    return text.replace("\r", "\\r").replace("\n", "\\n")


def unescape_content(text: str) -> str:
    """エスケープされた改行を復元する"""
    return text.replace("\\r", "\r").replace("\\n", "\n")


class TranslationFileParser:
    """翻訳ファイルを解析するクラス

    使用例:
        >>> parser = TranslationFileParser()
        >>> result = parser.parse_file(Path("translations/polish.txt"))
        >>> if result.success:
        ...     translations = result.unwrap().translations
    """

    def parse_file(self, path: Path) -> Result[ParsedTranslations]:
        """翻訳ファイルを解析する

        UTF-8として読めない行は不正なバイトを置換文字に置き換えたうえで解析し、
        警告を記録する。

        Args:
            path: 翻訳ファイルのパス

        Returns:
            解析結果。ファイルが存在しない場合はNotFound、読み込めない場合はIoErrorエラー
        """
        if not path.is_file():
            return Result.fail(translation_file_not_found(str(path)))

        translations: list[Translation] = []
        warnings: list[str] = []

        try:
            with path.open("rb") as f:
                for line_number, raw_line in enumerate(f, start=1):
                    if line_number == 1:
                        raw_line = raw_line.removeprefix(codecs.BOM_UTF8)
                    try:
                        line = raw_line.decode(INPUT_ENCODING, INPUT_ERRORS)
                    except UnicodeDecodeError:
                        warnings.append(translation_invalid_encoding(line_number).message)
                        line = raw_line.decode(INPUT_ENCODING, "replace")

                    line = line.rstrip("\r\n")
                    if self._should_skip(line):
                        continue

                    parsed = self.parse_line(line)
                    if parsed.success:
                        translations.append(parsed.unwrap())
                    else:
                        warnings.append(parsed.error.message)  # type: ignore[union-attr]
        except OSError as e:
            return Result.fail(translation_file_read_error(str(path), str(e)))

        # パッチ時のI/Oをサブファイル単位にまとめるため (file_id, gossip_id) 順に並べる
        translations.sort(key=lambda t: (t.file_id, t.gossip_id))

        if warnings:
            logger.warning("%d 件の警告があります: %s", len(warnings), path)

        return Result.ok(ParsedTranslations(translations=translations, warnings=warnings))

    def parse_line(self, line: str) -> Result[Translation]:
        """1行を解析する

        Args:
            line: 翻訳ファイルの1行

        Returns:
            翻訳、またはValidationエラー
        """
        if not line.strip():
            return Result.fail(translation_invalid_format("Empty line"))

        parts = line.split(FIELD_SEPARATOR)
        if len(parts) < MINIMUM_FIELD_COUNT:
            return Result.fail(
                translation_invalid_format(
                    f"Expected at least {MINIMUM_FIELD_COUNT} fields, got {len(parts)}"
                )
            )

        try:
            file_id = int(parts[0])
            gossip_id = int(parts[1])
        except ValueError as e:
            return Result.fail(translation_parse_error(line, str(e)))

        return Result.ok(
            Translation(
                file_id=file_id,
                gossip_id=gossip_id,
                content=unescape_content(parts[2]),
                args_order=self._parse_args(parts[3]),
                args_id=self._parse_args(parts[4]),
            )
        )

    @staticmethod
    def _should_skip(line: str) -> bool:
        return not line.strip() or line.lstrip().startswith("#")

    @staticmethod
    def _parse_args(value: str) -> tuple[int, ...] | None:
        """「1-2-3」形式の1始まりの列を0始まりのタプルに変換する

        NULL・空・不正な値はいずれもNoneとして扱い、行の解析自体は失敗させない。
        """
        if not value.strip() or value.strip().upper() == NULL_MARKER:
            return None

        try:
            return tuple(int(part) - 1 for part in value.split("-"))
        except ValueError:
            return None
