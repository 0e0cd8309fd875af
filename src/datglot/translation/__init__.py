"""翻訳ファイルのモデルとパーサー"""

from datglot.translation.model import PIECE_SEPARATOR, Translation
from datglot.translation.parser import (
    FIELD_SEPARATOR,
    ParsedTranslations,
    TranslationFileParser,
    escape_content,
    unescape_content,
)

__all__ = [
    "FIELD_SEPARATOR",
    "PIECE_SEPARATOR",
    "ParsedTranslations",
    "Translation",
    "TranslationFileParser",
    "escape_content",
    "unescape_content",
]
