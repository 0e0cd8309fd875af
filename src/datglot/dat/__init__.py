"""DATアーカイブ関連モジュール

サブファイル内のフラグメント構造のバイナリコーデックと、
アーカイブ本体へのアクセスインターフェースを提供する。
"""

from datglot.dat.archive import ArchiveSession, DatArchive, SubfileInfo
from datglot.dat.fragment import Fragment, FragmentFormatError
from datglot.dat.native import NativeDatArchive
from datglot.dat.subfile import TEXT_FILE_MARKER, SubFile, is_text_file
from datglot.dat.varlen import VarLenEncoder, VarLenError

__all__ = [
    "ArchiveSession",
    "DatArchive",
    "Fragment",
    "FragmentFormatError",
    "NativeDatArchive",
    "SubFile",
    "SubfileInfo",
    "TEXT_FILE_MARKER",
    "VarLenEncoder",
    "VarLenError",
    "is_text_file",
]
