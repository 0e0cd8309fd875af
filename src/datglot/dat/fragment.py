"""フラグメントのバイナリコーデック

テキストサブファイル内の翻訳単位（フラグメント）を読み書きする。

レイアウト（リトルエンディアン）:
    ID (8B) | ピース数 (4B) | ピース (可変長文字数 + UTF-16LE) ...
    | 引数参照数 (4B) | 引数参照 (4B) ...
    | 引数文字列グループ数 (1B) | グループ (文字列数 4B + 可変長文字列 ...) ...
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from datglot.dat.varlen import VarLenEncoder, VarLenError

ARG_REF_SIZE = 4

# 孤立サロゲートを含む文字列もバイト単位で往復させる
_TEXT_ENCODING = "utf-16-le"
_TEXT_ERRORS = "surrogatepass"


class FragmentFormatError(ValueError):
    """フラグメントのバイナリ構造が壊れている場合の例外"""

    pass


@dataclass
class Fragment:
    """テキストフラグメント

    Attributes:
        fragment_id: フラグメントID（64ビット符号なし、外部ではgossip id）
        pieces: テキストピースのリスト。ピースの間にゲーム変数が挿入される
        arg_refs: 4バイトの不透明な引数参照のリスト
        arg_strings: 引数文字列グループのリスト
    """

    fragment_id: int = 0
    pieces: list[str] = field(default_factory=list)
    arg_refs: list[bytes] = field(default_factory=list)
    arg_strings: list[list[str]] = field(default_factory=list)

    @property
    def has_arguments(self) -> bool:
        """引数参照を持つかどうか"""
        return len(self.arg_refs) > 0

    @classmethod
    def parse(cls, stream: BinaryIO) -> Fragment:
        """ストリームからフラグメントを読み取る

        Args:
            stream: 読み取り位置がフラグメントの先頭にあるバイナリストリーム

        Returns:
            読み取ったフラグメント

        Raises:
            FragmentFormatError: データが途中で終わっている場合
        """
        try:
            (fragment_id,) = struct.unpack("<Q", _read_exact(stream, 8))

            (piece_count,) = struct.unpack("<I", _read_exact(stream, 4))
            pieces = [_read_string(stream) for _ in range(piece_count)]

            (arg_ref_count,) = struct.unpack("<I", _read_exact(stream, 4))
            arg_refs = [_read_exact(stream, ARG_REF_SIZE) for _ in range(arg_ref_count)]

            group_count = _read_exact(stream, 1)[0]
            arg_strings: list[list[str]] = []
            for _ in range(group_count):
                (string_count,) = struct.unpack("<I", _read_exact(stream, 4))
                arg_strings.append([_read_string(stream) for _ in range(string_count)])
        except VarLenError as e:
            raise FragmentFormatError(str(e)) from e

        return cls(
            fragment_id=fragment_id,
            pieces=pieces,
            arg_refs=arg_refs,
            arg_strings=arg_strings,
        )

    def write(self, stream: BinaryIO) -> None:
        """フラグメントをストリームへ書き込む

        Args:
            stream: 書き込み先のバイナリストリーム

        Raises:
            ValueError: 引数参照が4バイトでない、または文字列が長すぎる場合
        """
        stream.write(struct.pack("<Q", self.fragment_id))

        stream.write(struct.pack("<I", len(self.pieces)))
        for piece in self.pieces:
            _write_string(stream, piece)

        stream.write(struct.pack("<I", len(self.arg_refs)))
        for arg_ref in self.arg_refs:
            if len(arg_ref) != ARG_REF_SIZE:
                raise ValueError(f"引数参照は{ARG_REF_SIZE}バイトである必要があります: {arg_ref!r}")
            stream.write(arg_ref)

        stream.write(struct.pack("<B", len(self.arg_strings)))
        for group in self.arg_strings:
            stream.write(struct.pack("<I", len(group)))
            for text in group:
                _write_string(stream, text)

    def reorder_arguments(self, args_order: list[int], args_id: list[int]) -> None:
        """引数参照を指定順序で上書きする

        i番目の引数参照を ``args_id[args_order[i]]`` の32ビット値で置き換える。
        件数は変更しない。

        Args:
            args_order: args_idへの0始まりインデックス列
            args_id: 新しい引数IDの列

        Raises:
            IndexError: args_orderがargs_idの範囲外を指す場合
        """
        for i in range(min(len(args_order), len(self.arg_refs))):
            self.arg_refs[i] = struct.pack("<i", args_id[args_order[i]])


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise FragmentFormatError(
            f"不完全なデータ: {size}バイト必要ですが{len(data)}バイトしかありません"
        )
    return data


def _read_string(stream: BinaryIO) -> str:
    length = VarLenEncoder.read(stream)
    return _read_exact(stream, length * 2).decode(_TEXT_ENCODING, _TEXT_ERRORS)


def utf16_length(text: str) -> int:
    """書き込み時の文字数（コードポイントではなくUTF-16コードユニット数）を返す"""
    return len(text.encode(_TEXT_ENCODING, _TEXT_ERRORS)) // 2


def _write_string(stream: BinaryIO, text: str) -> None:
    encoded = text.encode(_TEXT_ENCODING, _TEXT_ERRORS)
    VarLenEncoder.write(stream, len(encoded) // 2)
    stream.write(encoded)
