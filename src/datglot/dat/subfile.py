"""DATサブファイルのコンテナ

アーカイブ内の1レコード（サブファイル）を解析し、テキストサブファイルであれば
フラグメントをIDで索引付けして保持する。編集後は再シリアライズできる。
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from io import BytesIO

from datglot.dat.fragment import Fragment, FragmentFormatError
from datglot.dat.varlen import VarLenEncoder, VarLenError

# ファイルIDの上位1バイトがこの値ならテキストサブファイル
TEXT_FILE_MARKER = 0x25

RESERVED_SIZE = 5


def is_text_file(file_id: int) -> bool:
    """ファイルIDがテキストサブファイルを示すかどうかを判定する"""
    return ((file_id & 0xFFFFFFFF) >> 24) == TEXT_FILE_MARKER


@dataclass
class SubFile:
    """DATサブファイル

    非テキストサブファイルはIDのみを保持し、残りのバイト列はモデル化しない。

    Attributes:
        file_id: 32ビットのファイルID
        version: サブファイルのバージョン（書き戻し時に使用）
        reserved: 予約領域の5バイト（そのまま保持する）
        fragments: フラグメントIDからフラグメントへの対応表
    """

    file_id: int = 0
    version: int = 0
    reserved: bytes = bytes(RESERVED_SIZE)
    fragments: dict[int, Fragment] = field(default_factory=dict)

    @property
    def is_text(self) -> bool:
        """テキストサブファイルかどうか"""
        return is_text_file(self.file_id)

    @property
    def fragment_count(self) -> int:
        """保持しているフラグメント数"""
        return len(self.fragments)

    def get_fragment(self, fragment_id: int) -> Fragment | None:
        """IDでフラグメントを検索する"""
        return self.fragments.get(fragment_id)

    @classmethod
    def parse(cls, data: bytes, version: int = 0) -> SubFile:
        """生バイト列からサブファイルを解析する

        同じIDのフラグメントが複数ある場合は後のものが前のものを上書きする。

        Args:
            data: サブファイルの生バイト列
            version: アーカイブから取得したバージョン

        Returns:
            解析したサブファイル

        Raises:
            FragmentFormatError: データが壊れている場合
        """
        stream = BytesIO(data)

        header = stream.read(4)
        if len(header) != 4:
            raise FragmentFormatError("不完全なデータ: ファイルIDがありません")
        (file_id,) = struct.unpack("<I", header)

        subfile = cls(file_id=file_id, version=version)
        if not subfile.is_text:
            return subfile

        reserved = stream.read(RESERVED_SIZE)
        if len(reserved) != RESERVED_SIZE:
            raise FragmentFormatError("不完全なデータ: 予約領域が不足しています")
        subfile.reserved = reserved

        try:
            fragment_count = VarLenEncoder.read(stream)
        except VarLenError as e:
            raise FragmentFormatError(str(e)) from e

        for _ in range(fragment_count):
            fragment = Fragment.parse(stream)
            subfile.fragments[fragment.fragment_id] = fragment

        return subfile

    def serialize(
        self,
        args_order: list[int] | None = None,
        args_id: list[int] | None = None,
        target_fragment_id: int | None = None,
    ) -> bytes:
        """サブファイルをバイト列に変換する

        args_order・args_idとtarget_fragment_idがすべて指定された場合、
        対象フラグメントの引数参照のみを並べ替えてから書き出す。

        Args:
            args_order: 引数の並び順（0始まり、args_idへのインデックス）
            args_id: 引数ID
            target_fragment_id: 並べ替え対象のフラグメントID

        Returns:
            シリアライズしたバイト列

        Raises:
            ValueError: 非テキストサブファイルをシリアライズしようとした場合
        """
        if not self.is_text:
            raise ValueError(f"非テキストサブファイルはシリアライズできません: {self.file_id}")

        stream = BytesIO()
        stream.write(struct.pack("<I", self.file_id & 0xFFFFFFFF))
        stream.write(self.reserved)
        VarLenEncoder.write(stream, len(self.fragments))

        for fragment_id, fragment in self.fragments.items():
            if (
                fragment_id == target_fragment_id
                and args_order is not None
                and args_id is not None
            ):
                fragment.reorder_arguments(args_order, args_id)
            fragment.write(stream)

        return stream.getvalue()
