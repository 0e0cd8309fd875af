"""可変長整数エンコーダモジュール

DATサブファイル内の文字数やフラグメント数に使われる1〜2バイトの
可変長整数の読み書きを提供する。
"""

from typing import BinaryIO


class VarLenError(ValueError):
    """可変長整数の読み取りに失敗した場合の例外"""

    pass


class VarLenEncoder:
    """可変長整数エンコーダ

    0〜127は1バイトでそのまま、128〜32767は2バイトで表す。
    2バイト形式では上位バイトの最上位ビットを立てる。
    """

    HIGH_BIT: int = 0x80
    """2バイト形式を示すフラグビット"""

    MAX_SINGLE_BYTE_VALUE: int = 0x7F
    """1バイトで表せる最大値"""

    MAX_VALUE: int = 0x7FFF
    """表現可能な最大値"""

    @classmethod
    def read(cls, stream: BinaryIO) -> int:
        """ストリームから可変長整数を読み取る

        Args:
            stream: 読み取り位置が整数の先頭にあるバイナリストリーム

        Returns:
            デコードした整数値

        Raises:
            VarLenError: ストリームの終端に達した場合
        """
        first = stream.read(1)
        if not first:
            raise VarLenError("不完全なデータ: 可変長整数の先頭バイトがありません")

        value = first[0]
        if value & cls.HIGH_BIT:
            second = stream.read(1)
            if not second:
                raise VarLenError("不完全なデータ: 可変長整数の2バイト目がありません")
            value = ((value ^ cls.HIGH_BIT) << 8) | second[0]

        return value

    @classmethod
    def write(cls, stream: BinaryIO, value: int) -> None:
        """可変長整数をストリームへ書き込む

        Args:
            stream: 書き込み先のバイナリストリーム
            value: 書き込む値（0〜32767）

        Raises:
            ValueError: 値が範囲外の場合
        """
        stream.write(cls.encode(value))

    @classmethod
    def encode(cls, value: int) -> bytes:
        """整数を可変長バイト列に変換する

        Raises:
            ValueError: 値が範囲外の場合
        """
        cls._check_range(value)
        if value > cls.MAX_SINGLE_BYTE_VALUE:
            return bytes(((value >> 8) | cls.HIGH_BIT, value & 0xFF))
        return bytes((value,))

    @classmethod
    def encoded_length(cls, value: int) -> int:
        """エンコード後のバイト数を返す（1または2）

        Raises:
            ValueError: 値が負の場合
        """
        if value < 0:
            raise ValueError(f"可変長整数に負の値は指定できません: {value}")
        return 2 if value > cls.MAX_SINGLE_BYTE_VALUE else 1

    @classmethod
    def _check_range(cls, value: int) -> None:
        if value < 0 or value > cls.MAX_VALUE:
            raise ValueError(f"可変長整数の範囲外です (0-{cls.MAX_VALUE}): {value}")
