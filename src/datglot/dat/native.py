"""ネイティブdatexportライブラリによるDATアーカイブ実装

ゲームクライアント付属のdatexport共有ライブラリをctypesで呼び出し、
DatArchiveインターフェースを提供する。
"""

from __future__ import annotations

import ctypes
import os
from pathlib import Path

from datglot.dat.archive import SubfileInfo
from datglot.errors import (
    dat_file_cannot_open,
    dat_file_not_found,
    dat_file_read_error,
    dat_file_write_error,
)
from datglot.types import Result

DEFAULT_LIBRARY = "datexport.dll"

# 読み取り(2) + 書き込み(128)
OPEN_FLAGS_READ_WRITE = 130

_STAMP_SIZE = 64


class NativeDatArchive:
    """datexport共有ライブラリを使うDatArchive実装

    ライブラリは最初のopen時に読み込む。閉じていないハンドルを
    追跡し、未知のハンドルが渡された場合はValueErrorを送出する。
    """

    def __init__(self, library: str = DEFAULT_LIBRARY) -> None:
        """初期化

        Args:
            library: 共有ライブラリ名またはパス
        """
        self._library_name = library
        self._lib: ctypes.CDLL | None = None
        self._open_handles: set[int] = set()

    def open(self, path: Path) -> Result[int]:
        """DATファイルを読み書きモードで開く

        Args:
            path: DATファイルのパス

        Returns:
            ハンドル、または開けなかった場合のエラー
        """
        if not path.exists():
            return Result.fail(dat_file_not_found(str(path)))

        try:
            lib = self._load()
        except OSError:
            return Result.fail(
                dat_file_cannot_open(
                    f"{path}: {self._library_name} not found. "
                    "Ensure the library is in the application directory."
                )
            )

        requested = 0
        did_master_map = ctypes.c_int()
        block_size = ctypes.c_int()
        vnum_dat_file = ctypes.c_int()
        vnum_game_data = ctypes.c_int()
        dat_file_id = ctypes.c_uint()
        dat_id_stamp = ctypes.create_string_buffer(_STAMP_SIZE)
        first_iter_guid = ctypes.create_string_buffer(_STAMP_SIZE)

        try:
            handle = lib.OpenDatFileEx2(
                requested,
                os.fsencode(path),
                OPEN_FLAGS_READ_WRITE,
                ctypes.byref(did_master_map),
                ctypes.byref(block_size),
                ctypes.byref(vnum_dat_file),
                ctypes.byref(vnum_game_data),
                ctypes.byref(dat_file_id),
                dat_id_stamp,
                first_iter_guid,
            )
        except OSError as e:
            return Result.fail(dat_file_cannot_open(f"{path}: {e}"))

        if handle != requested:
            return Result.fail(dat_file_cannot_open(str(path)))

        self._open_handles.add(handle)
        return Result.ok(handle)

    def list_subfiles(self, handle: int) -> dict[int, SubfileInfo]:
        """全サブファイルのIDとメタデータを返す"""
        lib = self._checked(handle)

        count = lib.GetNumSubfiles(handle)
        if count <= 0:
            return {}

        file_ids = (ctypes.c_int * count)()
        sizes = (ctypes.c_int * count)()
        iterations = (ctypes.c_int * count)()
        lib.GetSubfileSizes(handle, file_ids, sizes, iterations, 0, count)

        return {
            file_ids[i] & 0xFFFFFFFF: SubfileInfo(size=sizes[i], iteration=iterations[i])
            for i in range(count)
        }

    def read_subfile(self, handle: int, file_id: int, size: int) -> Result[bytes]:
        """サブファイルの生データを読み取る"""
        lib = self._checked(handle)

        if size <= 0:
            return Result.fail(dat_file_read_error(file_id, "Invalid size (must be positive)"))

        try:
            buffer = ctypes.create_string_buffer(size)
            version = ctypes.c_int()
            lib.GetSubfileData(handle, _as_c_int(file_id), buffer, 0, ctypes.byref(version))
        except MemoryError:
            return Result.fail(dat_file_read_error(file_id, f"Out of memory allocating {size} bytes"))
        except OSError as e:
            return Result.fail(dat_file_read_error(file_id, str(e)))

        return Result.ok(buffer.raw)

    def subfile_version(self, handle: int, file_id: int) -> int:
        """サブファイルのバージョンを返す"""
        lib = self._checked(handle)
        return int(lib.GetSubfileVersion(handle, _as_c_int(file_id)))

    def write_subfile(
        self, handle: int, file_id: int, data: bytes, version: int, iteration: int
    ) -> Result[None]:
        """サブファイルを既存データの破棄後に書き込む"""
        lib = self._checked(handle)

        if not data:
            return Result.fail(dat_file_write_error(file_id, "Cannot write empty data"))

        try:
            buffer = ctypes.create_string_buffer(data, len(data))
            lib.PurgeSubfileData(handle, _as_c_int(file_id))
            lib.PutSubfileData(
                handle, _as_c_int(file_id), buffer, 0, len(data), version, iteration, 0
            )
        except MemoryError:
            return Result.fail(
                dat_file_write_error(file_id, f"Out of memory allocating {len(data)} bytes")
            )
        except OSError as e:
            return Result.fail(dat_file_write_error(file_id, str(e)))

        return Result.ok(None)

    def flush(self, handle: int) -> None:
        """未書き込みの変更をディスクへ反映する"""
        self._checked(handle).Flush(handle)

    def close(self, handle: int) -> None:
        """ハンドルを閉じる（未知のハンドルは無視する）"""
        if handle not in self._open_handles or self._lib is None:
            return
        self._open_handles.discard(handle)
        self._lib.CloseDatFile(handle)

    def _load(self) -> ctypes.CDLL:
        if self._lib is None:
            lib = ctypes.CDLL(self._library_name)
            _declare_signatures(lib)
            self._lib = lib
        return self._lib

    def _checked(self, handle: int) -> ctypes.CDLL:
        if handle not in self._open_handles or self._lib is None:
            raise ValueError(f"Invalid or closed file handle: {handle}")
        return self._lib


def _as_c_int(file_id: int) -> int:
    """32ビット符号なしIDをネイティブ側の符号付きintに変換する"""
    return ctypes.c_int(file_id & 0xFFFFFFFF).value


def _declare_signatures(lib: ctypes.CDLL) -> None:
    c_int_p = ctypes.POINTER(ctypes.c_int)

    lib.OpenDatFileEx2.argtypes = [
        ctypes.c_int,
        ctypes.c_char_p,
        ctypes.c_uint,
        c_int_p,
        c_int_p,
        c_int_p,
        c_int_p,
        ctypes.POINTER(ctypes.c_uint),
        ctypes.c_char_p,
        ctypes.c_char_p,
    ]
    lib.OpenDatFileEx2.restype = ctypes.c_int

    lib.GetNumSubfiles.argtypes = [ctypes.c_int]
    lib.GetNumSubfiles.restype = ctypes.c_int

    lib.GetSubfileSizes.argtypes = [
        ctypes.c_int,
        c_int_p,
        c_int_p,
        c_int_p,
        ctypes.c_int,
        ctypes.c_int,
    ]
    lib.GetSubfileSizes.restype = None

    lib.GetSubfileVersion.argtypes = [ctypes.c_int, ctypes.c_int]
    lib.GetSubfileVersion.restype = ctypes.c_int

    lib.GetSubfileData.argtypes = [
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_void_p,
        ctypes.c_int,
        c_int_p,
    ]
    lib.GetSubfileData.restype = None

    lib.PurgeSubfileData.argtypes = [ctypes.c_int, ctypes.c_int]
    lib.PurgeSubfileData.restype = ctypes.c_int

    lib.PutSubfileData.argtypes = [
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_void_p,
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_int,
        ctypes.c_ubyte,
    ]
    lib.PutSubfileData.restype = ctypes.c_int

    lib.Flush.argtypes = [ctypes.c_int]
    lib.Flush.restype = None

    lib.CloseDatFile.argtypes = [ctypes.c_int]
    lib.CloseDatFile.restype = None
