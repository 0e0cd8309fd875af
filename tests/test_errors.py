"""ドメインエラー定義のテスト"""

import pytest

from datglot.errors import (
    NO_TRANSLATIONS,
    DatError,
    ErrorKind,
    dat_file_cannot_open,
    dat_file_not_found,
    dat_file_read_error,
    dat_file_write_error,
    export_cannot_create_output,
    fragment_not_found,
    piece_too_long,
    subfile_not_found,
    subfile_not_text,
    subfile_parse_error,
    translation_file_not_found,
    translation_file_read_error,
    translation_invalid_encoding,
    translation_invalid_format,
    translation_parse_error,
)


class TestErrorFactories:
    """エラー生成関数のテスト"""

    @pytest.mark.parametrize(
        "error, code, kind",
        [
            pytest.param(
                dat_file_not_found("a.dat"), "DatFile.NotFound", ErrorKind.NOT_FOUND,
                id="DatFile.NotFound",
            ),
            pytest.param(
                dat_file_cannot_open("a.dat"), "DatFile.CannotOpen", ErrorKind.IO_ERROR,
                id="DatFile.CannotOpen",
            ),
            pytest.param(
                dat_file_read_error(1, "x"), "DatFile.ReadError", ErrorKind.IO_ERROR,
                id="DatFile.ReadError",
            ),
            pytest.param(
                dat_file_write_error(1, "x"), "DatFile.WriteError", ErrorKind.IO_ERROR,
                id="DatFile.WriteError",
            ),
            pytest.param(
                subfile_not_found(1), "SubFile.NotFound", ErrorKind.NOT_FOUND,
                id="SubFile.NotFound",
            ),
            pytest.param(
                subfile_not_text(1), "SubFile.NotTextFile", ErrorKind.VALIDATION,
                id="SubFile.NotTextFile",
            ),
            pytest.param(
                subfile_parse_error(1, "x"), "SubFile.ParseError", ErrorKind.FAILURE,
                id="SubFile.ParseError",
            ),
            pytest.param(
                fragment_not_found(1, 2), "Fragment.NotFound", ErrorKind.NOT_FOUND,
                id="Fragment.NotFound",
            ),
            pytest.param(
                piece_too_long(1, 2, 40000, 32767), "Fragment.PieceTooLong", ErrorKind.VALIDATION,
                id="Fragment.PieceTooLong",
            ),
            pytest.param(
                translation_file_read_error("a.txt", "x"), "Translation.ReadError",
                ErrorKind.IO_ERROR, id="Translation.ReadError",
            ),
            pytest.param(
                translation_invalid_encoding(3), "Translation.InvalidEncoding",
                ErrorKind.VALIDATION, id="Translation.InvalidEncoding",
            ),
            pytest.param(
                translation_file_not_found("t.txt"), "Translation.FileNotFound", ErrorKind.NOT_FOUND,
                id="Translation.FileNotFound",
            ),
            pytest.param(
                translation_invalid_format("x"), "Translation.InvalidFormat", ErrorKind.VALIDATION,
                id="Translation.InvalidFormat",
            ),
            pytest.param(
                translation_parse_error("l", "x"), "Translation.ParseError", ErrorKind.VALIDATION,
                id="Translation.ParseError",
            ),
            pytest.param(
                NO_TRANSLATIONS, "Translation.NoTranslations", ErrorKind.VALIDATION,
                id="Translation.NoTranslations",
            ),
            pytest.param(
                export_cannot_create_output("o.txt", "x"), "Export.CannotCreateOutput", ErrorKind.IO_ERROR,
                id="Export.CannotCreateOutput",
            ),
        ],
    )
    def test_error_code_and_kind(self, error: DatError, code: str, kind: ErrorKind) -> None:
        """各エラーが正しいコードと種別を持つ"""
        assert error.code == code
        assert error.kind == kind

    @pytest.mark.parametrize(
        "error, message",
        [
            pytest.param(
                subfile_not_found(620756993), "File 620756993 not found in DAT archive",
                id="正常系: サブファイルなし",
            ),
            pytest.param(
                subfile_not_text(16777217), "File 16777217 is not a text file",
                id="正常系: 非テキスト",
            ),
            pytest.param(
                fragment_not_found(620756993, 42), "Fragment 42 not found in file 620756993",
                id="正常系: フラグメントなし",
            ),
        ],
    )
    def test_warning_messages(self, error: DatError, message: str) -> None:
        """警告として表示されるメッセージの文言"""
        assert error.message == message

    def test_str_includes_kind_and_code(self) -> None:
        """文字列表現に種別とコードを含む"""
        assert str(dat_file_not_found("a.dat")) == "[not_found] DatFile.NotFound: DAT file not found: a.dat"

    def test_error_is_immutable(self) -> None:
        """エラーは値オブジェクトとして比較できる"""
        assert subfile_not_found(1) == subfile_not_found(1)
        assert hash(subfile_not_found(1)) == hash(subfile_not_found(1))
