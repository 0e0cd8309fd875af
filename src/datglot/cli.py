"""CLI entry point for Datglot."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from datglot import __version__
from datglot.config import ConfigError, DatglotConfig, get_default_config, load_config
from datglot.dat.native import NativeDatArchive
from datglot.errors import dat_file_not_found, translation_file_not_found
from datglot.logger import DatglotLogger, LogConfig, VerboseLevel
from datglot.pipeline import ExportPipeline, Operation, PatchPipeline
from datglot.types import ExitCode

app = typer.Typer(help="DATアーカイブのテキストをエクスポート・パッチするCLIツール")
console = Console()

TRANSLATION_SUFFIX = ".txt"

VerboseOption = Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")]
LogFileOption = Annotated[Path | None, typer.Option(help="ログファイル出力先")]
ConfigOption = Annotated[Path | None, typer.Option("--config", help="設定ファイル（YAML）")]


def resolve_translations_path(name: str, translations_dir: Path) -> Path:
    """翻訳名をファイルパスに解決する

    パス区切りを含むか ``.txt`` で終わる場合はそのままパスとして扱い、
    それ以外は translations_dir 配下の ``{name}.txt`` とみなす。
    """
    if "/" in name or "\\" in name or name.lower().endswith(TRANSLATION_SUFFIX):
        return Path(name)
    return translations_dir / f"{name}{TRANSLATION_SUFFIX}"


def _load_settings(config_path: Path | None) -> DatglotConfig:
    if config_path is None:
        return get_default_config()
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(ExitCode.INVALID_ARGUMENTS) from e


def _configure_logging(verbose: int) -> None:
    # 通常時はERROR以上のみ。項目単位の警告はサマリーに表示する
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.ERROR
    package_logger = logging.getLogger("datglot")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    package_logger.setLevel(level)


def _log_config(verbose: int, log_file: Path | None, settings: DatglotConfig) -> LogConfig:
    return LogConfig(
        verbose_level=VerboseLevel(min(verbose, VerboseLevel.DEBUG)),
        log_file=log_file,
        max_displayed_warnings=settings.patch.max_displayed_warnings,
    )


@app.command()
def export(
    dat_file: Annotated[Path, typer.Argument(help="DATファイルパス")],
    output: Annotated[Path | None, typer.Argument(help="出力ファイルパス")] = None,
    verbose: VerboseOption = 0,
    log_file: LogFileOption = None,
    config: ConfigOption = None,
) -> None:
    """DATアーカイブの全テキストを翻訳ファイル形式でエクスポートする"""
    settings = _load_settings(config)
    _configure_logging(verbose)
    output_path = output if output is not None else settings.default_export_path

    with DatglotLogger(_log_config(verbose, log_file, settings)) as log:
        if not dat_file.is_file():
            log.error(dat_file_not_found(str(dat_file)).message)
            raise typer.Exit(ExitCode.FILE_NOT_FOUND)

        log.verbose(f"DAT file: {dat_file}")
        log.verbose(f"Output: {output_path}")

        pipeline = ExportPipeline(
            NativeDatArchive(settings.archive.library),
            progress_interval=settings.export.progress_interval,
        )
        progress = log.create_progress()
        progress.start(Operation.EXPORT)
        result = pipeline.run(dat_file, output_path, progress_callback=progress)

        if not result.success:
            progress.finish(False)
            log.error(str(result.error))
            raise typer.Exit(result.exit_code)

        progress.finish(True)
        log.log_export_summary(result.unwrap())

    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def patch(
    name: Annotated[str, typer.Argument(help="翻訳名または翻訳ファイルパス")],
    dat_file: Annotated[Path, typer.Argument(help="DATファイルパス")],
    verbose: VerboseOption = 0,
    log_file: LogFileOption = None,
    config: ConfigOption = None,
) -> None:
    """翻訳ファイルをDATアーカイブに適用する"""
    settings = _load_settings(config)
    _configure_logging(verbose)
    translations_path = resolve_translations_path(name, settings.translations_dir)

    with DatglotLogger(_log_config(verbose, log_file, settings)) as log:
        if not translations_path.is_file():
            log.error(translation_file_not_found(str(translations_path)).message)
            raise typer.Exit(ExitCode.FILE_NOT_FOUND)
        if not dat_file.is_file():
            log.error(dat_file_not_found(str(dat_file)).message)
            raise typer.Exit(ExitCode.FILE_NOT_FOUND)

        log.verbose(f"Translations: {translations_path}")
        log.verbose(f"DAT file: {dat_file}")

        pipeline = PatchPipeline(
            NativeDatArchive(settings.archive.library),
            progress_interval=settings.patch.progress_interval,
        )
        progress = log.create_progress()
        progress.start(Operation.PATCH)
        result = pipeline.run(translations_path, dat_file, progress_callback=progress)

        if not result.success:
            progress.finish(False)
            log.error(str(result.error))
            raise typer.Exit(result.exit_code)

        progress.finish(True)
        log.log_patch_summary(result.unwrap())

    raise typer.Exit(ExitCode.SUCCESS)


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"datglot {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """Datglot CLI - DATアーカイブのテキスト翻訳ツール"""
    pass
