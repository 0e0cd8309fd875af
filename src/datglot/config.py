"""Configuration module for Datglot."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


@dataclass(frozen=True)
class ArchiveConfig:
    """アーカイブライブラリ設定"""

    library: str = "datexport.dll"


@dataclass(frozen=True)
class ExportConfig:
    """エクスポート設定"""

    output_name: str = "exported.txt"
    progress_interval: int = 500


@dataclass(frozen=True)
class PatchConfig:
    """パッチ設定"""

    progress_interval: int = 100
    max_displayed_warnings: int = 10


@dataclass(frozen=True)
class DatglotConfig:
    """ルート設定"""

    data_dir: Path = Path("data")
    translations_dir: Path = Path("translations")
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    patch: PatchConfig = field(default_factory=PatchConfig)

    @property
    def default_export_path(self) -> Path:
        """エクスポート先のデフォルトパス"""
        return self.data_dir / self.export.output_name


def load_config(path: Path) -> DatglotConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        DatglotConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    return DatglotConfig(
        data_dir=Path(data.get("data_dir", default.data_dir)),
        translations_dir=Path(data.get("translations_dir", default.translations_dir)),
        archive=_merge_archive_config(data.get("archive", {}), default.archive),
        export=_merge_export_config(data.get("export", {}), default.export),
        patch=_merge_patch_config(data.get("patch", {}), default.patch),
    )


def get_default_config() -> DatglotConfig:
    """デフォルト設定を取得する"""
    return DatglotConfig()


def _merge_archive_config(data: dict[str, Any], default: ArchiveConfig) -> ArchiveConfig:
    """アーカイブ設定をマージする"""
    if not isinstance(data, dict):
        return default
    return ArchiveConfig(
        library=str(data.get("library", default.library)),
    )


def _merge_export_config(data: dict[str, Any], default: ExportConfig) -> ExportConfig:
    """エクスポート設定をマージする"""
    if not isinstance(data, dict):
        return default
    return ExportConfig(
        output_name=str(data.get("output_name", default.output_name)),
        progress_interval=_positive_int(
            data.get("progress_interval", default.progress_interval), "export.progress_interval"
        ),
    )


def _merge_patch_config(data: dict[str, Any], default: PatchConfig) -> PatchConfig:
    """パッチ設定をマージする"""
    if not isinstance(data, dict):
        return default
    return PatchConfig(
        progress_interval=_positive_int(
            data.get("progress_interval", default.progress_interval), "patch.progress_interval"
        ),
        max_displayed_warnings=_positive_int(
            data.get("max_displayed_warnings", default.max_displayed_warnings),
            "patch.max_displayed_warnings",
        ),
    )


def _positive_int(value: Any, name: str) -> int:
    """正の整数であることを検証する"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{name} は正の整数である必要があります: {value!r}")
    return value
