"""翻訳エントリのモデル"""

from __future__ import annotations

from dataclasses import dataclass

# ピースの区切り。ゲーム変数が挿入される位置を示す
PIECE_SEPARATOR = "<--DO_NOT_TOUCH!-->"


@dataclass(frozen=True)
class Translation:
    """1フラグメント分の翻訳

    Attributes:
        file_id: 対象サブファイルID
        gossip_id: 対象フラグメントID
        content: 翻訳テキスト（エスケープ解除済み）
        args_order: 引数の並び順（0始まり）。指定がなければNone
        args_id: 引数ID（0始まり）。指定がなければNone
    """

    file_id: int
    gossip_id: int
    content: str = ""
    args_order: tuple[int, ...] | None = None
    args_id: tuple[int, ...] | None = None

    @property
    def fragment_id(self) -> int:
        """フラグメントID（gossip_idと同じ値）"""
        return self.gossip_id

    def pieces(self) -> list[str]:
        """内容を区切りトークンで分割したピースのリストを返す"""
        return self.content.split(PIECE_SEPARATOR)

    def __str__(self) -> str:
        return f"Translation[File={self.file_id}, Gossip={self.gossip_id}, Length={len(self.content)}]"
