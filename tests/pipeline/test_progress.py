"""進捗情報のテスト"""

import pytest

from datglot.pipeline.progress import Operation, OperationProgress


class TestOperationProgress:
    """OperationProgressのテスト"""

    @pytest.mark.parametrize(
        "current, total, expected",
        [
            pytest.param(0, 10, 0.0, id="正常系: 開始"),
            pytest.param(5, 10, 50.0, id="正常系: 半分"),
            pytest.param(10, 10, 100.0, id="正常系: 完了"),
            pytest.param(3, 0, 0.0, id="境界値: 総数0"),
        ],
    )
    def test_percentage(self, current: int, total: int, expected: float) -> None:
        """完了率を計算する"""
        progress = OperationProgress(Operation.PATCH, current=current, total=total)
        assert progress.percentage == pytest.approx(expected)

    def test_progress_is_immutable(self) -> None:
        """進捗情報は変更できない"""
        progress = OperationProgress(Operation.EXPORT, current=1, total=2)
        with pytest.raises(AttributeError):
            progress.current = 2  # type: ignore[misc]

    @pytest.mark.parametrize(
        "operation, value",
        [
            pytest.param(Operation.EXPORT, "export", id="正常系: EXPORT"),
            pytest.param(Operation.PATCH, "patch", id="正常系: PATCH"),
        ],
    )
    def test_operation_values(self, operation: Operation, value: str) -> None:
        """処理種別の値"""
        assert operation.value == value
