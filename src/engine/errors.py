"""
ルールエンジンの例外定義

すべての例外は GameError を継承する。
"""

from typing import Any, Dict, Optional


class GameError(Exception):
    """ルールエンジンの基底例外

    Attributes:
        code: 機械判読用のエラーコード
        message: エラー内容
        context: デバッグ用の付加情報
    """
    code: str = "GAME_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self):
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """辞書形式に変換（API用）"""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class IllegalActionError(GameError):
    """選択できない駒、または合法手にない移動先が指定された

    状態は一切変更されない。呼び出し側で回復可能。
    """
    code: str = "ILLEGAL_ACTION"


class InvalidConfigurationError(GameError):
    """駒カタログや初期配置の設定が不正"""
    code: str = "INVALID_CONFIGURATION"


class InvalidStateError(GameError):
    """内部不変条件の違反（同じマスに有効な駒が2つある等）"""
    code: str = "INVALID_STATE"


class GameStateError(GameError):
    """ゲームのライフサイクルに合わない呼び出し（再入、開始前の操作等）"""
    code: str = "GAME_STATE"
