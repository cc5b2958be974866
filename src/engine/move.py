"""
手（Move）を表現するモジュール
"""

from enum import Enum, auto
from typing import Optional, Tuple


class MoveType(Enum):
    """手の種類"""
    NORMAL = auto()    # 通常の移動
    CAPTURE = auto()   # 駒を取る


class Move:
    """一手を表すクラス

    駒を取る手では captured_id に取られる駒のIDが入る。
    隣接して飛び越える取り方では to_pos と取られる駒の位置は異なる。
    """

    def __init__(
        self,
        move_type: MoveType,
        piece_id: int,
        from_pos: Tuple[int, int],
        to_pos: Tuple[int, int],
        player_id: int,
        captured_id: Optional[int] = None,
        captured_pos: Optional[Tuple[int, int]] = None
    ):
        self.move_type = move_type
        self.piece_id = piece_id
        self.from_pos = from_pos
        self.to_pos = to_pos          # 着地するマス
        self.player_id = player_id
        self.captured_id = captured_id
        self.captured_pos = captured_pos

    @property
    def is_capture(self) -> bool:
        return self.move_type == MoveType.CAPTURE

    def __eq__(self, other):
        if not isinstance(other, Move):
            return NotImplemented
        return (
            self.move_type == other.move_type
            and self.piece_id == other.piece_id
            and self.from_pos == other.from_pos
            and self.to_pos == other.to_pos
            and self.player_id == other.player_id
            and self.captured_id == other.captured_id
        )

    def __hash__(self):
        return hash((self.move_type, self.piece_id, self.from_pos, self.to_pos, self.captured_id))

    def __str__(self):
        if self.is_capture:
            return f"P{self.player_id} {self.from_pos} x{self.captured_pos} -> {self.to_pos}"
        return f"P{self.player_id} {self.from_pos} -> {self.to_pos}"

    def __repr__(self):
        return (
            f"Move(type={self.move_type.name}, piece={self.piece_id}, "
            f"from={self.from_pos}, to={self.to_pos}, "
            f"captured={self.captured_id}, player={self.player_id})"
        )

    def to_dict(self) -> dict:
        """手を辞書形式に変換（API用）"""
        return {
            "type": self.move_type.name,
            "piece_id": self.piece_id,
            "from": self.from_pos,
            "to": self.to_pos,
            "player_id": self.player_id,
            "captured_id": self.captured_id,
            "captured_pos": self.captured_pos,
        }

    @staticmethod
    def from_dict(data: dict) -> 'Move':
        """辞書形式から手を復元（API用）"""
        captured_pos = tuple(data["captured_pos"]) if data.get("captured_pos") else None
        return Move(
            move_type=MoveType[data["type"]],
            piece_id=data["piece_id"],
            from_pos=tuple(data["from"]),
            to_pos=tuple(data["to"]),
            player_id=data["player_id"],
            captured_id=data.get("captured_id"),
            captured_pos=captured_pos
        )

    @staticmethod
    def create_normal_move(
        piece_id: int,
        from_pos: Tuple[int, int],
        to_pos: Tuple[int, int],
        player_id: int
    ) -> 'Move':
        """通常の移動手を作成"""
        return Move(
            move_type=MoveType.NORMAL,
            piece_id=piece_id,
            from_pos=from_pos,
            to_pos=to_pos,
            player_id=player_id
        )

    @staticmethod
    def create_capture_move(
        piece_id: int,
        from_pos: Tuple[int, int],
        to_pos: Tuple[int, int],
        player_id: int,
        captured_id: int,
        captured_pos: Tuple[int, int]
    ) -> 'Move':
        """駒を取る手を作成"""
        return Move(
            move_type=MoveType.CAPTURE,
            piece_id=piece_id,
            from_pos=from_pos,
            to_pos=to_pos,
            player_id=player_id,
            captured_id=captured_id,
            captured_pos=captured_pos
        )
