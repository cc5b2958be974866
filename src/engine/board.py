"""
盤面を管理するモジュール

盤面は駒の登録簿（フラットなリスト）を持ち、座標の問い合わせは線形探索で行う。
盤は最大でも100マス・駒32個程度なので索引は持たない。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import InvalidStateError
from .piece import Piece


class CellType(Enum):
    """マスの分類"""
    EMPTY = 'EMPTY'    # 空きマス
    BLOCK = 'BLOCK'    # 盤外
    FIGURE = 'FIGURE'  # 駒がある


@dataclass(frozen=True)
class Cell:
    """座標の問い合わせ結果"""
    type: CellType
    piece: Optional[Piece] = None

    @property
    def is_empty(self) -> bool:
        return self.type == CellType.EMPTY


EMPTY_CELL = Cell(CellType.EMPTY)
BLOCK_CELL = Cell(CellType.BLOCK)


class Board:
    """ゲームボードを表すクラス"""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        # 取られた駒も含めた全駒（取られた駒は active=False）
        self.pieces: List[Piece] = []

    def is_valid_position(self, position: Tuple[int, int]) -> bool:
        """位置が盤面内か確認"""
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def classify(self, x: int, y: int) -> Cell:
        """
        指定座標のマスを分類する
        盤外ならBLOCK、有効な駒があればFIGURE、なければEMPTY
        """
        if not self.is_valid_position((x, y)):
            return BLOCK_CELL
        for piece in self.pieces:
            if piece.active and piece.x == x and piece.y == y:
                return Cell(CellType.FIGURE, piece)
        return EMPTY_CELL

    def is_empty(self, position: Tuple[int, int]) -> bool:
        """盤内の空きマスか確認"""
        return self.classify(*position).is_empty

    def get_piece_at(self, position: Tuple[int, int]) -> Optional[Piece]:
        """指定位置の有効な駒を取得"""
        return self.classify(*position).piece

    def get_piece(self, piece_id: int) -> Optional[Piece]:
        """IDで駒を取得（取られた駒も返す）"""
        for piece in self.pieces:
            if piece.piece_id == piece_id:
                return piece
        return None

    def add_piece(self, piece: Piece):
        """駒を登録する"""
        self.pieces.append(piece)

    def clear(self):
        self.pieces = []

    def active_pieces(self) -> List[Piece]:
        """盤上に残っている駒"""
        return [piece for piece in self.pieces if piece.active]

    def player_pieces(self, player_id: int) -> List[Piece]:
        """指定プレイヤーの盤上の駒"""
        return [
            piece for piece in self.pieces
            if piece.active and piece.owner == player_id
        ]

    def assert_consistent(self):
        """
        1マスに有効な駒が1つまでであることを確認する
        違反していれば以後の合法手計算がすべて壊れるので例外にする
        """
        seen: Dict[Tuple[int, int], Piece] = {}
        for piece in self.active_pieces():
            if not self.is_valid_position(piece.position):
                raise InvalidStateError(
                    "盤外に有効な駒があります",
                    context={"piece": piece.piece_id, "position": piece.position}
                )
            other = seen.get(piece.position)
            if other is not None:
                raise InvalidStateError(
                    "同じマスに有効な駒が2つあります",
                    context={
                        "position": piece.position,
                        "pieces": (other.piece_id, piece.piece_id)
                    }
                )
            seen[piece.position] = piece

    def __str__(self):
        """盤面の文字列表現を返す"""
        cell_width = 4
        result = []

        header = "   "
        for x in range(self.width):
            header += f"{x:^{cell_width}}"
        result.append(header)

        for y in range(self.height):
            row_str = f"{y:>2} "
            for x in range(self.width):
                piece = self.get_piece_at((x, y))
                if piece is None:
                    row_str += f"{'.':^{cell_width}}"
                else:
                    label = f"{piece.owner}{piece.kind.name[:2]}"
                    row_str += f"{label:^{cell_width}}"
            result.append(row_str)

        return "\n".join(result)

    def to_dict(self) -> dict:
        """盤面を辞書形式に変換（API用）"""
        return {
            "width": self.width,
            "height": self.height,
            "pieces": [piece.to_dict() for piece in self.active_pieces()],
        }
