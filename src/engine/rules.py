"""
ルール判定を行うモジュール

方向データに沿ってレイを進め、移動先と駒を取る手を生成する。
取り方（隣接して飛び越える／相手のマスに入る）と脱落判定はバリアントごとに切り替える。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .board import Board, CellType
from .move import Move
from .piece import Direction, Piece


class CaptureGeometry(Enum):
    """駒の取り方"""
    ADJACENT_LAND = 'ADJACENT_LAND'  # 相手の駒を飛び越えて直後の空きマスに着地（チェッカー型）
    DISPLACE = 'DISPLACE'            # 相手の駒のマスに入る（チェス型）


class AliveTest(Enum):
    """プレイヤーが勝負に残っている条件"""
    ANY_PIECE = 'ANY_PIECE'    # 駒が1つでも残っている
    MAIN_PIECE = 'MAIN_PIECE'  # is_main の駒が残っている


@dataclass(frozen=True)
class VariantRules:
    """バリアントごとのルール設定"""
    mandatory_capture: bool = True
    capture_geometry: CaptureGeometry = CaptureGeometry.ADJACENT_LAND
    chain_captures: bool = True
    alive_test: AliveTest = AliveTest.ANY_PIECE

    def to_dict(self) -> dict:
        return {
            "mandatory_capture": self.mandatory_capture,
            "capture_geometry": self.capture_geometry.value,
            "chain_captures": self.chain_captures,
            "alive_test": self.alive_test.value,
        }


# チェッカー型: 取れるなら必ず取る・連続取り・全駒を失うと脱落
CHECKERS_RULES = VariantRules(
    mandatory_capture=True,
    capture_geometry=CaptureGeometry.ADJACENT_LAND,
    chain_captures=True,
    alive_test=AliveTest.ANY_PIECE,
)

# チェス型: 強制なし・連続取りなし・王（main）を失うと脱落
CHESS_RULES = VariantRules(
    mandatory_capture=False,
    capture_geometry=CaptureGeometry.DISPLACE,
    chain_captures=False,
    alive_test=AliveTest.MAIN_PIECE,
)


class Rules:
    """ルールを管理するクラス"""

    @staticmethod
    def get_legal_moves(board: Board, piece: Piece) -> List[Move]:
        """
        駒を取らない移動先をすべて取得
        各方向に max_steps まで進み、空きマスを移動先にする。
        空きでないマスに当たったらそのレイは終わり（そのマス自体は含めない）
        """
        legal_moves = []

        for direction in piece.kind.moves:
            x, y = piece.position
            for _ in range(direction.max_steps):
                x += direction.dx
                y += direction.dy
                if board.classify(x, y).type != CellType.EMPTY:
                    break
                legal_moves.append(
                    Move.create_normal_move(piece.piece_id, piece.position, (x, y), piece.owner)
                )

        return legal_moves

    @staticmethod
    def get_legal_captures(
        board: Board,
        piece: Piece,
        mover_id: Optional[int] = None,
        geometry: CaptureGeometry = CaptureGeometry.ADJACENT_LAND
    ) -> List[Move]:
        """
        駒を取る手をすべて取得
        mover_id: 手番のプレイヤー。「相手の駒」はこのIDとの比較で決まる
        （省略時は駒の所有者）
        """
        if mover_id is None:
            mover_id = piece.owner

        legal_captures = []
        for direction in piece.kind.capture_directions:
            capture = Rules._cast_capture_ray(board, piece, direction, mover_id, geometry)
            if capture is not None:
                legal_captures.append(capture)

        return legal_captures

    @staticmethod
    def _cast_capture_ray(
        board: Board,
        piece: Piece,
        direction: Direction,
        mover_id: int,
        geometry: CaptureGeometry
    ) -> Optional[Move]:
        """1方向のレイで取れる駒を探す（1方向につき最大1つ）"""
        x, y = piece.position

        for _ in range(direction.max_steps):
            x += direction.dx
            y += direction.dy
            cell = board.classify(x, y)

            if cell.type == CellType.EMPTY:
                continue
            if cell.type == CellType.BLOCK or cell.piece.owner == mover_id:
                # 盤外か味方の駒で止まる
                return None

            target = cell.piece
            if geometry == CaptureGeometry.DISPLACE:
                landing = target.position
            else:
                # 相手の駒の直後のマスが空いていれば着地できる
                landing = (x + direction.dx, y + direction.dy)
                if not board.is_empty(landing):
                    return None

            return Move.create_capture_move(
                piece.piece_id,
                piece.position,
                landing,
                mover_id,
                captured_id=target.piece_id,
                captured_pos=target.position
            )

        return None

    @staticmethod
    def is_alive(board: Board, player_id: int, alive_test: AliveTest) -> bool:
        """プレイヤーがまだ勝負に残っているか"""
        pieces = board.player_pieces(player_id)
        if alive_test == AliveTest.MAIN_PIECE:
            return any(piece.is_main for piece in pieces)
        return len(pieces) > 0

    @staticmethod
    def contending_players(
        board: Board,
        player_ids: Iterable[int],
        alive_test: AliveTest
    ) -> List[int]:
        """勝負に残っているプレイヤーのIDを順番どおりに返す"""
        return [
            player_id for player_id in player_ids
            if Rules.is_alive(board, player_id, alive_test)
        ]
