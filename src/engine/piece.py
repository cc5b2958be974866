"""
駒の種類（カタログ）と盤上の駒を定義するモジュール

駒の動きはクラス階層ではなくデータ（方向の集合とフラグ）で表現する。
生成器は駒の名前を一切見ずに方向データだけを辿るので、
新しい駒の種類はカタログに追加するだけで扱える。
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .errors import InvalidConfigurationError

# 盤上の座標 (x, y)。左上が原点
Position = Tuple[int, int]


@dataclass(frozen=True)
class Direction:
    """一方向への移動（レイ）

    (dx, dy) の単位ステップを最大 max_steps 回繰り返す。
    """
    dx: int
    dy: int
    max_steps: int = 1

    def __post_init__(self):
        if self.dx == 0 and self.dy == 0:
            raise InvalidConfigurationError(
                "方向ベクトルが (0, 0) です",
                context={"dx": self.dx, "dy": self.dy}
            )
        if self.max_steps < 1:
            raise InvalidConfigurationError(
                "max_steps は1以上である必要があります",
                context={"max_steps": self.max_steps}
            )

    def to_dict(self) -> dict:
        return {"dx": self.dx, "dy": self.dy, "max_steps": self.max_steps}


# よく使う方向ベクトル
DIAGONALS: Tuple[Tuple[int, int], ...] = ((-1, 1), (1, 1), (-1, -1), (1, -1))
ORTHOGONALS: Tuple[Tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
KNIGHT_JUMPS: Tuple[Tuple[int, int], ...] = (
    (1, -2), (2, -1), (2, 1), (1, 2), (-1, 2), (-2, 1), (-2, -1), (-1, -2)
)


def directions(vectors: Iterable[Tuple[int, int]], max_steps: int = 1) -> Tuple[Direction, ...]:
    """ベクトルの列から同じ max_steps の方向タプルを作る"""
    return tuple(Direction(dx, dy, max_steps) for dx, dy in vectors)


@dataclass(frozen=True)
class PieceKind:
    """駒の種類（カタログの1エントリ）

    captures を省略すると moves と同じ方向で駒を取る。
    promotion_area に入った瞬間、promoted の種類に置き換わる（成り）。
    is_main は「この駒を失うとそのプレイヤーは脱落する」印で、
    チェス型で使う。
    """
    name: str
    player_id: int
    moves: Tuple[Direction, ...] = ()
    captures: Optional[Tuple[Direction, ...]] = None
    is_main: bool = False
    promotion_area: FrozenSet[Position] = frozenset()
    promoted: Optional['PieceKind'] = None

    def __post_init__(self):
        # リストで渡されても不変なタプルに揃える
        object.__setattr__(self, 'moves', tuple(self.moves))
        if self.captures is not None:
            object.__setattr__(self, 'captures', tuple(self.captures))
        object.__setattr__(
            self, 'promotion_area', frozenset(tuple(pos) for pos in self.promotion_area)
        )

        if not self.moves and not self.capture_directions:
            raise InvalidConfigurationError(
                "方向を1つも持たない駒の種類です",
                context={"kind": self.name}
            )
        if self.promoted is not None and self.promoted.player_id != self.player_id:
            raise InvalidConfigurationError(
                "成った後の駒の所有者が元の駒と異なります",
                context={"kind": self.name, "promoted": self.promoted.name}
            )

    @property
    def capture_directions(self) -> Tuple[Direction, ...]:
        """駒を取るときに使う方向"""
        return self.moves if self.captures is None else self.captures

    def promotes_at(self, position: Position) -> bool:
        """この位置に入ると成るか"""
        return self.promoted is not None and tuple(position) in self.promotion_area

    def to_dict(self) -> dict:
        """辞書形式に変換（API用）"""
        return {
            "name": self.name,
            "player_id": self.player_id,
            "is_main": self.is_main,
            "moves": [d.to_dict() for d in self.moves],
            "captures": [d.to_dict() for d in self.capture_directions],
            "promoted": self.promoted.name if self.promoted else None,
        }


class Piece:
    """盤上の駒（可変）

    取られた駒は登録簿から削除せず active=False にする。
    以前の参照（piece_id）は最後まで有効のまま。
    """

    def __init__(self, piece_id: int, kind: PieceKind, x: int = 0, y: int = 0):
        self.piece_id = piece_id
        self.kind = kind
        self.x = x
        self.y = y
        self.active = True
        # 現在の手番で動かせるか（毎手番再計算される）
        self.movable = False
        self.possible_moves: List = []
        self.possible_captures: List = []
        # このマスで既に成ったか（移動するとリセット）
        self._promoted_here = False

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    @property
    def owner(self) -> int:
        """所有者のプレイヤーID（種類から継承）"""
        return self.kind.player_id

    @property
    def is_main(self) -> bool:
        return self.kind.is_main

    def move_to(self, x: int, y: int) -> 'Piece':
        self.x = x
        self.y = y
        self._promoted_here = False
        return self

    def check_promotion(self) -> bool:
        """
        成り判定。成りエリアにいれば種類を置き換える
        1つのマスで成るのは1段階だけ。次の段階は移動した後に判定する
        返り値: 成ったらTrue
        """
        if self._promoted_here:
            return False
        if self.kind.promotes_at(self.position):
            self.kind = self.kind.promoted
            self._promoted_here = True
            return True
        return False

    def deactivate(self) -> 'Piece':
        """取られた駒として無効化する"""
        self.active = False
        self.clear_actions()
        return self

    def clear_actions(self):
        """手番ごとのキャッシュを消す"""
        self.movable = False
        self.possible_moves = []
        self.possible_captures = []

    def __str__(self):
        return f"{self.kind.name}@{self.position}"

    def __repr__(self):
        return (
            f"Piece(id={self.piece_id}, kind={self.kind.name}, "
            f"owner={self.owner}, pos={self.position}, active={self.active})"
        )

    def to_dict(self) -> dict:
        """駒を辞書形式に変換（API用）"""
        return {
            "id": self.piece_id,
            "kind": self.kind.name,
            "owner": self.owner,
            "x": self.x,
            "y": self.y,
            "active": self.active,
            "movable": self.movable,
            "is_main": self.is_main,
        }
