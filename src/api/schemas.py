"""
APIのリクエスト/レスポンス用 Pydantic モデル

カスタム盤面の設定はここで構造を検証し、エンジンのデータクラスに変換する。
ルール上の検証（未知の駒名、重複した初期配置など）はエンジン側で行う。
"""

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from ..engine import (
    AliveTest, CaptureGeometry, Direction, GameOptions, InvalidConfigurationError,
    PieceKind, Player, VariantRules
)


class DirectionModel(BaseModel):
    dx: int
    dy: int
    max_steps: int = Field(default=1, ge=1)

    def to_direction(self) -> Direction:
        return Direction(self.dx, self.dy, self.max_steps)


class PieceKindModel(BaseModel):
    moves: List[DirectionModel] = []
    captures: Optional[List[DirectionModel]] = None  # 省略時は moves と同じ
    is_main: bool = False
    promotion_area: List[Tuple[int, int]] = []
    promoted: Optional[str] = None  # 同じカタログ内の駒の種類名

    def to_kind(self, name: str, player_id: int, catalog: Dict[str, PieceKind]) -> PieceKind:
        return PieceKind(
            name=name,
            player_id=player_id,
            moves=tuple(d.to_direction() for d in self.moves),
            captures=(
                tuple(d.to_direction() for d in self.captures)
                if self.captures is not None else None
            ),
            is_main=self.is_main,
            promotion_area=frozenset(self.promotion_area),
            promoted=catalog.get(self.promoted) if self.promoted else None,
        )


class PlayerModel(BaseModel):
    id: int
    name: str = ''
    start_layout: List[Tuple[int, int, str]]
    catalog: Dict[str, PieceKindModel]

    def to_player(self) -> Player:
        """
        カタログを Player に変換する
        promoted で参照される駒を先に作る必要があるので、参照先から順に変換する
        """
        catalog: Dict[str, PieceKind] = {}
        pending = dict(self.catalog)
        while pending:
            ready = [
                name for name, kind in pending.items()
                if kind.promoted is None or kind.promoted in catalog
            ]
            if not ready:
                # 存在しない駒名か循環参照
                raise InvalidConfigurationError(
                    "promoted の参照を解決できません",
                    context={"player": self.id, "kinds": sorted(pending)}
                )
            for name in ready:
                catalog[name] = pending.pop(name).to_kind(name, self.id, catalog)

        return Player(
            id=self.id,
            start_layout=[tuple(entry) for entry in self.start_layout],
            catalog=catalog,
            name=self.name,
        )


class RulesModel(BaseModel):
    mandatory_capture: bool = True
    capture_geometry: CaptureGeometry = CaptureGeometry.ADJACENT_LAND
    chain_captures: bool = True
    alive_test: AliveTest = AliveTest.ANY_PIECE

    def to_rules(self) -> VariantRules:
        return VariantRules(
            mandatory_capture=self.mandatory_capture,
            capture_geometry=self.capture_geometry,
            chain_captures=self.chain_captures,
            alive_test=self.alive_test,
        )


class GameConfigModel(BaseModel):
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    first_player_id: int
    players: List[PlayerModel]
    rules: RulesModel = RulesModel()

    def to_options(self) -> GameOptions:
        return GameOptions(
            width=self.width,
            height=self.height,
            first_player_id=self.first_player_id,
            players=[player.to_player() for player in self.players],
            rules=self.rules.to_rules(),
        )


class NewGameRequest(BaseModel):
    variant: Literal['checkers', 'chess', 'custom'] = 'checkers'
    config: Optional[GameConfigModel] = None  # variant='custom' の場合に必要


class NewGameResponse(BaseModel):
    game_id: str
    message: str
    game_state: dict


class MoveRequest(BaseModel):
    piece_id: int
    to_x: int
    to_y: int


class MoveResponse(BaseModel):
    success: bool
    message: str
    game_state: dict
    move: Optional[dict] = None
    legal_moves: Optional[List[dict]] = None
