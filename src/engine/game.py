"""
ゲーム全体（手番の状態機械）を管理するモジュール

駒の登録簿と手番はこのクラスだけが変更する。
変更はすべて select_and_apply を経由し、同時に進行する遷移は常に1つまで。
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .board import Board
from .errors import GameStateError, IllegalActionError, InvalidConfigurationError
from .events import EventEmitter, GameEvent, ImmediateScheduler, Scheduler
from .move import Move
from .piece import Piece, PieceKind, Position
from .rules import CHECKERS_RULES, Rules, VariantRules

logger = logging.getLogger(__name__)


class TurnPhase(Enum):
    """手番の状態"""
    NOT_STARTED = auto()         # start() 前
    AWAITING_PLAYER = auto()     # 手番の受け渡し待ち（遅延中）
    AWAITING_SELECTION = auto()  # 合法手を計算済み、プレイヤーの選択待ち
    CAPTURE_CHAIN = auto()       # 連続取りの途中。同じ駒で取り続ける
    ROUND_END = auto()           # 勝敗（または手詰まり）が決まった
    FINISHED = auto()            # 終了


@dataclass
class Player:
    """プレイヤー

    start_layout: [(x, y, 駒の種類名), ...]
    catalog: {駒の種類名: PieceKind}
    """
    id: int
    start_layout: List[Tuple[int, int, str]]
    catalog: Dict[str, PieceKind]
    name: str = ''

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass
class GameOptions:
    """ゲームの設定"""
    width: int
    height: int
    first_player_id: int
    players: List[Player]
    rules: VariantRules = CHECKERS_RULES
    step_delay: float = 0.0   # 手番の受け渡しまでの遅延（秒）
    event_delay: float = 0.0  # 通知までの遅延（秒）


def validate_options(options: GameOptions):
    """
    設定を検証する。不正なら InvalidConfigurationError
    """
    if options.width < 1 or options.height < 1:
        raise InvalidConfigurationError(
            "盤面のサイズが不正です",
            context={"width": options.width, "height": options.height}
        )
    if not options.players:
        raise InvalidConfigurationError("プレイヤーがいません")

    player_ids = [player.id for player in options.players]
    if len(set(player_ids)) != len(player_ids):
        raise InvalidConfigurationError(
            "プレイヤーIDが重複しています", context={"player_ids": player_ids}
        )
    if options.first_player_id not in player_ids:
        raise InvalidConfigurationError(
            "先手のプレイヤーIDが存在しません",
            context={"first_player_id": options.first_player_id}
        )

    occupied: Dict[Position, int] = {}
    for player in options.players:
        for kind_name, kind in player.catalog.items():
            stage: Optional[PieceKind] = kind
            while stage is not None:
                if stage.player_id != player.id:
                    raise InvalidConfigurationError(
                        "駒の種類の所有者がプレイヤーと一致しません",
                        context={"player": player.id, "kind": kind_name}
                    )
                stage = stage.promoted

        for entry in player.start_layout:
            if len(entry) != 3:
                raise InvalidConfigurationError(
                    "初期配置は (x, y, 駒の種類名) で指定してください",
                    context={"player": player.id, "entry": entry}
                )
            x, y, kind_name = entry
            if kind_name not in player.catalog:
                raise InvalidConfigurationError(
                    "初期配置に未知の駒の種類があります",
                    context={"player": player.id, "kind": kind_name}
                )
            if not (0 <= x < options.width and 0 <= y < options.height):
                raise InvalidConfigurationError(
                    "初期配置が盤外です",
                    context={"player": player.id, "position": (x, y)}
                )
            if (x, y) in occupied:
                raise InvalidConfigurationError(
                    "初期配置の座標が重複しています",
                    context={"position": (x, y), "players": (occupied[(x, y)], player.id)}
                )
            occupied[(x, y)] = player.id


class Game:
    """ゲームの状態を管理するクラス"""

    def __init__(self, options: GameOptions, scheduler: Optional[Scheduler] = None):
        validate_options(options)
        self.options = options
        self.rules = options.rules
        self.players: List[Player] = list(options.players)
        self.board = Board(options.width, options.height)
        self.scheduler = scheduler or ImmediateScheduler()
        self.events = EventEmitter(self.scheduler, options.event_delay)

        self._first_index = [p.id for p in self.players].index(options.first_player_id)
        self._in_transition = False
        self._queued_events: List[Tuple[GameEvent, object]] = []
        # reset/finish のたびに増やし、古い手番の受け渡しを無効にする
        self._generation = 0

        self.phase = TurnPhase.NOT_STARTED
        self.steps_count = 0
        self.chain_piece: Optional[Piece] = None
        self.outcome: Optional[GameEvent] = None
        self._current_index: Optional[int] = None
        self._contenders: List[int] = []
        self._build_pieces()

    # ------------------------------------------------------------------
    # 購読
    # ------------------------------------------------------------------

    def on(self, event: GameEvent, listener: Callable) -> 'Game':
        """
        通知を購読する
        game_win: 勝負に残ったプレイヤーのリストを受け取る
        stalemate: 手詰まりになったプレイヤーを受け取る
        """
        self.events.subscribe(event, listener)
        return self

    # ------------------------------------------------------------------
    # ライフサイクル
    # ------------------------------------------------------------------

    @contextmanager
    def _transition(self):
        """遷移は同時に1つまで。遷移中の呼び出し（通知ハンドラからの再入など）は拒否する"""
        if self._in_transition:
            raise GameStateError(
                "遷移の途中で呼び出されました", context={"phase": self.phase.name}
            )
        self._in_transition = True
        try:
            yield
        finally:
            self._in_transition = False
            # 遷移中に出た通知は遷移が終わってから送る。ハンドラはエンジンを呼び戻してよい
            queued, self._queued_events = self._queued_events, []
            for event, payload in queued:
                self.events.emit(event, payload)

    def _notify(self, event: GameEvent, payload):
        if self._in_transition:
            self._queued_events.append((event, payload))
        else:
            self.events.emit(event, payload)

    def reset(self) -> 'Game':
        """初期配置から駒を作り直し、カウンタを消す"""
        with self._transition():
            self._build_pieces()
        return self

    def _build_pieces(self):
        self._generation += 1
        self.board.clear()
        piece_id = 0
        for player in self.players:
            for x, y, kind_name in player.start_layout:
                self.board.add_piece(Piece(piece_id, player.catalog[kind_name], x, y))
                piece_id += 1
        self.board.assert_consistent()

        self.phase = TurnPhase.NOT_STARTED
        self.steps_count = 0
        self.chain_piece = None
        self.outcome = None
        self._current_index = None
        self._contenders = [player.id for player in self.players]
        logger.debug("reset: %d pieces, %d players", len(self.board.pieces), len(self.players))

    def start(self) -> 'Game':
        """手番の進行を始める"""
        with self._transition():
            if self.phase != TurnPhase.NOT_STARTED:
                raise GameStateError(
                    "ゲームは既に開始しています", context={"phase": self.phase.name}
                )
            self._next_step()
        return self

    def finish(self) -> 'Game':
        """ゲームを終了する。以後の手番の受け渡しは行われない"""
        with self._transition():
            self._generation += 1
            self._reset_figures()
            self.chain_piece = None
            self.phase = TurnPhase.FINISHED
        return self

    # ------------------------------------------------------------------
    # 手番の進行
    # ------------------------------------------------------------------

    def _reset_figures(self):
        for piece in self.board.pieces:
            piece.clear_actions()

    def _next_step(self):
        """勝敗を確認し、決まっていなければ次のプレイヤーに手番を渡す"""
        self._reset_figures()
        self.chain_piece = None
        if self._check_win():
            return

        index = (self.steps_count + self._first_index) % len(self.players)
        player = self.players[index]
        self._current_index = index
        self.phase = TurnPhase.AWAITING_PLAYER
        self.steps_count += 1

        generation = self._generation
        logger.debug("step %d: player %s", self.steps_count, player.id)
        self.scheduler.after(
            self.options.step_delay,
            lambda: self._begin_turn(generation, player)
        )

    def _begin_turn(self, generation: int, player: Player):
        """遅延後に呼ばれる手番の開始。reset/finish 後の古い呼び出しは捨てる"""
        if generation != self._generation or self.phase != TurnPhase.AWAITING_PLAYER:
            return
        if self._in_transition:
            self._player_step(player)
        else:
            with self._transition():
                self._player_step(player)

    def _player_step(self, player: Player):
        """手番のプレイヤーの全駒について合法手を計算する"""
        pieces = self.board.player_pieces(player.id)
        geometry = self.rules.capture_geometry

        can_move = False
        can_capture = False
        for piece in pieces:
            piece.possible_moves = Rules.get_legal_moves(self.board, piece)
            piece.possible_captures = Rules.get_legal_captures(
                self.board, piece, player.id, geometry
            )
            can_move = can_move or bool(piece.possible_moves)
            can_capture = can_capture or bool(piece.possible_captures)
            piece.movable = bool(piece.possible_moves or piece.possible_captures)

        if not can_move and not can_capture:
            self.phase = TurnPhase.ROUND_END
            self.outcome = GameEvent.STALEMATE
            logger.info("stalemate: player %s has no legal action", player.id)
            self._notify(GameEvent.STALEMATE, player)
            return

        if self.rules.mandatory_capture and can_capture:
            # 取れる駒があるなら取る手しか選べない
            for piece in pieces:
                piece.possible_moves = []
                if not piece.possible_captures:
                    piece.movable = False

        self.phase = TurnPhase.AWAITING_SELECTION

    def _check_win(self) -> bool:
        """
        勝負に残っているプレイヤーを再計算する
        減っていれば game_win を通知する。
        返り値: 全員ではなくなっていればTrue（勝敗が決まった）
        """
        alive = Rules.contending_players(self.board, self._contenders, self.rules.alive_test)
        if len(alive) < len(self._contenders):
            # 前回の集合との共通部分なので単調に減る
            self._contenders = alive
            self.phase = TurnPhase.ROUND_END
            self.outcome = GameEvent.GAME_WIN
            self._reset_figures()
            self.chain_piece = None
            logger.info("game_win: remaining players %s", alive)
            self._notify(GameEvent.GAME_WIN, self.contending_players())
        return len(self._contenders) < len(self.players)

    # ------------------------------------------------------------------
    # 手の適用
    # ------------------------------------------------------------------

    def select_and_apply(self, piece_id: int, destination: Sequence[int]) -> Move:
        """
        駒を選んで移動先に動かす
        移動先がその駒の合法な取る手なら取る手、移動手なら移動として適用する
        返り値: 適用した手
        """
        with self._transition():
            piece, move = self._find_action(piece_id, tuple(destination))
            if move.is_capture:
                self._apply_capture(piece, move)
            else:
                self._apply_move(piece, move)
            return move

    def _find_action(self, piece_id: int, destination: Position) -> Tuple[Piece, Move]:
        """選択を検証する。不正なら状態を変えずに IllegalActionError"""
        if self.phase not in (TurnPhase.AWAITING_SELECTION, TurnPhase.CAPTURE_CHAIN):
            raise IllegalActionError(
                "現在は駒を選択できません", context={"phase": self.phase.name}
            )

        piece = self.board.get_piece(piece_id)
        if piece is None or not piece.active or not piece.movable:
            raise IllegalActionError(
                "選択できない駒です", context={"piece_id": piece_id}
            )
        current = self.current_player()
        if current is None or piece.owner != current.id:
            raise IllegalActionError(
                "手番のプレイヤーの駒ではありません", context={"piece_id": piece_id}
            )
        if self.phase == TurnPhase.CAPTURE_CHAIN and piece is not self.chain_piece:
            raise IllegalActionError(
                "連続取りの途中です。同じ駒で取り続けてください",
                context={"piece_id": piece_id, "chain_piece": self.chain_piece.piece_id}
            )

        for move in piece.possible_captures + piece.possible_moves:
            if move.to_pos == destination:
                return piece, move

        raise IllegalActionError(
            "合法手にない移動先です",
            context={"piece_id": piece_id, "destination": destination}
        )

    def _apply_move(self, piece: Piece, move: Move):
        """駒を取らない移動"""
        piece.move_to(*move.to_pos)
        if piece.check_promotion():
            logger.debug("promotion: piece %d -> %s", piece.piece_id, piece.kind.name)
        self.board.assert_consistent()
        logger.debug("move: %s", move)
        self._next_step()

    def _apply_capture(self, piece: Piece, move: Move):
        """
        駒を取る
        取った駒がさらに取れるなら、手番を渡さずに連続取りを続ける
        """
        captured = self.board.get_piece(move.captured_id)
        captured.deactivate()
        piece.move_to(*move.to_pos)
        if piece.check_promotion():
            logger.debug("promotion: piece %d -> %s", piece.piece_id, piece.kind.name)
        self.board.assert_consistent()
        logger.debug("capture: %s", move)

        if self._check_win():
            return

        if self.rules.chain_captures:
            captures = Rules.get_legal_captures(
                self.board, piece, piece.owner, self.rules.capture_geometry
            )
            if captures:
                self._enter_capture_chain(piece, captures)
                return

        self._next_step()

    def _enter_capture_chain(self, piece: Piece, captures: List[Move]):
        self._reset_figures()
        piece.possible_captures = captures
        if self.rules.mandatory_capture:
            piece.possible_moves = []
        else:
            # 強制でなければ、その場に留まって連続取りを終えることもできる
            piece.possible_moves = [
                Move.create_normal_move(piece.piece_id, piece.position, piece.position, piece.owner)
            ]
        piece.movable = True
        self.chain_piece = piece
        self.phase = TurnPhase.CAPTURE_CHAIN
        logger.debug("capture chain: piece %d continues", piece.piece_id)

    # ------------------------------------------------------------------
    # 問い合わせ（副作用なし）
    # ------------------------------------------------------------------

    def legal_actions_for(self, piece_id: int) -> List[Move]:
        """駒の現在の合法手（取る手が先）。選択できない駒なら空リスト"""
        piece = self.board.get_piece(piece_id)
        if piece is None:
            raise IllegalActionError("存在しない駒です", context={"piece_id": piece_id})
        if not piece.active or not piece.movable:
            return []
        return list(piece.possible_captures) + list(piece.possible_moves)

    def current_player(self) -> Optional[Player]:
        if self._current_index is None:
            return None
        return self.players[self._current_index]

    def active_pieces(self) -> List[Piece]:
        return self.board.active_pieces()

    def selectable_pieces(self) -> List[Piece]:
        """今選択できる駒"""
        return [piece for piece in self.board.active_pieces() if piece.movable]

    def contending_players(self) -> List[Player]:
        """勝負に残っているプレイヤー"""
        return [player for player in self.players if player.id in self._contenders]

    @property
    def is_over(self) -> bool:
        return self.phase in (TurnPhase.ROUND_END, TurnPhase.FINISHED)

    def to_dict(self) -> dict:
        """ゲーム状態を辞書形式に変換"""
        current = self.current_player()
        return {
            "board": self.board.to_dict(),
            "phase": self.phase.name,
            "current_player": current.id if current else None,
            "steps_count": self.steps_count,
            "contending_players": [player.id for player in self.contending_players()],
            "chain_piece": self.chain_piece.piece_id if self.chain_piece else None,
            "outcome": self.outcome.value if self.outcome else None,
            "rules": self.rules.to_dict(),
        }

    def __str__(self):
        return str(self.board)


def create_game(
    width: int,
    height: int,
    first_player_id: int,
    players: List[Player],
    rules: VariantRules = CHECKERS_RULES,
    scheduler: Optional[Scheduler] = None,
    step_delay: float = 0.0,
    event_delay: float = 0.0
) -> Game:
    """ゲームを作成する（初期配置から駒を並べた状態で返す）"""
    options = GameOptions(
        width=width,
        height=height,
        first_player_id=first_player_id,
        players=players,
        rules=rules,
        step_delay=step_delay,
        event_delay=event_delay
    )
    return Game(options, scheduler)
