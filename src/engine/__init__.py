"""
二種類の盤上ゲーム（チェッカー型・チェス型）のルールエンジン - パッケージ初期化
"""

from .piece import Piece, PieceKind, Direction, Position, DIAGONALS, ORTHOGONALS, KNIGHT_JUMPS, directions
from .board import Board, Cell, CellType
from .move import Move, MoveType
from .rules import Rules, VariantRules, CaptureGeometry, AliveTest, CHECKERS_RULES, CHESS_RULES
from .events import (
    GameEvent, Scheduler, ImmediateScheduler, ManualScheduler, AsyncioScheduler, EventEmitter
)
from .game import Game, GameOptions, Player, TurnPhase, create_game
from .errors import (
    GameError, IllegalActionError, InvalidConfigurationError, InvalidStateError, GameStateError
)

__all__ = [
    'Piece',
    'PieceKind',
    'Direction',
    'Position',
    'DIAGONALS',
    'ORTHOGONALS',
    'KNIGHT_JUMPS',
    'directions',
    'Board',
    'Cell',
    'CellType',
    'Move',
    'MoveType',
    'Rules',
    'VariantRules',
    'CaptureGeometry',
    'AliveTest',
    'CHECKERS_RULES',
    'CHESS_RULES',
    'GameEvent',
    'Scheduler',
    'ImmediateScheduler',
    'ManualScheduler',
    'AsyncioScheduler',
    'EventEmitter',
    'Game',
    'GameOptions',
    'Player',
    'TurnPhase',
    'create_game',
    'GameError',
    'IllegalActionError',
    'InvalidConfigurationError',
    'InvalidStateError',
    'GameStateError',
]
