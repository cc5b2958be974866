"""
駒カタログと初期盤面のプリセット
"""

from typing import Dict, List, Tuple

from .game import GameOptions, Player
from .piece import DIAGONALS, KNIGHT_JUMPS, ORTHOGONALS, PieceKind, directions
from .rules import CHECKERS_RULES, CHESS_RULES

CHECKERS_BOARD_SIZE = 10
CHESS_BOARD_SIZE = 8

# 元の表示用の遅延（秒）
DEFAULT_STEP_DELAY = 0.1
DEFAULT_EVENT_DELAY = 0.4

Layout = List[Tuple[int, int, str]]


def build_checkers_catalog(
    player_id: int,
    forward: int,
    width: int = CHECKERS_BOARD_SIZE,
    height: int = CHECKERS_BOARD_SIZE
) -> Dict[str, PieceKind]:
    """
    チェッカー型の駒カタログ
    forward: 前方向のy（上から下へ進むなら1、下から上なら-1）

    man: 斜め前に1マス移動、4方向の斜めで取る。相手側の端の列で king に成る
    king: 4方向の斜めに制限なく滑る
    """
    king = PieceKind(
        name='king',
        player_id=player_id,
        moves=directions(DIAGONALS, max(width, height) - 1),
    )
    promotion_row = height - 1 if forward > 0 else 0
    man = PieceKind(
        name='man',
        player_id=player_id,
        moves=directions(((-1, forward), (1, forward))),
        captures=directions(DIAGONALS),
        promotion_area=frozenset((x, promotion_row) for x in range(width)),
        promoted=king,
    )
    return {'man': man, 'king': king}


def build_chess_catalog(
    player_id: int,
    forward: int,
    width: int = CHESS_BOARD_SIZE,
    height: int = CHESS_BOARD_SIZE
) -> Dict[str, PieceKind]:
    """
    チェス型の駒カタログ
    king が main の駒。pawn は前に1マス進み、斜め前で取り、端の列で queen に成る
    """
    reach = max(width, height) - 1
    queen = PieceKind(
        name='queen',
        player_id=player_id,
        moves=directions(ORTHOGONALS + DIAGONALS, reach),
    )
    promotion_row = height - 1 if forward > 0 else 0
    return {
        'king': PieceKind(
            name='king',
            player_id=player_id,
            moves=directions(ORTHOGONALS + DIAGONALS),
            is_main=True,
        ),
        'queen': queen,
        'rook': PieceKind(
            name='rook',
            player_id=player_id,
            moves=directions(ORTHOGONALS, reach),
        ),
        'bishop': PieceKind(
            name='bishop',
            player_id=player_id,
            moves=directions(DIAGONALS, reach),
        ),
        'knight': PieceKind(
            name='knight',
            player_id=player_id,
            moves=directions(KNIGHT_JUMPS),
        ),
        'pawn': PieceKind(
            name='pawn',
            player_id=player_id,
            moves=directions(((0, forward),)),
            captures=directions(((-1, forward), (1, forward))),
            promotion_area=frozenset((x, promotion_row) for x in range(width)),
            promoted=queen,
        ),
    }


def make_checkers_player(
    player_id: int,
    layout: Layout,
    forward: int,
    name: str = '',
    width: int = CHECKERS_BOARD_SIZE,
    height: int = CHECKERS_BOARD_SIZE
) -> Player:
    return Player(
        id=player_id,
        start_layout=list(layout),
        catalog=build_checkers_catalog(player_id, forward, width, height),
        name=name,
    )


def make_chess_player(
    player_id: int,
    layout: Layout,
    forward: int,
    name: str = '',
    width: int = CHESS_BOARD_SIZE,
    height: int = CHESS_BOARD_SIZE
) -> Player:
    return Player(
        id=player_id,
        start_layout=list(layout),
        catalog=build_chess_catalog(player_id, forward, width, height),
        name=name,
    )


def checkers_start_layout(rows: range, width: int = CHECKERS_BOARD_SIZE) -> Layout:
    """
    黒マス（x + y が奇数）に man を並べる
    rows: 駒を並べる行
    """
    return [
        (x, y, 'man')
        for y in rows
        for x in range(width)
        if (x + y) % 2 == 1
    ]


def classic_checkers_options(
    step_delay: float = DEFAULT_STEP_DELAY,
    event_delay: float = DEFAULT_EVENT_DELAY
) -> GameOptions:
    """
    10x10 のチェッカー
    黒（ID 0）は上の4列から下へ、白（ID 1）は下の4列から上へ進む。白が先手
    """
    size = CHECKERS_BOARD_SIZE
    black = make_checkers_player(0, checkers_start_layout(range(0, 4)), forward=1, name='黒')
    white = make_checkers_player(1, checkers_start_layout(range(size - 4, size)), forward=-1, name='白')
    return GameOptions(
        width=size,
        height=size,
        first_player_id=1,
        players=[black, white],
        rules=CHECKERS_RULES,
        step_delay=step_delay,
        event_delay=event_delay,
    )


BACK_RANK = ('rook', 'knight', 'bishop', 'queen', 'king', 'bishop', 'knight', 'rook')


def chess_start_layout(back_row: int, pawn_row: int) -> Layout:
    layout = [(x, back_row, kind) for x, kind in enumerate(BACK_RANK)]
    layout += [(x, pawn_row, 'pawn') for x in range(CHESS_BOARD_SIZE)]
    return layout


def classic_chess_options(
    step_delay: float = DEFAULT_STEP_DELAY,
    event_delay: float = DEFAULT_EVENT_DELAY
) -> GameOptions:
    """
    8x8 のチェス型
    白（ID 0）は下の2列から上へ、黒（ID 1）は上の2列から下へ進む。白が先手
    """
    size = CHESS_BOARD_SIZE
    white = make_chess_player(0, chess_start_layout(size - 1, size - 2), forward=-1, name='白')
    black = make_chess_player(1, chess_start_layout(0, 1), forward=1, name='黒')
    return GameOptions(
        width=size,
        height=size,
        first_player_id=0,
        players=[white, black],
        rules=CHESS_RULES,
        step_delay=step_delay,
        event_delay=event_delay,
    )
