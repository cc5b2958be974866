"""
pytest共通設定とフィクスチャ
"""

import pytest
import sys
from pathlib import Path

# プロジェクトルートをパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def checkers_game():
    """10x10 のチェッカー初期配置（開始前）を提供するフィクスチャ"""
    from src.engine import Game
    from src.engine.initial_setup import classic_checkers_options
    return Game(classic_checkers_options(step_delay=0, event_delay=0))


@pytest.fixture
def chess_game():
    """8x8 のチェス初期配置（開始前）を提供するフィクスチャ"""
    from src.engine import Game
    from src.engine.initial_setup import classic_chess_options
    return Game(classic_chess_options(step_delay=0, event_delay=0))


@pytest.fixture
def make_checkers():
    """
    任意の配置でチェッカー型のゲームを作るフィクスチャ
    黒（ID 0）は下へ、白（ID 1）は上へ進む
    """
    from src.engine import create_game, CHECKERS_RULES
    from src.engine.initial_setup import make_checkers_player

    def _make(black, white, first_player_id=0, size=10, rules=CHECKERS_RULES, scheduler=None):
        players = [
            make_checkers_player(0, [(x, y, kind) for x, y, kind in black], forward=1,
                                 width=size, height=size),
            make_checkers_player(1, [(x, y, kind) for x, y, kind in white], forward=-1,
                                 width=size, height=size),
        ]
        return create_game(size, size, first_player_id, players, rules, scheduler=scheduler)

    return _make


@pytest.fixture
def make_chess():
    """
    任意の配置でチェス型のゲームを作るフィクスチャ
    白（ID 0）は上へ、黒（ID 1）は下へ進む
    """
    from src.engine import create_game, CHESS_RULES
    from src.engine.initial_setup import make_chess_player

    def _make(white, black, first_player_id=0, rules=CHESS_RULES, scheduler=None):
        players = [
            make_chess_player(0, list(white), forward=-1),
            make_chess_player(1, list(black), forward=1),
        ]
        return create_game(8, 8, first_player_id, players, rules, scheduler=scheduler)

    return _make


@pytest.fixture
def recorder():
    """通知を記録するフィクスチャ"""

    class Recorder:
        def __init__(self):
            self.events = []

        def attach(self, game):
            from src.engine import GameEvent
            game.on(GameEvent.GAME_WIN, lambda players: self.events.append(
                ('game_win', [p.id for p in players])))
            game.on(GameEvent.STALEMATE, lambda player: self.events.append(
                ('stalemate', player.id)))
            return game

        def named(self, name):
            return [event for event in self.events if event[0] == name]

    return Recorder()
