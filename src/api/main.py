"""
ルールエンジンの FastAPI サーバ
ゲームの状態管理と合法手・手の適用のエンドポイントを提供
"""

import logging
import uuid
from typing import Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..engine import Game, GameEvent, IllegalActionError, InvalidConfigurationError
from ..engine.initial_setup import classic_checkers_options, classic_chess_options
from .schemas import MoveRequest, MoveResponse, NewGameRequest, NewGameResponse

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Board Rules API",
    description="チェッカー型・チェス型ゲームのルールエンジンAPI",
    version="1.0.0"
)

# CORS設定（フロントエンドからのアクセスを許可）
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GameSession:
    """
    APIで管理するゲーム1つ分
    HTTPはリクエスト/レスポンスなので、表示用の遅延は使わず即時に進める。
    受け取った通知は notifications に貯めてクライアントに返す
    """

    def __init__(self, game_id: str, game: Game):
        self.game_id = game_id
        self.game = game
        self.notifications: List[dict] = []
        game.on(GameEvent.GAME_WIN, self._on_game_win)
        game.on(GameEvent.STALEMATE, self._on_stalemate)

    def _on_game_win(self, winners):
        self.notifications.append({
            "event": GameEvent.GAME_WIN.value,
            "players": [player.id for player in winners],
        })

    def _on_stalemate(self, player):
        self.notifications.append({
            "event": GameEvent.STALEMATE.value,
            "player": player.id,
        })

    def legal_moves(self) -> List[dict]:
        return [
            move.to_dict()
            for piece in self.game.selectable_pieces()
            for move in self.game.legal_actions_for(piece.piece_id)
        ]

    def to_dict(self) -> dict:
        """ゲーム状態を辞書形式に変換"""
        state = self.game.to_dict()
        state["game_id"] = self.game_id
        state["players"] = [player.to_dict() for player in self.game.players]
        state["notifications"] = list(self.notifications)
        return state


# ゲームの状態を保持する辞書
games: Dict[str, GameSession] = {}


def _get_session(game_id: str) -> GameSession:
    if game_id not in games:
        raise HTTPException(status_code=404, detail="ゲームが見つかりません")
    return games[game_id]


# エンドポイント

@app.get("/api")
async def root():
    """APIルート"""
    return {
        "message": "Board Rules API",
        "version": "1.0.0",
        "endpoints": [
            "/new_game",
            "/apply_move/{game_id}",
            "/get_legal_moves/{game_id}",
            "/get_game/{game_id}",
            "/delete_game/{game_id}",
        ]
    }


@app.post("/new_game", response_model=NewGameResponse)
async def new_game(request: NewGameRequest = NewGameRequest()):
    """
    新しいゲームを開始する
    variant: checkers（10x10）、chess（8x8）、custom（config で盤面・駒・ルールを指定）
    """
    try:
        if request.variant == 'chess':
            options = classic_chess_options(step_delay=0, event_delay=0)
        elif request.variant == 'custom':
            if request.config is None:
                raise HTTPException(status_code=400, detail="custom には config が必要です")
            options = request.config.to_options()
        else:
            options = classic_checkers_options(step_delay=0, event_delay=0)
        game = Game(options)
    except InvalidConfigurationError as e:
        logger.warning("invalid configuration: %s", e)
        raise HTTPException(status_code=400, detail=e.to_dict())

    game_id = str(uuid.uuid4())
    session = GameSession(game_id, game)
    games[game_id] = session
    game.start()
    logger.info("new game %s (%s)", game_id, request.variant)

    return NewGameResponse(
        game_id=game_id,
        message="新しいゲームを開始しました",
        game_state=session.to_dict()
    )


@app.get("/get_game/{game_id}")
async def get_game(game_id: str):
    """ゲームの状態を取得"""
    return _get_session(game_id).to_dict()


@app.post("/apply_move/{game_id}", response_model=MoveResponse)
async def apply_move(game_id: str, move_request: MoveRequest):
    """
    手を適用する
    """
    session = _get_session(game_id)

    if session.game.is_over:
        raise HTTPException(status_code=400, detail="ゲームは既に終了しています")

    try:
        move = session.game.select_and_apply(
            move_request.piece_id, (move_request.to_x, move_request.to_y)
        )
    except IllegalActionError as e:
        logger.warning("illegal action in %s: %s", game_id, e)
        raise HTTPException(status_code=400, detail=e.to_dict())

    legal_moves = None if session.game.is_over else session.legal_moves()

    return MoveResponse(
        success=True,
        message="手を適用しました",
        game_state=session.to_dict(),
        move=move.to_dict(),
        legal_moves=legal_moves
    )


@app.get("/get_legal_moves/{game_id}")
async def get_legal_moves(game_id: str):
    """現在のプレイヤーの合法手を取得"""
    session = _get_session(game_id)

    if session.game.is_over:
        return {"legal_moves": [], "message": "ゲームは終了しています"}

    legal_moves = session.legal_moves()
    current = session.game.current_player()

    return {
        "legal_moves": legal_moves,
        "count": len(legal_moves),
        "current_player": current.id if current else None,
        "phase": session.game.phase.name,
    }


@app.delete("/delete_game/{game_id}")
async def delete_game(game_id: str):
    """ゲームを削除"""
    _get_session(game_id)
    del games[game_id]
    return {"message": "ゲームを削除しました"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
