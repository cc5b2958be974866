"""
通知（オブザーバ）と遅延実行（スケジューラ）のモジュール

手番の受け渡しと結果通知は表示の間合いのために遅延させて実行する。
遅延は正しさには関係しないので、テストでは即時実行のスケジューラを使い、
本番では実タイマー（asyncio）を注入する。
"""

import asyncio
import heapq
import itertools
import logging
from collections import defaultdict, deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Action = Callable[[], None]


class GameEvent(Enum):
    """ゲームから通知されるイベント"""
    GAME_WIN = 'game_win'
    STALEMATE = 'stalemate'


class Scheduler:
    """遅延実行の抽象

    after(delay, action) で登録したアクションは、いずれちょうど1回実行される。
    同じ遅延で登録したもの同士は登録順に実行される。
    """

    def after(self, delay: float, action: Action):
        raise NotImplementedError


class ImmediateScheduler(Scheduler):
    """遅延を無視してその場で実行する"""

    def after(self, delay: float, action: Action):
        action()


class ManualScheduler(Scheduler):
    """
    登録されたアクションを貯めておき、run_pending() で実行する
    実行順は（遅延, 登録順）。実行中に登録されたアクションも同じ呼び出しで処理する
    """

    def __init__(self):
        self._queue: List[Tuple[float, int, Action]] = []
        self._counter = itertools.count()
        self._now = 0.0

    def after(self, delay: float, action: Action):
        heapq.heappush(self._queue, (self._now + delay, next(self._counter), action))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_next(self) -> bool:
        """一番早いアクションを1つ実行する。実行したらTrue"""
        if not self._queue:
            return False
        due, _, action = heapq.heappop(self._queue)
        self._now = max(self._now, due)
        action()
        return True

    def run_pending(self) -> int:
        """キューが空になるまで実行し、実行した数を返す"""
        count = 0
        while self.run_next():
            count += 1
        return count


class AsyncioScheduler(Scheduler):
    """
    asyncio のイベントループ上のタイマーで実行する
    同じ遅延のアクションはFIFOキューで順番を保証する
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._queues: Dict[float, Deque[Action]] = defaultdict(deque)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def after(self, delay: float, action: Action):
        self._queues[delay].append(action)
        self.loop.call_later(delay, self._run_next, delay)

    def _run_next(self, delay: float):
        queue = self._queues[delay]
        if queue:
            queue.popleft()()


class EventEmitter:
    """
    ゲームインスタンスごとの購読者リスト
    購読はゲームインスタンスが生きている間だけ有効
    """

    def __init__(self, scheduler: Scheduler, delay: float = 0.0):
        self.scheduler = scheduler
        self.delay = delay
        self._listeners: Dict[GameEvent, List[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event: GameEvent, listener: Callable[[Any], None]) -> 'EventEmitter':
        self._listeners[GameEvent(event)].append(listener)
        return self

    def unsubscribe(self, event: GameEvent, listener: Callable[[Any], None]):
        listeners = self._listeners[GameEvent(event)]
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: GameEvent, payload: Any = None):
        """購読者ごとに遅延付きで通知を登録する"""
        logger.debug("emit %s: %s", event.value, payload)
        for listener in list(self._listeners[event]):
            self.scheduler.after(self.delay, lambda listener=listener: listener(payload))
