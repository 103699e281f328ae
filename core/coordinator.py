"""
回合协调器

持有唯一的实时 GameState，按回合归属接收人类输入，
并通过注入的调度器在 "思考延迟" 之后驱动电脑行动。

调度约定:
- Scheduler.schedule 不得同步调用回调
- 每个延迟回调都带有发出时的代数 (generation)，重开 / 回首页后旧回调作废
- 同一方有未执行的后续动作时，该方的输入被拒绝
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Union
import heapq
import itertools
import logging

import numpy as np

from . import policy
from .cards import Card, Suit, make_rng
from .config import GameConfig
from .errors import IllegalStateTransition, InvalidMove
from .rules import RuleEngine
from .state import GameState, Status, Turn

logger = logging.getLogger(__name__)


class TimerHandle:
    """可取消的定时回调"""

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self._callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.done)

    def fire(self):
        """执行回调 (已取消或已执行则忽略)"""
        if not self.active:
            return
        self.done = True
        self._callback()


class Scheduler(ABC):
    """调度器接口"""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """在 delay 秒后执行回调"""


class ManualScheduler(Scheduler):
    """
    手动推进的虚拟时钟调度器

    测试中用 run_all() 跳过所有延迟；终端界面用 next_delay() 得到需要等待的时间
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List = []
        self._counter = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        handle = TimerHandle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    def _discard_inactive(self):
        while self._queue and not self._queue[0][2].active:
            heapq.heappop(self._queue)

    @property
    def pending(self) -> int:
        """未执行的回调数"""
        return sum(1 for _, _, h in self._queue if h.active)

    def next_delay(self) -> Optional[float]:
        """距下一个回调的时间，无回调时为 None"""
        self._discard_inactive()
        if not self._queue:
            return None
        return max(0.0, self._queue[0][0] - self.now)

    def run_next(self) -> bool:
        """执行最早的回调，时钟推进到其到期时间"""
        self._discard_inactive()
        if not self._queue:
            return False
        due, _, handle = heapq.heappop(self._queue)
        self.now = max(self.now, due)
        handle.fire()
        return True

    def advance(self, seconds: float) -> int:
        """推进时钟并执行期间到期的回调，返回执行数"""
        target = self.now + seconds
        fired = 0
        while True:
            self._discard_inactive()
            if not self._queue or self._queue[0][0] > target:
                break
            self.run_next()
            fired += 1
        self.now = target
        return fired

    def run_all(self, max_callbacks: int = 10000) -> int:
        """执行所有回调 (包括执行中新加入的)"""
        fired = 0
        while fired < max_callbacks and self.run_next():
            fired += 1
        return fired


class TurnCoordinator:
    """
    回合协调器

    人类通过 play_card / select_suit / draw 行动；
    电脑在轮到它时由调度器延迟驱动，每次只执行一个动作
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[np.random.Generator] = None,
        on_update: Optional[Callable[[GameState], None]] = None,
    ):
        """
        Args:
            scheduler: 调度器 (默认 ManualScheduler)
            config: 延迟等配置
            rng: 洗牌随机源 (默认按 config.seed 创建)
            on_update: 每次状态变化后的通知 (显示 last_action 等)
        """
        self.scheduler = scheduler or ManualScheduler()
        self.config = config or GameConfig()
        self._rng = rng if rng is not None else make_rng(self.config.seed)
        self._on_update = on_update
        self._state = GameState.home()
        self._generation = 0
        self._pending: Dict[Turn, TimerHandle] = {}

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def is_pending(self, actor: Union[Turn, str]) -> bool:
        """该方是否有未执行的后续动作"""
        return Turn.parse(actor) in self._pending

    @property
    def awaiting_player(self) -> bool:
        """是否在等待人类输入"""
        return (
            self._state.status in (Status.PLAYING, Status.SUIT_SELECTION)
            and self._state.current_turn is Turn.PLAYER
            and Turn.PLAYER not in self._pending
        )

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """从首页开始新游戏"""
        if self._state.status != Status.HOME:
            logger.debug("start() ignored in status %s", self._state.status.value)
            return False
        self._deal()
        return True

    def restart(self):
        """丢弃当前对局 (包括未执行的延迟动作) 并重新发牌"""
        self._deal()

    def go_home(self):
        """回到首页"""
        self._reset()
        self._commit(GameState.home())
        logger.info("Returned to home screen")

    def _reset(self):
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
        self._generation += 1

    def _deal(self):
        self._reset()
        self._commit(GameState.waiting())
        self._commit(GameState.initial(rng=self._rng))
        logger.info("Game %d started", self._generation)

    # ------------------------------------------------------------------
    # 人类输入
    # ------------------------------------------------------------------

    def _check_player_input(self, action: str) -> bool:
        if Turn.PLAYER in self._pending:
            logger.debug("Rejected %s: player follow-up pending", action)
            return False
        return True

    def play_card(self, card: Card) -> bool:
        """人类出牌，返回是否被接受"""
        if not self._check_player_input(f"play {card}"):
            return False
        try:
            new_state = RuleEngine.apply_play(self._state, card, Turn.PLAYER)
        except (InvalidMove, IllegalStateTransition) as e:
            logger.debug("Rejected play %s: %s", card, e)
            return False
        self._commit(new_state)
        return True

    def select_suit(self, suit: Union[Suit, str]) -> bool:
        """人类选花色，返回是否被接受"""
        if not self._check_player_input(f"select suit {suit}"):
            return False
        try:
            new_state = RuleEngine.apply_select_suit(self._state, suit, Turn.PLAYER)
        except (InvalidMove, IllegalStateTransition) as e:
            logger.debug("Rejected suit %s: %s", suit, e)
            return False
        self._commit(new_state)
        return True

    def draw(self) -> bool:
        """
        人类摸牌，返回是否被接受

        摸到的牌不可出时，延迟后自动交出回合 (期间拒绝人类输入)；
        可出时保留回合
        """
        if not self._check_player_input("draw"):
            return False
        try:
            result = RuleEngine.apply_draw(self._state, Turn.PLAYER)
        except (InvalidMove, IllegalStateTransition) as e:
            logger.debug("Rejected draw: %s", e)
            return False

        if not result.skipped and not RuleEngine.is_playable_in(result.state, result.card):
            self._schedule(Turn.PLAYER, self.config.draw_follow_up_delay,
                           lambda: self._pass_turn(Turn.PLAYER))
        self._commit(result.state)
        return True

    # ------------------------------------------------------------------
    # 电脑回合
    # ------------------------------------------------------------------

    def _ai_turn(self):
        action = policy.choose_action(self._state, Turn.AI)
        if action is None or self._state.status != Status.PLAYING:
            return
        if action.is_play:
            self._ai_play(action.card)
        else:
            self._ai_draw()

    def _ai_play(self, card: Card):
        # 最后一张是 8 时直接获胜，花色在同一步记录
        suit = None
        if card.is_wild and len(self._state.ai_hand) == 1:
            suit = policy.choose_suit(())
        try:
            new_state = RuleEngine.apply_play(self._state, card, Turn.AI, suit=suit)
        except (InvalidMove, IllegalStateTransition) as e:
            logger.warning("AI play %s rejected: %s", card, e)
            return
        if new_state.status == Status.SUIT_SELECTION:
            self._schedule(Turn.AI, self.config.suit_choice_delay, self._ai_choose_suit)
        self._commit(new_state)

    def _ai_choose_suit(self):
        state = self._state
        if state.status != Status.SUIT_SELECTION or state.current_turn is not Turn.AI:
            return
        suit = policy.choose_suit(state.ai_hand)
        self._commit(RuleEngine.apply_select_suit(state, suit, Turn.AI))

    def _ai_draw(self):
        result = RuleEngine.apply_draw(self._state, Turn.AI)
        if not result.skipped:
            card = result.card
            if RuleEngine.is_playable_in(result.state, card):
                self._schedule(Turn.AI, self.config.draw_follow_up_delay,
                               lambda: self._ai_play_drawn(card))
            else:
                self._schedule(Turn.AI, self.config.draw_follow_up_delay,
                               lambda: self._pass_turn(Turn.AI))
        self._commit(result.state)

    def _ai_play_drawn(self, card: Card):
        state = self._state
        if state.status != Status.PLAYING or state.current_turn is not Turn.AI:
            return
        self._ai_play(card)

    def _pass_turn(self, actor: Turn):
        state = self._state
        if state.status != Status.PLAYING or state.current_turn is not actor:
            return
        self._commit(RuleEngine.apply_pass_turn(state, actor))

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _schedule(self, owner: Turn, delay: float, fn: Callable[[], None]):
        generation = self._generation
        cell: List[TimerHandle] = []

        def run():
            if cell and self._pending.get(owner) is cell[0]:
                del self._pending[owner]
            if generation != self._generation:
                logger.debug("Dropped stale %s callback from game %d", owner.value, generation)
                return
            fn()

        handle = self.scheduler.schedule(delay, run)
        cell.append(handle)
        self._pending[owner] = handle
        logger.debug("Scheduled %s continuation in %.2fs", owner.value, delay)

    def _maybe_schedule_ai(self):
        state = self._state
        if (
            state.status == Status.PLAYING
            and state.current_turn is Turn.AI
            and state.winner is None
            and Turn.AI not in self._pending
        ):
            self._schedule(Turn.AI, self.config.ai_think_delay, self._ai_turn)

    def _commit(self, new_state: GameState):
        new_state.check_conservation()
        self._state = new_state
        if new_state.is_finished:
            logger.info("Game over: %s", new_state.summary())
        if self._on_update is not None:
            self._on_update(new_state)
        self._maybe_schedule_ai()
