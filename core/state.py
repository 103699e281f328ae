"""
游戏状态定义

使用不可变数据结构，支持:
- 快照测试 / 回放
- 状态之间不共享可变容器
- 易于序列化
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union
import logging

import numpy as np

from .cards import Card, Suit, DECK_SIZE, create_deck, make_rng, shuffle
from .errors import InvariantViolation

logger = logging.getLogger(__name__)


class Status(Enum):
    """游戏阶段"""
    HOME = "home"                      # 未开始
    WAITING = "waiting"                # 等待发牌
    PLAYING = "playing"                # 正常出牌
    SUIT_SELECTION = "suit_selection"  # 打出 8 后等待选花色
    GAME_OVER = "game_over"            # 游戏结束


class Turn(Enum):
    """回合持有者"""
    PLAYER = "player"  # 人类玩家
    AI = "ai"          # 电脑

    @property
    def opponent(self) -> 'Turn':
        return Turn.AI if self is Turn.PLAYER else Turn.PLAYER

    @property
    def label(self) -> str:
        """提示信息中的称呼"""
        return "你" if self is Turn.PLAYER else "AI"

    @classmethod
    def parse(cls, value: Union['Turn', str]) -> 'Turn':
        return value if isinstance(value, cls) else cls(value)


# 每人初始手牌数
HAND_SIZE = 8

WELCOME_MESSAGE = "欢迎来到疯狂 8 点！"
START_MESSAGE = "游戏开始！你的回合。"


@dataclass(frozen=True)
class GameState:
    """
    不可变游戏状态

    每个规则动作都返回新的 GameState，原状态保持不变

    Attributes:
        deck: 摸牌堆 (最后一张为堆顶)
        player_hand: 玩家手牌
        ai_hand: 电脑手牌
        discard_pile: 弃牌堆 (最后一张为当前牌)
        current_turn: 当前行动方
        current_suit: 当前有效花色
        status: 游戏阶段
        winner: 赢家
        last_action: 最近一次动作的描述 (仅用于显示)
        step_count: 已接受的动作数
    """
    deck: Tuple[Card, ...] = ()
    player_hand: Tuple[Card, ...] = ()
    ai_hand: Tuple[Card, ...] = ()
    discard_pile: Tuple[Card, ...] = ()
    current_turn: Turn = Turn.PLAYER
    current_suit: Optional[Suit] = None
    status: Status = Status.HOME
    winner: Optional[Turn] = None
    last_action: str = WELCOME_MESSAGE
    step_count: int = 0

    @classmethod
    def home(cls) -> 'GameState':
        """首页状态 (尚未开始)"""
        return cls()

    @classmethod
    def waiting(cls) -> 'GameState':
        """等待发牌状态"""
        return cls(status=Status.WAITING)

    @classmethod
    def initial(
        cls,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> 'GameState':
        """
        创建初始游戏状态

        发牌顺序: 玩家拿洗好的牌的前 8 张，电脑拿接下来的 8 张。
        首张弃牌从剩余牌堆底部 (索引 0) 开始找第一张不是 8 的牌。

        Args:
            seed: 随机种子 (rng 为空时使用)
            rng: 随机源

        Returns:
            初始状态 (出牌阶段，玩家先手)

        Raises:
            InvariantViolation: 剩余牌全部是 8
        """
        if rng is None:
            rng = make_rng(seed)

        deck = list(shuffle(create_deck(), rng))

        # 发牌
        player_hand = tuple(deck[:HAND_SIZE])
        ai_hand = tuple(deck[HAND_SIZE:2 * HAND_SIZE])
        remaining = deck[2 * HAND_SIZE:]

        # 首张弃牌不能是 8
        discard_index = 0
        while discard_index < len(remaining) and remaining[discard_index].is_wild:
            discard_index += 1
        if discard_index >= len(remaining):
            raise InvariantViolation("No non-wild card left for the first discard")

        first_discard = remaining.pop(discard_index)

        state = cls(
            deck=tuple(remaining),
            player_hand=player_hand,
            ai_hand=ai_hand,
            discard_pile=(first_discard,),
            current_turn=Turn.PLAYER,
            current_suit=first_discard.suit,
            status=Status.PLAYING,
            winner=None,
            last_action=START_MESSAGE,
        )
        logger.info("New game dealt, first discard %s", first_discard)
        return state

    def get_hand(self, turn: Union[Turn, str]) -> Tuple[Card, ...]:
        """获取指定一方的手牌"""
        turn = Turn.parse(turn)
        return self.player_hand if turn is Turn.PLAYER else self.ai_hand

    def with_hand(self, turn: Union[Turn, str], hand: Tuple[Card, ...], **changes) -> 'GameState':
        """替换指定一方手牌并应用其他修改"""
        turn = Turn.parse(turn)
        key = "player_hand" if turn is Turn.PLAYER else "ai_hand"
        changes[key] = tuple(hand)
        return replace(self, **changes)

    def evolve(self, **changes) -> 'GameState':
        """返回修改后的新状态，并累加步数"""
        changes.setdefault("step_count", self.step_count + 1)
        return replace(self, **changes)

    @property
    def top_discard(self) -> Optional[Card]:
        """弃牌堆顶 (当前牌)"""
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def is_finished(self) -> bool:
        return self.status == Status.GAME_OVER

    @property
    def total_cards(self) -> int:
        """四个区域的牌数之和 (开局后恒为 52)"""
        return len(self.deck) + len(self.player_hand) + len(self.ai_hand) + len(self.discard_pile)

    def check_conservation(self) -> None:
        """检查牌数守恒"""
        if self.status in (Status.HOME, Status.WAITING):
            return
        if self.total_cards != DECK_SIZE:
            raise InvariantViolation(f"Card count is {self.total_cards}, expected {DECK_SIZE}")

    def summary(self) -> Dict[str, Any]:
        """状态摘要 (日志 / 调试用)"""
        top = self.top_discard
        return {
            "status": self.status.value,
            "current_turn": self.current_turn.value,
            "current_suit": self.current_suit.value if self.current_suit else None,
            "top_discard": str(top) if top else None,
            "player_cards": len(self.player_hand),
            "ai_cards": len(self.ai_hand),
            "deck_cards": len(self.deck),
            "winner": self.winner.value if self.winner else None,
            "step_count": self.step_count,
        }
