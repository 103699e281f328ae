"""
动作类型定义与动作生成器

疯狂 8 点的动作: 出牌、摸牌、选花色
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Union

from .cards import Card, Suit, SUITS
from .rules import RuleEngine
from .state import GameState, Status, Turn


class ActionType(IntEnum):
    """动作类型"""
    PLAY = 0         # 出一张牌
    DRAW = 1         # 摸牌
    SELECT_SUIT = 2  # 打出 8 后指定花色


@dataclass(frozen=True)
class Action:
    """
    不可变动作表示

    Attributes:
        action_type: 动作类型
        card: 出的牌 (仅 PLAY)
        suit: 指定的花色 (仅 SELECT_SUIT)
    """
    action_type: ActionType
    card: Optional[Card] = None
    suit: Optional[Suit] = None

    @classmethod
    def play(cls, card: Card) -> 'Action':
        return cls(action_type=ActionType.PLAY, card=card)

    @classmethod
    def draw(cls) -> 'Action':
        return cls(action_type=ActionType.DRAW)

    @classmethod
    def select_suit(cls, suit: Union[Suit, str]) -> 'Action':
        suit = suit if isinstance(suit, Suit) else Suit(suit)
        return cls(action_type=ActionType.SELECT_SUIT, suit=suit)

    @property
    def is_play(self) -> bool:
        return self.action_type == ActionType.PLAY

    @property
    def is_draw(self) -> bool:
        return self.action_type == ActionType.DRAW

    def __str__(self) -> str:
        if self.action_type == ActionType.PLAY:
            return f"play {self.card}"
        if self.action_type == ActionType.SELECT_SUIT:
            return f"suit {self.suit.value}"
        return "draw"


class ActionGenerator:
    """
    合法动作生成器

    根据状态生成指定一方的所有合法动作
    """

    def __init__(self, state: GameState):
        """
        Args:
            state: 当前状态
        """
        self.state = state

    def generate(self, actor: Union[Turn, str]) -> List[Action]:
        """
        生成合法动作

        - 选花色阶段: 4 个花色
        - 出牌阶段: 每张可出的牌 + 摸牌 (随时可摸)
        - 其他阶段或非本方回合: 空

        Args:
            actor: 行动方

        Returns:
            合法动作列表

        Raises:
            InvalidMove: 未知行动方
        """
        actor = RuleEngine.parse_actor(actor)
        state = self.state

        if state.current_turn is not actor:
            return []

        if state.status == Status.SUIT_SELECTION:
            return [Action.select_suit(suit) for suit in SUITS]

        if state.status != Status.PLAYING:
            return []

        playable = RuleEngine.playable_cards(
            state.get_hand(actor), state.top_discard, state.current_suit
        )
        actions = [Action.play(card) for card in playable]
        actions.append(Action.draw())
        return actions


def legal_actions(state: GameState, actor: Union[Turn, str]) -> List[Action]:
    """获取合法动作列表"""
    return ActionGenerator(state).generate(actor)
