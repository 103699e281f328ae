"""
观察空间编码

将游戏状态转换为固定维度的特征表示，并定义离散动作编码
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np

from core.actions import Action, ActionType, legal_actions
from core.cards import (
    Card,
    DECK_SIZE,
    SUITS,
    card_index,
    cards_to_array,
    find_card,
    index_to_key,
    suit_to_array,
)
from core.state import GameState, Status, Turn


STATUS_ORDER = tuple(Status)

# 动作索引布局: 0-51 出牌, 52 摸牌, 53-56 选花色
DRAW_ACTION = DECK_SIZE
SUIT_ACTION_OFFSET = DECK_SIZE + 1
NUM_ACTIONS = SUIT_ACTION_OFFSET + len(SUITS)


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌 (52,)
        top_card: 弃牌堆顶 (52,) one-hot
        current_suit: 当前花色 (4,) one-hot
        status: 游戏阶段 (5,) one-hot
        cards_left: 自己 / 对手 / 摸牌堆剩余张数 (3,)，除以 52
        legal_actions: 合法动作列表
    """
    hand: np.ndarray
    top_card: np.ndarray
    current_suit: np.ndarray
    status: np.ndarray
    cards_left: np.ndarray
    legal_actions: List[Action]

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "top_card": self.top_card,
            "current_suit": self.current_suit,
            "status": self.status,
            "cards_left": self.cards_left,
        }


class ObservationBuilder:
    """
    观测构建器

    负责将 GameState 转换为 Observation (只包含视角方可见的信息)
    """

    def build(self, state: GameState, perspective: Turn = Turn.PLAYER) -> Observation:
        """
        从游戏状态构建观测

        Args:
            state: 游戏状态
            perspective: 视角方

        Returns:
            Observation 对象
        """
        top = state.top_discard
        top_card = cards_to_array([top] if top is not None else [])

        return Observation(
            hand=cards_to_array(state.get_hand(perspective)),
            top_card=top_card,
            current_suit=suit_to_array(state.current_suit),
            status=self._encode_status(state.status),
            cards_left=self._encode_cards_left(state, perspective),
            legal_actions=legal_actions(state, perspective),
        )

    def _encode_status(self, status: Status) -> np.ndarray:
        result = np.zeros(len(STATUS_ORDER), dtype=np.float32)
        result[STATUS_ORDER.index(status)] = 1
        return result

    def _encode_cards_left(self, state: GameState, perspective: Turn) -> np.ndarray:
        return np.array([
            len(state.get_hand(perspective)),
            len(state.get_hand(perspective.opponent)),
            len(state.deck),
        ], dtype=np.float32) / DECK_SIZE


class ActionEncoder:
    """
    动作编码器

    将 Action 对象与 0-56 的索引相互转换。
    出牌动作按 (花色, 点数) 编码，解码时需要手牌来找到具体的牌
    """

    @property
    def num_actions(self) -> int:
        """动作空间大小"""
        return NUM_ACTIONS

    def encode(self, action: Action) -> int:
        """
        将 Action 编码为索引

        Args:
            action: Action 对象

        Returns:
            动作索引
        """
        if action.action_type == ActionType.PLAY:
            return card_index(action.card)
        if action.action_type == ActionType.DRAW:
            return DRAW_ACTION
        return SUIT_ACTION_OFFSET + SUITS.index(action.suit)

    def decode(self, idx: int, hand: Iterable[Card] = ()) -> Optional[Action]:
        """
        将索引解码为 Action

        Args:
            idx: 动作索引
            hand: 行动方手牌 (解码出牌动作时使用)

        Returns:
            Action 对象；索引越界或手牌中没有对应的牌时返回 None
        """
        idx = int(idx)
        if not 0 <= idx < NUM_ACTIONS:
            return None
        if idx == DRAW_ACTION:
            return Action.draw()
        if idx >= SUIT_ACTION_OFFSET:
            return Action.select_suit(SUITS[idx - SUIT_ACTION_OFFSET])

        suit, rank = index_to_key(idx)
        card = find_card(hand, suit, rank)
        if card is None:
            return None
        return Action.play(card)

    def get_legal_action_indices(self, actions: Iterable[Action]) -> List[int]:
        """获取合法动作的索引列表"""
        return [self.encode(action) for action in actions]

    def build_legal_mask(self, actions: Iterable[Action]) -> np.ndarray:
        """
        构建合法动作掩码

        Args:
            actions: 合法 Action 列表

        Returns:
            (57,) 数组，合法位置为 1
        """
        mask = np.zeros(NUM_ACTIONS, dtype=np.float32)
        for idx in self.get_legal_action_indices(actions):
            mask[idx] = 1
        return mask


# 全局单例
_action_encoder: Optional[ActionEncoder] = None


def get_action_encoder() -> ActionEncoder:
    """获取全局动作编码器"""
    global _action_encoder
    if _action_encoder is None:
        _action_encoder = ActionEncoder()
    return _action_encoder
