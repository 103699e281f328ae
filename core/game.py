"""
对外接口

同步、无延迟的状态迁移函数。可预期的非法动作不抛异常，
记录日志后原样返回输入状态 (result is state)。
"""
from typing import List, Optional, Union
import logging

import numpy as np

from . import policy
from .actions import Action, ActionType, legal_actions as _legal_actions
from .cards import Card, Suit
from .errors import IllegalStateTransition, InvalidMove
from .rules import RuleEngine
from .state import GameState, Turn

logger = logging.getLogger(__name__)

TurnLike = Union[Turn, str]


def new_game(seed: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> GameState:
    """发牌并返回初始状态"""
    return GameState.initial(seed=seed, rng=rng)


def is_playable(state: GameState, card: Card) -> bool:
    """当前牌桌下这张牌能否打出"""
    return RuleEngine.is_playable_in(state, card)


def legal_actions(state: GameState, actor: TurnLike) -> List[Action]:
    """指定一方的合法动作，未知行动方没有合法动作"""
    try:
        return _legal_actions(state, actor)
    except InvalidMove as e:
        logger.debug("No legal actions: %s", e)
        return []


def _rejected(state: GameState, action: str, error: Exception) -> GameState:
    logger.debug("Rejected %s: %s", action, error)
    return state


def play(state: GameState, card: Card, actor: TurnLike) -> GameState:
    """
    出牌

    电脑打出 8 时在同一步按剩余手牌选花色 (手牌打空也会记录所选花色)；
    人类打出 8 时停在选花色阶段
    """
    try:
        actor = RuleEngine.parse_actor(actor)
        suit = None
        if actor is Turn.AI and card.is_wild:
            suit = policy.choose_suit(c for c in state.ai_hand if c != card)
        return RuleEngine.apply_play(state, card, actor, suit=suit)
    except (InvalidMove, IllegalStateTransition) as e:
        return _rejected(state, f"play {card}", e)


def select_suit(state: GameState, suit: Union[Suit, str], actor: TurnLike) -> GameState:
    """打出 8 之后选花色"""
    try:
        return RuleEngine.apply_select_suit(state, suit, actor)
    except (InvalidMove, IllegalStateTransition) as e:
        return _rejected(state, f"select suit {suit}", e)


def draw(state: GameState, actor: TurnLike) -> GameState:
    """
    摸牌 (含摸牌后的后续处理)

    - 人类: 摸到的牌不可出则交出回合；可出则保留回合，由玩家决定
    - 电脑: 摸到的牌可出则立即打出；否则交出回合
    """
    try:
        actor = RuleEngine.parse_actor(actor)
        result = RuleEngine.apply_draw(state, actor)
    except (InvalidMove, IllegalStateTransition) as e:
        return _rejected(state, "draw", e)

    if result.skipped:
        return result.state

    drawn_state, card = result.state, result.card
    if not RuleEngine.is_playable_in(drawn_state, card):
        return RuleEngine.apply_pass_turn(drawn_state, actor)
    if actor is Turn.AI:
        return play(drawn_state, card, Turn.AI)
    return drawn_state


def drive_ai(state: GameState) -> GameState:
    """
    执行电脑的一个完整回合

    不轮到电脑或游戏不在进行中时原样返回
    """
    action = policy.choose_action(state, Turn.AI)
    if action is None:
        return state
    logger.debug("AI chooses %s", action)
    return apply_action(state, action, Turn.AI)


def apply_action(state: GameState, action: Action, actor: TurnLike) -> GameState:
    """按动作类型分派"""
    if action.action_type == ActionType.PLAY:
        return play(state, action.card, actor)
    if action.action_type == ActionType.DRAW:
        return draw(state, actor)
    if action.action_type == ActionType.SELECT_SUIT:
        return select_suit(state, action.suit, actor)
    raise ValueError(f"Unknown action type: {action.action_type}")
