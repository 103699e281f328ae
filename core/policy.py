"""
电脑策略

- 出牌: 优先出手牌顺序中第一张非 8 的可出牌，只剩 8 可出时才出 8
- 选花色: 剩余手牌中最多的花色，平局按花色枚举顺序，空手牌选红心
- 无牌可出: 摸牌
"""
from typing import Iterable, Optional

from .actions import Action
from .cards import Card, Suit, count_suits
from .rules import RuleEngine
from .state import GameState, Status, Turn

DEFAULT_SUIT = Suit.HEARTS


def choose_suit(hand: Iterable[Card], default: Suit = DEFAULT_SUIT) -> Suit:
    """
    选择手牌中最多的花色

    Args:
        hand: 打出 8 之后剩余的手牌
        default: 手牌为空时的花色

    Returns:
        张数最多的花色
    """
    counts = count_suits(hand)
    if not any(counts.values()):
        return default
    # max 遇到相同值时保留先出现的，即枚举顺序靠前的花色
    return max(counts, key=lambda suit: counts[suit])


def choose_card(
    hand: Iterable[Card],
    top: Optional[Card],
    current_suit: Optional[Suit],
) -> Optional[Card]:
    """
    选择要打出的牌

    Returns:
        第一张非 8 的可出牌；没有则第一张可出的 8；都没有返回 None
    """
    playable = RuleEngine.playable_cards(hand, top, current_suit)
    if not playable:
        return None
    for card in playable:
        if not card.is_wild:
            return card
    return playable[0]


def choose_action(state: GameState, actor: Turn = Turn.AI) -> Optional[Action]:
    """
    为行动方选择动作

    Returns:
        选花色 / 出牌 / 摸牌；不轮到该方时返回 None
    """
    if not RuleEngine.can_act(state, actor):
        return None

    hand = state.get_hand(actor)

    if state.status == Status.SUIT_SELECTION:
        return Action.select_suit(choose_suit(hand))

    card = choose_card(hand, state.top_discard, state.current_suit)
    if card is not None:
        return Action.play(card)
    return Action.draw()
