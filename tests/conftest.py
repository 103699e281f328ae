"""测试公共夹具"""
import pytest

from core.cards import Card, Rank, Suit, create_deck
from core.state import GameState, Status, Turn


def _card(suit: str, rank: str) -> Card:
    return Card(Suit(suit), Rank(rank))


def _state(
    player_hand,
    ai_hand,
    top,
    current_suit=None,
    turn=Turn.PLAYER,
    status=Status.PLAYING,
    empty_deck=False,
):
    """
    构造牌桌

    未指定的牌放入摸牌堆；empty_deck 时放到弃牌堆底部，保持 52 张守恒
    """
    used = {c.key for c in (*player_hand, *ai_hand, top)}
    rest = tuple(c for c in create_deck() if c.key not in used)
    deck, discard = (rest, (top,)) if not empty_deck else ((), rest + (top,))
    return GameState(
        deck=deck,
        player_hand=tuple(player_hand),
        ai_hand=tuple(ai_hand),
        discard_pile=discard,
        current_turn=turn,
        current_suit=current_suit if current_suit is not None else top.suit,
        status=status,
    )


@pytest.fixture
def make_card():
    """make_card("hearts", "8") -> ♥8"""
    return _card


@pytest.fixture
def make_state():
    return _state
