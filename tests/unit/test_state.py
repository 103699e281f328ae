"""游戏状态测试"""
import pytest

from core.cards import Rank, Suit
from core.errors import InvariantViolation
from core.state import (
    HAND_SIZE,
    START_MESSAGE,
    WELCOME_MESSAGE,
    GameState,
    Status,
    Turn,
)


class ScriptedRng:
    """按脚本返回交换位置的随机源 (未指定的位置不交换)"""

    def __init__(self, swaps=None):
        self.swaps = swaps or {}

    def integers(self, low, high):
        i = high - 1
        return self.swaps.get(i, i)


class TestTurn:
    """Turn 测试"""

    def test_opponent(self):
        assert Turn.PLAYER.opponent is Turn.AI
        assert Turn.AI.opponent is Turn.PLAYER

    def test_parse(self):
        assert Turn.parse("player") is Turn.PLAYER
        assert Turn.parse(Turn.AI) is Turn.AI
        with pytest.raises(ValueError):
            Turn.parse("dealer")


class TestInitialState:
    """初始状态测试"""

    def test_pile_sizes(self):
        state = GameState.initial(seed=42)
        assert len(state.player_hand) == HAND_SIZE == 8
        assert len(state.ai_hand) == 8
        assert len(state.discard_pile) == 1
        assert len(state.deck) == 35
        assert state.total_cards == 52

    def test_first_discard_not_wild(self):
        for seed in range(30):
            state = GameState.initial(seed=seed)
            assert not state.top_discard.is_wild

    def test_initial_fields(self):
        state = GameState.initial(seed=1)
        assert state.current_turn is Turn.PLAYER
        assert state.status == Status.PLAYING
        assert state.current_suit == state.top_discard.suit
        assert state.winner is None
        assert state.last_action == START_MESSAGE

    def test_seed_reproducible(self):
        a = GameState.initial(seed=7)
        b = GameState.initial(seed=7)
        assert [c.key for c in a.player_hand] == [c.key for c in b.player_hand]
        assert [c.key for c in a.deck] == [c.key for c in b.deck]

    def test_deal_order(self):
        # 不交换时牌序与 create_deck 相同: 红心 A-K, 方块 A-K, ...
        state = GameState.initial(rng=ScriptedRng())
        assert [c.key for c in state.player_hand][:2] == [(Suit.HEARTS, Rank.ACE), (Suit.HEARTS, Rank.TWO)]
        assert state.ai_hand[0].key == (Suit.HEARTS, Rank.NINE)
        assert state.top_discard.key == (Suit.DIAMONDS, Rank.FOUR)
        assert state.deck[-1].key == (Suit.SPADES, Rank.KING)

    def test_wild_skipped_for_first_discard(self):
        # 第 16 张 (剩余牌堆的第一张) 换成 ♥8
        state = GameState.initial(rng=ScriptedRng({16: 7}))
        assert state.top_discard.key == (Suit.DIAMONDS, Rank.FIVE)
        assert state.deck[0].key == (Suit.HEARTS, Rank.EIGHT)
        assert len(state.deck) == 35
        state.check_conservation()


class TestLifecycleStates:
    """首页 / 等待状态测试"""

    def test_home(self):
        state = GameState.home()
        assert state.status == Status.HOME
        assert state.last_action == WELCOME_MESSAGE
        assert state.top_discard is None
        state.check_conservation()

    def test_waiting(self):
        state = GameState.waiting()
        assert state.status == Status.WAITING
        assert state.total_cards == 0
        state.check_conservation()


class TestStateHelpers:
    """状态辅助方法测试"""

    def test_get_hand(self):
        state = GameState.initial(seed=3)
        assert state.get_hand(Turn.PLAYER) is state.player_hand
        assert state.get_hand("ai") is state.ai_hand

    def test_with_hand_returns_new_state(self):
        state = GameState.initial(seed=3)
        new_state = state.with_hand(Turn.AI, state.ai_hand[1:], last_action="x")
        assert len(new_state.ai_hand) == 7
        assert len(state.ai_hand) == 8
        assert new_state.last_action == "x"

    def test_evolve_counts_steps(self):
        state = GameState.initial(seed=3)
        assert state.evolve().step_count == state.step_count + 1
        assert state.evolve(step_count=10).step_count == 10

    def test_conservation_violation(self):
        state = GameState.initial(seed=3)
        broken = state.with_hand(Turn.PLAYER, state.player_hand[1:])
        with pytest.raises(InvariantViolation):
            broken.check_conservation()

    def test_is_finished(self):
        state = GameState.initial(seed=3)
        assert not state.is_finished
        assert state.evolve(status=Status.GAME_OVER).is_finished

    def test_summary(self):
        summary = GameState.initial(seed=3).summary()
        assert summary["status"] == "playing"
        assert summary["current_turn"] == "player"
        assert summary["player_cards"] == 8
        assert summary["deck_cards"] == 35
        assert summary["winner"] is None
