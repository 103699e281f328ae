"""动作生成测试"""
import pytest

from core.actions import Action, ActionGenerator, ActionType, legal_actions
from core.cards import SUITS, Suit
from core.state import GameState, Status, Turn


class TestActionType:
    """ActionType 枚举测试"""

    def test_action_types(self):
        assert len(ActionType) == 3
        assert ActionType.PLAY == 0


class TestAction:
    """Action 数据类测试"""

    def test_play(self, make_card):
        card = make_card("hearts", "3")
        action = Action.play(card)
        assert action.is_play
        assert action.card is card
        assert str(action) == "play ♥3"

    def test_draw(self):
        action = Action.draw()
        assert action.is_draw
        assert action.card is None
        assert str(action) == "draw"

    def test_select_suit_from_string(self):
        action = Action.select_suit("clubs")
        assert action.suit == Suit.CLUBS
        assert str(action) == "suit clubs"

    def test_equality(self, make_card):
        card = make_card("hearts", "3")
        assert Action.play(card) == Action.play(card)
        assert Action.draw() == Action.draw()

    def test_immutability(self):
        action = Action.draw()
        with pytest.raises(Exception):
            action.action_type = ActionType.PLAY


class TestActionGenerator:
    """ActionGenerator 测试"""

    def test_playing_phase(self, make_card, make_state):
        hand = [make_card("hearts", "3"), make_card("clubs", "4"), make_card("spades", "8")]
        state = make_state(hand, [make_card("spades", "5")], make_card("hearts", "K"))

        actions = ActionGenerator(state).generate(Turn.PLAYER)

        assert actions == [Action.play(hand[0]), Action.play(hand[2]), Action.draw()]

    def test_draw_always_available(self, make_card, make_state):
        state = make_state([make_card("clubs", "4")], [make_card("spades", "5")], make_card("hearts", "K"))
        assert legal_actions(state, "player") == [Action.draw()]

    def test_suit_selection(self, make_card, make_state):
        state = make_state(
            [make_card("clubs", "4")], [make_card("spades", "5")], make_card("hearts", "8"),
            status=Status.SUIT_SELECTION,
        )
        actions = legal_actions(state, Turn.PLAYER)
        assert [a.suit for a in actions] == list(SUITS)

    def test_not_your_turn(self, make_card, make_state):
        state = make_state([make_card("clubs", "4")], [make_card("hearts", "5")], make_card("hearts", "K"))
        assert legal_actions(state, Turn.AI) == []

    def test_game_over(self, make_card, make_state):
        state = make_state([], [make_card("hearts", "5")], make_card("hearts", "K"), status=Status.GAME_OVER)
        assert legal_actions(state, Turn.PLAYER) == []

    def test_home(self):
        assert legal_actions(GameState.home(), Turn.PLAYER) == []
