"""电脑策略测试"""
from core.actions import ActionType
from core.cards import Suit
from core.policy import DEFAULT_SUIT, choose_action, choose_card, choose_suit
from core.state import Status, Turn


class TestChooseSuit:
    """选花色测试"""

    def test_majority_suit(self, make_card):
        hand = [make_card("clubs", "2"), make_card("clubs", "3"), make_card("hearts", "4")]
        assert choose_suit(hand) == Suit.CLUBS

    def test_tie_uses_enum_order(self, make_card):
        hand = [make_card("spades", "2"), make_card("diamonds", "3")]
        assert choose_suit(hand) == Suit.DIAMONDS

    def test_empty_hand_default(self):
        assert choose_suit([]) == DEFAULT_SUIT == Suit.HEARTS

    def test_custom_default(self):
        assert choose_suit([], default=Suit.SPADES) == Suit.SPADES


class TestChooseCard:
    """选牌测试"""

    def test_prefers_non_wild(self, make_card):
        hand = [make_card("spades", "8"), make_card("hearts", "3"), make_card("hearts", "5")]
        assert choose_card(hand, make_card("hearts", "K"), Suit.HEARTS) is hand[1]

    def test_wild_when_only_option(self, make_card):
        hand = [make_card("clubs", "3"), make_card("spades", "8")]
        assert choose_card(hand, make_card("hearts", "K"), Suit.HEARTS) is hand[1]

    def test_nothing_playable(self, make_card):
        hand = [make_card("clubs", "3")]
        assert choose_card(hand, make_card("hearts", "K"), Suit.HEARTS) is None


class TestChooseAction:
    """选动作测试"""

    def test_play(self, make_card, make_state):
        card = make_card("hearts", "3")
        state = make_state([make_card("clubs", "4")], [card], make_card("hearts", "K"), turn=Turn.AI)
        action = choose_action(state)
        assert action.action_type == ActionType.PLAY
        assert action.card is card

    def test_draw(self, make_card, make_state):
        state = make_state([make_card("clubs", "4")], [make_card("clubs", "3")], make_card("hearts", "K"), turn=Turn.AI)
        assert choose_action(state).is_draw

    def test_suit_selection(self, make_card, make_state):
        state = make_state(
            [make_card("clubs", "4")],
            [make_card("spades", "3"), make_card("spades", "4")],
            make_card("hearts", "8"),
            turn=Turn.AI,
            status=Status.SUIT_SELECTION,
        )
        action = choose_action(state)
        assert action.action_type == ActionType.SELECT_SUIT
        assert action.suit == Suit.SPADES

    def test_not_ai_turn(self, make_card, make_state):
        state = make_state([make_card("clubs", "4")], [make_card("hearts", "3")], make_card("hearts", "K"))
        assert choose_action(state) is None

    def test_player_seat(self, make_card, make_state):
        card = make_card("clubs", "K")
        state = make_state([card], [make_card("hearts", "3")], make_card("hearts", "K"))
        assert choose_action(state, Turn.PLAYER).card is card
