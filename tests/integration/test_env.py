"""环境层测试"""
import pytest
import numpy as np

from core.actions import Action
from core.cards import Suit
from core.errors import IllegalStateTransition
from core.state import GameState, Turn


class TestObservationBuilder:
    """ObservationBuilder 测试"""

    def test_build(self):
        from env.observation import ObservationBuilder

        state = GameState.initial(seed=42)
        obs = ObservationBuilder().build(state)

        assert obs.hand.shape == (52,)
        assert obs.hand.sum() == 8
        assert obs.top_card.sum() == 1
        assert obs.current_suit.shape == (4,)
        assert obs.current_suit.sum() == 1
        assert obs.status.shape == (5,)
        assert obs.cards_left.tolist() == pytest.approx([8 / 52, 8 / 52, 35 / 52])

    def test_perspective_hides_opponent_hand(self):
        from env.observation import ObservationBuilder

        state = GameState.initial(seed=42)
        builder = ObservationBuilder()
        player_obs = builder.build(state, Turn.PLAYER)
        ai_obs = builder.build(state, Turn.AI)

        assert not np.array_equal(player_obs.hand, ai_obs.hand)
        assert ai_obs.legal_actions == []

    def test_home_state(self):
        from env.observation import ObservationBuilder

        obs = ObservationBuilder().build(GameState.home())
        assert obs.top_card.sum() == 0
        assert obs.current_suit.sum() == 0


class TestActionEncoder:
    """ActionEncoder 测试"""

    def test_num_actions(self):
        from env.observation import get_action_encoder, NUM_ACTIONS

        assert get_action_encoder().num_actions == NUM_ACTIONS == 57

    def test_encode_decode_play(self, make_card):
        from env.observation import get_action_encoder

        encoder = get_action_encoder()
        card = make_card("spades", "Q")
        idx = encoder.encode(Action.play(card))
        assert 0 <= idx < 52
        assert encoder.decode(idx, [make_card("hearts", "2"), card]).card is card

    def test_decode_card_not_in_hand(self, make_card):
        from env.observation import get_action_encoder

        encoder = get_action_encoder()
        idx = encoder.encode(Action.play(make_card("spades", "Q")))
        assert encoder.decode(idx, [make_card("hearts", "2")]) is None

    def test_draw_and_suits(self):
        from env.observation import DRAW_ACTION, SUIT_ACTION_OFFSET, get_action_encoder

        encoder = get_action_encoder()
        assert encoder.encode(Action.draw()) == DRAW_ACTION == 52
        assert encoder.decode(DRAW_ACTION).is_draw
        assert encoder.decode(SUIT_ACTION_OFFSET + 3).suit == Suit.SPADES
        assert encoder.encode(Action.select_suit("hearts")) == SUIT_ACTION_OFFSET

    def test_out_of_range(self):
        from env.observation import get_action_encoder

        assert get_action_encoder().decode(57) is None
        assert get_action_encoder().decode(-1) is None

    def test_legal_mask(self, make_card, make_state):
        from core.actions import legal_actions
        from env.observation import DRAW_ACTION, get_action_encoder

        card = make_card("hearts", "3")
        state = make_state([card, make_card("clubs", "4")], [make_card("spades", "5")], make_card("hearts", "K"))
        encoder = get_action_encoder()
        mask = encoder.build_legal_mask(legal_actions(state, Turn.PLAYER))

        assert mask.shape == (57,)
        assert mask.sum() == 2
        assert mask[encoder.encode(Action.play(card))] == 1
        assert mask[DRAW_ACTION] == 1


class TestCrazyEightsEnv:
    """CrazyEightsEnv 测试"""

    def test_reset(self):
        from env import CrazyEightsEnv

        env = CrazyEightsEnv()
        obs, info = env.reset(seed=42)

        assert obs["hand"].shape == (52,)
        assert obs["top_card"].shape == (52,)
        assert obs["current_suit"].shape == (4,)
        assert obs["status"].shape == (5,)
        assert obs["cards_left"].shape == (3,)
        assert env.observation_space.contains(obs)
        assert info["current_turn"] == "player"
        assert info["status"] == "playing"
        assert info["legal_action_mask"].sum() == len(info["legal_actions"])

    def test_reset_is_reproducible(self):
        from env import CrazyEightsEnv

        env = CrazyEightsEnv()
        obs1, _ = env.reset(seed=7)
        obs2, _ = env.reset(seed=7)
        assert np.array_equal(obs1["hand"], obs2["hand"])
        assert np.array_equal(obs1["top_card"], obs2["top_card"])

    def test_constructor_seed(self):
        from env import CrazyEightsEnv

        obs1, _ = CrazyEightsEnv(seed=3).reset()
        obs2, _ = CrazyEightsEnv(seed=3).reset()
        assert np.array_equal(obs1["hand"], obs2["hand"])

    def test_step_before_reset(self):
        from env import CrazyEightsEnv

        with pytest.raises(IllegalStateTransition):
            CrazyEightsEnv().step(52)

    def test_step_returns_to_agent(self):
        from env import CrazyEightsEnv

        env = CrazyEightsEnv()
        _, info = env.reset(seed=42)
        action = info["legal_action_indices"][0]

        obs, reward, terminated, truncated, info = env.step(action)

        assert isinstance(reward, float)
        assert terminated or info["current_turn"] == "player"
        env.state.check_conservation()

    def test_invalid_action(self):
        from env import CrazyEightsEnv, SUIT_ACTION_OFFSET

        env = CrazyEightsEnv()
        env.reset(seed=42)
        before = env.state

        obs, reward, terminated, truncated, info = env.step(SUIT_ACTION_OFFSET)

        assert reward == -0.1
        assert not terminated
        assert "error" in info
        assert env.state is before

    def test_step_with_action_object(self, make_card, make_state):
        from env import CrazyEightsEnv

        env = CrazyEightsEnv()
        env.reset(seed=0)
        card = make_card("hearts", "3")
        env._state = make_state([card], [make_card("spades", "5")], make_card("hearts", "K"))

        obs, reward, terminated, truncated, info = env.step(Action.play(card))

        assert terminated
        assert reward == 1.0
        assert info["winner"] == "player"
        assert info["legal_actions"] == []

        with pytest.raises(IllegalStateTransition):
            env.step(52)

    def test_wild_card_suit_selection(self, make_card, make_state):
        from env import CrazyEightsEnv, SUIT_ACTION_OFFSET, get_action_encoder

        env = CrazyEightsEnv()
        env.reset(seed=0)
        wild = make_card("clubs", "8")
        env._state = make_state([wild, make_card("spades", "4")],
                                [make_card("diamonds", "2"), make_card("diamonds", "3")],
                                make_card("hearts", "K"))

        _, _, _, _, info = env.step(get_action_encoder().encode(Action.play(wild)))
        assert info["status"] == "suit_selection"
        assert info["legal_action_indices"] == [SUIT_ACTION_OFFSET + i for i in range(4)]

        _, _, _, _, info = env.step(SUIT_ACTION_OFFSET + 3)
        # 电脑无牌可出，摸到 ♠K 后直接打出
        assert info["current_turn"] == "player"
        assert env.state.top_discard.key == make_card("spades", "K").key
        assert env.state.current_suit == Suit.SPADES

    def test_opponent_wins(self, make_card, make_state):
        from env import CrazyEightsEnv, DRAW_ACTION

        env = CrazyEightsEnv(reward_type="sparse")
        env.reset(seed=0)
        env._state = make_state([make_card("clubs", "4")], [make_card("hearts", "3")], make_card("diamonds", "3"))

        # 摸到 ♠K 不可出，回合交给电脑，电脑出 ♥3 获胜
        _, reward, terminated, _, info = env.step(DRAW_ACTION)

        assert terminated
        assert reward == -1.0
        assert info["winner"] == "ai"

    def test_shaped_reward(self, make_card, make_state):
        from env import CrazyEightsEnv, get_action_encoder

        env = CrazyEightsEnv(reward_type="shaped")
        env.reset(seed=0)
        card = make_card("hearts", "3")
        env._state = make_state([card, make_card("clubs", "4")],
                                [make_card("diamonds", "2"), make_card("spades", "2")],
                                make_card("hearts", "K"))

        _, reward, _, _, _ = env.step(get_action_encoder().encode(Action.play(card)))
        assert reward == pytest.approx(0.01)

    def test_full_episode(self):
        from env import CrazyEightsEnv

        env = CrazyEightsEnv(max_steps=200)
        env.reset(seed=5)
        terminated = truncated = False
        steps = 0

        while not (terminated or truncated):
            _, _, terminated, truncated, info = env.step(env.sample_action())
            steps += 1
            env.state.check_conservation()

        assert steps <= 200
        assert terminated or truncated
        if terminated:
            assert info["winner"] in ("player", "ai")

    def test_truncation(self):
        from env import CrazyEightsEnv, SUIT_ACTION_OFFSET

        env = CrazyEightsEnv(max_steps=3)
        env.reset(seed=1)
        results = [env.step(SUIT_ACTION_OFFSET) for _ in range(3)]
        assert [r[3] for r in results] == [False, False, True]

    def test_render(self):
        from env import CrazyEightsEnv

        env = CrazyEightsEnv(render_mode="ansi")
        env.reset(seed=1)
        text = env.render()
        assert "Status: playing" in text
        assert "deck: 35 cards" in text

    def test_make_env(self):
        from env import make_env, CrazyEightsEnv

        assert isinstance(make_env(), CrazyEightsEnv)
        with pytest.raises(ValueError):
            make_env("Uno-v0")


class TestWrappers:
    """包装器测试"""

    def test_flatten(self):
        from env import CrazyEightsEnv, FlattenObservationWrapper

        env = FlattenObservationWrapper(CrazyEightsEnv())
        obs, _ = env.reset(seed=0)
        assert obs.shape == (116,)
        assert env.observation_space.shape == (116,)
        assert obs.dtype == np.float32

    def test_action_mask(self):
        from env import CrazyEightsEnv, LegalActionMaskWrapper

        env = LegalActionMaskWrapper(CrazyEightsEnv())
        _, info = env.reset(seed=0)
        assert np.array_equal(info["action_mask"], info["legal_action_mask"])

    def test_record_statistics(self):
        from env import CrazyEightsEnv, wrap_env

        env = wrap_env(CrazyEightsEnv(max_steps=50), flatten_obs=True)
        _, info = env.reset(seed=2)
        done = False
        while not done:
            action = int(np.flatnonzero(info["action_mask"])[0])
            _, _, terminated, truncated, info = env.step(action)
            done = terminated or truncated

        assert "episode" in info
        assert info["episode"]["l"] <= 50
        assert info["episode"]["invalid"] == 0
