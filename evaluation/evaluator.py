"""
评估器

评估智能体对内置电脑的表现，以及两个智能体之间的对战
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

import numpy as np

from core import policy
from core.actions import Action, ActionType, legal_actions as get_legal_actions
from core.cards import SUITS, Suit, make_rng
from core.game import apply_action
from core.state import GameState, Turn
from env.crazy_eights_env import CrazyEightsEnv
from env.observation import ObservationBuilder, get_action_encoder

from .metrics import GameMetrics, MetricsCollector

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """评估结果"""
    win_rate: float
    avg_reward: float
    avg_length: float
    games_played: int
    loss_rate: float = 0.0
    unfinished_rate: float = 0.0
    extra_stats: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"EvalResult(win_rate={self.win_rate:.2%}, "
            f"avg_reward={self.avg_reward:.2f}, "
            f"games={self.games_played})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "win_rate": self.win_rate,
            "loss_rate": self.loss_rate,
            "unfinished_rate": self.unfinished_rate,
            "avg_reward": self.avg_reward,
            "avg_length": self.avg_length,
            "games_played": self.games_played,
            **self.extra_stats,
        }


class Agent:
    """智能体基类"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(self, obs: Dict[str, Any], legal_actions: List[Action]) -> int:
        """
        选择动作

        Args:
            obs: 观测字典
            legal_actions: 合法动作列表

        Returns:
            动作索引
        """
        raise NotImplementedError

    def reset(self):
        """重置状态"""
        pass


class RandomAgent(Agent):
    """随机智能体"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self._rng = make_rng(seed)

    def act(self, obs: Dict[str, Any], legal_actions: List[Action]) -> int:
        encoder = get_action_encoder()
        if not legal_actions:
            return encoder.encode(Action.draw())
        idx = int(self._rng.integers(len(legal_actions)))
        return encoder.encode(legal_actions[idx])


class RuleBasedAgent(Agent):
    """
    规则智能体

    与内置电脑相同的策略: 先出非 8，只剩 8 时出 8，
    选手牌最多的花色，无牌可出时摸牌
    """

    def __init__(self, name: str = "rule"):
        super().__init__(name)

    def act(self, obs: Dict[str, Any], legal_actions: List[Action]) -> int:
        encoder = get_action_encoder()
        if not legal_actions:
            return encoder.encode(Action.draw())

        suit_actions = [a for a in legal_actions if a.action_type == ActionType.SELECT_SUIT]
        if suit_actions:
            return encoder.encode(Action.select_suit(self._best_suit(obs["hand"])))

        plays = [a.card for a in legal_actions if a.is_play]
        for card in plays:
            if not card.is_wild:
                return encoder.encode(Action.play(card))
        if plays:
            return encoder.encode(Action.play(plays[0]))
        return encoder.encode(Action.draw())

    def _best_suit(self, hand: np.ndarray) -> Suit:
        counts = np.asarray(hand).reshape(len(SUITS), -1).sum(axis=1)
        if not counts.any():
            return policy.DEFAULT_SUIT
        # argmax 取第一个最大值，与花色枚举顺序一致
        return SUITS[int(np.argmax(counts))]


class Evaluator:
    """
    评估器

    评估智能体在环境中的表现
    """

    def __init__(
        self,
        env_fn: Optional[Callable[[], CrazyEightsEnv]] = None,
        max_turns: int = 500,
    ):
        """
        Args:
            env_fn: 环境工厂 (默认 CrazyEightsEnv)
            max_turns: compare 中每局的最大动作数
        """
        self.env_fn = env_fn or CrazyEightsEnv
        self.max_turns = max_turns

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        seed: Optional[int] = None,
        verbose: bool = False,
    ) -> EvalResult:
        """
        评估智能体 (坐人类座位，对手为内置电脑)

        Args:
            agent: 待评估智能体
            n_games: 游戏数量
            seed: 第 i 局使用 seed + i
            verbose: 是否输出进度

        Returns:
            评估结果
        """
        env = self.env_fn()
        collector = MetricsCollector(agent_seat=Turn.PLAYER.value)

        for game_idx in range(n_games):
            agent.reset()
            game_seed = None if seed is None else seed + game_idx
            obs, info = env.reset(seed=game_seed)
            done = False
            episode_reward = 0.0
            episode_length = 0
            invalid = 0

            while not done:
                action = agent.act(obs, info["legal_actions"])
                obs, reward, terminated, truncated, info = env.step(action)
                done = terminated or truncated
                episode_reward += reward
                episode_length += 1
                if "error" in info:
                    invalid += 1

            state = env.state
            collector.add_game(GameMetrics(
                winner=info.get("winner"),
                length=episode_length,
                reward=episode_reward,
                cards_left=len(state.player_hand),
                opponent_cards_left=len(state.ai_hand),
                invalid_actions=invalid,
            ))

            if verbose and (game_idx + 1) % 10 == 0:
                running = collector.compute_metrics()
                logger.info(f"Game {game_idx + 1}/{n_games}, Win rate: {running['win_rate']:.2%}")

        env.close()
        metrics = collector.compute_metrics()
        if not metrics:
            return EvalResult(win_rate=0.0, avg_reward=0.0, avg_length=0.0, games_played=0)

        return EvalResult(
            win_rate=metrics["win_rate"],
            avg_reward=metrics["avg_reward"],
            avg_length=metrics["avg_length"],
            games_played=n_games,
            loss_rate=metrics["loss_rate"],
            unfinished_rate=metrics["unfinished_rate"],
            extra_stats={
                "avg_cards_left": metrics["avg_cards_left"],
                "avg_opponent_cards_left": metrics["avg_opponent_cards_left"],
                "invalid_action_rate": metrics["invalid_action_rate"],
            },
        )

    def compare(
        self,
        agent1: Agent,
        agent2: Agent,
        n_games: int = 100,
        seed: Optional[int] = None,
    ) -> Dict[str, float]:
        """
        两个智能体直接对战

        双方轮流坐先手座位 (人类座位)；后手座位沿用电脑的
        摸到可出牌即打出、打出 8 立即选花色的规则

        Args:
            agent1: 智能体1
            agent2: 智能体2
            n_games: 游戏数量
            seed: 第 i 局使用 seed + i

        Returns:
            对比结果
        """
        builder = ObservationBuilder()
        encoder = get_action_encoder()
        rng = make_rng(seed)

        agent1_wins = 0
        agent2_wins = 0
        unfinished = 0

        for game_idx in range(n_games):
            agent1.reset()
            agent2.reset()
            if game_idx % 2 == 0:
                seats = {Turn.PLAYER: agent1, Turn.AI: agent2}
            else:
                seats = {Turn.PLAYER: agent2, Turn.AI: agent1}

            state = GameState.initial(rng=rng)
            for _ in range(self.max_turns):
                if state.is_finished:
                    break
                actor = state.current_turn
                legal = get_legal_actions(state, actor)
                obs = builder.build(state, actor).to_dict()
                idx = seats[actor].act(obs, legal)
                action = encoder.decode(idx, state.get_hand(actor))
                if action is None or action not in legal:
                    logger.debug("%s chose invalid action %s, drawing instead", seats[actor].name, idx)
                    action = Action.draw()
                state = apply_action(state, action, actor)

            if not state.is_finished:
                unfinished += 1
            elif seats[state.winner] is agent1:
                agent1_wins += 1
            else:
                agent2_wins += 1

        return {
            "agent1_wins": agent1_wins,
            "agent2_wins": agent2_wins,
            "unfinished": unfinished,
            "agent1_win_rate": agent1_wins / n_games if n_games > 0 else 0.0,
            "agent2_win_rate": agent2_wins / n_games if n_games > 0 else 0.0,
        }
