"""
评估指标

定义和计算各种评估指标
"""
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np


@dataclass
class GameMetrics:
    """
    单局游戏指标

    Attributes:
        winner: 赢家 ("player" / "ai")，未分胜负为 None
        length: 智能体决策步数
        reward: 智能体累计奖励
        cards_left: 结束时智能体剩余手牌
        opponent_cards_left: 结束时对手剩余手牌
        invalid_actions: 非法动作次数
    """
    winner: Optional[str]
    length: int
    reward: float = 0.0
    cards_left: int = 0
    opponent_cards_left: int = 0
    invalid_actions: int = 0

    @property
    def finished(self) -> bool:
        return self.winner is not None


class RunningStats:
    """
    运行时统计

    在线计算均值和方差 (Welford)
    """

    def __init__(self):
        self.n = 0
        self.mean = 0.0
        self.M2 = 0.0
        self.min_val = float('inf')
        self.max_val = float('-inf')

    def update(self, x: float):
        """更新统计"""
        self.n += 1
        delta = x - self.mean
        self.mean += delta / self.n
        delta2 = x - self.mean
        self.M2 += delta * delta2
        self.min_val = min(self.min_val, x)
        self.max_val = max(self.max_val, x)

    @property
    def variance(self) -> float:
        """样本方差"""
        if self.n < 2:
            return 0.0
        return self.M2 / (self.n - 1)

    @property
    def std(self) -> float:
        """标准差"""
        return float(np.sqrt(self.variance))

    def to_dict(self) -> Dict[str, float]:
        """转换为字典"""
        return {
            "count": self.n,
            "mean": self.mean,
            "std": self.std,
            "min": self.min_val if self.n > 0 else 0.0,
            "max": self.max_val if self.n > 0 else 0.0,
        }


class MetricsCollector:
    """
    指标收集器

    以智能体 (人类座位) 的视角汇总多局结果
    """

    def __init__(self, agent_seat: str = "player"):
        self.agent_seat = agent_seat
        self.games: List[GameMetrics] = []
        self.lengths = RunningStats()
        self.rewards = RunningStats()

    def add_game(self, metrics: GameMetrics):
        """添加游戏指标"""
        self.games.append(metrics)
        self.lengths.update(metrics.length)
        self.rewards.update(metrics.reward)

    def compute_metrics(self) -> Dict[str, float]:
        """
        计算指标

        Returns:
            指标字典，没有对局时为空
        """
        n_games = len(self.games)
        if n_games == 0:
            return {}

        winners = Counter(g.winner for g in self.games)
        wins = winners[self.agent_seat]
        unfinished = winners[None]
        losses = n_games - wins - unfinished

        return {
            "total_games": n_games,
            "win_rate": wins / n_games,
            "loss_rate": losses / n_games,
            "unfinished_rate": unfinished / n_games,
            "avg_length": self.lengths.mean,
            "std_length": self.lengths.std,
            "avg_reward": self.rewards.mean,
            "avg_cards_left": float(np.mean([g.cards_left for g in self.games])),
            "avg_opponent_cards_left": float(np.mean([g.opponent_cards_left for g in self.games])),
            "invalid_action_rate": (
                sum(g.invalid_actions for g in self.games) / max(1, sum(g.length for g in self.games))
            ),
        }

    def reset(self):
        """重置"""
        self.games.clear()
        self.lengths = RunningStats()
        self.rewards = RunningStats()
