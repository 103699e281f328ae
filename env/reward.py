"""
奖励函数

支持两种奖励设计:
- 终局奖励 (sparse)
- 过程奖励 (shaped): 终局奖励 + 手牌减少的小奖励
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.state import GameState, Status, Turn


class RewardType(Enum):
    """奖励类型"""
    SPARSE = "sparse"  # 仅终局奖励
    SHAPED = "shaped"  # 过程奖励


@dataclass
class RewardConfig:
    """奖励配置"""
    reward_type: RewardType = RewardType.SPARSE
    win_reward: float = 1.0
    lose_reward: float = -1.0
    invalid_penalty: float = -0.1  # 非法动作惩罚
    card_bonus: float = 0.01       # 每少一张手牌的奖励 (shaped)
    draw_penalty: float = 0.0      # 每多一张手牌的惩罚 (shaped)


class RewardCalculator:
    """
    奖励计算器

    根据配置计算不同类型的奖励
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        state: GameState,
        prev_state: Optional[GameState] = None,
        player: Turn = Turn.PLAYER,
    ) -> float:
        """
        计算奖励

        Args:
            state: 当前状态
            prev_state: 前一状态 (用于 shaped 奖励)
            player: 计算奖励的一方

        Returns:
            奖励值
        """
        if self.config.reward_type == RewardType.SHAPED:
            return self._shaped_reward(state, prev_state, player)
        return self._sparse_reward(state, player)

    def _sparse_reward(self, state: GameState, player: Turn) -> float:
        """
        稀疏奖励：仅在游戏结束时给予

        Returns:
            胜利: win_reward, 失败: lose_reward, 其他: 0
        """
        if state.status != Status.GAME_OVER:
            return 0.0
        if state.winner is player:
            return self.config.win_reward
        return self.config.lose_reward

    def _shaped_reward(
        self,
        state: GameState,
        prev_state: Optional[GameState],
        player: Turn,
    ) -> float:
        """
        过程奖励

        奖励组成:
        1. 终局奖励
        2. 手牌数量变化
        """
        if state.status == Status.GAME_OVER:
            return self._sparse_reward(state, player)

        reward = 0.0
        if prev_state is not None:
            delta = len(prev_state.get_hand(player)) - len(state.get_hand(player))
            if delta > 0:
                reward += delta * self.config.card_bonus
            elif delta < 0:
                reward += delta * self.config.draw_penalty
        return reward

    def invalid_action(self) -> float:
        """非法动作的奖励"""
        return self.config.invalid_penalty


def create_reward_calculator(
    reward_type: str = "sparse",
    **kwargs
) -> RewardCalculator:
    """
    工厂函数：创建奖励计算器

    Args:
        reward_type: 奖励类型 ("sparse", "shaped")
        **kwargs: 其他配置参数

    Returns:
        RewardCalculator 实例
    """
    config = RewardConfig(
        reward_type=RewardType(reward_type),
        **kwargs
    )
    return RewardCalculator(config)
