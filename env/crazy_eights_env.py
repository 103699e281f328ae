"""
疯狂 8 点 Gymnasium 环境

遵循标准 Gymnasium API。智能体坐在人类玩家的位置，
内置电脑在智能体交出回合后同步行动 (无延迟)。
"""
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from core.actions import Action, legal_actions
from core.cards import DECK_SIZE, SUITS, cards_to_str
from core.errors import IllegalStateTransition
from core.game import apply_action, drive_ai
from core.state import GameState, Status, Turn

from .observation import STATUS_ORDER, ObservationBuilder, get_action_encoder
from .reward import RewardCalculator, RewardConfig, RewardType

logger = logging.getLogger(__name__)


class CrazyEightsEnv(gym.Env):
    """
    疯狂 8 点 Gymnasium 环境

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info

    摸牌堆耗尽后双方可能一直摸牌跳过，因此超过 max_steps 步会截断
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "CrazyEights-v1",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        reward_type: str = "sparse",
        reward_config: Optional[RewardConfig] = None,
        max_steps: int = 500,
        seed: Optional[int] = None,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            reward_type: 奖励类型 ("sparse", "shaped")，reward_config 为空时使用
            reward_config: 完整奖励配置
            max_steps: 每局最大步数
            seed: 首次 reset 的随机种子
        """
        super().__init__()

        self.render_mode = render_mode
        self.max_steps = max_steps
        self._seed = seed

        self._obs_builder = ObservationBuilder()
        self._reward_calculator = RewardCalculator(
            reward_config or RewardConfig(reward_type=RewardType(reward_type))
        )
        self._action_encoder = get_action_encoder()

        self._state: Optional[GameState] = None
        self._prev_state: Optional[GameState] = None
        self._steps = 0

        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        self.action_space = spaces.Discrete(self._action_encoder.num_actions)

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "top_card": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "current_suit": spaces.Box(0, 1, shape=(len(SUITS),), dtype=np.float32),
            "status": spaces.Box(0, 1, shape=(len(STATUS_ORDER),), dtype=np.float32),
            "cards_left": spaces.Box(0, 1, shape=(3,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境

        Args:
            seed: 随机种子
            options: 额外选项 (未使用)

        Returns:
            (observation, info) 元组
        """
        if seed is None:
            seed, self._seed = self._seed, None
        super().reset(seed=seed)

        self._state = GameState.initial(rng=self.np_random)
        self._prev_state = None
        self._steps = 0

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: Union[int, Action],
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行智能体动作，然后让电脑行动直到轮回智能体或游戏结束

        Args:
            action: 动作索引或 Action 对象

        Returns:
            (observation, reward, terminated, truncated, info) 元组

        Raises:
            IllegalStateTransition: 未 reset 或本局已结束
        """
        if self._state is None:
            raise IllegalStateTransition("Environment not reset. Call reset() first.")
        if self._state.is_finished:
            raise IllegalStateTransition("Episode is over. Call reset() first.")

        self._prev_state = self._state
        self._steps += 1
        truncated = self._steps >= self.max_steps

        concrete_action = self._decode_action(action)

        if concrete_action is None or not self._is_valid_action(concrete_action):
            # 非法动作：给予惩罚并保持状态
            obs = self._build_observation()
            info = self._build_info()
            info["error"] = f"Invalid action: {action}"
            return obs, self._reward_calculator.invalid_action(), False, truncated, info

        state = apply_action(self._state, concrete_action, Turn.PLAYER)
        self._state = self._run_opponent(state)
        self._state.check_conservation()

        obs = self._build_observation()
        reward = self._reward_calculator.compute(self._state, self._prev_state, Turn.PLAYER)
        terminated = self._state.is_finished
        info = self._build_info()

        if truncated and not terminated:
            logger.debug("Episode truncated after %d steps", self._steps)

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated and not terminated, info

    def _run_opponent(self, state: GameState) -> GameState:
        """电脑连续行动直到交出回合"""
        while state.status == Status.PLAYING and state.current_turn is Turn.AI:
            next_state = drive_ai(state)
            if next_state is state:
                break
            state = next_state
        return state

    def _decode_action(self, action: Union[int, Action]) -> Optional[Action]:
        """解码动作"""
        if isinstance(action, Action):
            return action
        if isinstance(action, (int, np.integer)):
            return self._action_encoder.decode(int(action), self._state.player_hand)
        raise ValueError(f"Invalid action type: {type(action)}")

    def _is_valid_action(self, action: Action) -> bool:
        """验证动作合法性"""
        return action in legal_actions(self._state, Turn.PLAYER)

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """构建观测"""
        return self._obs_builder.build(self._state, Turn.PLAYER).to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        actions = legal_actions(self._state, Turn.PLAYER)
        state = self._state

        return {
            "current_turn": state.current_turn.value,
            "status": state.status.value,
            "legal_actions": actions,
            "legal_action_mask": self._action_encoder.build_legal_mask(actions),
            "legal_action_indices": self._action_encoder.get_legal_action_indices(actions),
            "winner": state.winner.value if state.winner else None,
            "step_count": state.step_count,
            "last_action": state.last_action,
        }

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode in ("ansi", "human"):
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染"""
        state = self._state
        lines = ["=" * 50]
        lines.append(f"Status: {state.status.value}")
        lines.append(f"Turn: {state.current_turn.value}")
        lines.append(f"Top: {state.top_discard}  Suit: "
                     f"{state.current_suit.symbol if state.current_suit else '-'}")
        lines.append(f"player: {cards_to_str(state.player_hand)} ({len(state.player_hand)})")
        lines.append(f"ai: {len(state.ai_hand)} cards")
        lines.append(f"deck: {len(state.deck)} cards")
        lines.append(f"Last Action: {state.last_action}")
        if state.is_finished:
            lines.append(f"Winner: {state.winner.value}")
        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def state(self) -> Optional[GameState]:
        """获取当前状态 (用于调试)"""
        return self._state

    def get_legal_actions(self) -> List[Action]:
        """获取当前合法动作"""
        if self._state is None:
            return []
        return legal_actions(self._state, Turn.PLAYER)

    def sample_action(self) -> int:
        """随机采样一个合法动作的索引"""
        indices = self._action_encoder.get_legal_action_indices(self.get_legal_actions())
        if not indices:
            return self._action_encoder.encode(Action.draw())
        return int(indices[self.np_random.integers(len(indices))])


def make_env(
    env_id: str = "CrazyEights-v1",
    **kwargs
) -> CrazyEightsEnv:
    """
    工厂函数：创建环境

    Args:
        env_id: 环境 ID
        **kwargs: 环境参数

    Returns:
        CrazyEightsEnv 实例
    """
    if env_id != CrazyEightsEnv.metadata["name"]:
        raise ValueError(f"Unknown env id: {env_id}")
    return CrazyEightsEnv(**kwargs)
