"""
环境包装器

提供常用的环境增强功能
"""
from typing import Dict, Tuple

import gymnasium as gym
from gymnasium import Wrapper
import numpy as np

from .observation import get_action_encoder


class FlattenObservationWrapper(Wrapper):
    """
    将字典观测展平为单一向量

    用于不支持字典观测的算法
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)

        flat_dim = sum(
            int(np.prod(space.shape)) for space in env.observation_space.spaces.values()
        )

        self.observation_space = gym.spaces.Box(
            low=0.0,
            high=1.0,
            shape=(flat_dim,),
            dtype=np.float32,
        )

    def observation(self, obs: Dict[str, np.ndarray]) -> np.ndarray:
        """展平观测 (按观测空间的键顺序)"""
        keys = self.env.observation_space.spaces.keys()
        return np.concatenate([obs[k].flatten() for k in keys]).astype(np.float32)

    def reset(self, **kwargs) -> Tuple[np.ndarray, Dict]:
        obs, info = self.env.reset(**kwargs)
        return self.observation(obs), info

    def step(self, action) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        obs, reward, terminated, truncated, info = self.env.step(action)
        return self.observation(obs), reward, terminated, truncated, info


class LegalActionMaskWrapper(Wrapper):
    """
    在 info 中添加合法动作掩码 (info["action_mask"])

    用于支持 action masking 的算法
    """

    def reset(self, **kwargs) -> Tuple[Dict, Dict]:
        obs, info = self.env.reset(**kwargs)
        info["action_mask"] = self._get_action_mask()
        return obs, info

    def step(self, action) -> Tuple[Dict, float, bool, bool, Dict]:
        obs, reward, terminated, truncated, info = self.env.step(action)
        info["action_mask"] = self._get_action_mask()
        return obs, reward, terminated, truncated, info

    def _get_action_mask(self) -> np.ndarray:
        """获取动作掩码，游戏结束后全为 0"""
        legal = self.env.unwrapped.get_legal_actions()
        return get_action_encoder().build_legal_mask(legal)


class RecordEpisodeStatistics(Wrapper):
    """
    记录回合统计信息
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        self._episode_reward = 0.0
        self._episode_length = 0
        self._invalid_actions = 0

    def reset(self, **kwargs) -> Tuple[Dict, Dict]:
        obs, info = self.env.reset(**kwargs)
        self._episode_reward = 0.0
        self._episode_length = 0
        self._invalid_actions = 0
        return obs, info

    def step(self, action) -> Tuple[Dict, float, bool, bool, Dict]:
        obs, reward, terminated, truncated, info = self.env.step(action)

        self._episode_reward += reward
        self._episode_length += 1
        if "error" in info:
            self._invalid_actions += 1

        if terminated or truncated:
            info["episode"] = {
                "r": self._episode_reward,
                "l": self._episode_length,
                "invalid": self._invalid_actions,
                "winner": info.get("winner"),
            }

        return obs, reward, terminated, truncated, info


def wrap_env(
    env: gym.Env,
    flatten_obs: bool = False,
    action_mask: bool = True,
    record_stats: bool = True,
) -> gym.Env:
    """
    应用常用包装器组合

    Args:
        env: 基础环境
        flatten_obs: 是否展平观测
        action_mask: 是否添加动作掩码
        record_stats: 是否记录统计

    Returns:
        包装后的环境
    """
    if record_stats:
        env = RecordEpisodeStatistics(env)

    if action_mask:
        env = LegalActionMaskWrapper(env)

    if flatten_obs:
        env = FlattenObservationWrapper(env)

    return env
