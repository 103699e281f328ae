"""
游戏配置

定义回合节奏等可调参数
"""
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json


@dataclass
class GameConfig:
    """
    游戏配置

    Attributes:
        ai_think_delay: 电脑出牌前的思考延迟 (秒)
        suit_choice_delay: 电脑打出 8 后选花色的延迟 (秒)
        draw_follow_up_delay: 摸牌后续动作 (交出回合/出摸到的牌) 的延迟 (秒)
        seed: 洗牌随机种子
    """
    ai_think_delay: float = 1.5
    suit_choice_delay: float = 1.0
    draw_follow_up_delay: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ("ai_think_delay", "suit_choice_delay", "draw_follow_up_delay"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    def scaled(self, factor: float) -> 'GameConfig':
        """按比例缩放所有延迟"""
        return GameConfig(
            ai_think_delay=self.ai_think_delay * factor,
            suit_choice_delay=self.suit_choice_delay * factor,
            draw_follow_up_delay=self.draw_follow_up_delay * factor,
            seed=self.seed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'GameConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'GameConfig':
        """从 JSON 文件加载"""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)
