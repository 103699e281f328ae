"""
Core Layer - 纯游戏逻辑 (无 ML 依赖)

Modules:
    cards: 牌定义与编码
    state: 游戏状态
    rules: 规则引擎
    actions: 动作类型与生成
    policy: 电脑策略
    game: 同步对外接口
    coordinator: 带延迟调度的回合协调器
    config: 游戏配置
    errors: 错误类型
"""
from .cards import (
    Card,
    Suit,
    Rank,
    SUITS,
    RANKS,
    WILD_RANK,
    DECK_SIZE,
    create_deck,
    make_rng,
    shuffle,
    card_index,
    cards_to_array,
    cards_to_str,
    count_suits,
    find_card,
    sort_hand,
)

from .errors import (
    CrazyEightsError,
    InvalidMove,
    IllegalStateTransition,
    InvariantViolation,
)

from .config import GameConfig

from .state import (
    Status,
    Turn,
    GameState,
    HAND_SIZE,
)

from .rules import RuleEngine, DrawResult

from .actions import (
    ActionType,
    Action,
    ActionGenerator,
    legal_actions,
)

from .game import (
    new_game,
    is_playable,
    play,
    select_suit,
    draw,
    drive_ai,
    apply_action,
)

from .coordinator import (
    TimerHandle,
    Scheduler,
    ManualScheduler,
    TurnCoordinator,
)

__all__ = [
    # cards
    "Card",
    "Suit",
    "Rank",
    "SUITS",
    "RANKS",
    "WILD_RANK",
    "DECK_SIZE",
    "create_deck",
    "make_rng",
    "shuffle",
    "card_index",
    "cards_to_array",
    "cards_to_str",
    "count_suits",
    "find_card",
    "sort_hand",
    # errors
    "CrazyEightsError",
    "InvalidMove",
    "IllegalStateTransition",
    "InvariantViolation",
    # config
    "GameConfig",
    # state
    "Status",
    "Turn",
    "GameState",
    "HAND_SIZE",
    # rules
    "RuleEngine",
    "DrawResult",
    # actions
    "ActionType",
    "Action",
    "ActionGenerator",
    "legal_actions",
    # game
    "new_game",
    "is_playable",
    "play",
    "select_suit",
    "draw",
    "drive_ai",
    "apply_action",
    # coordinator
    "TimerHandle",
    "Scheduler",
    "ManualScheduler",
    "TurnCoordinator",
]
