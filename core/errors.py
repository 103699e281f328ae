"""
错误类型

- InvalidMove / IllegalStateTransition: 可预期的拒绝，调用方视为 no-op
- InvariantViolation: 程序错误级别，不应被捕获
"""


class CrazyEightsError(Exception):
    """所有规则错误的基类"""


class InvalidMove(CrazyEightsError, ValueError):
    """非法出牌: 牌不在手中、不可出、不在自己回合或状态不对"""


class IllegalStateTransition(CrazyEightsError, ValueError):
    """非法状态迁移: 如非选花色阶段选花色、游戏结束后继续行动"""


class InvariantViolation(CrazyEightsError, RuntimeError):
    """不变量被破坏 (致命)"""
