#!/usr/bin/env python3
"""
终端对战脚本

Usage:
    python scripts/play.py                 # 与电脑对战
    python scripts/play.py --speed 0.5     # 电脑节奏加快一倍
    python scripts/play.py --watch --games 3   # 规则智能体代替你出牌
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core import (
    Card,
    GameConfig,
    GameState,
    ManualScheduler,
    Status,
    Suit,
    SUITS,
    Turn,
    TurnCoordinator,
    cards_to_str,
    legal_actions,
    sort_hand,
)
from core.actions import ActionType
from env.observation import ObservationBuilder, get_action_encoder
from evaluation import RuleBasedAgent

logger = logging.getLogger(__name__)

RULES_TEXT = """
游戏规则
------------------------------------------------------------
1. 每人 8 张牌，弃牌堆翻开一张 (不会是 8)。你先出。
2. 出的牌必须与当前花色相同，或与堆顶点数相同。
3. 8 是万能牌，随时可出，出完后指定新的花色。
4. 没有牌可出 (或不想出) 时摸一张牌:
   摸到的牌不能出则回合结束，能出则可以继续出牌。
5. 摸牌堆空了再摸牌会直接跳过回合。
6. 先出完手牌的一方获胜。
------------------------------------------------------------
"""

HELP_TEXT = "输入编号出牌, d 摸牌, r 规则, n 重新开始, h 回首页, q 退出"

# 观战模式下摸牌堆耗尽后可能无限跳过回合
MAX_WATCH_STEPS = 1000


class QuitGame(Exception):
    """玩家选择退出"""


def parse_args():
    parser = argparse.ArgumentParser(description="Crazy Eights Play")

    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    parser.add_argument("--config", type=str, help="GameConfig JSON file")
    parser.add_argument("--speed", type=float, default=1.0, help="Scale factor for AI delays")
    parser.add_argument("--watch", action="store_true", help="Let the rule-based agent play your seat")
    parser.add_argument("--games", type=int, default=1, help="Number of games in watch mode")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")

    return parser.parse_args()


def load_config(args) -> GameConfig:
    """读取配置，命令行参数覆盖文件"""
    config = GameConfig.from_json(args.config) if args.config else GameConfig()
    if args.seed is not None:
        config.seed = args.seed
    if args.speed != 1.0:
        config = config.scaled(args.speed)
    return config


def print_game_state(state: GameState) -> List[Card]:
    """打印牌桌，返回按显示顺序排列的手牌"""
    print("\n" + "=" * 60)
    suit = state.current_suit.symbol if state.current_suit else "-"
    print(f"堆顶: {state.top_discard}   当前花色: {suit}   摸牌堆: {len(state.deck)} 张")
    print(f"AI 手牌数: {len(state.ai_hand)}")
    print("-" * 60)
    print("你的手牌:")
    hand = sort_hand(state.player_hand)
    for i, card in enumerate(hand):
        print(f"  {i}: {card}")
    print("=" * 60)
    return hand


def wait_for_scheduler(coordinator: TurnCoordinator):
    """按真实时间等待并执行下一个延迟回调"""
    scheduler = coordinator.scheduler
    delay = scheduler.next_delay()
    if delay is None:
        return
    if delay > 0:
        time.sleep(delay)
    scheduler.advance(delay)


def prompt(text: str) -> str:
    try:
        return input(text).strip().lower()
    except EOFError:
        raise QuitGame()


def choose_suit_interactive(coordinator: TurnCoordinator) -> Optional[str]:
    """
    选花色提示 (同样支持重开和回首页)

    Returns:
        "home" 表示回首页，其他情况返回 None
    """
    options = "  ".join(f"{i + 1}:{suit.symbol}" for i, suit in enumerate(SUITS))
    while True:
        choice = prompt(f"\n你打出了 8，请选择花色 ({options}, n 重新开始, h 回首页): ")
        if choice == "q":
            raise QuitGame()
        if choice == "n":
            coordinator.restart()
            return None
        if choice == "h":
            coordinator.go_home()
            return "home"
        if choice.isdigit() and 1 <= int(choice) <= len(SUITS):
            suit = SUITS[int(choice) - 1]
        elif choice in [s.value for s in Suit]:
            suit = Suit(choice)
        else:
            print("无效选择，请重试")
            continue
        if coordinator.select_suit(suit):
            return None


def player_turn(coordinator: TurnCoordinator) -> Optional[str]:
    """
    处理一次人类输入

    Returns:
        "home" 表示回首页，其他情况返回 None
    """
    state = coordinator.state
    if state.status == Status.SUIT_SELECTION:
        return choose_suit_interactive(coordinator)

    hand = print_game_state(state)
    while True:
        choice = prompt(f"\n{HELP_TEXT}\n> ")
        if choice == "q":
            raise QuitGame()
        if choice == "r":
            print(RULES_TEXT)
            continue
        if choice == "n":
            coordinator.restart()
            return None
        if choice == "h":
            coordinator.go_home()
            return "home"
        if choice == "d":
            coordinator.draw()
            return None
        if choice.isdigit() and int(choice) < len(hand):
            card = hand[int(choice)]
            if coordinator.play_card(card):
                return None
            print(f"{card} 不能出: 需要花色 {state.current_suit.symbol} 或点数 {state.top_discard.rank.value}")
            continue
        print("无效输入，请重试")


def agent_turn(coordinator: TurnCoordinator, agent: RuleBasedAgent):
    """规则智能体代替人类行动"""
    state = coordinator.state
    time.sleep(coordinator.config.ai_think_delay)

    legal = legal_actions(state, Turn.PLAYER)
    obs = ObservationBuilder().build(state, Turn.PLAYER).to_dict()
    action = get_action_encoder().decode(agent.act(obs, legal), state.player_hand)

    if action.action_type == ActionType.PLAY:
        coordinator.play_card(action.card)
    elif action.action_type == ActionType.SELECT_SUIT:
        coordinator.select_suit(action.suit)
    else:
        coordinator.draw()


def game_over_screen(coordinator: TurnCoordinator) -> str:
    """
    游戏结束提示

    Returns:
        "again" 或 "home"
    """
    state = coordinator.state
    print("\n" + "=" * 60)
    print(state.last_action)
    print(f"AI 剩余手牌: {cards_to_str(state.ai_hand) or '无'}")
    print("=" * 60)
    while True:
        choice = prompt("n 再来一局, h 回首页, q 退出: ")
        if choice == "n":
            return "again"
        if choice == "h":
            return "home"
        if choice == "q":
            raise QuitGame()


def play_game(coordinator: TurnCoordinator, watch_agent: Optional[RuleBasedAgent] = None) -> str:
    """
    运行一局直到结束或回首页

    Returns:
        "over" 或 "home"
    """
    while True:
        state = coordinator.state
        if state.status == Status.HOME:
            return "home"
        if state.is_finished:
            return "over"
        if watch_agent is not None and state.step_count >= MAX_WATCH_STEPS:
            logger.warning("Stopped after %d steps without a winner", state.step_count)
            return "over"

        if coordinator.awaiting_player:
            if watch_agent is not None:
                agent_turn(coordinator, watch_agent)
            elif player_turn(coordinator) == "home":
                return "home"
        else:
            wait_for_scheduler(coordinator)


def home_screen() -> str:
    """首页"""
    print("\n" + "=" * 60)
    print(GameState.home().last_action)
    print("=" * 60)
    while True:
        choice = prompt("1 开始游戏, 2 游戏规则, q 退出: ")
        if choice == "1":
            return "start"
        if choice == "2":
            print(RULES_TEXT)
        elif choice == "q":
            raise QuitGame()


def show_update(state: GameState):
    """状态变化通知"""
    if state.status in (Status.PLAYING, Status.SUIT_SELECTION):
        print(f"  >> {state.last_action}")


def watch(coordinator: TurnCoordinator, games: int):
    """观看规则智能体与电脑对战"""
    agent = RuleBasedAgent("watch")
    wins = 0
    for game_idx in range(games):
        print(f"\n{'=' * 60}\nGame {game_idx + 1}/{games}\n{'=' * 60}")
        if game_idx == 0:
            coordinator.start()
        else:
            coordinator.restart()
        play_game(coordinator, watch_agent=agent)
        state = coordinator.state
        print(state.last_action)
        if state.winner is Turn.PLAYER:
            wins += 1
    print(f"\n规则智能体胜率: {wins}/{games}")


def interactive(coordinator: TurnCoordinator):
    """人类对战主循环"""
    while True:
        if coordinator.state.status == Status.HOME:
            home_screen()
            coordinator.start()

        result = play_game(coordinator)
        if result == "over":
            if game_over_screen(coordinator) == "again":
                coordinator.restart()
            else:
                coordinator.go_home()


def main():
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = load_config(args)
    logger.info(f"Config: {config.to_dict()}")

    coordinator = TurnCoordinator(
        scheduler=ManualScheduler(),
        config=config,
        on_update=show_update,
    )

    print("=" * 60)
    print("Crazy Eights 疯狂 8 点")
    print("=" * 60)

    try:
        if args.watch:
            watch(coordinator, args.games)
        else:
            interactive(coordinator)
    except (QuitGame, KeyboardInterrupt):
        print("\n退出游戏")


if __name__ == "__main__":
    main()
