#!/usr/bin/env python3
"""
评估脚本

Usage:
    python scripts/evaluate.py --agent rule --games 200
    python scripts/evaluate.py --agent random --reward-type shaped --output result.json
    python scripts/evaluate.py --compare --agent rule --agent2 random --games 100
"""
import argparse
import logging
import sys
from functools import partial
from pathlib import Path
import json

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from env import CrazyEightsEnv
from evaluation import (
    Agent,
    Evaluator,
    RandomAgent,
    RuleBasedAgent,
)

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Crazy Eights Evaluation")

    # 模式
    parser.add_argument("--compare", action="store_true", help="Compare two agents head to head")

    # 智能体
    parser.add_argument("--agent", type=str, default="rule", choices=["random", "rule"],
                        help="Agent to evaluate")
    parser.add_argument("--agent2", type=str, default="random", choices=["random", "rule"],
                        help="Second agent for comparison")

    # 评估参数
    parser.add_argument("--games", type=int, default=100, help="Number of games")
    parser.add_argument("--seed", type=int, default=None, help="Base seed")
    parser.add_argument("--max-steps", type=int, default=500, help="Step limit per game")
    parser.add_argument("--reward-type", type=str, default="sparse", choices=["sparse", "shaped"])

    # 其他
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def create_agent(kind: str, name: str, seed=None) -> Agent:
    """创建智能体"""
    if kind == "rule":
        return RuleBasedAgent(name)
    return RandomAgent(name, seed=seed)


def write_output(path: str, data: dict):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info(f"Results saved to {path}")


def evaluate_single(args):
    """评估单个智能体 (对内置电脑)"""
    logger.info(f"Evaluating agent: {args.agent}")

    agent = create_agent(args.agent, args.agent, seed=args.seed)
    env_fn = partial(CrazyEightsEnv, reward_type=args.reward_type, max_steps=args.max_steps)
    evaluator = Evaluator(env_fn=env_fn, max_turns=args.max_steps)
    result = evaluator.evaluate(
        agent=agent,
        n_games=args.games,
        seed=args.seed,
        verbose=args.verbose,
    )

    logger.info("=" * 50)
    logger.info("Evaluation Results")
    logger.info("=" * 50)
    logger.info(f"Win Rate: {result.win_rate:.2%}")
    logger.info(f"Loss Rate: {result.loss_rate:.2%}")
    logger.info(f"Unfinished Rate: {result.unfinished_rate:.2%}")
    logger.info(f"Average Reward: {result.avg_reward:.2f}")
    logger.info(f"Average Length: {result.avg_length:.1f}")
    logger.info("=" * 50)

    if args.output:
        write_output(args.output, {"agent": args.agent, **result.to_dict()})

    return result


def compare_agents(args):
    """比较两个智能体"""
    logger.info(f"Comparing agents: {args.agent} vs {args.agent2}")

    agent1 = create_agent(args.agent, f"{args.agent}_1", seed=args.seed)
    agent2 = create_agent(args.agent2, f"{args.agent2}_2",
                          seed=None if args.seed is None else args.seed + 1)

    evaluator = Evaluator(max_turns=args.max_steps)
    result = evaluator.compare(agent1, agent2, n_games=args.games, seed=args.seed)

    logger.info("=" * 50)
    logger.info("Comparison Results")
    logger.info("=" * 50)
    logger.info(f"Agent 1 wins: {result['agent1_wins']} ({result['agent1_win_rate']:.2%})")
    logger.info(f"Agent 2 wins: {result['agent2_wins']} ({result['agent2_win_rate']:.2%})")
    logger.info(f"Unfinished: {result['unfinished']}")
    logger.info("=" * 50)

    if args.output:
        write_output(args.output, {"agent1": args.agent, "agent2": args.agent2, **result})

    return result


def main():
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if args.compare:
        compare_agents(args)
    else:
        evaluate_single(args)


if __name__ == "__main__":
    main()
