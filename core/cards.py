"""
牌的定义与编码

疯狂 8 点使用标准 52 张牌 (无大小王):
- 4 种花色: hearts, diamonds, clubs, spades
- 13 种点数: A, 2-10, J, Q, K
- 点数 8 为万能牌
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
import uuid

import numpy as np


class Suit(Enum):
    """花色 (枚举顺序用于平局裁决)"""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


class Rank(Enum):
    """点数"""
    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"


SUITS: Tuple[Suit, ...] = tuple(Suit)
RANKS: Tuple[Rank, ...] = tuple(Rank)

# 万能牌点数
WILD_RANK = Rank.EIGHT

# 花色显示符号
SUIT_SYMBOLS: Dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

# 点数面值 (仅用于显示，规则只比较点数是否相同)
RANK_VALUES: Dict[Rank, int] = {rank: i + 1 for i, rank in enumerate(RANKS)}

DECK_SIZE = len(SUITS) * len(RANKS)


def _new_card_id(suit: Suit, rank: Rank) -> str:
    return f"{suit.value}-{rank.value}-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Card:
    """
    不可变的牌

    Attributes:
        suit: 花色
        rank: 点数
        id: 唯一标识 (只用于区分实例，不参与规则判断)
    """
    suit: Suit
    rank: Rank
    id: str = field(default="")

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, "id", _new_card_id(self.suit, self.rank))

    @property
    def value(self) -> int:
        return RANK_VALUES[self.rank]

    @property
    def is_wild(self) -> bool:
        return self.rank == WILD_RANK

    @property
    def key(self) -> Tuple[Suit, Rank]:
        """(花色, 点数) 键，忽略 id"""
        return (self.suit, self.rank)

    def __str__(self) -> str:
        return f"{self.suit.symbol}{self.rank.value}"


def create_deck() -> Tuple[Card, ...]:
    """
    创建一副完整的 52 张牌

    Returns:
        每个 (花色, 点数) 组合各一张，id 互不相同
    """
    return tuple(Card(suit, rank) for suit in SUITS for rank in RANKS)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """创建随机源"""
    return np.random.default_rng(seed)


def shuffle(cards: Iterable[Card], rng: Optional[np.random.Generator] = None) -> Tuple[Card, ...]:
    """
    Fisher-Yates 洗牌

    不修改输入，返回新的排列

    Args:
        cards: 待洗的牌
        rng: 随机源 (默认新建无种子随机源)

    Returns:
        输入牌的一个均匀随机排列
    """
    if rng is None:
        rng = make_rng()

    result = list(cards)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        result[i], result[j] = result[j], result[i]
    return tuple(result)


def card_index(card: Card) -> int:
    """牌到 0-51 的索引 (花色优先)"""
    return SUITS.index(card.suit) * len(RANKS) + RANKS.index(card.rank)


def index_to_key(index: int) -> Tuple[Suit, Rank]:
    """索引还原为 (花色, 点数)"""
    if not 0 <= index < DECK_SIZE:
        raise ValueError(f"Card index out of range: {index}")
    return SUITS[index // len(RANKS)], RANKS[index % len(RANKS)]


def cards_to_array(cards: Iterable[Card]) -> np.ndarray:
    """
    将牌列表转换为 52 维 one-hot 向量

    Args:
        cards: 牌列表

    Returns:
        52 维 numpy 数组
    """
    array = np.zeros(DECK_SIZE, dtype=np.float32)
    for card in cards:
        array[card_index(card)] = 1
    return array


def suit_to_array(suit: Optional[Suit]) -> np.ndarray:
    """花色 one-hot (4,)，None 为全 0"""
    array = np.zeros(len(SUITS), dtype=np.float32)
    if suit is not None:
        array[SUITS.index(suit)] = 1
    return array


def cards_to_str(cards: Iterable[Card]) -> str:
    """
    将牌列表转换为可读字符串

    Returns:
        如 "♥A ♠10 ♦8"
    """
    return " ".join(str(card) for card in cards)


def count_suits(cards: Iterable[Card]) -> Dict[Suit, int]:
    """统计各花色张数 (按枚举顺序)"""
    counts = {suit: 0 for suit in SUITS}
    for card in cards:
        counts[card.suit] += 1
    return counts


def find_card(cards: Iterable[Card], suit: Suit, rank: Rank) -> Optional[Card]:
    """按 (花色, 点数) 查找牌"""
    for card in cards:
        if card.suit == suit and card.rank == rank:
            return card
    return None


def sort_hand(cards: Iterable[Card]) -> List[Card]:
    """按花色、点数排序 (显示用)"""
    return sorted(cards, key=card_index)
