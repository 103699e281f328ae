"""
规则引擎 - 合法性判断、胜负判定、状态迁移

所有方法都是纯函数，无状态；非法动作抛出异常且不修改输入状态
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from .cards import Card, Suit
from .errors import IllegalStateTransition, InvalidMove
from .state import GameState, Status, Turn


EMPTY_DECK_MESSAGE = "摸牌堆已空，跳过回合。"


@dataclass(frozen=True)
class DrawResult:
    """
    摸牌结果

    Attributes:
        state: 摸牌后的状态 (摸到牌时回合尚未交出)
        card: 摸到的牌，牌堆为空时为 None
    """
    state: GameState
    card: Optional[Card] = None

    @property
    def skipped(self) -> bool:
        """牌堆为空，回合被跳过"""
        return self.card is None


class RuleEngine:
    """
    疯狂 8 点规则引擎

    提供合法性判断、胜负判定和动作迁移
    所有方法都是静态方法，无状态
    """

    @staticmethod
    def parse_actor(actor: Union[Turn, str]) -> Turn:
        """解析行动方，未知名称视为非法动作"""
        try:
            return Turn.parse(actor)
        except ValueError as e:
            raise InvalidMove(f"Unknown actor {actor!r}") from e

    @staticmethod
    def parse_suit(suit: Union[Suit, str]) -> Suit:
        """解析花色，未知名称视为非法动作"""
        if isinstance(suit, Suit):
            return suit
        try:
            return Suit(suit)
        except ValueError as e:
            raise InvalidMove(f"Unknown suit {suit!r}") from e

    @staticmethod
    def is_playable(card: Card, top: Optional[Card], current_suit: Optional[Suit]) -> bool:
        """
        判断一张牌能否打出

        Args:
            card: 候选牌
            top: 弃牌堆顶
            current_suit: 当前有效花色

        Returns:
            8 总是可出；否则花色与当前花色相同或点数与堆顶相同
        """
        if top is None:
            return False
        if card.is_wild:
            return True
        if current_suit is not None and card.suit == current_suit:
            return True
        return card.rank == top.rank

    @staticmethod
    def playable_cards(
        hand: Iterable[Card],
        top: Optional[Card],
        current_suit: Optional[Suit],
    ) -> List[Card]:
        """按手牌顺序返回所有可出的牌"""
        return [c for c in hand if RuleEngine.is_playable(c, top, current_suit)]

    @staticmethod
    def is_playable_in(state: GameState, card: Card) -> bool:
        """以状态中的堆顶和当前花色判断"""
        return RuleEngine.is_playable(card, state.top_discard, state.current_suit)

    @staticmethod
    def check_winner(state: GameState, actor: Union[Turn, str]) -> Optional[GameState]:
        """
        胜负判定

        Args:
            state: 当前状态
            actor: 刚行动的一方

        Returns:
            行动方手牌为空时返回结束状态，否则 None
        """
        actor = Turn.parse(actor)
        if state.get_hand(actor):
            return None
        message = "恭喜你赢了！" if actor is Turn.PLAYER else "AI 赢了，再接再厉！"
        return state.evolve(
            status=Status.GAME_OVER,
            winner=actor,
            last_action=message,
            step_count=state.step_count,
        )

    @staticmethod
    def ensure_turn(state: GameState, actor: Turn, allowed: Iterable[Status] = (Status.PLAYING,)) -> None:
        """检查行动方与阶段"""
        if state.status == Status.GAME_OVER:
            raise IllegalStateTransition("Game is over")
        allowed = tuple(allowed)
        if state.status not in allowed:
            raise InvalidMove(
                f"Cannot act in status {state.status.value}, "
                f"expected {', '.join(s.value for s in allowed)}"
            )
        if state.current_turn is not actor:
            raise InvalidMove(f"Not {actor.value}'s turn")

    @staticmethod
    def apply_play(
        state: GameState,
        card: Card,
        actor: Union[Turn, str],
        suit: Optional[Union[Suit, str]] = None,
    ) -> GameState:
        """
        出牌

        - 出完手牌: 直接结束游戏 (即使打出的是 8)
        - 打出 8 且未给出花色: 进入选花色阶段，回合不交出
        - 打出 8 且给出花色: 出牌和选花色一步完成
        - 其他: 当前花色改为该牌花色，回合交给对手

        Args:
            state: 当前状态
            card: 要打出的牌
            actor: 行动方
            suit: 打出 8 时同时指定的花色

        Returns:
            新状态

        Raises:
            InvalidMove: 不在自己回合、牌不在手中、不可出或给非 8 指定花色
            IllegalStateTransition: 游戏已结束
        """
        actor = RuleEngine.parse_actor(actor)
        RuleEngine.ensure_turn(state, actor)

        if suit is not None:
            if not card.is_wild:
                raise InvalidMove(f"Only an 8 can change the suit, got {card}")
            suit = RuleEngine.parse_suit(suit)

        hand = state.get_hand(actor)
        if card not in hand:
            raise InvalidMove(f"{card} is not in {actor.value}'s hand")
        if not RuleEngine.is_playable_in(state, card):
            raise InvalidMove(
                f"{card} does not match {state.top_discard} "
                f"(suit {state.current_suit.value if state.current_suit else None})"
            )

        new_hand = tuple(c for c in hand if c != card)
        discard_pile = state.discard_pile + (card,)

        if card.is_wild and suit is not None:
            played = state.with_hand(
                actor,
                new_hand,
                discard_pile=discard_pile,
                current_suit=suit,
                current_turn=actor.opponent,
                last_action=f"{actor.label} 打出了 8，将花色改为 {suit.symbol}",
                step_count=state.step_count + 1,
            )
        elif card.is_wild:
            played = state.with_hand(
                actor,
                new_hand,
                discard_pile=discard_pile,
                status=Status.SUIT_SELECTION,
                last_action=f"{actor.label} 打出了 8！",
                step_count=state.step_count + 1,
            )
        else:
            played = state.with_hand(
                actor,
                new_hand,
                discard_pile=discard_pile,
                current_suit=card.suit,
                current_turn=actor.opponent,
                last_action=f"{actor.label} 打出了 {card}",
                step_count=state.step_count + 1,
            )

        finished = RuleEngine.check_winner(played, actor)
        if finished is not None:
            return finished
        return played

    @staticmethod
    def apply_select_suit(state: GameState, suit: Union[Suit, str], actor: Union[Turn, str]) -> GameState:
        """
        选花色 (打出 8 之后)

        Raises:
            IllegalStateTransition: 不在选花色阶段
            InvalidMove: 不是打出 8 的一方
        """
        actor = RuleEngine.parse_actor(actor)
        suit = RuleEngine.parse_suit(suit)

        if state.status != Status.SUIT_SELECTION:
            raise IllegalStateTransition(
                f"Suit selection is not pending (status {state.status.value})"
            )
        if state.current_turn is not actor:
            raise InvalidMove(f"Suit choice belongs to {state.current_turn.value}")

        finished = RuleEngine.check_winner(state, actor)
        if finished is not None:
            return finished

        return state.evolve(
            current_suit=suit,
            current_turn=actor.opponent,
            status=Status.PLAYING,
            last_action=f"{actor.label} 将花色改为 {suit.symbol}",
        )

    @staticmethod
    def apply_draw(state: GameState, actor: Union[Turn, str]) -> DrawResult:
        """
        摸牌

        牌堆为空时跳过回合；否则摸堆顶一张，回合暂不交出，
        后续处理见 RuleEngine.apply_pass_turn / apply_play

        Raises:
            InvalidMove: 不在自己回合或阶段不对
            IllegalStateTransition: 游戏已结束
        """
        actor = RuleEngine.parse_actor(actor)
        RuleEngine.ensure_turn(state, actor)

        if not state.deck:
            skipped = state.evolve(
                current_turn=actor.opponent,
                last_action=EMPTY_DECK_MESSAGE,
            )
            return DrawResult(state=skipped, card=None)

        card = state.deck[-1]
        drawn = state.with_hand(
            actor,
            state.get_hand(actor) + (card,),
            deck=state.deck[:-1],
            last_action=f"{actor.label} 摸了一张牌",
            step_count=state.step_count + 1,
        )
        return DrawResult(state=drawn, card=card)

    @staticmethod
    def apply_pass_turn(state: GameState, actor: Union[Turn, str]) -> GameState:
        """摸牌后无牌可出，把回合交给对手"""
        actor = RuleEngine.parse_actor(actor)
        RuleEngine.ensure_turn(state, actor)
        return state.evolve(current_turn=actor.opponent)

    @staticmethod
    def can_act(state: GameState, actor: Union[Turn, str]) -> bool:
        """行动方当前是否可以行动 (出牌 / 摸牌 / 选花色)"""
        actor = Turn.parse(actor)
        return (
            state.status in (Status.PLAYING, Status.SUIT_SELECTION)
            and state.current_turn is actor
        )
