"""Rule-based oracle used on its own and as the fallback for the LLM oracle."""

from worldopoly.core.agents.base import BuyDecision, DecisionOracle, DecisionRequest, TradeDecision

BUY_BUFFER = 50
DEFAULT_CHAT = "Interesting move."


class HeuristicOracle(DecisionOracle):
    """
    Buys whenever it can keep a small cash buffer, never starts a trade,
    and has exactly one thing to say.
    """

    def __init__(self, buy_buffer: int = BUY_BUFFER):
        self.buy_buffer = buy_buffer

    def decide_buy(self, request: DecisionRequest) -> BuyDecision:
        if request.player.money >= request.board_context.price + self.buy_buffer:
            return BuyDecision(decision="BUY", reasoning="Fallback: Have enough money with buffer")
        return BuyDecision(decision="PASS", reasoning="Fallback: Insufficient funds")

    def decide_trade(self, request: DecisionRequest) -> TradeDecision:
        return TradeDecision(should_trade=False, offer_amount=0, reasoning="Fallback: Not trading")

    def chat_message(self, request: DecisionRequest) -> str:
        return DEFAULT_CHAT
