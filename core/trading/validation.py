# Business rules the vendor does not enforce
from typing import Dict, List, Optional, Tuple

from core.trading.models import (
    OrderFamily,
    OrderRequest,
    OrderType,
    TransactionType,
    Validity,
)
from core.utils.exceptions import OrderValidationError

AFTER_MARKET_TIMINGS = (1, 2, 3)


class OrderRule:
    """Base class for order business rules"""

    def __init__(self, name: str):
        self.name = name

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        """
        Check if the request passes this rule

        Returns:
            Tuple[bool, str]: (passes, reason)
        """
        raise NotImplementedError


class LimitPriceRule(OrderRule):
    """Limit orders need a price"""

    def __init__(self):
        super().__init__("LimitPrice")

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        if request.order_type == OrderType.LIMIT and request.price <= 0.0:
            return False, "Price cannot be zero with limit order"
        return True, "Limit price present"


class StopLossLimitRule(OrderRule):
    """Stop-loss limit orders need consistent price and trigger"""

    def __init__(self):
        super().__init__("StopLossLimit")

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        if request.order_type != OrderType.STOP_LOSS:
            return True, "Not a stop-loss limit order"

        if request.price <= 0.0:
            return False, "Price cannot be zero with trigger limit order"
        if request.trigger_price <= 0.0:
            return False, "Trigger Price cannot be zero with limit order"
        if request.validity == Validity.IOC:
            return False, "Validity cannot be IOC with Trigger order"
        if request.txn_type == TransactionType.BUY and request.trigger_price > request.price:
            return False, "Trigger Price cannot be greater than limit buy price"
        if request.txn_type == TransactionType.SELL and request.trigger_price < request.price:
            return False, "Trigger Price cannot be less than limit sell price"

        return True, "Stop-loss limit prices consistent"


class StopLossMarketRule(OrderRule):
    """Stop-loss market orders need a trigger and cannot be IOC"""

    def __init__(self):
        super().__init__("StopLossMarket")

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        if request.order_type != OrderType.STOP_LOSS_MARKET:
            return True, "Not a stop-loss market order"

        if request.trigger_price <= 0.0:
            return False, "Trigger Price cannot be zero with limit order"
        if request.validity == Validity.IOC:
            return False, "Validity cannot be IOC with Trigger order"

        return True, "Stop-loss market trigger present"


class CoverTriggerPriceRule(OrderRule):
    """Cover orders always carry a stop-loss trigger"""

    def __init__(self):
        super().__init__("CoverTriggerPrice")

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        if request.trigger_price <= 0.0:
            return False, "Trigger Price cannot be zero"
        return True, "Trigger price present"


class BracketTargetsRule(OrderRule):
    """Bracket orders need both a profit and a stop-loss leg"""

    def __init__(self):
        super().__init__("BracketTargets")

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        profit = getattr(request, "profit_value", 0.0)
        stoploss = getattr(request, "stoploss_value", 0.0)

        if profit <= 0.0 and stoploss <= 0.0:
            return False, "ProfitValue, StoplossValue cannot be zero"
        if profit <= 0.0:
            return False, "ProfitValue cannot be zero"
        if stoploss <= 0.0:
            return False, "StoplossValue cannot be zero"

        return True, "Bracket targets present"


class AfterMarketTimingRule(OrderRule):
    """After-market orders need a timing code"""

    def __init__(self):
        super().__init__("AfterMarketTiming")

    def check(self, request: OrderRequest) -> Tuple[bool, str]:
        if request.off_mkt_flag and request.off_mkt_order_time_flag not in AFTER_MARKET_TIMINGS:
            return False, "OffMktOrderTimeFlag possible allowed values are 1|2|3 in AMO"
        return True, "After-market timing valid"


class OrderValidationEngine:
    """Runs the rules of an order family in order; the first failure wins.

    Modifications are deliberately not routed through this engine.
    """

    def __init__(self, rules: Optional[Dict[OrderFamily, List[OrderRule]]] = None):
        self.rules = rules or {
            OrderFamily.NORMAL: [
                LimitPriceRule(),
                StopLossLimitRule(),
                StopLossMarketRule(),
                AfterMarketTimingRule(),
            ],
            OrderFamily.COVER: [
                LimitPriceRule(),
                CoverTriggerPriceRule(),
                AfterMarketTimingRule(),
            ],
            OrderFamily.BRACKET: [
                LimitPriceRule(),
                BracketTargetsRule(),
                AfterMarketTimingRule(),
            ],
        }

    def first_violation(self, request: OrderRequest) -> Optional[str]:
        """Return the reason of the first failing rule, or None when valid"""
        for rule in self.rules[request.family]:
            passed, reason = rule.check(request)
            if not passed:
                return reason
        return None

    def validate(self, request: OrderRequest) -> None:
        """Raise OrderValidationError on the first violated rule"""
        reason = self.first_violation(request)
        if reason is not None:
            raise OrderValidationError(reason, order_family=request.family.value)
