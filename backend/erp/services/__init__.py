from .ledger import add_balance, post_adjustments, remove_balance

__all__ = [
    "add_balance",
    "post_adjustments",
    "remove_balance",
]
