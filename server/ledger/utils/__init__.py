from ledger.utils.money import AmountParseError, parse_amount, quantize_money

__all__ = ["AmountParseError", "parse_amount", "quantize_money"]
