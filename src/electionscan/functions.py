from electionscan.exceptions import MalformedAmount

GROUPING_SEPARATOR = ","


def normalize_amount(raw_text: str, symbol: str, decimals: int) -> int:
    """
    Convert a human-formatted amount into an integer count of the chain's smallest unit.

    Grouping separators are removed. A value with a trailing ' {symbol}' suffix is denominated in
    the major unit and is scaled by 10**decimals, e.g. "1,234 DOT" with 10 decimals becomes
    12_340_000_000_000. A value without the suffix is already in the smallest unit and is returned
    as-is, regardless of magnitude.

    Raises `MalformedAmount` if the remaining text is not a non-negative integer literal.
    """

    text = raw_text.replace(GROUPING_SEPARATOR, "")

    suffix = f" {symbol}"
    is_major_unit = text.endswith(suffix)
    if is_major_unit:
        text = text.removesuffix(suffix)

    # str.isdigit accepts non-ASCII digits and superscripts, which int() would reject or misread
    if not (text.isascii() and text.isdigit()):
        raise MalformedAmount(raw_text=raw_text)

    amount = int(text)
    if is_major_unit:
        amount *= 10**decimals
    return amount
