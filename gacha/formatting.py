"""Number rendering for achievement labels."""

from __future__ import annotations

_CHINESE_DIGITS = ["零", "一", "二", "三", "四", "五", "六", "七", "八", "九", "十"]


def number_to_chinese(num: int) -> str:
    """
    Render a small count in Chinese numerals.

    2 is rendered as "两" since it counts things; 100 and above stay arabic.
    """
    if num == 2:
        return "两"
    if num < 0:
        return str(num)
    if num <= 10:
        return _CHINESE_DIGITS[num]
    if num < 20:
        return "十" + _CHINESE_DIGITS[num - 10]
    if num < 100:
        tens, ones = divmod(num, 10)
        return _CHINESE_DIGITS[tens] + "十" + (_CHINESE_DIGITS[ones] if ones else "")
    return str(num)


def format_count(num: int, style: str = "arabic") -> str:
    if style == "chinese":
        return number_to_chinese(num)
    return str(num)
