"""
Narrow item-group condition rule.

MSBuild conditions are not evaluated in general. The only form recognised is
the "only when not on Windows" guard traversal projects use, e.g.
``Condition="'$([MSBuild]::IsOsPlatform(Windows))' == 'false'"``. Any other
condition is treated as applicable.
"""


def only_when_not_windows(condition: str) -> bool:
    text = (condition or "").lower()
    return "isosplatform" in text and "false" in text


def is_group_applicable(condition: str, is_windows: bool) -> bool:
    return not (is_windows and only_when_not_windows(condition))
