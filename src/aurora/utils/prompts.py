"""Interactive confirmation prompts."""

from collections.abc import Callable

import questionary

Confirm = Callable[[str], bool]


def questionary_confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question in the terminal.

    Ctrl-C (questionary returns None) counts as "no".
    """
    from aurora.cli.styles import get_questionary_style

    answer = questionary.confirm(message, default=default, style=get_questionary_style()).ask()
    return bool(answer)
