from __future__ import annotations


def parse_command_line(text: str, for_completion: bool = False) -> tuple[str, list[str]] | None:
    """Split a raw line into a root label and argument tokens.

    A leading ``/`` is optional. There is no quoting: tokens are split on
    whitespace. With ``for_completion`` a trailing space yields an empty last
    token, so "shop " completes the first argument of ``shop``.
    """
    text = text.lstrip()
    if text.startswith("/"):
        text = text[1:]
    parts = text.split()
    if not parts:
        return None
    label, args = parts[0], parts[1:]
    if for_completion and text[-1].isspace():
        args.append("")
    return label, args
