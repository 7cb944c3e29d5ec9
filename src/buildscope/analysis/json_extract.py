"""Best-effort isolation of a JSON payload inside free-form model output."""

import re

_FENCED_JSON = re.compile(r"```json(.*?)```", re.DOTALL | re.IGNORECASE)
_BRACE_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def extract_json(text: str) -> str | None:
    """Return the most likely JSON fragment in ``text`` or None.

    A fenced ```json block wins and its interior is returned trimmed. Otherwise
    the greedy span from the first ``{`` to the last ``}`` is returned. This is
    not a parser: brackets are not balanced and the result may be malformed,
    so callers must still parse it and handle failure.
    """
    if not text:
        return None
    fenced = _FENCED_JSON.search(text)
    if fenced:
        return fenced.group(1).strip()
    span = _BRACE_SPAN.search(text)
    if span:
        return span.group(0)
    return None
