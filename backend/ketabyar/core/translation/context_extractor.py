"""Context extraction around a reader's selection."""

from .models import ExtractedContext

# Characters of surrounding text included on each side of a selection
DEFAULT_CONTEXT_WINDOW = 100


def extract_context(
    full_text: str,
    selected_text: str,
    max_window: int = DEFAULT_CONTEXT_WINDOW,
) -> ExtractedContext:
    """Slice the text surrounding the first occurrence of a selection.

    Matching is exact and case-sensitive. A selection that does not occur
    in ``full_text`` yields empty windows rather than an error, and the
    prompt is then built without surrounding context.

    Args:
        full_text: Full document the selection was made in
        selected_text: Selected span to locate
        max_window: Maximum characters taken on each side

    Returns:
        ExtractedContext with trimmed ``before`` and ``after`` windows
    """
    if not full_text or not selected_text:
        return ExtractedContext()

    index = full_text.find(selected_text)
    if index == -1:
        return ExtractedContext()

    end = index + len(selected_text)
    before_start = max(0, index - max_window)
    after_end = min(len(full_text), end + max_window)

    return ExtractedContext(
        before=full_text[before_start:index].strip(),
        after=full_text[end:after_end].strip(),
    )
