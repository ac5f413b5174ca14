"""Prompt construction for selection translation.

The prompt asks the model for a single JSON object so the output
processor can recover the translation and its notes. Building is pure:
identical inputs always produce an identical prompt string.
"""

from typing import List, Optional

# Language name mapping
LANGUAGE_NAMES = {
    "fa": "Persian",
    "en": "English",
    "ar": "Arabic",
    "tr": "Turkish",
    "fr": "French",
    "de": "German",
}


def language_name(code: str) -> str:
    """Human-readable name for a language code, or the code itself."""
    return LANGUAGE_NAMES.get(code, code)


def default_instructions(target: str) -> str:
    """Built-in instruction block asking for the JSON answer."""
    return (
        f"Translate the text into {target} with the meaning it has in this context. "
        f"Write the notes in {target} as well.\n"
        "Return only this JSON object and nothing else:\n"
        "{\n"
        f'  "translatedText": "precise {target} meaning",\n'
        '  "notes": [\n'
        '    "Literal meaning: [dictionary meaning]",\n'
        '    "Meaning in this context: [plain explanation]",\n'
        '    "Related expressions: [if any]"\n'
        "  ]\n"
        "}"
    )


def build_prompt(
    selected_text: str,
    before: str,
    after: str,
    book_title: Optional[str] = None,
    author_name: Optional[str] = None,
    target_language: str = "fa",
    instructions: Optional[str] = None,
) -> str:
    """Build the instruction prompt for one selection.

    Context lines whose value is empty are left out entirely.

    Args:
        selected_text: Text the reader selected
        before: Text immediately preceding the selection
        after: Text immediately following the selection
        book_title: Optional book title
        author_name: Optional author name
        target_language: Target language code
        instructions: Optional instruction template used instead of the
            built-in one; ``{language}`` is replaced with the language name

    Returns:
        Prompt string
    """
    target = language_name(target_language)

    context_lines: List[str] = []
    if before:
        context_lines.append(f"Before: {before}")
    if after:
        context_lines.append(f"After: {after}")
    if book_title:
        context_lines.append(f"Book: {book_title}")
    if author_name:
        context_lines.append(f"Author: {author_name}")

    sections = [f'Text: "{selected_text}"']
    if context_lines:
        sections.append("Context:\n" + "\n".join(context_lines))

    if instructions and instructions.strip():
        # str.replace keeps literal JSON braces in templates intact
        sections.append(instructions.strip().replace("{language}", target))
    else:
        sections.append(default_instructions(target))

    return "\n\n".join(sections)
