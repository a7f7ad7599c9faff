"""Prompt loading and query assembly.

The analysis system prompt and the retry prompt are operator-supplied
files, read once at startup and passed through verbatim. Only the
completion prompt and the coding-standard rule list live here.
"""

from __future__ import annotations

from pathlib import Path

from fuzzlsp.constants import COMPLETION_PLACEHOLDER
from fuzzlsp.resilience.errors import BackendConfigError

COMPLETION_SYSTEM_PROMPT = (
    "You are a coding assistant. Provide the best possible code "
    "completions based on the given context."
)

# ── Coding-standard rules (one request per rule × chunk) ──────────

CODING_STANDARD_RULES: tuple[str, ...] = (
    "Code MUST follow MISRA C Coding Guidelines.",
    "Use 4 spaces for indentation; do not use tabs.",
    "Aim for a maximum line length of 76 columns.",
    "Place the `*` directly next to the variable name for pointers "
    "(e.g., `int *ptr`).",
    "Align variable names where possible and match the style of "
    "surrounding code.",
    "Enclose the statement forming the body of control structures "
    "(`if`, `else if`, `else`, `while`, `do ... while`, `for`) in braces.",
    "An `if (expression)` construct must be followed by a compound "
    "statement; `else` must be followed by a compound statement or "
    "another `if` statement.",
    "Terminate all `if ... else if` constructs with an `else` clause.",
    "A pointer resulting from arithmetic on a pointer operand must "
    "address an element of the same array as that pointer operand.",
    "Do not use the `sizeof` operator on function parameters declared "
    'as "array of type".',
    "Do not use the Standard Library function `system` from "
    "`<stdlib.h>`.",
    "Follow alignment (`<stdalign.h>`) and no-return functions "
    "(`<stdnoreturn.h>`) rules.",
    "Do not use type generic expressions (`_Generic`).",
    "Avoid using obsolescent language features.",
    "Declare all variables at the beginning of a block.",
    "Avoid using global variables; prefer static variables.",
    "Use only approved control structures; avoid `goto` statements.",
    "Ensure all loops have a fixed upper limit.",
    "Keep functions short and focused on a single task.",
    "Use function prototypes and limit the number of parameters.",
    "Use only standard MISRA-compliant data types.",
    "Avoid dynamic memory allocation (`malloc`, `calloc`, `free`).",
    "Use consistent comment styles:\n"
    "  - Single-line: `/* Comment */`\n"
    "  - Multi-line:\n"
    "    ```\n"
    "    /*\n"
    "     * Multi-line comment\n"
    "     * continues here.\n"
    "     */\n"
    "    ```",
    "Describe the intent, not the action; use full sentences, correct "
    "grammar, and spelling. Avoid non-obvious abbreviations.",
    "Use K&R style for bracing; always brace even single-line "
    "statements.",
    "Use a single exit point in functions, using `goto` for error "
    "handling.",
    "Wrap non-trivial macros in `do {...} while (0)`.",
    "Avoid magic numbers; use enumerations or constants.",
    "Define bitfield widths for `BOOL`, enums, and flags to ensure "
    "proper alignment.",
)


def load_prompt(path: Path | None, *, label: str = "prompt") -> str:
    """Read an operator-supplied prompt file verbatim."""
    if path is None:
        raise BackendConfigError(f"{label} file is not configured")
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise BackendConfigError(
            f'unable to read {label} file "{path}": {e}'
        ) from e


def build_chunk_query(
    uri: str, index: int, chunk: str, instruction: str = ""
) -> str:
    """Assemble the user message for one chunk of a document."""
    query = f"FileName: {uri}\nSource Code (Chunk {index}):\n{chunk}"
    if instruction:
        return f"{instruction}\n\n{query}"
    return query


def build_rule_system_prompt(system_prompt: str, rule: str) -> str:
    """Combine the static system prompt with the rule under evaluation."""
    return f"{system_prompt}\nRule: {rule}"


def build_completion_query(prefix: str) -> str:
    return (
        "Complete the code following this prefix:\n"
        f"{prefix}{COMPLETION_PLACEHOLDER}"
    )
