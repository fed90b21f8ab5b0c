"""HTML for fenced code blocks that carry line annotations."""

from __future__ import annotations

import html

from typmark.markdown.fence import FenceSettings


def render_code_block(code: str, settings: FenceSettings) -> str:
    """One ``<span class="line">`` per visible line.

    Highlight and hide ranges count lines from 1 within the block;
    ``linenostart`` only shifts the numbers that are displayed.
    """
    language = settings.language or ""
    pre_attrs = f' data-lang="{html.escape(language)}"' if language else ""
    pre_attrs += settings.wrapper_attrs()
    code_attrs = f' class="language-{html.escape(language)}"' if language else ""

    lines: list[str] = []
    for position, line in enumerate(code.splitlines(), start=1):
        if settings.hides(position):
            continue
        classes = "line hl" if settings.highlights(position) else "line"
        number = ""
        if settings.line_numbers:
            number = f'<span class="lineno">{settings.line_number_start + position - 1}</span>'
        lines.append(f'<span class="{classes}">{number}{html.escape(line)}</span>')

    body = "\n".join(lines)
    return f"<pre{pre_attrs}><code{code_attrs}>{body}\n</code></pre>\n"
