"""Debug-mode 500 body.

Plain f-strings and ``html.escape`` only, so nothing that can itself
fail sits between a crash and its report.
"""

import html
import traceback

_STYLE = (
    "font-family:monospace;white-space:pre-wrap;padding:1em;"
    "background:#1a1b26;color:#c0caf5;border:2px solid #f7768e"
)


def fault_location(exc: BaseException) -> tuple[str, int]:
    """Return ``(filename, lineno)`` of the frame that raised *exc*."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "<unknown>", 0
    last = frames[-1]
    return last.filename, last.lineno or 0


def render_debug_page(exc: BaseException) -> str:
    """Render the exception message and full traceback, HTML-escaped."""
    filename, lineno = fault_location(exc)
    trace = "".join(traceback.format_exception(exc))
    return (
        "<h1>500 Internal Server Error</h1>"
        f"<p><strong>{html.escape(type(exc).__name__)}</strong>: "
        f"{html.escape(str(exc))}</p>"
        f"<p>in {html.escape(filename)}:{lineno}</p>"
        f'<pre style="{_STYLE}">{html.escape(trace)}</pre>'
    )
