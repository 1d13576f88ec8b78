"""
Solution rendering to HTML.

Model answers are Markdown with embedded LaTeX. Math spans are cut out
before Markdown conversion so that underscores and asterisks inside
formulas survive, then put back as MathJax delimiters.
"""

import html
import re
from typing import Dict, List, Tuple

import markdown

MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "nl2br"]

# Display math first so "$$" is never read as two inline delimiters.
# Each alternative closes with the delimiter it opened with.
DISPLAY_MATH = re.compile(r"\$\$([\s\S]*?)\$\$|\\\[([\s\S]*?)\\\]")
INLINE_MATH = re.compile(r"\$([^$\n]+?)\$|\\\((.+?)\\\)")

PLACEHOLDER = "EDUMATH{index}X"
PLACEHOLDER_PATTERN = re.compile(r"EDUMATH(\d+)X")


# MathJax HTML template (loads from CDN)
MATHJAX_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body {{
            font-family: 'Segoe UI', Arial, sans-serif;
            font-size: 15px;
            line-height: 1.6;
            margin: 10px;
            padding: 0;
            background: {bg_color};
            color: {text_color};
        }}
        .solution-container {{
            padding: 10px;
        }}
        h1, h2, h3 {{
            color: {accent_color};
        }}
        hr {{
            border: none;
            border-top: 1px solid {border_color};
        }}
        code, pre {{
            background: {code_bg};
            border-radius: 4px;
        }}
        pre {{
            padding: 10px;
            overflow-x: auto;
        }}
        table {{
            border-collapse: collapse;
        }}
        th, td {{
            border: 1px solid {border_color};
            padding: 4px 8px;
        }}
        .math-display {{
            margin: 10px 0;
            overflow-x: auto;
        }}
        .status {{
            padding: 20px;
            border-radius: 5px;
            text-align: center;
            background: {status_bg};
        }}
        .status.error {{
            background: {error_bg};
            color: {error_color};
            border-left: 3px solid {error_color};
            text-align: left;
        }}
        mjx-container {{
            margin: 0 !important;
        }}
    </style>
    <script>
        MathJax = {{
            tex: {{
                inlineMath: [['\\\\(', '\\\\)']],
                displayMath: [['\\\\[', '\\\\]']],
                processEscapes: true
            }},
            svg: {{
                fontCache: 'global'
            }},
            options: {{
                renderActions: {{
                    addMenu: []
                }}
            }}
        }};
    </script>
    <script id="MathJax-script" async
        src="https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-svg.js">
    </script>
</head>
<body>
    <div class="solution-container">
        {content}
    </div>
</body>
</html>
"""

# Color themes
LIGHT_THEME = {
    "bg_color": "#ffffff",
    "text_color": "#333333",
    "accent_color": "#4f46e5",
    "border_color": "#dee2e6",
    "code_bg": "#f3f4f6",
    "status_bg": "#f8f9fa",
    "error_bg": "#fdecea",
    "error_color": "#b91c1c",
}

DARK_THEME = {
    "bg_color": "#1e1e1e",
    "text_color": "#d4d4d4",
    "accent_color": "#a5b4fc",
    "border_color": "#3c3c3c",
    "code_bg": "#2d2d2d",
    "status_bg": "#2d2d2d",
    "error_bg": "#3a1e1e",
    "error_color": "#f87171",
}


def convert_markdown(text: str) -> str:
    """Markdown -> HTML fragment. Raw HTML in the source is kept as plain text."""
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    md.preprocessors.deregister("html_block", strict=False)
    md.inlinePatterns.deregister("html", strict=False)
    return md.convert(text)


def _math_source(match: re.Match) -> str:
    return match.group(1) if match.group(1) is not None else match.group(2)


def protect_math(text: str) -> Tuple[str, List[str]]:
    """
    Replace math spans with placeholders.

    Returns the protected text and the rendered math HTML for each
    placeholder, in order.
    """
    spans: List[str] = []

    def _display(match: re.Match) -> str:
        tex = html.escape(_math_source(match).strip())
        spans.append(f'<div class="math-display">\\[{tex}\\]</div>')
        return PLACEHOLDER.format(index=len(spans) - 1)

    def _inline(match: re.Match) -> str:
        tex = html.escape(_math_source(match))
        spans.append(f'<span class="math-inline">\\({tex}\\)</span>')
        return PLACEHOLDER.format(index=len(spans) - 1)

    text = DISPLAY_MATH.sub(_display, text)
    text = INLINE_MATH.sub(_inline, text)
    return text, spans


def restore_math(rendered: str, spans: List[str]) -> str:
    """Put math HTML back in place of the placeholders."""

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(spans):
            return spans[index]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_restore, rendered)


class SolutionRenderer:
    """
    Renders model answers to a complete MathJax HTML document.

    Usage:
        renderer = SolutionRenderer(dark_mode=False)
        page = renderer.to_html(scan.solution)
    """

    def __init__(self, dark_mode: bool = False):
        """Initialize renderer with theme."""
        self.theme: Dict[str, str] = DARK_THEME if dark_mode else LIGHT_THEME

    def set_dark_mode(self, enabled: bool):
        """Toggle dark mode theme."""
        self.theme = DARK_THEME if enabled else LIGHT_THEME

    def body_html(self, text: str) -> str:
        """Convert Markdown with LaTeX to an HTML fragment."""
        if not text:
            return ""
        protected, spans = protect_math(text)
        rendered = convert_markdown(protected)
        return restore_math(rendered, spans)

    def to_html(self, text: str) -> str:
        """Render a solution to a full HTML page."""
        return self._page(self.body_html(text))

    def loading_html(self, message: str = "Analysing your problem...") -> str:
        return self._page(f'<div class="status">{html.escape(message)}</div>')

    def error_html(self, error: str) -> str:
        return self._page(f'<div class="status error">{html.escape(error)}</div>')

    def render_scan(self, scan) -> str:
        """
        Render whichever state the scan is in.

        Loading takes precedence, then error, then the solution.
        """
        if scan.loading:
            return self.loading_html()
        if scan.error:
            return self.error_html(scan.error)
        return self.to_html(scan.solution or "")

    def _page(self, content: str) -> str:
        return MATHJAX_TEMPLATE.format(content=content, **self.theme)
