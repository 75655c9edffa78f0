"""
Output renderers for the skillcast CLI.

Built in testable layers:
- Layer 1: PlainTextRenderer - Just strings, fully testable
- Layer 2: JSONRenderer - Structured output, machine-readable
- Layer 3: RichConsoleRenderer - Tables and colors
"""

from skillcast.ui.base import Renderer
from skillcast.ui.json_renderer import JSONRenderer
from skillcast.ui.plain import PlainTextRenderer
from skillcast.ui.rich_renderer import RichConsoleRenderer

__all__ = [
    "Renderer",
    "PlainTextRenderer",
    "JSONRenderer",
    "RichConsoleRenderer",
]
