"""Parse the small Markdown subset the exporters understand.

Recognised line forms:
- ``#`` … ``######`` followed by a space → heading of that level
- a line starting with three backticks opens or closes a fenced code block
- ``> `` → blockquote
- an empty or whitespace-only line → blank
- anything else → paragraph, text unchanged

Inline emphasis, links and lists are not interpreted. Both the HTML and the
DOCX exporter consume the node list, so they always agree on structure.
"""

import re
from dataclasses import dataclass
from typing import Literal

NodeKind = Literal["heading", "code", "blockquote", "blank", "paragraph"]

FENCE = "```"
_HEADING_RE = re.compile(r"^(#{1,6}) (.*)$")


@dataclass(frozen=True)
class Node:
    kind: NodeKind
    text: str = ""
    level: int = 0  # headings only


def parse_markdown(text: str) -> list[Node]:
    """Split ``text`` into a flat list of block nodes."""
    nodes: list[Node] = []
    code_lines: list[str] | None = None

    for line in text.splitlines():
        if code_lines is not None:
            if line.startswith(FENCE):
                nodes.append(Node("code", "\n".join(code_lines)))
                code_lines = None
            else:
                code_lines.append(line)
            continue

        if line.startswith(FENCE):
            rest = line[len(FENCE):]
            # Single-line fence: ```code here```
            if rest.endswith(FENCE) and len(rest) >= len(FENCE):
                nodes.append(Node("code", rest[: -len(FENCE)]))
            else:
                # The opening line's remainder is the info string (language tag).
                code_lines = []
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            nodes.append(Node("heading", heading.group(2), level=len(heading.group(1))))
        elif line.startswith("> "):
            nodes.append(Node("blockquote", line[2:]))
        elif not line.strip():
            nodes.append(Node("blank"))
        else:
            nodes.append(Node("paragraph", line))

    # Unterminated fence runs to the end of the input.
    if code_lines is not None:
        nodes.append(Node("code", "\n".join(code_lines)))

    return nodes
