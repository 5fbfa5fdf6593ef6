"""Split indexed docstring text into summary, inputs, outputs and references."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

SECTION_HEADINGS = {"Input": "inputs", "Output": "outputs", "References": "references"}

# name::Type[=default]: description
_PARAMETER = re.compile(r"^(?P<name>[^:\s]+)::(?P<type>[^=:]+?)(?:=(?P<default>[^:]+?))?:\s*(?P<description>.*)$")


@dataclass(frozen=True)
class Parameter:
    name: str
    type: Optional[str] = None
    default: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class DocstringSections:
    summary: str = ""
    inputs: list[Parameter] = field(default_factory=list)
    outputs: list[Parameter] = field(default_factory=list)
    references: list[str] = field(default_factory=list)


def parse_parameter(line: str) -> Parameter:
    match = _PARAMETER.match(line.strip())
    if match is None:
        return Parameter(name="", description=line.strip())
    return Parameter(
        name=match.group("name"),
        type=match.group("type").strip(),
        default=match.group("default").strip() if match.group("default") else None,
        description=match.group("description").strip(),
    )


def parse_docstring(text: str) -> DocstringSections:
    summary_lines: list[str] = []
    sections: dict[str, list[str]] = {key: [] for key in SECTION_HEADINGS.values()}
    current: Optional[str] = None
    for raw in text.splitlines():
        line = raw.rstrip()
        heading = SECTION_HEADINGS.get(line.strip())
        if heading is not None:
            current = heading
            continue
        if current is None:
            summary_lines.append(line)
        elif line.strip():
            sections[current].append(line.strip())

    return DocstringSections(
        summary="\n".join(summary_lines).strip(),
        inputs=[parse_parameter(line) for line in sections["inputs"]],
        outputs=[parse_parameter(line) for line in sections["outputs"]],
        references=sections["references"],
    )
