"""Helpers for assembling Java source as lists of lines."""

import re
import textwrap
from typing import Iterable, List, Optional
from uml2spring.generation.constants import INDENT, PROXY_PROPERTIES

NEWLINE = "\n"

_DECIMAL = re.compile(r"^-?\d+(\.\d+)?([eE][-+]?\d+)?$")


def render(lines: Iterable[str]) -> str:
    """Join lines into file content with exactly one trailing newline."""
    text = NEWLINE.join(line.rstrip() for line in lines)
    return text.rstrip() + NEWLINE


def block(text: str, level: int = 0) -> List[str]:
    """Dedent a template snippet and re-indent it at the given level."""
    body = textwrap.dedent(text).strip(NEWLINE)
    return [f"{INDENT * level}{line}" if line.strip() else "" for line in body.split(NEWLINE)]


def header(package: str, imports: Iterable[str]) -> List[str]:
    """Package declaration followed by sorted, de-duplicated imports."""
    lines = [f"package {package};", ""]
    statements = sorted({i if i.startswith("import ") else f"import {i};" for i in imports})
    if statements:
        lines.extend(statements)
        lines.append("")
    return lines


def accessors(field_name: str, field_type: str, getter: str, setter: str, level: int = 1) -> List[str]:
    """Getter and setter for a plain field."""
    pad = INDENT * level
    return [
        f"{pad}public {field_type} {getter}() {{",
        f"{pad}{INDENT}return {field_name};",
        f"{pad}}}",
        "",
        f"{pad}public void {setter}({field_type} {field_name}) {{",
        f"{pad}{INDENT}this.{field_name} = {field_name};",
        f"{pad}}}",
        "",
    ]


def json_ignore(extra: Iterable[str] = (), level: int = 1) -> str:
    """@JsonIgnoreProperties line hiding proxy internals and back references."""
    names = ", ".join(f'"{name}"' for name in (*extra, *PROXY_PROPERTIES))
    return f"{INDENT * level}@JsonIgnoreProperties(value = {{{names}}}, allowSetters = true)"


def equals_hash(class_name: str, fields: List[str], level: int = 1) -> List[str]:
    """equals/hashCode over the given fields; no fields delegates to super."""
    pad = INDENT * level
    lines = [
        f"{pad}@Override",
        f"{pad}public boolean equals(Object o) {{",
        f"{pad}{INDENT}if (this == o) return true;",
        f"{pad}{INDENT}if (o == null || getClass() != o.getClass()) return false;",
    ]
    if fields:
        comparison = " && ".join(f"Objects.equals({f}, that.{f})" for f in fields)
        lines.append(f"{pad}{INDENT}{class_name} that = ({class_name}) o;")
        lines.append(f"{pad}{INDENT}return {comparison};")
    else:
        lines.append(f"{pad}{INDENT}return super.equals(o);")
    lines.extend([f"{pad}}}", "", f"{pad}@Override", f"{pad}public int hashCode() {{"])
    if fields:
        lines.append(f"{pad}{INDENT}return Objects.hash({', '.join(fields)});")
    else:
        lines.append(f"{pad}{INDENT}return super.hashCode();")
    lines.extend([f"{pad}}}", ""])
    return lines


# Parsing an id value of unknown runtime type into the key's Java type
_NUMBER_CONVERSIONS = {
    "Long": ("longValue", "Long.parseLong"),
    "Integer": ("intValue", "Integer.parseInt"),
    "Double": ("doubleValue", "Double.parseDouble"),
    "Float": ("floatValue", "Float.parseFloat"),
}

_TEXT_CONVERSIONS = {
    "String": "{expr}.toString()",
    "Boolean": "Boolean.valueOf({expr}.toString())",
    "BigDecimal": "new BigDecimal({expr}.toString())",
    "LocalDate": "LocalDate.parse({expr}.toString())",
    "LocalDateTime": "LocalDateTime.parse({expr}.toString())",
}


def id_conversion(java_type: str, expr: str) -> Optional[str]:
    """Expression converting ``expr`` (an Object) to java_type, or None if unsupported."""
    if java_type in _NUMBER_CONVERSIONS:
        unbox, parse = _NUMBER_CONVERSIONS[java_type]
        return f"{expr} instanceof Number ? ((Number) {expr}).{unbox}() : {parse}({expr}.toString())"
    template = _TEXT_CONVERSIONS.get(java_type)
    return template.format(expr=expr) if template else None


def literal(java_type: str, value) -> Optional[str]:
    """Java literal for a default value, or None when it does not fit the type."""
    text = str(value).strip()
    if java_type == "String":
        escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if java_type in ("Integer", "Long"):
        try:
            number = int(text)
        except ValueError:
            return None
        return f"{number}L" if java_type == "Long" else str(number)
    if java_type == "Double":
        if not _DECIMAL.match(text):
            return None
        return text if any(c in text for c in ".eE") else f"{text}.0"
    return None
