"""Bean-validation annotations and column lengths derived from attribute types."""

import re
from typing import List, Optional
from uml2spring.generation.constants import DEFAULT_STRING_LENGTH

_LENGTH = re.compile(r"\((\d+)")


def sql_length(sql_type: Optional[str]) -> Optional[int]:
    """Length declared in an SQL type hint such as VARCHAR(80)."""
    if not sql_type:
        return None
    match = _LENGTH.search(sql_type)
    return int(match.group(1)) if match else None


def column_length(java_type: str, sql_type: Optional[str]) -> Optional[int]:
    """Column length for String fields; other types have none."""
    if java_type != "String":
        return None
    return sql_length(sql_type) or DEFAULT_STRING_LENGTH


def validation_annotations(java_type: str, sql_type: Optional[str], label: str) -> List[str]:
    """
    Annotations constraining a non-key field.

    Args:
        java_type: Java type of the field
        sql_type: Optional SQL type hint (VARCHAR lengths become @Size)
        label: Human-readable field name used in messages

    Returns:
        Annotation lines without indentation
    """
    if java_type == "String":
        annotations = [f'@NotBlank(message = "{label} is required")']
        length = sql_length(sql_type)
        if length and "VARCHAR" in (sql_type or "").upper():
            annotations.append(f'@Size(max = {length}, message = "{label} must be at most {length} characters")')
        return annotations
    if java_type in ("Integer", "Long"):
        return [
            f'@NotNull(message = "{label} is required")',
            f'@Min(value = 0, message = "{label} must be zero or positive")',
        ]
    if java_type in ("Double", "BigDecimal"):
        return [
            f'@NotNull(message = "{label} is required")',
            f'@DecimalMin(value = "0.0", message = "{label} must be zero or positive")',
        ]
    if java_type in ("LocalDate", "LocalDateTime"):
        return [
            f'@NotNull(message = "{label} is required")',
            f'@PastOrPresent(message = "{label} cannot be in the future")',
        ]
    return [f'@NotNull(message = "{label} is required")']
