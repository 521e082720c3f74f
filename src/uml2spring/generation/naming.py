"""Naming conventions shared by every generator.

The metadata builder predicts accessor names with the same functions the
generators use to emit them, so all case conversion lives here.
"""

import re
from typing import Dict, Optional, Tuple

# Diagram type name -> Java type
JAVA_TYPES: Dict[str, str] = {
    "String": "String",
    "Integer": "Integer",
    "Long": "Long",
    "Double": "Double",
    "Float": "Float",
    "Boolean": "Boolean",
    "Date": "LocalDate",
    "LocalDate": "LocalDate",
    "LocalDateTime": "LocalDateTime",
    "BigDecimal": "BigDecimal",
}

# Java type -> import it requires
JAVA_IMPORTS: Dict[str, str] = {
    "LocalDate": "java.time.LocalDate",
    "LocalDateTime": "java.time.LocalDateTime",
    "BigDecimal": "java.math.BigDecimal",
}

_UPPER = re.compile(r"([A-Z])")


def capitalize(name: str) -> str:
    """Upper-case the first character only."""
    if not name:
        return name
    return name[0].upper() + name[1:]


def camel_case(name: str) -> str:
    """
    Convert an attribute or class name to a Java field name.

    Underscore-separated names are joined with the first word lower-cased
    and each later word capitalized (ORDER_date -> orderDate); other names
    only get their first character lower-cased (OrderDate -> orderDate).
    """
    if not name:
        return name
    if "_" in name:
        words = [w for w in name.split("_") if w]
        if not words:
            return name
        head = words[0].lower()
        return head + "".join(w[0].upper() + w[1:].lower() for w in words[1:])
    return name[0].lower() + name[1:]


def snake_case(name: str) -> str:
    """OrderLine -> order_line."""
    return _UPPER.sub(r"_\1", name).lower().lstrip("_").replace("__", "_")


def kebab_case(name: str) -> str:
    """OrderLine -> order-line."""
    return snake_case(name).replace("_", "-")


def pluralize(name: str) -> str:
    """English plural for collection field names."""
    if not name:
        return name
    if name.endswith("y") and len(name) > 1 and name[-2].lower() not in "aeiou":
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "z", "ch", "sh")):
        return name + "es"
    return name + "s"


def java_type(declared: Optional[str]) -> str:
    """Map a declared diagram type to its Java type, defaulting to String."""
    if not declared:
        return "String"
    return JAVA_TYPES.get(declared.strip(), "String")


class Naming:
    """Naming rules bundled for injection into the generation context."""

    capitalize = staticmethod(capitalize)
    camel_case = staticmethod(camel_case)
    snake_case = staticmethod(snake_case)
    kebab_case = staticmethod(kebab_case)
    pluralize = staticmethod(pluralize)
    java_type = staticmethod(java_type)

    def field_name(self, name: str) -> str:
        return camel_case(name)

    def getter(self, field_name: str) -> str:
        return f"get{capitalize(field_name)}"

    def setter(self, field_name: str) -> str:
        return f"set{capitalize(field_name)}"

    def accessors(self, field_name: str) -> Tuple[str, str]:
        """Getter and setter pair for a Java field."""
        return self.getter(field_name), self.setter(field_name)

    def fk_field(self, fk_name: str) -> str:
        """Entity-side relation field for a foreign key attribute."""
        return camel_case(fk_name)

    def dto_fk_field(self, fk_name: str) -> str:
        """DTO-side scalar id field for a foreign key attribute."""
        return f"{camel_case(fk_name)}Id"

    def collection_field(self, class_name: str) -> str:
        """Collection field holding instances of class_name."""
        return pluralize(camel_case(class_name))

    def table_name(self, class_name: str) -> str:
        return snake_case(class_name)

    def column_name(self, attribute_name: str) -> str:
        return snake_case(attribute_name)

    def resource_path(self, class_name: str) -> str:
        """REST resource segment for a class."""
        return kebab_case(class_name)

    def dto_name(self, class_name: str) -> str:
        return f"{class_name}DTO"

    def imports_for(self, java_types) -> Tuple[str, ...]:
        """Sorted import statements needed for the given Java types."""
        return tuple(sorted({JAVA_IMPORTS[t] for t in java_types if t in JAVA_IMPORTS}))
