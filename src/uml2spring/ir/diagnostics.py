"""Parse errors and recoverable diagnostics produced during a generation run."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional
from uml2spring.config.logging import get_logger

logger = get_logger(__name__)

CLASSIFICATION_WARNING = "ClassificationWarning"
CONSISTENCY_WARNING = "ConsistencyWarning"
VALIDATION_WARNING = "ValidationWarning"


class ParseError(ValueError):
    """Raised when the diagram document cannot be turned into a DiagramIR."""


@dataclass(frozen=True)
class Diagnostic:
    """A recovered problem found while compiling a diagram."""

    severity: Literal["warning", "info"]
    code: str  # ClassificationWarning, ConsistencyWarning, ValidationWarning
    class_id: Optional[str]
    field: Optional[str]
    message: str

    def format(self) -> str:
        location = self.class_id or "-"
        if self.field:
            location = f"{location}.{self.field}"
        return f"[{self.code}] {location}: {self.message}"


@dataclass
class DiagnosticsCollector:
    """Accumulates diagnostics for one run and logs each as it is recorded."""

    items: List[Diagnostic] = field(default_factory=list)

    def add(
        self,
        code: str,
        message: str,
        class_id: Optional[str] = None,
        field_name: Optional[str] = None,
        severity: Literal["warning", "info"] = "warning",
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            severity=severity,
            code=code,
            class_id=class_id,
            field=field_name,
            message=message,
        )
        self.items.append(diagnostic)
        logger.warning(diagnostic.format())
        return diagnostic

    def classification(self, message: str, class_id: Optional[str] = None, field_name: Optional[str] = None) -> Diagnostic:
        return self.add(CLASSIFICATION_WARNING, message, class_id, field_name)

    def consistency(self, message: str, class_id: Optional[str] = None, field_name: Optional[str] = None) -> Diagnostic:
        return self.add(CONSISTENCY_WARNING, message, class_id, field_name)

    def validation(self, message: str, class_id: Optional[str] = None, field_name: Optional[str] = None) -> Diagnostic:
        return self.add(VALIDATION_WARNING, message, class_id, field_name)

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self.items if d.code == code]

    def __len__(self) -> int:
        return len(self.items)
