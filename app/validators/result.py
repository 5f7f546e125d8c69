from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    @property
    def reason(self) -> Optional[str]:
        return self.errors[0] if self.errors else None

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=len(errors) == 0, errors=errors)
