from app.validators.result import ValidationResult
from app.validators.delivery_validator import DeliveryValidator
from app.validators.selection_validator import SelectionValidator

__all__ = ["ValidationResult", "DeliveryValidator", "SelectionValidator"]
