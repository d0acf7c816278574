from app.schemas.base import CamelModel
from app.schemas.calculator import BookingDraft, CalculationResult


class WizardStateResponse(CamelModel):
    current_step: int
    form_data: BookingDraft
    is_valid: bool
    calculation: CalculationResult | None = None
    is_calculating: bool = False
    last_error: str | None = None
