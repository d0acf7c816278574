"""Booking wizard: six-step form state machine and identity-driven reset.

Each device (identified by the client-supplied id) gets one ``BookingWizard``
and one ``IdentityMonitor``. The wizard subscribes to the monitor and discards
its data whenever the identity changes to someone without the admin role.
"""

import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum

from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.exceptions import TourPricingError, ValidationError
from app.schemas.calculator import BookingConfiguration, BookingDraft, CalculationResult

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    DATES = 1
    TOUR_AND_VEHICLE = 2
    PARTICIPANTS = 3
    ACCOMMODATION = 4
    SPECIAL_SERVICES = 5
    SUMMARY = 6


FIRST_STEP = WizardStep.DATES
LAST_STEP = WizardStep.SUMMARY


@dataclass(frozen=True)
class Identity:
    id: int
    role: str

    @property
    def is_elevated(self) -> bool:
        return self.role == settings.admin_role


IdentityListener = Callable[[Identity | None, Identity | None], None]


class IdentityMonitor:
    """Publishes changes of the authenticated identity to subscribers."""

    def __init__(self, identity: Identity | None = None):
        self._identity = identity
        self._listeners: list[IdentityListener] = []

    @property
    def identity(self) -> Identity | None:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, identity: Identity | None) -> bool:
        """Record the current identity. Returns True if it changed."""
        if identity == self._identity:
            return False
        previous, self._identity = self._identity, identity
        for listener in list(self._listeners):
            listener(previous, identity)
        return True


def step_is_valid(step: int, draft: BookingDraft) -> bool:
    if step == WizardStep.DATES:
        return draft.start_date is not None and draft.end_date is not None
    if step == WizardStep.TOUR_AND_VEHICLE:
        return draft.tour_id > 0 and draft.vehicle_id > 0
    if step == WizardStep.PARTICIPANTS:
        return draft.participants > 0
    if step == WizardStep.ACCOMMODATION:
        if draft.hotel_id:
            return draft.room_type is not None
        return True
    if step in (WizardStep.SPECIAL_SERVICES, WizardStep.SUMMARY):
        return True
    return False


Calculator = Callable[[BookingConfiguration], Awaitable[CalculationResult]]


class BookingWizard:
    """Linear six-step booking form."""

    def __init__(self):
        self.current_step: int = FIRST_STEP
        self.form_data = BookingDraft()
        self.calculation: CalculationResult | None = None
        self.is_calculating = False
        self.last_error: str | None = None
        self._generation = 0

    @property
    def is_valid(self) -> bool:
        return step_is_valid(self.current_step, self.form_data)

    def next_step(self) -> bool:
        if self.current_step >= LAST_STEP or not self.is_valid:
            return False
        self.current_step += 1
        return True

    def prev_step(self) -> bool:
        if self.current_step <= FIRST_STEP:
            return False
        self.current_step -= 1
        return True

    def update_form_data(self, **changes) -> None:
        """Merge field changes into the draft. Not gated by step validity."""
        merged = self.form_data.model_dump()
        merged.update(changes)
        try:
            self.form_data = BookingDraft.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

    def reset(self) -> None:
        currency = self.form_data.currency
        self.form_data = BookingDraft(currency=currency)
        self.calculation = None
        self.last_error = None
        self.current_step = FIRST_STEP
        # Any in-flight submission now belongs to discarded data
        self._generation += 1
        self.is_calculating = False

    def on_identity_change(self, previous: Identity | None, current: Identity | None) -> None:
        if current is not None and current.is_elevated:
            logger.debug("Identity changed to an admin, keeping wizard state")
            return
        logger.info("Identity changed, resetting booking wizard")
        self.reset()

    def to_configuration(self) -> BookingConfiguration:
        try:
            return BookingConfiguration.model_validate(self.form_data.model_dump())
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

    async def submit(self, calculate: Calculator) -> CalculationResult | None:
        """Run ``calculate`` on the current form data.

        Only the most recent submission may store its outcome; an older one
        that resolves later is dropped. Returns the result if it was stored.
        """
        if self.current_step != LAST_STEP:
            raise ValidationError("Complete all steps before requesting a quote")

        config = self.to_configuration()
        self._generation += 1
        generation = self._generation
        self.is_calculating = True
        self.last_error = None
        try:
            result = await calculate(config)
        except TourPricingError as e:
            if generation == self._generation:
                self.last_error = e.message
            raise
        finally:
            if generation == self._generation:
                self.is_calculating = False

        if generation != self._generation:
            logger.debug(f"Dropping stale calculation (generation {generation})")
            return None
        self.calculation = result
        return result

    def snapshot(self) -> dict:
        return {
            "current_step": self.current_step,
            "form_data": self.form_data,
            "is_valid": self.is_valid,
            "calculation": self.calculation,
            "is_calculating": self.is_calculating,
            "last_error": self.last_error,
        }


def _first_error(e: PydanticValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


class WizardRegistry:
    """Per-device wizards plus the identity monitors that drive their reset.

    Devices untouched for ``max_idle`` are dropped by ``evict_idle``; beyond
    ``max_devices`` the least recently used device is dropped on creation.
    """

    def __init__(self, max_idle: timedelta | None = None, max_devices: int | None = None):
        self.max_idle = max_idle or timedelta(minutes=settings.wizard_idle_minutes)
        self.max_devices = max_devices or settings.wizard_max_devices
        self._wizards: OrderedDict[str, BookingWizard] = OrderedDict()
        self._monitors: dict[str, IdentityMonitor] = {}
        self._touched: dict[str, datetime] = {}

    def get(self, client_id: str, identity: Identity | None, now: datetime | None = None) -> BookingWizard:
        wizard = self._wizards.get(client_id)
        if wizard is None:
            wizard = BookingWizard()
            monitor = IdentityMonitor(identity)
            monitor.subscribe(wizard.on_identity_change)
            self._wizards[client_id] = wizard
            self._monitors[client_id] = monitor
            self._evict_overflow()
        else:
            self._monitors[client_id].update(identity)
            self._wizards.move_to_end(client_id)
        self._touched[client_id] = now or datetime.now(timezone.utc)
        return wizard

    def identity_of(self, client_id: str) -> Identity | None:
        monitor = self._monitors.get(client_id)
        return monitor.identity if monitor is not None else None

    def identity_changed(self, client_id: str, identity: Identity | None) -> None:
        monitor = self._monitors.get(client_id)
        if monitor is not None:
            monitor.update(identity)

    def discard(self, client_id: str) -> bool:
        self._monitors.pop(client_id, None)
        self._touched.pop(client_id, None)
        return self._wizards.pop(client_id, None) is not None

    def evict_idle(self, now: datetime | None = None) -> int:
        """Drop wizards idle for longer than ``max_idle``. Returns how many went."""
        cutoff = (now or datetime.now(timezone.utc)) - self.max_idle
        idle = [
            client_id for client_id, touched in self._touched.items()
            if touched < cutoff and not self._wizards[client_id].is_calculating
        ]
        for client_id in idle:
            self.discard(client_id)
        if idle:
            logger.info(f"Evicted {len(idle)} idle booking wizards ({len(self)} remaining)")
        return len(idle)

    def _evict_overflow(self) -> None:
        while len(self._wizards) > self.max_devices:
            oldest = next(iter(self._wizards))
            self.discard(oldest)
            logger.warning(f"Wizard limit {self.max_devices} reached, dropped device {oldest}")

    def __len__(self) -> int:
        return len(self._wizards)


wizard_registry = WizardRegistry()
