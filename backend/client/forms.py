# backend/client/forms.py
"""
State machine for dialogs and edit modes.

    closed --open--> open --submit--> submitting --success--> closed
                      |                   |
                    cancel             failure
                      v                   v
                   closed    <--cancel-- error --submit--> submitting
"""
import enum
from typing import Callable, Dict, Optional, Tuple, TypeVar

T = TypeVar("T")


class FormState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"
    ERROR = "error"


class FormEvent(str, enum.Enum):
    OPEN = "open"
    SUBMIT = "submit"
    SUCCESS = "success"
    FAILURE = "failure"
    CANCEL = "cancel"


TRANSITIONS: Dict[Tuple[FormState, FormEvent], FormState] = {
    (FormState.CLOSED, FormEvent.OPEN): FormState.OPEN,
    (FormState.OPEN, FormEvent.SUBMIT): FormState.SUBMITTING,
    (FormState.ERROR, FormEvent.SUBMIT): FormState.SUBMITTING,
    (FormState.SUBMITTING, FormEvent.SUCCESS): FormState.CLOSED,
    (FormState.SUBMITTING, FormEvent.FAILURE): FormState.ERROR,
    (FormState.OPEN, FormEvent.CANCEL): FormState.CLOSED,
    (FormState.ERROR, FormEvent.CANCEL): FormState.CLOSED,
}


class InvalidTransition(Exception):
    def __init__(self, state: FormState, event: FormEvent):
        super().__init__(f"Cannot {event.value} a form that is {state.value}")
        self.state = state
        self.event = event


class FormMachine:
    def __init__(self, state: FormState = FormState.CLOSED):
        self.state = state
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state is not FormState.CLOSED

    def _fire(self, event: FormEvent) -> FormState:
        target = TRANSITIONS.get((self.state, event))
        if target is None:
            raise InvalidTransition(self.state, event)
        self.state = target
        return target

    def open(self) -> FormState:
        return self._fire(FormEvent.OPEN)

    def submit(self) -> FormState:
        return self._fire(FormEvent.SUBMIT)

    def success(self) -> FormState:
        self._fire(FormEvent.SUCCESS)
        self.error = None
        return self.state

    def failure(self, message: str) -> FormState:
        self._fire(FormEvent.FAILURE)
        self.error = message
        return self.state

    def cancel(self) -> FormState:
        self._fire(FormEvent.CANCEL)
        self.error = None
        return self.state

    def run(self, action: Callable[[], T], error_types=(Exception,)) -> Optional[T]:
        """
        Submit the form around ``action``.

        Returns the action's result on success. On one of ``error_types`` the
        form moves to ERROR with the exception text and None is returned.
        """
        self.submit()
        try:
            result = action()
        except error_types as exc:
            self.failure(str(exc))
            return None
        self.success()
        return result
