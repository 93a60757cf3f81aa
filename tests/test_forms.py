import pytest

from backend.client.forms import FormMachine, FormState, InvalidTransition


def test_happy_path():
    form = FormMachine()
    assert form.state is FormState.CLOSED and not form.is_open
    form.open()
    form.submit()
    assert form.state is FormState.SUBMITTING
    form.success()
    assert form.state is FormState.CLOSED


def test_failure_keeps_form_open_with_message():
    form = FormMachine()
    form.open()
    form.submit()
    form.failure("Forbidden: Admin access required")
    assert form.state is FormState.ERROR
    assert form.is_open
    assert form.error == "Forbidden: Admin access required"

    form.submit()
    form.success()
    assert form.error is None


def test_cancel_clears_error():
    form = FormMachine(FormState.ERROR)
    form.error = "boom"
    form.cancel()
    assert form.state is FormState.CLOSED
    assert form.error is None


@pytest.mark.parametrize("state,event", [
    (FormState.CLOSED, "submit"),
    (FormState.CLOSED, "cancel"),
    (FormState.OPEN, "success"),
    (FormState.SUBMITTING, "open"),
    (FormState.SUBMITTING, "cancel"),
])
def test_undefined_transitions_raise(state, event):
    form = FormMachine(state)
    with pytest.raises(InvalidTransition):
        getattr(form, event)()
    assert form.state is state


def test_run_returns_result_or_records_failure():
    form = FormMachine(FormState.OPEN)
    assert form.run(lambda: 42) == 42
    assert form.state is FormState.CLOSED

    def fail():
        raise ValueError("El monto no puede ser cero")

    form.open()
    assert form.run(fail, error_types=(ValueError,)) is None
    assert form.state is FormState.ERROR
    assert form.error == "El monto no puede ser cero"
