"""Saga: forward order, reverse compensation, error surfacing."""

import pytest

from rentdesk.application.exceptions import ConflictError, ProvisioningError
from rentdesk.application.saga import Saga, SagaStep


def recording_step(name, log, fail=False, fail_backward=False):
    async def forward(ctx):
        log.append(f"+{name}")
        if fail:
            raise RuntimeError(f"{name} broke")
        return f"{name}-result"

    async def backward(ctx):
        log.append(f"-{name}")
        if fail_backward:
            raise RuntimeError("undo broke")

    return SagaStep(name, forward, backward)


async def test_all_steps_run_in_order():
    log = []
    ctx = await Saga("s", [recording_step("a", log), recording_step("b", log)]).run()
    assert log == ["+a", "+b"]
    assert ctx == {"a": "a-result", "b": "b-result"}


async def test_failure_compensates_in_reverse_order():
    log = []
    saga = Saga(
        "s",
        [recording_step("a", log), recording_step("b", log), recording_step("c", log, fail=True)],
    )
    with pytest.raises(ProvisioningError, match="step 'c'"):
        await saga.run()
    assert log == ["+a", "+b", "+c", "-b", "-a"]


async def test_compensation_failure_does_not_stop_others():
    log = []
    saga = Saga(
        "s",
        [
            recording_step("a", log),
            recording_step("b", log, fail_backward=True),
            recording_step("c", log, fail=True),
        ],
    )
    with pytest.raises(ProvisioningError):
        await saga.run()
    assert log[-2:] == ["-b", "-a"]


async def test_typed_errors_pass_through():
    async def conflict(ctx):
        raise ConflictError("Email already exists")

    log = []
    saga = Saga("s", [recording_step("a", log), SagaStep("b", conflict)])
    with pytest.raises(ConflictError):
        await saga.run()
    assert log == ["+a", "-a"]


async def test_steps_without_backward_are_skipped():
    log = []

    async def noop(ctx):
        return None

    saga = Saga("s", [SagaStep("plain", noop), recording_step("b", log, fail=True)])
    with pytest.raises(ProvisioningError):
        await saga.run()
    assert log == ["+b"]


async def test_context_is_shared_between_steps():
    async def first(ctx):
        return 41

    async def second(ctx):
        return ctx["first"] + 1

    ctx = await Saga("s", [SagaStep("first", first), SagaStep("second", second)]).run({"seed": 0})
    assert ctx == {"seed": 0, "first": 41, "second": 42}
