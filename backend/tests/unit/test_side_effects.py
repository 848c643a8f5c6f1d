"""Unit tests for the best-effort side-effect runner."""

import pytest

from richhabits.core.side_effects import PostCommitHooks, SideEffectSkipped, run_side_effect


class Flaky:
    """Callable that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, exc: Exception | None = None):
        self.failures = failures
        self.calls = 0
        self.exc = exc or RuntimeError("temporary failure")

    async def __call__(self) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc


@pytest.mark.asyncio
async def test_success_on_first_attempt():
    fn = Flaky(failures=0)
    result = await run_side_effect("title_card", fn, max_attempts=3)
    assert result.status == "succeeded"
    assert result.attempts == 1
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_retries_until_success():
    fn = Flaky(failures=2)
    result = await run_side_effect("title_card", fn, max_attempts=3)
    assert result.status == "succeeded"
    assert result.attempts == 3


@pytest.mark.asyncio
async def test_failure_after_exhausting_attempts_is_reported_not_raised():
    fn = Flaky(failures=10)
    result = await run_side_effect("title_card", fn, max_attempts=3)
    assert result.status == "failed"
    assert result.attempts == 3
    assert "RuntimeError: temporary failure" in result.detail
    assert fn.calls == 3


@pytest.mark.asyncio
async def test_skip_is_not_retried():
    fn = Flaky(failures=10, exc=SideEffectSkipped("No acting user"))
    result = await run_side_effect("owner_role", fn, max_attempts=5)
    assert result.status == "skipped"
    assert result.detail == "No acting user"
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_hooks_run_in_order_and_clear():
    order: list[str] = []

    def record(name: str):
        async def _fn() -> None:
            order.append(name)

        return _fn

    hooks = PostCommitHooks(max_attempts=2)
    hooks.add("first", record("first"))
    hooks.add("second", record("second"))
    assert len(hooks) == 2

    results = await hooks.run()

    assert order == ["first", "second"]
    assert [r.name for r in results] == ["first", "second"]
    assert len(hooks) == 0


@pytest.mark.asyncio
async def test_hook_failure_does_not_stop_later_hooks():
    hooks = PostCommitHooks(max_attempts=2)
    later = Flaky(failures=0)
    hooks.add("broken", Flaky(failures=10))
    hooks.add("later", later)

    results = await hooks.run()

    assert [r.status for r in results] == ["failed", "succeeded"]
    assert later.calls == 1
