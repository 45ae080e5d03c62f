import pytest

from torbox_cli.core.status import JobOutcome, classify_status


@pytest.mark.parametrize("status", ["completed", "ready", "cached", "done", "Completed "])
def test_completion_tokens(status: str) -> None:
    assert classify_status(status, 0.4) is JobOutcome.SUCCESS


@pytest.mark.parametrize("status", ["error", "failed", "FAILED"])
def test_failure_tokens(status: str) -> None:
    assert classify_status(status, 0.0) is JobOutcome.FAILURE


@pytest.mark.parametrize("status", ["downloading", "queued", "checking", "", "unknown"])
def test_other_tokens_keep_polling(status: str) -> None:
    assert classify_status(status, 0.99) is JobOutcome.CONTINUE


def test_full_progress_counts_as_success_for_any_token() -> None:
    assert classify_status("uploading", 1.0) is JobOutcome.SUCCESS
    assert classify_status("error", 1.0) is JobOutcome.SUCCESS
