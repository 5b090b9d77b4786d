"""Tests for domain models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from zen_backup.core.models import (
    ArchiveKind,
    CopyStatus,
    FaultPlan,
    OperationResult,
    RetentionPolicy,
    SqliteCopyOutcome,
)


def test_outcome_flags():
    clean = SqliteCopyOutcome(status=CopyStatus.CLEAN, source=Path("a"), destination=Path("b"))
    fatal = clean.model_copy(update={"status": CopyStatus.FATAL})
    assert clean.ok and not clean.is_fatal
    assert fatal.is_fatal and not fatal.ok


def test_fault_plan_from_env():
    plan = FaultPlan.from_env(
        {
            "ZEN_BACKUP_TEST_CORRUPT_SQLITE": "places.sqlite",
            "ZEN_BACKUP_TEST_FORCE_SQLITE_FALLBACK": "/p/favicons.sqlite",
            "ZEN_BACKUP_TEST_DISK_FULL": "1",
        }
    )
    assert plan.is_marked_corrupt(Path("/x/places.sqlite"))
    assert plan.forces_fallback(Path("/p/favicons.sqlite"))
    assert not plan.forces_fallback(Path("/q/other.sqlite"))
    assert plan.disk_full


def test_fault_plan_empty_env():
    plan = FaultPlan.from_env({"ZEN_BACKUP_TEST_DISK_FULL": "0"})
    assert plan == FaultPlan()


def test_retention_policy_rejects_negative():
    with pytest.raises(ValidationError):
        RetentionPolicy(kind=ArchiveKind.DAILY, max_age_days=-1)


def test_operation_result_drops_blank_messages():
    result = OperationResult(success=False, warnings=["", "  ", "kept"], errors=["boom", ""])
    assert result.warnings == ["kept"]
    assert result.errors == ["boom"]
    assert result.exit_code == 1
    assert OperationResult(success=True).exit_code == 0


def test_models_are_frozen():
    plan = FaultPlan()
    with pytest.raises(ValidationError):
        plan.disk_full = True
