"""Tests for arq worker configuration."""

import pytest

from trust_engine.tasks.worker import WorkerSettings, build_cron_jobs, sweep_schedule


@pytest.mark.unit
class TestSweepSchedule:
    def test_minutes(self):
        schedule = sweep_schedule(300)
        assert schedule == {"minute": {0, 5, 10, 15, 20, 25, 30, 35, 40, 45, 50, 55}, "second": 0}

    def test_seconds(self):
        assert sweep_schedule(30) == {"second": {0, 30}}

    def test_hourly_cap(self):
        assert sweep_schedule(7200) == {"minute": {0}, "second": 0}


@pytest.mark.unit
class TestCronJobs:
    def test_no_cron_outside_worker_mode(self):
        assert build_cron_jobs("api", 300) == []
        assert build_cron_jobs("off", 300) == []

    def test_worker_mode_registers_sweep(self):
        jobs = build_cron_jobs("worker", 300)
        assert len(jobs) == 1
        assert jobs[0].name == "expire_suspensions_cron"

    def test_tests_run_without_sweep_cron(self):
        # conftest sets SUSPENSION_SWEEP_MODE=off
        assert WorkerSettings.cron_jobs == []


@pytest.mark.unit
def test_worker_registers_all_jobs():
    names = {f.name for f in WorkerSettings.functions}
    assert names == {
        "notify_report_resolved",
        "notify_appeal_reviewed",
        "notify_user_warned",
        "notify_user_suspended",
        "expire_suspensions_job",
    }
