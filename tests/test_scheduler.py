"""Tests for the hourly reminder scheduler"""
from unittest.mock import Mock, patch
from schedulers.reminder_scheduler import (
    run_scheduled_sweep,
    start_scheduler,
    stop_scheduler,
    JOB_ID,
)
from models.job_result import SweepResult


@patch('schedulers.reminder_scheduler.run_reminder_sweep')
def test_run_scheduled_sweep_returns_summary(mock_sweep):
    mock_sweep.return_value = SweepResult(processed=3, sent=2, failed=1, message="Reminder check complete")

    result = run_scheduled_sweep()

    assert result['processed'] == 3
    assert result['sent'] == 2
    assert result['failed'] == 1


@patch('schedulers.reminder_scheduler.run_reminder_sweep')
def test_run_scheduled_sweep_never_raises(mock_sweep):
    mock_sweep.side_effect = Exception("Supabase down")

    result = run_scheduled_sweep()

    assert result == {'status': 'error', 'error': 'Supabase down'}


@patch('schedulers.reminder_scheduler.BackgroundScheduler')
def test_start_scheduler_registers_hourly_job(mock_scheduler_cls):
    scheduler = Mock()
    mock_scheduler_cls.return_value = scheduler

    result = start_scheduler(minute=5)

    assert result is scheduler
    scheduler.start.assert_called_once()
    kwargs = scheduler.add_job.call_args.kwargs
    assert kwargs['id'] == JOB_ID
    assert kwargs['max_instances'] == 1
    assert kwargs['coalesce'] is True
    assert str(kwargs['trigger'].fields[6]) == '5'  # minute field


@patch('schedulers.reminder_scheduler.run_scheduled_sweep')
@patch('schedulers.reminder_scheduler.BackgroundScheduler')
def test_start_scheduler_run_immediately(mock_scheduler_cls, mock_run):
    start_scheduler(run_immediately=True)

    mock_run.assert_called_once()


def test_stop_scheduler():
    scheduler = Mock()

    stop_scheduler(scheduler)

    scheduler.shutdown.assert_called_once_with(wait=False)
