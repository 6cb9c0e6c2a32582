import pytest

from bfv_psi.monitor import ResourceMonitor, StageTimer


def test_resource_monitor():
    monitor = ResourceMonitor(interval=0.001)
    monitor.start()
    sum(i * i for i in range(100000))
    cpu, ram = monitor.stop()
    assert cpu >= 0
    assert ram > 0
    assert monitor.thread is None


def test_stage_timer_records_stages():
    timer = StageTimer()
    assert timer.run('Add', lambda a, b: a + b, 2, 3) == 5
    timer.run('Noop', lambda: None)
    assert list(timer.metrics) == ['Add', 'Noop']
    elapsed, cpu, ram = timer.metrics['Add']
    assert elapsed >= 0

    table = timer.format_table()
    assert "STAGE" in table
    assert "Add" in table and "Noop" in table


def test_stage_timer_records_failures():
    timer = StageTimer()

    def boom():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        timer.run('Fail', boom)
    assert 'Fail' in timer.metrics
    assert timer.monitor.running is False
