import threading
import time

from memwatch.consts.SamplerState import SamplerState
from memwatch.errors import OutputSinkError
from memwatch.service.monitor.memory_monitor import MemoryMonitor
from memwatch.service.output.output_sink import OutputSink

from helpers import FakeSnapshotProvider, monitor_config, record

PID = 100


def _tree(root_kib, child_kib=(500, 300)):
    records = [record(PID, 1, kib=root_kib, exe="/usr/bin/root", name="root")]
    records += [record(PID + i + 1, PID, kib=kib, name=f"child{i}") for i, kib in enumerate(child_kib)]
    return records


def _cancel_after(cancel_event, calls):
    def on_snapshot(n):
        if n >= calls:
            cancel_event.set()
    return on_snapshot


class FailingSink(OutputSink):
    def write(self, text):
        raise OutputSinkError("disk full")


def _monitor(tmp_path, snapshots, cancel_after, **config_kwargs):
    cancel = threading.Event()
    provider = FakeSnapshotProvider(snapshots, on_snapshot=_cancel_after(cancel, cancel_after))
    out = tmp_path / "memwatch.log"
    monitor = MemoryMonitor(PID, monitor_config(out=str(out), **config_kwargs), cancel, provider=provider)
    return monitor, out


def test_high_water_mark_report_then_drain_flushes_pending_once(tmp_path):
    monitor, out = _monitor(tmp_path, [_tree(1000), _tree(1100)], cancel_after=2, interval=5.0)

    monitor.run()

    text = out.read_text(encoding="utf-8")
    assert monitor.reports_written == 2
    assert text.count("memwatch: high water mark reached: 1 MiB used") == 1
    assert text.count("memwatch: presently at: 1 MiB used") == 1
    assert text.index("high water mark reached") < text.index("presently at")
    assert monitor.high_water_mark == 1800 * 1024
    assert monitor.pending == ""
    assert monitor.state is SamplerState.STOPPED


def test_drain_does_not_repeat_a_report_already_written(tmp_path):
    monitor, out = _monitor(tmp_path, [_tree(1000)], cancel_after=1, interval=5.0)

    monitor.run()

    assert monitor.reports_written == 1
    assert out.read_text(encoding="utf-8").count("memwatch:") == 1


def test_watched_process_missing_produces_no_report(tmp_path):
    monitor, out = _monitor(tmp_path, [[record(1, kib=4096)]], cancel_after=1, interval=5.0)

    monitor.run()

    assert monitor.reports_written == 0
    assert out.read_text(encoding="utf-8") == ""
    assert monitor.detector.state.tick_index == 1


def test_periodic_reports_every_third_tick(tmp_path):
    monitor, out = _monitor(tmp_path, [_tree(1000)], cancel_after=7, absolute_kib=10**9, every_nth=3)

    monitor.run()

    assert monitor.reports_written == 3
    assert out.read_text(encoding="utf-8").count("memwatch: presently at") == 3


def test_tick_returns_decision(tmp_path):
    monitor, _ = _monitor(tmp_path, [_tree(1000), _tree(1900, child_kib=())], cancel_after=99)

    with monitor.sink:
        first = monitor.tick()
        second = monitor.tick()

    assert first.triggered and first.aggregate_bytes == 1800 * 1024
    assert not second.triggered
    assert monitor.pending.startswith("🌊 memwatch: presently at")


def test_show_free_appends_system_memory(tmp_path):
    monitor, out = _monitor(tmp_path, [_tree(1000)], cancel_after=1, interval=5.0, show_free=True)

    monitor.run()

    assert "Mem:" in out.read_text(encoding="utf-8")


def test_sink_failure_stops_sampling_thread(tmp_path):
    cancel = threading.Event()
    provider = FakeSnapshotProvider([_tree(1000)])
    monitor = MemoryMonitor(PID, monitor_config(), cancel, provider=provider, sink=FailingSink())

    monitor.start()
    error = monitor.join(timeout=5.0)

    assert isinstance(error, OutputSinkError)
    assert monitor.state is SamplerState.STOPPED
    assert not cancel.is_set()


def test_unopenable_output_file_is_reported(tmp_path):
    cancel = threading.Event()
    out = tmp_path / "missing-dir" / "memwatch.log"
    monitor = MemoryMonitor(PID, monitor_config(out=str(out)), cancel,
                            provider=FakeSnapshotProvider([_tree(1000)]))

    monitor.start()
    error = monitor.join(timeout=5.0)

    assert isinstance(error, OutputSinkError)
    assert "Cannot open output file" in str(error)


def test_cancellation_interrupts_wait(tmp_path):
    cancel = threading.Event()
    provider = FakeSnapshotProvider([_tree(1000)])
    monitor = MemoryMonitor(PID, monitor_config(out=str(tmp_path / "out.log"), interval=60.0),
                            cancel, provider=provider)

    monitor.start()
    cancel.set()
    monitor.join(timeout=5.0)

    assert not monitor.thread.is_alive()
    assert monitor.error is None


def test_cancel_during_wait_flushes_pending_report_once(tmp_path):
    cancel = threading.Event()
    out = tmp_path / "memwatch.log"
    provider = FakeSnapshotProvider([_tree(1000)])
    # Threshold too high to trigger, so the first tick leaves a pending report
    monitor = MemoryMonitor(PID, monitor_config(out=str(out), absolute_kib=10**9, interval=30.0),
                            cancel, provider=provider)

    monitor.start()
    time.sleep(0.3)
    assert monitor.thread.is_alive()
    assert monitor.pending
    cancel.set()
    monitor.join(timeout=5.0)

    assert not monitor.thread.is_alive()
    assert provider.calls == 1
    assert monitor.reports_written == 1
    assert monitor.pending == ""
    assert out.read_text(encoding="utf-8").count("memwatch: presently at") == 1
