"""
Per-stage resource monitoring for protocol runs.
"""

import logging
import os
import threading
import time

import psutil

logger = logging.getLogger(__name__)


class ResourceMonitor:
    """Samples peak CPU % and RSS (MB) of this process in a background thread."""

    def __init__(self, interval=0.01):
        self.interval = interval
        self.running = False
        self.peak_cpu = 0.0
        self.peak_ram = 0.0
        self.thread = None
        self._process = psutil.Process(os.getpid())

    def start(self):
        self.running = True
        self.peak_cpu = 0.0
        self.peak_ram = self._process.memory_info().rss / (1024 * 1024)
        # Reset the process CPU counter
        self._process.cpu_percent(interval=None)

        self.thread = threading.Thread(target=self._monitor_loop, daemon=True)
        self.thread.start()

    def stop(self):
        self.running = False
        if self.thread:
            self.thread.join()
            self.thread = None
        return self.peak_cpu, self.peak_ram

    def _monitor_loop(self):
        while self.running:
            try:
                c = self._process.cpu_percent(interval=None)
                m = self._process.memory_info().rss / (1024 * 1024)
            except psutil.Error as e:
                logger.debug(f"resource sampling failed: {e}")
                break
            self.peak_cpu = max(self.peak_cpu, c)
            self.peak_ram = max(self.peak_ram, m)
            time.sleep(self.interval)


class StageTimer:
    """Collects (seconds, peak CPU %, peak RAM MB) per named protocol stage."""

    def __init__(self, monitor=None):
        self.monitor = monitor if monitor is not None else ResourceMonitor()
        self.metrics = {}

    def run(self, stage, fn, *args, **kwargs):
        self.monitor.start()
        t_start = time.time()
        try:
            return fn(*args, **kwargs)
        finally:
            elapsed = time.time() - t_start
            cpu, ram = self.monitor.stop()
            self.metrics[stage] = (elapsed, cpu, ram)

    def format_table(self):
        lines = [
            "=" * 70,
            f"{'STAGE':<15} | {'TIME (s)':<10} | {'PEAK CPU %':<12} | {'PEAK RAM (MB)':<15}",
            "-" * 70,
        ]
        for stage, (t, c, r) in self.metrics.items():
            lines.append(f"{stage:<15} | {t:<10.4f} | {c:<12.1f} | {r:<15.1f}")
        lines.append("=" * 70)
        return "\n".join(lines)
