"""
Periodic background tasks.

Tasks are registered with ``schedule(name, func, interval_seconds)`` and run
on daemon threads inside an application context. The transition logic lives
in the services, so the thread runner can be swapped for cron or a queue
worker calling the same functions (see ``commands.py``).
"""

import atexit
import threading

from flask import Flask

from rentsphere.extensions import db


class Scheduler:
    def __init__(self, app: Flask | None = None):
        self._tasks: dict[str, tuple] = {}
        self._threads: list[threading.Thread] = []
        self._stop = threading.Event()
        self.app = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.app = app

    @property
    def running(self) -> bool:
        return bool(self._threads) and not self._stop.is_set()

    def schedule(self, name: str, func, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval for {name!r} must be positive")
        if self.running:
            raise RuntimeError("cannot schedule tasks on a running scheduler")
        self._tasks[name] = (func, float(interval_seconds))

    def _run(self, name: str, func, interval: float) -> None:
        logger = self.app.logger
        # First tick waits one interval so startup stays quick
        while not self._stop.wait(interval):
            with self.app.app_context():
                try:
                    func()
                except Exception:
                    logger.exception("Background task %s failed", name)
                finally:
                    db.session.remove()

    def start(self) -> None:
        if self.app is None:
            raise RuntimeError("scheduler is not bound to an app")
        if self.running:
            return

        self._stop.clear()
        for name, (func, interval) in self._tasks.items():
            thread = threading.Thread(
                target=self._run,
                args=(name, func, interval),
                name=f"scheduler-{name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
            self.app.logger.info("Scheduled %s every %ss", name, interval)

        atexit.register(self.shutdown)

    def shutdown(self, timeout: float = 5) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []
