from __future__ import annotations

import hashlib
import logging
import os
import random
import threading
import time
from typing import Any, Optional, Tuple

from ..core.engine import Guard
from ..core.errors import ConfigurationError
from ..core.ports import PolicySource
from ..store.policy_loader import parse_policy_text

logger = logging.getLogger("authzrules.storage")


class FilePolicySource(PolicySource):
    """Rule configuration stored in a local JSON or YAML file.

    The etag is the SHA-256 of the file content, recomputed only when the
    file's (size, mtime_ns) signature changes. A metadata-only change such as
    ``touch`` therefore does not trigger a reload.
    """

    def __init__(self, path: str, *, chunk_size: int = 256 * 1024) -> None:
        self.path = path
        self._chunk_size = int(chunk_size)
        self._sig: Optional[Tuple[int, int]] = None
        self._sha: Optional[str] = None

    def _signature(self) -> Tuple[int, int]:
        st = os.stat(self.path)
        return (st.st_size, st.st_mtime_ns)

    def _digest(self) -> str:
        h = hashlib.sha256()
        with open(self.path, "rb") as f:
            for chunk in iter(lambda: f.read(self._chunk_size), b""):
                h.update(chunk)
        return h.hexdigest()

    def etag(self) -> Optional[str]:
        try:
            sig = self._signature()
        except FileNotFoundError:
            self._sig = None
            self._sha = None
            return None
        if sig != self._sig or self._sha is None:
            self._sha = self._digest()
            self._sig = sig
        return self._sha

    def load(self) -> Any:
        with open(self.path, "r", encoding="utf-8") as f:
            text = f.read()
        return parse_policy_text(text, filename=self.path)


class HotReloader:
    """Poll a PolicySource and swap the Guard's RuleSet when it changes.

    - etag first: the source is only loaded when its etag differs from the
      last applied one (a ``None`` etag always loads).
    - An invalid configuration never replaces the active RuleSet; the guard
      keeps serving the last-known-good rules and the error is logged.
    - Failures back off exponentially with jitter to avoid log/IO storms.
    - ``start()``/``stop()`` run the poll loop in a background thread.
    """

    def __init__(
        self,
        guard: Guard,
        source: PolicySource,
        *,
        poll_interval: float = 5.0,
        backoff_min: float = 2.0,
        backoff_max: float = 30.0,
        jitter_ratio: float = 0.15,
        initial_load: bool = False,
    ) -> None:
        self.guard = guard
        self.source = source
        self.poll_interval = float(poll_interval)
        self.backoff_min = float(backoff_min)
        self.backoff_max = float(backoff_max)
        self.jitter_ratio = float(jitter_ratio)

        self._last_etag: Optional[str] = None
        if not initial_load:
            # the guard was built from this source already
            try:
                self._last_etag = self.source.etag()
            except Exception:
                logger.debug("authzrules: initial etag lookup failed", exc_info=True)
        self._backoff = self.backoff_min
        self._suppress_until = 0.0
        self._last_reload_at: Optional[float] = None
        self._last_error: Optional[Exception] = None

        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ----------------------------------------------------------------- public

    def check_and_reload(self) -> bool:
        """Run one check. Returns True if a new RuleSet was activated."""
        now = time.time()
        with self._lock:
            if now < self._suppress_until:
                return False
            try:
                etag = self.source.etag()
                if etag is not None and etag == self._last_etag:
                    return False
                data = self.source.load()
                self.guard.set_policy(data, source=self._source_name())
            except ConfigurationError as e:
                self._failed(now, e, "authzrules: rejected rules from %s, keeping previous rules: %s")
                return False
            except FileNotFoundError as e:
                self._failed(now, e, "authzrules: rule file %s not found: %s", warn=True)
                return False
            except Exception as e:
                self._failed(now, e, "authzrules: reloading rules from %s failed: %s")
                return False

            self._last_etag = etag
            self._last_reload_at = now
            self._last_error = None
            self._backoff = self.backoff_min
            self._suppress_until = 0.0
            return True

    def start(self, interval: Optional[float] = None) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run,
                args=(float(interval if interval is not None else self.poll_interval),),
                name="authzrules-reloader",
                daemon=True,
            )
            self._thread.start()

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop.set()
        thread.join(timeout=timeout)
        with self._lock:
            if not thread.is_alive():
                self._thread = None

    @property
    def last_etag(self) -> Optional[str]:
        with self._lock:
            return self._last_etag

    @property
    def last_reload_at(self) -> Optional[float]:
        with self._lock:
            return self._last_reload_at

    @property
    def last_error(self) -> Optional[Exception]:
        with self._lock:
            return self._last_error

    @property
    def suppressed_until(self) -> float:
        with self._lock:
            return self._suppress_until

    # -------------------------------------------------------------- internals

    def _source_name(self) -> str:
        path = getattr(self.source, "path", None)
        return path if isinstance(path, str) else type(self.source).__name__

    def _failed(self, now: float, err: Exception, msg: str, *, warn: bool = False) -> None:
        self._last_error = err
        if warn:
            logger.warning(msg, self._source_name(), err)
        elif isinstance(err, ConfigurationError):
            logger.error(msg, self._source_name(), err)
        else:
            logger.exception(msg, self._source_name(), err, exc_info=err)

        self._backoff = min(self.backoff_max, max(self.backoff_min, self._backoff * 2.0))
        jitter = self._backoff * self.jitter_ratio * random.uniform(-1.0, 1.0)
        self._suppress_until = now + max(0.2, self._backoff + jitter)

    def _run(self, interval: float) -> None:
        while not self._stop.is_set():
            try:
                self.check_and_reload()
            except Exception as e:  # pragma: no cover
                logger.exception("authzrules: reloader loop error", exc_info=e)

            sleep_for = interval
            with self._lock:
                remaining = self._suppress_until - time.time()
            if remaining > 0:
                sleep_for = min(sleep_for, max(0.2, remaining))
            sleep_for = max(0.2, sleep_for + interval * self.jitter_ratio * random.uniform(-1.0, 1.0))
            self._stop.wait(timeout=sleep_for)


__all__ = ["FilePolicySource", "HotReloader"]
