"""ScanOrchestrator: drive one project scan end to end.

Pipeline:
    1. Read the risk snapshot once (a concurrent refresh cannot tear it).
    2. Select applicable scanners and collect packages in priority order.
       A ``ScanFailure`` degrades to "no packages from that ecosystem"
       plus a warning.
    3. Evaluate packages concurrently on a worker pool. Each evaluation is
       bounded by ``package_timeout``; the whole scan by ``scan_deadline``.
       Failures, timeouts, and abandoned work become LOW
       "evaluation incomplete" alerts instead of disappearing.
    4. Publish alerts to the optional ``AlertStream`` (blocking, never
       dropping, while the scan is live).
    5. Assemble the SBOM in emission order and seal it. ``SigningFailure``
       propagates: the caller gets an explicit error, never an unsealed SBOM.

Concurrency model
-----------------
An asyncio event loop schedules the work; the per-package checks run
synchronously inside a ``ThreadPoolExecutor`` because their collaborators
(verifiers, remote feeds) are blocking calls. A semaphore sized to
``max_workers`` gates entry. A slot is released when the worker thread
finishes, not when its wait times out, so a package's timeout only starts
once a thread is free to run it. Workers share nothing mutable: the
snapshot and evaluator are read-only.

Abandoned evaluations cannot be interrupted inside their thread; they keep
their slot until they return and their results are ignored.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence

from chainguardian.core.alerts.models import Alert
from chainguardian.core.alerts.stream import AlertStream, AlertStreamTimeout
from chainguardian.core.inventory.models import Package
from chainguardian.core.orchestrator.models import ScanOptions, ScanReport
from chainguardian.core.registries.snapshot import SnapshotStore
from chainguardian.core.risk.evaluator import RiskEvaluator, incomplete_alert
from chainguardian.core.risk.verification import SignatureVerifier
from chainguardian.core.sbom.models import SBOM, SBOMBuilder
from chainguardian.core.sbom.signer import SBOMSigner
from chainguardian.exceptions import EvaluationFailure, ScanFailure
from chainguardian.feeds.base import ChainedFeed, VulnerabilityFeed
from chainguardian.scanners.base import DependencyScanner
from chainguardian.scanners.project import detect_project_metadata
from chainguardian.scanners.registry import ScannerRegistry, default_registry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Poll interval for blocking publishes, so a cancelled scan can switch to
# the timeout-bounded path.
_PUBLISH_POLL_SECONDS: float = 0.25


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanOrchestrator:
    """Run scans of project directories.

    Args:
        signer: Seals every SBOM. Required: scans never return unsealed SBOMs.
        store: Source of the current risk snapshot. Defaults to an empty
            store with the default trusted sources.
        scanners: Ecosystem scanners in priority order. Defaults to
            ``default_registry()``.
        verifier: Signature verification collaborator.
        feeds: Extra vulnerability feeds consulted after the snapshot index.
        options: Concurrency and timeout settings.
        stream: Optional bounded stream that receives alerts as packages
            finish.
        clock: Timestamp source for SBOM and alert times.
    """

    def __init__(
        self,
        signer: SBOMSigner,
        *,
        store: SnapshotStore | None = None,
        scanners: ScannerRegistry | None = None,
        verifier: SignatureVerifier | None = None,
        feeds: Sequence[VulnerabilityFeed] = (),
        options: ScanOptions | None = None,
        stream: AlertStream | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._signer = signer
        self._store = store or SnapshotStore()
        self._scanners = scanners or default_registry()
        self._verifier = verifier
        self._feeds = tuple(feeds)
        self._options = options or ScanOptions()
        self._stream = stream
        self._clock = clock

    @property
    def options(self) -> ScanOptions:
        return self._options

    # -- Public API ---------------------------------------------------------

    def scan(self, project_path: Path | str) -> tuple[SBOM, list[Alert]]:
        """Scan a project and return ``(sealed SBOM, alerts)``.

        Raises:
            SigningFailure: If the SBOM could not be sealed.
        """
        report = self.run(project_path)
        return report.sbom, report.alerts

    def run(self, project_path: Path | str) -> ScanReport:
        """Scan a project and return the full report (blocking)."""
        return asyncio.run(self.run_async(Path(project_path)))

    async def run_async(self, project_path: Path) -> ScanReport:
        """Scan a project from inside a running event loop.

        The scan deadline runs from here, so time spent collecting
        dependencies counts against it.
        """
        started = asyncio.get_running_loop().time()
        snapshot = self._store.current()
        name, version = detect_project_metadata(project_path)
        builder = SBOMBuilder(name, version, generated_at=self._clock())
        warnings: list[str] = []

        scanners = self._scanners.applicable(
            project_path, first_match_only=self._options.first_match_only
        )
        if not scanners:
            warnings.append(f"No supported manifest found in {project_path}")
        packages: list[Package] = []
        for scanner in scanners:
            packages.extend(self._collect(scanner, project_path, warnings))
        builder.extend(packages)
        logger.info(
            "Scanning %s@%s: %d dependencies from %s",
            name, version, len(packages),
            ", ".join(s.ecosystem for s in scanners) or "no ecosystems",
        )

        feed = ChainedFeed(snapshot.vulnerabilities, *self._feeds) if self._feeds else None
        evaluator = RiskEvaluator(
            snapshot, verifier=self._verifier, feed=feed, clock=self._clock
        )
        per_package, incomplete = await self._evaluate_all(
            evaluator, packages, warnings, started
        )

        alerts = [alert for package_alerts in per_package for alert in package_alerts]
        sbom = self._signer.sign(builder.build())
        return ScanReport(
            sbom=sbom,
            alerts=alerts,
            warnings=warnings,
            ecosystems=[s.ecosystem for s in scanners],
            incomplete=incomplete,
            snapshot_generation=snapshot.generation,
        )

    # -- Dependency collection ----------------------------------------------

    def _collect(
        self, scanner: DependencyScanner, project_path: Path, warnings: list[str]
    ) -> list[Package]:
        try:
            found = list(scanner.scan(project_path))
        except ScanFailure as exc:
            logger.warning("Scanner %s failed: %s", exc.ecosystem, exc.message)
            warnings.append(f"{exc.ecosystem}: {exc.message}")
            return []
        except Exception as exc:
            logger.warning("Scanner %s crashed", scanner.ecosystem, exc_info=True)
            warnings.append(f"{scanner.ecosystem}: scanner error: {exc}")
            return []
        logger.debug("Scanner %s found %d packages", scanner.ecosystem, len(found))
        return found

    # -- Concurrent evaluation ----------------------------------------------

    def _evaluate_one(self, evaluator: RiskEvaluator, pkg: Package) -> list[Alert]:
        """Worker body: one package, failures converted to alerts."""
        try:
            return evaluator.evaluate(pkg)
        except EvaluationFailure as exc:
            logger.warning("Evaluation incomplete for %s: %s", pkg.label, exc)
            return [*exc.partial_alerts, incomplete_alert(pkg, str(exc), clock=self._clock)]
        except Exception as exc:
            logger.warning("Evaluation crashed for %s", pkg.label, exc_info=True)
            return [incomplete_alert(pkg, f"unexpected error: {exc}", clock=self._clock)]

    async def _evaluate_all(
        self,
        evaluator: RiskEvaluator,
        packages: list[Package],
        warnings: list[str],
        started: float,
    ) -> tuple[list[list[Alert]], list[str]]:
        """Evaluate every package; returns per-package alerts and incomplete labels."""
        if not packages:
            return [], []

        opts = self._options
        loop = asyncio.get_running_loop()
        workers = ThreadPoolExecutor(
            max_workers=opts.max_workers, thread_name_prefix="chainguardian-eval"
        )
        publisher = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chainguardian-pub")
        semaphore = asyncio.Semaphore(opts.max_workers)
        cancelled = threading.Event()
        results: dict[int, list[Alert]] = {}
        incomplete: list[str] = []

        def release_slot(_: Future) -> None:
            try:
                loop.call_soon_threadsafe(semaphore.release)
            except RuntimeError:
                logger.debug("Event loop closed before an abandoned evaluation returned")

        async def evaluate(index: int, pkg: Package) -> None:
            await semaphore.acquire()
            future = workers.submit(self._evaluate_one, evaluator, pkg)
            future.add_done_callback(release_slot)
            try:
                alerts = await asyncio.wait_for(
                    asyncio.wrap_future(future), timeout=opts.package_timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Evaluation of %s exceeded %ss", pkg.label, opts.package_timeout
                )
                alerts = [incomplete_alert(
                    pkg, f"timed out after {opts.package_timeout:g}s", clock=self._clock
                )]
                incomplete.append(pkg.label)
            else:
                if any(a.is_incomplete for a in alerts):
                    incomplete.append(pkg.label)
            results[index] = alerts
            if self._stream is not None:
                await loop.run_in_executor(publisher, self._publish_all, alerts, cancelled)

        tasks = [asyncio.ensure_future(evaluate(i, p)) for i, p in enumerate(packages)]
        try:
            remaining = None
            if opts.scan_deadline is not None:
                remaining = max(0.0, opts.scan_deadline - (loop.time() - started))
            _, pending = await asyncio.wait(tasks, timeout=remaining)
            if pending:
                logger.warning(
                    "Scan deadline of %ss reached with %d evaluations in flight",
                    opts.scan_deadline, len(pending),
                )
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
            for task in tasks:
                if task.done() and not task.cancelled() and task.exception() is not None:
                    logger.error("Evaluation task failed", exc_info=task.exception())
        finally:
            cancelled.set()
            workers.shutdown(wait=False, cancel_futures=True)

        abandoned: list[Alert] = []
        for index, pkg in enumerate(packages):
            if index not in results:
                alert = incomplete_alert(pkg, "scan deadline exceeded", clock=self._clock)
                results[index] = [alert]
                abandoned.append(alert)
                incomplete.append(pkg.label)
        if abandoned:
            warnings.append(
                f"Scan deadline exceeded: {len(abandoned)} of {len(packages)} "
                f"packages not evaluated"
            )
            if self._stream is not None:
                await loop.run_in_executor(publisher, self._publish_all, abandoned, cancelled)
        publisher.shutdown(wait=False)

        return [results[i] for i in range(len(packages))], incomplete

    # -- Alert streaming ----------------------------------------------------

    def _publish_all(self, alerts: list[Alert], cancelled: threading.Event) -> None:
        """Publish in order; block while live, bounded once cancelled."""
        assert self._stream is not None
        for alert in alerts:
            while True:
                if cancelled.is_set():
                    try:
                        self._stream.publish(alert, timeout=self._options.publish_timeout)
                    except AlertStreamTimeout:
                        logger.warning(
                            "Alert stream full after cancellation; %s alert for %s "
                            "kept in report only",
                            alert.severity.name, alert.package.label,
                        )
                    break
                try:
                    self._stream.publish(alert, timeout=_PUBLISH_POLL_SECONDS)
                except AlertStreamTimeout:
                    continue
                break
