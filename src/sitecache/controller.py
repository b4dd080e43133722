"""Version controller: reconcile the oracle's answer with the active version."""

from __future__ import annotations

import logging

from sitecache.config import CacheConfig
from sitecache.manifest import AssetManifest
from sitecache.notifier import SessionNotifier
from sitecache.oracle import VersionOracle
from sitecache.state.model import ControllerState
from sitecache.state.policy import CheckOutcome, Effect, EffectKind, plan_transition
from sitecache.store.snapshots import SnapshotStore

_logger = logging.getLogger(__name__)


class VersionController:
    """Drives snapshot creation/teardown and client notification.

    ``ensure_checked`` runs at most one live oracle fetch per epoch. An epoch
    ends when :meth:`force_check` is called.
    """

    def __init__(
        self,
        config: CacheConfig,
        state: ControllerState,
        oracle: VersionOracle,
        store: SnapshotStore,
        notifier: SessionNotifier,
        manifest: AssetManifest | None = None,
    ) -> None:
        self._config = config
        self._state = state
        self._oracle = oracle
        self._store = store
        self._notifier = notifier
        self._manifest = manifest or config.asset_manifest()

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def manifest(self) -> AssetManifest:
        return self._manifest

    def force_check(self) -> None:
        """End the current epoch so the next check hits the oracle."""
        self._state.reset_epoch()

    async def ensure_checked(self) -> CheckOutcome:
        # claim_check() must stay before the first await.
        if not self._state.claim_check():
            return CheckOutcome.SKIPPED

        latest = await self._oracle.fetch_version()
        current = self._state.active_version
        plan = plan_transition(current, latest)

        if plan.outcome is CheckOutcome.UNKNOWN:
            _logger.debug("Version unknown; keeping %s", current)
            return plan.outcome

        if plan.outcome is CheckOutcome.INITIALIZED:
            # Adopted before priming so concurrent requests route to it at once.
            self._state.active_version = plan.next_version
            _logger.info("Initial active version %s", plan.next_version)
        elif plan.outcome is CheckOutcome.CHANGED:
            _logger.info("Version change detected %s -> %s", current, plan.next_version)
            self._notifier.reset()

        for effect in plan.effects:
            if effect.kind is EffectKind.NOTIFY:
                # Routing switches to the new snapshot before sessions are told to reload.
                self._state.active_version = plan.next_version
            await self._apply(effect)

        return plan.outcome

    async def _apply(self, effect: Effect) -> None:
        if effect.kind is EffectKind.PRIME:
            if await self._store.has_entry(effect.version, self._manifest.shell):
                _logger.debug("Snapshot for %s already populated", effect.version)
                return
            await self._store.populate(effect.version, self._manifest)
        elif effect.kind is EffectKind.POPULATE:
            await self._store.populate(effect.version, self._manifest)
        elif effect.kind is EffectKind.PURGE:
            await self._store.purge_except(effect.version)
        elif effect.kind is EffectKind.NOTIFY:
            await self._notifier.notify(effect.version)
