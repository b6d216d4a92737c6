from typing import Callable, Dict, Optional, Set
import asyncio
import logging
import time

from growlink.client import TelemetryClient
from growlink.shared.models import ControlField, DeviceStatus, Reading, ReadingSource

logger = logging.getLogger(__name__)


class DashboardController:
    """Keeps optimistic actuator state in step with the remote channel.

    Commands update local state immediately and revert it if the dispatcher
    reports failure. Remote status only overwrites local state on refresh,
    and not for a control that was commanded within the settle window
    (the service takes a few seconds to expose a new update).
    """

    def __init__(
        self,
        client: TelemetryClient,
        watering_duration: float = 180.0,
        poll_interval: float = 300.0,
        settle_time: float = 20.0,
        initialize_controls: bool = False,
    ):
        self.client = client
        self.watering_duration = watering_duration
        self.poll_interval = poll_interval
        self.settle_time = settle_time
        self.initialize_controls = initialize_controls

        self.status = DeviceStatus.all_off()
        self.reading: Optional[Reading] = None
        self.source: Optional[ReadingSource] = None
        self.on_update: Optional[Callable[["DashboardController"], None]] = None
        self.running = False

        self._in_flight: Set[ControlField] = set()
        self._last_command: Dict[ControlField, float] = {}
        self._generation: Dict[ControlField, int] = {}
        self._auto_stop_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def auto_stop_pending(self) -> bool:
        return self._auto_stop_task is not None and not self._auto_stop_task.done()

    def _notify(self) -> None:
        if self.on_update is None:
            return
        try:
            self.on_update(self)
        except Exception as e:
            logger.error(f"Update callback failed: {e}")

    # --- reads ---

    async def refresh(self) -> None:
        """Fetch the latest reading and reconcile actuator state."""
        reading, source = await self.client.fetch_latest_with_source()
        self.reading = reading
        self.source = source

        remote = await self.client.fetch_live_status()
        if remote is not None:
            self._reconcile(remote)

        self._notify()

    def _reconcile(self, remote: DeviceStatus) -> None:
        now = time.monotonic()
        for control in ControlField:
            if control in self._in_flight:
                continue
            commanded_at = self._last_command.get(control)
            if commanded_at is not None and now - commanded_at < self.settle_time:
                continue

            local_state = self.status.get(control)
            remote_state = remote.get(control)
            if local_state != remote_state:
                logger.warning(
                    f"{control.attribute} state mismatch: local={local_state}, remote={remote_state}"
                )
                self.status = self.status.replace(control, remote_state)

        if not self.status.watering:
            self._cancel_auto_stop()

    # --- commands ---

    async def set_grow_light(self, on: bool) -> bool:
        return await self._command(ControlField.GROW_LIGHT, on)

    async def set_watering(self, on: bool) -> bool:
        return await self._command(ControlField.WATERING, on)

    async def set_auto_mode(self, enabled: bool) -> bool:
        return await self._command(ControlField.AUTO_MODE, enabled)

    def _begin_command(self, control: ControlField) -> int:
        generation = self._generation.get(control, 0) + 1
        self._generation[control] = generation
        self._in_flight.add(control)
        return generation

    def _finish_command(self, control: ControlField, generation: int) -> bool:
        """Returns False when a newer command for control was issued meanwhile."""
        if self._generation.get(control) != generation:
            return False
        self._in_flight.discard(control)
        return True

    async def _command(self, control: ControlField, value: bool) -> bool:
        previous = self.status.get(control)
        self.status = self.status.replace(control, value)
        generation = self._begin_command(control)
        if control is ControlField.WATERING:
            # Intended watering state changed; any pending auto-stop is void
            self._cancel_auto_stop()
        self._notify()

        try:
            success = await self.client.send(control, value)
        except Exception as e:
            logger.error(f"Failed to send {control.attribute}={value}: {e}")
            success = False
        current = self._finish_command(control, generation)

        if not success:
            logger.warning(f"Command {control.attribute}={value} failed, reverting")
            if current:
                self.status = self.status.replace(control, previous)
            self._notify()
            return False

        if not current:
            logger.debug(f"Command {control.attribute}={value} superseded by a newer command")
            return True

        logger.info(f"Command {control.attribute}={value} accepted; confirmation on next refresh")
        self._last_command[control] = time.monotonic()
        if control is ControlField.WATERING and value:
            self._schedule_auto_stop()
        return True

    # --- watering auto-stop ---

    def _schedule_auto_stop(self) -> None:
        self._cancel_auto_stop()
        logger.info(f"Watering will stop automatically in {self.watering_duration:.0f}s")
        self._auto_stop_task = asyncio.ensure_future(self._auto_stop_watering(self.watering_duration))

    def _cancel_auto_stop(self) -> None:
        task = self._auto_stop_task
        self._auto_stop_task = None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Cancelled pending watering auto-stop")

    async def _auto_stop_watering(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._auto_stop_task = None

        if not self.status.watering:
            logger.info("Watering already stopped, skipping auto-stop")
            return

        control = ControlField.WATERING
        # Stop locally even when the remote update fails
        self.status = self.status.replace(control, False)
        generation = self._begin_command(control)
        self._notify()

        try:
            success = await self.client.send(control, False)
        except Exception as e:
            logger.error(f"Auto-stop command failed: {e}")
            success = False

        if not self._finish_command(control, generation):
            logger.info("Watering was commanded again during auto-stop, keeping the newer state")
            return

        if success:
            self._last_command[control] = time.monotonic()
            logger.info("Auto-stop watering completed")
        else:
            logger.warning("Watering stopped locally but the remote update failed")
        self._notify()

    # --- polling ---

    async def run(self, poll_interval: Optional[float] = None) -> None:
        """Poll the channel until stop() is called."""
        interval = poll_interval if poll_interval is not None else self.poll_interval
        self.running = True
        self._stop_event = asyncio.Event()

        if self.initialize_controls:
            if await self.client.initialize_control_fields():
                logger.info("Control fields initialized to 0")
            else:
                logger.warning("Control field initialization skipped or failed")

        logger.info(f"Polling every {interval:.0f}s")
        while self.running:
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Error in polling loop: {e}")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()
        self._cancel_auto_stop()
