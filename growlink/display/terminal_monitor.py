"""
Terminal Monitor for the plant channel.
Renders the latest reading and actuator state with Rich after every poll.
"""

import logging
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from growlink.controller import DashboardController
from growlink.shared.models import ReadingSource

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    ReadingSource.FRESH: ("LIVE", "green"),
    ReadingSource.CACHE: ("CACHED", "yellow"),
    ReadingSource.DEFAULT: ("NO DATA", "red"),
    ReadingSource.UNCONFIGURED: ("NOT CONFIGURED", "red"),
}


class TerminalMonitor:
    """Terminal-based display monitor using Rich"""

    def __init__(self, controller: DashboardController, console: Optional[Console] = None):
        self.controller = controller
        self.console = console or Console()
        controller.on_update = self.update_display

    def update_display(self, controller: Optional[DashboardController] = None) -> None:
        try:
            self.console.clear()
            self.console.print(self.render())
        except Exception as e:
            logger.error(f"Display update failed: {e}")

    def render(self) -> Panel:
        return Panel(
            Group(self._create_sensor_table(), self._create_device_table()),
            title="Growlink",
            subtitle=self._source_text(),
        )

    def _source_text(self) -> Text:
        source = self.controller.source
        if source is None:
            return Text("waiting for first fetch", style="dim")
        label, style = SOURCE_LABELS[source]
        age = self.controller.client.data_age_info()
        return Text(f"{label} - {age}", style=style)

    def _create_sensor_table(self) -> Table:
        table = Table(title="Sensors", expand=True)
        table.add_column("Sensor")
        table.add_column("Value", justify="right")

        reading = self.controller.reading
        if reading is None:
            table.add_row("-", "-")
            return table

        table.add_row("Temperature", f"{reading.temperature:.1f}°C")
        table.add_row("Humidity", f"{reading.humidity:.1f}%")
        table.add_row("Soil moisture", f"{reading.soil_moisture:.1f}%")
        table.add_row("Light level", f"{reading.light_level:.1f}%")
        table.add_row("Recorded", reading.timestamp or "-")
        return table

    def _create_device_table(self) -> Table:
        table = Table(title="Devices", expand=True)
        table.add_column("Device")
        table.add_column("State", justify="right")

        status = self.controller.status
        for name, state in (
            ("Grow light", status.grow_light),
            ("Watering", status.watering),
            ("Auto mode", status.auto_mode),
        ):
            table.add_row(name, Text("ON", style="green") if state else Text("OFF", style="dim"))

        if self.controller.auto_stop_pending:
            table.add_row("Auto-stop", Text("pending", style="yellow"))
        return table
