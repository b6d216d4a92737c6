"""Terminal display service."""

from .terminal_monitor import TerminalMonitor


def main():
    """Entry point for display service."""
    import asyncio
    from growlink.client import TelemetryClient, load_settings
    from growlink.controller import DashboardController
    from growlink.shared.logging import setup_logging

    settings = load_settings()
    setup_logging(settings.log_level)

    async def run_monitor():
        async with TelemetryClient(settings) as client:
            controller = DashboardController(
                client,
                watering_duration=settings.watering_duration,
                poll_interval=settings.poll_interval,
            )
            TerminalMonitor(controller)
            try:
                await controller.run()
            finally:
                controller.stop()

    try:
        asyncio.run(run_monitor())
    except KeyboardInterrupt:
        pass


__all__ = ["TerminalMonitor", "main"]
