"""
Demo Service Runner

This script parses the command line, configures logging, registers the
metrics and hands control to the lifecycle coordinator until SIGINT/SIGTERM.
"""

import sys
import asyncio
import logging
from typing import List, Optional

from demo_service.core.config import parse_args
from demo_service.core.logging_config import setup_logging
from demo_service.core.metrics import MetricRegistry
from demo_service.lifecycle.coordinator import LifecycleCoordinator


logger = logging.getLogger("runner")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    config = parse_args(argv)

    setup_logging(
        log_level=config.log_level,
        use_structured=config.log_format == "structured"
    )
    logger.info(f"Web App Version: {config.version}", extra={"version": config.version})

    try:
        # Metrics are registered before any listener accepts traffic
        metrics = MetricRegistry(version=config.version)
        coordinator = LifecycleCoordinator(config, metrics)

        asyncio.run(coordinator.run())

    except KeyboardInterrupt:
        logger.info("Shutdown requested via KeyboardInterrupt")
    except Exception as e:
        logger.critical(f"Failed to run application: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
