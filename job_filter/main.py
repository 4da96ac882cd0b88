from __future__ import annotations

import argparse
import asyncio
import logging
import os

from .browser import attach_filter, open_page
from .config import load_config
from .settings_store import YamlSettingsStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger(__name__)


async def run(config_path: str) -> None:
    config = load_config(config_path)

    logger.info("start_url   = %s", config.start_url)
    logger.info("url_scope   = %s", config.url_scope)
    logger.info("settings    = %s", config.settings_path)
    logger.info("max_iter    = %s", config.timing.max_iterations)

    store = YamlSettingsStore(config.settings_path)

    async with open_page(config.headless) as page:
        await page.goto(config.start_url, wait_until="domcontentloaded", timeout=60_000)
        controller, _ = await attach_filter(page, config, store)
        try:
            # runs until the user closes the tab or the browser
            await page.wait_for_event("close", timeout=0)
        finally:
            controller.stop()
            logger.info("page closed, %d jobs hidden at exit", controller.hidden_count)


def main() -> None:
    parser = argparse.ArgumentParser(description="Hide promoted and blocked jobs on a job-search page")
    parser.add_argument(
        "--config",
        default=os.path.join(os.path.dirname(__file__), "config.yaml"),
        help="path to config.yaml (default: job_filter/config.yaml)",
    )
    args = parser.parse_args()
    try:
        asyncio.run(run(args.config))
    except KeyboardInterrupt:
        logger.info("interrupted")
    except Exception:
        logger.exception("Job filter failed")
        raise


if __name__ == "__main__":
    main()
