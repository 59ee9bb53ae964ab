import argparse
import logging
import signal
import threading
from typing import Optional

from uiflow.config import load_runner_config
from uiflow.driver.playwright_document import PlaywrightBrowser
from uiflow.errors import ConfigError
from uiflow.providers.api import APIProvider
from uiflow.providers.base import ScenarioProvider
from uiflow.providers.yaml_files import YamlFileProvider
from uiflow.runner import SuiteRunner, exit_code, format_report

LOGGER = logging.getLogger("uiflow")

EXIT_NO_SCENARIOS = 2


def make_provider(pattern: str) -> ScenarioProvider:
    if pattern.startswith(("http://", "https://")):
        return APIProvider(pattern)
    return YamlFileProvider(pattern)


def install_cancel_handler(cancel_event: threading.Event) -> None:
    """First Ctrl-C finishes the running step then stops; the second one interrupts."""
    def handler(signum, frame):
        if cancel_event.is_set():
            raise KeyboardInterrupt
        LOGGER.warning("Cancelling after the current step (Ctrl-C again to abort).")
        cancel_event.set()

    signal.signal(signal.SIGINT, handler)


def process_run(args) -> int:
    """Handler for run command"""
    config = load_runner_config(args.config)
    if args.headed:
        config = config.model_copy(update={"headless": False})

    suites = make_provider(args.pattern).get_suites()
    if not suites:
        print(f"No scenario files match {args.pattern}")
        return EXIT_NO_SCENARIOS

    cancel_event = threading.Event()
    install_cancel_handler(cancel_event)

    with PlaywrightBrowser(config) as browser:
        runner = SuiteRunner(config, browser.open_document)
        reports = [runner.run_suite(suite, cancel_event) for suite in suites]

    print(format_report(reports))
    return exit_code(reports)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browser end-to-end scenario runner")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_run = subparsers.add_parser("run", help="Run scenario files")
    parser_run.add_argument("pattern", help="Glob pattern, directory, or URL of scenario files")
    parser_run.add_argument("--config", help="Runner config YAML (viewport, baseUrl, timeouts, hooks)")
    parser_run.add_argument("--headed", action="store_true", help="Show the browser window")
    parser_run.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    verbose = getattr(args, "verbose", 0)
    log_level = logging.WARNING
    if verbose >= 2:
        log_level = logging.DEBUG
    elif verbose >= 1:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s %(message)s")

    if args.command != "run":
        parser.print_help()
        return EXIT_NO_SCENARIOS

    try:
        return process_run(args)
    except KeyboardInterrupt:
        LOGGER.warning("Interrupted by user.")
        return 130
    except ConfigError as exc:
        LOGGER.error("%s", exc)
        return EXIT_NO_SCENARIOS


if __name__ == "__main__":
    raise SystemExit(main())
