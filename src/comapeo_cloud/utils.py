"""
Consolidated Utilities

Sections:
- Logging and timing utilities
- Console output helpers
"""

import functools
import json
import logging
import sys
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

# =============================================================================
# Logging and Timing Utilities
# =============================================================================

def setup_logging(
    verbose: bool,
    command: Optional[str] = None,
    enable_file_logging: bool = False
) -> None:
    """
    Configure logging with optional timestamped file output.

    Args:
        verbose: Enable debug-level logging if True
        command: Command name for log file naming
        enable_file_logging: Create timestamped log files when True
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]

    if enable_file_logging and command:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"{command}_{timestamp}.log"

        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        print(f"Logging to: {log_file}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True
    )

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO if verbose else logging.WARNING)


def timer(func: Callable) -> Callable:
    """Decorator to time function execution."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        end_time = time.time()
        logging.info(f"{func.__name__} completed in {end_time - start_time:.2f} seconds")
        return result
    return wrapper


# =============================================================================
# Console Output
# =============================================================================

def echo_json(title: str, data: Any) -> None:
    """Print a green heading followed by pretty-printed JSON."""
    typer.secho(title, fg=typer.colors.GREEN)
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def echo_error(heading: str, message: str) -> None:
    """Print a red error heading and message to stderr."""
    typer.secho(heading, fg=typer.colors.RED, err=True)
    typer.secho(message, fg=typer.colors.RED, err=True)
