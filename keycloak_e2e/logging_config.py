"""Centralized logging configuration for the Keycloak login suite."""

import logging
import os
import sys
from typing import Optional

LOGGER_NAME = "keycloak_e2e"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure and return the suite logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Child loggers (keycloak_e2e.probes etc.) funnel into this handler only
    logger.propagate = False

    return logger


def get_logger() -> logging.Logger:
    """Get the suite logger instance."""
    return logging.getLogger(LOGGER_NAME)


def log_step(scenario: str, step: str, status: str, error: Optional[BaseException] = None) -> None:
    """Log a scenario step transition.

    Args:
        scenario: Scenario name
        step: Step name
        status: "start", "passed" or "failed"
        error: Exception that failed the step, if any
    """
    log_data = {"scenario": scenario, "step": step, "status": status}

    if error is not None:
        log_data["error_type"] = type(error).__name__
        log_data["error_message"] = str(error)
        get_logger().warning(f"Step: {log_data}")
        return

    get_logger().info(f"Step: {log_data}")


def log_soft_check(scenario: str, name: str, passed: bool, detail: Optional[str] = None) -> None:
    """Log a diagnostic observation that never fails a test."""
    log_data = {"scenario": scenario, "check": name, "passed": passed}

    if detail:
        log_data["detail"] = detail

    level = logging.INFO if passed else logging.WARNING
    get_logger().log(level, f"Soft check: {log_data}")


def log_timing(
    operation: str,
    elapsed_ms: float,
    threshold_ms: Optional[float] = None,
    environment: Optional[str] = None,
) -> None:
    """Log a timing sample and, if given, the threshold it is compared against."""
    log_data = {"operation": operation, "elapsed_ms": round(elapsed_ms)}

    if threshold_ms is not None:
        log_data["threshold_ms"] = threshold_ms
        log_data["within_threshold"] = elapsed_ms < threshold_ms

    if environment:
        log_data["environment"] = environment

    get_logger().info(f"Timing: {log_data}")


def log_auth_observation(scenario: str, current_url: str, cookie_count: int, redirected: bool) -> None:
    """Log a session observation taken after a login attempt."""
    log_data = {
        "scenario": scenario,
        "url": current_url,
        "cookies": cookie_count,
        "redirected": redirected,
    }

    get_logger().info(f"Auth observation: {log_data}")


# Initialize logging on import
_log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(_log_level)
