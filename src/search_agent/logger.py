"""
Logger Configuration Module

Handles logging setup for search agent runs.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from strands.telemetry import StrandsTelemetry

# Load environment variables from .env file
load_dotenv()

LOGGER_NAME = "search_agent"


def create_logger(log_dir: str = "logs") -> logging.Logger:
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    # Strands agent internals go to their own file
    strands_logger = logging.getLogger("strands")
    strands_logger.setLevel(logging.DEBUG)
    file_handler = logging.FileHandler(
        Path(log_dir) / "strands_agents.log", encoding="utf-8"
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    strands_logger.addHandler(file_handler)

    # Agent progress, capability calls and failures
    agent_handler = logging.FileHandler(
        Path(log_dir) / "search_agent.log", encoding="utf-8"
    )
    agent_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )
    agent_logger = logging.getLogger(LOGGER_NAME)
    agent_logger.setLevel(logging.INFO)
    agent_logger.addHandler(agent_handler)

    return agent_logger


agent_logger: logging.Logger | None = None
strands_telemetry: StrandsTelemetry | None = None


def setup_logging(log_dir: str = "logs") -> logging.Logger:
    global agent_logger, strands_telemetry
    if agent_logger is None:
        strands_telemetry = StrandsTelemetry()
        if "OTEL_EXPORTER_OTLP_ENDPOINT" in os.environ:
            strands_telemetry.setup_otlp_exporter()
        agent_logger = create_logger(log_dir)
    return agent_logger
