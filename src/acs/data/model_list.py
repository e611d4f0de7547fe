"""Parsing of the model-enumeration command output.

The CLI has no dedicated listing command; asking for an invalid model named
``list`` makes it fail with an error that enumerates the allowed choices::

    error: option '--model <model>' argument 'list' is invalid.
    Allowed choices are gpt-5, claude-sonnet-4.5.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from result import Err, Ok, Result

logger = logging.getLogger(__name__)

MODEL_ERROR_PREFIX = (
    "error: option '--model <model>' argument 'list' is invalid. Allowed choices are "
)
MODEL_ERROR_SUFFIX = "."

_NOT_INSTALLED_MARKERS = ("is not recognized", "command not found", "ENOENT", "No such file")


def parse_model_list(output: str) -> Result[list[str], str]:
    """Extract model ids from the CLI's error output."""
    if any(marker in output for marker in _NOT_INSTALLED_MARKERS):
        return Err(
            "Copilot CLI is not installed or not in PATH. "
            "Install the Copilot CLI and ensure it is accessible."
        )

    prefix_index = output.find(MODEL_ERROR_PREFIX)
    if prefix_index == -1:
        return Err(
            "Unexpected error format from Copilot CLI. "
            f"Expected error containing model list, got: {output[:200]}"
        )

    start = prefix_index + len(MODEL_ERROR_PREFIX)
    # Model ids contain periods ("4.5"); only the last one ends the sentence.
    end = output.rfind(MODEL_ERROR_SUFFIX)
    if end < start:
        end = len(output)

    models = [model.strip() for model in output[start:end].split(",")]
    models = [model for model in models if model]
    if not models:
        return Err("No models found in Copilot CLI output.")
    logger.debug("Parsed %d models", len(models))
    return Ok(models)


def fetch_available_models(command: Sequence[str]) -> Result[list[str], str]:
    """Run the model-enumeration command and parse its error output."""
    try:
        completed = subprocess.run(
            list(command), capture_output=True, text=True, timeout=30, check=False
        )
    except FileNotFoundError as exc:
        return parse_model_list(f"ENOENT: {exc}")
    except (OSError, subprocess.SubprocessError) as exc:
        return Err(f"Failed to run {' '.join(command)}: {exc}")

    if completed.returncode == 0:
        return Err(
            f"Unexpected: {' '.join(command)} succeeded. Expected an error with model list."
        )
    return parse_model_list(completed.stderr or completed.stdout)
