"""Utility functions for loading snapshots and writing generated files.

This module loads introspection snapshots from files and URLs with proper
error handling, and writes emitted files below an output directory.
"""

import json
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import urlparse

import requests

from .codegen.core.symbols import EmittedFile
from .logging_config import get_logger

logger = get_logger(__name__)


class JSONLoaderError(Exception):
    """Custom exception for JSON loading errors."""

    pass


class FileWriteError(Exception):
    """Raised when an emitted file cannot be written."""

    pass


def load_json_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Load JSON data from a local file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        FileNotFoundError: If file doesn't exist.
        JSONLoaderError: If file cannot be read or JSON is invalid.
    """
    file_path = Path(file_path)
    logger.debug("Attempting to load JSON from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".json":
        # Might still be valid JSON
        logger.warning("File does not have .json extension: %s", file_path)

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info("Successfully loaded JSON from %s", file_path)
        return str(file_path), data
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in file %s: %s", file_path, e)
        raise JSONLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise JSONLoaderError(f"Error reading file {file_path}: {e}") from e


def load_json_from_url(url: str, timeout: int = 30) -> tuple[str, Any]:
    """Load JSON data from a URL.

    Args:
        url: URL to fetch JSON from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        JSONLoaderError: If URL is invalid, request fails, or response isn't valid JSON.
    """
    logger.debug("Attempting to load JSON from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error("Invalid URL format: %s", url)
        raise JSONLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "").lower()
        if "application/json" not in content_type and not url.endswith(".json"):
            logger.warning("URL %s does not have JSON content type: %s", url, content_type)

        data = response.json()
        logger.info("Successfully loaded JSON from %s", url)
        return url, data

    except requests.exceptions.Timeout as e:
        logger.error("Request timeout for URL: %s", url)
        raise JSONLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error("Connection error for URL %s: %s", url, e)
        raise JSONLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error("HTTP error %s for URL: %s", e.response.status_code, url)
        raise JSONLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.JSONDecodeError as e:
        logger.error("Invalid JSON response from URL %s: %s", url, e)
        raise JSONLoaderError(f"Invalid JSON response from URL {url}: {e}") from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e)
        raise JSONLoaderError(f"Request error for URL {url}: {e}") from e


def load_json(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, Any]:
    """Load JSON data from either a file or URL.

    Args:
        file_path: Path to local JSON file (mutually exclusive with url).
        url: URL to fetch JSON from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        JSONLoaderError: If neither or both parameters are provided, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path and not url:
        logger.error("Neither file_path nor url provided")
        raise JSONLoaderError("Either file_path or url must be provided")

    if file_path and url:
        logger.error("Both file_path and url provided")
        raise JSONLoaderError("Cannot specify both file_path and url")

    if file_path:
        return load_json_from_file(file_path)
    else:
        return load_json_from_url(url, timeout)


def resolve_output_dir(output_dir: str | Path, config_dir: str | Path | None = None) -> Path:
    """Output directory as a path, relative ones taken from ``config_dir``."""
    output_dir = Path(output_dir)
    if output_dir.is_absolute() or config_dir is None:
        return output_dir
    return Path(config_dir) / output_dir


def write_emitted_files(
    files: Iterable[EmittedFile],
    output_dir: str | Path,
    dry_run: bool = False,
) -> list[Path]:
    """Write emitted files below ``output_dir``.

    Args:
        files: Files from the emit phase, paths relative to output_dir.
        output_dir: Directory to write into; created when missing.
        dry_run: Only report the target paths.

    Returns:
        Target paths in emission order.

    Raises:
        FileWriteError: If a path escapes output_dir or cannot be written.
    """
    root = Path(output_dir).resolve()
    written = []

    for emitted in files:
        target = (root / emitted.path).resolve()
        if root != target and root not in target.parents:
            raise FileWriteError(f"Refusing to write outside {root}: {emitted.path}")

        if dry_run:
            logger.info("Would write %s", target)
        else:
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(emitted.content, encoding="utf-8")
            except OSError as e:
                logger.error("Failed to write %s: %s", target, e)
                raise FileWriteError(f"Failed to write {target}: {e}") from e
            logger.debug("Wrote %s", target)
        written.append(target)

    return written
