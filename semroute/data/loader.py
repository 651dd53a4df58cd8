"""
Route Definition Loader

Utilities for loading and validating route definitions and labelled query
samples from JSON files, so routes can be changed without code changes.

File Structure:
{
    "metadata": { version, created, description },
    "routes": [
        { name, description, utterances: [str, ...] }
    ],
    "samples": [
        { query, expected_route }
    ]
}

A bare JSON list of route objects is also accepted. "samples" is optional
and only used for accuracy runs (scripts/run_demo.py).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from semroute.router.models import Route


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Sample:
    """
    A labelled query for measuring routing accuracy.

    Attributes:
        query: The text to route
        expected_route: Route the query should be matched to, or None when
                        no route is expected to match
    """

    query: str
    expected_route: str | None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {"query": self.query, "expected_route": self.expected_route}


@dataclass
class RouteFileMetadata:
    """
    Metadata about a route definition file.

    Attributes:
        version: File version string
        created: Creation date (ISO format)
        description: Brief description of the route set
    """

    version: str
    created: str
    description: str


@dataclass
class ValidationResult:
    """
    Result of route file validation.

    Attributes:
        is_valid: Whether the file passed all validation checks
        errors: List of validation error messages
        warnings: List of validation warning messages
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════


MIN_UTTERANCES_PER_ROUTE = 5


class RouteLoader:
    """
    Load route definitions from a JSON file.

    Provides lazy loading with caching and validation checks. Raw entries
    are kept so validate() can report every problem at once instead of
    failing on the first invalid Route.

    Example:
        >>> loader = RouteLoader("routes.json")
        >>> routes = loader.load()
        >>> result = loader.validate()
        >>> samples = loader.load_samples()
    """

    def __init__(self, path: str | Path):
        """
        Initialize the route loader.

        Args:
            path: Path to the JSON route file
        """
        self._path = Path(path)
        self._raw_routes: list[dict] = []
        self._raw_samples: list[dict] = []
        self._metadata: RouteFileMetadata | None = None
        self._read = False

    @property
    def path(self) -> Path:
        """Get the route file path."""
        return self._path

    @property
    def metadata(self) -> RouteFileMetadata | None:
        """Get file metadata (None if not yet loaded)."""
        return self._metadata

    def _read_file(self) -> None:
        """
        Parse the file into raw route and sample entries.

        Raises:
            FileNotFoundError: If the file doesn't exist
            json.JSONDecodeError: If the file contains invalid JSON
            ValueError: If the top-level structure is wrong
        """
        if self._read:
            return

        logger.info(f"Loading routes from {self._path}")

        if not self._path.exists():
            raise FileNotFoundError(f"Route file not found: {self._path}")

        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, list):
            logger.debug("Loading flat array format")
            self._raw_routes = data
            self._raw_samples = []
            self._metadata = RouteFileMetadata(
                version="1.0.0", created="unknown", description=""
            )
        elif isinstance(data, dict):
            meta = data.get("metadata", {})
            self._metadata = RouteFileMetadata(
                version=meta.get("version", "1.0.0"),
                created=meta.get("created", "unknown"),
                description=meta.get("description", ""),
            )
            self._raw_routes = data.get("routes", [])
            self._raw_samples = data.get("samples", [])
        else:
            raise ValueError(
                f"Invalid route file format: expected list or dict, got {type(data)}"
            )

        if not isinstance(self._raw_routes, list) or not all(
            isinstance(r, dict) for r in self._raw_routes
        ):
            raise ValueError("'routes' must be a list of route objects")

        self._read = True

    def load(self) -> list[Route]:
        """
        Load Route objects from the file.

        Returns:
            List of Route objects, in file order

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If a route is malformed
        """
        self._read_file()

        routes = []
        for i, entry in enumerate(self._raw_routes):
            try:
                routes.append(
                    Route(
                        name=entry["name"],
                        utterances=list(entry.get("utterances", [])),
                        description=entry.get("description", ""),
                    )
                )
            except KeyError as e:
                raise ValueError(f"Route {i} missing required field: {e}") from e

        logger.info(f"Loaded {len(routes)} routes")
        return routes

    def load_samples(self) -> list[Sample]:
        """
        Load labelled query samples.

        Returns:
            List of Sample objects (empty if the file has none)
        """
        self._read_file()

        samples = []
        for i, entry in enumerate(self._raw_samples):
            try:
                samples.append(
                    Sample(query=entry["query"], expected_route=entry.get("expected_route"))
                )
            except KeyError as e:
                raise ValueError(f"Sample {i} missing required field: {e}") from e
        return samples

    def reload(self) -> list[Route]:
        """Force re-reading the file."""
        self._read = False
        self._raw_routes = []
        self._raw_samples = []
        self._metadata = None
        return self.load()

    def validate(self) -> ValidationResult:
        """
        Validate route file integrity.

        Checks:
        - At least one route
        - Non-empty, unique route names
        - Non-empty utterances, unique across all routes
        - Sample routes refer to defined routes
        - Enough utterances per route (warnings only)

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        try:
            self._read_file()
        except Exception as e:
            return ValidationResult(
                is_valid=False,
                errors=[f"Failed to load route file: {e}"],
            )

        if not self._raw_routes:
            errors.append("Route file defines no routes")

        names: list[str] = []
        owners: dict[str, str] = {}
        for i, entry in enumerate(self._raw_routes):
            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                errors.append(f"Route {i} has an empty or missing name")
                continue
            names.append(name)

            utterances = entry.get("utterances", [])
            if not utterances:
                errors.append(f"Route '{name}' has no utterances")
            elif len(utterances) < MIN_UTTERANCES_PER_ROUTE:
                warnings.append(
                    f"Route '{name}' has only {len(utterances)} utterances "
                    f"(recommended: {MIN_UTTERANCES_PER_ROUTE}+)"
                )

            for utterance in utterances:
                if not isinstance(utterance, str) or not utterance.strip():
                    errors.append(f"Route '{name}' has an empty utterance")
                    continue
                if utterance in owners:
                    errors.append(
                        f"Duplicate utterance '{utterance}' in routes "
                        f"'{owners[utterance]}' and '{name}'"
                    )
                else:
                    owners[utterance] = name

        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            errors.append(f"Duplicate route names: {duplicates}")

        unknown = sorted(
            {
                s.get("expected_route")
                for s in self._raw_samples
                if s.get("expected_route") is not None
                and s.get("expected_route") not in names
            }
        )
        if unknown:
            errors.append(f"Samples reference unknown routes: {unknown}")

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )
