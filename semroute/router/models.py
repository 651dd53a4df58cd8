"""
Router Data Model

Routes, their example utterances, and the weighted metrics that
parameterize scoring.

Lifecycle:
    - Utterances start without an embedding; Router construction sets it
      exactly once
    - Routes are handed to the Router wholesale and copied, so the caller's
      objects are never mutated by construction
    - WeightedMetric entries are appended through scoring options
"""

from dataclasses import dataclass, field
from typing import Iterable

from semroute.errors import RouterConfigurationError
from semroute.similarity import SimilarityFunction


@dataclass
class Utterance:
    """
    An example phrase belonging to a route.

    Attributes:
        text: The phrase itself; also the key under which its embedding
              is stored, so it must be unique across a router's corpus
        embedding: Vector computed during construction (None until then)
    """

    text: str
    _embedding: tuple[float, ...] | None = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise RouterConfigurationError("utterance text must be a non-empty string")

    @property
    def embedding(self) -> tuple[float, ...] | None:
        return self._embedding

    @property
    def is_embedded(self) -> bool:
        return self._embedding is not None

    def set_embedding(self, embedding: Iterable[float]) -> None:
        """
        Attach the computed embedding.

        Raises:
            RouterConfigurationError: If the vector is empty or an embedding
                                      was already set
        """
        if self._embedding is not None:
            raise RouterConfigurationError(
                f"embedding already set for utterance: {self.text!r}"
            )
        vector = tuple(float(x) for x in embedding)
        if not vector:
            raise RouterConfigurationError(
                f"empty embedding for utterance: {self.text!r}"
            )
        self._embedding = vector


@dataclass
class Route:
    """
    A named intent category defined by example utterances.

    Plain strings in ``utterances`` are converted to Utterance objects.

    Example:
        Route(name="chitchat", utterances=["hi", "how are you?"])
    """

    name: str
    utterances: list[Utterance] = field(default_factory=list)
    description: str = ""

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise RouterConfigurationError("route name must be a non-empty string")
        self.utterances = [
            u if isinstance(u, Utterance) else Utterance(text=u)
            for u in self.utterances
        ]

    def copy(self) -> "Route":
        """Return a copy with fresh, un-embedded utterances."""
        return Route(
            name=self.name,
            utterances=[Utterance(text=u.text) for u in self.utterances],
            description=self.description,
        )


@dataclass(frozen=True)
class WeightedMetric:
    """A similarity function and the coefficient its output is scaled by."""

    function: SimilarityFunction
    coefficient: float

    @property
    def name(self) -> str:
        return getattr(self.function, "__name__", repr(self.function))

    def __call__(self, query, candidate) -> float:
        return self.coefficient * self.function(query, candidate)


@dataclass
class RouteMatch:
    """
    Result of a successful match.

    Attributes:
        route_name: Name of the winning route
        score: Weighted score of the best-scoring utterance
        latency_ms: Time taken for the match in milliseconds
    """

    route_name: str
    score: float
    latency_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "route_name": self.route_name,
            "score": round(self.score, 6),
            "latency_ms": round(self.latency_ms, 2),
        }
