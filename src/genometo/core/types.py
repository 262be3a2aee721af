"""Core data types for the genome typed object.

Each type converts to and from the plain JSON-shaped value used in the
persisted genome document: segments and annotations are stored as lists,
everything else as objects.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Collection, Literal, Sequence, Mapping, Union

from genometo.core.exceptions import ValidationError


Strand = Literal['+', '-']


@dataclass(frozen=True)
class LocationSegment:
    """One contiguous piece of a feature location (1-based coordinates).

    On the '+' strand ``begin`` is the leftmost base; on the '-' strand it is
    the rightmost base and the segment runs leftwards.
    """
    contig_id: str
    begin: int
    strand: Strand
    length: int

    def __post_init__(self) -> None:
        if self.strand not in ('+', '-'):
            raise ValidationError(f"Invalid strand: {self.strand!r}")
        if self.begin < 1:
            raise ValidationError(f"Begin coordinate must be >= 1, got {self.begin}")
        if self.length < 1:
            raise ValidationError(f"Length must be >= 1, got {self.length}")
        if self.strand == '-' and self.length > self.begin:
            raise ValidationError(
                f"Segment of length {self.length} ending at {self.begin} runs past base 1"
            )

    @property
    def end(self) -> int:
        """Last base of the segment in the direction of travel."""
        if self.strand == '+':
            return self.begin + self.length - 1
        return self.begin - self.length + 1

    @property
    def left(self) -> int:
        return min(self.begin, self.end)

    @property
    def right(self) -> int:
        return max(self.begin, self.end)

    def to_list(self) -> List[Any]:
        return [self.contig_id, self.begin, self.strand, self.length]

    @classmethod
    def from_value(cls, value: Union["LocationSegment", Sequence[Any]]) -> "LocationSegment":
        """Build a segment from a ``[contig, begin, strand, length]`` value."""
        if isinstance(value, LocationSegment):
            return value
        if isinstance(value, (str, bytes)) or len(value) != 4:
            raise ValidationError(f"Location segment must have 4 elements, got {value!r}")
        contig_id, begin, strand, length = value
        try:
            return cls(str(contig_id), int(begin), strand, int(length))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid location segment {value!r}: {e}")


@dataclass(frozen=True)
class AnnotationEvent:
    """A single entry in a feature's annotation history."""
    comment: str
    annotator: str
    timestamp: int
    event_id: Optional[str] = None

    def to_list(self) -> List[Any]:
        value = [self.comment, self.annotator, self.timestamp]
        if self.event_id is not None:
            value.append(self.event_id)
        return value

    @classmethod
    def from_value(cls, value: Union["AnnotationEvent", Sequence[Any]]) -> "AnnotationEvent":
        if isinstance(value, AnnotationEvent):
            return value
        if isinstance(value, (str, bytes)) or not 3 <= len(value) <= 4:
            raise ValidationError(f"Annotation must have 3 or 4 elements, got {value!r}")
        event_id = value[3] if len(value) == 4 else None
        return cls(value[0], value[1], value[2], event_id)


def public_fields(value: Mapping[str, Any], exclude: Collection[str] = ()) -> Dict[str, Any]:
    """Keys not in ``exclude``, dropping internal ones that start with ``_``."""
    return {k: v for k, v in value.items() if k not in exclude and not k.startswith("_")}


@dataclass(frozen=True)
class AnalysisEvent:
    """Provenance record for a tool run that produced or changed genome data."""
    tool_name: str
    execution_time: float
    parameters: List[str] = field(default_factory=list)
    hostname: str = ""
    id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        value = public_fields(self.extra)
        if self.id is not None:
            value["id"] = self.id
        value.update({
            "tool_name": self.tool_name,
            "execution_time": self.execution_time,
            "parameters": list(self.parameters),
            "hostname": self.hostname
        })
        return value

    @classmethod
    def from_value(cls, value: Union["AnalysisEvent", Mapping[str, Any]]) -> "AnalysisEvent":
        if isinstance(value, AnalysisEvent):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError(
                f"Analysis event must be a structured record, got {type(value).__name__}"
            )
        known = {"id", "tool_name", "execution_time", "parameters", "hostname"}
        return cls(
            tool_name=value.get("tool_name", ""),
            execution_time=value.get("execution_time", 0.0),
            parameters=list(value.get("parameters") or []),
            hostname=value.get("hostname", ""),
            id=value.get("id"),
            extra=public_fields(value, known)
        )


@dataclass
class Contig:
    """A contiguous assembled DNA sequence."""
    id: str
    dna: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.dna)

    def to_dict(self) -> Dict[str, Any]:
        value = public_fields(self.extra)
        value.update({"id": self.id, "dna": self.dna})
        return value

    @classmethod
    def from_value(cls, value: Union["Contig", Mapping[str, Any]]) -> "Contig":
        if isinstance(value, Contig):
            return value
        if not isinstance(value, Mapping) or "id" not in value:
            raise ValidationError(f"Contig must be a record with an id, got {value!r}")
        return cls(
            id=value["id"],
            dna=value.get("dna", ""),
            extra=public_fields(value, ("id", "dna"))
        )


@dataclass
class CloseGenome:
    """Entry in the list of genomes most similar to this one."""
    genome_id: str
    closeness_measure: Any
    genome_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "genome_id": self.genome_id,
            "closeness_measure": self.closeness_measure,
            "genome_name": self.genome_name
        }

    @classmethod
    def from_value(cls, value: Union["CloseGenome", Mapping[str, Any]]) -> "CloseGenome":
        if isinstance(value, CloseGenome):
            return value
        if not isinstance(value, Mapping) or "genome_id" not in value:
            raise ValidationError(f"Close genome entry must have a genome_id, got {value!r}")
        return cls(
            genome_id=value["genome_id"],
            closeness_measure=value.get("closeness_measure"),
            genome_name=value.get("genome_name", "")
        )


# Feature keys with dedicated attributes; anything else round-trips via ``extra``.
_FEATURE_KEYS = (
    "id", "type", "location", "function", "protein_translation", "aliases",
    "annotations", "quality", "feature_creation_event"
)


@dataclass
class Feature:
    """An annotated region of the genome."""
    id: str
    type: str
    location: List[LocationSegment]
    function: Optional[str] = None
    protein_translation: Optional[str] = None
    aliases: Optional[List[str]] = None
    annotations: List[AnnotationEvent] = field(default_factory=list)
    quality: Optional[Any] = None
    feature_creation_event: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def add_annotation(self, annotation: AnnotationEvent) -> None:
        """Append to the annotation history; earlier entries are never touched."""
        self.annotations.append(annotation)

    def to_dict(self) -> Dict[str, Any]:
        value = public_fields(self.extra)
        value.update({
            "id": self.id,
            "type": self.type,
            "location": [segment.to_list() for segment in self.location],
            "annotations": [annotation.to_list() for annotation in self.annotations]
        })
        if self.function is not None:
            value["function"] = self.function
        if self.protein_translation is not None:
            value["protein_translation"] = self.protein_translation
        if self.aliases is not None:
            value["aliases"] = list(self.aliases)
        if self.quality is not None:
            value["quality"] = self.quality
        if self.feature_creation_event is not None:
            value["feature_creation_event"] = self.feature_creation_event
        return value

    @classmethod
    def from_value(cls, value: Union["Feature", Mapping[str, Any]]) -> "Feature":
        if isinstance(value, Feature):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError(f"Feature must be a record, got {type(value).__name__}")
        missing = [key for key in ("id", "type") if key not in value]
        if missing:
            raise ValidationError(f"Feature is missing required fields: {missing}", errors=missing)
        aliases = value.get("aliases")
        return cls(
            id=value["id"],
            type=value["type"],
            location=[LocationSegment.from_value(seg) for seg in value.get("location") or []],
            function=value.get("function"),
            protein_translation=value.get("protein_translation"),
            aliases=list(aliases) if aliases is not None else None,
            annotations=[AnnotationEvent.from_value(a) for a in value.get("annotations") or []],
            quality=value.get("quality"),
            feature_creation_event=value.get("feature_creation_event"),
            extra=public_fields(value, _FEATURE_KEYS)
        )


def validate_feature(feature: Feature) -> None:
    """
    Validate feature data integrity.

    Args:
        feature: Feature to validate

    Raises:
        ValidationError: If validation fails
    """
    if not feature.id:
        raise ValidationError("Feature id must not be empty")
    if not feature.type:
        raise ValidationError(f"Feature {feature.id} has no type")
    if not feature.location:
        raise ValidationError(f"Feature {feature.id} has no location")


@dataclass
class ValidationResult:
    """Result of validation operation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)
