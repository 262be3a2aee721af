"""The genome typed object: an indexed, in-memory annotated genome document.

A genome document is a JSON object holding metadata, ``contigs``,
``features``, ``close_genomes`` and ``analysis_events``. Loading it through
:meth:`GenomeTypedObject.initialize` builds lookup indexes on feature and
contig ids; :meth:`GenomeTypedObject.prepare_for_return` projects the object
back onto the plain document with no index data attached.

The indexes are not maintained automatically. After appending contigs or
features, call :meth:`GenomeTypedObject.update_indexes` before relying on
:meth:`find_feature`, :meth:`find_contig` or :meth:`get_feature_dna`.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional, Union, Iterable, Sequence, Mapping, Tuple

from genometo.core.environment import Environment
from genometo.core.exceptions import (
    ValidationError, IdAllocationError, FeatureNotFoundError, ContigNotFoundError
)
from genometo.core.id_allocation import IdAllocator, GenomeIdAllocator, highest_existing_number
from genometo.core.location import parse_location_list
from genometo.core.sequence import segment_dna
from genometo.core.types import (
    AnalysisEvent, AnnotationEvent, CloseGenome, Contig, Feature, LocationSegment, public_fields
)


logger = logging.getLogger(__name__)


METADATA_FIELDS = (
    "id", "scientific_name", "domain", "genetic_code", "source", "source_id", "taxonomy"
)
COLLECTION_FIELDS = ("contigs", "features", "close_genomes", "analysis_events")

DEFAULT_ANNOTATOR = "Nobody"

# (id, location, type, function, comma-separated aliases)
CompactFeature = Tuple[str, str, str, Optional[str], Optional[str]]


class GenomeTypedObject:
    """
    In-memory genome document.

    Args:
        id_allocator: Source of new feature numbers; defaults to an
            allocator that continues numbering from this genome's features
        environment: Clock, hostname and UUID source for provenance records
    """

    def __init__(
        self,
        id_allocator: Optional[IdAllocator] = None,
        environment: Optional[Environment] = None
    ) -> None:
        self.id: Optional[str] = None
        self.scientific_name: Optional[str] = None
        self.domain: Optional[str] = None
        self.genetic_code: Optional[int] = None
        self.source: Optional[str] = None
        self.source_id: Optional[str] = None
        self.taxonomy: Optional[str] = None

        self.contigs: List[Contig] = []
        self.features: List[Feature] = []
        self.close_genomes: List[CloseGenome] = []
        self.analysis_events: List[AnalysisEvent] = []
        # Top-level document keys this class does not model
        self.extra: Dict[str, Any] = {}

        self.environment = environment or Environment()
        self.id_allocator = id_allocator or GenomeIdAllocator(self)
        self._feature_index: Dict[str, Feature] = {}
        self._contig_index: Dict[str, Contig] = {}

    def __repr__(self) -> str:
        return (f"GenomeTypedObject(id={self.id!r}, contigs={len(self.contigs)}, "
                f"features={len(self.features)})")

    # ------------------------------------------------------------------
    # Construction and serialisation
    # ------------------------------------------------------------------

    @classmethod
    def initialize(
        cls,
        raw: Mapping[str, Any],
        id_allocator: Optional[IdAllocator] = None,
        environment: Optional[Environment] = None
    ) -> "GenomeTypedObject":
        """
        Build a genome object from a deserialised document and index it.

        Args:
            raw: Parsed genome document
            id_allocator: Optional id allocator override
            environment: Optional environment override

        Returns:
            Indexed GenomeTypedObject

        Raises:
            ValidationError: If the document is not an object or lacks the
                ``contigs`` or ``features`` lists
        """
        genome = cls.initialize_without_indexes(raw, id_allocator, environment)
        genome.update_indexes()
        return genome

    @classmethod
    def initialize_without_indexes(
        cls,
        raw: Mapping[str, Any],
        id_allocator: Optional[IdAllocator] = None,
        environment: Optional[Environment] = None
    ) -> "GenomeTypedObject":
        """Same as :meth:`initialize` but leaves the indexes empty."""
        errors = validate_genome_document(raw)
        if errors:
            raise ValidationError(f"Invalid genome document: {errors}", errors=errors,
                                  operation="initialize")

        genome = cls(id_allocator=id_allocator, environment=environment)
        genome.set_metadata(raw)
        genome.contigs = [Contig.from_value(c) for c in raw["contigs"]]
        genome.features = [Feature.from_value(f) for f in raw["features"]]
        genome.close_genomes = [CloseGenome.from_value(c) for c in raw.get("close_genomes") or []]
        genome.analysis_events = [
            AnalysisEvent.from_value(e) for e in raw.get("analysis_events") or []
        ]
        genome.extra = public_fields(raw, METADATA_FIELDS + COLLECTION_FIELDS)
        logger.debug(f"Loaded genome {genome.id}: {len(genome.contigs)} contigs, "
                     f"{len(genome.features)} features")
        return genome

    @classmethod
    def create_from_file(
        cls,
        path: Union[str, Path],
        id_allocator: Optional[IdAllocator] = None,
        environment: Optional[Environment] = None
    ) -> "GenomeTypedObject":
        """
        Load a genome document from a JSON file.

        The returned object is not indexed; call :meth:`update_indexes`
        before using lookups.
        """
        path = Path(path)
        logger.info(f"Reading genome document {path}")
        with open(path, 'r') as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Genome document {path} is not valid JSON: {e}")
        return cls.initialize_without_indexes(raw, id_allocator, environment)

    def save(self, path: Union[str, Path], indent: Optional[int] = 2) -> Path:
        """Write the plain document form of this genome as JSON."""
        path = Path(path)
        with open(path, 'w') as f:
            json.dump(self.prepare_for_return(), f, indent=indent)
        logger.info(f"Wrote genome document {path}")
        return path

    def prepare_for_return(self) -> Dict[str, Any]:
        """
        Project the genome onto its plain document form.

        The result holds only schema fields and JSON-compatible values; no
        index data or references back to this object survive.
        """
        document = public_fields(self.extra)
        for key in METADATA_FIELDS:
            value = getattr(self, key)
            if value is not None:
                document[key] = value
        document["contigs"] = [contig.to_dict() for contig in self.contigs]
        document["features"] = [feature.to_dict() for feature in self.features]
        document["close_genomes"] = [genome.to_dict() for genome in self.close_genomes]
        document["analysis_events"] = [event.to_dict() for event in self.analysis_events]
        return document

    def set_metadata(self, meta: Mapping[str, Any]) -> "GenomeTypedObject":
        """Copy the known metadata fields present in ``meta``; others are ignored."""
        for key in METADATA_FIELDS:
            if key in meta:
                setattr(self, key, meta[key])
        return self

    def hostname(self) -> str:
        return self.environment.hostname()

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------

    def update_indexes(self) -> "GenomeTypedObject":
        """Rebuild the feature and contig indexes from the current lists."""
        self._feature_index = {feature.id: feature for feature in self.features}
        self._contig_index = {contig.id: contig for contig in self.contigs}
        return self

    def find_feature(self, feature_id: str) -> Optional[Feature]:
        return self._feature_index.get(feature_id)

    def find_contig(self, contig_id: str) -> Optional[Contig]:
        return self._contig_index.get(contig_id)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_contigs(self, contigs: Iterable[Union[Contig, Mapping[str, Any]]]) -> None:
        """Append contigs as given. Ids are not checked and indexes are not updated."""
        added = [Contig.from_value(c) for c in contigs]
        self.contigs.extend(added)
        logger.debug(f"Added {len(added)} contigs to genome {self.id}")

    def add_feature(
        self,
        feature_type: str,
        location: Sequence[Union[LocationSegment, Sequence[Any]]],
        feature_id: Optional[str] = None,
        id_prefix: Optional[str] = None,
        id_allocator: Optional[IdAllocator] = None,
        function: Optional[str] = None,
        annotator: str = DEFAULT_ANNOTATOR,
        annotation: str = "Add feature",
        protein_translation: Optional[str] = None,
        analysis_event_id: Optional[str] = None,
        quality: Optional[Any] = None,
        aliases: Optional[List[str]] = None
    ) -> Feature:
        """
        Create a feature and append it to the genome.

        When ``feature_id`` is not given a new id ``<prefix>.<type>.<n>`` is
        allocated, with ``prefix`` defaulting to the genome id. The feature
        index is not updated.

        Args:
            feature_type: Feature type, e.g. ``CDS`` or ``rna``
            location: Ordered location segments
            feature_id: Explicit id; skips allocation
            id_prefix: Prefix for allocated ids
            id_allocator: Allocator to use instead of the genome's own
            function: Functional assignment
            annotator: Name recorded on the annotation entries
            annotation: Comment for the creation annotation
            protein_translation: Amino-acid sequence
            analysis_event_id: Id of the analysis event that made this feature
            quality: Quality measure record
            aliases: Alternative identifiers

        Returns:
            The new Feature

        Raises:
            ValidationError: Missing type or location
            IdAllocationError: The allocator could not supply an id
        """
        if not feature_type:
            raise ValidationError("No feature type given", operation="add_feature")
        if not location:
            raise ValidationError("No feature location given", operation="add_feature")
        segments = [LocationSegment.from_value(segment) for segment in location]

        if feature_id is None:
            feature_id = self._allocate_feature_id(feature_type, id_prefix, id_allocator)

        timestamp = int(self.environment.now())
        feature = Feature(
            id=feature_id,
            type=feature_type,
            location=segments,
            annotations=[AnnotationEvent(annotation, annotator, timestamp)]
        )
        if quality:
            feature.quality = quality
        if analysis_event_id:
            feature.feature_creation_event = analysis_event_id
        if aliases:
            feature.aliases = list(aliases)
        if function:
            feature.function = function
            feature.add_annotation(
                AnnotationEvent(f"Set function to {function}", annotator, timestamp)
            )
        if protein_translation:
            feature.protein_translation = protein_translation

        self.features.append(feature)
        logger.debug(f"Added feature {feature_id} ({feature_type})")
        return feature

    def _allocate_feature_id(
        self,
        feature_type: str,
        id_prefix: Optional[str],
        id_allocator: Optional[IdAllocator]
    ) -> str:
        prefix = id_prefix if id_prefix is not None else self.id
        if prefix is None:
            raise ValidationError("Cannot allocate a feature id: genome has no id",
                                  operation="add_feature")
        allocator = id_allocator or self.id_allocator
        typed_prefix = f"{prefix}.{feature_type}"
        # shared allocators know nothing of ids already in this genome
        floor = highest_existing_number(typed_prefix, (f.id for f in self.features)) + 1

        try:
            next_num = allocator.allocate_id_range(typed_prefix, 1, minimum=floor)
        except IdAllocationError:
            raise
        except Exception as e:
            raise IdAllocationError(typed_prefix, operation="add_feature") from e
        if next_num is None:
            raise IdAllocationError(typed_prefix, operation="add_feature")

        return f"{typed_prefix}.{next_num}"

    def add_features_from_list(
        self,
        features: Iterable[CompactFeature],
        annotator: str = DEFAULT_ANNOTATOR
    ) -> Dict[str, str]:
        """
        Import features given as compact tuples.

        Each tuple is ``(id, location, type, function, aliases)``, where
        ``location`` is a comma-separated list of location strings and
        ``aliases`` is comma-separated. One analysis event is recorded for
        the whole import and every new feature refers to it.

        Returns:
            Mapping from the id in each tuple to the id allocated for it
        """
        event_id = self.add_analysis_event({
            "tool_name": "add_features_from_list",
            "execution_time": self.environment.now(),
            "parameters": [],
            "hostname": self.hostname()
        })

        id_map = {}
        for input_id, location_str, feature_type, function, aliases_str in features:
            aliases = [alias for alias in (aliases_str or "").split(',') if alias]
            feature = self.add_feature(
                feature_type=feature_type,
                location=parse_location_list(location_str),
                function=function or None,
                aliases=aliases,
                annotator=annotator,
                analysis_event_id=event_id
            )
            id_map[input_id] = feature.id

        logger.info(f"Imported {len(id_map)} features (analysis event {event_id})")
        return id_map

    def update_function(
        self,
        user: str,
        feature_id: str,
        function: str,
        event_id: Optional[str] = None
    ) -> Optional[Feature]:
        """
        Replace the function of an indexed feature and log the change.

        Returns:
            The updated feature, or None if ``feature_id`` is not indexed
        """
        feature = self.find_feature(feature_id)
        if feature is None:
            logger.warning(f"Cannot update function of {feature_id}: feature not indexed")
            return None

        feature.add_annotation(AnnotationEvent(
            f"Function updated to {function}", user, int(self.environment.now()), event_id
        ))
        feature.function = function
        return feature

    def add_analysis_event(self, event: Union[AnalysisEvent, Mapping[str, Any]]) -> str:
        """
        Record an analysis event under a freshly generated UUID.

        Raises:
            ValidationError: If ``event`` is not a structured record

        Returns:
            The new event id
        """
        if not isinstance(event, (AnalysisEvent, Mapping)):
            raise ValidationError(
                f"Analysis event must be a structured record, got {type(event).__name__}",
                operation="add_analysis_event"
            )
        event = AnalysisEvent.from_value(event)
        event_id = self.environment.new_uuid()
        stored = AnalysisEvent(
            tool_name=event.tool_name,
            execution_time=event.execution_time,
            parameters=list(event.parameters),
            hostname=event.hostname,
            id=event_id,
            extra=dict(event.extra)
        )
        self.analysis_events.append(stored)
        logger.debug(f"Recorded analysis event {event_id} for {stored.tool_name}")
        return event_id

    def find_analysis_event(self, event_id: str) -> Optional[AnalysisEvent]:
        for event in self.analysis_events:
            if event.id == event_id:
                return event
        return None

    # ------------------------------------------------------------------
    # Sequence access
    # ------------------------------------------------------------------

    def get_feature_dna(self, feature: Union[Feature, str]) -> str:
        """
        Extract the nucleotide sequence of a feature.

        Args:
            feature: Feature object or indexed feature id

        Returns:
            Concatenated sequence of all location segments, in location order

        Raises:
            FeatureNotFoundError: ``feature`` is an id that is not indexed
            ContigNotFoundError: A segment names a contig that is not indexed
        """
        if isinstance(feature, str):
            feature_id = feature
            feature = self.find_feature(feature_id)
            if feature is None:
                raise FeatureNotFoundError(feature_id, operation="get_feature_dna")

        parts = []
        for segment in feature.location:
            contig = self.find_contig(segment.contig_id)
            if contig is None:
                raise ContigNotFoundError(segment.contig_id, operation="get_feature_dna")
            parts.append(segment_dna(contig.dna, segment))
        return "".join(parts)


def validate_genome_document(raw: Any) -> List[str]:
    """
    Check that a deserialised document has the required containers.

    Returns:
        List of problems; empty when the document is usable
    """
    if not isinstance(raw, Mapping):
        return [f"genome document must be an object, got {type(raw).__name__}"]

    errors = []
    for key in ("contigs", "features"):
        if key not in raw:
            errors.append(f"missing '{key}'")
        elif not isinstance(raw[key], list):
            errors.append(f"'{key}' must be a list")
    for key in ("close_genomes", "analysis_events"):
        if raw.get(key) is not None and not isinstance(raw[key], list):
            errors.append(f"'{key}' must be a list")
    return errors
