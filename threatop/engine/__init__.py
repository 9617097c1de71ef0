from threatop.engine.annotator import AnnotationPersistError, annotate, build_record
from threatop.engine.classifier import classify, classify_margin, margin, resolve_difficulty
from threatop.engine.render_engine import ThreatOpportunityEngine
from threatop.engine.roll_filter import read_roll_event, should_process

__all__ = [
    "AnnotationPersistError",
    "ThreatOpportunityEngine",
    "annotate",
    "build_record",
    "classify",
    "classify_margin",
    "margin",
    "read_roll_event",
    "resolve_difficulty",
    "should_process",
]
