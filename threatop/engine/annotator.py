from __future__ import annotations

import logging

from threatop.i18n import Localizer
from threatop.markup import splice_annotation
from threatop.models.core import AnnotationRecord, OutcomeBand

log = logging.getLogger(__name__)

PROCESSED_KEY = "processed"

BAND_LABEL_KEYS = {
    OutcomeBand.OPPORTUNITY: "OPPORTUNITY",
    OutcomeBand.THREAT: "THREAT",
}


class AnnotationPersistError(RuntimeError):
    """The annotation was not saved.

    ``marker_set`` tells whether the processed marker made it to the store
    before the failure.
    """

    def __init__(self, message_id: str, record: AnnotationRecord, marker_set: bool) -> None:
        super().__init__(f"annotation not persisted for message {message_id}")
        self.message_id = message_id
        self.record = record
        self.marker_set = marker_set


def detail_class(scope: str) -> str:
    return f"{scope}-detail"


def build_record(band: OutcomeBand, localizer: Localizer) -> AnnotationRecord:
    if band not in BAND_LABEL_KEYS:
        raise ValueError(f"no annotation for band {band!r}")
    return AnnotationRecord(
        band=band,
        label=localizer.localize(BAND_LABEL_KEYS[band]),
        style_class=band.value,
    )


def annotate(message, band: OutcomeBand, localizer: Localizer, scope: str) -> AnnotationRecord | None:
    """Write the one-time annotation for ``band`` onto ``message``.

    Returns ``None`` when the message already carries the processed marker.
    The marker is persisted before the content, so a failed content write
    leaves the message marked but unannotated. Either write failing is
    raised as AnnotationPersistError.
    """
    record = build_record(band, localizer)
    if message.get_flag(scope, PROCESSED_KEY):
        log.debug("annotation_skipped_processed message=%s", message.message_id)
        return None

    updated = splice_annotation(message.content, detail_class(scope), record.style_class, record.label)

    try:
        message.set_flag(scope, PROCESSED_KEY, True)
    except Exception as exc:
        log.exception("annotation_marker_failed message=%s band=%s", message.message_id, band.value)
        raise AnnotationPersistError(str(message.message_id), record, marker_set=False) from exc
    try:
        message.update(content=updated)
    except Exception as exc:
        log.exception("annotation_persist_failed message=%s band=%s", message.message_id, band.value)
        raise AnnotationPersistError(str(message.message_id), record, marker_set=True) from exc

    log.info("annotation_persisted message=%s band=%s label=%s", message.message_id, band.value, record.label)
    return record
