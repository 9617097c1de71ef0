from __future__ import annotations

import logging
import threading

from threatop.engine.annotator import AnnotationPersistError, annotate
from threatop.engine.classifier import classify_margin, margin, resolve_difficulty
from threatop.engine.roll_filter import read_roll_event, should_process
from threatop.i18n import Localizer
from threatop.models.core import OutcomeBand, RenderOutcome

log = logging.getLogger(__name__)

DEFAULT_SCOPE = "pf2e-threat-opportunity"
DEFAULT_SYSTEM = "pf2e"


class ThreatOpportunityEngine:
    """Runs the filter, classify and annotate pipeline for one rendered message.

    Renders are handled one at a time so the processed-marker check and the
    marker write cannot interleave between worker threads.
    """

    def __init__(
        self,
        localizer: Localizer | None = None,
        scope: str = DEFAULT_SCOPE,
        system_id: str = DEFAULT_SYSTEM,
    ) -> None:
        self.localizer = localizer or Localizer()
        self.scope = scope
        self.system_id = system_id
        self.lock = threading.Lock()

    def handle_render(self, message) -> RenderOutcome:
        with self.lock:
            return self._render(message)

    def _render(self, message) -> RenderOutcome:
        event = read_roll_event(message, self.scope, self.system_id)
        if event.already_processed:
            return RenderOutcome(event.message_id, "already_processed")
        roll_total = event.roll_total
        if roll_total is None or not should_process(event):
            log.debug("render_filtered message=%s type=%s", event.message_id, event.check_type)
            return RenderOutcome(event.message_id, "filtered")

        difficulty = resolve_difficulty(event)
        if difficulty is None:
            log.debug("render_no_dc message=%s", event.message_id)
            return RenderOutcome(event.message_id, "missing_difficulty")

        diff = margin(roll_total, difficulty)
        band = classify_margin(diff)
        if band is OutcomeBand.NONE:
            return RenderOutcome(event.message_id, "no_band", difficulty=difficulty, margin=diff)

        try:
            record = annotate(message, band, self.localizer, self.scope)
        except AnnotationPersistError as exc:
            return RenderOutcome(
                event.message_id,
                "persist_failed",
                difficulty=difficulty,
                margin=diff,
                band=band,
                record=exc.record,
            )
        if record is None:
            return RenderOutcome(event.message_id, "already_processed", difficulty=difficulty, margin=diff, band=band)
        return RenderOutcome(event.message_id, "annotated", difficulty=difficulty, margin=diff, band=band, record=record)
