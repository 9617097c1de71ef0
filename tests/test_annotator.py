from __future__ import annotations

import pytest

from threatop.db.store import Store
from threatop.engine.annotator import AnnotationPersistError, annotate, detail_class
from threatop.i18n import Localizer
from threatop.markup import find_annotations, splice_annotation
from threatop.models.core import OutcomeBand

SCOPE = "pf2e-threat-opportunity"
ROLL_HTML = '<header class="message-header">Hero</header><div class="message-content"><h4 class="dice-total">15</h4></div>'


class RecordingMessage:
    def __init__(self, content: str = ROLL_HTML, fail_update: bool = False, fail_flag: bool = False) -> None:
        self.fail_flag = fail_flag
        self.message_id = "rec-1"
        self.content = content
        self.fail_update = fail_update
        self.flags: dict = {}
        self.calls: list[str] = []

    def get_flag(self, scope: str, key: str):
        return self.flags.get(scope, {}).get(key)

    def set_flag(self, scope: str, key: str, value) -> None:
        self.calls.append("set_flag")
        if self.fail_flag:
            raise OSError("database is locked")
        self.flags.setdefault(scope, {})[key] = value

    def update(self, content: str) -> None:
        self.calls.append("update")
        if self.fail_update:
            raise OSError("disk full")
        self.content = content


def test_splice_inserts_inside_message_content():
    updated = splice_annotation(ROLL_HTML, "x-detail", "threat", "Threat")
    assert '<div class="message-content"><h4 class="dice-total">15</h4><div class="x-detail threat">' in updated
    assert updated.startswith('<header class="message-header">Hero</header>')


def test_splice_falls_back_to_root():
    updated = splice_annotation("<p>15</p>", "x-detail", "opportunity", "Opportunity")
    assert updated == '<p>15</p><div class="x-detail opportunity"><span>Opportunity</span></div>'


def test_splice_escapes_label():
    updated = splice_annotation("", "x-detail", "threat", "<b>Threat</b>")
    assert "<b>" not in updated
    assert find_annotations(updated, "x-detail") == [("threat", "<b>Threat</b>")]


def test_marker_is_set_before_content_write():
    message = RecordingMessage()
    record = annotate(message, OutcomeBand.THREAT, Localizer("en"), SCOPE)
    assert message.calls == ["set_flag", "update"]
    assert record is not None
    assert record.label == "Threat"
    assert record.style_class == "threat"
    assert record.processed_marker
    assert find_annotations(message.content, detail_class(SCOPE)) == [("threat", "Threat")]


def test_already_marked_message_is_left_alone():
    message = RecordingMessage()
    message.flags = {SCOPE: {"processed": True}}
    assert annotate(message, OutcomeBand.OPPORTUNITY, Localizer("en"), SCOPE) is None
    assert message.calls == []
    assert message.content == ROLL_HTML


def test_failed_content_write_keeps_marker():
    message = RecordingMessage(fail_update=True)
    with pytest.raises(AnnotationPersistError) as excinfo:
        annotate(message, OutcomeBand.OPPORTUNITY, Localizer("en"), SCOPE)
    assert excinfo.value.record.band is OutcomeBand.OPPORTUNITY
    assert excinfo.value.marker_set
    assert message.get_flag(SCOPE, "processed") is True
    assert message.content == ROLL_HTML
    assert annotate(message, OutcomeBand.OPPORTUNITY, Localizer("en"), SCOPE) is None


def test_failed_marker_write_leaves_content_untouched():
    message = RecordingMessage(fail_flag=True)
    with pytest.raises(AnnotationPersistError) as excinfo:
        annotate(message, OutcomeBand.THREAT, Localizer("en"), SCOPE)
    assert not excinfo.value.marker_set
    assert message.calls == ["set_flag"]
    assert message.get_flag(SCOPE, "processed") is None
    assert message.content == ROLL_HTML


def test_none_band_is_rejected():
    with pytest.raises(ValueError):
        annotate(RecordingMessage(), OutcomeBand.NONE, Localizer("en"), SCOPE)


def test_annotation_persists_to_store(tmp_path):
    store = Store(str(tmp_path / "annotate.db"))
    store.create_message("m1", "u1", ROLL_HTML, rolls=[{"total": 10}], flags={"pf2e": {"context": {}}})
    message = store.get_message("m1")
    assert message is not None

    annotate(message, OutcomeBand.OPPORTUNITY, Localizer("de"), SCOPE)

    reloaded = store.get_message("m1")
    assert reloaded is not None
    assert reloaded.flags[SCOPE] == {"processed": True}
    assert reloaded.flags["pf2e"] == {"context": {}}
    assert find_annotations(reloaded.content, detail_class(SCOPE)) == [("opportunity", "Gelegenheit")]
