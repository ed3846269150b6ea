"""Profile table: display kinds (copyable, bool, carousel, dot, progress, download, size)."""

from __future__ import annotations

from pathlib import PurePosixPath

from admintab.core.builder import TableBuilder
from admintab.core.context import RequestContext
from admintab.core.descriptors import FieldModel, TableDescriptor
from admintab.core.grammar import DisplayKind, FieldType, WidgetKind

__all__ = ["get_profile_table", "FINISH_STEPS"]

FINISH_STEPS = {"0": "step 1", "1": "step 2", "2": "step 3"}


def _finish_state(model: FieldModel) -> str:
    return FINISH_STEPS.get(model.value, "unknown")


def _basename(model: FieldModel) -> str:
    return PurePosixPath(model.value).name if model.value else ""


def get_profile_table(ctx: RequestContext) -> TableDescriptor:
    b = TableBuilder("profile", title="Profiles", description="Profiles").configure(
        hide_filter_area=True
    )
    b.add_column("ID", "id", FieldType.INT, filter=True)
    b.add_column("UUID", "uuid", display_kind=DisplayKind.COPYABLE)
    b.add_column("Pass", "pass", FieldType.TINYINT, display_kind=DisplayKind.BOOL,
                 display_options={"true": "1", "false": "0"})
    b.add_column("Photos", "photos", display_kind=DisplayKind.CAROUSEL,
                 display_options={"separator": ",", "width": 150, "height": 100})
    b.add_column(
        "Finish state",
        "finish_state",
        FieldType.TINYINT,
        display=_finish_state,
        display_kind=DisplayKind.DOT,
        display_options={
            "colors": {"step 1": "danger", "step 2": "info", "step 3": "primary"},
            "default": "danger",
        },
    )
    b.add_column("Progress", "finish_progress", FieldType.INT,
                 display_kind=DisplayKind.PROGRESS)
    b.add_column(
        "Resume",
        "resume",
        display=_basename,
        display_kind=DisplayKind.DOWNLOAD,
        display_options={"prefix": "http://yinyanghu.github.io/files/"},
    )
    b.add_column("Resume size", "resume_size", FieldType.INT,
                 display_kind=DisplayKind.FILE_SIZE)

    b.add_form_field("UUID", "uuid")
    b.add_form_field("Photos", "photos")
    b.add_form_field("Resume", "resume")
    b.add_form_field("Resume size", "resume_size", FieldType.INT, WidgetKind.NUMBER)
    b.add_form_field("Finish state", "finish_state", FieldType.TINYINT, WidgetKind.NUMBER)
    b.add_form_field("Progress", "finish_progress", FieldType.INT, WidgetKind.NUMBER)
    b.add_form_field("Pass", "pass", FieldType.TINYINT, WidgetKind.NUMBER)
    return b.set_table("profile").build()
