"""Named OMR sheet geometries."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from omr_scanner.core.errors import UnknownTemplateError

# A4 portrait, 297mm / 210mm
A4_PORTRAIT_ASPECT = 297 / 210


@dataclass(frozen=True, slots=True)
class Template:
    """Where an OMR sheet is expected to sit within a captured frame.

    ``crop_width_pct`` and ``crop_height_pct`` are percentages of the frame
    (both in (0, 100]); ``target_aspect_ratio`` is height / width of the sheet.
    """

    id: str
    display_name: str
    crop_width_pct: float
    crop_height_pct: float
    target_aspect_ratio: float = A4_PORTRAIT_ASPECT
    grid_rows: int = 0
    grid_cols: int = 0


DEFAULT_TEMPLATES: tuple[Template, ...] = (
    Template("standard", "Standard OMR Sheet (A4)", 70, 92, A4_PORTRAIT_ASPECT, 100, 4),
    Template("long", "Long OMR Sheet (A4)", 68, 94, A4_PORTRAIT_ASPECT, 120, 4),
    Template("compact", "Compact OMR Sheet (A4)", 72, 90, A4_PORTRAIT_ASPECT, 80, 4),
)

DEFAULT_TEMPLATE_ID = "standard"


class TemplateRegistry(Mapping[str, Template]):
    """Read-only id -> Template table, fixed at construction."""

    def __init__(self, templates: Iterable[Template] = DEFAULT_TEMPLATES) -> None:
        table: dict[str, Template] = {}
        for template in templates:
            if template.id in table:
                raise ValueError(f"Duplicate template id '{template.id}'")
            table[template.id] = template
        self._templates = MappingProxyType(table)

    def __getitem__(self, template_id: str) -> Template:
        try:
            return self._templates[template_id]
        except KeyError:
            known = ", ".join(sorted(self._templates))
            raise UnknownTemplateError(
                f"'{template_id}' is not a known template (known: {known})"
            ) from None

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def get(self, template_id: str, default: Template | None = None) -> Template | None:
        return self._templates.get(template_id, default)

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def get_template(self, template_id: str) -> Template:
        return self[template_id]


default_registry = TemplateRegistry()


def get_template(template_id: str) -> Template:
    return default_registry[template_id]


__all__ = [
    "A4_PORTRAIT_ASPECT",
    "DEFAULT_TEMPLATES",
    "DEFAULT_TEMPLATE_ID",
    "Template",
    "TemplateRegistry",
    "default_registry",
    "get_template",
]
