from __future__ import annotations

from dataclasses import dataclass

OTHER_SERVICES = "Other Services"


@dataclass(frozen=True)
class CatalogItem:
    name: str
    uuid: str | None = None
    parent_name: str | None = None


@dataclass(frozen=True)
class CatalogOption:
    id: str
    name: str
    parent_title: str

    @staticmethod
    def from_item(item: CatalogItem) -> "CatalogOption":
        return CatalogOption(
            id=item.uuid or f"{item.parent_name or 'Ungrouped'}-{item.name}",
            name=item.name,
            parent_title=item.parent_name or OTHER_SERVICES,
        )


@dataclass(frozen=True)
class CatalogCategory:
    id: str
    title: str
    options: tuple[CatalogOption, ...]
