"""Organizational structure catalog for officer rosters.

Defines the structure categories, the bureau divisions and the fixed
role titles of each category. The built-in catalog can be replaced by a
YAML file of the form::

    categories:
      Dewan Pakar:
        titles: [Ketua, Sekretaris]
      Biro-Biro:
        titles: [Ketua, Sekretaris]
        divisions: [Biro Hukum, Biro IT]
      Koordinator Cabang:
        generated: 10
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml


class StructureCategory(str, Enum):
    """Organizational tiers an officer can belong to."""

    ADVISORY_BOARD = "Dewan Penasehat"
    EXPERT_BOARD = "Dewan Pakar"
    EXECUTIVE_BOARD = "Dewan Pengurus Harian"
    BUREAUS = "Biro-Biro"
    BRANCH_COORDINATORS = "Koordinator Cabang"


BOARD_TITLES = [
    "Ketua",
    "Wakil Ketua",
    "Sekretaris",
    "Anggota 1",
    "Anggota 2",
]

_DEPUTY_FIELDS = [
    "Organisasi, Kaderisasi dan Keanggotaan",
    "Pemenangan Pemilu",
    "Perencanaan Kebijakan Strategis",
    "Hukum, HAM dan Advokasi Rakyat",
    "Peradaban & Kebudayaan",
    "Ekonomi Sosial & Kesejahteraan Rakyat",
    "Pemberdayaan Perempuan dan Perlindungan Anak",
    "Penggalangan Kelompok Profesi & Komunitas",
    "Sumber Daya Alam, Agraria & Lingkungan Hidup",
    "Kepemudaan & Penggalangan Pemilih Pemula",
    "Keagamaan",
    "Hubungan Antar Lembaga",
    "IT, Cyber dan Media Sosial",
]

EXECUTIVE_TITLES = (
    ["Ketua DPD"]
    + [f"Wakil Ketua Bid. {f}" for f in _DEPUTY_FIELDS]
    + ["Sekretaris DPD", "Wakil Sekretaris Bid. Internal / Kepala Sekretariat"]
    + [f"Wakil Sekretaris Bid. {f}" for f in _DEPUTY_FIELDS]
    + [
        "Bendahara DPD",
        "Wakil Bendahara Bid. Pembelanjaan Aset Partai",
        "Wakil Bendahara Bid. Pembiayaan Kegiatan Partai",
        "Wakil Bendahara Bid. Pembiayaan Operasional Sekretariat Partai",
    ]
)

BUREAU_DIVISIONS = [
    "Biro Organisasi, Kaderisasi dan Keanggotaan",
    "Biro Pendidikan dan Agama",
    "Biro Hukum, HAM & Advokasi",
    "Biro Peradaban & Kebudayaan",
    "Biro Milenial, Pemuda, Olahraga dan Seni",
    "Biro Ketenagakerjaan dan Pekerja Migran Indonesia",
    "Biro Perempuan dan Anak",
    "Biro Penggalangan Kelompok Profesi dan Komunitas",
    "Biro IT, Cyber & Media Publikasi",
    "Biro Pemberdayaan Ekonomi, Koperasi dan UMKM",
    "Biro Lingkungan Hidup",
    "Biro Agraria, Pertanian dan Nelayan",
]

BUREAU_TITLES = ["Ketua", "Sekretaris", "Anggota 1", "Anggota 2"]


def branch_coordinator_titles(count: int = 10) -> List[str]:
    return [f"Koordinator Cabang {i + 1}" for i in range(count)]


@dataclass
class CategoryConfig:
    """Titles and sub-divisions of one structure category."""

    titles: List[str] = field(default_factory=list)
    divisions: List[str] = field(default_factory=list)

    @property
    def requires_division(self) -> bool:
        return bool(self.divisions)


@dataclass
class StructureCatalog:
    """All structure categories with their allowed titles."""

    categories: Dict[StructureCategory, CategoryConfig] = field(default_factory=dict)

    def titles_for(
        self,
        category: StructureCategory,
        custom_titles: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """Fixed titles of a category followed by the chapter's custom titles."""
        config = self.categories.get(category)
        base = list(config.titles) if config else []
        extra = [t for t in (custom_titles or []) if t not in base]
        return base + extra

    def divisions_for(self, category: StructureCategory) -> List[str]:
        config = self.categories.get(category)
        return list(config.divisions) if config else []

    def requires_division(self, category: StructureCategory) -> bool:
        config = self.categories.get(category)
        return bool(config and config.requires_division)


def default_catalog(branch_slots: int = 10) -> StructureCatalog:
    """Build the built-in catalog."""
    return StructureCatalog(
        categories={
            StructureCategory.ADVISORY_BOARD: CategoryConfig(titles=list(BOARD_TITLES)),
            StructureCategory.EXPERT_BOARD: CategoryConfig(titles=list(BOARD_TITLES)),
            StructureCategory.EXECUTIVE_BOARD: CategoryConfig(titles=list(EXECUTIVE_TITLES)),
            StructureCategory.BUREAUS: CategoryConfig(
                titles=list(BUREAU_TITLES), divisions=list(BUREAU_DIVISIONS)
            ),
            StructureCategory.BRANCH_COORDINATORS: CategoryConfig(
                titles=branch_coordinator_titles(branch_slots)
            ),
        }
    )


def parse_catalog(catalog_dict: Dict[str, Any], branch_slots: int = 10) -> StructureCatalog:
    """Parse a catalog dictionary, starting from the built-in catalog.

    Categories missing from the dictionary keep their built-in titles.

    Raises:
        ValueError: If a category name is unknown
    """
    catalog = default_catalog(branch_slots)

    for name, entry in (catalog_dict.get("categories") or {}).items():
        try:
            category = StructureCategory(name)
        except ValueError:
            raise ValueError(f"Unknown structure category: {name}")

        entry = entry or {}
        if "generated" in entry:
            titles = branch_coordinator_titles(int(entry["generated"]))
        else:
            titles = list(entry.get("titles", []))
        catalog.categories[category] = CategoryConfig(
            titles=titles,
            divisions=list(entry.get("divisions", [])),
        )

    return catalog


def load_catalog(path: Optional[str] = None, branch_slots: int = 10) -> StructureCatalog:
    """Load the catalog from a YAML file, or the built-in one when no path is given.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the YAML is invalid
    """
    if not path:
        return default_catalog(branch_slots)

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Structure catalog not found: {path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return parse_catalog(data, branch_slots)
