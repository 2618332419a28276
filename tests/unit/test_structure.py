"""Tests for the organizational structure catalog."""

import pytest
import yaml

from skportal.core.structure import (
    BUREAU_DIVISIONS,
    EXECUTIVE_TITLES,
    StructureCategory,
    branch_coordinator_titles,
    default_catalog,
    load_catalog,
    parse_catalog,
)


class TestDefaultCatalog:
    """Tests for the built-in catalog."""

    def test_every_category_present(self):
        catalog = default_catalog()
        assert set(catalog.categories) == set(StructureCategory)

    def test_only_bureaus_require_division(self):
        catalog = default_catalog()
        for category in StructureCategory:
            assert catalog.requires_division(category) == (category == StructureCategory.BUREAUS)

    def test_bureau_divisions(self):
        catalog = default_catalog()
        assert len(BUREAU_DIVISIONS) == 12
        assert catalog.divisions_for(StructureCategory.BUREAUS) == BUREAU_DIVISIONS
        assert catalog.divisions_for(StructureCategory.EXPERT_BOARD) == []

    def test_executive_titles(self):
        assert EXECUTIVE_TITLES[0] == "Ketua DPD"
        assert "Sekretaris DPD" in EXECUTIVE_TITLES
        assert "Bendahara DPD" in EXECUTIVE_TITLES
        assert len(EXECUTIVE_TITLES) == len(set(EXECUTIVE_TITLES))

    def test_branch_coordinator_slots(self):
        catalog = default_catalog(branch_slots=3)
        assert catalog.titles_for(StructureCategory.BRANCH_COORDINATORS) == [
            "Koordinator Cabang 1",
            "Koordinator Cabang 2",
            "Koordinator Cabang 3",
        ]
        assert len(branch_coordinator_titles()) == 10

    def test_custom_titles_appended(self):
        catalog = default_catalog()
        titles = catalog.titles_for(StructureCategory.EXPERT_BOARD, ["Penasehat Hukum", "Ketua"])
        assert titles[-1] == "Penasehat Hukum"
        assert titles.count("Ketua") == 1


class TestCatalogFile:
    """Tests for loading the catalog from YAML."""

    def test_no_path_gives_default(self):
        assert load_catalog(None) == default_catalog()

    def test_override_from_yaml(self, tmp_path):
        path = tmp_path / "structure.yaml"
        path.write_text(yaml.safe_dump({
            "categories": {
                "Dewan Pakar": {"titles": ["Ketua", "Anggota"]},
                "Biro-Biro": {"titles": ["Ketua"], "divisions": ["Biro Hukum"]},
                "Koordinator Cabang": {"generated": 2},
            }
        }))

        catalog = load_catalog(str(path))

        assert catalog.titles_for(StructureCategory.EXPERT_BOARD) == ["Ketua", "Anggota"]
        assert catalog.divisions_for(StructureCategory.BUREAUS) == ["Biro Hukum"]
        assert len(catalog.titles_for(StructureCategory.BRANCH_COORDINATORS)) == 2
        # untouched categories keep the built-in titles
        assert catalog.titles_for(StructureCategory.EXECUTIVE_BOARD) == EXECUTIVE_TITLES

    def test_unknown_category(self):
        with pytest.raises(ValueError, match="Unknown structure category"):
            parse_catalog({"categories": {"Dewan Rahasia": {"titles": ["Ketua"]}}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_catalog(str(path)) == default_catalog()
