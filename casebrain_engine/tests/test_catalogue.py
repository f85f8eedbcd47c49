"""
Tests for the Strategy Catalogue
================================

Closed categories, per-category angle tables and their invariants.
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.catalogue import (
    CATEGORY_PRACTICE_AREA,
    DEFAULT_ANGLE_TYPE,
    MAX_WIN_PROBABILITY,
    allowed_angle_types,
    catalogue_for,
    loophole_type_for,
    nuclear_options_for,
    practice_area_for,
    resolve_category,
    validate_catalogue,
)
from casebrain_engine.errors import CatalogueError
from casebrain_engine.schemas import (
    AngleType,
    BreachSignal,
    CaseCategory,
    CaseFacts,
    EvidenceStatus,
    LoopholeType,
    PracticeArea,
)


class TestResolveCategory:

    @pytest.mark.parametrize("raw,expected", [
        ("Assault occasioning actual bodily harm", CaseCategory.VIOLENCE),
        ("GBH with intent", CaseCategory.VIOLENCE),
        ("Possession with intent to supply cocaine", CaseCategory.DRUGS),
        ("Drug-driving", CaseCategory.ROAD_TRAFFIC),
        ("Excess alcohol (drink driving)", CaseCategory.ROAD_TRAFFIC),
        ("Shoplifting", CaseCategory.THEFT_DISHONESTY),
        ("Affray", CaseCategory.PUBLIC_ORDER),
        ("Sexual assault", CaseCategory.SEXUAL_OFFENCE),
        ("Road traffic accident - whiplash", CaseCategory.PERSONAL_INJURY),
        ("Damp and mould disrepair", CaseCategory.HOUSING_DISREPAIR),
        ("Child arrangements order", CaseCategory.FAMILY),
        ("housing_disrepair", CaseCategory.HOUSING_DISREPAIR),
    ])
    def test_free_text_resolution(self, raw, expected):
        assert resolve_category(raw) == expected

    def test_enum_passes_through(self):
        assert resolve_category(CaseCategory.DRUGS) == CaseCategory.DRUGS

    def test_unrecognized_is_other(self):
        assert resolve_category("Breach of a supply contract") == CaseCategory.OTHER
        assert resolve_category(42) == CaseCategory.OTHER

    def test_empty_uses_practice_area_default(self):
        assert resolve_category(None, PracticeArea.CRIMINAL) == CaseCategory.CRIMINAL_GENERAL
        assert resolve_category("  ", PracticeArea.FAMILY) == CaseCategory.FAMILY
        assert resolve_category(None) == CaseCategory.OTHER


class TestCatalogueTables:

    def test_validation_passes(self):
        validate_catalogue()

    @pytest.mark.parametrize("category", list(CaseCategory))
    def test_every_category_has_a_catalogue(self, category):
        specs = catalogue_for(category)
        assert specs
        assert DEFAULT_ANGLE_TYPE in allowed_angle_types(category)
        assert category in CATEGORY_PRACTICE_AREA

    @pytest.mark.parametrize("category", list(CaseCategory))
    def test_keys_unique_within_category(self, category):
        keys = [s.key for s in catalogue_for(category)]
        assert len(keys) == len(set(keys))

    def test_category_angles_extend_practice_area(self):
        general = {s.key for s in catalogue_for(CaseCategory.CRIMINAL_GENERAL)}
        violence = {s.key for s in catalogue_for(CaseCategory.VIOLENCE)}
        assert general < violence
        assert "violence-identification" in violence

    def test_civil_catalogue_has_no_criminal_angles(self):
        types = allowed_angle_types(CaseCategory.HOUSING_DISREPAIR)
        assert AngleType.PACE_BREACH_EXCLUSION not in types
        assert AngleType.AWAAB_LAW_BREACH in types

    def test_practice_area_for_unknown_raises(self):
        with pytest.raises(CatalogueError):
            practice_area_for("not-a-category")

    def test_probability_capped(self):
        spec = next(s for s in catalogue_for(CaseCategory.CRIMINAL_GENERAL) if s.key == "abuse-of-process")
        assert spec.probability_for(["a"]) == spec.base_probability
        assert spec.probability_for(["a", "b", "c", "d", "e", "f"]) == MAX_WIN_PROBABILITY


class TestPredicates:

    def test_awaab_needs_both_signals(self):
        spec = next(s for s in catalogue_for(CaseCategory.HOUSING_DISREPAIR) if s.key == "awaab")
        damp_only = CaseFacts(signals={BreachSignal.DAMP_MOULD: ["mould"]})
        both = CaseFacts(signals={
            BreachSignal.DAMP_MOULD: ["mould"],
            BreachSignal.SOCIAL_HOUSING: ["housing association"],
        })
        assert spec.supporting_signals(damp_only) == []
        assert spec.supporting_signals(both) == ["damp_mould", "social_housing"]

    @pytest.mark.parametrize("key,category", [
        ("disclosure-stay", "disclosure"),
        ("no-case", "witness_statements"),
    ])
    def test_missing_status_needs_documents(self, key, category):
        spec = next(s for s in catalogue_for(CaseCategory.CRIMINAL_GENERAL) if s.key == key)
        empty = CaseFacts(evidence_status={category: EvidenceStatus.MISSING}, document_count=0)
        bundle = CaseFacts(evidence_status={category: EvidenceStatus.MISSING}, document_count=2)
        assert spec.supporting_signals(empty) == []
        assert spec.supporting_signals(bundle) == [f"{category}:missing"]

    def test_abuse_of_process_needs_two_breaches(self):
        spec = next(s for s in catalogue_for(CaseCategory.CRIMINAL_GENERAL) if s.key == "abuse-of-process")
        one = CaseFacts(signals={BreachSignal.CAUTION_NOT_GIVEN: ["x"]})
        two = CaseFacts(signals={BreachSignal.CAUTION_NOT_GIVEN: ["x"], BreachSignal.CONTINUITY_BREAK: ["y"]})
        assert not spec.supporting_signals(one)
        assert len(spec.supporting_signals(two)) == 2


class TestLoopholeMapping:

    def test_mapped_types(self):
        assert loophole_type_for(AngleType.PACE_BREACH_EXCLUSION) == LoopholeType.PACE_BREACH
        assert loophole_type_for(AngleType.CHAIN_OF_CUSTODY_BREAK) == LoopholeType.CHAIN_OF_CUSTODY

    def test_unmapped_collapses_to_procedural_error(self):
        assert loophole_type_for(AngleType.AWAAB_LAW_BREACH) == LoopholeType.PROCEDURAL_ERROR


class TestNuclearCatalogue:

    def test_other_has_no_options(self):
        assert nuclear_options_for(CaseCategory.OTHER) == []

    def test_clinical_negligence_shares_pi_options(self):
        pi = [s.option.id for s in nuclear_options_for(CaseCategory.PERSONAL_INJURY)]
        clin = [s.option.id for s in nuclear_options_for(CaseCategory.CLINICAL_NEGLIGENCE)]
        assert pi == clin

    def test_every_criminal_category_shares_options(self):
        ids = [s.option.id for s in nuclear_options_for(CaseCategory.VIOLENCE)]
        assert "abuse-of-process-stay" in ids
        assert ids == [s.option.id for s in nuclear_options_for(CaseCategory.DRUGS)]
