"""Tests for the recommendation engine."""

import json

import pytest

from tonic.engine.catalog import (
    AbsorptionConflict,
    EvidenceLevel,
    GoalSupplementEntry,
    Supplement,
    SupplementCatalog,
    load_catalog,
)
from tonic.engine.plan import PlanSupplement, SupplementTier, SupplementTiming
from tonic.engine.profile import DietType, HealthGoal, Sex, UserProfile
from tonic.engine.recommender import MAX_PLAN_SIZE, MIN_PLAN_SIZE, RecommendationEngine


def _names(plan):
    return [s.name for s in plan.supplements]


def _line(plan, name):
    return next(s for s in plan.supplements if s.name == name)


def _supplement(name, timing=SupplementTiming.MORNING, evidence=EvidenceLevel.STRONG, category="misc"):
    return Supplement(
        name=name,
        category=category,
        common_dosage_range="100mg",
        recommended_dosage_mg=100,
        recommended_timing=timing,
        evidence_level=evidence,
    )


class TestPlanSelection:
    """Tests for scoring, picking and plan size."""

    def test_sleep_goal_plan(self, engine, make_profile):
        """Test a sleep-only profile gets the sleep stack in tier order."""
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.SLEEP]))

        assert _names(plan) == [
            "Magnesium Glycinate",
            "L-Theanine",
            "Melatonin",
            "Tart Cherry Extract",
        ]
        assert [s.tier for s in plan.supplements] == [
            SupplementTier.CORE,
            SupplementTier.TARGETED,
            SupplementTier.TARGETED,
            SupplementTier.SUPPORTING,
        ]
        assert [s.sort_order for s in plan.supplements] == [0, 1, 2, 3]

    def test_stress_goal_includes_ashwagandha(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.STRESS_ANXIETY]))

        assert set(_names(plan)) == {
            "Magnesium Glycinate",
            "Ashwagandha KSM-66",
            "L-Theanine",
            "Rhodiola Rosea",
        }
        # Tied at the top weight, so all are promoted to core
        assert all(s.tier == SupplementTier.CORE for s in plan.supplements)

    def test_no_goals_uses_general_wellness(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[]))

        assert "Vitamin D3 + K2" in _names(plan)
        assert len(plan.supplements) == 7
        assert plan.ai_reasoning.startswith("You didn't pick specific goals")

    def test_category_cap(self, engine, make_profile):
        """Test no more than two supplements per category come from goal picks."""
        plan = engine.generate_plan(make_profile(health_goals=[]))
        vitamins = [s for s in plan.supplements if s.category == "vitamin"]

        assert len(vitamins) == 2
        assert "Vitamin C" not in _names(plan)

    @pytest.mark.parametrize("goal", list(HealthGoal))
    def test_plan_size_bounds(self, engine, make_profile, goal):
        plan = engine.generate_plan(make_profile(health_goals=[goal]))
        assert MIN_PLAN_SIZE <= len(plan.supplements) <= MAX_PLAN_SIZE

    @pytest.mark.parametrize("goals", [
        list(HealthGoal)[:5],
        list(HealthGoal)[5:],
        [HealthGoal.SLEEP, HealthGoal.FOCUS],
        [HealthGoal.GUT_HEALTH, HealthGoal.SKIN_HAIR_NAILS, HealthGoal.IMMUNE_SUPPORT],
    ])
    def test_multi_goal_size_bounds(self, engine, make_profile, goals):
        plan = engine.generate_plan(make_profile(health_goals=goals, medications=["warfarin", "metformin"]))
        assert MIN_PLAN_SIZE <= len(plan.supplements) <= MAX_PLAN_SIZE

    def test_all_goals_plant_based_stays_bounded(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(
            health_goals=list(HealthGoal),
            diet_type=DietType.VEGAN,
        ))
        assert MIN_PLAN_SIZE <= len(plan.supplements) <= MAX_PLAN_SIZE
        assert len(set(_names(plan))) == len(plan.supplements)

    def test_deterministic(self, engine, make_profile):
        """Test identical input produces identical plans."""
        profile = make_profile(
            health_goals=[HealthGoal.FOCUS, HealthGoal.ENERGY, HealthGoal.HEART_HEALTH],
            sex=Sex.FEMALE,
            coffee_cups_daily=3,
        )
        first = engine.generate_plan(profile)
        second = engine.generate_plan(profile)

        assert _names(first) == _names(second)
        assert first.ai_reasoning == second.ai_reasoning
        assert [(s.dosage, s.timing, s.tier) for s in first.supplements] == \
            [(s.dosage, s.timing, s.tier) for s in second.supplements]

    def test_backfill_small_plan(self):
        """Test plans below the minimum are topped up by evidence level."""
        catalog = SupplementCatalog(
            supplements=[
                _supplement("Alpha"),
                _supplement("Beta", evidence=EvidenceLevel.MODERATE),
                _supplement("Gamma", evidence=EvidenceLevel.EMERGING),
                _supplement("Delta"),
            ],
            goal_map={"sleep": [GoalSupplementEntry(name="Alpha", weight=3)]},
        )
        engine = RecommendationEngine(catalog)
        plan = engine.generate_plan(UserProfile(name="Test", health_goals=[HealthGoal.SLEEP]))

        assert _names(plan) == ["Alpha", "Delta", "Beta"]
        assert _line(plan, "Delta").tier == SupplementTier.SUPPORTING

    def test_empty_catalog(self, make_profile):
        plan = RecommendationEngine(SupplementCatalog()).generate_plan(make_profile())

        assert plan.supplements == []
        assert "catalog" in plan.ai_reasoning

    def test_malformed_catalog_gives_empty_plan(self, tmp_path, make_profile):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"name": "Alpha"}]))

        plan = RecommendationEngine(load_catalog(str(path))).generate_plan(make_profile())

        assert plan.supplements == []

    def test_bad_dosage_bounds_are_skipped(self, make_profile):
        good = {
            "name": "Alpha",
            "category": "misc",
            "recommended_dosage_mg": 100,
            "min_dosage_mg": 50,
            "max_dosage_mg": 200,
            "recommended_timing": "morning",
            "evidence_level": "strong",
        }
        catalog = SupplementCatalog.from_dict({
            "supplements": [good, {**good, "name": "Beta", "min_dosage_mg": "lots"}],
            "goal_supplements": {"sleep": [{"name": "Alpha", "weight": 3}, {"name": "Beta", "weight": 3}]},
        })

        plan = RecommendationEngine(catalog).generate_plan(make_profile())

        assert _names(plan) == ["Alpha"]
        assert _line(plan, "Alpha").dosage == "100mg"


class TestSafetyExclusions:
    """Tests for medication, allergy and condition exclusions."""

    def test_warfarin_excludes_omega_3(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(
            health_goals=[HealthGoal.HEART_HEALTH],
            medications=["Warfarin 5mg"],
        ))

        assert "Omega-3 (EPA/DHA)" not in _names(plan)
        assert "CoQ10" not in _names(plan)
        assert set(_names(plan)) == {"Magnesium Glycinate", "Vitamin D3 + K2", "Berberine"}
        assert (
            "We left out CoQ10 and Omega-3 (EPA/DHA) because of possible interactions "
            "with your medications."
        ) in plan.ai_reasoning

    def test_levothyroxine_excludes_iron(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(
            health_goals=[HealthGoal.ENERGY],
            medications=["levothyroxine"],
        ))
        assert "Iron" not in _names(plan)

    def test_brand_name_maps_to_drug_class(self, engine, make_profile):
        """Test Synthroid is treated like levothyroxine."""
        excluded = engine.find_excluded_supplements(["Synthroid"], [])
        assert "Iron" in excluded
        assert "Zinc" in excluded

    def test_medication_keywords(self, engine, make_profile):
        keywords = engine.extract_medication_keywords(make_profile(medications=["Warfarin 5mg", "", "ab"]))

        assert "warfarin" in keywords
        assert "blood_thinner" in keywords
        assert "5mg" not in keywords
        assert "ab" not in keywords

    def test_fish_allergy_excludes_omega_3(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(
            health_goals=[HealthGoal.FOCUS],
            allergies=["fish"],
        ))

        assert "Omega-3 (EPA/DHA)" not in _names(plan)
        assert "because of your allergies" in plan.ai_reasoning

    def test_short_allergy_ignored(self, engine):
        assert engine.find_excluded_supplements([], ["ab"]) == set()

    def test_pregnancy_excludes_ashwagandha(self, engine, make_profile):
        profile = make_profile(health_goals=[HealthGoal.STRESS_ANXIETY], is_pregnant=True)
        plan = engine.generate_plan(profile)

        assert "Ashwagandha KSM-66" not in _names(plan)
        # Caution-level contraindications are not exclusions
        assert "Rhodiola Rosea" in _names(plan)
        assert "isn't recommended during pregnancy or breastfeeding" in plan.ai_reasoning

    def test_breastfeeding_excludes_berberine(self, engine, make_profile):
        profile = make_profile(is_breastfeeding=True)
        excluded = engine.find_excluded_supplements([], [], profile)

        assert "Berberine" in excluded
        assert "Ashwagandha KSM-66" in excluded
        assert "Melatonin" not in excluded

    def test_no_inputs_excludes_nothing(self, engine):
        assert engine.find_excluded_supplements([], []) == set()


class TestDiet:
    """Tests for diet-driven essentials."""

    def test_vegan_gets_b_complex_and_d3(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(
            health_goals=[HealthGoal.FOCUS],
            diet_type=DietType.VEGAN,
        ))

        assert "Vitamin B Complex" in _names(plan)
        assert "Vitamin D3 + K2" in _names(plan)
        assert "Because you follow a vegan diet, we added Vitamin D3 + K2" in plan.ai_reasoning

    def test_vegan_sleep_gets_essentials(self, engine, make_profile):
        """Test essentials are added even when no goal maps to them."""
        plan = engine.generate_plan(make_profile(
            health_goals=[HealthGoal.SLEEP],
            diet_type=DietType.VEGAN,
        ))

        assert "Magnesium Glycinate" in _names(plan)
        assert "Vitamin B Complex" in _names(plan)
        assert "Vitamin D3 + K2" in _names(plan)

    def test_omnivore_gets_no_diet_additions(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.SLEEP]))
        assert "Vitamin D3 + K2" not in _names(plan)
        assert "diet" not in plan.ai_reasoning


class TestDosage:
    """Tests for dosage adjustment and formatting."""

    def test_iron_by_sex(self, engine, make_profile):
        female = engine.generate_plan(make_profile(health_goals=[HealthGoal.ENERGY], sex=Sex.FEMALE))
        male = engine.generate_plan(make_profile(health_goals=[HealthGoal.ENERGY], sex=Sex.MALE))
        unspecified = engine.generate_plan(make_profile(health_goals=[HealthGoal.ENERGY]))

        assert _line(female, "Iron").dosage == "27mg"
        assert _line(male, "Iron").dosage == "8mg"
        assert _line(unspecified, "Iron").dosage == "18mg"

    def test_older_adult_reduction(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.ENERGY], age=70))

        assert _line(plan, "Rhodiola Rosea").dosage == "300mg"
        assert _line(plan, "CoQ10").dosage == "150mg"

    def test_age_65_not_reduced(self, engine, catalog, make_profile):
        dose = engine.adjust_dosage(catalog.supplement("Rhodiola Rosea"), make_profile(age=65))
        assert dose == 400

    def test_high_body_weight_vitamin_d(self, engine, make_profile):
        heavy = engine.generate_plan(make_profile(health_goals=[HealthGoal.IMMUNE_SUPPORT], weight_lbs=220))
        light = engine.generate_plan(make_profile(health_goals=[HealthGoal.IMMUNE_SUPPORT], weight_lbs=150))

        assert _line(heavy, "Vitamin D3 + K2").dosage == "4000 IU"
        assert _line(light, "Vitamin D3 + K2").dosage == "2000 IU"

    def test_serving_dosed_supplement(self, engine, catalog, make_profile):
        b_complex = catalog.supplement("Vitamin B Complex")
        assert engine.adjust_dosage(b_complex, make_profile()) is None
        assert engine.format_dosage(b_complex, None) == b_complex.common_dosage_range

    @pytest.mark.parametrize("name,dose,expected", [
        ("Creatine Monohydrate", 5000.0, "5g"),
        ("Omega-3 (EPA/DHA)", 1500.0, "1.5g"),
        ("Magnesium Glycinate", 400.0, "400mg"),
        ("Melatonin", 0.5, "0.5mg"),
        ("Vitamin D3 + K2", 2000.0, "2000 IU"),
        ("Biotin", 5000.0, "5000mcg"),
    ])
    def test_format_dosage(self, engine, catalog, name, dose, expected):
        assert engine.format_dosage(catalog.supplement(name), dose) == expected


class TestTiers:
    """Tests for tier assignment."""

    def test_tier_thresholds(self, engine):
        items = [
            PlanSupplement(name="A", dosage="", timing=SupplementTiming.MORNING,
                           matched_goals=["sleep", "focus"], goal_overlap_score=4),
            PlanSupplement(name="B", dosage="", timing=SupplementTiming.MORNING,
                           matched_goals=["sleep"], goal_overlap_score=2),
            PlanSupplement(name="C", dosage="", timing=SupplementTiming.MORNING,
                           matched_goals=["sleep"], goal_overlap_score=1),
            PlanSupplement(name="D", dosage="", timing=SupplementTiming.MORNING),
        ]
        engine.assign_tiers(items)

        assert [i.tier for i in items] == [
            SupplementTier.CORE,
            SupplementTier.TARGETED,
            SupplementTier.SUPPORTING,
            SupplementTier.SUPPORTING,
        ]

    def test_promotes_top_weight_when_no_core(self, engine):
        items = [
            PlanSupplement(name="A", dosage="", timing=SupplementTiming.MORNING,
                           matched_goals=["sleep"], goal_overlap_score=3),
            PlanSupplement(name="B", dosage="", timing=SupplementTiming.MORNING,
                           matched_goals=["focus"], goal_overlap_score=3),
            PlanSupplement(name="C", dosage="", timing=SupplementTiming.MORNING,
                           matched_goals=["sleep"], goal_overlap_score=1),
        ]
        engine.assign_tiers(items)

        assert [i.tier for i in items] == [
            SupplementTier.CORE,
            SupplementTier.CORE,
            SupplementTier.SUPPORTING,
        ]


class TestTiming:
    """Tests for timing resolution."""

    def test_timing_classes(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.SLEEP]))

        assert _line(plan, "Magnesium Glycinate").timing == SupplementTiming.EVENING
        assert _line(plan, "Melatonin").timing == SupplementTiming.BEDTIME
        assert _line(plan, "Tart Cherry Extract").timing == SupplementTiming.EVENING

    def test_stimulating_is_morning(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.ENERGY]))

        assert _line(plan, "Rhodiola Rosea").timing == SupplementTiming.MORNING
        assert _line(plan, "Vitamin B Complex").timing == SupplementTiming.MORNING

    def test_l_theanine_with_caffeine(self, engine, make_profile):
        profile = make_profile(health_goals=[HealthGoal.SLEEP], coffee_cups_daily=2)
        plan = engine.generate_plan(profile)

        assert _line(plan, "L-Theanine").timing == SupplementTiming.MORNING
        assert "With 2 caffeinated drinks a day, take L-Theanine with your morning coffee" in plan.ai_reasoning

    def test_l_theanine_for_sleep_without_caffeine(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.SLEEP]))
        assert _line(plan, "L-Theanine").timing == SupplementTiming.EVENING

    def test_l_theanine_for_sleep_and_focus(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.SLEEP, HealthGoal.FOCUS]))
        assert _line(plan, "L-Theanine").timing == SupplementTiming.MORNING

    def test_synergy_co_location(self, engine, make_profile):
        """Test Vitamin C follows Iron's timing."""
        items = [
            PlanSupplement(name="Iron", dosage="18mg", timing=SupplementTiming.EMPTY_STOMACH),
            PlanSupplement(name="Vitamin C", dosage="1g", timing=SupplementTiming.MORNING),
        ]
        engine.resolve_timing(items, make_profile())

        assert items[0].timing == SupplementTiming.EMPTY_STOMACH
        assert items[1].timing == SupplementTiming.EMPTY_STOMACH

    def test_absorption_conflict_moves_lower_ranked(self, make_profile):
        catalog = SupplementCatalog(
            supplements=[_supplement("Alpha"), _supplement("Beta")],
            absorption_conflicts=[AbsorptionConflict(supplement_a="Alpha", supplement_b="Beta")],
        )
        items = [
            PlanSupplement(name="Alpha", dosage="", timing=SupplementTiming.MORNING),
            PlanSupplement(name="Beta", dosage="", timing=SupplementTiming.MORNING),
        ]
        RecommendationEngine(catalog).resolve_timing(items, make_profile())

        assert items[0].timing == SupplementTiming.MORNING
        assert items[1].timing == SupplementTiming.WITH_FOOD

    def test_bedtime_conflict_moves_to_evening(self, make_profile):
        catalog = SupplementCatalog(
            supplements=[
                _supplement("Alpha", timing=SupplementTiming.BEDTIME),
                _supplement("Beta", timing=SupplementTiming.BEDTIME),
            ],
            absorption_conflicts=[AbsorptionConflict(supplement_a="Alpha", supplement_b="Beta")],
        )
        items = [
            PlanSupplement(name="Alpha", dosage="", timing=SupplementTiming.BEDTIME),
            PlanSupplement(name="Beta", dosage="", timing=SupplementTiming.BEDTIME),
        ]
        RecommendationEngine(catalog).resolve_timing(items, make_profile())

        assert items[1].timing == SupplementTiming.EVENING


class TestManualAdd:
    """Tests for building plan lines for manual additions."""

    def test_new_supplement(self, engine, catalog, make_profile):
        profile = make_profile(health_goals=[HealthGoal.SLEEP])
        plan = engine.generate_plan(profile)
        item = engine.build_plan_supplement(catalog.supplement("Vitamin C"), profile, plan.supplements)

        assert item.name == "Vitamin C"
        assert item.dosage == "1g"
        assert item.tier == SupplementTier.SUPPORTING
        assert item.matched_goals == []
        assert item.sort_order == len(plan.supplements)

    def test_existing_supplement_is_reincluded(self, engine, catalog, make_profile):
        profile = make_profile(health_goals=[HealthGoal.SLEEP])
        plan = engine.generate_plan(profile)
        existing = _line(plan, "Magnesium Glycinate")
        plan.remove_supplement(existing.id)

        item = engine.build_plan_supplement(catalog.supplement("Magnesium Glycinate"), profile, plan.supplements)

        assert item.id == existing.id
        assert item.is_included is True
        assert sum(1 for s in plan.supplements if s.name == "Magnesium Glycinate") == 1


class TestReasoning:
    """Tests for the plan narrative."""

    def test_goals_sentence(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(health_goals=[HealthGoal.SLEEP]))

        assert plan.ai_reasoning.startswith("Your plan is built around your goals: better sleep.")
        assert "Magnesium Glycinate form the core of your plan" in plan.ai_reasoning

    def test_current_supplements_mentioned(self, engine, make_profile):
        plan = engine.generate_plan(make_profile(
            health_goals=[HealthGoal.SLEEP],
            current_supplements=["magnesium glycinate"],
        ))
        assert "You already take Magnesium Glycinate" in plan.ai_reasoning
