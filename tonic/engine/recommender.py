"""
Recommendation Engine

Maps a user profile onto a supplement plan:

1. Score catalog supplements by summed goal weight
2. Rank by score, then catalog order
3. Drop anything that interacts with the user's medications, allergies or
   conditions (hard exclusion, never overridden)
4. Pick up to 7 with at most 2 per category, add diet-driven essentials and
   backfill so the plan holds 3-10 items
5. Adjust dosage for sex, age and weight, then clamp to catalog limits
6. Assign tiers and resolve timing
7. Write a deterministic reasoning narrative
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Set

from .catalog import EvidenceLevel, Supplement, SupplementCatalog, get_catalog
from .knowledge import medication_classes
from .plan import PlanSupplement, SupplementPlan, SupplementTier, SupplementTiming
from .profile import HealthGoal, Sex, UserProfile, goal_label

logger = logging.getLogger(__name__)


# =============================================================================
# PLAN CONSTANTS
# =============================================================================

# Used when a profile has no goals selected
GENERAL_WELLNESS_GOALS = (
    HealthGoal.ENERGY.value,
    HealthGoal.IMMUNE_SUPPORT.value,
    HealthGoal.LONGEVITY.value,
)

MAX_GOAL_PICKS = 7
MAX_PER_CATEGORY = 2
MIN_PLAN_SIZE = 3
MAX_PLAN_SIZE = 10

# Plant-based diets get these if they are not already in the plan
PLANT_BASED_ESSENTIALS = ("Vitamin B Complex", "Vitamin D3 + K2")

# Backfill draws from these evidence levels, in order
BACKFILL_EVIDENCE = (EvidenceLevel.STRONG, EvidenceLevel.MODERATE)

MIN_KEYWORD_LENGTH = 3

# Tier thresholds
CORE_MIN_GOALS = 2
CORE_MIN_WEIGHT = 4
TARGETED_MIN_WEIGHT = 2

# Dosage adjustments
IRON_DOSE_BY_SEX = {Sex.FEMALE: 27.0, Sex.MALE: 8.0}
OLDER_ADULT_AGE = 65
OLDER_ADULT_REDUCED = ("Rhodiola Rosea", "CoQ10")
OLDER_ADULT_MULTIPLIER = 0.75
HIGH_BODY_WEIGHT_LBS = 200
HIGH_BODY_WEIGHT_D3_IU = 4000.0

# Timing
CALMING_NOOTROPIC = "L-Theanine"
CAFFEINE_PAIRING_SERVINGS = 2
TIMING_SLOTS = sorted(SupplementTiming, key=lambda t: t.sort_order)


@dataclass
class ScoredSupplement:
    """A catalog supplement with its goal-match data for one profile."""
    supplement: Supplement
    score: int = 0
    matched_goals: List[str] = field(default_factory=list)


class RecommendationEngine:
    """Builds supplement plans from a catalog snapshot."""

    def __init__(self, catalog: Optional[SupplementCatalog] = None):
        self.catalog = catalog if catalog is not None else get_catalog()

    def generate_plan(self, profile: UserProfile) -> SupplementPlan:
        """
        Generate a supplement plan for a profile.

        The same profile and catalog content always produce the same plan
        (apart from generated ids and timestamps).

        Args:
            profile: The user's profile

        Returns:
            SupplementPlan; empty with an explanatory narrative when the
            catalog has nothing to offer
        """
        if self.catalog.is_empty:
            logger.warning("Supplement catalog is empty; returning an empty plan")
            return SupplementPlan(
                supplements=[],
                ai_reasoning=(
                    "We couldn't build your plan right now because the supplement "
                    "catalog is unavailable. Please try again shortly."
                ),
            )

        # Step 1: Score and rank by goal overlap
        goals = profile.goal_keys or list(GENERAL_WELLNESS_GOALS)
        ranked = self.score_supplements(goals)

        # Step 2: Safety exclusions
        exclusion_reasons = self._exclusion_reasons(profile.medications, profile.allergies, profile)
        excluded = set(exclusion_reasons)

        # Step 3: Pick with category diversity
        picks: List[ScoredSupplement] = []
        category_counts: Dict[str, int] = {}
        for candidate in ranked:
            if len(picks) >= MAX_GOAL_PICKS:
                break
            if candidate.score <= 0 or candidate.supplement.name in excluded:
                continue
            category = candidate.supplement.category
            if category_counts.get(category, 0) >= MAX_PER_CATEGORY:
                continue
            picks.append(candidate)
            category_counts[category] = category_counts.get(category, 0) + 1

        # Step 4: Diet-driven essentials
        diet_additions = []
        if profile.is_plant_based:
            by_name = {c.supplement.name: c for c in ranked}
            for name in PLANT_BASED_ESSENTIALS:
                if name in excluded or any(p.supplement.name == name for p in picks):
                    continue
                candidate = by_name.get(name)
                if candidate is None:
                    continue
                picks.append(candidate)
                diet_additions.append(name)

        # Step 5: Backfill small plans, then cap
        backfilled = self._backfill(picks, excluded)
        picks = (picks + backfilled)[:MAX_PLAN_SIZE]

        # Step 6: Plan lines with dosage, tier and timing
        rank = {c.supplement.name: i for i, c in enumerate(picks)}
        items = [self._plan_line(c, profile) for c in picks]
        self.assign_tiers(items)
        self.resolve_timing(items, profile)

        items.sort(key=lambda s: (s.tier.sort_order, s.timing.sort_order, rank[s.name]))
        for i, item in enumerate(items):
            item.sort_order = i

        # Step 7: Narrative
        reasoning = self.reasoning(
            profile=profile,
            goals=goals,
            items=items,
            diet_additions=diet_additions,
            exclusion_reasons={
                name: reason for name, reason in exclusion_reasons.items()
                if any(c.supplement.name == name and c.score > 0 for c in ranked)
            },
        )

        logger.info(
            f"Generated plan with {len(items)} supplements for goals {goals} "
            f"({len(excluded)} excluded, {len(backfilled)} backfilled)"
        )
        return SupplementPlan(supplements=items, ai_reasoning=reasoning)

    # =========================================================================
    # Scoring
    # =========================================================================

    def score_supplements(self, goals: List[str]) -> List[ScoredSupplement]:
        """Every catalog supplement scored against `goals`, best first."""
        scored = {s.name: ScoredSupplement(supplement=s) for s in self.catalog.supplements}
        for goal in goals:
            for entry in self.catalog.goal_mappings(goal):
                candidate = scored.get(entry.name)
                if candidate is None:
                    continue
                candidate.score += entry.weight
                if goal not in candidate.matched_goals:
                    candidate.matched_goals.append(goal)

        return sorted(
            scored.values(),
            key=lambda c: (-c.score, self.catalog.order_of(c.supplement.name))
        )

    def _backfill(self, picks: List[ScoredSupplement], excluded: Set[str]) -> List[ScoredSupplement]:
        """Well-evidenced supplements to bring a plan up to MIN_PLAN_SIZE."""
        needed = MIN_PLAN_SIZE - len(picks)
        if needed <= 0:
            return []

        taken = {p.supplement.name for p in picks}
        backfill = []
        for level in BACKFILL_EVIDENCE:
            for supplement in self.catalog.supplements:
                if len(backfill) >= needed:
                    return backfill
                if supplement.evidence_level != level:
                    continue
                if supplement.name in taken or supplement.name in excluded:
                    continue
                backfill.append(ScoredSupplement(supplement=supplement))
                taken.add(supplement.name)
        return backfill

    # =========================================================================
    # Safety exclusions
    # =========================================================================

    def extract_medication_keywords(self, profile: UserProfile) -> Set[str]:
        """Lowercase medication tokens plus the drug classes they belong to."""
        return self._medication_keywords(profile.medications)

    def _medication_keywords(self, medications: List[str]) -> Set[str]:
        keywords = set()
        for medication in medications:
            text = medication.lower().strip()
            if not text:
                continue

            tokens = [t for t in re.split(r"[^a-z0-9]+", text) if t]
            for token in tokens:
                # Dose fragments like "10mg" never name a drug
                if len(token) < MIN_KEYWORD_LENGTH or re.fullmatch(r"\d+(\.\d+)?[a-z]*", token):
                    continue
                keywords.add(token)
                keywords.update(medication_classes(token))

            if len(tokens) > 1:
                keywords.add("_".join(tokens))
        return keywords

    def find_excluded_supplements(
        self,
        medications: List[str],
        allergies: List[str],
        profile: Optional[UserProfile] = None
    ) -> Set[str]:
        """
        Names of catalog supplements that must never be recommended.

        Args:
            medications: Free-text medication entries
            allergies: Free-text allergy entries
            profile: Optional profile for pregnancy/breastfeeding contraindications

        Returns:
            Set of supplement names
        """
        return set(self._exclusion_reasons(medications, allergies, profile))

    def _exclusion_reasons(
        self,
        medications: List[str],
        allergies: List[str],
        profile: Optional[UserProfile] = None
    ) -> Dict[str, str]:
        med_keywords = self._medication_keywords(medications)
        allergy_keywords = {
            a.lower().strip().replace(" ", "_") for a in allergies
            if len(a.strip()) >= MIN_KEYWORD_LENGTH
        }
        conditions = set(profile.conditions) if profile else set()

        reasons: Dict[str, str] = {}
        for supplement in self.catalog.supplements:
            name = supplement.name

            interaction_terms = [i.drug_or_class.lower() for i in self.catalog.interactions(name)]
            if any(_contains_either(k, term) for k in med_keywords for term in interaction_terms):
                reasons[name] = "medications"
                continue

            if any(_contains_either(a, c.lower()) for a in allergy_keywords for c in supplement.contraindications):
                reasons[name] = "allergies"
                continue

            for record in self.catalog.contraindications(name):
                if not record.is_excluding:
                    continue
                condition = record.condition.lower()
                if condition in conditions:
                    reasons[name] = condition
                    break
                if any(_contains_either(a, condition) for a in allergy_keywords):
                    reasons[name] = "allergies"
                    break

        if reasons:
            logger.debug(f"Excluded supplements: {reasons}")
        return reasons

    # =========================================================================
    # Plan lines
    # =========================================================================

    def build_plan_supplement(
        self,
        supplement: Supplement,
        profile: UserProfile,
        existing_supplements: List[PlanSupplement]
    ) -> PlanSupplement:
        """
        Build a plan line for a manually added supplement.

        Uses the same dosage, timing and tier rules as generate_plan. If the
        plan already has a line with this name, that line is returned
        re-included instead of creating a duplicate.
        """
        existing = next((s for s in existing_supplements if s.name == supplement.name), None)
        if existing is not None:
            return replace(existing, is_included=True)

        goals = profile.goal_keys or list(GENERAL_WELLNESS_GOALS)
        candidate = ScoredSupplement(supplement=supplement)
        for goal in goals:
            weight = self.catalog.goal_weight(goal, supplement.name)
            if weight > 0:
                candidate.score += weight
                candidate.matched_goals.append(goal)

        item = self._plan_line(candidate, profile)
        item.sort_order = len(existing_supplements)

        included = [s for s in existing_supplements if s.is_included]
        combined = [replace(s) for s in included] + [item]
        self.assign_tiers(combined)
        item.tier = combined[-1].tier
        self.resolve_timing(combined, profile)
        item.timing = combined[-1].timing
        return item

    def _plan_line(self, candidate: ScoredSupplement, profile: UserProfile) -> PlanSupplement:
        supplement = candidate.supplement
        dosage = self.adjust_dosage(supplement, profile)
        return PlanSupplement(
            supplement_id=supplement.id,
            name=supplement.name,
            dosage=self.format_dosage(supplement, dosage),
            dosage_mg=dosage,
            timing=supplement.recommended_timing,
            category=supplement.category,
            matched_goals=sorted(candidate.matched_goals),
            goal_overlap_score=candidate.score,
            reasoning=self._line_reasoning(candidate),
            research_note=supplement.notes or None,
        )

    def _line_reasoning(self, candidate: ScoredSupplement) -> str:
        supplement = candidate.supplement
        if candidate.matched_goals:
            labels = [goal_label(g).lower() for g in candidate.matched_goals]
            text = f"Supports {_join(labels)}."
        else:
            text = f"A well-studied foundation supplement ({supplement.evidence_level.label.lower()})."
        if supplement.dosage_rationale:
            text = f"{text} {supplement.dosage_rationale}"
        return text

    # =========================================================================
    # Dosage
    # =========================================================================

    def adjust_dosage(self, supplement: Supplement, profile: UserProfile) -> Optional[float]:
        """
        Dose in the catalog's unit after population adjustments.

        Returns None for supplements dosed by serving (no numeric dose).
        """
        dosage = supplement.recommended_dosage_mg
        if not dosage or dosage <= 0:
            return None

        name = supplement.name
        if name == "Iron" and profile.sex in IRON_DOSE_BY_SEX:
            dosage = IRON_DOSE_BY_SEX[Sex(profile.sex)]

        if profile.age > OLDER_ADULT_AGE and name in OLDER_ADULT_REDUCED:
            dosage *= OLDER_ADULT_MULTIPLIER

        if name == "Vitamin D3 + K2" and profile.weight_lbs and profile.weight_lbs > HIGH_BODY_WEIGHT_LBS:
            dosage = HIGH_BODY_WEIGHT_D3_IU

        if supplement.min_dosage_mg is not None:
            dosage = max(dosage, supplement.min_dosage_mg)
        if supplement.max_dosage_mg is not None:
            dosage = min(dosage, supplement.max_dosage_mg)
        return dosage

    def format_dosage(self, supplement: Supplement, dosage: Optional[float]) -> str:
        """Display text for a dose, e.g. '400mg', '2000 IU', '5g', '1x daily'."""
        if dosage is None or dosage <= 0:
            return supplement.common_dosage_range

        unit = supplement.dosage_unit
        if unit == "IU":
            return f"{int(round(dosage))} IU"
        if unit == "mcg":
            return f"{_number(dosage)}mcg"
        if unit != "mg":
            return supplement.common_dosage_range

        if dosage >= 1000:
            grams = dosage / 1000
            if grams == round(grams):
                return f"{int(grams)}g"
            return f"{grams:.1f}g"
        return f"{_number(dosage)}mg"

    # =========================================================================
    # Tiers & timing
    # =========================================================================

    def assign_tiers(self, items: List[PlanSupplement]) -> None:
        """
        core: 2+ goals with combined weight >= 4
        targeted: exactly one goal with weight >= 2
        supporting: everything else

        When nothing reaches core, the highest-weight matched items are
        promoted so every plan has a core.
        """
        for item in items:
            goal_count = len(item.matched_goals)
            if goal_count >= CORE_MIN_GOALS and item.goal_overlap_score >= CORE_MIN_WEIGHT:
                item.tier = SupplementTier.CORE
            elif goal_count == 1 and item.goal_overlap_score >= TARGETED_MIN_WEIGHT:
                item.tier = SupplementTier.TARGETED
            else:
                item.tier = SupplementTier.SUPPORTING

        if any(item.tier == SupplementTier.CORE for item in items):
            return

        top = max((item.goal_overlap_score for item in items if item.matched_goals), default=0)
        if top <= 0:
            return
        for item in items:
            if item.matched_goals and item.goal_overlap_score == top:
                item.tier = SupplementTier.CORE

    def resolve_timing(self, items: List[PlanSupplement], profile: UserProfile) -> None:
        """
        Set each item's timing in place.

        Order of precedence: catalog timing, stimulant/calming class,
        L-Theanine caffeine pairing, co-located synergies, then absorption
        conflicts (lower-ranked item moves to the next slot).
        """
        goals = set(profile.goal_keys)

        for item in items:
            supplement = self.catalog.supplement(item.name)
            if supplement is None:
                continue
            timing = supplement.recommended_timing
            if supplement.timing_class == "stimulating":
                timing = SupplementTiming.MORNING
            elif supplement.timing_class == "calming" and timing != SupplementTiming.BEDTIME:
                timing = SupplementTiming.EVENING
            item.timing = timing

        for item in items:
            if item.name != CALMING_NOOTROPIC:
                continue
            if profile.caffeine_servings > 0:
                item.timing = SupplementTiming.MORNING
            elif HealthGoal.SLEEP.value in goals and HealthGoal.FOCUS.value not in goals:
                item.timing = SupplementTiming.EVENING

        by_name = {item.name: item for item in items}
        for synergy in self.catalog.all_synergies:
            if not synergy.co_locate:
                continue
            anchor = by_name.get(synergy.supplement_a)
            partner = by_name.get(synergy.supplement_b)
            if anchor and partner:
                partner.timing = anchor.timing

        # Later items in `items` rank lower
        for conflict in self.catalog.absorption_conflicts:
            first = by_name.get(conflict.supplement_a)
            second = by_name.get(conflict.supplement_b)
            if not first or not second or first.timing != second.timing:
                continue
            lower = second if items.index(second) > items.index(first) else first
            lower.timing = _next_slot(lower.timing)
            logger.debug(f"Moved {lower.name} to {lower.timing.value}: {conflict.reason}")

    # =========================================================================
    # Reasoning
    # =========================================================================

    def reasoning(
        self,
        profile: UserProfile,
        goals: List[str],
        items: List[PlanSupplement],
        diet_additions: List[str],
        exclusion_reasons: Dict[str, str],
    ) -> str:
        """Deterministic narrative over a finished plan."""
        parts = []
        labels = [goal_label(g).lower() for g in goals]

        if profile.goal_keys:
            parts.append(f"Your plan is built around your goals: {_join(labels)}.")
        else:
            parts.append(
                f"You didn't pick specific goals, so your plan focuses on general wellness: {_join(labels)}."
            )

        core = [s.name for s in items if s.tier == SupplementTier.CORE]
        targeted = [s.name for s in items if s.tier == SupplementTier.TARGETED]
        if core:
            parts.append(f"{_join(core)} form the core of your plan, supporting several of your goals at once.")
        if targeted:
            parts.append(f"{_join(targeted)} target specific goals.")

        if diet_additions:
            parts.append(
                f"Because you follow a {profile.diet_type.value} diet, we added {_join(diet_additions)} "
                f"to cover nutrients that are harder to get from plants."
            )

        included = {s.name for s in items}
        if CALMING_NOOTROPIC in included and profile.caffeine_servings >= CAFFEINE_PAIRING_SERVINGS:
            parts.append(
                f"With {profile.caffeine_servings} caffeinated drinks a day, take {CALMING_NOOTROPIC} "
                f"with your morning coffee for calm, focused energy without the jitters."
            )

        med_excluded = sorted(n for n, r in exclusion_reasons.items() if r == "medications")
        if med_excluded:
            parts.append(f"We left out {_join(med_excluded)} because of possible interactions with your medications.")
        allergy_excluded = sorted(n for n, r in exclusion_reasons.items() if r == "allergies")
        if allergy_excluded:
            parts.append(f"We left out {_join(allergy_excluded)} because of your allergies.")
        condition_excluded = sorted(
            n for n, r in exclusion_reasons.items() if r not in ("medications", "allergies")
        )
        if condition_excluded:
            parts.append(f"We left out {_join(condition_excluded)} as it isn't recommended during pregnancy or breastfeeding.")

        current = {c.lower() for c in profile.current_supplements}
        already = [s.name for s in items if s.name.lower() in current]
        if already:
            parts.append(f"You already take {_join(already)}, so keep going with it.")

        return " ".join(parts)


def _contains_either(a: str, b: str) -> bool:
    return a in b or b in a


def _next_slot(timing: SupplementTiming) -> SupplementTiming:
    index = TIMING_SLOTS.index(timing)
    if index + 1 < len(TIMING_SLOTS):
        return TIMING_SLOTS[index + 1]
    return TIMING_SLOTS[index - 1]


def _number(value: float) -> str:
    return str(int(value)) if value == int(value) else f"{value:g}"


def _join(items: List[str]) -> str:
    if len(items) <= 1:
        return "".join(items)
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return ", ".join(items[:-1]) + f", and {items[-1]}"
