"""
Static knowledge used by the engines: medication drug classes, supplement fun
facts and the daily tip rotation.
"""

from typing import Dict, List


# =============================================================================
# MEDICATION CLASSES
# =============================================================================

# Brand or generic name -> drug-class keywords matched against supplement
# interaction terms. Names are lowercase single tokens.
MEDICATION_CLASSES: Dict[str, List[str]] = {
    # Blood thinners
    "warfarin": ["blood_thinner"],
    "coumadin": ["warfarin", "blood_thinner"],
    "eliquis": ["blood_thinner"],
    "apixaban": ["blood_thinner"],
    "xarelto": ["blood_thinner"],
    "rivaroxaban": ["blood_thinner"],
    "clopidogrel": ["blood_thinner"],
    "plavix": ["blood_thinner"],
    "aspirin": ["blood_thinner"],

    # Blood pressure
    "lisinopril": ["blood_pressure"],
    "amlodipine": ["blood_pressure"],
    "losartan": ["blood_pressure"],
    "metoprolol": ["blood_pressure"],
    "atenolol": ["blood_pressure"],
    "hydrochlorothiazide": ["blood_pressure"],
    "furosemide": ["blood_pressure"],
    "valsartan": ["blood_pressure"],
    "diltiazem": ["blood_pressure"],
    "carvedilol": ["blood_pressure"],

    # Statins
    "atorvastatin": ["statin"],
    "lipitor": ["statin"],
    "rosuvastatin": ["statin"],
    "crestor": ["statin"],
    "simvastatin": ["statin"],
    "zocor": ["statin"],
    "pravastatin": ["statin"],

    # Diabetes
    "metformin": ["diabetes"],
    "glipizide": ["diabetes"],
    "glyburide": ["diabetes"],
    "jardiance": ["diabetes"],
    "farxiga": ["diabetes"],
    "ozempic": ["diabetes"],
    "semaglutide": ["diabetes"],
    "trulicity": ["diabetes"],
    "mounjaro": ["diabetes"],
    "januvia": ["diabetes"],
    "insulin": ["diabetes"],
    "pioglitazone": ["diabetes"],

    # Antidepressants
    "sertraline": ["ssri"],
    "zoloft": ["ssri"],
    "escitalopram": ["ssri"],
    "lexapro": ["ssri"],
    "fluoxetine": ["ssri"],
    "prozac": ["ssri"],
    "citalopram": ["ssri"],
    "celexa": ["ssri"],
    "paroxetine": ["ssri"],
    "paxil": ["ssri"],
    "venlafaxine": ["ssri"],
    "duloxetine": ["ssri"],

    # Thyroid
    "levothyroxine": ["thyroid"],
    "synthroid": ["levothyroxine", "thyroid"],
    "liothyronine": ["thyroid"],

    # Immunosuppressants
    "prednisone": ["immunosuppressant"],
    "tacrolimus": ["immunosuppressant"],
    "cyclosporine": ["immunosuppressant"],
    "methotrexate": ["immunosuppressant"],
}


def medication_classes(keyword: str) -> List[str]:
    """Drug-class keywords for a lowercase medication token."""
    return MEDICATION_CLASSES.get(keyword, [])


# =============================================================================
# FUN FACTS
# =============================================================================

SUPPLEMENT_FUN_FACTS: Dict[str, List[str]] = {
    "Magnesium Glycinate": [
        "Magnesium is involved in 300+ enzymatic reactions in your body.",
        "Glycinate is the most bioavailable form and crosses the blood-brain barrier easily.",
        "About half of Americans don't get enough magnesium from diet alone.",
    ],
    "Vitamin D3 + K2": [
        "Your skin produces Vitamin D from sunlight, but most people still don't get enough.",
        "K2 directs calcium to your bones instead of your arteries. That's why D3 and K2 pair together.",
        "Vitamin D receptors exist in nearly every cell in your body.",
    ],
    "Omega-3 (EPA/DHA)": [
        "EPA and DHA are the two fatty acids your brain actually uses. ALA from plants converts poorly.",
        "Your brain is about 60% fat, and DHA is its most abundant structural fatty acid.",
        "Omega-3s are incorporated into cell membranes, improving fluidity and signaling.",
    ],
    "Ashwagandha KSM-66": [
        "Ashwagandha is an adaptogen: it helps your body resist physical and mental stress.",
        "KSM-66 is extracted from the root only, which has the highest concentration of withanolides.",
        "Clinical trials show cortisol reductions of about 25% with consistent use over 8 weeks.",
    ],
    "L-Theanine": [
        "L-Theanine promotes alpha brain waves, the same pattern seen during calm, focused attention.",
        "Found naturally in green tea, it's why tea feels calming despite the caffeine.",
        "It pairs well with caffeine: focus without the jitters.",
    ],
    "Vitamin B Complex": [
        "B vitamins are water-soluble. Your body can't store them, so daily intake matters.",
        "B12 deficiency is common in vegetarians and older adults due to lower absorption.",
        "B vitamins are cofactors in converting food into cellular energy (ATP).",
    ],
    "Probiotics": [
        "Your gut contains about 70% of your immune system's cells.",
        "The gut-brain axis means your microbiome directly influences mood and cognition.",
        "Different probiotic strains do different things, so diversity matters.",
    ],
    "Zinc": [
        "Zinc is essential for immune cell development and communication.",
        "It's a key cofactor for over 100 enzymes involved in metabolism.",
        "Zinc and copper compete for absorption, so long-term zinc use may need copper balance.",
    ],
    "CoQ10": [
        "CoQ10 lives in your mitochondria and is essential for energy production in every cell.",
        "Your natural CoQ10 levels decline with age, especially after 40.",
        "Statins deplete CoQ10. Supplementing can help offset muscle-related side effects.",
    ],
    "Creatine Monohydrate": [
        "Creatine isn't just for athletes. It also supports brain energy and cognitive function.",
        "It's the most studied sports supplement in history, with a strong safety profile.",
        "Your body makes about 1g/day, but 3-5g supplementation saturates muscle stores.",
    ],
    "Lion's Mane": [
        "Lion's Mane stimulates Nerve Growth Factor (NGF), which supports neuron health.",
        "It's one of the few supplements studied for potential neurogenesis in adults.",
        "Traditional use in Chinese medicine dates back centuries for cognitive support.",
    ],
    "NAC": [
        "NAC is a precursor to glutathione, your body's most powerful endogenous antioxidant.",
        "It's used in hospitals to treat acetaminophen overdose due to its liver-protective effects.",
        "NAC also thins mucus, which is why it supports respiratory health.",
    ],
    "Collagen Peptides": [
        "Your body's collagen production drops about 1% per year starting in your mid-20s.",
        "Hydrolyzed collagen peptides are broken down for better absorption than whole collagen.",
        "Types I and III support skin elasticity; Type II supports joint cartilage.",
    ],
    "Rhodiola Rosea": [
        "Rhodiola is an adaptogen used for centuries in Scandinavian and Russian traditional medicine.",
        "It works partly by modulating cortisol and supporting serotonin/dopamine balance.",
        "Look for extracts standardized to 3% rosavins and 1% salidroside for best results.",
    ],
    "Berberine": [
        "Berberine activates AMPK, sometimes called the body's 'metabolic master switch.'",
        "Studies show blood sugar regulation comparable to some prescription medications.",
        "It also has antimicrobial properties that support a healthy gut microbiome.",
    ],
    "Tart Cherry Extract": [
        "Tart cherries are one of the few natural food sources of melatonin.",
        "Their anthocyanins have anti-inflammatory effects comparable to some NSAIDs.",
        "Studies show improved sleep duration and quality in adults taking tart cherry.",
    ],
}


# =============================================================================
# DAILY TIPS
# =============================================================================

DAILY_TIPS: List[str] = [
    "Fat-soluble vitamins (D3, K2, CoQ10) absorb up to 3x better when taken with a meal containing healthy fats.",
    "Magnesium glycinate is one of the most bioavailable forms and causes less GI distress than oxide or citrate.",
    "Taking probiotics on an empty stomach helps more live cultures survive the journey through stomach acid.",
    "Omega-3 fish oil in triglyceride form is 70% better absorbed than the cheaper ethyl ester form.",
    "L-Theanine crosses the blood-brain barrier within 30 minutes, promoting alpha brain waves for calm focus.",
    "Ashwagandha KSM-66 is standardized to 5% withanolides, the active compounds that reduce cortisol.",
    "Splitting your Vitamin C dose into two servings improves utilization since it's water-soluble.",
    "Creatine doesn't require a loading phase at 5g/day. Full muscle saturation occurs within 3-4 weeks.",
    "Biotin can interfere with certain lab tests. Let your doctor know you're taking it before blood work.",
    "Iron bisglycinate is 4x better absorbed than ferrous sulfate with significantly fewer side effects.",
    "Taking iron with Vitamin C can enhance absorption by up to 67%.",
    "Zinc and iron compete for absorption. Space them at least 2 hours apart for best results.",
    "Collagen synthesis requires Vitamin C as a cofactor, so pairing them maximizes skin benefits.",
    "NAC is best absorbed on an empty stomach, where it directly feeds glutathione production.",
    "Rhodiola Rosea works best when taken in the morning on an empty stomach.",
    "Tart cherry extract contains natural melatonin precursors plus anti-inflammatory anthocyanins.",
    "Methylated B vitamins (methylfolate, methylcobalamin) are important for those with MTHFR variations.",
    "CoQ10 in ubiquinol form is 2-3x better absorbed than ubiquinone and is already in its active form.",
    "Dual-extracted (water + alcohol) Lion's Mane provides the full spectrum of hericenones and erinacines.",
    "Consistency matters more than timing for most supplements. The same time daily builds the habit.",
    "Melatonin works best at low doses (0.5-1mg). Higher doses often cause grogginess without better sleep.",
    "Berberine's naturally low bioavailability improves significantly when taken with a meal.",
    "Delayed-release probiotic capsules deliver 10x more viable bacteria to the intestines than standard ones.",
    "Vitamin D3 (cholecalciferol) is 87% more effective than D2 at raising serum levels.",
    "K2 in the MK-7 form has the longest half-life, directing calcium to bones instead of arteries.",
    "Hydrolyzed collagen peptides have over 90% absorption and dissolve in both hot and cold liquids.",
    "Morning supplements like B vitamins can be energizing. Avoid taking them close to bedtime.",
    "Store probiotics according to label instructions. Some require refrigeration to maintain potency.",
    "Sublingual melatonin absorbs through the oral mucosa, working in 15-20 minutes vs 45 for swallowed tablets.",
    "Your supplement plan is personalized. Taking it consistently helps measure what's actually working.",
    "Adaptogens like Ashwagandha and Rhodiola work by modulating your stress response, not masking it.",
    "Water-soluble vitamins (B, C) are safely excreted if you take more than needed.",
]
