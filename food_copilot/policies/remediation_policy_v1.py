"""
Default Remediation Policy v1.0 — COPILOT_REMEDIATION_V1

Remediation ideas offered when a risk warning is shown and the generator
supplied no alternatives. Categories are tried in declaration order.
"""

from food_copilot.contracts.risk_policy import RemediationPolicy, RemediationRule

COPILOT_REMEDIATION_V1 = RemediationPolicy(
    policy_id="COPILOT_REMEDIATION_V1",
    version="1.0",
    max_suggestions=3,

    rule_set=(
        # ── Carbohydrate load ──
        RemediationRule(
            rule_id="LOWER_CARB_SWAPS",
            category="carbohydrate",
            issue_pattern=r"carbohydrate|carb",
            suggestions=(
                ("Whole-grain or vegetable noodles", "Lower refined carbs and higher fiber"),
                ("Spiralized zucchini or shirataki noodles", "Very low-carb noodle alternatives"),
                ("Half-portion of noodles + extra veggies", "Reduce carbs while keeping volume"),
            ),
        ),
        # ── Sodium ──
        RemediationRule(
            rule_id="LOW_SODIUM_TECHNIQUES",
            category="sodium",
            issue_pattern=r"sodium|salt",
            suggestions=(
                ("Make a low-sodium sauce", "Reduces overall sodium while preserving flavor"),
                ("Use fresh herbs and citrus instead of salt", "Boosts flavor without sodium"),
            ),
        ),
        # ── Ultra-processing ──
        RemediationRule(
            rule_id="MINIMALLY_PROCESSED_SWAPS",
            category="ultra_processed",
            issue_pattern=r"ultra-processed|nova 4",
            suggestions=(
                ("Homemade stir-fry with fresh ingredients", "Minimizes ultra-processed components"),
                ("Use minimally processed proteins (tofu, chicken breast)", "Lower additives and preservatives"),
            ),
        ),
    ),

    fallback=(
        ("Grilled lean protein option", "Lower in saturated fat and calories"),
        ("Increase vegetables or side salad", "Adds fiber and micronutrients"),
        ("Swap sugary drinks for water or herbal tea", "Reduces added sugars and calories"),
    ),
)
