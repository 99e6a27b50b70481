STRATEGIST_INTRO = """You are an expert SaaS brand strategist with decades of experience in product marketing and launching successful brand marketing campaigns."""

VALUE_PROP_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "coreMessagingHierarchy": {"type": "ARRAY", "items": {"type": "STRING"}},
        "problemSolutionOutcomeNarrative": {
            "type": "OBJECT",
            "properties": {
                "problem": {"type": "STRING"},
                "solution": {"type": "STRING"},
                "outcome": {"type": "STRING"}
            }
        },
        "competitiveDifferentiationPoints": {"type": "ARRAY", "items": {"type": "STRING"}}
    },
    "propertyOrdering": ["coreMessagingHierarchy", "problemSolutionOutcomeNarrative", "competitiveDifferentiationPoints"]
}


def build_value_prop_prompt(brief: str) -> str:
    return f"""
    {STRATEGIST_INTRO}
    Your task is to generate a comprehensive Value Proposition Framework based on the following product brief.

    ### OUTPUT FORMAT:
    Respond with a single JSON object and nothing else, with the following structure:
    {{
      "coreMessagingHierarchy": [
        "Headline/Hook",
        "Sub-headline/Problem Statement",
        "Solution/Product Offering",
        "Benefits/Outcomes",
        "Call to Action"
      ],
      "problemSolutionOutcomeNarrative": {{
        "problem": "Describe the core problem your target audience faces.",
        "solution": "How your product uniquely solves this problem.",
        "outcome": "The tangible positive results your users will experience."
      }},
      "competitiveDifferentiationPoints": [
        "What sets the product apart from alternatives (3-5 points)"
      ]
    }}

    ### PRODUCT BRIEF:
    {brief}
    """
