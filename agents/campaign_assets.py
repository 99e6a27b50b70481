import re
import json
from typing import List, Optional

from agents.value_prop import STRATEGIST_INTRO
from core.state import ValuePropFramework

ASSET_OPTIONS = [
    "Value Proposition Framework",
    "Website Copy Suite",
    "Video Scripts",
    "Social Media Copy Templates",
]

# Example output shapes shown to the model for the known asset kinds
ASSET_EXAMPLES = {
    "Value Proposition Framework": """
      "valuePropositionFramework": {
        "coreMessagingHierarchy": ["..."],
        "problemSolutionOutcomeNarrative": {"problem": "...", "solution": "...", "outcome": "..."},
        "competitiveDifferentiationPoints": ["..."]
      }""",
    "Website Copy Suite": """
      "websiteCopySuite": {
        "heroSection": {"headline": "...", "subHeadline": "...", "callToAction": "..."},
        "featureToBenefitDescriptions": [{"feature": "...", "benefit": "...", "description": "..."}],
        "socialProofTemplates": ["Template 1: ...", "Template 2: ..."]
      }""",
    "Video Scripts": """
      "videoScripts": {
        "productDemo": {"script": "...", "duration": "..."},
        "explainer": {"script": "...", "duration": "..."}
      }""",
    "Social Media Copy Templates": """
      "socialMediaCopyTemplates": {
        "linkedin": ["..."],
        "twitter": ["..."],
        "instagram": ["..."]
      }""",
}


def asset_key(kind: str) -> str:
    """'Website Copy Suite' -> 'websiteCopySuite'"""
    words = [w for w in re.split(r"[^A-Za-z0-9]+", kind) if w]
    if not words:
        return ""
    return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])


def build_campaign_prompt(brief: str, framework: Optional[ValuePropFramework], goal: str, tone: str, assets: List[str]) -> str:
    framework_json = json.dumps(framework.to_record(), indent=2) if framework else "null"
    examples = ",".join(ASSET_EXAMPLES[a] for a in assets if a in ASSET_EXAMPLES)
    keys = ", ".join(f'"{asset_key(a)}"' for a in assets)

    return f"""
    {STRATEGIST_INTRO}
    Your goal is to generate multi-channel brand campaign assets based on the provided product brief, value proposition framework, campaign goal, and tone.

    ### INPUTS:
    - PRODUCT BRIEF:
    {brief}

    - CURRENT VALUE PROPOSITION FRAMEWORK:
    {framework_json}

    - CAMPAIGN GOAL: {goal}
    - CAMPAIGN TONE: {tone}
    - ASSETS TO GENERATE: {', '.join(assets)}

    ### DELIVERABLE:
    Generate the requested assets. For each asset, provide comprehensive and actionable content.
    Respond with a single JSON object and nothing else, with exactly these top-level keys: {keys}.
    Example structure:
    {{{examples}
    }}
    Ensure all generated content is tailored for a SaaS audience and aligns with the brand's core messaging.
    """
