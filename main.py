import os
import sys
import json
import asyncio
import getpass
import argparse
from dotenv import load_dotenv

from agents import ASSET_OPTIONS
from core.bootstrap import bootstrap
from core.errors import BrievifyError
from core.state import OnboardingFields
from utils.export import export_campaign_pdf, export_history_csv
from utils.logging_config import setup_logging
from workflows.flow import Stage

# Load environment variables
script_dir = os.path.dirname(os.path.abspath(__file__))
env_path = os.path.join(script_dir, '.env')
load_dotenv(env_path)

ONBOARDING_QUESTIONS = [
    ("company_name", "Company Name"),
    ("product_description", "Product Description (What does your SaaS do?)"),
    ("target_audience", "Target Audience (Who are your ideal customers?)"),
    ("key_features", "Key Features (List 3-5 main features)"),
    ("unique_selling_points", "Unique Selling Points (What makes you different?)"),
]


def display_asset_options():
    """Display available campaign asset kinds"""
    print("\nAvailable campaign assets:")
    for i, asset in enumerate(ASSET_OPTIONS, start=1):
        print(f"  {i}. {asset}")


def parse_asset_choices(raw: str):
    """'1,3' or 'Video Scripts' -> list of asset kinds"""
    assets = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        if item.isdigit() and 1 <= int(item) <= len(ASSET_OPTIONS):
            assets.append(ASSET_OPTIONS[int(item) - 1])
        else:
            assets.append(item)
    return assets


def print_status(ctx):
    session = ctx.session.session
    print(f"\nStage: {ctx.flow.stage.value}")
    if not session.is_authenticated:
        print("Not logged in.")
        return
    print(f"Logged in as: {session.user_email}")
    framework = ctx.campaigns.value_prop_framework
    if framework:
        print("\nYour Brand DNA (Value Prop Framework):")
        print("  Core Messaging Hierarchy:")
        for item in framework.core_messaging_hierarchy:
            print(f"    - {item}")
        narrative = framework.problem_solution_outcome_narrative
        print(f"  Problem: {narrative.problem}")
        print(f"  Solution: {narrative.solution}")
        print(f"  Outcome: {narrative.outcome}")
        if framework.competitive_differentiation_points:
            print("  Competitive Differentiation Points:")
            for item in framework.competitive_differentiation_points:
                print(f"    - {item}")
    else:
        print("No Brand DNA generated yet. Complete onboarding or update your product brief.")
    print(f"\nCampaigns generated: {len(ctx.campaigns.campaign_history)}")


def print_history(ctx):
    history = ctx.campaigns.campaign_history
    if not history:
        print('No campaigns generated yet. Run "campaign" to get started!')
        return
    for i, campaign in enumerate(history):
        print(f"\n[{i}] {campaign.campaign_name}")
        for asset in campaign.assets_generated:
            print(f"    - {asset}")


def run_onboarding(ctx, fields: OnboardingFields):
    ctx.flow.navigate(Stage.ONBOARDING)
    print("\n⏳ Generating Brand DNA...")
    asyncio.run(ctx.orchestrator.generate_value_prop(fields.to_brief()))
    ctx.flow.navigate(Stage.DASHBOARD)
    print("✅ Value Proposition Framework generated successfully!")
    print_status(ctx)


def run_campaign(ctx, goal, tone, assets):
    ctx.flow.navigate(Stage.CREATE_CAMPAIGN)
    print("\n⏳ Generating Campaign...")
    campaign = asyncio.run(ctx.orchestrator.generate_campaign_assets(
        ctx.campaigns.product_brief,
        ctx.campaigns.value_prop_framework,
        goal,
        tone,
        assets,
    ))
    print("✅ Campaign assets generated successfully!")
    print(f"\n{campaign.campaign_name}")
    print(json.dumps(campaign.details, indent=2))


def prompt_onboarding_fields():
    answers = {}
    for field, label in ONBOARDING_QUESTIONS:
        answers[field] = input(f"{label}: ").strip()
    return OnboardingFields(**answers)


def run_interactive(ctx):
    print("\n🤖 Welcome to Brievify 🤖")
    print("=" * 80)
    while True:
        stage = ctx.flow.stage
        try:
            if stage is Stage.LOGGED_OUT:
                choice = input("\n(l)og in, (s)ign up or (q)uit: ").strip().lower()
                if choice == "q":
                    return
                email = input("Email: ")
                password = getpass.getpass("Password: ")
                if choice == "s":
                    ctx.session.sign_up(email, password)
                else:
                    ctx.session.log_in(email, password)
            elif stage is Stage.ONBOARDING:
                print("\nOnboarding: Tell us about your SaaS")
                run_onboarding(ctx, prompt_onboarding_fields())
            else:
                choice = input("\n(c)reate campaign, (h)istory, (u)pdate product brief, (o)ut (log out), (q)uit: ").strip().lower()
                if choice == "q":
                    return
                if choice == "h":
                    print_history(ctx)
                elif choice == "u":
                    run_onboarding(ctx, prompt_onboarding_fields())
                elif choice == "o":
                    ctx.session.log_out()
                elif choice == "c":
                    goal = input("Campaign Goal: ")
                    tone = input("Campaign Tone: ")
                    display_asset_options()
                    assets = parse_asset_choices(input("\nSelect assets (e.g. 1,2): "))
                    run_campaign(ctx, goal, tone, assets)
        except (BrievifyError, ValueError) as e:
            print(f"❌ {e}")


def build_parser():
    parser = argparse.ArgumentParser(description="Brievify - SaaS brand campaign generator")
    parser.add_argument("--store-dir", type=str, default=None, help="Directory for persisted state")
    parser.add_argument("--model", type=str, choices=["gemini", "openai"], default=None, help="LLM provider")
    parser.add_argument("--interactive", action="store_true", help="Run in interactive mode")
    sub = parser.add_subparsers(dest="command")

    for name in ("signup", "login"):
        p = sub.add_parser(name)
        p.add_argument("--email", required=True)
        p.add_argument("--password", default=None, help="Prompted for when omitted")

    sub.add_parser("logout")
    sub.add_parser("status")
    sub.add_parser("history")

    p = sub.add_parser("onboard", help="Describe your product and generate the Brand DNA")
    p.add_argument("--company", required=True)
    p.add_argument("--description", required=True)
    p.add_argument("--audience", required=True)
    p.add_argument("--features", required=True)
    p.add_argument("--usp", required=True)

    p = sub.add_parser("campaign", help="Generate campaign assets")
    p.add_argument("--goal", required=True)
    p.add_argument("--tone", required=True)
    p.add_argument("--asset", action="append", default=[], help=f"One of: {', '.join(ASSET_OPTIONS)} (repeatable)")

    p = sub.add_parser("show", help="Show one campaign from the history")
    p.add_argument("index", type=int)

    p = sub.add_parser("export", help="Export campaign history")
    p.add_argument("--csv", type=str, default=None, help="Write the history to this CSV file")
    p.add_argument("--pdf", type=str, default=None, help="Write one campaign to this PDF file")
    p.add_argument("--index", type=int, default=-1, help="Campaign index for --pdf (default: latest)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging()
    ctx = bootstrap(store_dir=args.store_dir, model_provider=args.model)

    if args.interactive or not args.command:
        run_interactive(ctx)
        return 0

    try:
        if args.command in ("signup", "login"):
            password = args.password or getpass.getpass("Password: ")
            if args.command == "signup":
                ctx.session.sign_up(args.email, password)
            else:
                ctx.session.log_in(args.email, password)
            print_status(ctx)
        elif args.command == "logout":
            ctx.session.log_out()
            print("Logged out.")
        elif args.command == "status":
            print_status(ctx)
        elif args.command == "history":
            print_history(ctx)
        elif args.command == "onboard":
            fields = OnboardingFields(
                company_name=args.company,
                product_description=args.description,
                target_audience=args.audience,
                key_features=args.features,
                unique_selling_points=args.usp,
            )
            run_onboarding(ctx, fields)
        elif args.command == "campaign":
            run_campaign(ctx, args.goal, args.tone, args.asset)
        elif args.command == "show":
            campaign = ctx.campaigns.get_campaign(args.index)
            print(f"{campaign.campaign_name}\n{json.dumps(campaign.details, indent=2)}")
        elif args.command == "export":
            if args.csv:
                print(f"📥 Saved {export_history_csv(ctx.campaigns.campaign_history, args.csv)}")
            if args.pdf:
                campaign = ctx.campaigns.get_campaign(args.index)
                print(f"📥 Saved {export_campaign_pdf(campaign, args.pdf)}")
    except (BrievifyError, ValueError) as e:
        print(f"❌ {e}")
        return 1
    except IndexError:
        print("❌ No campaign at that index.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
