#!/usr/bin/env python3
"""
Form Session Demo: raw template → FormTemplate → answers → payload

Shows the full workflow:
1. Normalize a nested raw template
2. Analyze it
3. Answer questions (visibility follows the answers)
4. Rank options
5. Build the submission payload
6. Submit it through the configured transport
"""

import logging

import httpx

from fieldforms.analyzer import analyze_template
from fieldforms.config import load_config
from fieldforms.examples import build_example_household_template
from fieldforms.normalizer import normalize_template
from fieldforms.serialization import payload_to_json
from fieldforms.session import FormSession
from fieldforms.transport import HttpSubmissionTransport


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 80)
    print("FORM SESSION DEMO: raw template → fields → answers → payload")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Normalize
    # =========================================================================
    print("\n1. NORMALIZING TEMPLATE...")
    template = normalize_template(build_example_household_template(as_json=True))
    print(f"   ✓ Loaded form: {template.name}")
    print(f"   ✓ Fields: {len(template.fields)}")
    print(f"   ✓ Sections: {template.sections()}")

    # =========================================================================
    # STEP 2: Analyze
    # =========================================================================
    print("\n2. ANALYZING TEMPLATE...")
    report = analyze_template(template)
    print(f"   ✓ Answerable fields: {report.answerable_fields}")
    print(f"   ✓ Conditional fields: {report.conditional_fields}")
    for warning in report.warnings:
        print(f"      - {warning}")

    # =========================================================================
    # STEP 3: Answer
    # =========================================================================
    print("\n3. ANSWERING...")
    session = FormSession(template)
    print(f"   Visible before: {len(session.visible_fields())}")
    session.set_answer("identification.nomOuCode", "M-042")
    session.set_answer("modeCuisson.connaitSolutionsPropres", "Oui")
    session.toggle_choice("modeCuisson.solutionsConnues", "Gaz", True)
    print(f"   Visible after:  {len(session.visible_fields())}")

    # =========================================================================
    # STEP 4: Rank
    # =========================================================================
    print("\n4. RANKING...")
    session.toggle_rank("modeCuisson.preferences", "Charbon", True)
    session.toggle_rank("modeCuisson.preferences", "Gaz", True)
    rankings = session.set_rank("modeCuisson.preferences", "Gaz", "1er")
    print(f"   ✓ {rankings}")

    # =========================================================================
    # STEP 5: Payload
    # =========================================================================
    print("\n5. PAYLOAD:")
    print("-" * 80)
    print(payload_to_json(session.build_payload()))

    # =========================================================================
    # STEP 6: Submit
    # =========================================================================
    print("\n6. SUBMITTING...")
    config = load_config()
    # Offline stand-in for the collection API
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(201, json={"ok": True})))
    transport = HttpSubmissionTransport.from_config(config, "demo-token", client=client)
    print(f"   Endpoint: {transport.url}")
    session.submit(transport)
    print(f"   ✓ Accepted; answers left: {len(session.answers)}")
    print("=" * 80)


if __name__ == "__main__":
    main()
