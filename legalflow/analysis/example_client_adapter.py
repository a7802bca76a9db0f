"""Example completion client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseCompletionClient and register the provider in AnalysisEngineFactory.
"""

import json
from typing import ClassVar

from legalflow.analysis.client_base import BaseCompletionClient


class ExampleClientAdapter(BaseCompletionClient):
    """Example adapter that returns fixed, well-formed responses per task.

    No network calls. Useful for local development, demos, and as a template
    for building real provider adapters.
    """

    RESPONSES: ClassVar[dict[str, object]] = {
        "analyze_document": {
            "summary": "Example summary of the uploaded document.",
            "documentType": "Agreement",
            "parties": [],
            "effectiveDate": None,
            "expiryDate": None,
        },
        "detect_clauses": [],
        "risk_score": {
            "score": "low",
            "reasoning": "Example assessment without a live model.",
            "topRisks": [],
        },
        "next_steps": {
            "steps": [
                {
                    "action": "Review document thoroughly",
                    "rationale": "Ensure you understand all terms and conditions",
                }
            ],
            "disclaimer": "Not legal advice",
        },
    }
    DEFAULT_TEXT: ClassVar[str] = "This information is not contained in the document."

    async def complete(
        self,
        *,
        task: str,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt
        if task in self.RESPONSES:
            return json.dumps(self.RESPONSES[task])
        return self.DEFAULT_TEXT
