from __future__ import annotations
import json
import re
from datetime import date, timedelta
from llm.providers.base import LLMProvider

_WORK_WORDS = ("meeting", "report", "client", "office", "deadline", "invoice", "review")


class MockProvider(LLMProvider):
    def generate(self, *, system: str, user: str, temperature: float = 0.2) -> str:
        """
        Returns dummy JSON responses based on the prompt content.
        """
        # Suggestion requests carry the serialized validation issues
        if "Validation Issues:" in user:
            return json.dumps({
                "suggestions": [
                    {
                        "type": "general",
                        "description": "Confirm the details with the business before going",
                        "action": "contact_business",
                    }
                ],
                "reasoning": "Mock provider suggestions",
            })

        if "extracts structured data" in system:
            lower_user = user.lower()
            category = "Personal"
            if any(word in lower_user for word in _WORK_WORDS):
                category = "Work"

            parsed_date = None
            if "tomorrow" in lower_user:
                parsed_date = (date.today() + timedelta(days=1)).isoformat()
            elif "today" in lower_user:
                parsed_date = date.today().isoformat()
            else:
                m = re.search(r"\b(\d{4}-\d{2}-\d{2})\b", user)
                if m:
                    parsed_date = m.group(1)

            m_time = re.search(r"\b(\d{1,2}):(\d{2})\b", user)
            parsed_time = f"{int(m_time.group(1)):02d}:{m_time.group(2)}" if m_time else None

            return json.dumps({
                "task": user,
                "date": parsed_date,
                "time": parsed_time,
                "business_name": None,
                "business_type": None,
                "location": None,
                "urgency": "high" if "urgent" in lower_user or "asap" in lower_user else "medium",
                "category": category,
            })

        # Default fallback
        return "{}"
