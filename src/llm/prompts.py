from datetime import date

EXTRACTION_SYSTEM_PROMPT = """You are a helpful assistant that extracts structured data from natural language todo entries.
Extract the following information and return ONLY a valid JSON object:
- task: the main action/task to be performed
- date: the date if mentioned (format: YYYY-MM-DD)
- time: the time if mentioned (format: HH:MM)
- business_name: the name of a business if mentioned
- business_type: the type of business (bakery, restaurant, store, etc.)
- location: the address or city mentioned
- urgency: low/medium/high based on context
- category: Work/Personal based on context

If a field is not mentioned or unclear, set it to null.
Current date context: {today}"""

SUGGESTIONS_SYSTEM_PROMPT = """You are a helpful assistant that generates practical suggestions for todo items that have validation issues.
Based on the parsed todo data, business information, and validation issues, provide helpful alternatives.
Return a JSON object with:
- suggestions: array of suggestion objects with {type, description, action}
- reasoning: brief explanation of why the suggestions were made"""

SUGGESTIONS_USER_TEMPLATE = """Parsed Data: {parsed}
Business Info: {business}
Validation Issues: {issues}

Please provide practical suggestions to resolve these issues."""


def extraction_prompt(today: date) -> str:
    return EXTRACTION_SYSTEM_PROMPT.format(today=today.isoformat())
