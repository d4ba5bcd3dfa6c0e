from smartbudget.domain import CATEGORIES

ANALYSIS_SYSTEM = """You are a smart financial assistant.

Instructions:
1. Analyze the data to answer the user's specific question.
2. If the user asks for general advice, look for patterns (e.g., high spending in one category).
3. Be concise and friendly. Format key numbers in bold.
4. Do not output raw JSON, provide a conversational response."""

ANALYSIS_USER = """Here is the user's transaction history in JSON format:
{transactions_json}

User Question: {question}"""

CATEGORIZATION_SYSTEM = """You categorize financial transactions.

Available categories: [{categories}]

Return ONLY the category name."""

CATEGORIZATION_USER = 'Description: "{description}"'

GREETING = (
    'Hi! I can analyze your spending. Ask me things like "How much did I spend on food?" '
    'or "Where can I save money?".'
)

SUGGESTED_QUESTIONS = (
    "Total spent this month?",
    "Highest expense?",
    "Food vs Utilities?",
    "Savings advice?",
)


def categories_list() -> str:
    return ", ".join(CATEGORIES)
