"""System prompts and prompt helpers shared by all provider adapters."""

from __future__ import annotations

import json
from typing import Any, Mapping

from .types import ModelRequest, SystemPromptKind

JSON_ONLY_SUFFIX = "\n\nRespond with ONLY the JSON, no other text."

REPORT_EXTRACTION_SYSTEM_PROMPT = """IMPORTANT: You must output ONLY valid JSON, with no additional text or explanations.

Task: Extract structured credit report data in JSON format.

Rules:
1. Use ONLY the exact field names shown in the request
2. ALL dates must be in YYYY-MM-DD format
3. ALL numbers must be actual numbers (not strings)
4. ALL boolean values must be true/false (not strings)
5. ALL arrays must be properly formatted with []
6. DO NOT include any comments or explanations
7. DO NOT include any text outside the JSON structure"""

CONVERSATIONAL_SYSTEM_PROMPT = """You are a professional CTOS customer service assistant with expertise in credit reporting and financial analysis.

Guidelines for your responses:
1. FORMAT AND STRUCTURE
- Use clear markdown headers (## for main sections, ### for subsections)
- Use bullet points for lists and key points
- Use bold (**text**) for important numbers and status values
- Keep paragraphs short and focused

2. CONTENT APPROACH
- Start with a brief summary of the relevant information
- Provide specific data points from the report
- Explain what the numbers/status mean
- Suggest relevant recommendations

3. TONE AND STYLE
- Be professional yet approachable
- Use clear, simple language
- End with a helpful conclusion or next steps

IMPORTANT:
1. Respond in clear text with markdown formatting
2. DO NOT output JSON or raw data
3. Format all numbers with proper units (RM for money, % for percentages)"""


def system_prompt_for(kind: SystemPromptKind) -> str:
    if kind is SystemPromptKind.REPORT_EXTRACTION:
        return REPORT_EXTRACTION_SYSTEM_PROMPT
    return CONVERSATIONAL_SYSTEM_PROMPT


def user_prompt_for(request: ModelRequest) -> str:
    """Return the user prompt, appending the JSON-only reminder for extraction calls."""

    if request.system_prompt_kind is SystemPromptKind.REPORT_EXTRACTION:
        return f"{request.prompt}{JSON_ONLY_SUFFIX}"
    return request.prompt


def chat_prompt(report_data: Mapping[str, Any], question: str) -> str:
    return (
        "You are a professional CTOS customer service assistant with expertise in credit "
        "reporting and financial analysis. Your role is to provide clear, helpful insights "
        "based on the following CTOS report data:\n\n"
        f"{json.dumps(report_data, indent=2, default=str)}\n\n"
        "Guidelines for your responses:\n"
        "1. Be professional and courteous\n"
        "2. Provide accurate information based on the report\n"
        "3. Use clear, simple language\n"
        "4. Format responses in markdown for readability\n"
        "5. Add relevant insights or recommendations\n\n"
        f"User's Question: {question}\n\n"
        "Response:"
    )


NO_REPORT_MESSAGE = """I notice that you haven't generated your CTOS report yet. Here are the next steps:

1. Generate your CTOS report first
2. Return here with your report for detailed assistance
3. Ask any specific questions about your report

*I'm here to help once your report is available!*"""

OPERATIONS_HOURS_MESSAGE = """## Thank you for your inquiry

To ensure we provide you with accurate and detailed assistance, we'll need to connect you with one of our **CTOS specialists**.

### Business Hours
- Monday to Friday
- 9:00 AM to 6:00 PM

Please feel free to reach out during our business hours, and we'll be happy to assist you further.

*Your satisfaction is our priority.*"""


__all__ = [
    "CONVERSATIONAL_SYSTEM_PROMPT",
    "JSON_ONLY_SUFFIX",
    "NO_REPORT_MESSAGE",
    "OPERATIONS_HOURS_MESSAGE",
    "REPORT_EXTRACTION_SYSTEM_PROMPT",
    "chat_prompt",
    "system_prompt_for",
    "user_prompt_for",
]
