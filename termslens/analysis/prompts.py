"""Fixed instructional prompts for each analysis step."""

from __future__ import annotations

from termslens.analysis.models import SectionKind

# Every analysis prompt ends with this line followed by the document.
DOCUMENT_MARKER = "Document to analyze:"

SUMMARY_PROMPT = """\
Provide a brief, clear summary of this terms and conditions document.
Return ONLY a JSON object in this exact format:
{{
  "summary": "A concise 2-3 sentence summary of the main points and purpose of this document"
}}

Document to analyze:
{document}"""

PRIVACY_PROMPT = """\
You are a legal document analyzer specializing in privacy policies. Analyze the \
privacy-related aspects of this terms and conditions document.

Focus on:
- How personal data is collected
- How data is stored and protected
- What the data is used for
- User privacy rights
- Data retention policies

Return your analysis as a JSON object with this EXACT format:
{{
  "title": "Privacy Policy",
  "content": "A clear, detailed summary of all privacy-related aspects. For example: \
'The service collects email and usage data, stores it securely using encryption, and \
retains it for 12 months. Data is used for service improvement and personalization. \
Users can request data deletion.'"
}}

Important: Provide specific details from the document, not generic statements. If no \
privacy information is found, explain what's missing.

Document to analyze:
{document}"""

DATA_SHARING_PROMPT = """\
Analyze the data sharing aspects of this terms and conditions document.
Return ONLY a JSON object in this exact format:
{{
  "title": "Data Sharing",
  "content": "Clear description of third-party sharing policies"
}}

Document to analyze:
{document}"""

USER_RESPONSIBILITIES_PROMPT = """\
Analyze the user responsibilities in this terms and conditions document.
Return ONLY a JSON object in this exact format:
{{
  "title": "User Responsibilities",
  "content": "Clear description of what users must comply with"
}}

Document to analyze:
{document}"""

RISKS_PROMPT = """\
You are a legal document analyzer specializing in risk assessment. Analyze the risks \
and potential liabilities in this terms and conditions document.

Focus on identifying risks related to:
- User obligations and responsibilities
- Service limitations and disclaimers
- Liability and indemnification
- Account termination conditions
- Intellectual property violations

Return your analysis as a JSON object with this EXACT format:
{{
  "risks": [
    {{
      "severity": "high|medium|low",
      "description": "Detailed description of the risk"
    }}
  ]
}}

Important:
- Each risk must have both severity and description
- Severity must be exactly "high", "medium", or "low"
- Provide specific details from the document, not generic statements
- If no risks are found, explain what types of risks are typically covered

Document to analyze:
{document}"""

QUERY_PROMPT = """\
Based on the following Terms and Conditions document, please answer this question:
{question}

Document:
{document}"""

SECTION_PROMPTS: dict[SectionKind, str] = {
    SectionKind.PRIVACY: PRIVACY_PROMPT,
    SectionKind.DATA_SHARING: DATA_SHARING_PROMPT,
    SectionKind.USER_RESPONSIBILITIES: USER_RESPONSIBILITIES_PROMPT,
}


def build_summary_prompt(document: str) -> str:
    return SUMMARY_PROMPT.format(document=document)


def build_section_prompt(kind: SectionKind, document: str) -> str:
    if kind not in SECTION_PROMPTS:
        raise ValueError(f"No prompt for section kind: {kind}")
    return SECTION_PROMPTS[kind].format(document=document)


def build_risks_prompt(document: str) -> str:
    return RISKS_PROMPT.format(document=document)


def build_query_prompt(document: str, question: str) -> str:
    return QUERY_PROMPT.format(document=document, question=question)
