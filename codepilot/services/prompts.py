"""Prompt builders for every generative action"""

from __future__ import annotations


def build_suggestions_prompt(code: str) -> str:
    """Ask for 1-3 short improvement suggestions as a numbered list"""
    return f"""Analyze the following code and provide 1-3 concise, actionable improvement suggestions in numbered list format.
Focus on code quality, performance, and best practices. Be specific and reference line numbers where applicable.
Don't format your output, keep it in plaintext. Also, only use 5-7 words per suggestion. Only give sensible and meaningful suggestions. Give less if none are needed.

Code:
{code}

Suggestions:"""


def build_chat_prompt(query: str, code: str, language: str) -> str:
    """Single-shot assistant prompt carrying the current buffer"""
    return f"""You are CodePilot, an expert programming assistant. Format responses with:
- Code blocks using ```{language} ... ``` syntax
- Clear section separation

Current language: {language}
User's query: "{query}"
Current Code: {code}

Only respond with code if asked. Otherwise, answer the query.
Answer only what's asked, don't explain too much unless asked. If not related to code or technical topics, don't answer it.
Don't format your response except for any code blocks.

Don't make it sound like you are continuing the conversation. Treat each message as its own thing."""


def build_debug_prompt(code: str, language: str) -> str:
    """Ask for an issue/performance/complexity report as JSON"""
    return f"""Analyze this {language} code for issues and provide structured response:
- Identify bugs, performance issues, and security vulnerabilities
- Suggest concrete improvements
- Calculate complexity metrics

Return JSON format:
{{
  "issues": [
    {{
      "type": "bug|performance|security",
      "line": number,
      "message": string
    }}
  ],
  "performance": {{
    "score": number,
    "suggestions": string[]
  }},
  "complexity": {{
    "score": number,
    "details": string
  }}
}}

Code:
{code}

Return ONLY the JSON with no additional text."""


TEST_FRAMEWORKS = "Jest for JS, unittest for Python, JUnit for Java"


def build_test_generation_prompt(code: str, language: str) -> str:
    """Ask for a test suite covering the given code"""
    return f"""As an expert QA engineer, generate comprehensive test cases for this {language} code.
Requirements:
1. Use proper testing framework ({TEST_FRAMEWORKS})
2. Include tests for: valid inputs, invalid inputs, edge cases
3. Add descriptive test names
4. Return only the test code with no explanations
5. Format properly with correct syntax

Code to test:
{code}

Test Cases:"""


def build_test_run_prompt(tests: str, language: str) -> str:
    """Ask for a predicted test run summary as JSON"""
    return f"""Analyze these {language} test cases and predict realistic results in JSON format:
{{
  "passed": number,
  "failed": number,
  "total": number,
  "coverage": "string",
  "duration": "string"
}}

Consider:
- Code complexity
- Test case quality
- Common failure patterns

Tests:
{tests}

Return ONLY the JSON with no additional text or formatting."""


def build_error_analysis_prompt(error_message: str) -> str:
    """Ask for a labeled error diagnosis"""
    return f"""Analyze this programming error and provide detailed response in this format:
Error Type: [Type of error]
Likely Cause: [Possible reason for error]
Solutions:
- [Solution 1]
- [Solution 2]
- [Solution 3]

Error Message: {error_message}

Answer only coding-related questions and don't format your response."""
