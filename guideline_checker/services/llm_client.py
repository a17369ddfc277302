"""
LLM client for App Store guideline analysis using OpenAI chat completions.
"""
import os
import json
import logging
import time
from typing import Optional
import openai
from openai import OpenAI

logger = logging.getLogger(__name__)

# Initialize OpenAI client
client: Optional[OpenAI] = None

DEFAULT_MODEL = 'gpt-4-turbo-preview'

# Violations at or below this probability are not reported
MIN_REPORTED_PROBABILITY = 0.3

SYSTEM_PROMPT = '''You are an expert in Apple's App Store Review Guidelines. Your task is to analyze app ideas and identify potential violations of the guidelines. For each app idea, you should:

1. Analyze the idea against all sections of the App Store Review Guidelines
2. Identify any potential violations
3. For each violation:
   - Cite the specific guideline section
   - Explain why it might be violated
   - Provide a probability (0-1) of this being a real issue

Return the analysis in this exact JSON format:
{
  "violations": [
    {
      "guideline": "string (guideline section and title)",
      "explanation": "string (detailed explanation)",
      "probability": number (0-1)
    }
  ],
  "isCompliant": boolean (true if no high-probability violations)
}

Only include violations with probability > 0.3. Sort violations by probability in descending order.'''


def _get_client() -> OpenAI:
    """Get or initialize OpenAI client."""
    global client
    if client is None:
        api_key = os.getenv('OPENAI_API_KEY')
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable not set")

        logger.debug(f"Initializing OpenAI client (API key present: {bool(api_key)})")

        try:
            client = OpenAI(api_key=api_key)
            logger.info("OpenAI client initialized successfully")
        except Exception as e:
            logger.error(f"Failed to create OpenAI client: {type(e).__name__} - {str(e)}")
            raise
    return client


def _validate_violation(item) -> Optional[dict]:
    """
    Validate a single violation entry.

    Returns the cleaned violation, or None if it should not be reported.

    Raises:
        ValueError: If the entry is malformed.
    """
    if not isinstance(item, dict):
        raise ValueError("Each violation must be a JSON object")

    required_keys = {'guideline', 'explanation', 'probability'}
    missing = required_keys - set(item.keys())
    if missing:
        raise ValueError(f"Violation missing required keys: {missing}")

    probability = item['probability']
    # bool is an int subclass
    if isinstance(probability, bool) or not isinstance(probability, (int, float)):
        raise ValueError("'probability' must be a number")

    probability = float(probability)
    if not 0 < probability <= 1:
        logger.warning(f"Dropping violation with out-of-range probability: {probability}")
        return None
    if probability <= MIN_REPORTED_PROBABILITY:
        logger.warning(f"Dropping low-probability violation: {item['guideline']} ({probability})")
        return None

    return {
        'guideline': str(item['guideline']).strip(),
        'explanation': str(item['explanation']).strip(),
        'probability': probability,
    }


def _validate_json_response(response_text: Optional[str]) -> dict:
    """
    Parse and validate JSON response from LLM.

    Args:
        response_text: Raw text response from LLM. Empty content is read as "{}".

    Returns:
        Report dictionary with 'violations' (sorted, highest probability
        first) and 'isCompliant'.

    Raises:
        ValueError: If JSON is invalid or does not match the report schema.
    """
    try:
        data = json.loads(response_text or "{}")
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON response: {e}")
        raise ValueError("Invalid JSON response from LLM")

    if not isinstance(data, dict):
        raise ValueError("JSON response must be an object")

    # Validate required keys
    required_keys = {'violations', 'isCompliant'}
    if not all(key in data for key in required_keys):
        missing = required_keys - set(data.keys())
        logger.error(f"JSON response missing required keys: {missing}")
        raise ValueError(f"JSON response missing required keys: {missing}")

    # Validate types
    if not isinstance(data['violations'], list):
        raise ValueError("'violations' must be a list")
    if not isinstance(data['isCompliant'], bool):
        raise ValueError("'isCompliant' must be a boolean")

    violations = []
    for item in data['violations']:
        violation = _validate_violation(item)
        if violation is not None:
            violations.append(violation)

    violations.sort(key=lambda v: v['probability'], reverse=True)

    return {
        'violations': violations,
        'isCompliant': data['isCompliant'],
    }


def _call_openai(system_prompt: str, user_prompt: str, model: str) -> Optional[str]:
    """
    Call the OpenAI chat completions API once.

    Args:
        system_prompt: The system message.
        user_prompt: The user message.
        model: The model to use.

    Returns:
        Raw response text.

    Raises:
        RuntimeError: On timeout or any API error.
    """
    try:
        client = _get_client()

        response = client.chat.completions.create(
            model=model,
            messages=[
                {
                    "role": "system",
                    "content": system_prompt
                },
                {
                    "role": "user",
                    "content": user_prompt
                }
            ],
            response_format={"type": "json_object"},
            temperature=float(os.getenv('OPENAI_TEMPERATURE', '0.7')),
            max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', '1500')),
            timeout=float(os.getenv('OPENAI_TIMEOUT', '60'))
        )

        return response.choices[0].message.content

    except openai.APITimeoutError as e:
        logger.error("OpenAI API request timed out")
        raise RuntimeError("AI analysis request timed out") from e
    except openai.OpenAIError as e:
        error_type = type(e).__name__
        logger.exception(f"OpenAI API call failed: {error_type}")
        raise RuntimeError(f"AI analysis service error: {error_type} - {str(e)}") from e


def analyze_app_idea(app_idea: str) -> dict:
    """
    Analyze an app idea against the App Store Review Guidelines.

    Args:
        app_idea: Free-text description of the app concept.

    Returns:
        Dictionary with keys:
        - violations (list): {guideline, explanation, probability} entries,
          highest probability first
        - isCompliant (bool): True if no high-probability violations

    Raises:
        ValueError: On missing configuration or an unusable model reply.
        RuntimeError: On analysis failure.
    """
    start_time = time.time()

    try:
        model = os.getenv('OPENAI_MODEL', DEFAULT_MODEL)

        logger.info(f"Analyzing app idea: {len(app_idea)} chars, model={model}")
        response_text = _call_openai(SYSTEM_PROMPT, app_idea, model)

        result = _validate_json_response(response_text)

        duration = time.time() - start_time
        logger.info(
            f"Analysis complete: violations={len(result['violations'])}, "
            f"isCompliant={result['isCompliant']}, duration={duration:.2f}s"
        )

        return result

    except (ValueError, RuntimeError):
        raise
    except Exception as e:
        duration = time.time() - start_time
        logger.exception(
            f"Analysis failed: duration={duration:.2f}s, error={type(e).__name__}"
        )
        raise RuntimeError("Failed to analyze app idea") from e
