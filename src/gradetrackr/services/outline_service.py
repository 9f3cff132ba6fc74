import json
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError
from requests import RequestException

from gradetrackr.config.settings import settings
from gradetrackr.core.models import ASSESSMENT_CATEGORIES, Assessment, Course, GradingScheme, new_id

logger = logging.getLogger(__name__)


class OutlineServiceError(Exception):
    pass


AI_MODELS: List[Dict[str, str]] = [
    {"id": "groq/compound", "name": "Groq Compound", "context": "70K"},
    {"id": "groq/compound-mini", "name": "Groq Compound Mini", "context": "70K"},
    {"id": "meta-llama/llama-4-scout-17b-16e-instruct", "name": "Llama 4 Scout", "context": "30K"},
    {"id": "llama-3.3-70b-versatile", "name": "Llama 3.3 70B", "context": "12K"},
    {"id": "qwen/qwen3-32b", "name": "Qwen 3 32B", "context": "6K"},
]

DEFAULT_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"

MODEL_CONTEXT_CHARS: Dict[str, int] = {
    "meta-llama/llama-4-scout-17b-16e-instruct": 100000,
    "llama-3.3-70b-versatile": 35000,
    "qwen/qwen3-32b": 18000,
}
DEFAULT_CONTEXT_CHARS = 35000

TRUNCATION_NOTICE = (
    "\n\n[Text truncated - paste only the grading/assessment sections for best results]"
)

SYSTEM_PROMPT = """You are a course outline parser. Extract ALL courses from the text and return ONLY valid JSON.

The input may contain outlines for MULTIPLE different courses (e.g. MATH*2130, CIS*2520).
Extract EVERY course found; look for different course codes, titles or "Course:" headers.

Weight rules:
1. "best X of Y" or "lowest Z dropped": only create entries for the ones that count,
   each worth the total weight divided by the number that count.
2. "equally weighted": divide the total weight by the count.
3. Multiple grading schemes (Scheme 1/2 or A/B): return each as a separate scheme of that course.
4. Credits are usually listed as "Credits: 0.50" or "0.5 credits". Default to 0.5.

Return format:
{
  "courses": [
    {
      "name": "MATH*2130 - Numerical Methods",
      "credits": 0.5,
      "schemes": [
        {
          "name": "Scheme 1",
          "assessments": [
            { "name": "Quiz 1", "category": "Quiz", "weight": 2.5, "isFinal": false },
            { "name": "Final Exam", "category": "Final", "weight": 40, "isFinal": true }
          ]
        }
      ]
    }
  ]
}

- "weight" is the weight of one individual assessment; a scheme's weights should total 100
- Categories: """ + ", ".join(f'"{c}"' for c in ASSESSMENT_CATEGORIES) + """
- Only the final exam gets "isFinal": true
- Return ONLY JSON, no markdown or explanation"""


class ParsedAssessment(BaseModel):
    name: str
    category: str = "Other"
    weight: float = 0
    isFinal: bool = False


class ParsedScheme(BaseModel):
    name: str = "Scheme 1"
    assessments: List[ParsedAssessment] = Field(default_factory=list)


class ParsedCourse(BaseModel):
    name: str
    credits: float = 0.5
    schemes: List[ParsedScheme] = Field(default_factory=list)


class ParsedOutline(BaseModel):
    courses: List[ParsedCourse] = Field(default_factory=list)


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def truncate_outline(text: str, model: str) -> str:
    max_chars = MODEL_CONTEXT_CHARS.get(model, DEFAULT_CONTEXT_CHARS)
    if len(text) <= max_chars:
        return text
    logger.warning("Outline too long (%d chars), truncating to %d", len(text), max_chars)
    return text[:max_chars] + TRUNCATION_NOTICE


def parse_reply(content: str) -> List[ParsedCourse]:
    json_str = strip_code_fences(content)
    try:
        data = json.loads(json_str)
    except ValueError as exc:
        logger.error("Failed to parse AI response: %s", json_str[:500])
        raise OutlineServiceError("Failed to parse AI response as JSON") from exc
    try:
        return ParsedOutline.model_validate(data).courses
    except ValidationError as exc:
        raise OutlineServiceError(f"AI response has an unexpected shape: {exc.error_count()} error(s)") from exc


def convert_parsed_to_course(parsed: ParsedCourse, scheme_index: int = 0) -> Course:
    schemes = [
        GradingScheme(
            id=new_id(),
            name=scheme.name,
            assessments=[
                Assessment(
                    id=new_id(),
                    name=a.name,
                    category=a.category,
                    weight=a.weight,
                    is_final=a.isFinal,
                )
                for a in scheme.assessments
            ],
        )
        for scheme in parsed.schemes
    ]

    active = schemes[scheme_index].assessments if 0 <= scheme_index < len(schemes) else []
    multiple = len(schemes) > 1
    return Course(
        id=new_id(),
        name=parsed.name,
        credits=parsed.credits,
        target=80,
        assessments=list(active),
        grading_schemes=schemes if multiple else None,
        active_scheme_index=scheme_index if multiple else None,
    )


class OutlineService:
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        endpoint: str = "https://api.groq.com/openai/v1/chat/completions",
        timeout: float = 60,
    ) -> None:
        if not api_key or not api_key.strip():
            raise OutlineServiceError("Missing Groq API key")
        self.api_key = api_key.strip()
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout

    @classmethod
    def from_settings(cls, api_key: Optional[str] = None, model: Optional[str] = None) -> "OutlineService":
        return cls(
            api_key or settings.groq_api_key,
            model=model or settings.groq_model,
            endpoint=settings.groq_api_url,
        )

    def parse_outline(self, text: str) -> List[ParsedCourse]:
        if not text.strip():
            raise OutlineServiceError("Outline text is empty")

        outline = truncate_outline(text.strip(), self.model)
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": "Parse ALL courses from this text. There may be multiple courses - "
                    f"extract every one you find:\n\n{outline}",
                },
            ],
            "temperature": 0.1,
            "max_tokens": 8192,
        }
        data = self._post(payload)

        content = self._reply_content(data)
        if not content:
            raise OutlineServiceError("No response from Groq")

        courses = parse_reply(content)
        logger.info("Parsed %d course(s) from outline", len(courses))
        return courses

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            res = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout)
        except RequestException as exc:
            raise OutlineServiceError(f"Groq API unavailable: {exc}") from exc

        if res.status_code >= 400:
            logger.error("Groq API error %s: %s", res.status_code, res.text)
            raise OutlineServiceError(f"Groq API error: {res.status_code} - {res.text}")

        try:
            return res.json()
        except ValueError as exc:
            raise OutlineServiceError("Groq API returned a non-JSON body") from exc

    @staticmethod
    def _reply_content(data: Dict[str, Any]) -> Optional[str]:
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
