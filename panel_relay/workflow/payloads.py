"""
Outbound generate-content payloads for each request variant.

Script requests become a structured-output text generation call. Image requests
become a multimodal call whose parts are the attached reference images followed
by one composed prompt.
"""

import re
from typing import Any, Dict, List, Optional, Tuple

from .schemas import ImageRequest, InboundRequest, PassthroughRequest, ScriptRequest

GUIDE_IMAGE_MARKER = "guide image"
GUIDE_COMPLEMENT_MARKER = "guide complement"

SCRIPT_SYSTEM_INSTRUCTION = (
    "You are a professional comic book writer. Turn the user's idea into a short comic script "
    "of 4 to 6 panels. For every panel write a vivid visual description an illustrator can draw "
    "from, and the dialogue or caption shown in it (use an empty string for silent panels). "
    "Keep characters, clothing and setting consistent from panel to panel.\n\n"
    f"IMPORTANT: if the idea says a character is shown in the \"{GUIDE_IMAGE_MARKER}\" or an object "
    f"or vehicle is shown in the \"{GUIDE_COMPLEMENT_MARKER}\", the description of every panel in "
    "which that character or object appears MUST contain that exact phrase "
    f"(\"{GUIDE_IMAGE_MARKER}\" or \"{GUIDE_COMPLEMENT_MARKER}\"), so the illustration step knows "
    "which panels need the reference image.\n\n"
    "Answer only with the JSON array described by the response schema."
)

SCRIPT_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "panel": {"type": "NUMBER"},
            "description": {"type": "STRING"},
            "dialogue": {"type": "STRING"},
        },
        "required": ["panel", "description", "dialogue"],
    },
}

SCENE_PREAMBLE = (
    "Create a single comic book panel illustration in {style} style. "
    "Frame the scene cinematically, with a clear focal point, expressive characters "
    "and no speech bubbles or text."
)
GUIDE_IMAGE_CLAUSE = (
    "Redraw the person from the first reference image with the exact same face and hairstyle, "
    "keeping their features recognisable while adapting them to the panel's art style."
)
GUIDE_COMPLEMENT_CLAUSE = (
    "Include the object or vehicle from the {ordinal} reference image, keeping its exact shape, "
    "colors and distinguishing details."
)
QUALITY_BOOSTER = (
    "Masterpiece, best quality, highly detailed, sharp focus, dynamic lighting, "
    "professional comic art."
)
NEGATIVE_CLAUSE = "Avoid: {negative}."

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_ONLY_HIGH"

DEFAULT_MIME_TYPE = "image/png"

_MARKER_PATTERN = re.compile(
    rf"\(?\s*(?:{GUIDE_IMAGE_MARKER}|{GUIDE_COMPLEMENT_MARKER})\s*\)?", re.IGNORECASE
)
_DATA_URI_HEADER = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)")

def split_data_uri(data_uri: str) -> Tuple[str, str]:
    """
    Split a data URI into its MIME type and base64 data.

    The data is everything after the first comma. A string without a comma is
    taken to be bare base64.
    """
    header, sep, data = data_uri.partition(",")
    if not sep:
        return DEFAULT_MIME_TYPE, data_uri.strip()
    match = _DATA_URI_HEADER.match(header.strip())
    mime_type = match.group("mime") if match else DEFAULT_MIME_TYPE
    return mime_type, data

def strip_markers(description: str) -> str:
    """Remove guide markers from a scene description and tidy the whitespace."""
    cleaned = _MARKER_PATTERN.sub(" ", description)
    cleaned = re.sub(r"\s+([,.;:!?])", r"\1", cleaned)
    return re.sub(r"\s{2,}", " ", cleaned).strip()

def inline_part(data_uri: str) -> Dict[str, Any]:
    mime_type, data = split_data_uri(data_uri)
    return {"inlineData": {"mimeType": mime_type, "data": data}}

def build_script_prompt(request: ScriptRequest) -> str:
    lines = [f"Idea: {request.prompt}"]
    if request.arc:
        lines.append(f"Story arc: {request.arc}")
    if request.tone:
        lines.append(f"Tone: {request.tone}")
    return "\n".join(lines)

def build_script_payload(request: ScriptRequest) -> Dict[str, Any]:
    return {
        "contents": [{"role": "user", "parts": [{"text": build_script_prompt(request)}]}],
        "systemInstruction": {"parts": [{"text": SCRIPT_SYSTEM_INSTRUCTION}]},
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": SCRIPT_RESPONSE_SCHEMA,
        },
    }

def build_image_prompt(request: ImageRequest) -> str:
    """
    Compose the natural-language prompt for an image request.

    Clauses are joined in a fixed order: scene preamble, guide image clause,
    guide complement clause, cleaned description, booster, negative prompt.
    """
    clauses: List[str] = [SCENE_PREAMBLE.format(style=request.style)]
    if request.attaches_guide_image:
        clauses.append(GUIDE_IMAGE_CLAUSE)
    if request.attaches_guide_complement:
        ordinal = "second" if request.attaches_guide_image else "first"
        clauses.append(GUIDE_COMPLEMENT_CLAUSE.format(ordinal=ordinal))

    scene = strip_markers(request.description)
    if scene:
        clauses.append(f"Scene: {scene}")
    if request.use_booster:
        clauses.append(QUALITY_BOOSTER)
    if request.negative_prompt:
        clauses.append(NEGATIVE_CLAUSE.format(negative=request.negative_prompt.strip()))
    return " ".join(clauses)

def build_image_payload(request: ImageRequest) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = []
    if request.attaches_guide_image:
        parts.append(inline_part(request.guide_image))
    if request.attaches_guide_complement:
        parts.append(inline_part(request.guide_complement_image))
    parts.append({"text": build_image_prompt(request)})

    return {
        "contents": [{"role": "user", "parts": parts}],
        "safetySettings": [
            {"category": category, "threshold": SAFETY_THRESHOLD} for category in HARM_CATEGORIES
        ],
        "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
    }

def build_payload(request: InboundRequest) -> Dict[str, Any]:
    """Build the generate-content body for any request variant."""
    if isinstance(request, PassthroughRequest):
        return request.payload
    if isinstance(request, ScriptRequest):
        return build_script_payload(request)
    if isinstance(request, ImageRequest):
        return build_image_payload(request)
    raise TypeError(f"Unsupported request type: {type(request).__name__}")

def find_inline_image(response: Dict[str, Any]) -> Optional[str]:
    """Return the base64 data of the first inline image in the first candidate."""
    for part in first_candidate_parts(response):
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return inline["data"]
    return None

def first_candidate_parts(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    candidates = response.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}
    return content.get("parts") or []
