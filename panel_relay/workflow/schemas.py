from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidRequest, InvalidTarget

TARGETS = ('script', 'image')
DEFAULT_STYLE = "comic book"

class _Inbound(BaseModel):
    """Base model for browser-originated request bodies."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore', frozen=True)

class ScriptRequest(_Inbound):
    """Request for a panel-by-panel comic script."""
    prompt: str
    arc: Optional[str] = None
    tone: Optional[str] = None

    @field_validator('prompt')
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("prompt must not be empty")
        return v

    @field_validator('arc', 'tone')
    @classmethod
    def blank_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

class ImageRequest(_Inbound):
    """Request for a single panel image, optionally steered by reference images."""
    description: str
    style: str = DEFAULT_STYLE
    use_guide_image: bool = False
    guide_image: Optional[str] = None
    use_guide_complement: bool = False
    guide_complement_image: Optional[str] = None
    use_booster: bool = False
    negative_prompt: Optional[str] = None

    @field_validator('description')
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be empty")
        return v

    @field_validator('style', mode='before')
    @classmethod
    def null_style_is_default(cls, v: Any) -> Any:
        return DEFAULT_STYLE if v is None else v

    @field_validator('use_guide_image', 'use_guide_complement', 'use_booster', mode='before')
    @classmethod
    def null_flag_is_off(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator('style')
    @classmethod
    def blank_style_is_default(cls, v: str) -> str:
        return v.strip() or DEFAULT_STYLE

    @field_validator('guide_image', 'guide_complement_image', 'negative_prompt')
    @classmethod
    def blank_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def attaches_guide_image(self) -> bool:
        return self.use_guide_image and self.guide_image is not None

    @property
    def attaches_guide_complement(self) -> bool:
        return self.use_guide_complement and self.guide_complement_image is not None

class PassthroughRequest(BaseModel):
    """Request carrying a ready-made generate-content payload."""
    model_config = ConfigDict(frozen=True)

    target: str
    payload: Dict[str, Any]

InboundRequest = Union[ScriptRequest, ImageRequest, PassthroughRequest]

def resolve_target(body: Dict[str, Any]) -> str:
    """Read the generation target from `target`, falling back to `type`."""
    target = body.get('target')
    if target is None:
        target = body.get('type')
    if target not in TARGETS:
        raise InvalidTarget(target if isinstance(target, str) else None)
    return target

def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get('loc', ()))
    return f"{location}: {error['msg']}" if location else error['msg']

def parse_request(target: str, body: Dict[str, Any]) -> InboundRequest:
    """
    Parse a request body into the variant for its target.

    Args:
        target: A value already accepted by resolve_target
        body: The decoded JSON body

    Returns:
        InboundRequest: ScriptRequest, ImageRequest or PassthroughRequest

    Raises:
        InvalidRequest: If the body does not match the variant
    """
    if 'payload' in body:
        if not isinstance(body['payload'], dict):
            raise InvalidRequest("payload must be a JSON object")
        return PassthroughRequest(target=target, payload=body['payload'])

    model = ScriptRequest if target == 'script' else ImageRequest
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise InvalidRequest(_first_error(e))
