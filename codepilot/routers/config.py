"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from codepilot.deps import get_config_manager
from codepilot.services.config_manager import ConfigManager
from codepilot.services.errors import CodePilotError
from codepilot.services.llm_service import call_llm

router = APIRouter()

PROVIDERS = ("gemini", "openai", "vllm")
SECTIONS = PROVIDERS + ("gateway", "suggestions")


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    provider: str | None = None
    gemini: dict | None = None
    openai: dict | None = None
    vllm: dict | None = None
    gateway: dict | None = None
    suggestions: dict | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    provider: str
    gemini: dict
    openai: dict
    vllm: dict
    gateway: dict
    suggestions: dict


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    provider: str


def mask_key(key: str) -> str:
    """Hide all but the first and last four characters of an API key"""
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return key[:4] + "*" * (len(key) - 8) + key[-4:]


def _masked_section(section: dict) -> dict:
    return {**section, "apiKey": mask_key(section.get("apiKey", ""))}


@router.get("", response_model=ConfigResponse)
async def get_config(config_manager: ConfigManager = Depends(get_config_manager)) -> ConfigResponse:
    """Get current configuration"""
    config = config_manager.get_config()

    return ConfigResponse(
        provider=config.get("provider", "gemini"),
        **{name: _masked_section(config.get(name, {})) for name in PROVIDERS},
        gateway=config.get("gateway", {}),
        suggestions=config.get("suggestions", {}),
    )


@router.put("")
async def update_config(
    request: ConfigUpdateRequest,
    config_manager: ConfigManager = Depends(get_config_manager),
) -> dict[str, Any]:
    """Update configuration"""
    current_config = config_manager.get_config()

    # Update only provided fields
    if request.provider:
        current_config["provider"] = request.provider
    for section in SECTIONS:
        update = getattr(request, section)
        if update:
            current_config[section] = {**current_config.get(section, {}), **update}

    config_manager.save_config(current_config)

    return {"status": "success", "message": "Configuration updated"}


@router.post("/validate", response_model=ValidateResponse)
async def validate_config(config_manager: ConfigManager = Depends(get_config_manager)) -> ValidateResponse:
    """Validate current configuration by testing LLM connection"""
    config = config_manager.get_config()
    provider = config.get("provider", "gemini")

    try:
        response = await call_llm("Say 'OK' if you can hear me.", config)
    except CodePilotError as e:
        return ValidateResponse(valid=False, message=f"Connection failed: {e}", provider=provider)

    if response:
        return ValidateResponse(valid=True, message=f"Successfully connected to {provider}", provider=provider)
    return ValidateResponse(valid=False, message="Received empty response from LLM", provider=provider)
