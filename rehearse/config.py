"""
Rehearse Configuration System
=============================

This file contains ALL configuration for the Rehearse interview system.
- User settings at the top (things users might want to change)
- Interviewer personas and follow-up tuning in the middle
- Internal constants at the bottom (technical defaults)
"""
import os
import json
from dataclasses import dataclass, field
from typing import Optional, Tuple, List

from .interview.models import Persona, QuestioningStyle, InterviewConfig, InterviewMode
from .interview.errors import ConfigurationError


# =============================================================================
# USER SETTINGS - Edit these to customize the interview panel
# =============================================================================

# REQUIRED for question generation: Google Cloud project hosting Vertex AI
GOOGLE_CLOUD_PROJECT = "your-project-id"  # Change this!
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Session settings
DURATION_MINUTES = 15
MODE = "practice"  # practice | graded
WORKDIR = "./_sessions"
PERSONAS_FILE = None  # Optional JSON file with a list of personas

# Speech settings
TTS_PROVIDER = "none"  # none | google | elevenlabs
ELEVENLABS_API_KEY = None
LANGUAGE_CODE = "en-US"

# Logging
LOG_FILE = "./_sessions/interview.log"
LOG_LEVEL = "INFO"


# =============================================================================
# FOLLOW-UP HEURISTIC
# =============================================================================

@dataclass(frozen=True)
class FollowUpConfig:
    """Tunable parameters of the follow-up heuristic."""
    brief_answer_words: int = 15
    tough_probability: float = 0.5
    keyword_probability: float = 0.4
    keywords: Tuple[str, ...] = ("challenge", "difficult", "problem", "solution", "team", "conflict")

    @classmethod
    def from_preset(cls, preset_name: str) -> 'FollowUpConfig':
        """Create follow-up tuning from preset."""
        presets = {
            "relaxed": cls(brief_answer_words=10, tough_probability=0.3, keyword_probability=0.2),
            "probing": cls(brief_answer_words=20, tough_probability=0.7, keyword_probability=0.6),
            "never_random": cls(tough_probability=0.0, keyword_probability=0.0),
        }
        return presets.get(preset_name, cls())


# =============================================================================
# INTERVIEWER PERSONAS
# =============================================================================

DEFAULT_PERSONAS: Tuple[Persona, ...] = (
    Persona(1, "Marcus", "Technical Manager", QuestioningStyle.NEUTRAL,
            ("technical", "problem-solving", "architecture"), "2EiwWnXFnvU5JabPnv8n", "Clyde", "male"),
    Persona(2, "Jennifer", "HR Director", QuestioningStyle.FRIENDLY,
            ("behavioral", "culture-fit", "soft-skills"), "EXAVITQu4vr4xnSDxMaL", "Sarah", "female"),
    Persona(3, "Robert", "VP of Engineering", QuestioningStyle.TOUGH,
            ("leadership", "technical", "strategic"), "IKne3meq5aSn9XLyUdCD", "Charlie", "male"),
    Persona(4, "Emily", "Recruiter", QuestioningStyle.FRIENDLY,
            ("behavioral", "experience", "motivation"), "FGY2WhTYpPnrIDTdsKH5", "Laura", "female"),
    Persona(5, "James", "Product Manager", QuestioningStyle.NEUTRAL,
            ("product", "user-experience", "prioritization"), "JBFqnCBsd6RMkjVDRZzb", "George", "male"),
    Persona(6, "Michelle", "CEO", QuestioningStyle.TOUGH,
            ("vision", "leadership", "strategic"), "SAz9YHcvj6GT2YYXdXww", "River", "female"),
)


def load_personas(path: str) -> Tuple[Persona, ...]:
    """Load personas from a JSON file holding a list of persona objects."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read personas from {path}: {e}")

    if not isinstance(raw, list) or not raw:
        raise ConfigurationError(f"{path} must contain a non-empty list of personas")

    try:
        return tuple(Persona.from_dict(item) for item in raw)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid persona in {path}: {e}")


def validate_interview_config(config: InterviewConfig) -> InterviewConfig:
    """Reject configurations that cannot produce a session."""
    if not config.personas:
        raise ConfigurationError("At least one persona is required")
    if config.duration_minutes <= 0:
        raise ConfigurationError(f"Duration must be positive, got {config.duration_minutes}")
    if not isinstance(config.mode, InterviewMode):
        raise ConfigurationError(f"Unknown interview mode: {config.mode!r}")
    for persona in config.personas:
        if not isinstance(persona.questioning_style, QuestioningStyle):
            raise ConfigurationError(f"Unknown questioning style for {persona.name}: {persona.questioning_style!r}")
    return config


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# LLM
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.5-flash-lite"
LLM_TIMEOUT = 15
MAX_OUTPUT_TOKENS = 512

# Per-call generation budgets
QUESTION_MAX_TOKENS = 256
QUESTION_TEMPERATURE = 0.7
ACKNOWLEDGMENT_MAX_TOKENS = 128
ACKNOWLEDGMENT_TEMPERATURE = 0.5
GRADING_MAX_TOKENS = 1024
GRADING_TEMPERATURE = 0.3

# Context trimming
DOCUMENT_CONTEXT_CHARS = 500
PREVIOUS_QUESTIONS_IN_PROMPT = 3

# Speech
TTS_TIMEOUT = 30
STT_TIMEOUT = 30
STT_SAMPLE_RATE = 16000
ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
ELEVENLABS_MODEL_ID = "eleven_monolingual_v1"
TTS_STABILITY = 0.5
TTS_STABILITY_TOUGH = 0.6
TTS_SIMILARITY_BOOST = 0.75
GOOGLE_TTS_LANGUAGE = "en-US"

# Concurrency inside one turn (lead-in and main text)
TURN_GENERATION_WORKERS = 2


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: Optional[str] = None
    google_application_credentials: Optional[str] = None
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    llm_timeout: int = LLM_TIMEOUT
    duration_minutes: int = DURATION_MINUTES
    mode: str = MODE
    workdir: str = WORKDIR
    personas_file: Optional[str] = PERSONAS_FILE
    tts_provider: str = TTS_PROVIDER
    elevenlabs_api_key: Optional[str] = ELEVENLABS_API_KEY
    tts_timeout: int = TTS_TIMEOUT
    language_code: str = LANGUAGE_CODE
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL
    follow_up: FollowUpConfig = field(default_factory=FollowUpConfig)

    def get_personas(self) -> Tuple[Persona, ...]:
        """Personas from the configured file, or the built-in panel."""
        if self.personas_file:
            return load_personas(self.personas_file)
        return DEFAULT_PERSONAS

    def get_mode(self) -> InterviewMode:
        try:
            return InterviewMode(self.mode)
        except ValueError:
            raise ConfigurationError(f"Unknown interview mode: {self.mode!r}")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def get_config() -> Config:
    """Load configuration from environment variables over the defaults above."""
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    if project == "your-project-id":
        project = None

    preset = os.getenv("REHEARSE_FOLLOW_UP_PRESET")

    return Config(
        google_cloud_project=project,
        google_application_credentials=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS,
        vertex_location=os.getenv("VERTEX_LOCATION") or VERTEX_LOCATION,
        model_name=os.getenv("REHEARSE_MODEL") or MODEL_NAME,
        duration_minutes=_env_int("REHEARSE_DURATION_MINUTES", DURATION_MINUTES),
        mode=os.getenv("REHEARSE_MODE") or MODE,
        workdir=os.getenv("REHEARSE_WORKDIR") or WORKDIR,
        personas_file=os.getenv("REHEARSE_PERSONAS_FILE") or PERSONAS_FILE,
        tts_provider=(os.getenv("REHEARSE_TTS_PROVIDER") or TTS_PROVIDER).lower(),
        elevenlabs_api_key=os.getenv("ELEVENLABS_API_KEY") or ELEVENLABS_API_KEY,
        log_file=os.getenv("REHEARSE_LOG_FILE") or LOG_FILE,
        log_level=os.getenv("REHEARSE_LOG_LEVEL") or LOG_LEVEL,
        follow_up=FollowUpConfig.from_preset(preset) if preset else FollowUpConfig(),
    )


def build_interview_config(config: Config,
                           interview_id: int = 1,
                           user_id: int = 1,
                           personas: Optional[List[Persona]] = None,
                           document_context: Optional[str] = None,
                           scenario_description: Optional[str] = None) -> InterviewConfig:
    """Assemble and validate an InterviewConfig from the loaded settings."""
    return validate_interview_config(InterviewConfig(
        interview_id=interview_id,
        user_id=user_id,
        personas=tuple(personas) if personas else config.get_personas(),
        duration_minutes=config.duration_minutes,
        mode=config.get_mode(),
        scenario_description=scenario_description,
        document_context=document_context,
    ))
