#!/usr/bin/env python3
"""
Main entry point for the Rehearse interview system.
Allows running the package with: python -m rehearse
"""
import sys
from typing import List, Optional

from .config import get_config, build_interview_config
from .interview import InterviewOrchestrator, ConsoleInterviewRunner, ConfigurationError
from .infrastructure.data import SessionStore
from .infrastructure.speech import GoogleSpeechTranscriber
from .utils import setup_logging


def _read_document(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise ConfigurationError(f"Could not read document {path}: {e}")


def main(argv: Optional[List[str]] = None):
    """Command-line interface for an interview session."""
    args = sys.argv[1:] if argv is None else argv

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    # Mode and speech flags take precedence over the environment
    if "--graded" in args:
        config.mode = "graded"
    elif "--practice" in args:
        config.mode = "practice"

    explicit_tts = "--tts" in args
    explicit_text = "--no-tts" in args or "--text" in args
    use_tts = config.tts_provider != "none"
    if explicit_text:
        use_tts = False
    elif explicit_tts:
        use_tts = True
        if config.tts_provider == "none":
            config.tts_provider = "google"

    document_path = None
    position = None
    for arg in args:
        if arg.startswith("--minutes="):
            try:
                config.duration_minutes = int(arg.split("=", 1)[1])
            except ValueError:
                print("❌ Invalid duration. Use --minutes=N with a whole number of minutes")
                sys.exit(1)
        elif arg.startswith("--personas="):
            config.personas_file = arg.split("=", 1)[1]
        elif arg.startswith("--document="):
            document_path = arg.split("=", 1)[1]
        elif arg.startswith("--position="):
            position = arg.split("=", 1)[1]

    log_file = setup_logging(config.log_file, config.log_level)

    try:
        interview_config = build_interview_config(
            config,
            document_context=_read_document(document_path) if document_path else None,
            scenario_description=position,
        )
        orchestrator = InterviewOrchestrator.from_config(config, use_tts=use_tts)
    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    # Show configuration
    if use_tts:
        print(f"🔊 Speech Mode: turns are synthesized with {config.tts_provider} (use --no-tts to disable)")
    else:
        print("📝 Text Mode: turns are displayed as text only (use --tts to enable speech)")
    if interview_config.is_graded:
        print("📊 Graded session: every answer is scored")
    else:
        print("🎯 Practice session: answers are not graded (use --graded to score them)")
    print(f"📝 Detailed logs: {log_file}")

    runner = ConsoleInterviewRunner(
        orchestrator,
        SessionStore(config.workdir),
        transcriber=GoogleSpeechTranscriber(language_code=config.language_code),
    )

    try:
        runner.run(interview_config)
    except KeyboardInterrupt:
        print("\n👋 Session interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
