"""
Interactive text-mode interview session.

This is the reference caller of the orchestrator: it owns the session state,
persists every turn and answer, grades answers in graded sessions, polls the
termination policy and writes the analytics record once at the end.
"""
import logging
import uuid
from typing import Callable, List, Optional

from .errors import TextGenerationUnavailable, GradingParseError, TranscriptionFailed
from .models import Grade, InterviewConfig, SessionAnalytics, TurnResult
from .orchestrator import InterviewOrchestrator
from .state import SessionState
from ..infrastructure.data import SessionStore
from ..infrastructure.speech import GoogleSpeechTranscriber

logger = logging.getLogger("runner")

END_COMMANDS = ("/end", "/quit", "/exit")
MAX_TURN_RETRIES = 2


class ConsoleInterviewRunner:
    """Runs one interview session in the terminal."""

    def __init__(self,
                 orchestrator: InterviewOrchestrator,
                 store: SessionStore,
                 transcriber: Optional[GoogleSpeechTranscriber] = None,
                 input_fn: Callable[[str], str] = input,
                 output_fn: Callable[[str], None] = print):
        self.orchestrator = orchestrator
        self.store = store
        self.transcriber = transcriber
        self.input = input_fn
        self.output = output_fn

    def run(self, config: InterviewConfig) -> SessionAnalytics:
        """
        Run the complete interview session.

        Returns:
            SessionAnalytics written to the session record
        """
        session_id = self.store.next_session_id()
        state = self.orchestrator.start_session(config, session_id, memory_session_id=uuid.uuid4().hex)
        self.store.create(config, state)
        grades: List[Grade] = []

        panel = ", ".join(p.label for p in config.personas)
        self.output(f"\n🎙️  Starting {config.mode.value} interview - {config.duration_minutes} minutes")
        self.output(f"👥 Panel: {panel}")
        self.output(f"💡 Type {END_COMMANDS[0]} to finish early")
        self.output("=" * 50)

        while True:
            result = self._generate_with_retry(config, state)
            if result is None:
                break

            state = self.orchestrator.apply_turn(state, result)
            record = self.store.record_turn(state, result)
            self._display_turn(result, record.audio_files[-1] if result.turn.has_audio else None)

            if not result.turn.should_wait_for_response:
                break

            answer = self._read_answer()
            if answer is None:
                logger.info(f"Session {session_id} ended by the candidate")
                break

            state = self.orchestrator.apply_response(state, answer)
            grade = self._evaluate(config, result, answer, session_id)
            self.store.record_response(state, answer, grade if config.is_graded else None)
            if config.is_graded and grade is not None:
                grades.append(grade)

            if self.orchestrator.should_end_session(state, config):
                logger.info(f"Session {session_id} reached its time or question budget")
                break

        analytics = self.orchestrator.summarize(session_id, config.mode, grades)
        self.store.complete(session_id, analytics, self.orchestrator.clock())
        self._display_results(analytics, state)
        return analytics

    def _generate_with_retry(self, config: InterviewConfig, state: SessionState) -> Optional[TurnResult]:
        # A failed call leaves the state untouched, so retrying is safe.
        for attempt in range(1, MAX_TURN_RETRIES + 2):
            try:
                return self.orchestrator.generate_turn(config, state)
            except TextGenerationUnavailable as e:
                logger.error(f"Turn generation attempt {attempt} failed: {e}")
                self.output("❌ Could not prepare the next question, trying again...")
        self.output("❌ The interviewers are unavailable right now. Please try again later.")
        return None

    def _read_answer(self) -> Optional[str]:
        """Candidate's answer as text; None when the candidate ends the session."""
        while True:
            raw = self.input("\n🧑 Your answer: ").strip()
            if raw.lower() in END_COMMANDS:
                return None
            if raw.startswith("@") and self.transcriber:
                raw = self._transcribe(raw[1:].strip())
            if raw:
                return raw
            self.output("Please type an answer, or @path/to/recording.wav to use a recording.")

    def _transcribe(self, path: str) -> str:
        try:
            with open(path, "rb") as f:
                transcription = self.transcriber.transcribe(f.read())
        except (OSError, TranscriptionFailed) as e:
            logger.error(f"Could not transcribe {path}: {e}")
            self.output("❌ Could not transcribe that recording")
            return ""
        self.output(f"💬 \"{transcription.text or '(no speech detected)'}\"")
        return transcription.text

    def _evaluate(self, config: InterviewConfig, result: TurnResult, answer: str, session_id: int) -> Optional[Grade]:
        try:
            return self.orchestrator.evaluate(
                config, result.turn.text, answer, result.persona, result.category, session_id
            )
        except (TextGenerationUnavailable, GradingParseError) as e:
            logger.error(f"Grading failed for question {result.question_number}: {e}")
            self.output("⚠️  This answer could not be graded and is left out of the report")
            return None

    def _display_turn(self, result: TurnResult, audio_path: Optional[str]):
        speaker = result.persona.label
        if result.lead_in:
            self.output(f"\n🤖 {speaker}: {result.lead_in.text}")
            self.output(f"   {result.turn.text}")
        else:
            self.output(f"\n🤖 {speaker}: {result.turn.text}")
        if audio_path:
            self.output(f"🔊 Audio: {audio_path}")

    def _display_results(self, analytics: SessionAnalytics, state: SessionState):
        """Display the session report."""
        self.output("\n" + "=" * 50)
        self.output("🎯 INTERVIEW COMPLETE")
        self.output("=" * 50)
        self.output(f"❓ Questions asked: {state.question_count}")
        self.output(f"💬 Responses: {analytics.response_count}")
        self.output(f"📊 Overall: {analytics.overall_grade}  "
                    f"Confidence: {analytics.confidence_score}  "
                    f"Clarity: {analytics.clarity_score}  "
                    f"Relevance: {analytics.relevance_score}")
        self.output(f"📝 {analytics.overall_performance}")
        for strength in analytics.key_strengths:
            self.output(f"  ✅ {strength}")
        for improvement in analytics.key_improvements:
            self.output(f"  🔧 {improvement}")
        self.output(f"📁 Session saved to: {self.store.sessions_dir}")
        self.output(f"📈 Session metrics: {self.orchestrator.get_metrics()}")
