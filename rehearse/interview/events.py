"""
Event-driven architecture for the interview system.
"""
import logging
from abc import ABC
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of interview events."""
    SESSION_STARTED = "session_started"
    TURN_GENERATED = "turn_generated"
    FOLLOW_UP_DECIDED = "follow_up_decided"
    DECORATIVE_TURN_DROPPED = "decorative_turn_dropped"
    SYNTHESIS_FAILED = "synthesis_failed"
    RESPONSE_EVALUATED = "response_evaluated"
    SESSION_SUMMARIZED = "session_summarized"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class InterviewEvent(ABC):
    """Base class for all interview events."""
    event_type: EventType
    session_id: Optional[int]
    timestamp: float
    data: Dict[str, Any]


@dataclass
class SessionStartedEvent(InterviewEvent):
    """Event fired when a session state is created."""
    def __init__(self, session_id: int, timestamp: float, interview_id: int,
                 persona_count: int, duration_minutes: int, mode: str):
        super().__init__(
            event_type=EventType.SESSION_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "interview_id": interview_id,
                "persona_count": persona_count,
                "duration_minutes": duration_minutes,
                "mode": mode,
            }
        )


@dataclass
class TurnGeneratedEvent(InterviewEvent):
    """Event fired when generate_turn produced a turn."""
    def __init__(self, session_id: int, timestamp: float, turn_type: str, stage: str,
                 persona_name: str, question_number: int, has_lead_in: bool, has_audio: bool):
        super().__init__(
            event_type=EventType.TURN_GENERATED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "turn_type": turn_type,
                "stage": stage,
                "persona_name": persona_name,
                "question_number": question_number,
                "has_lead_in": has_lead_in,
                "has_audio": has_audio,
            }
        )


@dataclass
class FollowUpDecidedEvent(InterviewEvent):
    """Event fired after the follow-up heuristic ran on an answer."""
    def __init__(self, session_id: int, timestamp: float, should_follow_up: bool,
                 reason: Optional[str], persona_name: str):
        super().__init__(
            event_type=EventType.FOLLOW_UP_DECIDED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "should_follow_up": should_follow_up,
                "reason": reason,
                "persona_name": persona_name,
            }
        )


@dataclass
class DecorativeTurnDroppedEvent(InterviewEvent):
    """Event fired when an acknowledgment could not be generated."""
    def __init__(self, session_id: int, timestamp: float, turn_type: str, error_message: str):
        super().__init__(
            event_type=EventType.DECORATIVE_TURN_DROPPED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "turn_type": turn_type,
                "error_message": error_message,
            }
        )


@dataclass
class SynthesisFailedEvent(InterviewEvent):
    """Event fired when audio could not be produced for a turn."""
    def __init__(self, session_id: int, timestamp: float, voice_id: Optional[str], error_message: str):
        super().__init__(
            event_type=EventType.SYNTHESIS_FAILED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "voice_id": voice_id,
                "error_message": error_message,
            }
        )


@dataclass
class ResponseEvaluatedEvent(InterviewEvent):
    """Event fired when a candidate response was graded."""
    def __init__(self, session_id: Optional[int], timestamp: float, overall: int, graded: bool):
        super().__init__(
            event_type=EventType.RESPONSE_EVALUATED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "overall": overall,
                "graded": graded,
            }
        )


@dataclass
class SessionSummarizedEvent(InterviewEvent):
    """Event fired when session analytics were computed."""
    def __init__(self, session_id: Optional[int], timestamp: float, overall_grade: int, response_count: int):
        super().__init__(
            event_type=EventType.SESSION_SUMMARIZED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "overall_grade": overall_grade,
                "response_count": response_count,
            }
        )


@dataclass
class ErrorOccurredEvent(InterviewEvent):
    """Event fired when an error occurs."""
    def __init__(self, session_id: Optional[int], timestamp: float, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[InterviewEvent], None]


class InterviewEventBus:
    """Event bus for interview system communication."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: InterviewEvent) -> None:
        """
        Emit an event to all subscribers.

        A failing handler is logged and never stops the others.
        """
        logger.debug(f"Emitting event: {event.event_type} for session {event.session_id}")

        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def clear_handlers(self) -> None:
        """Clear all event handlers."""
        self._handlers.clear()
        self._global_handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.logger.setLevel(log_level)

    def handle_event(self, event: InterviewEvent) -> None:
        self.logger.info(f"Event: {event.event_type.value} | Session: {event.session_id} | Data: {event.data}")


class InterviewMetrics:
    """Collects metrics from interview events."""

    COUNTERS = {
        EventType.SESSION_STARTED: "sessions_started",
        EventType.TURN_GENERATED: "turns_generated",
        EventType.DECORATIVE_TURN_DROPPED: "decorative_turns_dropped",
        EventType.SYNTHESIS_FAILED: "synthesis_failures",
        EventType.RESPONSE_EVALUATED: "responses_evaluated",
        EventType.SESSION_SUMMARIZED: "sessions_summarized",
        EventType.ERROR_OCCURRED: "errors_occurred",
    }

    def __init__(self):
        self.reset()

    def handle_event(self, event: InterviewEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == EventType.FOLLOW_UP_DECIDED:
            if event.data.get("should_follow_up"):
                self.follow_ups += 1
            return
        name = self.COUNTERS.get(event.event_type)
        if name:
            self._counts[name] += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        metrics = dict(self._counts)
        metrics["follow_ups"] = self.follow_ups
        return metrics

    def reset(self) -> None:
        """Reset all metrics to zero."""
        self._counts = {name: 0 for name in self.COUNTERS.values()}
        self.follow_ups = 0
