"""
Fehler-Taxonomie der Pipeline

Fetch-Fehler werden innerhalb der Fetcher abgefangen und in "kein Ergebnis"
umgewandelt. Summarization-Fehler landen als strukturierter Fehler im
SummaryResult.
"""


class PipelineError(Exception):
    """Basisklasse aller Pipeline-Fehler"""


class InvalidInput(PipelineError):
    """Ungültige URL - wird vor jedem Netzwerk-Request abgelehnt"""


class FetchBlocked(PipelineError):
    """Anti-Bot Status-Code oder Challenge-Seite ohne Ausweg"""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class FetchTimeout(PipelineError):
    """Timeout beim Fetch oder Rendering"""


class ContentTooShort(PipelineError):
    """Extraktion technisch erfolgreich, aber zu wenig Text"""

    def __init__(self, length: int, minimum: int):
        super().__init__(f"Extracted text too short ({length} chars, need more than {minimum})")
        self.length = length
        self.minimum = minimum


class UpstreamRateLimited(PipelineError):
    """Rate-Limit des Summarization-Service nach Ausschöpfen aller Retries"""


class UpstreamFailure(PipelineError):
    """Nicht wiederholbarer Fehler des Summarization-Service"""
