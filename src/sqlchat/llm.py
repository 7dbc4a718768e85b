import logging
from typing import Optional

from crewai.llm import LLM

from .config import Settings

logger = logging.getLogger(__name__)


class LLMSqlGenerator:
    """
    Text generator backed by a crewai ``LLM`` (LiteLLM model strings, e.g.
    ``gemini/gemini-1.5-flash`` or ``groq/llama-3.3-70b-versatile``).
    """

    def __init__(self, llm: LLM):
        self.llm = llm

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "LLMSqlGenerator":
        cfg = cfg or Settings()
        if not cfg.API_KEY:
            logger.warning("API_KEY is not set; calls to %s will likely fail", cfg.MODEL_NAME)
        return cls(
            LLM(
                model=cfg.MODEL_NAME,
                api_key=cfg.API_KEY,
                temperature=cfg.LLM_TEMPERATURE,
            )
        )

    def generate(self, prompt: str) -> str:
        response = self.llm.call(prompt)
        if response is None:
            raise ValueError(f"{self.llm.model} returned an empty response")
        return str(response).strip()
