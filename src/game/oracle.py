"""
Word-validity oracles.

An oracle answers one question for a fully assembled word: is it a real
word? ``check`` returns True or False, and raises OracleUnavailable when
no answer could be obtained. The feasibility corpus and the oracle are
independent; a word listed as possible may still be rejected here.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set
from urllib.parse import quote

import litellm
import requests
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..engine.data import load_words
from ..engine.errors import OracleUnavailable
from .models import Message, OracleConfig
from .prompts import build_validity_prompt, get_system_prompt

logger = logging.getLogger(__name__)


class WordOracle(Protocol):
    def check(self, word: str) -> bool: ...


class WordListOracle(BaseModel):
    """Accepts exactly the words of an in-memory list."""

    words: Set[str] = Field(default_factory=set)

    @field_validator("words")
    @classmethod
    def _lowercase(cls, words: Set[str]) -> Set[str]:
        return {w.lower() for w in words}

    @classmethod
    def from_iterable(cls, words: Iterable[str]) -> "WordListOracle":
        return cls(words=set(words))

    def check(self, word: str) -> bool:
        return word.lower() in self.words


class DictionaryApiOracle(BaseModel):
    """
    Looks words up in a free online dictionary over HTTP.

    A 2xx response means the word exists and a 4xx response means it does
    not. Rate limiting (429), server errors, timeouts and connection
    failures raise OracleUnavailable.
    """

    api_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    timeout: float = 10.0

    def url_for(self, word: str) -> str:
        return f"{self.api_url.rstrip('/')}/{quote(word.lower())}"

    def check(self, word: str) -> bool:
        url = self.url_for(word)
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Dictionary lookup for %r failed: %s", word, e)
            raise OracleUnavailable(f"Dictionary lookup failed: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning("Dictionary service returned %s for %r", response.status_code, word)
            raise OracleUnavailable(f"Dictionary service error ({response.status_code})")

        logger.debug("Dictionary lookup %r -> %s", word, response.status_code)
        return response.ok


class LLMOracle(BaseModel):
    """
    Asks a chat model, via LiteLLM, whether a word is valid.

    Any provider error counts as the oracle being unavailable. A reply
    without a recognisable YES counts as a rejection.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra='allow')

    model: str
    temperature: float = 0.0
    max_tokens: Optional[int] = None

    @property
    def additional_params(self) -> Dict[str, Any]:
        """Get additional parameters passed during initialization."""
        # Pydantic stores extra fields in __pydantic_extra__
        return self.__pydantic_extra__ if hasattr(self, '__pydantic_extra__') and self.__pydantic_extra__ else {}

    def build_messages(self, word: str) -> List[Dict[str, str]]:
        """Build the system + user conversation for one word."""
        return [
            Message(role="system", content=get_system_prompt()).model_dump(),
            Message(role="user", content=build_validity_prompt(word)).model_dump(),
        ]

    def completion(self, word: str, **kwargs: Any) -> Any:
        """
        Request a verdict for a word.

        Args:
            word: The candidate word
            **kwargs: Additional arguments to pass to litellm.completion()

        Returns:
            The completion response from LiteLLM
        """
        params = {
            "model": self.model,
            "messages": self.build_messages(word),
            "temperature": self.temperature,
            **self.additional_params,
            **kwargs
        }

        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens

        return litellm.completion(**params)

    @staticmethod
    def parse_verdict(response: str) -> bool:
        """
        Parse a model reply into a verdict.

        Expected format:
        <answer>YES|NO</answer>

        A bare leading YES or NO is also accepted. Anything else is
        treated as NO.
        """
        match = re.search(r'<answer>\s*(YES|NO)\s*</answer>', response, re.IGNORECASE)
        if match:
            return match.group(1).upper() == "YES"

        bare = re.match(r'^\s*(YES|NO)\b', response, re.IGNORECASE)
        if bare:
            return bare.group(1).upper() == "YES"

        return False

    def check(self, word: str) -> bool:
        try:
            response = self.completion(word)
            content = response.choices[0].message.content or ""
        except Exception as e:
            logger.warning("LLM oracle call for %r failed: %s", word, e)
            raise OracleUnavailable(f"LLM error: {str(e)}") from e

        verdict = self.parse_verdict(content)
        logger.debug("LLM oracle %r -> %s", word, "YES" if verdict else "NO")
        return verdict


def build_oracle(config: OracleConfig) -> WordOracle:
    """
    Create the oracle selected by the configuration.

    Args:
        config: Oracle configuration

    Returns:
        An object with a ``check(word) -> bool`` method
    """
    if config.kind == "word_list":
        return WordListOracle.from_iterable(load_words(config.words_file))

    if config.kind == "llm":
        llm_kwargs = {}
        if hasattr(config, '__pydantic_extra__') and config.__pydantic_extra__:
            llm_kwargs.update(config.__pydantic_extra__)
        return LLMOracle(
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            **llm_kwargs
        )

    return DictionaryApiOracle(api_url=config.api_url, timeout=config.timeout)
