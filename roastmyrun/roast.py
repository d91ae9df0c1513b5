# roastmyrun/roast.py
from typing import Dict, Optional
import logging

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a sarcastic running coach who likes to playfully roast runners about their routes. "
    "Keep responses under 100 words and make them funny but not mean-spirited."
)


class RoastError(RuntimeError):
    pass


def _fmt_number(value: float) -> str:
    # 5.0 -> "5", 5.256 -> "5.26"
    value = round(float(value), 2)
    if value.is_integer():
        return str(int(value))
    return str(value)


def build_prompt(
    distance: float,
    unit: Optional[str] = "km",
    elevation: Optional[Dict[str, float]] = None,
    duration: Optional[str] = None,
) -> str:
    prompt = f"Roast my running route that is {_fmt_number(distance)} {unit or 'km'} long"

    if elevation:
        gain = _fmt_number(elevation.get("gain", 0.0))
        loss = _fmt_number(elevation.get("loss", 0.0))
        prompt += f" with {gain} meters of climbing and {loss} meters of descent"

    if duration:
        prompt += f" and took {duration} to complete"

    return prompt + "."


class RoastWriter:
    """
    Thin wrapper around the chat model: fixed system prompt, fixed sampling
    parameters, one user message per roast.
    """

    def __init__(self, model: str, temperature: float, max_tokens: int, api_key: Optional[str] = None):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        # built on first use so a missing key only fails the roast call
        if self._llm is None:
            kwargs = {}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            self._llm = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                **kwargs,
            )
        return self._llm

    async def write(self, prompt: str) -> str:
        logger.info(f"Requesting roast from {self.model}")
        message = await self.llm.ainvoke(
            [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]
        )
        text = message.content if isinstance(message.content, str) else ""
        text = text.strip()
        if not text:
            raise RoastError("model returned an empty roast")
        return text
