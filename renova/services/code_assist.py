"""Free code-assistant tools: explain a snippet, generate code from a request."""

from __future__ import annotations

from google import genai

from renova.services.generation import PromptError, load_prompt
from renova.utils.gemini import Err, Ok, generate_text


async def explain_code(code: str, *, client: genai.Client | None = None) -> Ok[str] | Err:
    if not code.strip():
        raise PromptError("Paste some code to explain.")
    prompt = load_prompt("explain_code.txt").format(code=code)
    return await generate_text(prompt, client=client)


async def generate_code(request: str, *, client: genai.Client | None = None) -> Ok[str] | Err:
    """Returns the model's answer, normally a single fenced code block."""
    if not request.strip():
        raise PromptError("Describe the code you want.")
    prompt = load_prompt("generate_code.txt").format(prompt=request.strip())
    result = await generate_text(prompt, client=client)
    if isinstance(result, Ok) and not result.value.strip():
        return Err("The AI returned an empty answer.", "api")
    return result
