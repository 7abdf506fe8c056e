import asyncio
import sys

from scribe_llm.client import CompletionClient
from scribe_llm.config import Settings
from scribe_llm.errors import ScribeLLMError
from scribe_llm.types import PromptContext, RequestOptions


async def main() -> None:
    # Reads SCRIBE_AI_* / SCRIBE_ALIVE_* from the environment or a local .env
    async with CompletionClient(Settings.from_env()) as client:
        probe = await client.test_connection()
        print("Probe:", probe.model_dump())
        if not probe.success:
            return

        options = RequestOptions(mode="auto", context=PromptContext(title="Smoke Test", author="Nobody"))

        def on_chunk(content: str, _total: str, thinking: str, _thinking_total: str) -> None:
            sys.stdout.write(thinking or content)
            sys.stdout.flush()

        try:
            result = await client.send_message_stream(
                [{"role": "user", "content": "My second act drags. Any quick fixes?"}],
                on_chunk,
                options,
            )
            print("\n\nChars received:", len(result.content))
            print("Alive:", await client.send_alive_request("Reply with one word: ready?"))
        except ScribeLLMError as e:
            print("Request failed:", type(e).__name__, e)


if __name__ == "__main__":
    asyncio.run(main())
