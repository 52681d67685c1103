"""Terminal chat REPL against a running searchchat server."""

import asyncio
import logging
import os
import sys
from typing import Optional, TextIO

from .api import ChatClient
from .state import ASSISTANT, ChatMessage, ChatSession


class TerminalRenderer:
    """Print assistant deltas as they arrive; reprint when content is replaced."""

    def __init__(self, out: TextIO = sys.stdout):
        self.out = out
        self._current: Optional[ChatMessage] = None
        self._printed = 0

    def __call__(self, message: ChatMessage) -> None:
        if message.role != ASSISTANT:
            return
        if message is not self._current:
            if self._current is None:
                self.out.write("AI: ")
            elif self._printed:
                # Partial content was replaced, start a fresh line
                self.out.write("\nAI: ")
            self._current = message
            self._printed = 0
        self.out.write(message.content[self._printed:])
        self._printed = len(message.content)
        self.out.flush()

    def end_turn(self) -> None:
        self.out.write("\n")
        self.out.flush()
        self._current = None
        self._printed = 0


async def run_repl(base_url: str, stream: bool = True) -> None:
    renderer = TerminalRenderer()
    session = ChatSession(on_update=renderer)
    async with ChatClient(base_url, session=session) as client:
        while True:
            try:
                line = await asyncio.to_thread(input, "あなた: ")
            except EOFError:
                break
            if line.strip() in ("/quit", "/exit"):
                break
            if not line.strip():
                continue
            if stream:
                await client.send_streaming(line)
            else:
                await client.send(line)
            renderer.end_turn()


def main():
    import argparse

    parser = argparse.ArgumentParser(description="searchchat terminal client")
    parser.add_argument("--url", default=os.getenv("SEARCHCHAT_URL", "http://localhost:8000"))
    parser.add_argument("--no-stream", action="store_true", help="Wait for the full response")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s - %(message)s",
    )

    try:
        asyncio.run(run_repl(args.url, stream=not args.no_stream))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
