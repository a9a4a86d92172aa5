"""
Search Agent - Command Line Entry Point

Streams the agent's progress for one query and prints the cited answer.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from search_agent import SearchOrchestrator  # noqa: E402
from search_agent.errors import SearchAgentError  # noqa: E402
from search_agent.processing import AnswerCollector, ResultFormatter  # noqa: E402
from search_agent.settings import get_settings  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Conversational web search agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli/main.py "how does vue fetch remote data"
  python cli/main.py --mode tools "latest python release"
        """,
    )
    parser.add_argument("query", help="Question to search the web for")
    parser.add_argument(
        "--mode",
        choices=["pipeline", "tools"],
        default=None,
        help="Agent variant (defaults to AGENT_MODE)",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help="Give up after this many search rounds (pipeline only)",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = get_settings()
    if args.max_rounds is not None:
        settings = settings.model_copy(update={"max_rounds": args.max_rounds})

    orchestrator = SearchOrchestrator(settings)
    formatter = ResultFormatter()
    collector = AnswerCollector(args.query)

    print("🚀 Search Agent")
    print("=" * 50)
    print(f"📋 Query: {args.query}")
    print("=" * 50)

    try:
        async with orchestrator.run(args.query, args.mode) as run:
            async for event in run:
                collector.add(event)
                if event["type"] == "searching":
                    print(f"🔍 Searching: {event['query']}")
                elif event["type"] == "reading":
                    print(f"📖 Reading: {event['url']}")
    except SearchAgentError as e:
        print(f"❌ Error during search: {e}", file=sys.stderr)
        return 1

    print("\n✨ Answer")
    print("=" * 60)
    print(formatter.format_answer(collector.result(run.outcome)))
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
