"""CLI script for talking to the shopping assistant.

Useful for trying out intents and recommendations from a terminal. Sends one
message (or starts an interactive session) against a catalog and a history
directory on disk.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.personalization.catalog import SAMPLE_PRODUCTS, StaticCatalog, load_catalog_csv
from src.personalization.engine import EngineFacade, SearchPerformed
from src.personalization.exceptions import ShopSenseException
from src.personalization.storage import JSONFileStore

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def build_engine(catalog_path: str, history_dir: str) -> EngineFacade:
    products = load_catalog_csv(catalog_path) if catalog_path else SAMPLE_PRODUCTS
    return EngineFacade(
        catalog=StaticCatalog(products),
        store=JSONFileStore(history_dir),
    )


async def run(args: argparse.Namespace) -> int:
    """Execute the requested command.

    Returns:
        Process exit code.
    """
    engine = build_engine(args.catalog, args.history_dir)
    await engine.load()

    for query in args.search or []:
        engine.track(SearchPerformed(query))

    if args.clear:
        await engine.clear()
        print("Conversation cleared.")
        return 0

    if args.recommend:
        print(f"\nTop {args.top_n} products:")
        for product in engine.recommend(args.top_n):
            print(f"  {product.id}: {product.name} (${product.price:.2f})")
        if args.explain:
            print("\nScore breakdown:")
            print(engine.explain().head(args.top_n).to_string(index=False))
        return 0

    if args.message:
        print(await engine.send(args.message))
        return 0

    # Interactive session
    print("Type a message, or an empty line to quit.")
    while True:
        try:
            text = input("> ")
        except EOFError:
            break
        if not text.strip():
            break
        print(await engine.send(text))
    return 0


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Chat with the ShopSense assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/assistant_cli.py "Show me electronics under $200"
  python scripts/assistant_cli.py --recommend --top-n 3 --explain
  python scripts/assistant_cli.py --search laptop --recommend
        """
    )
    parser.add_argument("message", nargs="?", help="Message to send (omit for interactive mode)")
    parser.add_argument("--catalog", type=str, default=None, help="Catalog CSV (default: demo catalog)")
    parser.add_argument(
        "--history-dir",
        type=str,
        default="data/history",
        help="Directory for conversation history (default: data/history)",
    )
    parser.add_argument("--recommend", action="store_true", help="Print recommendations instead of chatting")
    parser.add_argument("--top-n", type=int, default=5, help="Number of recommendations (default: 5)")
    parser.add_argument("--explain", action="store_true", help="Show score breakdown for recommendations")
    parser.add_argument("--search", action="append", help="Record a search before running (repeatable)")
    parser.add_argument("--clear", action="store_true", help="Clear the conversation history")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        sys.exit(asyncio.run(run(args)))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ShopSenseException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
