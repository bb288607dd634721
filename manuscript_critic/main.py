"""
Manuscript Critic - Main Entry Point

    python -m manuscript_critic.main manuscript.txt --genre fantasy
    python -m manuscript_critic.main --serve --port 8001
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .config import configure_logging, create_default_config_from_env
from .core.errors import CritiqueError
from .critic import create_critic
from .models import AnalysisRequest, AnalysisScope, FeedbackCategory, ManuscriptMetadata
from .services import InMemoryAnalysisStore

# Load environment variables
load_dotenv()

logger = logging.getLogger("manuscript_critic.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Structured manuscript critique")
    parser.add_argument("file", nargs="?", help="Manuscript text file to analyze")
    parser.add_argument("--book-id", default="local", help="Book identifier recorded on the analysis")
    parser.add_argument("--user-id", default="local", help="Owner recorded on the analysis")
    parser.add_argument("--scope", choices=[scope.value for scope in AnalysisScope], default=AnalysisScope.FULL_BOOK.value)
    parser.add_argument("--chapter-id")
    parser.add_argument("--selection", nargs=2, type=int, metavar=("START", "END"))
    parser.add_argument("--focus", default="", help="Comma-separated categories, e.g. pacing,dialogue")
    parser.add_argument("--title")
    parser.add_argument("--genre")
    parser.add_argument("--compare-to-genre", action="store_true")
    parser.add_argument("--similar-works", action="store_true")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API instead")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8001)
    parser.add_argument("--verbose", action="store_true")
    return parser


def parse_focus(value: str) -> List[FeedbackCategory]:
    return [FeedbackCategory(item.strip().lower()) for item in value.split(",") if item.strip()]


async def analyze_file(args: argparse.Namespace) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    critic = create_critic(create_default_config_from_env(), store=InMemoryAnalysisStore())
    if critic.is_demo:
        logger.warning("[analyze_file] No provider API key configured, running in demo mode")

    request = AnalysisRequest(
        user_id=args.user_id,
        book_id=args.book_id,
        scope=AnalysisScope(args.scope),
        chapter_id=args.chapter_id,
        selection_start=args.selection[0] if args.selection else None,
        selection_end=args.selection[1] if args.selection else None,
        focus_areas=parse_focus(args.focus),
        genre=args.genre,
        compare_to_genre=args.compare_to_genre,
        find_similar_works=args.similar_works,
    )
    metadata = ManuscriptMetadata(title=args.title, genre=args.genre)

    try:
        record = await critic.run_analysis(request, text, metadata=metadata)
    except CritiqueError as e:
        logger.error(f"[analyze_file] {type(e).__name__}: {e}")
        return 1

    print(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def serve(host: str, port: int) -> None:
    import uvicorn

    from .api import create_app

    app = create_app(create_critic())
    uvicorn.run(app, host=host, port=port)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.serve:
        serve(args.host, args.port)
        return 0
    if not args.file:
        build_parser().error("a manuscript file is required unless --serve is given")
    return asyncio.run(analyze_file(args))


if __name__ == "__main__":
    sys.exit(main())
