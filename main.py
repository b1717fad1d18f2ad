"""Command-line entry point.

    python main.py analyze --type text --source contract.txt --no-ai
    python main.py search "Can I cancel anytime?" --mode ask
    python main.py query "How do I cancel?" --document-id doc_123
    python main.py health
"""
from __future__ import annotations
import argparse
import asyncio
import base64
import json
import sys
from pathlib import Path
from clausescope.utils.config import AppConfig
from clausescope.utils.health import run_health_check
from clausescope.utils.logger import configure_logging
from clausescope.service import ClauseService, build_services


def _read_source(kind: str, source: str) -> str:
    path = Path(source)
    if kind == "pdf":
        return base64.b64encode(path.read_bytes()).decode("ascii")
    if kind == "text" and path.is_file():
        return path.read_text(encoding="utf-8")
    return source


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clausescope", description="Legal clause risk analysis and search")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("analyze", help="Segment and classify a document")
    p.add_argument("--type", choices=["text", "url", "pdf"], default="text")
    p.add_argument("--source", required=True, help="Raw text, a text/PDF file path, or a URL")
    p.add_argument("--no-ai", action="store_true", help="Pattern-only analysis")
    p.add_argument("--index", action="store_true", help="Add analyzed clauses to the clause index")
    p.add_argument("--overview", action="store_true", help="Include a whole-document overview")

    p = sub.add_parser("search", help="Ask the clause index")
    p.add_argument("query")
    p.add_argument("--mode", choices=["simple", "enhanced", "explain", "ask"], default="simple")
    p.add_argument("--limit", type=int, default=5)

    p = sub.add_parser("query", help="Route a legal question onto a known intent")
    p.add_argument("query")
    p.add_argument("--document-id")
    p.add_argument("--function", help="Call this intent directly (specific mode)")
    p.add_argument("--args", default="{}", help="JSON arguments for --function")

    sub.add_parser("health", help="Run the lightweight health check")
    return parser


async def run(args: argparse.Namespace, config: AppConfig) -> dict:
    service = ClauseService(build_services(config))
    try:
        if args.command == "analyze":
            return await service.analyze({
                "source": _read_source(args.type, args.source),
                "type": args.type,
                "useAI": not args.no_ai,
                "index": args.index,
                "overview": args.overview,
            })
        if args.command == "search":
            return await service.search({"query": args.query, "mode": args.mode, "limit": args.limit})
        payload = {"query": args.query, "documentId": args.document_id, "mode": "auto"}
        if args.function:
            payload.update(mode="specific", function=args.function, args=json.loads(args.args))
        return await service.query(payload)
    finally:
        await service.aclose()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    if args.command == "health":
        result = run_health_check(config)
        print(json.dumps(result, indent=2))
        return 0 if result["ok"] else 1
    result = asyncio.run(run(args, config))
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
